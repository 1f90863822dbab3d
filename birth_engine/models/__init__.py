# -*- coding: utf-8 -*-
"""
数据模型
"""

from birth_engine.models.birth_record import BirthLocation, BirthInput, DerivedFields, BirthRecord, PILLAR_KEYS
from birth_engine.models.integrity import (
    IssueKind,
    ValidationStage,
    IntegrityIssue,
    Correction,
    IntegrityResult,
)
from birth_engine.models.batch_report import BatchOperation, RecordStatus, BatchRecordDetail, BatchReport

__all__ = [
    'BirthLocation', 'BirthInput', 'DerivedFields', 'BirthRecord', 'PILLAR_KEYS',
    'IssueKind', 'ValidationStage', 'IntegrityIssue', 'Correction', 'IntegrityResult',
    'BatchOperation', 'RecordStatus', 'BatchRecordDetail', 'BatchReport',
]
