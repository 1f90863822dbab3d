# -*- coding: utf-8 -*-
"""
出生数据完整性服务
"""

from birth_engine.services.birth_data_validator import (
    BirthDataValidator,
    BirthInputChanges,
    detect_birth_input_changes,
)
from birth_engine.services.birth_data_fixer import BirthDataFixer, FixOutcome
from birth_engine.services.batch_integrity_service import BatchIntegrityService
from birth_engine.services.integrity_report import render_report

__all__ = [
    'BirthDataValidator',
    'BirthInputChanges',
    'detect_birth_input_changes',
    'BirthDataFixer',
    'FixOutcome',
    'BatchIntegrityService',
    'render_report',
]
