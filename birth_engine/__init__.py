# -*- coding: utf-8 -*-
"""
出生数据历法引擎

真太阳时校正、时辰解析、出生数据一致性验证与自动修复
"""

from birth_engine.engine import (
    true_solar_time,
    shichen,
    normalize_shichen,
    validate,
    auto_fix,
    batch_validate,
    batch_fix,
    render_report,
)
from birth_engine.calculators.shichen import resolve_shichen
from birth_engine.models.birth_record import BirthLocation, BirthInput, DerivedFields, BirthRecord
from birth_engine.services.birth_data_validator import BirthDataValidator
from birth_engine.services.birth_data_fixer import BirthDataFixer
from birth_engine.services.batch_integrity_service import BatchIntegrityService

__version__ = "1.0.0"

__all__ = [
    'true_solar_time',
    'shichen',
    'resolve_shichen',
    'normalize_shichen',
    'validate',
    'auto_fix',
    'batch_validate',
    'batch_fix',
    'render_report',
    'BirthLocation',
    'BirthInput',
    'DerivedFields',
    'BirthRecord',
    'BirthDataValidator',
    'BirthDataFixer',
    'BatchIntegrityService',
]
