#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
出生数据引擎对外接口

    true_solar_time / shichen / normalize_shichen
    validate / auto_fix / batch_validate / batch_fix / render_report

服务实例按需创建（单例）；需要注入农历转换协作方或配置时，直接使用 services 中的类。
"""

import threading
from typing import Optional, Sequence

from birth_engine.calculators.shichen import ShichenResult, normalize_shichen, resolve_shichen
from birth_engine.calculators.true_solar_time import true_solar_time
from birth_engine.models.batch_report import BatchReport
from birth_engine.models.birth_record import BirthRecord
from birth_engine.models.integrity import IntegrityResult
from birth_engine.services.batch_integrity_service import BatchIntegrityService
from birth_engine.services.birth_data_validator import RecordLike
from birth_engine.services.integrity_report import render_report

_service: Optional[BatchIntegrityService] = None
_service_lock = threading.Lock()


def get_service() -> BatchIntegrityService:
    """获取默认的批量服务（内含默认验证器和修复器）"""
    global _service
    if _service is None:
        with _service_lock:
            if _service is None:
                _service = BatchIntegrityService()
    return _service


def reset_service():
    """丢弃默认服务实例（配置重新加载后使用）"""
    global _service
    with _service_lock:
        _service = None


def shichen(hour: int, minute: int) -> ShichenResult:
    """时分 -> 时辰 + 刻（应传入真太阳时）"""
    return resolve_shichen(hour, minute)


def validate(record: RecordLike) -> IntegrityResult:
    return get_service().validator.validate(record)


def auto_fix(record: RecordLike) -> BirthRecord:
    return get_service().fixer.auto_fix(record)


def batch_validate(records: Sequence[RecordLike], cancel_event: Optional[threading.Event] = None) -> BatchReport:
    return get_service().batch_validate(records, cancel_event)


def batch_fix(records: Sequence[RecordLike], cancel_event: Optional[threading.Event] = None) -> BatchReport:
    return get_service().batch_fix(records, cancel_event)


__all__ = [
    'true_solar_time',
    'shichen',
    'normalize_shichen',
    'validate',
    'auto_fix',
    'batch_validate',
    'batch_fix',
    'render_report',
    'get_service',
    'reset_service',
]
