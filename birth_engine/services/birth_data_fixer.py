#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
出生数据自动修复

根据验证结果生成新的记录（不修改传入记录），由调用方决定是否持久化。
对修复结果再次修复不会产生任何修正。
"""

import logging
from typing import Any, Dict, NamedTuple, Optional

from pydantic import ValidationError

from birth_engine.exceptions import InputFormatError
from birth_engine.models.birth_record import BirthRecord
from birth_engine.models.integrity import IntegrityResult, IssueKind
from birth_engine.services.birth_data_validator import BirthDataValidator, RecordLike, coerce_record

logger = logging.getLogger(__name__)


class FixOutcome(NamedTuple):
    """修复结果"""
    record: Optional[BirthRecord]  # 无法解析为记录时为 None
    result: IntegrityResult
    changes: Dict[str, Dict[str, Any]]  # {field: {'from': old, 'to': new}}
    changed: bool


class BirthDataFixer:
    """出生数据自动修复器"""

    def __init__(self, validator: Optional[BirthDataValidator] = None):
        self.validator = validator or BirthDataValidator()

    def auto_fix(self, record: RecordLike) -> BirthRecord:
        """
        自动修复记录的派生字段

        Args:
            record: BirthRecord 或档案 dict

        Returns:
            修复后的新记录；无需修复或记录无效时返回原记录
        """
        outcome = self.fix(record)
        if outcome.record is None:
            # 无法构建记录：把验证错误交给调用方
            first = outcome.result.errors[0]
            raise InputFormatError(first.message, first.field)
        return outcome.record

    def fix(self, record: RecordLike) -> FixOutcome:
        """验证并修复，返回修复详情"""
        result = self.validator.validate(record)
        if not result.can_calculate:
            try:
                original = coerce_record(record)
            except (ValidationError, TypeError):
                original = None
            return FixOutcome(original, result, {}, False)

        original = coerce_record(record)
        # 农历字段未能重新计算时不更新计算时间，过期提示保留到下次完整计算
        fully_recomputed = not result.uncertain_fields
        is_stale = result.has_kind(IssueKind.STALE_COMPUTATION)
        if not result.corrections and not (is_stale and fully_recomputed):
            return FixOutcome(original, result, {}, False)

        updates = {field: correction.new for field, correction in result.corrections.items()}
        computed_at = self.validator.clock() if fully_recomputed else None
        fixed = original.with_derived(updates, computed_at)

        changes = {
            field: {'from': correction.old, 'to': correction.new}
            for field, correction in result.corrections.items()
        }
        if computed_at is not None:
            changes['last_computed_at'] = {
                'from': original.derived.last_computed_at,
                'to': computed_at,
            }

        logger.info(f"自动修复记录 [{original.label}]: {', '.join(changes)}")
        return FixOutcome(fixed, result, changes, True)
