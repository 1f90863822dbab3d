#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
完整性验证结果模型 - 单次验证调用的临时结果，不做持久化
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

import pytz
from pydantic import BaseModel, Field


def utc_now() -> datetime:
    """当前 UTC 时间（带时区）"""
    return datetime.now(pytz.UTC)


class IssueKind(str, Enum):
    """问题类型（每种错误/警告唯一来源）"""
    INPUT_FORMAT = "input_format"
    INPUT_RANGE = "input_range"
    MISSING_FIELD = "missing_field"
    UNRECOGNIZED_SHICHEN_TOKEN = "unrecognized_shichen_token"
    DERIVED_FIELD_DRIFT = "derived_field_drift"
    STALE_COMPUTATION = "stale_computation"
    COLLABORATOR_UNAVAILABLE = "collaborator_unavailable"
    LOCATION_QUALITY = "location_quality"


class ValidationStage(str, Enum):
    """验证状态机阶段"""
    START = "start"
    FORMAT_CHECK = "format_check"
    RANGE_CHECK = "range_check"
    RECOMPUTE = "recompute"
    DIFF = "diff"
    CLASSIFY = "classify"
    EMIT = "emit"


class IntegrityIssue(BaseModel):
    """单条错误或警告"""
    kind: IssueKind = Field(..., description="问题类型")
    message: str = Field(..., description="描述")
    field: Optional[str] = Field(None, description="相关字段")
    timestamp: datetime = Field(default_factory=utc_now)


class Correction(BaseModel):
    """派生字段修正建议"""
    old: Any = Field(None, description="存储值")
    new: Any = Field(None, description="重新计算值")
    timestamp: datetime = Field(default_factory=utc_now)


class IntegrityResult(BaseModel):
    """出生数据完整性检查结果"""
    valid: bool = True
    can_calculate: bool = True
    errors: List[IntegrityIssue] = Field(default_factory=list)
    warnings: List[IntegrityIssue] = Field(default_factory=list)
    corrections: Dict[str, Correction] = Field(default_factory=dict)
    uncertain_fields: List[str] = Field(default_factory=list, description="协作方不可用时无法确认的字段")
    stage: ValidationStage = ValidationStage.START
    timestamp: datetime = Field(default_factory=utc_now)

    def add_error(self, kind: IssueKind, message: str, field: Optional[str] = None):
        self.valid = False
        self.errors.append(IntegrityIssue(kind=kind, message=message, field=field))

    def add_warning(self, kind: IssueKind, message: str, field: Optional[str] = None):
        self.warnings.append(IntegrityIssue(kind=kind, message=message, field=field))

    def add_correction(self, field: str, old_value: Any, new_value: Any):
        self.corrections[field] = Correction(old=old_value, new=new_value)

    def has_kind(self, kind: IssueKind) -> bool:
        return any(issue.kind == kind for issue in self.errors + self.warnings)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode='json')
