#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
批量验证/修复报告模型
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from pydantic import BaseModel, Field

from birth_engine.models.birth_record import BirthRecord
from birth_engine.models.integrity import Correction, IntegrityIssue, utc_now


class RecordStatus(str, Enum):
    """单条记录处理结果"""
    VALID = "valid"
    INVALID = "invalid"
    FIXED = "fixed"
    UNCHANGED = "unchanged"
    FAILED = "failed"
    NOT_PROCESSED = "not_processed"


class BatchOperation(str, Enum):
    VALIDATE = "validate"
    FIX = "fix"


class BatchRecordDetail(BaseModel):
    """单条记录的处理详情"""
    index: int
    record_id: Optional[str] = None
    nickname: Optional[str] = None
    status: RecordStatus
    valid: Optional[bool] = None
    changed: Optional[bool] = None
    errors: List[IntegrityIssue] = Field(default_factory=list)
    warnings: List[IntegrityIssue] = Field(default_factory=list)
    corrections: Dict[str, Correction] = Field(default_factory=dict)
    changes: Dict[str, Dict[str, Any]] = Field(default_factory=dict, description="字段变更 {field: {from, to}}")
    error: Optional[str] = Field(None, description="处理异常信息")
    fixed_record: Optional[BirthRecord] = Field(None, description="修复后的记录（仅批量修复）")

    @property
    def processed(self) -> bool:
        return self.status != RecordStatus.NOT_PROCESSED


class BatchReport(BaseModel):
    """批量处理报告"""
    operation: BatchOperation
    total: int = 0
    valid_count: int = 0
    invalid_count: int = 0
    fixed_count: int = 0
    unchanged_count: int = 0
    failed_count: int = 0
    not_processed_count: int = 0
    cancelled: bool = False
    error_count: int = 0
    warning_count: int = 0
    correction_count: int = 0
    details: List[BatchRecordDetail] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=utc_now)

    @classmethod
    def from_details(cls, operation: BatchOperation, details: List[BatchRecordDetail],
                     cancelled: bool = False) -> 'BatchReport':
        """由逐条详情汇总统计数据"""
        report = cls(operation=operation, total=len(details), details=details, cancelled=cancelled)
        for detail in details:
            if detail.status == RecordStatus.NOT_PROCESSED:
                report.not_processed_count += 1
                continue
            if detail.status == RecordStatus.FAILED:
                report.failed_count += 1
            if detail.valid is True:
                report.valid_count += 1
            elif detail.valid is False:
                report.invalid_count += 1
            if detail.changed is True:
                report.fixed_count += 1
            elif detail.changed is False:
                report.unchanged_count += 1
            report.error_count += len(detail.errors)
            report.warning_count += len(detail.warnings)
            report.correction_count += len(detail.corrections)
        return report

    def fixed_records(self) -> Iterator[BirthRecord]:
        """需要由调用方持久化的修复结果"""
        for detail in self.details:
            if detail.changed and detail.fixed_record is not None:
                yield detail.fixed_record
