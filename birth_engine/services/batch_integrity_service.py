#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
批量验证/修复服务

- 每条记录独立处理（无跨记录状态），在线程池中并行
- 单条记录出错只记录在该记录的详情中，不影响其他记录
- 支持协作式取消：取消后尚未开始的记录标记为 not_processed，已完成的结果保留
"""

import asyncio
import logging
import threading
import time
from concurrent.futures import Executor
from typing import Any, Callable, Optional, Sequence

from birth_engine.models.batch_report import BatchOperation, BatchRecordDetail, BatchReport, RecordStatus
from birth_engine.services.birth_data_fixer import BirthDataFixer
from birth_engine.services.birth_data_validator import BirthDataValidator, RecordLike
from birth_engine.utils.async_executor import get_executor, run_in_executor

logger = logging.getLogger(__name__)


def _identity(record: Any) -> dict:
    """从记录中尽量取出 id / 昵称（记录可能无法解析）"""
    if hasattr(record, 'record_id'):
        return {'record_id': record.record_id, 'nickname': record.nickname}
    if isinstance(record, dict):
        record_id = record.get('id', record.get('record_id'))
        return {
            'record_id': str(record_id) if record_id is not None else None,
            'nickname': record.get('nickname'),
        }
    return {'record_id': None, 'nickname': None}


class BatchIntegrityService:
    """批量出生数据完整性服务"""

    def __init__(self,
                 validator: Optional[BirthDataValidator] = None,
                 fixer: Optional[BirthDataFixer] = None,
                 executor: Optional[Executor] = None):
        """
        Args:
            validator: 验证器（默认新建）
            fixer: 修复器（默认基于同一验证器）
            executor: 线程池（默认使用全局线程池）
        """
        self.validator = validator or BirthDataValidator()
        self.fixer = fixer or BirthDataFixer(self.validator)
        self._executor = executor

    @property
    def executor(self) -> Executor:
        return self._executor or get_executor()

    # ==================== 同步批处理 ====================

    def batch_validate(self, records: Sequence[RecordLike],
                       cancel_event: Optional[threading.Event] = None) -> BatchReport:
        """
        批量验证

        Args:
            records: 记录列表（BirthRecord 或档案 dict）
            cancel_event: 取消信号（可选）

        Returns:
            BatchReport，details 与输入顺序一致
        """
        return self._run(BatchOperation.VALIDATE, self.validate_one, records, cancel_event)

    def batch_fix(self, records: Sequence[RecordLike],
                  cancel_event: Optional[threading.Event] = None) -> BatchReport:
        """
        批量修复（修复结果放在 details[i].fixed_record，由调用方持久化）
        """
        return self._run(BatchOperation.FIX, self.fix_one, records, cancel_event)

    def _run(self, operation: BatchOperation, worker: Callable[[int, Any], BatchRecordDetail],
             records: Sequence[RecordLike], cancel_event: Optional[threading.Event]) -> BatchReport:
        start_time = time.time()
        records = list(records)
        logger.info(f"开始批量{operation.value}: {len(records)} 条记录")

        def task(index: int, record: Any) -> BatchRecordDetail:
            if cancel_event is not None and cancel_event.is_set():
                return BatchRecordDetail(index=index, status=RecordStatus.NOT_PROCESSED, **_identity(record))
            return worker(index, record)

        futures = [self.executor.submit(task, index, record) for index, record in enumerate(records)]
        details = [future.result() for future in futures]

        cancelled = cancel_event is not None and cancel_event.is_set()
        report = BatchReport.from_details(operation, details, cancelled=cancelled)
        self._log_finished(report, start_time)
        return report

    # ==================== 异步批处理 ====================

    async def batch_validate_async(self, records: Sequence[RecordLike],
                                   cancel_event: Optional[threading.Event] = None) -> BatchReport:
        """异步批量验证（供异步调用方使用）"""
        return await self._run_async(BatchOperation.VALIDATE, self.validate_one, records, cancel_event)

    async def batch_fix_async(self, records: Sequence[RecordLike],
                              cancel_event: Optional[threading.Event] = None) -> BatchReport:
        """异步批量修复"""
        return await self._run_async(BatchOperation.FIX, self.fix_one, records, cancel_event)

    async def _run_async(self, operation: BatchOperation, worker: Callable[[int, Any], BatchRecordDetail],
                         records: Sequence[RecordLike], cancel_event: Optional[threading.Event]) -> BatchReport:
        start_time = time.time()
        records = list(records)

        async def task(index: int, record: Any) -> BatchRecordDetail:
            if cancel_event is not None and cancel_event.is_set():
                return BatchRecordDetail(index=index, status=RecordStatus.NOT_PROCESSED, **_identity(record))
            return await run_in_executor(worker, index, record, executor=self._executor)

        details = await asyncio.gather(*(task(index, record) for index, record in enumerate(records)))

        cancelled = cancel_event is not None and cancel_event.is_set()
        report = BatchReport.from_details(operation, list(details), cancelled=cancelled)
        self._log_finished(report, start_time)
        return report

    # ==================== 单条处理 ====================

    def validate_one(self, index: int, record: RecordLike) -> BatchRecordDetail:
        """验证单条记录并生成详情（异常只影响本条）"""
        identity = _identity(record)
        try:
            result = self.validator.validate(record)
        except Exception as e:
            logger.exception(f"记录 {index} 验证异常: {e}")
            return BatchRecordDetail(index=index, status=RecordStatus.FAILED, valid=False,
                                     error=str(e), **identity)

        return BatchRecordDetail(
            index=index,
            status=RecordStatus.VALID if result.valid else RecordStatus.INVALID,
            valid=result.valid,
            errors=result.errors,
            warnings=result.warnings,
            corrections=result.corrections,
            **identity
        )

    def fix_one(self, index: int, record: RecordLike) -> BatchRecordDetail:
        """修复单条记录并生成详情（单条修复要么完整应用，要么不应用）"""
        identity = _identity(record)
        try:
            outcome = self.fixer.fix(record)
        except Exception as e:
            logger.exception(f"记录 {index} 修复异常: {e}")
            return BatchRecordDetail(index=index, status=RecordStatus.FAILED, valid=False,
                                     changed=False, error=str(e), **identity)

        result = outcome.result
        return BatchRecordDetail(
            index=index,
            status=RecordStatus.FIXED if outcome.changed else RecordStatus.UNCHANGED,
            valid=result.valid,
            changed=outcome.changed,
            errors=result.errors,
            warnings=result.warnings,
            corrections=result.corrections,
            changes=outcome.changes,
            fixed_record=outcome.record if outcome.changed else None,
            **identity
        )

    @staticmethod
    def _log_finished(report: BatchReport, start_time: float):
        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            f"✓ 批量{report.operation.value}完成: 总数 {report.total}，有效 {report.valid_count}，"
            f"无效 {report.invalid_count}，已修复 {report.fixed_count}，"
            f"未处理 {report.not_processed_count}，耗时 {duration_ms:.0f}ms"
        )
