#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
批量完整性报告渲染 - 输出 Markdown 格式文本
"""

from datetime import datetime
from typing import Any, List, Optional

import pytz

from birth_engine.config.app_config import get_config
from birth_engine.models.batch_report import BatchOperation, BatchRecordDetail, BatchReport, RecordStatus
from birth_engine.models.integrity import IntegrityIssue

OPERATION_LABELS = {
    BatchOperation.VALIDATE: '批量验证',
    BatchOperation.FIX: '批量修复',
}


def _display_value(value: Any) -> str:
    if value is None or value == '' or value == {}:
        return '空'
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return ' '.join(str(v) for v in value.values())
    return str(value)


def _issue_lines(title: str, issues: List[IntegrityIssue]) -> List[str]:
    if not issues:
        return []
    lines = [f"- {title}:"]
    for issue in issues:
        lines.append(f"  - {issue.message} ({issue.field or '未知字段'})")
    return lines


def _detail_lines(detail: BatchRecordDetail) -> List[str]:
    lines = [f"### {detail.nickname or detail.record_id or f'记录 {detail.index + 1}'}"]

    if detail.status == RecordStatus.NOT_PROCESSED:
        lines.append("- 状态: ⏸️ 未处理（批处理已取消）")
        return lines

    if detail.valid is not None:
        lines.append(f"- 状态: {'✅ 有效' if detail.valid else '❌ 无效'}")
    if detail.changed is not None:
        lines.append(f"- 修复: {'✅ 已修复' if detail.changed else '⏭️ 未变化'}")
    if detail.error:
        lines.append(f"- 处理异常: {detail.error}")

    lines.extend(_issue_lines('错误', detail.errors))
    lines.extend(_issue_lines('警告', detail.warnings))

    if detail.changes:
        lines.append("- 变更:")
        for field, change in detail.changes.items():
            lines.append(f"  - {field}: {_display_value(change.get('from'))} → {_display_value(change.get('to'))}")
    elif detail.corrections:
        lines.append("- 修正:")
        for field, correction in detail.corrections.items():
            lines.append(f"  - {field}: {_display_value(correction.old)} → {_display_value(correction.new)}")
    return lines


def render_report(report: BatchReport, version: Optional[str] = None, tz: Optional[str] = None) -> str:
    """
    渲染批量处理报告

    Args:
        report: 批量处理报告
        version: 报告版本（默认取配置）
        tz: 生成时间显示时区（默认取配置，如 Asia/Shanghai）

    Returns:
        Markdown 文本：标题 -> 统计信息 -> 错误列表 -> 详细结果
    """
    config = get_config()
    timezone = pytz.timezone(tz or config.report_timezone)
    generated_at = report.generated_at.astimezone(timezone)

    lines = [
        "# 出生数据完整性报告",
        f"生成时间: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}",
        f"版本: {version or config.report_version}",
        f"操作: {OPERATION_LABELS[report.operation]}",
        "",
        "## 统计信息",
        f"- 总配置数: {report.total}",
    ]
    if report.operation == BatchOperation.VALIDATE:
        lines.append(f"- 有效配置: {report.valid_count}")
        lines.append(f"- 无效配置: {report.invalid_count}")
    else:
        lines.append(f"- 已修复: {report.fixed_count}")
        lines.append(f"- 未变化: {report.unchanged_count}")
    if report.failed_count:
        lines.append(f"- 处理失败: {report.failed_count}")
    if report.cancelled:
        lines.append(f"- 未处理: {report.not_processed_count}（批处理已取消）")
    lines.append(f"- 错误数: {report.error_count}")
    lines.append(f"- 警告数: {report.warning_count}")
    lines.append(f"- 修正数: {report.correction_count}")
    lines.append("")

    failed = [detail for detail in report.details if detail.processed and detail.valid is False]
    if failed:
        lines.append("## 错误列表")
        for detail in failed:
            label = detail.nickname or detail.record_id or f'记录 {detail.index + 1}'
            messages = [issue.message for issue in detail.errors] or [detail.error or '未知错误']
            lines.append(f"- {label}: {'；'.join(messages)}")
        lines.append("")

    if report.details:
        lines.append("## 详细结果")
        for detail in report.details:
            lines.extend(_detail_lines(detail))
            lines.append("")

    return '\n'.join(lines)
