#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
出生数据完整性命令行工具

用法：
    birth-engine validate profiles.json
    birth-engine fix profiles.json --output fixed.json

输入文件为档案列表（JSON 数组，扁平或嵌套格式均可），报告输出到标准输出。
"""

import argparse
import json
import logging
import sys
from typing import Any, List, Optional

from birth_engine.engine import batch_fix, batch_validate
from birth_engine.models.batch_report import BatchOperation
from birth_engine.services.integrity_report import render_report

logger = logging.getLogger(__name__)


def _load_profiles(path: str) -> List[Any]:
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if isinstance(data, dict):
        # 单条档案
        return [data]
    if not isinstance(data, list):
        raise ValueError(f"输入文件应为 JSON 数组: {path}")
    return data


def _write_fixed_profiles(path: str, profiles: List[Any], report) -> int:
    """被修复的档案只更新派生字段，其他字段保持不变"""
    output = list(profiles)
    fixed = 0
    for detail in report.details:
        if detail.changed and detail.fixed_record is not None:
            output[detail.index] = detail.fixed_record.merge_into_profile(profiles[detail.index])
            fixed += 1
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(output, f, ensure_ascii=False, indent=2)
    return fixed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='birth-engine', description="出生数据完整性验证与修复")
    parser.add_argument("--log-level", default="INFO", help="日志级别（DEBUG/INFO/WARNING）")
    parser.add_argument("--version-label", default=None, help="报告版本号（默认取配置）")

    subparsers = parser.add_subparsers(dest="command", required=True)

    validate_parser = subparsers.add_parser(BatchOperation.VALIDATE.value, help="批量验证档案")
    validate_parser.add_argument("file", help="档案 JSON 文件")

    fix_parser = subparsers.add_parser(BatchOperation.FIX.value, help="批量修复档案的派生字段")
    fix_parser.add_argument("file", help="档案 JSON 文件")
    fix_parser.add_argument("--output", "-o", default=None, help="修复后的档案输出文件")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        profiles = _load_profiles(args.file)
    except (OSError, ValueError) as e:
        logger.error(f"读取档案失败: {e}")
        return 2

    if args.command == BatchOperation.VALIDATE.value:
        report = batch_validate(profiles)
    else:
        report = batch_fix(profiles)
        if args.output:
            fixed = _write_fixed_profiles(args.output, profiles, report)
            logger.info(f"✓ 已写入修复结果: {args.output}（修复 {fixed} 条）")

    print(render_report(report, version=args.version_label))
    return 0 if report.invalid_count == 0 else 1


if __name__ == '__main__':
    sys.exit(main())
