#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
统一应用配置管理
所有配置统一从这里读取，避免配置分散
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

import pytz
from dotenv import load_dotenv

from birth_engine.config.env_config import get_env_config

logger = logging.getLogger(__name__)

DEFAULT_STALE_AFTER_DAYS = 30
DEFAULT_REPORT_TIMEZONE = 'Asia/Shanghai'
REPORT_VERSION = '1.0.0'


def _default_batch_workers() -> int:
    """
    根据CPU核心数确定批处理线程数：
    - 本地开发：CPU核心数 * 2，最大16
    - 生产环境：CPU核心数 * 2，最大100
    """
    cpu_count = os.cpu_count() or 4
    if get_env_config().is_local_dev:
        return min(cpu_count * 2, 16)
    return min(cpu_count * 2, 100)


@dataclass
class EngineConfig:
    """出生数据引擎配置"""
    stale_after_days: int = DEFAULT_STALE_AFTER_DAYS
    batch_max_workers: int = 4
    report_timezone: str = DEFAULT_REPORT_TIMEZONE
    report_version: str = REPORT_VERSION

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> 'EngineConfig':
        """从环境变量（及 .env 文件）创建配置"""
        load_dotenv(dotenv_path=env_file, override=False)

        report_timezone = os.getenv('BIRTH_ENGINE_REPORT_TZ', DEFAULT_REPORT_TIMEZONE)
        try:
            pytz.timezone(report_timezone)
        except pytz.UnknownTimeZoneError:
            logger.warning(f"⚠️ 未知的报告时区 {report_timezone}，使用 {DEFAULT_REPORT_TIMEZONE}")
            report_timezone = DEFAULT_REPORT_TIMEZONE

        workers = os.getenv('BIRTH_ENGINE_BATCH_WORKERS')
        return cls(
            stale_after_days=int(os.getenv('BIRTH_ENGINE_STALE_DAYS', str(DEFAULT_STALE_AFTER_DAYS))),
            batch_max_workers=max(1, int(workers)) if workers else _default_batch_workers(),
            report_timezone=report_timezone,
            report_version=os.getenv('BIRTH_ENGINE_REPORT_VERSION', REPORT_VERSION),
        )


_config: Optional[EngineConfig] = None


def get_config() -> EngineConfig:
    """获取全局配置（单例）"""
    global _config
    if _config is None:
        _config = EngineConfig.from_env()
    return _config


def reload_config() -> EngineConfig:
    """重新加载配置"""
    global _config
    _config = EngineConfig.from_env()
    return _config
