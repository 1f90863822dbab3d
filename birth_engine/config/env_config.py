#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
统一环境配置管理

提供统一的环境判断，避免配置分散
"""

import os
from enum import Enum
from typing import Optional


class EnvironmentType(Enum):
    """环境类型枚举"""
    LOCAL = "local"
    STAGING = "staging"
    PRODUCTION = "production"


class EnvConfig:
    """
    统一环境配置管理器

    优先读取 BIRTH_ENGINE_ENV，其次 ENV，默认 local
    """

    _instance: Optional['EnvConfig'] = None

    def __init__(self):
        self._env = self._detect_environment()

    @classmethod
    def get_instance(cls) -> 'EnvConfig':
        """获取单例实例"""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls):
        """重新检测环境（测试用）"""
        cls._instance = None

    @staticmethod
    def _detect_environment() -> EnvironmentType:
        env_value = os.getenv("BIRTH_ENGINE_ENV", os.getenv("ENV", "local")).lower()
        if env_value in ("staging", "stage"):
            return EnvironmentType.STAGING
        if env_value in ("prod", "production"):
            return EnvironmentType.PRODUCTION
        # 未知环境按本地开发处理
        return EnvironmentType.LOCAL

    @property
    def env(self) -> EnvironmentType:
        return self._env

    @property
    def is_local_dev(self) -> bool:
        return self._env == EnvironmentType.LOCAL

    @property
    def is_production(self) -> bool:
        return self._env == EnvironmentType.PRODUCTION


def get_env_config() -> EnvConfig:
    """获取环境配置实例"""
    return EnvConfig.get_instance()


def is_local_dev() -> bool:
    return get_env_config().is_local_dev


def is_production() -> bool:
    return get_env_config().is_production
