# -*- coding: utf-8 -*-
"""
配置模块
"""

from birth_engine.config.env_config import EnvConfig, EnvironmentType, get_env_config, is_local_dev, is_production
from birth_engine.config.app_config import EngineConfig, get_config, reload_config

__all__ = [
    'EnvConfig', 'EnvironmentType', 'get_env_config', 'is_local_dev', 'is_production',
    'EngineConfig', 'get_config', 'reload_config',
]
