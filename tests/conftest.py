#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pytest 全局配置

提供：
- 共享 fixtures（假农历转换器、固定时钟、样例档案）
- 测试钩子
"""

import os
import sys
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta
from typing import Any, Dict

import pytest
import pytz

# 添加项目根目录到路径
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from birth_engine.config.app_config import EngineConfig
from birth_engine.exceptions import CollaboratorUnavailableError
from birth_engine.interfaces.lunar_converter_interface import ILunarConverter, LunarConversion
from birth_engine.services.birth_data_fixer import BirthDataFixer
from birth_engine.services.birth_data_validator import BirthDataValidator

FIXED_NOW = datetime(2026, 1, 1, 0, 0, 0, tzinfo=pytz.UTC)

LUNAR_DATE = '己巳年腊月初五'
BAZI_PILLARS = {'year': '己巳', 'month': '丙子', 'day': '丙寅', 'hour': '甲午'}
WUXING = {'year': '土火', 'month': '火水', 'day': '火木', 'hour': '木火'}
NAYIN = {'year': '大林木', 'month': '涧下水', 'day': '炉中火', 'hour': '沙中金'}


# ==================== 协作方 Fakes ====================

class FakeLunarConverter(ILunarConverter):
    """返回固定结果的农历转换器，记录调用参数"""

    def __init__(self):
        self.calls = []

    def convert(self, birth_date: str, true_solar_time: str) -> LunarConversion:
        self.calls.append((birth_date, true_solar_time))
        return LunarConversion(
            lunar_date=LUNAR_DATE,
            bazi_pillars=dict(BAZI_PILLARS),
            wuxing=dict(WUXING),
            nayin=dict(NAYIN),
        )


class UnavailableLunarConverter(ILunarConverter):
    """服务不可用"""

    def convert(self, birth_date: str, true_solar_time: str) -> LunarConversion:
        raise CollaboratorUnavailableError()


class BrokenLunarConverter(ILunarConverter):
    """抛出非预期异常"""

    def convert(self, birth_date: str, true_solar_time: str) -> LunarConversion:
        raise RuntimeError("connection reset")


# ==================== 服务 Fixtures ====================

@pytest.fixture(scope="function")
def fixed_clock():
    """固定当前时间 2026-01-01 00:00 UTC"""
    return lambda: FIXED_NOW


@pytest.fixture(scope="function")
def engine_config() -> EngineConfig:
    return EngineConfig(stale_after_days=30, batch_max_workers=4, report_timezone='Asia/Shanghai')


@pytest.fixture(scope="function")
def lunar_converter() -> FakeLunarConverter:
    return FakeLunarConverter()


@pytest.fixture(scope="function")
def validator(lunar_converter, engine_config, fixed_clock) -> BirthDataValidator:
    return BirthDataValidator(lunar_converter=lunar_converter, config=engine_config, clock=fixed_clock)


@pytest.fixture(scope="function")
def unavailable_validator(engine_config, fixed_clock) -> BirthDataValidator:
    """农历转换服务不可用时的验证器"""
    return BirthDataValidator(lunar_converter=UnavailableLunarConverter(), config=engine_config, clock=fixed_clock)


@pytest.fixture(scope="function")
def broken_validator(engine_config, fixed_clock) -> BirthDataValidator:
    """农历转换服务抛出非预期异常时的验证器"""
    return BirthDataValidator(lunar_converter=BrokenLunarConverter(), config=engine_config, clock=fixed_clock)


@pytest.fixture(scope="function")
def fixer(validator) -> BirthDataFixer:
    return BirthDataFixer(validator)


@pytest.fixture(scope="function")
def executor():
    """每个测试独立的线程池"""
    pool = ThreadPoolExecutor(max_workers=4, thread_name_prefix="birth_engine_test")
    yield pool
    pool.shutdown(wait=True)


# ==================== 数据 Fixtures ====================

def make_profile(**overrides) -> Dict[str, Any]:
    """
    北京 1990-01-01 12:30 的一致档案（派生字段与 FakeLunarConverter 的结果一致）

    真太阳时: 12:30 - 14.4（经度） - 3.7（均时差） = 12:11
    """
    profile = {
        'id': 'u-001',
        'nickname': '张三',
        'birthDate': '1990-01-01',
        'birthTime': '12:30',
        'birthLocation': {'province': '北京', 'city': '北京', 'district': '东城区', 'lng': 116.40, 'lat': 39.90},
        'trueSolarTime': '12:11',
        'shichen': '午时初刻',
        'lunarBirthDate': LUNAR_DATE,
        'baziPillars': dict(BAZI_PILLARS),
        'wuxing': dict(WUXING),
        'nayin': dict(NAYIN),
        'lastCalculated': (FIXED_NOW - timedelta(days=1)).isoformat(),
    }
    profile.update(overrides)
    return profile


@pytest.fixture(scope="function")
def profile_factory():
    """make_profile 工厂（可覆盖任意字段）"""
    return make_profile


@pytest.fixture(scope="function")
def sample_profile() -> Dict[str, Any]:
    return make_profile()


@pytest.fixture(scope="function")
def drifted_profile() -> Dict[str, Any]:
    """只有农历日期与计算结果不一致"""
    return make_profile(lunarBirthDate='己巳年冬月初五')


# ==================== Pytest Hooks ====================

def pytest_configure(config):
    """添加自定义标记说明"""
    config.addinivalue_line("markers", "unit: 单元测试")
    config.addinivalue_line("markers", "library: 使用真实 lunar_python 的测试")


def pytest_collection_modifyitems(config, items):
    """根据路径自动添加标记"""
    for item in items:
        if "unit" in item.nodeid:
            item.add_marker(pytest.mark.unit)
