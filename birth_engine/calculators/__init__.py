# -*- coding: utf-8 -*-
"""
历法计算器
"""

from birth_engine.calculators.true_solar_time import (
    SolarTimeCorrection,
    true_solar_time,
    true_solar_correction,
    longitude_correction_minutes,
    equation_of_time_minutes,
)
from birth_engine.calculators.shichen import (
    EARTHLY_BRANCHES,
    KE_LABELS,
    ShichenResult,
    resolve_shichen,
    resolve_shichen_simple,
    shichen_from_time,
    parse_shichen,
    normalize_shichen,
)
from birth_engine.calculators.lunar_converter import LunarConverter

__all__ = [
    'SolarTimeCorrection', 'true_solar_time', 'true_solar_correction',
    'longitude_correction_minutes', 'equation_of_time_minutes',
    'EARTHLY_BRANCHES', 'KE_LABELS', 'ShichenResult', 'resolve_shichen',
    'resolve_shichen_simple', 'shichen_from_time', 'parse_shichen', 'normalize_shichen',
    'LunarConverter',
]
