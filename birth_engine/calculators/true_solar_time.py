#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
真太阳时计算

真太阳时 = 北京时间 + 经度时差 + 均时差
- 经度时差 = (经度 - 120) * 4 分钟（120°E 为东八区标准经线，每度 4 分钟）
- 均时差采用解析近似式：9.87*sin(2B) - 7.53*cos(B) - 1.5*sin(B)，B = 2π(N-81)/365

注意：结果只在当天内回绕（分钟回绕，日期不变），调用方如需跨日请自行处理。
这是全项目唯一的真太阳时算法，农历转换、时辰计算都必须使用它。
"""

import math
from dataclasses import dataclass
from datetime import date
from typing import Union

from birth_engine.utils.birth_input_parser import (
    check_longitude,
    format_minutes_of_day,
    parse_birth_date,
    parse_birth_time,
)

STANDARD_MERIDIAN = 120.0
MINUTES_PER_DEGREE = 4.0
MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class SolarTimeCorrection:
    """真太阳时修正明细"""
    civil_time: str
    true_solar_time: str
    longitude_minutes: float
    equation_of_time_minutes: float
    total_minutes: float
    day_wrapped: bool  # 修正后越过了午夜（日期字段未改变）


def longitude_correction_minutes(longitude: float, standard_meridian: float = STANDARD_MERIDIAN) -> float:
    """
    经度时差（分钟）

    Example:
        北京 116.40°E: (116.40 - 120) * 4 = -14.4 分钟
    """
    return (longitude - standard_meridian) * MINUTES_PER_DEGREE


def day_of_year(birth_date: date) -> int:
    """年内序日，1月1日为 1"""
    return birth_date.timetuple().tm_yday


def equation_of_time_minutes(birth_date: date) -> float:
    """均时差（分钟）"""
    b = 2 * math.pi * (day_of_year(birth_date) - 81) / 365
    return 9.87 * math.sin(2 * b) - 7.53 * math.cos(b) - 1.5 * math.sin(b)


def true_solar_correction(birth_date: Union[date, str], birth_time: str, longitude: float) -> SolarTimeCorrection:
    """
    计算真太阳时及修正明细

    Args:
        birth_date: 公历日期（date 或 'YYYY-MM-DD'）
        birth_time: 北京时间 'HH:MM'
        longitude: 出生地经度（东经为正）

    Raises:
        InputFormatError: 日期/时间格式错误
        InputRangeError: 日期、时间或经度超出范围
        MissingFieldError: 缺少日期、时间或经度
    """
    parsed_date = parse_birth_date(birth_date)
    hour, minute = parse_birth_time(birth_time)
    longitude = check_longitude(longitude)

    lng_minutes = longitude_correction_minutes(longitude)
    eot_minutes = equation_of_time_minutes(parsed_date)
    total = lng_minutes + eot_minutes

    # 先取整再回绕，避免浮点取模得到 1440.0
    raw_minutes = math.floor(hour * 60 + minute + total)
    wrapped = raw_minutes % MINUTES_PER_DAY

    return SolarTimeCorrection(
        civil_time=f"{hour:02d}:{minute:02d}",
        true_solar_time=format_minutes_of_day(wrapped),
        longitude_minutes=lng_minutes,
        equation_of_time_minutes=eot_minutes,
        total_minutes=total,
        day_wrapped=raw_minutes != wrapped,
    )


def true_solar_time(birth_date: Union[date, str], birth_time: str, longitude: float) -> str:
    """
    北京时间 -> 真太阳时 'HH:MM'（纯函数，相同输入结果恒定）

    Example:
        >>> true_solar_time('1990-01-01', '12:30', 116.40)
        '12:11'
    """
    return true_solar_correction(birth_date, birth_time, longitude).true_solar_time
