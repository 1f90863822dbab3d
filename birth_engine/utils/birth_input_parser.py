#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
出生输入解析工具 - 日期、时间、经纬度的统一格式与范围检查

所有调用方（真太阳时、时辰、验证器）共用这里的解析逻辑，不再各自校验。
"""

import re
from datetime import date, datetime
from typing import Optional, Tuple, Union

from birth_engine.exceptions import InputFormatError, InputRangeError, MissingFieldError

DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')
TIME_PATTERN = re.compile(r'^\d{1,2}:\d{2}$')

MIN_BIRTH_DATE = date(1900, 1, 1)
MAX_BIRTH_DATE = date(2100, 12, 31)


def parse_birth_date(value: Union[date, str, None], field: str = 'birth_date') -> date:
    """
    解析出生日期

    Args:
        value: date 对象或 'YYYY-MM-DD' 字符串
        field: 字段名（用于错误信息）

    Returns:
        date 对象

    Raises:
        MissingFieldError: 日期为空
        InputFormatError: 格式错误或日期不存在（如 2月30日）
        InputRangeError: 超出 1900-01-01 ~ 2100-12-31
    """
    if value is None or value == '':
        raise MissingFieldError("出生日期不能为空", field)

    if isinstance(value, datetime):
        parsed = value.date()
    elif isinstance(value, date):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not DATE_PATTERN.match(text):
            raise InputFormatError(f"出生日期格式错误，应为 YYYY-MM-DD: {value}", field)
        try:
            parsed = datetime.strptime(text, '%Y-%m-%d').date()
        except ValueError:
            raise InputFormatError(f"出生日期无效: {value}", field)
    else:
        raise InputFormatError(f"出生日期类型错误: {type(value).__name__}", field)

    if not MIN_BIRTH_DATE <= parsed <= MAX_BIRTH_DATE:
        raise InputRangeError(
            f"出生日期必须在 {MIN_BIRTH_DATE.isoformat()} 到 {MAX_BIRTH_DATE.isoformat()} 之间: {parsed.isoformat()}",
            field
        )
    return parsed


def parse_birth_time(value: Optional[str], field: str = 'birth_time') -> Tuple[int, int]:
    """
    解析出生时间 'H:MM' / 'HH:MM'

    Returns:
        (hour, minute)

    Raises:
        MissingFieldError: 时间为空
        InputFormatError: 格式错误
        InputRangeError: 小时不在 0-23 或分钟不在 0-59
    """
    if value is None or value == '':
        raise MissingFieldError("出生时间不能为空", field)
    if not isinstance(value, str) or not TIME_PATTERN.match(value.strip()):
        raise InputFormatError(f"出生时间格式错误，应为 HH:MM: {value}", field)

    hour_str, minute_str = value.strip().split(':')
    hour, minute = int(hour_str), int(minute_str)
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise InputRangeError(f"出生时间无效: {value}", field)
    return hour, minute


def check_longitude(longitude: Optional[float], field: str = 'birth_location.longitude') -> float:
    """经度必须存在且在 [-180, 180]，不做截断"""
    if longitude is None:
        raise MissingFieldError("经度不能为空", field)
    if not -180.0 <= longitude <= 180.0:
        raise InputRangeError(f"经度必须在 -180 到 180 之间: {longitude}", field)
    return float(longitude)


def check_latitude(latitude: Optional[float], field: str = 'birth_location.latitude') -> float:
    """纬度必须存在且在 [-90, 90]，不做截断"""
    if latitude is None:
        raise MissingFieldError("纬度不能为空", field)
    if not -90.0 <= latitude <= 90.0:
        raise InputRangeError(f"纬度必须在 -90 到 90 之间: {latitude}", field)
    return float(latitude)


def format_minutes_of_day(minutes: int) -> str:
    """一天内的分钟数 -> 'HH:MM'"""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
