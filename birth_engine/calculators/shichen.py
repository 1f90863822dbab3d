#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
时辰计算

十二时辰从子时（23:00）开始，每个时辰两小时；每 15 分钟为一刻。
时辰必须按真太阳时计算，而不是北京时间。
"""

from typing import NamedTuple, Optional, Tuple

from birth_engine.exceptions import InputFormatError, InputRangeError, UnrecognizedShichenTokenError
from birth_engine.utils.birth_input_parser import parse_birth_time

EARTHLY_BRANCHES = ('子', '丑', '寅', '卯', '辰', '巳', '午', '未', '申', '酉', '戌', '亥')
KE_LABELS = ('初刻', '一刻', '二刻', '三刻')
HOUR_MARKERS = ('时', '時')


class ShichenResult(NamedTuple):
    """时辰计算结果"""
    branch: str
    quarter: str
    branch_index: int
    quarter_index: int

    @property
    def simple(self) -> str:
        """如 午时"""
        return f"{self.branch}时"

    @property
    def display(self) -> str:
        """如 午时二刻"""
        return f"{self.branch}时{self.quarter}"


def _check_int(value, name: str, upper: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InputFormatError(f"{name} 必须是整数: {value!r}", name)
    if not 0 <= value <= upper:
        raise InputRangeError(f"{name} 必须在 0 到 {upper} 之间: {value}", name)
    return value


def resolve_shichen_simple(hour: int) -> str:
    """小时 -> 地支（子时 23:00-01:00 为 0）"""
    hour = _check_int(hour, 'hour', 23)
    return EARTHLY_BRANCHES[((hour + 1) // 2) % 12]


def resolve_shichen(hour: int, minute: int) -> ShichenResult:
    """
    时分 -> 时辰 + 刻

    Example:
        >>> resolve_shichen(12, 30).display
        '午时二刻'
        >>> resolve_shichen(23, 30).branch == resolve_shichen(0, 10).branch == '子'
        True
    """
    hour = _check_int(hour, 'hour', 23)
    minute = _check_int(minute, 'minute', 59)

    branch_index = ((hour + 1) // 2) % 12
    quarter_index = minute // 15
    return ShichenResult(
        branch=EARTHLY_BRANCHES[branch_index],
        quarter=KE_LABELS[quarter_index],
        branch_index=branch_index,
        quarter_index=quarter_index,
    )


def shichen_from_time(time_str: str) -> ShichenResult:
    """'HH:MM'（通常是真太阳时） -> 时辰"""
    hour, minute = parse_birth_time(time_str, field='true_solar_time')
    return resolve_shichen(hour, minute)


def parse_shichen(token) -> Tuple[str, Optional[str]]:
    """
    解析时辰文本

    支持 '午'、'午时'、'午時'、'午时二刻'

    Returns:
        (branch, quarter)，没有刻信息时 quarter 为 None

    Raises:
        UnrecognizedShichenTokenError: 无法识别
    """
    if not isinstance(token, str):
        raise UnrecognizedShichenTokenError(token)

    text = token.strip()
    quarter = None
    for label in KE_LABELS:
        if text.endswith(label):
            quarter = label
            text = text[:-len(label)]
            break
    for marker in HOUR_MARKERS:
        if text.endswith(marker):
            text = text[:-len(marker)]
            break

    if text not in EARTHLY_BRANCHES:
        raise UnrecognizedShichenTokenError(token)
    return text, quarter


def normalize_shichen(token) -> str:
    """
    去掉刻与“时”字，返回地支

    Example:
        >>> normalize_shichen('午时二刻')
        '午'
    """
    branch, _ = parse_shichen(token)
    return branch
