#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
农历转换接口
定义公历 -> 农历/四柱/五行/纳音 转换的抽象接口，验证器只依赖此接口
"""

from abc import ABC, abstractmethod
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field


class LunarConversion(BaseModel):
    """农历转换结果"""
    model_config = ConfigDict(frozen=True)

    lunar_date: str = Field(..., description="农历日期文本")
    bazi_pillars: Dict[str, str] = Field(..., description="四柱干支 year/month/day/hour")
    wuxing: Dict[str, str] = Field(..., description="四柱五行")
    nayin: Dict[str, str] = Field(..., description="四柱纳音")


class ILunarConverter(ABC):
    """农历转换器接口"""

    @abstractmethod
    def convert(self, birth_date: str, true_solar_time: str) -> LunarConversion:
        """
        公历日期 + 真太阳时 -> 农历信息

        Args:
            birth_date: 公历日期 'YYYY-MM-DD'
            true_solar_time: 真太阳时 'HH:MM'

        Returns:
            LunarConversion

        Raises:
            CollaboratorUnavailableError: 转换失败或服务不可用
        """
        pass
