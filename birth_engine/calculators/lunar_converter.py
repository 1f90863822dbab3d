#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import logging

from lunar_python import Solar

from birth_engine.exceptions import CollaboratorUnavailableError
from birth_engine.interfaces.lunar_converter_interface import ILunarConverter, LunarConversion
from birth_engine.models.birth_record import PILLAR_KEYS

logger = logging.getLogger(__name__)


class LunarConverter(ILunarConverter):
    """农历转换工具类 - 基于 lunar_python 的默认实现"""

    def convert(self, birth_date: str, true_solar_time: str) -> LunarConversion:
        """
        将公历日期 + 真太阳时转换为农历信息
        日期不随真太阳时跨日（与真太阳时的分钟回绕规则一致）
        Args:
            birth_date: 公历日期，格式 'YYYY-MM-DD'
            true_solar_time: 真太阳时，格式 'HH:MM'
        Returns:
            LunarConversion: 农历日期、四柱、五行、纳音
        """
        try:
            year, month, day = map(int, birth_date.split('-'))
            hour, minute = map(int, true_solar_time.split(':'))

            solar = Solar.fromYmdHms(year, month, day, hour, minute, 0)
            lunar = solar.getLunar()
            eight_char = lunar.getEightChar()
        except Exception as e:
            logger.warning(f"农历转换失败: {birth_date} {true_solar_time}: {e}")
            raise CollaboratorUnavailableError(f"农历转换失败: {e}")

        # 如 己巳年腊月初五
        lunar_date = f"{lunar.getYearInGanZhi()}年{lunar.getMonthInChinese()}月{lunar.getDayInChinese()}"

        pillars = (eight_char.getYear(), eight_char.getMonth(), eight_char.getDay(), eight_char.getTime())
        wuxing = (eight_char.getYearWuXing(), eight_char.getMonthWuXing(),
                  eight_char.getDayWuXing(), eight_char.getTimeWuXing())
        nayin = (eight_char.getYearNaYin(), eight_char.getMonthNaYin(),
                 eight_char.getDayNaYin(), eight_char.getTimeNaYin())

        return LunarConversion(
            lunar_date=lunar_date,
            bazi_pillars=dict(zip(PILLAR_KEYS, pillars)),
            wuxing=dict(zip(PILLAR_KEYS, wuxing)),
            nayin=dict(zip(PILLAR_KEYS, nayin)),
        )
