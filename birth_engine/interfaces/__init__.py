# -*- coding: utf-8 -*-
"""
外部协作方接口
"""

from birth_engine.interfaces.lunar_converter_interface import ILunarConverter, LunarConversion

__all__ = ['ILunarConverter', 'LunarConversion']
