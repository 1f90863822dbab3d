#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
出生数据引擎异常定义

致命错误（格式/范围/缺失字段）只影响当前记录；
协作方不可用属于可降级错误，由验证器转换为警告。
"""

from typing import Optional

from birth_engine.models.integrity import IssueKind


class BirthDataError(Exception):
    """
    出生数据异常基类（只抛出子类，kind 由子类指定）

    Args:
        message: 错误信息
        field: 出错字段（可选）
    """
    kind: Optional[IssueKind] = None

    def __init__(self, message: str, field: str = None):
        self.message = message
        self.field = field
        super().__init__(message)


class InputFormatError(BirthDataError):
    """日期/时间等输入无法解析"""
    kind = IssueKind.INPUT_FORMAT


class InputRangeError(BirthDataError):
    """经纬度、日期、时分超出支持范围"""
    kind = IssueKind.INPUT_RANGE


class MissingFieldError(BirthDataError):
    """缺少必需的规范输入字段"""
    kind = IssueKind.MISSING_FIELD


class UnrecognizedShichenTokenError(BirthDataError):
    """无法识别的时辰文本"""
    kind = IssueKind.UNRECOGNIZED_SHICHEN_TOKEN

    def __init__(self, token, field: str = 'shichen'):
        self.token = token
        super().__init__(f"无法识别的时辰: {token!r}", field)


class CollaboratorUnavailableError(BirthDataError):
    """农历转换服务不可用或转换失败（可降级）"""
    kind = IssueKind.COLLABORATOR_UNAVAILABLE

    def __init__(self, message: str = "农历转换服务暂时不可用", field: str = None):
        super().__init__(message, field)


__all__ = [
    'BirthDataError',
    'InputFormatError',
    'InputRangeError',
    'MissingFieldError',
    'UnrecognizedShichenTokenError',
    'CollaboratorUnavailableError',
]
