#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
出生数据记录模型

BirthInput（规范输入）与 DerivedFields（派生字段）均为不可变值类型，
修复只会产生新记录，不修改调用方持有的对象。
"""

import copy
from datetime import date, datetime, time
from typing import Any, Dict, Mapping, Optional

import pytz
from pydantic import BaseModel, ConfigDict, Field, field_validator

PILLAR_KEYS = ('year', 'month', 'day', 'hour')

# 扁平档案格式（档案存储使用的字段名） -> 派生字段名
PROFILE_DERIVED_KEYS = {
    'trueSolarTime': 'true_solar_time',
    'shichen': 'shichen',
    'lunarBirthDate': 'lunar_birth_date',
    'baziPillars': 'bazi_pillars',
    'wuxing': 'wuxing',
    'nayin': 'nayin',
    'lastCalculated': 'last_computed_at',
}


class BirthLocation(BaseModel):
    """出生地点（行政区划文字仅用于描述，不做数值校验）"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    longitude: Optional[float] = Field(None, alias='lng', description="经度")
    latitude: Optional[float] = Field(None, alias='lat', description="纬度")
    province: Optional[str] = None
    city: Optional[str] = None
    district: Optional[str] = None

    def display(self, precision: int = 4) -> str:
        """格式化地点显示，如 '北京 北京 东城区 (经度: 116.4000°, 纬度: 39.9000°)'"""
        place = ' '.join(part for part in (self.province, self.city, self.district) if part)
        if self.longitude is None or self.latitude is None:
            return place
        coords = f"(经度: {self.longitude:.{precision}f}°, 纬度: {self.latitude:.{precision}f}°)"
        return f"{place} {coords}" if place else coords


class BirthInput(BaseModel):
    """规范出生输入 - 保留原始字符串，由验证器负责格式与范围检查"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    birth_date: Optional[str] = Field(None, alias='birthDate', description="出生日期 YYYY-MM-DD")
    birth_time: Optional[str] = Field(None, alias='birthTime', description="出生时间 HH:MM")
    birth_location: Optional[BirthLocation] = Field(None, alias='birthLocation', description="出生地点")

    @field_validator('birth_date', mode='before')
    @classmethod
    def _date_to_str(cls, value):
        if isinstance(value, datetime):
            return value.date().isoformat()
        if isinstance(value, date):
            return value.isoformat()
        return value

    @field_validator('birth_time', mode='before')
    @classmethod
    def _time_to_str(cls, value):
        if isinstance(value, time):
            return value.strftime('%H:%M')
        return value


class DerivedFields(BaseModel):
    """派生字段 - 可随时由规范输入重新计算"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    true_solar_time: Optional[str] = Field(None, alias='trueSolarTime', description="真太阳时 HH:MM")
    shichen: Optional[str] = Field(None, description="时辰（含刻），如 午时初刻")
    lunar_birth_date: Optional[str] = Field(None, alias='lunarBirthDate', description="农历日期")
    bazi_pillars: Optional[Dict[str, str]] = Field(None, alias='baziPillars', description="四柱干支")
    wuxing: Optional[Dict[str, str]] = Field(None, description="四柱五行")
    nayin: Optional[Dict[str, str]] = Field(None, description="四柱纳音")
    last_computed_at: Optional[datetime] = Field(None, alias='lastCalculated', description="最后计算时间")

    @field_validator('bazi_pillars', mode='before')
    @classmethod
    def _flatten_pillars(cls, value):
        # {'year': {'stem': '庚', 'branch': '午'}} -> {'year': '庚午'}
        if isinstance(value, Mapping):
            flattened = {}
            for key, pillar in value.items():
                if isinstance(pillar, Mapping):
                    flattened[key] = f"{pillar.get('stem', '')}{pillar.get('branch', '')}"
                else:
                    flattened[key] = pillar
            return flattened
        return value

    @field_validator('last_computed_at', mode='before')
    @classmethod
    def _lenient_timestamp(cls, value):
        # 无法解析的时间戳视为从未计算，由时效检查提示重新计算
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value.replace('Z', '+00:00'))
            except ValueError:
                return None
        return value

    @field_validator('last_computed_at', mode='after')
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]):
        if value is not None and value.tzinfo is None:
            return pytz.UTC.localize(value)
        return value


class BirthRecord(BaseModel):
    """出生数据记录 = 规范输入 + 派生字段"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    record_id: Optional[str] = Field(None, alias='id')
    nickname: Optional[str] = None
    birth_input: BirthInput = Field(default_factory=BirthInput)
    derived: DerivedFields = Field(default_factory=DerivedFields)

    @field_validator('record_id', mode='before')
    @classmethod
    def _id_to_str(cls, value):
        # 档案存储中的数字 id
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @classmethod
    def from_profile(cls, profile: Mapping[str, Any]) -> 'BirthRecord':
        """
        从档案数据构建记录

        支持两种格式：
        - 嵌套格式：{'birth_input': {...}, 'derived': {...}}
        - 扁平格式：{'birthDate': ..., 'birthTime': ..., 'birthLocation': {...}, 'shichen': ...}
        """
        if isinstance(profile, BirthRecord):
            return profile
        if not isinstance(profile, Mapping):
            raise TypeError(f"档案数据类型错误，应为 dict，实际为 {type(profile).__name__}")
        if 'birth_input' in profile or 'derived' in profile:
            return cls.model_validate(profile)

        record_id = profile.get('id', profile.get('record_id'))
        return cls.model_validate({
            'id': str(record_id) if record_id is not None else None,
            'nickname': profile.get('nickname'),
            'birth_input': {
                'birthDate': profile.get('birthDate', profile.get('birth_date')),
                'birthTime': profile.get('birthTime', profile.get('birth_time')),
                'birthLocation': profile.get('birthLocation', profile.get('birth_location')),
            },
            'derived': {
                field: profile.get(key, profile.get(field))
                for key, field in PROFILE_DERIVED_KEYS.items()
            },
        })

    def to_profile(self) -> Dict[str, Any]:
        """导出为扁平档案格式，由调用方决定是否持久化"""
        location = self.birth_input.birth_location
        derived = self.derived.model_dump(mode='json')
        profile = {
            'id': self.record_id,
            'nickname': self.nickname,
            'birthDate': self.birth_input.birth_date,
            'birthTime': self.birth_input.birth_time,
            'birthLocation': location.model_dump(by_alias=True) if location else None,
        }
        for key, field in PROFILE_DERIVED_KEYS.items():
            profile[key] = derived[field]
        return profile

    def merge_into_profile(self, profile: Mapping[str, Any]) -> Dict[str, Any]:
        """
        把派生字段写回原档案，返回新 dict

        档案中的其他字段（id 类型、输入字段、业务字段）原样保留
        """
        merged = dict(profile)
        derived = self.derived.model_dump(mode='json')
        if 'birth_input' in profile or 'derived' in profile:
            merged['derived'] = {**dict(profile.get('derived') or {}), **derived}
            return merged
        for key, field in PROFILE_DERIVED_KEYS.items():
            merged[key] = derived[field]
        return merged

    def with_derived(self, updates: Mapping[str, Any], computed_at: Optional[datetime]) -> 'BirthRecord':
        """返回替换了派生字段的新记录（一次性整体替换）；computed_at 为 None 时保留原计算时间"""
        values = {field: copy.deepcopy(value) for field, value in updates.items()}
        if computed_at is not None:
            values['last_computed_at'] = computed_at
        return self.model_copy(update={'derived': self.derived.model_copy(update=values)})

    @property
    def label(self) -> str:
        return self.nickname or self.record_id or '未知记录'
