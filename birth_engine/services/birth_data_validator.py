#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
出生数据一致性验证器

验证流程（每条记录独立）：
    Start -> FormatCheck -> RangeCheck -> Recompute(真太阳时, 时辰, 农历) -> Diff -> Classify -> Emit

- 格式/范围/缺失字段错误只影响当前记录，并直接跳到 Emit，不再重新计算
- 派生字段不一致、数据过期、农历服务不可用都只是警告
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Optional, Union

from pydantic import ValidationError

from birth_engine.calculators.lunar_converter import LunarConverter
from birth_engine.calculators.shichen import parse_shichen, shichen_from_time
from birth_engine.calculators.true_solar_time import true_solar_correction
from birth_engine.config.app_config import EngineConfig, get_config
from birth_engine.exceptions import BirthDataError, CollaboratorUnavailableError
from birth_engine.interfaces.lunar_converter_interface import ILunarConverter
from birth_engine.models.birth_record import BirthRecord
from birth_engine.models.integrity import IntegrityResult, IssueKind, ValidationStage, utc_now
from birth_engine.utils.birth_input_parser import (
    check_latitude,
    check_longitude,
    parse_birth_date,
    parse_birth_time,
)

logger = logging.getLogger(__name__)

DERIVED_FIELD_LABELS = {
    'true_solar_time': '真太阳时',
    'shichen': '时辰',
    'lunar_birth_date': '农历日期',
    'bazi_pillars': '四柱',
    'wuxing': '五行',
    'nayin': '纳音',
}
LUNAR_FIELDS = ('lunar_birth_date', 'bazi_pillars', 'wuxing', 'nayin')
REQUIRED_FIELDS = ('birth_date', 'birth_time', 'birth_location')
BIRTH_INPUT_FIELDS = REQUIRED_FIELDS

# 中国大陆经纬度大致范围
CHINA_LONGITUDE_RANGE = (73.0, 135.0)
CHINA_LATITUDE_RANGE = (18.0, 54.0)

RecordLike = Union[BirthRecord, Mapping[str, Any]]


class BirthInputChanges(NamedTuple):
    """出生输入变更检测结果"""
    has_changes: bool
    changed_fields: List[str]
    should_recompute: bool


class _ParsedInput(NamedTuple):
    birth_date: str
    birth_time: str
    longitude: float
    latitude: float


def _format_value(value: Any) -> str:
    if value is None or value == '':
        return '空'
    if isinstance(value, dict):
        return ' '.join(str(v) for v in value.values())
    return str(value)


def _normalized_time(value: Optional[str]) -> str:
    hour, minute = parse_birth_time(value)
    return f"{hour:02d}:{minute:02d}"


def coerce_record(record: RecordLike) -> BirthRecord:
    """档案数据 -> BirthRecord（无法转换时抛出 pydantic.ValidationError / TypeError）"""
    if isinstance(record, BirthRecord):
        return record
    return BirthRecord.from_profile(record)


def detect_birth_input_changes(old: Optional[RecordLike], new: RecordLike) -> BirthInputChanges:
    """
    检测出生输入是否发生变化

    Returns:
        BirthInputChanges: 变化的字段，以及是否需要重新计算派生字段
    """
    new_record = coerce_record(new)
    if old is None:
        return BirthInputChanges(True, list(BIRTH_INPUT_FIELDS), True)
    old_record = coerce_record(old)

    changed_fields = [
        field for field in BIRTH_INPUT_FIELDS
        if getattr(old_record.birth_input, field) != getattr(new_record.birth_input, field)
    ]
    has_changes = bool(changed_fields)
    should_recompute = has_changes or old_record.derived.last_computed_at is None
    return BirthInputChanges(has_changes, changed_fields, should_recompute)


class BirthDataValidator:
    """出生数据一致性验证器"""

    def __init__(self,
                 lunar_converter: Optional[ILunarConverter] = None,
                 config: Optional[EngineConfig] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Args:
            lunar_converter: 农历转换协作方，默认使用 lunar_python 实现
            config: 引擎配置，默认读取全局配置
            clock: 当前时间函数（返回带时区的 datetime）
        """
        self.lunar_converter = lunar_converter or LunarConverter()
        self.config = config or get_config()
        self.clock = clock or utc_now

    def validate(self, record: RecordLike) -> IntegrityResult:
        """
        全面验证单条出生数据

        Args:
            record: BirthRecord 或档案 dict

        Returns:
            IntegrityResult: 验证结果（不修改传入的记录）
        """
        result = IntegrityResult()

        try:
            record = coerce_record(record)
        except ValidationError as e:
            self._add_coercion_errors(e, result)
            return self._emit(result, None)
        except TypeError as e:
            result.add_error(IssueKind.INPUT_FORMAT, str(e))
            result.can_calculate = False
            return self._emit(result, None)

        # FormatCheck / RangeCheck
        parsed = self._check_inputs(record, result)
        if parsed is None:
            return self._emit(result, record)

        # Recompute
        result.stage = ValidationStage.RECOMPUTE
        recomputed = self._recompute(parsed, result)

        # Diff
        result.stage = ValidationStage.DIFF
        self._diff(record, recomputed, result)

        # Classify
        result.stage = ValidationStage.CLASSIFY
        self._check_timeliness(record, result)

        result.stage = ValidationStage.EMIT
        return self._emit(result, record)

    def needs_recompute(self, record: RecordLike) -> bool:
        """记录是否需要重新计算（派生字段缺失/不一致/过期）"""
        result = self.validate(record)
        if not result.can_calculate:
            return False
        return bool(result.corrections) or result.has_kind(IssueKind.STALE_COMPUTATION)

    # ==================== FormatCheck / RangeCheck ====================

    def _add_coercion_errors(self, error: ValidationError, result: IntegrityResult):
        for item in error.errors():
            field = '.'.join(str(part) for part in item.get('loc', ()))
            result.add_error(IssueKind.INPUT_FORMAT, f"字段格式错误: {item.get('msg')}", field or None)
        result.can_calculate = False

    def _check_inputs(self, record: BirthRecord, result: IntegrityResult) -> Optional[_ParsedInput]:
        birth_input = record.birth_input
        result.stage = ValidationStage.FORMAT_CHECK

        for field in REQUIRED_FIELDS:
            if getattr(birth_input, field) in (None, ''):
                result.add_error(IssueKind.MISSING_FIELD, f"缺少必填字段: {field}", field)

        location = birth_input.birth_location
        checks = [
            ('birth_date', lambda: parse_birth_date(birth_input.birth_date).isoformat()),
            ('birth_time', lambda: _normalized_time(birth_input.birth_time)),
        ]
        if location is not None:
            checks.append(('longitude', lambda: check_longitude(location.longitude)))
            checks.append(('latitude', lambda: check_latitude(location.latitude)))

        values = {}
        for name, check in checks:
            if getattr(birth_input, name, 'present') in (None, ''):
                continue
            try:
                values[name] = check()
            except BirthDataError as e:
                if e.kind is None:
                    raise
                result.add_error(e.kind, e.message, e.field)

        self._check_stored_shichen(record, result)

        if not result.valid:
            result.can_calculate = False
            if not any(issue.kind in (IssueKind.MISSING_FIELD, IssueKind.INPUT_FORMAT) for issue in result.errors):
                result.stage = ValidationStage.RANGE_CHECK
            return None

        result.stage = ValidationStage.RANGE_CHECK
        self._check_location_quality(values['longitude'], values['latitude'], result)
        return _ParsedInput(values['birth_date'], values['birth_time'], values['longitude'], values['latitude'])

    def _check_stored_shichen(self, record: BirthRecord, result: IntegrityResult):
        stored = record.derived.shichen
        if stored is None:
            return
        try:
            parse_shichen(stored)
        except BirthDataError as e:
            result.add_warning(IssueKind.UNRECOGNIZED_SHICHEN_TOKEN, f"时辰格式异常: {stored}", e.field)

    def _check_location_quality(self, longitude: float, latitude: float, result: IntegrityResult):
        if abs(longitude) > 175 or abs(latitude) > 85:
            result.add_warning(
                IssueKind.LOCATION_QUALITY,
                "出生地点位置较偏僻，真太阳时计算精度可能降低",
                'birth_location'
            )
        lng_min, lng_max = CHINA_LONGITUDE_RANGE
        lat_min, lat_max = CHINA_LATITUDE_RANGE
        if not (lng_min <= longitude <= lng_max and lat_min <= latitude <= lat_max):
            result.add_warning(
                IssueKind.LOCATION_QUALITY,
                "出生地点位于中国境外，以东经120°为基准的传统算法可能不适用",
                'birth_location'
            )

    # ==================== Recompute ====================

    def _recompute(self, parsed: _ParsedInput, result: IntegrityResult) -> Dict[str, Any]:
        # 真太阳时 -> 时辰；真太阳时 -> 农历，顺序不可调换
        correction = true_solar_correction(parsed.birth_date, parsed.birth_time, parsed.longitude)
        solar_time = correction.true_solar_time
        recomputed: Dict[str, Any] = {
            'true_solar_time': solar_time,
            'shichen': shichen_from_time(solar_time).display,
        }

        try:
            conversion = self.lunar_converter.convert(parsed.birth_date, solar_time)
        except CollaboratorUnavailableError as e:
            self._mark_lunar_uncertain(e.message, result)
            return recomputed
        except Exception as e:
            logger.warning(f"⚠️ 农历转换协作方异常: {e}")
            self._mark_lunar_uncertain(f"农历转换服务异常: {e}", result)
            return recomputed

        recomputed.update({
            'lunar_birth_date': conversion.lunar_date,
            'bazi_pillars': dict(conversion.bazi_pillars),
            'wuxing': dict(conversion.wuxing),
            'nayin': dict(conversion.nayin),
        })
        return recomputed

    def _mark_lunar_uncertain(self, message: str, result: IntegrityResult):
        # 保留原有存储值，不提出修正
        result.add_warning(IssueKind.COLLABORATOR_UNAVAILABLE, message, 'lunar_birth_date')
        result.uncertain_fields.extend(LUNAR_FIELDS)

    # ==================== Diff / Classify ====================

    def _diff(self, record: BirthRecord, recomputed: Dict[str, Any], result: IntegrityResult):
        for field, new_value in recomputed.items():
            old_value = getattr(record.derived, field)
            if old_value == new_value:
                continue
            label = DERIVED_FIELD_LABELS[field]
            if old_value is None:
                message = f"缺少{label}"
            else:
                message = f"{label}不一致: 存储为 {_format_value(old_value)}，计算为 {_format_value(new_value)}"
            result.add_warning(IssueKind.DERIVED_FIELD_DRIFT, message, field)
            result.add_correction(field, old_value, new_value)

    def _check_timeliness(self, record: BirthRecord, result: IntegrityResult):
        last_computed_at = record.derived.last_computed_at
        if last_computed_at is None:
            result.add_warning(IssueKind.STALE_COMPUTATION, "没有计算时间记录，建议重新计算", 'last_computed_at')
            return

        age = self.clock() - last_computed_at
        if age > timedelta(days=self.config.stale_after_days):
            result.add_warning(
                IssueKind.STALE_COMPUTATION,
                f"数据最后计算时间已超过 {age.days} 天，建议重新计算",
                'last_computed_at'
            )

    def _emit(self, result: IntegrityResult, record: Optional[BirthRecord]) -> IntegrityResult:
        label = record.label if record is not None else '未知记录'
        if result.errors:
            logger.warning(f"出生数据验证失败 [{label}]，发现 {len(result.errors)} 个错误: "
                           f"{[issue.message for issue in result.errors]}")
        else:
            logger.debug(f"出生数据验证完成 [{label}]: {len(result.warnings)} 个警告，"
                         f"{len(result.corrections)} 处修正")
        return result
