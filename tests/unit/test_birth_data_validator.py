#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
出生数据一致性验证器单元测试
"""

import copy
from datetime import timedelta
from unittest.mock import patch

import pytest

from birth_engine.exceptions import (
    BirthDataError,
    CollaboratorUnavailableError,
    InputFormatError,
    InputRangeError,
    MissingFieldError,
    UnrecognizedShichenTokenError,
)
from birth_engine.models.birth_record import BirthRecord
from birth_engine.models.integrity import IssueKind, ValidationStage
from birth_engine.services.birth_data_validator import LUNAR_FIELDS, detect_birth_input_changes


def _kinds(issues):
    return [issue.kind for issue in issues]


class TestValidateConsistentRecord:
    """一致的记录"""

    def test_valid_without_issues(self, validator, sample_profile):
        result = validator.validate(sample_profile)

        assert result.valid is True
        assert result.can_calculate is True
        assert result.errors == []
        assert result.warnings == []
        assert result.corrections == {}
        assert result.stage == ValidationStage.EMIT

    def test_accepts_birth_record(self, validator, sample_profile):
        record = BirthRecord.from_profile(sample_profile)
        assert validator.validate(record).corrections == {}

    def test_lunar_conversion_uses_true_solar_time(self, validator, lunar_converter, sample_profile):
        """农历转换使用真太阳时，而不是北京时间"""
        validator.validate(sample_profile)
        assert lunar_converter.calls == [('1990-01-01', '12:11')]

    def test_does_not_mutate_input(self, validator, drifted_profile):
        before = copy.deepcopy(drifted_profile)
        validator.validate(drifted_profile)
        assert drifted_profile == before

    def test_nested_pillar_format(self, validator, profile_factory):
        """{'stem', 'branch'} 格式的四柱与字符串格式等价"""
        profile = profile_factory(baziPillars={
            'year': {'stem': '己', 'branch': '巳'},
            'month': {'stem': '丙', 'branch': '子'},
            'day': {'stem': '丙', 'branch': '寅'},
            'hour': {'stem': '甲', 'branch': '午'},
        })
        assert validator.validate(profile).corrections == {}


class TestValidateInputErrors:
    """格式/范围/缺失字段"""

    def test_longitude_out_of_range(self, validator, lunar_converter, profile_factory):
        """经度 200 -> 范围错误，不重新计算"""
        profile = profile_factory(birthLocation={'lng': 200.0, 'lat': 39.9})
        result = validator.validate(profile)

        assert result.valid is False
        assert result.can_calculate is False
        assert _kinds(result.errors) == [IssueKind.INPUT_RANGE]
        assert result.errors[0].field == 'birth_location.longitude'
        assert result.stage == ValidationStage.RANGE_CHECK
        assert result.corrections == {}
        assert lunar_converter.calls == []

    def test_missing_birth_date(self, validator, profile_factory):
        result = validator.validate(profile_factory(birthDate=''))

        assert result.valid is False
        assert result.can_calculate is False
        assert _kinds(result.errors) == [IssueKind.MISSING_FIELD]
        assert result.errors[0].field == 'birth_date'
        assert result.stage == ValidationStage.FORMAT_CHECK

    def test_missing_location(self, validator, profile_factory):
        result = validator.validate(profile_factory(birthLocation=None))
        assert _kinds(result.errors) == [IssueKind.MISSING_FIELD]
        assert result.errors[0].field == 'birth_location'

    def test_missing_latitude(self, validator, profile_factory):
        result = validator.validate(profile_factory(birthLocation={'lng': 116.4}))
        assert _kinds(result.errors) == [IssueKind.MISSING_FIELD]
        assert result.errors[0].field == 'birth_location.latitude'

    def test_malformed_time(self, validator, profile_factory):
        result = validator.validate(profile_factory(birthTime='noon'))
        assert _kinds(result.errors) == [IssueKind.INPUT_FORMAT]
        assert result.errors[0].field == 'birth_time'

    def test_time_out_of_range(self, validator, profile_factory):
        result = validator.validate(profile_factory(birthTime='25:00'))
        assert _kinds(result.errors) == [IssueKind.INPUT_RANGE]

    def test_date_out_of_range(self, validator, profile_factory):
        """超出 1900-2100 的日期报错，不做截断"""
        result = validator.validate(profile_factory(birthDate='2101-01-01'))
        assert _kinds(result.errors) == [IssueKind.INPUT_RANGE]

    def test_multiple_errors_are_all_reported(self, validator, profile_factory):
        result = validator.validate(profile_factory(birthDate='1990/01/01', birthTime='25:00'))
        assert set(_kinds(result.errors)) == {IssueKind.INPUT_FORMAT, IssueKind.INPUT_RANGE}
        assert result.stage == ValidationStage.FORMAT_CHECK

    def test_unparsable_location(self, validator, profile_factory):
        """无法构建记录 -> 格式错误"""
        result = validator.validate(profile_factory(birthLocation='北京'))

        assert result.valid is False
        assert result.can_calculate is False
        assert IssueKind.INPUT_FORMAT in _kinds(result.errors)

    def test_not_a_mapping(self, validator):
        result = validator.validate(42)
        assert result.can_calculate is False
        assert _kinds(result.errors) == [IssueKind.INPUT_FORMAT]


class TestValidateDrift:
    """派生字段不一致"""

    def test_lunar_date_drift(self, validator, drifted_profile):
        """只有农历日期不一致 -> 恰好一处修正和一个警告"""
        result = validator.validate(drifted_profile)

        assert result.valid is True
        assert list(result.corrections) == ['lunar_birth_date']
        correction = result.corrections['lunar_birth_date']
        assert correction.old == '己巳年冬月初五'
        assert correction.new == '己巳年腊月初五'

        drift = [issue for issue in result.warnings if issue.kind == IssueKind.DERIVED_FIELD_DRIFT]
        assert len(drift) == 1
        assert drift[0].field == 'lunar_birth_date'

    def test_missing_derived_fields(self, validator, profile_factory):
        profile = profile_factory(trueSolarTime=None, shichen=None)
        result = validator.validate(profile)

        assert result.valid is True
        assert result.corrections['true_solar_time'].new == '12:11'
        assert result.corrections['shichen'].new == '午时初刻'
        assert result.corrections['shichen'].old is None

    def test_true_solar_time_drift(self, validator, profile_factory):
        """存储的是北京时间而非真太阳时"""
        result = validator.validate(profile_factory(trueSolarTime='12:30'))
        assert result.corrections['true_solar_time'].old == '12:30'
        assert result.corrections['true_solar_time'].new == '12:11'

    def test_unrecognized_stored_shichen(self, validator, profile_factory):
        result = validator.validate(profile_factory(shichen='午正'))

        assert result.valid is True
        assert IssueKind.UNRECOGNIZED_SHICHEN_TOKEN in _kinds(result.warnings)
        assert result.corrections['shichen'].new == '午时初刻'

    def test_simple_shichen_form_is_corrected_to_display_form(self, validator, profile_factory):
        result = validator.validate(profile_factory(shichen='午时'))

        assert IssueKind.UNRECOGNIZED_SHICHEN_TOKEN not in _kinds(result.warnings)
        assert result.corrections['shichen'].new == '午时初刻'


class TestValidateWarnings:
    """不影响有效性的警告"""

    def test_stale_computation(self, validator, profile_factory, fixed_clock):
        """超过 30 天未计算 -> 过期警告，无修正"""
        last = fixed_clock() - timedelta(days=31)
        result = validator.validate(profile_factory(lastCalculated=last.isoformat()))

        assert result.valid is True
        assert _kinds(result.warnings) == [IssueKind.STALE_COMPUTATION]
        assert result.corrections == {}

    def test_not_stale_within_threshold(self, validator, profile_factory, fixed_clock):
        last = fixed_clock() - timedelta(days=29)
        result = validator.validate(profile_factory(lastCalculated=last.isoformat()))
        assert result.warnings == []

    def test_missing_last_computed_at(self, validator, profile_factory):
        result = validator.validate(profile_factory(lastCalculated=None))
        assert _kinds(result.warnings) == [IssueKind.STALE_COMPUTATION]

    def test_unparsable_last_computed_at(self, validator, profile_factory):
        result = validator.validate(profile_factory(lastCalculated='yesterday'))
        assert _kinds(result.warnings) == [IssueKind.STALE_COMPUTATION]

    def test_collaborator_unavailable(self, unavailable_validator, drifted_profile):
        """农历服务不可用 -> 警告，保留存储值，不提出农历修正"""
        result = unavailable_validator.validate(drifted_profile)

        assert result.valid is True
        assert IssueKind.COLLABORATOR_UNAVAILABLE in _kinds(result.warnings)
        assert set(LUNAR_FIELDS) <= set(result.uncertain_fields)
        assert result.corrections == {}

    def test_collaborator_unexpected_exception(self, broken_validator, profile_factory):
        result = broken_validator.validate(profile_factory(trueSolarTime=None))

        assert result.valid is True
        assert IssueKind.COLLABORATOR_UNAVAILABLE in _kinds(result.warnings)
        # 真太阳时不依赖农历服务，仍然可以修正
        assert list(result.corrections) == ['true_solar_time']

    def test_remote_location(self, validator, profile_factory):
        result = validator.validate(profile_factory(birthLocation={'lng': 178.0, 'lat': 10.0}))

        location = [issue for issue in result.warnings if issue.kind == IssueKind.LOCATION_QUALITY]
        assert len(location) == 2
        assert result.valid is True

    def test_outside_china(self, validator, profile_factory):
        result = validator.validate(profile_factory(birthLocation={'lng': -0.12, 'lat': 51.5}))

        location = [issue for issue in result.warnings if issue.kind == IssueKind.LOCATION_QUALITY]
        assert len(location) == 1
        assert result.valid is True


class TestRecomputeHelpers:
    """变更检测与重新计算判断"""

    def test_no_changes(self, sample_profile):
        changes = detect_birth_input_changes(sample_profile, copy.deepcopy(sample_profile))
        assert changes.has_changes is False
        assert changes.changed_fields == []
        assert changes.should_recompute is False

    def test_time_changed(self, sample_profile, profile_factory):
        changes = detect_birth_input_changes(sample_profile, profile_factory(birthTime='08:00'))
        assert changes.has_changes is True
        assert changes.changed_fields == ['birth_time']
        assert changes.should_recompute is True

    def test_location_changed(self, sample_profile, profile_factory):
        changes = detect_birth_input_changes(
            sample_profile, profile_factory(birthLocation={'lng': 121.47, 'lat': 31.23})
        )
        assert changes.changed_fields == ['birth_location']

    def test_new_record(self, sample_profile):
        changes = detect_birth_input_changes(None, sample_profile)
        assert changes.has_changes is True
        assert changes.should_recompute is True

    def test_never_computed(self, profile_factory):
        profile = profile_factory(lastCalculated=None)
        changes = detect_birth_input_changes(profile, copy.deepcopy(profile))
        assert changes.has_changes is False
        assert changes.should_recompute is True

    @pytest.mark.parametrize("overrides,expected", [
        ({}, False),
        ({'lunarBirthDate': None}, True),
        ({'shichen': '子时初刻'}, True),
        ({'lastCalculated': None}, True),
        ({'birthDate': ''}, False),
    ])
    def test_needs_recompute(self, validator, profile_factory, overrides, expected):
        assert validator.needs_recompute(profile_factory(**overrides)) is expected


class TestErrorKinds:
    """异常类型与问题类型的对应"""

    @pytest.mark.parametrize("error_cls,kind", [
        (InputFormatError, IssueKind.INPUT_FORMAT),
        (InputRangeError, IssueKind.INPUT_RANGE),
        (MissingFieldError, IssueKind.MISSING_FIELD),
        (CollaboratorUnavailableError, IssueKind.COLLABORATOR_UNAVAILABLE),
    ])
    def test_subclass_kinds(self, error_cls, kind):
        assert error_cls("msg").kind == kind

    def test_base_error_has_no_kind(self):
        assert BirthDataError("msg").kind is None
        assert UnrecognizedShichenTokenError('午正').kind == IssueKind.UNRECOGNIZED_SHICHEN_TOKEN

    def test_base_error_is_not_reported_as_format_error(self, validator, sample_profile):
        """未分类的异常直接抛出，不被当作格式错误"""
        with patch('birth_engine.services.birth_data_validator.parse_birth_date',
                   side_effect=BirthDataError("unclassified")):
            with pytest.raises(BirthDataError):
                validator.validate(sample_profile)
