"""
보존 정책 / 만료 판정 단위 테스트

테스트 대상: utils/retention.py
"""

from datetime import datetime, timedelta

import pytest

from utils.listing_parser import EntryType, FileEntry, PermissionBits, Permissions
from utils.retention import DEFAULT_IGNORE_NAMES, RetentionPolicy, age_in_days, is_stale


NOW = datetime(2023, 3, 1, 0, 0, 0)

NO_BITS = PermissionBits(read=False, write=False, execute=False)


def _make_entry(timestamp, name='camera-a.20230101_000000.mp4'):
    return FileEntry(
        name=name,
        entry_type=EntryType.FILE,
        permissions=Permissions(NO_BITS, NO_BITS, NO_BITS),
        timestamp=timestamp,
    )


class TestAgeInDays:
    """경과 일수 계산 테스트"""

    def test_whole_days(self):
        assert age_in_days(NOW - timedelta(days=59), NOW) == 59

    def test_partial_day_is_truncated(self):
        assert age_in_days(NOW - timedelta(days=2, hours=23, minutes=59), NOW) == 2

    def test_less_than_a_day_is_zero(self):
        assert age_in_days(NOW - timedelta(hours=1), NOW) == 0

    def test_future_timestamp_floors_to_negative(self):
        """미래 시각은 음수 방향으로 내림"""
        assert age_in_days(NOW + timedelta(hours=1), NOW) == -1

    def test_defaults_to_current_time(self):
        assert age_in_days(datetime.now() - timedelta(days=3, minutes=1)) == 3


class TestIsStale:
    """만료 판정 테스트"""

    def test_scenario_file_is_stale_after_59_days(self):
        """2023-01-01 파일은 2023-03-01 기준 59일 경과로 30일 정책에서 만료"""
        entry = _make_entry(datetime(2023, 1, 1))
        assert is_stale(entry, 30, NOW) is True

    def test_exactly_at_threshold_is_not_stale(self):
        entry = _make_entry(NOW - timedelta(days=30))
        assert is_stale(entry, 30, NOW) is False

    def test_one_day_past_threshold_is_stale(self):
        entry = _make_entry(NOW - timedelta(days=31))
        assert is_stale(entry, 30, NOW) is True

    def test_zero_day_policy(self):
        assert is_stale(_make_entry(NOW - timedelta(hours=23)), 0, NOW) is False
        assert is_stale(_make_entry(NOW - timedelta(days=1)), 0, NOW) is True

    def test_fresh_fallback_timestamp_is_never_stale(self):
        """파일명 해석 실패로 현재 시각이 들어간 항목은 만료되지 않음"""
        assert is_stale(_make_entry(NOW, name='feed.1_2.mp4'), 0, NOW) is False

    def test_future_file_is_not_stale(self):
        assert is_stale(_make_entry(NOW + timedelta(days=400)), 0, NOW) is False


class TestRetentionPolicy:
    """RetentionPolicy 테스트"""

    def test_build_includes_default_ignore_names(self):
        policy = RetentionPolicy.build(30, ['keep.20230101_000000.mp4'])

        assert '.htaccess' in policy.ignore_names
        assert 'keep.20230101_000000.mp4' in policy.ignore_names
        assert policy.max_age_days == 30

    def test_build_without_configured_names(self):
        assert RetentionPolicy.build(7).ignore_names == DEFAULT_IGNORE_NAMES

    def test_is_ignored_is_exact_match(self):
        policy = RetentionPolicy.build(7, ['keep.mp4'])

        assert policy.is_ignored('keep.mp4') is True
        assert policy.is_ignored('KEEP.mp4') is False
        assert policy.is_ignored('keep.mp4.bak') is False

    def test_negative_age_is_rejected(self):
        with pytest.raises(ValueError):
            RetentionPolicy(max_age_days=-1)

    def test_policy_is_immutable(self):
        policy = RetentionPolicy.build(7)
        with pytest.raises(AttributeError):
            policy.max_age_days = 1
