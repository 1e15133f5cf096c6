"""Tests for presence records and timestamp parsing."""

import datetime

import pytest

from users_online.records import PresenceRecord, parse_timestamp


class TestParseTimestamp:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (1640995200, 1640995200),
            (1640995200.9, 1640995200),
            ("1640995200", 1640995200),
            (" 1640995200 ", 1640995200),
            ("1640995200.5", 1640995200),
            ("2022-01-01T00:00:00Z", 1640995200),
            ("2022-01-01 00:00:00", 1640995200),
            ("2022-01-01T01:00:00+01:00", 1640995200),
            (0, 0),
        ],
    )
    def test_parseable(self, value, expected):
        assert parse_timestamp(value) == expected

    @pytest.mark.parametrize(
        "value",
        [None, "invalid-data", "", "2022-13-45T00:00:00", -1, -0.5, True, False, [], {}, float("nan"), "inf"],
    )
    def test_unparseable_is_zero(self, value):
        assert parse_timestamp(value) == 0

    def test_aware_datetime(self):
        value = datetime.datetime(2022, 1, 1, tzinfo=datetime.timezone.utc)
        assert parse_timestamp(value) == 1640995200

    def test_naive_datetime_is_utc(self):
        assert parse_timestamp(datetime.datetime(2022, 1, 1)) == 1640995200


class TestPresenceRecord:
    def test_stored_form(self):
        record = PresenceRecord.build(1700000000.75, {"id": 1, "name": "Ada"})
        assert record.to_stored() == {"recorded_at": 1700000000, "snapshot": {"id": 1, "name": "Ada"}}

    def test_from_stored(self):
        record = PresenceRecord.from_stored({"recorded_at": 1700000000, "snapshot": {"id": 1}})
        assert record.recorded_at == 1700000000
        assert dict(record.snapshot) == {"id": 1}

    def test_from_stored_without_snapshot(self):
        record = PresenceRecord.from_stored({"recorded_at": 5})
        assert record.recorded_at == 5
        assert dict(record.snapshot) == {}

    def test_from_stored_bad_snapshot(self):
        record = PresenceRecord.from_stored({"recorded_at": 5, "snapshot": "nope"})
        assert dict(record.snapshot) == {}

    @pytest.mark.parametrize("value", [None, "garbage", 42, ["recorded_at"]])
    def test_from_stored_non_mapping(self, value):
        assert PresenceRecord.from_stored(value).recorded_at == 0

    def test_snapshot_copied_and_read_only(self):
        source = {"id": 1}
        record = PresenceRecord.build(1, source)
        source["id"] = 2

        assert record.snapshot["id"] == 1
        with pytest.raises(TypeError):
            record.snapshot["id"] = 3

    def test_frozen(self):
        record = PresenceRecord.build(1, {})
        with pytest.raises(AttributeError):
            record.recorded_at = 2

    def test_recorded_datetime(self):
        record = PresenceRecord.build(1640995200, {})
        assert record.recorded_datetime == datetime.datetime(2022, 1, 1, tzinfo=datetime.timezone.utc)
