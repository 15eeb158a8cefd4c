from datetime import time

import pytest

import weekly_schedule.clock as clock
from conftest import TZ, dt_local


def test_day_index_is_sunday_based():
    assert clock.day_index(dt_local(2026, 2, 22)) == 0  # Sun
    assert clock.day_index(dt_local(2026, 2, 16)) == 1  # Mon
    assert clock.day_index(dt_local(2026, 2, 18)) == 3  # Wed
    assert clock.day_index(dt_local(2026, 2, 21)) == 6  # Sat


def test_is_workday():
    assert [d for d in range(7) if clock.is_workday(d)] == [1, 2, 3, 4, 5]


def test_hhmm_truncates_seconds():
    assert clock.hhmm(dt_local(2026, 2, 18, 9, 5, 59)) == "09:05"
    assert clock.hhmm(dt_local(2026, 2, 18, 0, 0, 1)) == "00:00"


@pytest.mark.parametrize("s, expected", [("00:00", time(0, 0)), ("23:59", time(23, 59)), ("09:30", time(9, 30))])
def test_parse_hhmm(s, expected):
    assert clock.parse_hhmm(s) == expected


@pytest.mark.parametrize("s", ["24:00", "12:60", "9:00", "09:0", "0900", "", "ab:cd", "09:00:00"])
def test_parse_hhmm_rejects_malformed(s):
    with pytest.raises(clock.MalformedTime):
        clock.parse_hhmm(s)


def test_malformed_time_is_a_value_error():
    assert issubclass(clock.MalformedTime, ValueError)


def test_today_at_keeps_date_and_zone():
    now = dt_local(2026, 2, 18, 8, 55, 42)
    assert clock.today_at(now, "09:00") == dt_local(2026, 2, 18, 9, 0, 0)


def test_now_local_uses_local_tz(monkeypatch):
    monkeypatch.setattr(clock, "local_tz", lambda: TZ)
    assert clock.now_local().tzinfo == TZ
