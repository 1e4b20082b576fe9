"""Shift policy test suite — shift length, lateness cutoff, calendar helpers."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from worksync.common.dates import (
    iter_days,
    local_day,
    month_bounds,
    weekday_index,
    weekday_name,
    weekday_set,
)
from worksync.policy.schemas import WorkingHours
from worksync.policy.shift import (
    hours_between,
    is_late,
    lateness_cutoff,
    parse_hhmm,
    standard_shift_hours,
)
from tests.conftest import IST, MONDAY, ist

NINE_TO_SIX = WorkingHours(check_in="09:00", check_out="18:00", grace_period=15)


# ═════════════════════════════════════════════════════════════════════
# 1. SHIFT LENGTH
# ═════════════════════════════════════════════════════════════════════


def test_parse_hhmm():
    assert parse_hhmm("09:30") == 9.5
    assert parse_hhmm("00:00") == 0
    assert parse_hhmm("18:45") == 18.75


def test_standard_shift_is_check_out_minus_check_in():
    assert standard_shift_hours(NINE_TO_SIX) == 9


def test_overnight_shift_wraps_past_midnight():
    assert standard_shift_hours(WorkingHours(check_in="22:00", check_out="06:00")) == 8


def test_shift_falls_back_to_nine_hours():
    assert standard_shift_hours(None) == 9
    assert standard_shift_hours(WorkingHours(check_in="09:00", check_out="09:00")) == 9


# ═════════════════════════════════════════════════════════════════════
# 2. LATENESS
# ═════════════════════════════════════════════════════════════════════


def test_cutoff_is_check_in_plus_grace_in_local_time():
    cutoff = lateness_cutoff(NINE_TO_SIX, MONDAY)
    assert cutoff == ist(MONDAY, 9, 15)


def test_check_in_exactly_at_cutoff_is_not_late():
    assert is_late(ist(MONDAY, 9, 15), NINE_TO_SIX) is False


def test_check_in_one_minute_after_cutoff_is_late():
    assert is_late(ist(MONDAY, 9, 16), NINE_TO_SIX) is True


def test_lateness_uses_local_day_of_utc_timestamp():
    # 03:46 UTC is 09:16 in Asia/Kolkata
    moment = datetime(2026, 3, 2, 3, 46, tzinfo=timezone.utc)
    assert is_late(moment, NINE_TO_SIX) is True
    assert is_late(moment - timedelta(minutes=2), NINE_TO_SIX) is False


def test_no_working_hours_is_never_late():
    assert is_late(ist(MONDAY, 23, 0), None) is False


def test_hours_between_accepts_naive_utc():
    start = datetime(2026, 3, 2, 3, 30)  # as read back from SQLite
    end = ist(MONDAY, 13, 36)
    assert hours_between(start, end) == pytest.approx(4.6)


# ═════════════════════════════════════════════════════════════════════
# 3. CALENDAR DAYS
# ═════════════════════════════════════════════════════════════════════


def test_local_day_crosses_midnight_in_org_zone():
    # 20:00 UTC on Mar 1 is 01:30 on Mar 2 in IST
    assert local_day(datetime(2026, 3, 1, 20, 0, tzinfo=timezone.utc)) == date(2026, 3, 2)
    assert local_day(datetime(2026, 3, 2, 1, 30, tzinfo=IST)) == date(2026, 3, 2)


def test_iter_days_is_inclusive_and_ascending():
    days = list(iter_days(date(2026, 2, 27), date(2026, 3, 2)))
    assert days == [date(2026, 2, 27), date(2026, 2, 28), date(2026, 3, 1), date(2026, 3, 2)]


def test_month_bounds_handles_leap_years():
    assert month_bounds(2028, 2) == (date(2028, 2, 1), date(2028, 2, 29))
    assert month_bounds(2026, 2) == (date(2026, 2, 1), date(2026, 2, 28))


def test_weekday_names_accept_aliases():
    assert weekday_index("Sat") == 5
    assert weekday_index("sunday") == 6
    assert weekday_set(["Sat", "Sun"]) == frozenset({5, 6})
    assert weekday_name(MONDAY) == "Mon"
    with pytest.raises(ValueError):
        weekday_index("Funday")
