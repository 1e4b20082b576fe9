"""Leave quota allocator — pure planning and used-balance arithmetic."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from types import SimpleNamespace

from worksync.common.constants import AttendanceStatus
from worksync.leave.allocator import charged_days, plan_leave_allocation, used_leave_days
from worksync.policy.schemas import LeavePolicy

WEEKEND = frozenset({5, 6})
MONDAY = date(2026, 3, 2)
FRIDAY = date(2026, 3, 6)


def _row(day: date, status: AttendanceStatus, duration: str):
    return SimpleNamespace(date=day, status=status, leave_duration=Decimal(duration))


# ═════════════════════════════════════════════════════════════════════
# 1. QUOTA BOUNDARY
# ═════════════════════════════════════════════════════════════════════


def test_full_day_over_quota_is_unpaid():
    plan = plan_leave_allocation(
        MONDAY, MONDAY,
        duration=Decimal("1"), quota=Decimal("12"), used=Decimal("11.5"),
        weekend_days=WEEKEND,
    )
    assert [p.status for p in plan] == [AttendanceStatus.unpaid_leave]


def test_half_day_exactly_fills_quota():
    plan = plan_leave_allocation(
        MONDAY, MONDAY,
        duration=Decimal("0.5"), quota=Decimal("12"), used=Decimal("11.5"),
        weekend_days=WEEKEND,
    )
    assert [p.status for p in plan] == [AttendanceStatus.leave]
    assert plan[0].duration == Decimal("0.5")

    # The next half day no longer fits
    follow_up = plan_leave_allocation(
        MONDAY, MONDAY,
        duration=Decimal("0.5"), quota=Decimal("12"), used=Decimal("12"),
        weekend_days=WEEKEND,
    )
    assert follow_up[0].status == AttendanceStatus.unpaid_leave


def test_range_switches_to_unpaid_when_quota_runs_out():
    plan = plan_leave_allocation(
        MONDAY, FRIDAY,
        duration=Decimal("1"), quota=Decimal("12"), used=Decimal("10"),
        weekend_days=WEEKEND,
    )
    assert [p.status for p in plan] == [
        AttendanceStatus.leave,
        AttendanceStatus.leave,
        AttendanceStatus.unpaid_leave,
        AttendanceStatus.unpaid_leave,
        AttendanceStatus.unpaid_leave,
    ]


def test_weekends_are_skipped_without_consuming_quota():
    plan = plan_leave_allocation(
        FRIDAY, date(2026, 3, 9),
        duration=Decimal("1"), quota=Decimal("2"), used=Decimal("0"),
        weekend_days=WEEKEND,
    )
    assert [p.day for p in plan] == [FRIDAY, date(2026, 3, 9)]
    assert all(p.status == AttendanceStatus.leave for p in plan)


# ═════════════════════════════════════════════════════════════════════
# 2. USED BALANCE
# ═════════════════════════════════════════════════════════════════════


def test_used_counts_leave_and_unpaid_with_zero_as_full_day():
    rows = [
        _row(date(2026, 1, 5), AttendanceStatus.leave, "1"),
        _row(date(2026, 1, 6), AttendanceStatus.leave, "0.5"),
        _row(date(2026, 1, 7), AttendanceStatus.unpaid_leave, "0"),
        _row(date(2026, 1, 8), AttendanceStatus.present, "0"),
        _row(date(2026, 1, 9), AttendanceStatus.half_day, "0.5"),
    ]
    assert used_leave_days(rows) == Decimal("2.5")


def test_used_excludes_the_range_being_allocated():
    rows = [
        _row(date(2026, 1, 5), AttendanceStatus.leave, "1"),
        _row(MONDAY, AttendanceStatus.leave, "1"),
        _row(FRIDAY, AttendanceStatus.unpaid_leave, "1"),
    ]
    assert used_leave_days(rows, exclude=(MONDAY, FRIDAY)) == Decimal("1")


# ═════════════════════════════════════════════════════════════════════
# 3. QUOTA LOOKUP
# ═════════════════════════════════════════════════════════════════════


def test_quota_by_leave_type_falls_back_to_casual():
    policy = LeavePolicy(casual_leave=12, sick_leave=10, annual_leave=18, maternity_leave=90)
    assert policy.quota_for("Casual") == Decimal("12")
    assert policy.quota_for("Sick") == Decimal("10")
    assert policy.quota_for("annual") == Decimal("18")
    assert policy.quota_for("Maternity") == Decimal("90")
    assert policy.quota_for("Bereavement") == Decimal("12")
    assert policy.quota_for(None) == Decimal("12")


def test_charged_days_ignores_weekends():
    assert charged_days(MONDAY, date(2026, 3, 9), Decimal("1"), WEEKEND) == Decimal("6")
    assert charged_days(MONDAY, MONDAY, Decimal("0.5"), WEEKEND) == Decimal("0.5")
