"""Virtual attendance synthesis — rule priority and range completeness.

Pure tests: stored rows, holidays and leaves are plain namespaces.
"""

from __future__ import annotations

import uuid
from datetime import date, timedelta
from decimal import Decimal
from types import SimpleNamespace

from worksync.attendance.synthesizer import (
    DayContext,
    resolve_day,
    synthesize_range,
)
from worksync.common.constants import AttendanceSource, AttendanceStatus

EMPLOYEE_ID = uuid.uuid4()
WEEKEND = frozenset({5, 6})
SATURDAY = date(2026, 3, 7)
MONDAY = date(2026, 3, 2)


def _record(day: date, status: AttendanceStatus = AttendanceStatus.present, **kw):
    fields = dict(
        id=uuid.uuid4(),
        employee_id=EMPLOYEE_ID,
        date=day,
        check_in=None,
        check_out=None,
        working_hours=0.0,
        overtime_hours=0.0,
        status=status,
        leave_type=None,
        leave_duration=Decimal("0"),
        source=AttendanceSource.checkin,
    )
    fields.update(kw)
    return SimpleNamespace(**fields)


def _leave(start: date, end: date, duration: str = "1", leave_type: str = "Casual"):
    return SimpleNamespace(
        start_date=start,
        end_date=end,
        leave_type=leave_type,
        leave_duration=Decimal(duration),
    )


def _holiday(day: date, name: str = "Holi"):
    return SimpleNamespace(date=day, name=name)


def _ctx(day: date, **kw) -> DayContext:
    return DayContext(employee_id=EMPLOYEE_ID, day=day, **kw)


# ═════════════════════════════════════════════════════════════════════
# 1. RULE PRIORITY
# ═════════════════════════════════════════════════════════════════════


def test_holiday_wins_over_weekend_and_leave():
    entry = resolve_day(_ctx(
        SATURDAY,
        holiday=_holiday(SATURDAY),
        leave=_leave(SATURDAY, SATURDAY),
        is_weekend=True,
    ))
    assert entry.status == AttendanceStatus.holiday
    assert entry.leave_type == "Holi"
    assert entry.is_missing_record is True
    assert entry.id is None


def test_stored_record_wins_over_holiday():
    record = _record(MONDAY, AttendanceStatus.late)
    entry = resolve_day(_ctx(MONDAY, record=record, holiday=_holiday(MONDAY)))
    assert entry.status == AttendanceStatus.late
    assert entry.id == record.id
    assert entry.is_missing_record is False


def test_weekend_wins_over_approved_leave():
    entry = resolve_day(_ctx(SATURDAY, leave=_leave(SATURDAY, SATURDAY), is_weekend=True))
    assert entry.status == AttendanceStatus.weekend


def test_full_day_leave_synthesizes_leave():
    entry = resolve_day(_ctx(MONDAY, leave=_leave(MONDAY, MONDAY, leave_type="Sick")))
    assert entry.status == AttendanceStatus.leave
    assert entry.leave_type == "Sick"
    assert entry.leave_duration == Decimal("1")


def test_half_day_leave_synthesizes_half_day():
    entry = resolve_day(_ctx(MONDAY, leave=_leave(MONDAY, MONDAY, duration="0.5")))
    assert entry.status == AttendanceStatus.half_day
    assert entry.leave_duration == Decimal("0.5")


def test_nothing_known_is_absent():
    entry = resolve_day(_ctx(MONDAY))
    assert entry.status == AttendanceStatus.absent
    assert entry.is_missing_record is True


# ═════════════════════════════════════════════════════════════════════
# 2. RANGES
# ═════════════════════════════════════════════════════════════════════


def test_full_month_has_one_entry_per_day():
    entries = synthesize_range(
        EMPLOYEE_ID,
        date(2026, 3, 1),
        date(2026, 3, 31),
        joining_date=date(2025, 1, 1),
        records=[_record(MONDAY)],
        holidays=[_holiday(date(2026, 3, 4))],
        leaves=[_leave(date(2026, 3, 5), date(2026, 3, 9))],
        weekend_days=WEEKEND,
    )

    days = [e.date for e in entries]
    assert len(entries) == 31
    assert days == sorted(days)
    assert len(set(days)) == 31

    by_day = {e.date: e.status for e in entries}
    assert by_day[MONDAY] == AttendanceStatus.present
    assert by_day[date(2026, 3, 4)] == AttendanceStatus.holiday
    assert by_day[date(2026, 3, 5)] == AttendanceStatus.leave
    assert by_day[date(2026, 3, 6)] == AttendanceStatus.leave
    assert by_day[date(2026, 3, 7)] == AttendanceStatus.weekend
    assert by_day[date(2026, 3, 8)] == AttendanceStatus.weekend
    assert by_day[date(2026, 3, 9)] == AttendanceStatus.leave
    assert by_day[date(2026, 3, 10)] == AttendanceStatus.absent


def test_days_before_joining_are_omitted():
    joining = date(2026, 3, 10)
    entries = synthesize_range(
        EMPLOYEE_ID,
        date(2026, 3, 1),
        date(2026, 3, 31),
        joining_date=joining,
        records=[],
        holidays=[],
        leaves=[],
        weekend_days=WEEKEND,
    )
    assert len(entries) == 22
    assert entries[0].date == joining
    assert all(e.date >= joining for e in entries)


def test_joining_after_range_yields_nothing():
    entries = synthesize_range(
        EMPLOYEE_ID,
        MONDAY,
        MONDAY + timedelta(days=6),
        joining_date=date(2026, 4, 1),
        records=[],
        holidays=[],
        leaves=[],
        weekend_days=WEEKEND,
    )
    assert entries == []


def test_leave_spanning_range_edges_is_clipped():
    entries = synthesize_range(
        EMPLOYEE_ID,
        MONDAY,
        MONDAY + timedelta(days=1),
        joining_date=None,
        records=[],
        holidays=[],
        leaves=[_leave(date(2026, 2, 20), date(2026, 3, 20))],
        weekend_days=WEEKEND,
    )
    assert [e.status for e in entries] == [AttendanceStatus.leave, AttendanceStatus.leave]
