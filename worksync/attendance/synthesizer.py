"""Virtual attendance synthesis.

Fills every calendar day of a range with exactly one entry. Each day is
resolved by walking ``DAY_RULES`` in order; the first rule that returns an
entry wins:

  1. holiday         — a holiday with no stored record for the day
  2. stored record   — passed through unchanged
  3. weekend         — weekday listed in the weekend policy
  4. approved leave  — ``leave``, or ``half_day`` for a 0.5-day request
  5. absence         — everything else

Days before the employee's joining date produce no entry.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Iterable, Optional, Sequence

from worksync.attendance.schemas import AttendanceEntry
from worksync.common.constants import AttendanceStatus
from worksync.common.dates import iter_days

HALF_DAY = Decimal("0.5")


@dataclass(frozen=True)
class DayContext:
    """Everything known about one employee on one calendar day."""

    employee_id: uuid.UUID
    day: date
    record: Optional[Any] = None
    holiday: Optional[Any] = None
    leave: Optional[Any] = None
    is_weekend: bool = False


Rule = Callable[[DayContext], Optional[AttendanceEntry]]


def _virtual(ctx: DayContext, status: AttendanceStatus, **fields: Any) -> AttendanceEntry:
    return AttendanceEntry(
        employee_id=ctx.employee_id,
        date=ctx.day,
        status=status,
        is_missing_record=True,
        **fields,
    )


# ── Rules ───────────────────────────────────────────────────────────

def holiday_rule(ctx: DayContext) -> Optional[AttendanceEntry]:
    if ctx.holiday is None or ctx.record is not None:
        return None
    return _virtual(ctx, AttendanceStatus.holiday, leave_type=ctx.holiday.name)


def stored_record_rule(ctx: DayContext) -> Optional[AttendanceEntry]:
    if ctx.record is None:
        return None
    return AttendanceEntry.model_validate(ctx.record)


def weekend_rule(ctx: DayContext) -> Optional[AttendanceEntry]:
    if not ctx.is_weekend:
        return None
    return _virtual(ctx, AttendanceStatus.weekend)


def approved_leave_rule(ctx: DayContext) -> Optional[AttendanceEntry]:
    if ctx.leave is None:
        return None
    duration = Decimal(str(ctx.leave.leave_duration))
    status = AttendanceStatus.half_day if duration == HALF_DAY else AttendanceStatus.leave
    return _virtual(
        ctx, status, leave_type=ctx.leave.leave_type, leave_duration=duration,
    )


def absence_rule(ctx: DayContext) -> Optional[AttendanceEntry]:
    return _virtual(ctx, AttendanceStatus.absent)


DAY_RULES: tuple[Rule, ...] = (
    holiday_rule,
    stored_record_rule,
    weekend_rule,
    approved_leave_rule,
    absence_rule,
)


def resolve_day(ctx: DayContext, rules: Sequence[Rule] = DAY_RULES) -> AttendanceEntry:
    for rule in rules:
        entry = rule(ctx)
        if entry is not None:
            return entry
    raise LookupError(f"No attendance rule matched {ctx.day.isoformat()}")


# ── Range ───────────────────────────────────────────────────────────

def index_leaves_by_day(
    leaves: Iterable[Any],
    start: date,
    end: date,
) -> dict[date, Any]:
    """Map each day in ``[start, end]`` to the approved leave covering it."""
    by_day: dict[date, Any] = {}
    for leave in leaves:
        first = max(leave.start_date, start)
        last = min(leave.end_date, end)
        for day in iter_days(first, last):
            by_day.setdefault(day, leave)
    return by_day


def synthesize_range(
    employee_id: uuid.UUID,
    start: date,
    end: date,
    *,
    joining_date: Optional[date],
    records: Iterable[Any],
    holidays: Iterable[Any],
    leaves: Iterable[Any],
    weekend_days: frozenset[int],
) -> list[AttendanceEntry]:
    """One entry per calendar day in ``[max(start, joining_date), end]``.

    *records* are the employee's stored rows, *holidays* carry ``date`` and
    ``name``, *leaves* are the employee's approved requests (anything with
    ``start_date``, ``end_date``, ``leave_type``, ``leave_duration``).
    """
    first = max(start, joining_date) if joining_date else start
    if first > end:
        return []

    record_by_day = {r.date: r for r in records}
    holiday_by_day = {h.date: h for h in holidays}
    leave_by_day = index_leaves_by_day(leaves, first, end)

    return [
        resolve_day(DayContext(
            employee_id=employee_id,
            day=day,
            record=record_by_day.get(day),
            holiday=holiday_by_day.get(day),
            leave=leave_by_day.get(day),
            is_weekend=day.weekday() in weekend_days,
        ))
        for day in iter_days(first, end)
    ]
