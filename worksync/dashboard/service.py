"""Dashboard service — read-only aggregation over attendance and leave.

All methods are static async, following the project convention. The
partitioning itself is a pure function so it can be checked without a
database.
"""

from __future__ import annotations

import uuid
from collections import Counter
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from worksync.attendance.models import AttendanceRecord
from worksync.attendance.schemas import EmployeeBrief
from worksync.attendance.service import AttendanceService
from worksync.common.constants import (
    AttendanceStatus,
    EmployeeStatus,
    LeaveStatus,
    UserRole,
)
from worksync.common.dates import local_today, month_bounds, year_bounds
from worksync.common.exceptions import NotFoundException
from worksync.core_hr.models import Employee
from worksync.dashboard.schemas import (
    EmployeeOverviewResponse,
    MonthAttendanceStats,
    OrgSnapshot,
)
from worksync.leave.allocator import charged_days
from worksync.leave.models import LeaveRequest
from worksync.policy.schemas import PolicySettings

HALF_DAY = Decimal("0.5")
_WORKED = (AttendanceStatus.present, AttendanceStatus.late)


@dataclass(frozen=True)
class SnapshotCounts:
    total: int
    present: int
    half_day: int
    on_leave: int
    absent: int


def partition_snapshot(
    employee_ids: Iterable[uuid.UUID],
    records: Iterable[Any],
    leaves: Iterable[Any],
) -> SnapshotCounts:
    """Place each roster employee in exactly one bucket.

    Priority: present/late > half_day (logged, or a 0.5-day approved leave)
    > on_leave (full-day approved leave) > absent. *records* and *leaves*
    belonging to employees outside the roster are ignored.
    """
    roster = set(employee_ids)
    status_by_employee = {
        r.employee_id: r.status for r in records if r.employee_id in roster
    }
    leave_by_employee: dict[uuid.UUID, Any] = {}
    for leave in leaves:
        if leave.employee_id in roster:
            leave_by_employee.setdefault(leave.employee_id, leave)

    present = half_day = on_leave = 0
    for employee_id in roster:
        status = status_by_employee.get(employee_id)
        leave = leave_by_employee.get(employee_id)
        if status in _WORKED:
            present += 1
        elif status == AttendanceStatus.half_day or (
            leave is not None and Decimal(str(leave.leave_duration)) == HALF_DAY
        ):
            half_day += 1
        elif leave is not None:
            on_leave += 1

    total = len(roster)
    return SnapshotCounts(
        total=total,
        present=present,
        half_day=half_day,
        on_leave=on_leave,
        absent=max(0, total - present - half_day - on_leave),
    )


class DashboardService:
    """Async dashboard aggregation queries."""

    # ═════════════════════════════════════════════════════════════════
    # GET /snapshot
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def get_org_snapshot(db: AsyncSession, day: date) -> OrgSnapshot:
        """Present / half-day / on-leave / absent counts for *day*."""
        roster = (
            await db.execute(
                select(Employee.id).where(
                    Employee.role == UserRole.employee,
                    Employee.status == EmployeeStatus.active,
                )
            )
        ).scalars().all()

        records = (
            await db.execute(
                select(AttendanceRecord).where(AttendanceRecord.date == day)
            )
        ).scalars().all()
        leaves = (
            await db.execute(
                select(LeaveRequest).where(
                    LeaveRequest.status == LeaveStatus.approved,
                    LeaveRequest.start_date <= day,
                    LeaveRequest.end_date >= day,
                )
            )
        ).scalars().all()

        counts = partition_snapshot(roster, records, leaves)
        return OrgSnapshot(
            date=day,
            total_employees=counts.total,
            present=counts.present,
            half_day=counts.half_day,
            on_leave=counts.on_leave,
            absent=counts.absent,
        )

    # ═════════════════════════════════════════════════════════════════
    # GET /employee-overview/{employee_id}
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def get_employee_overview(
        db: AsyncSession,
        employee_id: uuid.UUID,
        policy: PolicySettings,
        today: Optional[date] = None,
    ) -> EmployeeOverviewResponse:
        """Month-to-date attendance stats and this year's leave by type."""
        employee = await db.get(Employee, employee_id)
        if employee is None:
            raise NotFoundException("Employee", str(employee_id))

        today = today or local_today()
        month_start, _ = month_bounds(today.year, today.month)
        month = await AttendanceService.get_range(db, employee_id, month_start, today, policy)

        tally = Counter(entry.status for entry in month.data)
        stats = MonthAttendanceStats(
            present=tally[AttendanceStatus.present] + tally[AttendanceStatus.late],
            late=tally[AttendanceStatus.late],
            half_day=tally[AttendanceStatus.half_day],
            absent=tally[AttendanceStatus.absent],
            leave=tally[AttendanceStatus.leave],
            unpaid_leave=tally[AttendanceStatus.unpaid_leave],
            holiday=tally[AttendanceStatus.holiday],
            weekend=tally[AttendanceStatus.weekend],
        )

        year_start, year_end = year_bounds(today.year)
        approved = (
            await db.execute(
                select(LeaveRequest).where(
                    LeaveRequest.employee_id == employee_id,
                    LeaveRequest.status == LeaveStatus.approved,
                    LeaveRequest.start_date >= year_start,
                    LeaveRequest.start_date <= year_end,
                )
            )
        ).scalars().all()

        breakdown: dict[str, Decimal] = {}
        for leave in approved:
            key = leave.leave_type or "Other"
            breakdown[key] = breakdown.get(key, Decimal("0")) + charged_days(
                leave.start_date,
                leave.end_date,
                Decimal(str(leave.leave_duration)),
                policy.weekend_days,
            )

        return EmployeeOverviewResponse(
            employee=EmployeeBrief.model_validate(employee),
            year=today.year,
            month=today.month,
            attendance_stats=stats,
            leave_breakdown=breakdown,
        )
