"""Dashboard Pydantic v2 schemas — response models for all dashboard endpoints."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from worksync.attendance.schemas import EmployeeBrief


# ═════════════════════════════════════════════════════════════════════
# GET /snapshot
# ═════════════════════════════════════════════════════════════════════


class OrgSnapshot(BaseModel):
    """Disjoint day counts for the active employee roster.

    ``present + half_day + on_leave + absent == total_employees``.
    """

    date: date
    total_employees: int = Field(..., description="Active employees with role employee")
    present: int = Field(0, description="Checked in (on time or late)")
    half_day: int = Field(0, description="Logged half day or half-day approved leave")
    on_leave: int = Field(0, description="Full-day approved leave")
    absent: int = 0


# ═════════════════════════════════════════════════════════════════════
# GET /employee-overview/{employee_id}
# ═════════════════════════════════════════════════════════════════════


class MonthAttendanceStats(BaseModel):
    """Day counts over the month so far; ``present`` includes late days."""

    present: int = 0
    late: int = 0
    half_day: int = 0
    absent: int = 0
    leave: int = 0
    unpaid_leave: int = 0
    holiday: int = 0
    weekend: int = 0


class EmployeeOverviewResponse(BaseModel):
    employee: EmployeeBrief
    year: int
    month: int
    attendance_stats: MonthAttendanceStats
    leave_breakdown: dict[str, Decimal] = Field(
        default_factory=dict,
        description="Approved leave days this year, by leave type",
    )
