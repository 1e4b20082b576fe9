"""Attendance router — check in/out, manual edits, range views, holidays.

All endpoints require authentication. Manual edits, attendance logs and holiday
changes are restricted to admin / sub_admin.
"""


import uuid
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from worksync.attendance.holidays import HolidayService
from worksync.attendance.schemas import (
    AttendanceEntry,
    AttendanceLogResponse,
    AttendanceRangeResponse,
    AttendanceRecordResponse,
    CheckInRequest,
    CheckOutRequest,
    HolidayCreate,
    HolidayResponse,
    HolidayUpdate,
    ManualAttendanceCreate,
    ManualAttendanceUpdate,
)
from worksync.attendance.service import AttendanceService
from worksync.auth.dependencies import ensure_can_view, get_current_user, require_admin
from worksync.common.constants import AttendanceStatus
from worksync.common.dates import local_today
from worksync.common.rate_limit import limiter
from worksync.config import settings
from worksync.core_hr.models import Employee
from worksync.database import get_db
from worksync.policy.schemas import PolicySettings
from worksync.policy.service import get_policy_snapshot

router = APIRouter(prefix="", tags=["attendance"])
holidays_router = APIRouter(prefix="", tags=["holidays"])


# ── POST /check-in ──────────────────────────────────────────────────

@router.post("/check-in", response_model=AttendanceRecordResponse, status_code=201)
@limiter.limit(settings.ATTENDANCE_RATE_LIMIT)
async def check_in(
    request: Request,
    body: Optional[CheckInRequest] = None,
    employee: Employee = Depends(get_current_user),
    policy: PolicySettings = Depends(get_policy_snapshot),
    db: AsyncSession = Depends(get_db),
):
    """Open today's attendance record for the current user."""
    return await AttendanceService.check_in(
        db,
        employee,
        policy,
        datetime.now(timezone.utc),
        location=body.location if body else None,
    )


# ── POST /check-out ─────────────────────────────────────────────────

@router.post("/check-out", response_model=AttendanceRecordResponse)
@limiter.limit(settings.ATTENDANCE_RATE_LIMIT)
async def check_out(
    request: Request,
    body: Optional[CheckOutRequest] = None,
    employee: Employee = Depends(get_current_user),
    policy: PolicySettings = Depends(get_policy_snapshot),
    db: AsyncSession = Depends(get_db),
):
    """Close today's attendance record for the current user."""
    return await AttendanceService.check_out(
        db,
        employee,
        policy,
        datetime.now(timezone.utc),
        location=body.location if body else None,
    )


# ── Manual edits (admin) ────────────────────────────────────────────

@router.post("/manual", response_model=AttendanceRecordResponse, status_code=201)
async def create_manual_record(
    body: ManualAttendanceCreate,
    actor: Employee = Depends(require_admin),
    policy: PolicySettings = Depends(get_policy_snapshot),
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.create_manual(db, actor, policy, body)


@router.put("/manual/{record_id}", response_model=AttendanceRecordResponse)
async def update_manual_record(
    record_id: uuid.UUID,
    body: ManualAttendanceUpdate,
    actor: Employee = Depends(require_admin),
    policy: PolicySettings = Depends(get_policy_snapshot),
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.update_manual(db, actor, policy, record_id, body)


# ── Views ───────────────────────────────────────────────────────────

@router.get("/range/{employee_id}", response_model=AttendanceRangeResponse)
async def get_range(
    employee_id: uuid.UUID,
    from_date: date = Query(..., description="Start date (inclusive)"),
    to_date: date = Query(..., description="End date (inclusive)"),
    user: Employee = Depends(get_current_user),
    policy: PolicySettings = Depends(get_policy_snapshot),
    db: AsyncSession = Depends(get_db),
):
    """One entry per calendar day, stored or synthesized."""
    ensure_can_view(user, employee_id)
    return await AttendanceService.get_range(db, employee_id, from_date, to_date, policy)


@router.get("/monthly/{employee_id}", response_model=AttendanceRangeResponse)
async def get_monthly(
    employee_id: uuid.UUID,
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    user: Employee = Depends(get_current_user),
    policy: PolicySettings = Depends(get_policy_snapshot),
    db: AsyncSession = Depends(get_db),
):
    ensure_can_view(user, employee_id)
    return await AttendanceService.get_month(db, employee_id, year, month, policy)


@router.get("/daily/{employee_id}", response_model=Optional[AttendanceEntry])
async def get_daily(
    employee_id: uuid.UUID,
    user: Employee = Depends(get_current_user),
    policy: PolicySettings = Depends(get_policy_snapshot),
    db: AsyncSession = Depends(get_db),
):
    """Today's entry in organization-local time."""
    ensure_can_view(user, employee_id)
    return await AttendanceService.get_daily(db, employee_id, policy)


@router.get("/logs", response_model=AttendanceLogResponse)
async def get_logs(
    from_date: Optional[date] = Query(None, description="Defaults to today"),
    to_date: Optional[date] = Query(None, description="Defaults to from_date"),
    status: Optional[AttendanceStatus] = Query(None),
    _: Employee = Depends(require_admin),
    policy: PolicySettings = Depends(get_policy_snapshot),
    db: AsyncSession = Depends(get_db),
):
    start = from_date or local_today()
    return await AttendanceService.get_logs(
        db, start, to_date or start, policy, status=status,
    )


# ── Holidays ────────────────────────────────────────────────────────

@holidays_router.get("", response_model=list[HolidayResponse])
async def list_holidays(
    year: Optional[int] = Query(None),
    _: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await HolidayService.list_holidays(db, year)


@holidays_router.post("", response_model=HolidayResponse, status_code=201)
async def create_holiday(
    body: HolidayCreate,
    actor: Employee = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await HolidayService.create_holiday(db, actor.id, body)


@holidays_router.put("/{holiday_id}", response_model=HolidayResponse)
async def update_holiday(
    holiday_id: uuid.UUID,
    body: HolidayUpdate,
    actor: Employee = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await HolidayService.update_holiday(db, actor.id, holiday_id, body)


@holidays_router.delete("/{holiday_id}", status_code=204)
async def delete_holiday(
    holiday_id: uuid.UUID,
    actor: Employee = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await HolidayService.delete_holiday(db, actor.id, holiday_id)
