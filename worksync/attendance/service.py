"""Attendance service layer — check in/out, manual edits, range views.

Business logic:
  - Check-in gate: employees only, one record per local calendar day
  - Check-out gate: half the scheduled shift must have elapsed
  - Office geofence on both events when the policy configures one
  - Admin manual create/update with recomputed hours and status
  - Range, month, daily and all-employee log views backed by the synthesizer
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from worksync.attendance.models import AttendanceRecord, Holiday
from worksync.attendance.schemas import (
    AttendanceEntry,
    AttendanceRangeResponse,
    AttendanceRecordResponse,
    AttendanceLogResponse,
    DayLogItem,
    EmployeeBrief,
    ManualAttendanceCreate,
    ManualAttendanceUpdate,
)
from worksync.attendance.synthesizer import synthesize_range
from worksync.common.audit import create_audit_entry
from worksync.common.constants import (
    HALF_DAY_HOURS,
    MANUAL_FULL_DAY_RATIO,
    AttendanceSource,
    AttendanceStatus,
    EmployeeStatus,
    LeaveStatus,
    UserRole,
)
from worksync.common.dates import as_utc, local_day, local_today, localize, month_bounds
from worksync.common.exceptions import (
    AlreadyCheckedOut,
    ConflictError,
    DuplicateCheckIn,
    EarlyCheckoutForbidden,
    NoActiveCheckIn,
    NotFoundException,
    RoleForbidden,
    ValidationException,
)
from worksync.config import settings
from worksync.core_hr.models import Employee
from worksync.leave.models import LeaveRequest
from worksync.policy.geofence import validate_location
from worksync.policy.schemas import GeoPoint, PolicySettings
from worksync.policy.shift import hours_between, is_late, standard_shift_hours

logger = logging.getLogger(__name__)


def _utc_or_none(value: Optional[datetime]) -> Optional[datetime]:
    return as_utc(localize(value)) if value is not None else None


# ═════════════════════════════════════════════════════════════════════
# AttendanceService
# ═════════════════════════════════════════════════════════════════════


class AttendanceService:
    """Async attendance operations: check in/out, manual edits, views."""

    # ── Helpers ─────────────────────────────────────────────────────

    @staticmethod
    async def _find_record(
        db: AsyncSession,
        employee_id: uuid.UUID,
        day: date,
    ) -> Optional[AttendanceRecord]:
        result = await db.execute(
            select(AttendanceRecord).where(
                AttendanceRecord.employee_id == employee_id,
                AttendanceRecord.date == day,
            )
        )
        return result.scalars().first()

    @staticmethod
    async def _get_employee(db: AsyncSession, employee_id: uuid.UUID) -> Employee:
        employee = await db.get(Employee, employee_id)
        if employee is None:
            raise NotFoundException("Employee", str(employee_id))
        return employee

    @staticmethod
    def _validate_date_range(from_date: date, to_date: date) -> None:
        """Ensure date range is ordered and within MAX_RANGE_DAYS."""

        if from_date > to_date:
            raise ValidationException(
                {"date_range": ["from_date must be before or equal to to_date."]}
            )
        if (to_date - from_date).days + 1 > settings.MAX_RANGE_DAYS:
            raise ValidationException(
                {"date_range": [f"Date range cannot exceed {settings.MAX_RANGE_DAYS} days."]}
            )

    @staticmethod
    def _check_same_day(check_in: Optional[datetime], day: date) -> None:
        """A record's check-in must fall on the record's own calendar day."""
        if check_in is not None and local_day(check_in) != day:
            raise ValidationException(
                {"check_in": [f"check_in must fall on {day.isoformat()} (local time)."]}
            )

    @staticmethod
    def _work_figures(
        check_in: datetime,
        check_out: datetime,
        policy: PolicySettings,
    ) -> tuple[float, float, float]:
        """Returns (raw_hours, working_hours, overtime_hours)."""
        hours = hours_between(check_in, check_out)
        shift = standard_shift_hours(policy.working_hours)
        return hours, round(hours, 2), round(max(0.0, hours - shift), 2)

    @staticmethod
    def _manual_status(
        check_in: Optional[datetime],
        check_out: Optional[datetime],
        policy: PolicySettings,
    ) -> AttendanceStatus:
        """Status for an admin edit when none is supplied explicitly."""
        if check_in is None:
            return AttendanceStatus.present
        if check_out is not None:
            hours = hours_between(check_in, check_out)
            shift = standard_shift_hours(policy.working_hours)
            if hours < HALF_DAY_HOURS or hours < MANUAL_FULL_DAY_RATIO * shift:
                return AttendanceStatus.half_day
        if is_late(check_in, policy.working_hours):
            return AttendanceStatus.late
        return AttendanceStatus.present

    @staticmethod
    def _apply_manual_times(
        record: AttendanceRecord,
        policy: PolicySettings,
        status: Optional[AttendanceStatus],
    ) -> None:
        if record.check_in and record.check_out:
            _, worked, overtime = AttendanceService._work_figures(
                record.check_in, record.check_out, policy,
            )
            record.working_hours = worked
            record.overtime_hours = overtime
        else:
            record.working_hours = 0.0
            record.overtime_hours = 0.0
        record.status = status or AttendanceService._manual_status(
            record.check_in, record.check_out, policy,
        )

    @staticmethod
    def _snapshot(record: AttendanceRecord) -> dict:
        return AttendanceRecordResponse.model_validate(record).model_dump(mode="json")

    # ── Check in ────────────────────────────────────────────────────

    @staticmethod
    async def check_in(
        db: AsyncSession,
        employee: Employee,
        policy: PolicySettings,
        now: datetime,
        location: Optional[GeoPoint] = None,
    ) -> AttendanceRecordResponse:
        """Open today's attendance record for *employee*."""

        if employee.role != UserRole.employee:
            raise RoleForbidden(employee.role.value, "check in")

        # rollback below expires ORM state; keep the id as a plain value
        employee_id = employee.id
        today = local_day(now)
        if await AttendanceService._find_record(db, employee_id, today) is not None:
            logger.warning("Duplicate check-in by %s on %s", employee_id, today)
            raise DuplicateCheckIn()

        validate_location(policy.office_location, location)

        status = (
            AttendanceStatus.late
            if is_late(now, policy.working_hours)
            else AttendanceStatus.present
        )
        record = AttendanceRecord(
            employee_id=employee_id,
            date=today,
            check_in=as_utc(now),
            status=status,
            working_hours=0.0,
            overtime_hours=0.0,
            leave_duration=0,
            check_in_location=location.model_dump() if location else None,
            source=AttendanceSource.checkin,
        )
        db.add(record)
        try:
            await db.flush()
        except IntegrityError:
            # A concurrent check-in committed first.
            await db.rollback()
            logger.warning("Concurrent check-in lost by %s on %s", employee_id, today)
            raise DuplicateCheckIn() from None

        await create_audit_entry(
            db,
            action="check_in",
            entity_type="attendance_record",
            entity_id=record.id,
            actor_id=employee.id,
            new_values={"status": status.value, "check_in": now.isoformat()},
        )
        logger.info("Check-in %s on %s (%s)", employee.id, today, status.value)
        return AttendanceRecordResponse.model_validate(record)

    # ── Check out ───────────────────────────────────────────────────

    @staticmethod
    async def check_out(
        db: AsyncSession,
        employee: Employee,
        policy: PolicySettings,
        now: datetime,
        location: Optional[GeoPoint] = None,
    ) -> AttendanceRecordResponse:
        """Close today's record, computing worked and overtime hours."""

        today = local_day(now)
        record = await AttendanceService._find_record(db, employee.id, today)
        if record is None or record.check_in is None:
            raise NoActiveCheckIn()
        if record.check_out is not None:
            raise AlreadyCheckedOut()

        hours, worked, overtime = AttendanceService._work_figures(
            record.check_in, now, policy,
        )
        required = standard_shift_hours(policy.working_hours) / 2
        if hours < required:
            logger.warning(
                "Early check-out by %s: %.2fh of %.2fh", employee.id, hours, required,
            )
            raise EarlyCheckoutForbidden(hours, required)

        validate_location(policy.office_location, location)

        old_status = record.status
        record.check_out = as_utc(now)
        record.check_out_location = location.model_dump() if location else None
        record.working_hours = worked
        record.overtime_hours = overtime
        if hours < HALF_DAY_HOURS and record.status != AttendanceStatus.late:
            record.status = AttendanceStatus.half_day
        record.updated_at = datetime.now(timezone.utc)
        await db.flush()

        await create_audit_entry(
            db,
            action="check_out",
            entity_type="attendance_record",
            entity_id=record.id,
            actor_id=employee.id,
            old_values={"status": old_status.value},
            new_values={
                "status": record.status.value,
                "working_hours": worked,
                "overtime_hours": overtime,
            },
        )
        logger.info(
            "Check-out %s on %s: %.2fh worked, %.2fh overtime",
            employee.id, today, worked, overtime,
        )
        return AttendanceRecordResponse.model_validate(record)

    # ── Manual edits (admin) ────────────────────────────────────────

    @staticmethod
    async def create_manual(
        db: AsyncSession,
        actor: Employee,
        policy: PolicySettings,
        data: ManualAttendanceCreate,
    ) -> AttendanceRecordResponse:
        """Create a record for any employee/day, bypassing gate and geofence."""

        AttendanceService._check_same_day(data.check_in, data.date)
        await AttendanceService._get_employee(db, data.employee_id)
        if await AttendanceService._find_record(db, data.employee_id, data.date):
            raise ConflictError("date", data.date.isoformat())

        record = AttendanceRecord(
            employee_id=data.employee_id,
            date=data.date,
            check_in=_utc_or_none(data.check_in),
            check_out=_utc_or_none(data.check_out),
            leave_type=data.leave_type,
            leave_duration=0,
            source=AttendanceSource.manual,
        )
        AttendanceService._apply_manual_times(record, policy, data.status)
        db.add(record)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("date", data.date.isoformat()) from None

        await create_audit_entry(
            db,
            action="create",
            entity_type="attendance_record",
            entity_id=record.id,
            actor_id=actor.id,
            new_values=AttendanceService._snapshot(record),
        )
        logger.info(
            "Manual record for %s on %s by %s", data.employee_id, data.date, actor.id,
        )
        return AttendanceRecordResponse.model_validate(record)

    @staticmethod
    async def update_manual(
        db: AsyncSession,
        actor: Employee,
        policy: PolicySettings,
        record_id: uuid.UUID,
        data: ManualAttendanceUpdate,
    ) -> AttendanceRecordResponse:
        """Edit an existing record; omitted fields keep their stored value."""

        record = await db.get(AttendanceRecord, record_id)
        if record is None:
            raise NotFoundException("AttendanceRecord", str(record_id))

        old_values = AttendanceService._snapshot(record)
        changes = data.model_dump(exclude_unset=True)
        check_in = (
            _utc_or_none(data.check_in) if "check_in" in changes else record.check_in
        )
        check_out = (
            _utc_or_none(data.check_out) if "check_out" in changes else record.check_out
        )
        AttendanceService._check_same_day(check_in, record.date)
        if check_in and check_out and hours_between(check_in, check_out) < 0:
            raise ValidationException(
                {"check_out": ["check_out must not be earlier than check_in."]}
            )

        record.check_in = check_in
        record.check_out = check_out
        if "leave_type" in changes:
            record.leave_type = data.leave_type
        record.source = AttendanceSource.manual
        AttendanceService._apply_manual_times(record, policy, data.status)
        record.updated_at = datetime.now(timezone.utc)
        await db.flush()

        await create_audit_entry(
            db,
            action="update",
            entity_type="attendance_record",
            entity_id=record.id,
            actor_id=actor.id,
            old_values=old_values,
            new_values=AttendanceService._snapshot(record),
        )
        return AttendanceRecordResponse.model_validate(record)

    # ── Views ───────────────────────────────────────────────────────

    @staticmethod
    async def _load_holidays(
        db: AsyncSession,
        start: date,
        end: date,
    ) -> Sequence[Holiday]:
        result = await db.execute(
            select(Holiday).where(Holiday.date >= start, Holiday.date <= end)
        )
        return result.scalars().all()

    @staticmethod
    async def _build_entries(
        db: AsyncSession,
        employee: Employee,
        start: date,
        end: date,
        policy: PolicySettings,
    ) -> list[AttendanceEntry]:
        records = await db.execute(
            select(AttendanceRecord).where(
                AttendanceRecord.employee_id == employee.id,
                AttendanceRecord.date >= start,
                AttendanceRecord.date <= end,
            )
        )
        leaves = await db.execute(
            select(LeaveRequest).where(
                LeaveRequest.employee_id == employee.id,
                LeaveRequest.status == LeaveStatus.approved,
                LeaveRequest.start_date <= end,
                LeaveRequest.end_date >= start,
            )
        )
        holidays = await AttendanceService._load_holidays(db, start, end)

        return synthesize_range(
            employee.id,
            start,
            end,
            joining_date=employee.joining_date,
            records=records.scalars().all(),
            holidays=holidays,
            leaves=leaves.scalars().all(),
            weekend_days=policy.weekend_days,
        )

    @staticmethod
    async def get_range(
        db: AsyncSession,
        employee_id: uuid.UUID,
        start: date,
        end: date,
        policy: PolicySettings,
    ) -> AttendanceRangeResponse:
        """One entry per calendar day, stored or synthesized, ascending."""

        AttendanceService._validate_date_range(start, end)
        employee = await AttendanceService._get_employee(db, employee_id)
        entries = await AttendanceService._build_entries(db, employee, start, end, policy)
        return AttendanceRangeResponse(
            employee_id=employee_id, from_date=start, to_date=end, data=entries,
        )

    @staticmethod
    async def get_month(
        db: AsyncSession,
        employee_id: uuid.UUID,
        year: int,
        month: int,
        policy: PolicySettings,
    ) -> AttendanceRangeResponse:
        start, end = month_bounds(year, month)
        return await AttendanceService.get_range(db, employee_id, start, end, policy)

    @staticmethod
    async def get_daily(
        db: AsyncSession,
        employee_id: uuid.UUID,
        policy: PolicySettings,
        day: Optional[date] = None,
    ) -> Optional[AttendanceEntry]:
        """Entry for *day* (default: local today); None before joining."""

        day = day or local_today()
        response = await AttendanceService.get_range(db, employee_id, day, day, policy)
        return response.data[0] if response.data else None

    @staticmethod
    async def get_logs(
        db: AsyncSession,
        start: date,
        end: date,
        policy: PolicySettings,
        status: Optional[AttendanceStatus] = None,
    ) -> AttendanceLogResponse:
        """All-employee log for ``[start, end]``, optionally by status.

        A single day is reconciled per employee so missing records show up
        as virtual entries; a longer range returns stored records only.
        """

        AttendanceService._validate_date_range(start, end)
        if start == end:
            items = await AttendanceService._day_log_items(db, start, policy, status)
        else:
            items = await AttendanceService._stored_log_items(db, start, end, status)
        return AttendanceLogResponse(from_date=start, to_date=end, data=items)

    @staticmethod
    async def _day_log_items(
        db: AsyncSession,
        day: date,
        policy: PolicySettings,
        status: Optional[AttendanceStatus],
    ) -> list[DayLogItem]:
        employees = (
            await db.execute(
                select(Employee)
                .where(
                    Employee.role == UserRole.employee,
                    Employee.status == EmployeeStatus.active,
                )
                .order_by(Employee.name)
            )
        ).scalars().all()

        items: list[DayLogItem] = []
        for employee in employees:
            if not employee.has_joined_by(day):
                continue
            entries = await AttendanceService._build_entries(db, employee, day, day, policy)
            items.extend(
                DayLogItem(employee=EmployeeBrief.model_validate(employee), entry=entry)
                for entry in entries
                if status is None or entry.status == status
            )
        return items

    @staticmethod
    async def _stored_log_items(
        db: AsyncSession,
        start: date,
        end: date,
        status: Optional[AttendanceStatus],
    ) -> list[DayLogItem]:
        query = (
            select(AttendanceRecord, Employee)
            .join(Employee, Employee.id == AttendanceRecord.employee_id)
            .where(AttendanceRecord.date >= start, AttendanceRecord.date <= end)
        )
        if status is not None:
            query = query.where(AttendanceRecord.status == status)
        rows = await db.execute(
            query.order_by(AttendanceRecord.date.desc(), Employee.name)
        )
        return [
            DayLogItem(
                employee=EmployeeBrief.model_validate(employee),
                entry=AttendanceEntry.model_validate(record),
            )
            for record, employee in rows.all()
        ]
