"""Leave service layer — application, approval with quota allocation, listings.

Business logic:
  - Apply: future dates only, full-day leave a day in advance, no overlaps
  - Approve: admin / sub_admin only, terminal; writes one attendance record
    per non-weekend day, paid while the annual quota lasts, unpaid after
  - Reallocate: re-run the allocation of an approved request (idempotent)
  - Reject, and paginated listings (own, pending, all)
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from worksync.attendance.models import AttendanceRecord
from worksync.common.audit import create_audit_entry
from worksync.common.constants import (
    ADMIN_ROLES,
    LEAVE_STATUSES,
    AttendanceSource,
    AttendanceStatus,
    LeaveStatus,
)
from worksync.common.dates import local_day, local_today, year_bounds
from worksync.common.exceptions import (
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from worksync.common.pagination import PaginationParams, paginate
from worksync.core_hr.models import Employee
from worksync.leave.allocator import DayAllocation, plan_leave_allocation, used_leave_days
from worksync.leave.models import LeaveRequest
from worksync.leave.schemas import (
    DayAllocationOut,
    LeaveApprovalResponse,
    LeaveListResponse,
    LeaveRequestCreate,
    LeaveRequestOut,
)
from worksync.policy.schemas import PolicySettings

logger = logging.getLogger(__name__)

# Requests that still block the same dates
_ACTIVE_STATUSES = (LeaveStatus.pending, LeaveStatus.approved)


# ═════════════════════════════════════════════════════════════════════
# LeaveService
# ═════════════════════════════════════════════════════════════════════


class LeaveService:
    """Async leave operations."""

    # ── Helpers ─────────────────────────────────────────────────────

    @staticmethod
    async def _get_request(db: AsyncSession, leave_id: uuid.UUID) -> LeaveRequest:
        result = await db.execute(
            select(LeaveRequest)
            .where(LeaveRequest.id == leave_id)
            .options(selectinload(LeaveRequest.employee))
        )
        leave = result.scalars().first()
        if leave is None:
            raise NotFoundException("LeaveRequest", str(leave_id))
        return leave

    @staticmethod
    def _ensure_reviewer(reviewer: Employee, action: str) -> None:
        if reviewer.role not in ADMIN_ROLES:
            raise ForbiddenException(f"Only admins can {action} leave requests.")

    @staticmethod
    def _ensure_pending(leave: LeaveRequest) -> None:
        if leave.status != LeaveStatus.pending:
            raise ValidationException(
                {"status": [f"Leave request is already {leave.status.value}."]}
            )

    @staticmethod
    async def _allocate(
        db: AsyncSession,
        leave: LeaveRequest,
        policy: PolicySettings,
        now: datetime,
    ) -> LeaveApprovalResponse:
        """Plan and upsert per-day records for an approved request.

        Records already inside the request's own range are left out of the
        used balance, so running this twice writes the same statuses.
        """
        year_start, year_end = year_bounds(local_day(now).year)
        used_rows = await db.execute(
            select(AttendanceRecord).where(
                AttendanceRecord.employee_id == leave.employee_id,
                AttendanceRecord.date >= year_start,
                AttendanceRecord.date <= year_end,
                AttendanceRecord.status.in_(LEAVE_STATUSES),
            )
        )
        used = used_leave_days(
            used_rows.scalars().all(), exclude=(leave.start_date, leave.end_date),
        )
        quota = policy.leave_policy.quota_for(leave.leave_type)

        plan = plan_leave_allocation(
            leave.start_date,
            leave.end_date,
            duration=leave.leave_duration,
            quota=quota,
            used=used,
            weekend_days=policy.weekend_days,
        )

        existing_rows = await db.execute(
            select(AttendanceRecord).where(
                AttendanceRecord.employee_id == leave.employee_id,
                AttendanceRecord.date >= leave.start_date,
                AttendanceRecord.date <= leave.end_date,
            )
        )
        existing = {r.date: r for r in existing_rows.scalars().all()}

        for item in plan:
            LeaveService._upsert_day(db, existing.get(item.day), leave, item, now)
        await db.flush()

        paid = sum(1 for item in plan if item.status == AttendanceStatus.leave)
        return LeaveApprovalResponse(
            request=LeaveRequestOut.model_validate(leave),
            quota=quota,
            used_before=used,
            paid_days=paid,
            unpaid_days=len(plan) - paid,
            allocation=[DayAllocationOut.model_validate(item) for item in plan],
        )

    @staticmethod
    def _upsert_day(
        db: AsyncSession,
        record: Optional[AttendanceRecord],
        leave: LeaveRequest,
        item: DayAllocation,
        now: datetime,
    ) -> None:
        if record is None:
            record = AttendanceRecord(
                employee_id=leave.employee_id,
                date=item.day,
                working_hours=0.0,
                overtime_hours=0.0,
                source=AttendanceSource.leave,
            )
            db.add(record)
        record.status = item.status
        record.leave_type = leave.leave_type
        record.leave_duration = item.duration
        record.updated_at = now

    # ─────────────────────────────────────────────────────────────────
    # Apply
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def apply_leave(
        db: AsyncSession,
        employee: Employee,
        data: LeaveRequestCreate,
        today: Optional[date] = None,
    ) -> LeaveRequestOut:
        """Submit a pending leave request for *employee*."""

        today = today or local_today()
        if data.start_date < today:
            raise ValidationException(
                {"start_date": ["Cannot apply for leave on past dates."]}
            )
        if data.start_date == today and not data.is_half_day:
            raise ValidationException(
                {"start_date": ["Full-day leave must be requested at least one day in advance."]}
            )

        clash = (
            await db.execute(
                select(LeaveRequest)
                .where(
                    LeaveRequest.employee_id == employee.id,
                    LeaveRequest.status.in_(_ACTIVE_STATUSES),
                    LeaveRequest.start_date <= data.end_date,
                    LeaveRequest.end_date >= data.start_date,
                )
                .order_by(LeaveRequest.start_date)
            )
        ).scalars().first()
        if clash is not None:
            raise ValidationException(
                {"start_date": [
                    f"You already have a {clash.status.value} leave request from "
                    f"{clash.start_date.isoformat()} to {clash.end_date.isoformat()}."
                ]}
            )

        leave = LeaveRequest(
            employee=employee,
            leave_type=data.leave_type,
            reason=data.reason,
            start_date=data.start_date,
            end_date=data.end_date,
            leave_duration=data.leave_duration,
            status=LeaveStatus.pending,
        )
        db.add(leave)
        await db.flush()

        await create_audit_entry(
            db,
            action="apply",
            entity_type="leave_request",
            entity_id=leave.id,
            actor_id=employee.id,
            new_values=data.model_dump(mode="json"),
        )
        logger.info(
            "Leave applied by %s: %s %s..%s",
            employee.id, leave.leave_type, leave.start_date, leave.end_date,
        )
        return LeaveRequestOut.model_validate(leave)

    # ─────────────────────────────────────────────────────────────────
    # Approve / Reallocate
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def approve_leave(
        db: AsyncSession,
        leave_id: uuid.UUID,
        approver: Employee,
        policy: PolicySettings,
        now: datetime,
        *,
        remarks: Optional[str] = None,
    ) -> LeaveApprovalResponse:
        """Approve a pending request and allocate its days against the quota."""

        LeaveService._ensure_reviewer(approver, "approve")
        leave = await LeaveService._get_request(db, leave_id)
        LeaveService._ensure_pending(leave)

        leave.status = LeaveStatus.approved
        leave.approved_by = approver.id
        leave.reviewed_at = now
        leave.reviewer_remarks = remarks
        leave.updated_at = now

        result = await LeaveService._allocate(db, leave, policy, now)

        await create_audit_entry(
            db,
            action="approve",
            entity_type="leave_request",
            entity_id=leave.id,
            actor_id=approver.id,
            old_values={"status": LeaveStatus.pending.value},
            new_values={
                "status": LeaveStatus.approved.value,
                "paid_days": result.paid_days,
                "unpaid_days": result.unpaid_days,
            },
        )
        logger.info(
            "Leave %s approved by %s: %d paid, %d unpaid (quota %s, used %s)",
            leave.id, approver.id, result.paid_days, result.unpaid_days,
            result.quota, result.used_before,
        )
        return result

    @staticmethod
    async def reallocate(
        db: AsyncSession,
        leave_id: uuid.UUID,
        actor: Employee,
        policy: PolicySettings,
        now: datetime,
    ) -> LeaveApprovalResponse:
        """Re-run the allocation of an approved request, e.g. after a failure."""

        LeaveService._ensure_reviewer(actor, "reallocate")
        leave = await LeaveService._get_request(db, leave_id)
        if leave.status != LeaveStatus.approved:
            raise ValidationException(
                {"status": ["Only approved leave requests can be reallocated."]}
            )

        result = await LeaveService._allocate(db, leave, policy, now)
        await create_audit_entry(
            db,
            action="reallocate",
            entity_type="leave_request",
            entity_id=leave.id,
            actor_id=actor.id,
            new_values={"paid_days": result.paid_days, "unpaid_days": result.unpaid_days},
        )
        logger.info("Leave %s reallocated by %s", leave.id, actor.id)
        return result

    # ─────────────────────────────────────────────────────────────────
    # Reject
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def reject_leave(
        db: AsyncSession,
        leave_id: uuid.UUID,
        approver: Employee,
        *,
        remarks: Optional[str] = None,
    ) -> LeaveRequestOut:
        LeaveService._ensure_reviewer(approver, "reject")
        leave = await LeaveService._get_request(db, leave_id)
        LeaveService._ensure_pending(leave)

        now = datetime.now(timezone.utc)
        leave.status = LeaveStatus.rejected
        leave.approved_by = approver.id
        leave.reviewed_at = now
        leave.reviewer_remarks = remarks
        leave.updated_at = now
        await db.flush()

        await create_audit_entry(
            db,
            action="reject",
            entity_type="leave_request",
            entity_id=leave.id,
            actor_id=approver.id,
            old_values={"status": LeaveStatus.pending.value},
            new_values={"status": LeaveStatus.rejected.value, "remarks": remarks},
        )
        logger.info("Leave %s rejected by %s", leave.id, approver.id)
        return LeaveRequestOut.model_validate(leave)

    # ─────────────────────────────────────────────────────────────────
    # Listings
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def list_requests(
        db: AsyncSession,
        params: PaginationParams,
        *,
        employee_id: Optional[uuid.UUID] = None,
        status: Optional[LeaveStatus] = None,
        oldest_first: bool = False,
    ) -> LeaveListResponse:
        """Paginated leave requests, newest first unless *oldest_first*."""

        order = LeaveRequest.created_at.asc() if oldest_first else LeaveRequest.created_at.desc()
        query = (
            select(LeaveRequest)
            .options(selectinload(LeaveRequest.employee))
            .order_by(order)
        )
        if employee_id is not None:
            query = query.where(LeaveRequest.employee_id == employee_id)
        if status is not None:
            query = query.where(LeaveRequest.status == status)

        rows, meta = await paginate(db, query, params)
        return LeaveListResponse(
            data=[LeaveRequestOut.model_validate(r) for r in rows],
            meta=meta,
        )
