"""Leave router — apply, approve / reject, reallocate, listings.

All endpoints require authentication. Review and org-wide listings are
restricted to admin / sub_admin.
"""


import uuid
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from worksync.auth.dependencies import get_current_user, require_admin
from worksync.common.constants import LeaveStatus
from worksync.common.pagination import PaginationParams
from worksync.core_hr.models import Employee
from worksync.database import get_db
from worksync.leave.schemas import (
    LeaveApprovalResponse,
    LeaveListResponse,
    LeaveRequestCreate,
    LeaveRequestOut,
    LeaveReviewRequest,
)
from worksync.leave.service import LeaveService
from worksync.policy.schemas import PolicySettings
from worksync.policy.service import get_policy_snapshot

router = APIRouter(prefix="", tags=["leave"])


# ── POST /apply ─────────────────────────────────────────────────────

@router.post("/apply", response_model=LeaveRequestOut, status_code=201)
async def apply_leave(
    body: LeaveRequestCreate,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Submit a leave request for the current user."""
    return await LeaveService.apply_leave(db, employee, body)


# ── Listings ────────────────────────────────────────────────────────

@router.get("/my-leaves", response_model=LeaveListResponse)
async def my_leaves(
    status: Optional[LeaveStatus] = Query(None),
    pagination: PaginationParams = Depends(),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.list_requests(
        db, pagination, employee_id=employee.id, status=status,
    )


@router.get("/pending", response_model=LeaveListResponse)
async def pending_leaves(
    pagination: PaginationParams = Depends(),
    _: Employee = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Pending requests across the organization, oldest first."""
    return await LeaveService.list_requests(
        db, pagination, status=LeaveStatus.pending, oldest_first=True,
    )


@router.get("/all", response_model=LeaveListResponse)
async def all_leaves(
    status: Optional[LeaveStatus] = Query(None),
    employee_id: Optional[uuid.UUID] = Query(None),
    pagination: PaginationParams = Depends(),
    _: Employee = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.list_requests(
        db, pagination, employee_id=employee_id, status=status,
    )


# ── Review ──────────────────────────────────────────────────────────

@router.post("/{leave_id}/approve", response_model=LeaveApprovalResponse)
async def approve_leave(
    leave_id: uuid.UUID,
    body: Optional[LeaveReviewRequest] = None,
    approver: Employee = Depends(get_current_user),
    policy: PolicySettings = Depends(get_policy_snapshot),
    db: AsyncSession = Depends(get_db),
):
    """Approve and allocate the request's days against the annual quota."""
    return await LeaveService.approve_leave(
        db,
        leave_id,
        approver,
        policy,
        datetime.now(timezone.utc),
        remarks=body.remarks if body else None,
    )


@router.post("/{leave_id}/reject", response_model=LeaveRequestOut)
async def reject_leave(
    leave_id: uuid.UUID,
    body: Optional[LeaveReviewRequest] = None,
    approver: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.reject_leave(
        db, leave_id, approver, remarks=body.remarks if body else None,
    )


@router.post("/{leave_id}/reallocate", response_model=LeaveApprovalResponse)
async def reallocate_leave(
    leave_id: uuid.UUID,
    actor: Employee = Depends(require_admin),
    policy: PolicySettings = Depends(get_policy_snapshot),
    db: AsyncSession = Depends(get_db),
):
    """Re-run the allocation of an approved request; safe to repeat."""
    return await LeaveService.reallocate(
        db, leave_id, actor, policy, datetime.now(timezone.utc),
    )
