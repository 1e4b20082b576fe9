"""Dashboard router — organization snapshot and employee overview."""


import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from worksync.auth.dependencies import ensure_can_view, get_current_user, require_admin
from worksync.common.dates import local_today
from worksync.core_hr.models import Employee
from worksync.dashboard.schemas import EmployeeOverviewResponse, OrgSnapshot
from worksync.dashboard.service import DashboardService
from worksync.database import get_db
from worksync.policy.schemas import PolicySettings
from worksync.policy.service import get_policy_snapshot

router = APIRouter(prefix="", tags=["dashboard"])


@router.get("/snapshot", response_model=OrgSnapshot)
async def get_snapshot(
    day: Optional[date] = Query(None, description="Defaults to today"),
    _: Employee = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Present / half-day / on-leave / absent counts for one day."""
    return await DashboardService.get_org_snapshot(db, day or local_today())


@router.get("/employee-overview/{employee_id}", response_model=EmployeeOverviewResponse)
async def get_employee_overview(
    employee_id: uuid.UUID,
    user: Employee = Depends(get_current_user),
    policy: PolicySettings = Depends(get_policy_snapshot),
    db: AsyncSession = Depends(get_db),
):
    ensure_can_view(user, employee_id)
    return await DashboardService.get_employee_overview(db, employee_id, policy)
