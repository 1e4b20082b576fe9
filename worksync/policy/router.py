"""Organization settings router — policy read / partial update."""


from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from worksync.auth.dependencies import get_current_user, require_admin
from worksync.core_hr.models import Employee
from worksync.database import get_db
from worksync.policy.schemas import PolicySettings, PolicySettingsUpdate
from worksync.policy.service import PolicyService, get_policy_snapshot

router = APIRouter(prefix="", tags=["settings"])


@router.get("", response_model=PolicySettings)
async def get_settings(
    _: Employee = Depends(get_current_user),
    policy: PolicySettings = Depends(get_policy_snapshot),
):
    """Current policy; environment defaults until an admin saves one."""
    return policy


@router.put("", response_model=PolicySettings)
async def update_settings(
    body: PolicySettingsUpdate,
    actor: Employee = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await PolicyService.update_policy(db, actor.id, body)
