"""Policy service — load the immutable snapshot, save admin changes."""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from worksync.common.audit import create_audit_entry
from worksync.database import get_db
from worksync.policy.models import SETTINGS_KEY, OrganizationSettings
from worksync.policy.schemas import (
    LeavePolicy,
    OfficeLocation,
    PolicySettings,
    PolicySettingsUpdate,
    WorkingHours,
)

logger = logging.getLogger(__name__)


class PolicyService:
    """Async access to the organization policy."""

    @staticmethod
    def _to_snapshot(row: OrganizationSettings) -> PolicySettings:
        return PolicySettings(
            company_name=row.company_name,
            working_hours=(
                WorkingHours(**row.working_hours) if row.working_hours else None
            ),
            weekend_policy=frozenset(row.weekend_policy or []),
            leave_policy=LeavePolicy(**(row.leave_policy or {})),
            office_location=(
                OfficeLocation(**row.office_location) if row.office_location else None
            ),
        )

    @staticmethod
    async def _get_row(db: AsyncSession) -> Optional[OrganizationSettings]:
        result = await db.execute(
            select(OrganizationSettings).where(OrganizationSettings.key == SETTINGS_KEY)
        )
        return result.scalars().first()

    @staticmethod
    async def get_policy(db: AsyncSession) -> PolicySettings:
        """Return the saved policy, or environment defaults when none is saved."""
        row = await PolicyService._get_row(db)
        if row is None:
            return PolicySettings.defaults()
        return PolicyService._to_snapshot(row)

    @staticmethod
    async def update_policy(
        db: AsyncSession,
        actor_id: uuid.UUID,
        data: PolicySettingsUpdate,
    ) -> PolicySettings:
        """Merge *data* into the saved policy (creating it on first save)."""
        current = await PolicyService.get_policy(db)
        row = await PolicyService._get_row(db)
        old_values = current.model_dump(mode="json") if row is not None else None

        merged = current.model_copy(update={
            k: v for k, v in {
                "company_name": data.company_name,
                "working_hours": data.working_hours,
                "weekend_policy": (
                    frozenset(data.weekend_policy)
                    if data.weekend_policy is not None else None
                ),
                "leave_policy": data.leave_policy,
                "office_location": data.office_location,
            }.items() if v is not None
        })
        if data.clear_office_location:
            merged = merged.model_copy(update={"office_location": None})
        # model_copy skips validation; round-trip to re-check the result
        merged = PolicySettings.model_validate(merged.model_dump())

        if row is None:
            row = OrganizationSettings(key=SETTINGS_KEY)
            db.add(row)

        row.company_name = merged.company_name
        row.working_hours = (
            merged.working_hours.model_dump() if merged.working_hours else None
        )
        row.weekend_policy = sorted(merged.weekend_policy)
        row.leave_policy = merged.leave_policy.model_dump()
        row.office_location = (
            merged.office_location.model_dump() if merged.office_location else None
        )
        row.updated_by = actor_id
        await db.flush()

        # The settings row is keyed by a string; audit against the actor.
        await create_audit_entry(
            db,
            action="update",
            entity_type="organization_settings",
            entity_id=actor_id,
            actor_id=actor_id,
            old_values=old_values,
            new_values=merged.model_dump(mode="json"),
        )
        logger.info("Organization policy updated by %s", actor_id)
        return merged


async def get_policy_snapshot(db: AsyncSession = Depends(get_db)) -> PolicySettings:
    """FastAPI dependency: the policy snapshot for this request."""
    return await PolicyService.get_policy(db)
