"""Holiday calendar service — organization-wide non-working days."""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from worksync.attendance.models import Holiday
from worksync.attendance.schemas import HolidayCreate, HolidayResponse, HolidayUpdate
from worksync.common.audit import create_audit_entry
from worksync.common.dates import local_today, year_bounds
from worksync.common.exceptions import (
    ConflictError,
    NotFoundException,
    ValidationException,
)

logger = logging.getLogger(__name__)


class HolidayService:

    @staticmethod
    async def _get(db: AsyncSession, holiday_id: uuid.UUID) -> Holiday:
        holiday = await db.get(Holiday, holiday_id)
        if holiday is None:
            raise NotFoundException("Holiday", str(holiday_id))
        return holiday

    @staticmethod
    async def _ensure_free(
        db: AsyncSession,
        day: date,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        query = select(Holiday).where(Holiday.date == day)
        if exclude_id is not None:
            query = query.where(Holiday.id != exclude_id)
        if (await db.execute(query)).scalars().first() is not None:
            raise ConflictError("date", day.isoformat())

    @staticmethod
    def _ensure_not_past(holiday: Holiday, action: str) -> None:
        if holiday.date < local_today():
            raise ValidationException(
                {"date": [f"Cannot {action} a holiday that has already passed."]}
            )

    @staticmethod
    async def list_holidays(
        db: AsyncSession,
        year: Optional[int] = None,
    ) -> list[HolidayResponse]:
        query = select(Holiday).order_by(Holiday.date)
        if year is not None:
            start, end = year_bounds(year)
            query = query.where(Holiday.date >= start, Holiday.date <= end)
        result = await db.execute(query)
        return [HolidayResponse.model_validate(h) for h in result.scalars().all()]

    @staticmethod
    async def create_holiday(
        db: AsyncSession,
        actor_id: uuid.UUID,
        data: HolidayCreate,
    ) -> HolidayResponse:
        await HolidayService._ensure_free(db, data.date)
        holiday = Holiday(name=data.name, date=data.date, type=data.type)
        db.add(holiday)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type="holiday",
            entity_id=holiday.id,
            actor_id=actor_id,
            new_values=data.model_dump(mode="json"),
        )
        logger.info("Holiday %s added on %s", holiday.name, holiday.date)
        return HolidayResponse.model_validate(holiday)

    @staticmethod
    async def update_holiday(
        db: AsyncSession,
        actor_id: uuid.UUID,
        holiday_id: uuid.UUID,
        data: HolidayUpdate,
    ) -> HolidayResponse:
        """Past holidays are frozen; moving one into the past is rejected too."""
        holiday = await HolidayService._get(db, holiday_id)
        HolidayService._ensure_not_past(holiday, "edit")

        old_values = HolidayResponse.model_validate(holiday).model_dump(mode="json")
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if "date" in changes:
            if data.date < local_today():
                raise ValidationException({"date": ["Holiday date cannot be in the past."]})
            await HolidayService._ensure_free(db, data.date, exclude_id=holiday.id)
        for field, value in changes.items():
            setattr(holiday, field, value)
        await db.flush()

        await create_audit_entry(
            db,
            action="update",
            entity_type="holiday",
            entity_id=holiday.id,
            actor_id=actor_id,
            old_values=old_values,
            new_values=data.model_dump(mode="json", exclude_unset=True, exclude_none=True),
        )
        return HolidayResponse.model_validate(holiday)

    @staticmethod
    async def delete_holiday(
        db: AsyncSession,
        actor_id: uuid.UUID,
        holiday_id: uuid.UUID,
    ) -> None:
        holiday = await HolidayService._get(db, holiday_id)
        HolidayService._ensure_not_past(holiday, "delete")

        old_values = HolidayResponse.model_validate(holiday).model_dump(mode="json")
        await db.delete(holiday)
        await db.flush()

        await create_audit_entry(
            db,
            action="delete",
            entity_type="holiday",
            entity_id=holiday_id,
            actor_id=actor_id,
            old_values=old_values,
        )
        logger.info("Holiday %s on %s removed", old_values["name"], old_values["date"])
