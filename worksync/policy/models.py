"""Policy ORM model: the organization-wide settings row."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from worksync.database import Base

SETTINGS_KEY = "organization"


class OrganizationSettings(Base):
    """Singleton row (``key='organization'``) holding the saved policy."""

    __tablename__ = "organization_settings"

    key: Mapped[str] = mapped_column(sa.String(50), primary_key=True, default=SETTINGS_KEY)
    company_name: Mapped[str] = mapped_column(sa.String(150), default="WorkSync")
    working_hours: Mapped[Optional[dict]] = mapped_column(JSONB)
    weekend_policy: Mapped[list] = mapped_column(JSONB, nullable=False)
    leave_policy: Mapped[dict] = mapped_column(JSONB, nullable=False)
    office_location: Mapped[Optional[dict]] = mapped_column(JSONB)
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )
    updated_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("employees.id"),
    )
