"""Audit trail model and async helper for recording attendance/leave changes."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column

from worksync.database import Base


# ── Immutable audit-trail table ─────────────────────────────────────

class AuditTrail(Base):
    """Immutable log of every significant data change."""

    __tablename__ = "audit_trail"
    __table_args__ = (
        sa.Index("ix_audit_trail_actor_id", "actor_id"),
        sa.Index("ix_audit_trail_entity", "entity_type", "entity_id"),
        sa.Index("ix_audit_trail_created_at", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    actor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("employees.id"),
    )
    action: Mapped[str] = mapped_column(sa.String(50), nullable=False)
    entity_type: Mapped[str] = mapped_column(sa.String(50), nullable=False)
    entity_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    old_values: Mapped[Optional[dict]] = mapped_column(JSONB)
    new_values: Mapped[Optional[dict]] = mapped_column(JSONB)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return (
            f"<AuditTrail {self.action} {self.entity_type}"
            f"/{self.entity_id} by {self.actor_id}>"
        )


# ── Helper to create an entry ───────────────────────────────────────

async def create_audit_entry(
    session: AsyncSession,
    *,
    action: str,
    entity_type: str,
    entity_id: uuid.UUID,
    actor_id: Optional[uuid.UUID] = None,
    old_values: Optional[dict[str, Any]] = None,
    new_values: Optional[dict[str, Any]] = None,
) -> AuditTrail:
    """
    Create and flush an audit-trail entry.

    Args:
        session: Async SQLAlchemy session.
        action: check_in | check_out | manual_create | approve | reject | etc.
        entity_type: e.g. "attendance_record", "leave_request".
        entity_id: UUID of the affected entity.
        actor_id: UUID of the employee performing the action.
        old_values: Previous state (for updates).
        new_values: New state (for creates/updates).
    """
    entry = AuditTrail(
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        old_values=old_values,
        new_values=new_values,
    )
    session.add(entry)
    await session.flush()
    return entry
