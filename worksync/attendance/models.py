"""Attendance ORM models: AttendanceRecord, Holiday."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from worksync.common.constants import AttendanceSource, AttendanceStatus
from worksync.database import Base


class AttendanceRecord(Base):
    """One stored attendance row per (employee, calendar day)."""

    __tablename__ = "attendance_records"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),
        sa.CheckConstraint(
            "check_out IS NULL OR check_in IS NULL OR check_out >= check_in",
            name="ck_attendance_checkout_after_checkin",
        ),
        sa.Index("ix_attendance_records_date", "date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("employees.id"), nullable=False
    )
    date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    check_in: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    check_out: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    working_hours: Mapped[float] = mapped_column(sa.Float, default=0.0)
    overtime_hours: Mapped[float] = mapped_column(sa.Float, default=0.0)
    status: Mapped[AttendanceStatus] = mapped_column(
        sa.Enum(AttendanceStatus, name="attendance_status"),
        nullable=False,
        default=AttendanceStatus.absent,
    )
    leave_type: Mapped[Optional[str]] = mapped_column(sa.String(50))
    leave_duration: Mapped[Decimal] = mapped_column(
        sa.Numeric(2, 1), default=Decimal("0")
    )
    check_in_location: Mapped[Optional[dict]] = mapped_column(JSONB)
    check_out_location: Mapped[Optional[dict]] = mapped_column(JSONB)
    source: Mapped[AttendanceSource] = mapped_column(
        sa.Enum(AttendanceSource, name="attendance_source"),
        default=AttendanceSource.checkin,
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    employee: Mapped["worksync.core_hr.models.Employee"] = relationship(
        back_populates="attendance_records"
    )


class Holiday(Base):
    __tablename__ = "holidays"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(sa.String(150), nullable=False)
    date: Mapped[date] = mapped_column(sa.Date, nullable=False, unique=True)
    type: Mapped[Optional[str]] = mapped_column(sa.String(50))
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
