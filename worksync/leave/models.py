"""Leave ORM model: LeaveRequest."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from worksync.common.constants import LeaveStatus
from worksync.database import Base


class LeaveRequest(Base):
    __tablename__ = "leave_requests"
    __table_args__ = (
        sa.CheckConstraint("end_date >= start_date", name="ck_leave_dates_ordered"),
        sa.Index("ix_leave_requests_employee_dates", "employee_id", "start_date", "end_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("employees.id"), nullable=False
    )
    leave_type: Mapped[str] = mapped_column(sa.String(50), nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(sa.Text)
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    leave_duration: Mapped[Decimal] = mapped_column(
        sa.Numeric(2, 1), nullable=False, default=Decimal("1")
    )
    status: Mapped[LeaveStatus] = mapped_column(
        sa.Enum(LeaveStatus, name="leave_status"),
        nullable=False,
        default=LeaveStatus.pending,
    )
    approved_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("employees.id")
    )
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(
        sa.DateTime(timezone=True)
    )
    reviewer_remarks: Mapped[Optional[str]] = mapped_column(sa.Text)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    employee: Mapped["worksync.core_hr.models.Employee"] = relationship(
        back_populates="leave_requests", foreign_keys=[employee_id]
    )
    approver: Mapped[Optional["worksync.core_hr.models.Employee"]] = relationship(
        foreign_keys=[approved_by]
    )

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date
