"""Core HR ORM model: Employee.

The roster is owned by the account subsystem; attendance and leave code only
reads it (identity, role, status, joining date).
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from worksync.common.constants import EmployeeStatus, UserRole
from worksync.database import Base

if TYPE_CHECKING:
    from worksync.attendance.models import AttendanceRecord
    from worksync.leave.models import LeaveRequest


class Employee(Base):
    """Employee / user account as seen by the attendance engine."""

    __tablename__ = "employees"
    __table_args__ = (
        sa.Index("ix_employees_role_status", "role", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    employee_code: Mapped[Optional[str]] = mapped_column(sa.String(20), unique=True)
    name: Mapped[str] = mapped_column(sa.String(150), nullable=False)
    email: Mapped[str] = mapped_column(sa.String(255), unique=True, nullable=False)
    designation: Mapped[Optional[str]] = mapped_column(sa.String(150))
    role: Mapped[UserRole] = mapped_column(
        sa.Enum(UserRole, name="user_role"),
        nullable=False,
        default=UserRole.employee,
    )
    status: Mapped[EmployeeStatus] = mapped_column(
        sa.Enum(EmployeeStatus, name="employee_status"),
        nullable=False,
        default=EmployeeStatus.active,
    )
    joining_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )

    # ── Relationships ───────────────────────────────────────────────
    attendance_records: Mapped[list["AttendanceRecord"]] = relationship(
        back_populates="employee",
    )
    leave_requests: Mapped[list["LeaveRequest"]] = relationship(
        back_populates="employee", foreign_keys="LeaveRequest.employee_id",
    )

    @property
    def is_active(self) -> bool:
        return self.status == EmployeeStatus.active

    def has_joined_by(self, day: date) -> bool:
        """True when the employee is on the roster on *day*."""
        return self.joining_date is None or self.joining_date <= day

    def __repr__(self) -> str:
        return f"<Employee {self.email} {self.role.value}>"
