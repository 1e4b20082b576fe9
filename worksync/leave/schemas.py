"""Leave Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Create / *Request  → request bodies (write)
  - *Out / *Response    → response bodies (read)
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from worksync.attendance.schemas import EmployeeBrief
from worksync.common.constants import AttendanceStatus, LeaveStatus
from worksync.common.pagination import PaginationMeta

HALF_DAY = Decimal("0.5")
ALLOWED_DURATIONS = (Decimal("1"), HALF_DAY)


# ═════════════════════════════════════════════════════════════════════
# Leave Request — Create
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestCreate(BaseModel):
    """Payload for applying a leave request."""

    leave_type: str = Field(..., min_length=1, max_length=50, examples=["Casual"])
    start_date: date = Field(..., description="Leave start date (inclusive)")
    end_date: Optional[date] = Field(
        None, description="Leave end date (inclusive); ignored for half-day leave",
    )
    leave_duration: Decimal = Field(
        Decimal("1"), description="Days charged per leave day: 1 or 0.5",
    )
    reason: Optional[str] = Field(None, max_length=1000)

    @field_validator("leave_duration")
    @classmethod
    def _full_or_half(cls, v: Decimal) -> Decimal:
        if v not in ALLOWED_DURATIONS:
            raise ValueError("leave_duration must be 1 or 0.5.")
        return v

    @property
    def is_half_day(self) -> bool:
        return self.leave_duration == HALF_DAY

    @model_validator(mode="after")
    def validate_dates(self) -> LeaveRequestCreate:
        if self.is_half_day or self.end_date is None:
            self.end_date = self.start_date
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date.")
        if (self.end_date - self.start_date).days > 365:
            raise ValueError("Leave request cannot span more than 365 days.")
        return self


class LeaveReviewRequest(BaseModel):
    remarks: Optional[str] = Field(None, max_length=500)


# ═════════════════════════════════════════════════════════════════════
# Leave Request — Response
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestOut(BaseModel):
    """Full leave request response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    leave_type: str
    start_date: date
    end_date: date
    leave_duration: Decimal
    reason: Optional[str] = None
    status: LeaveStatus
    approved_by: Optional[uuid.UUID] = None
    reviewed_at: Optional[datetime] = None
    reviewer_remarks: Optional[str] = None
    created_at: datetime

    employee: Optional[EmployeeBrief] = None


class DayAllocationOut(BaseModel):
    """One day written by the quota allocator."""

    model_config = ConfigDict(from_attributes=True)

    day: date
    status: AttendanceStatus
    duration: Decimal


class LeaveApprovalResponse(BaseModel):
    """Approved request plus the per-day allocation it produced."""

    request: LeaveRequestOut
    quota: Decimal
    used_before: Decimal
    paid_days: int
    unpaid_days: int
    allocation: list[DayAllocationOut]


class LeaveListResponse(BaseModel):
    data: list[LeaveRequestOut]
    meta: PaginationMeta
