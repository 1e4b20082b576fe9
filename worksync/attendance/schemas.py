"""Attendance Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Request / *Create / *Update → request bodies (write)
  - *Response / *Entry           → response bodies (read)
"""

from __future__ import annotations

import datetime as dt
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from worksync.common.constants import AttendanceSource, AttendanceStatus
from worksync.common.dates import localize
from worksync.policy.schemas import GeoPoint

# ═════════════════════════════════════════════════════════════════════
# Check in / out
# ═════════════════════════════════════════════════════════════════════


class CheckInRequest(BaseModel):
    """Payload for checking in or out. Location is mandatory when the
    organization enforces an office geofence."""

    location: Optional[GeoPoint] = None


class CheckOutRequest(CheckInRequest):
    pass


# ═════════════════════════════════════════════════════════════════════
# Manual admin edits
# ═════════════════════════════════════════════════════════════════════


def _as_local(value: Optional[datetime]) -> Optional[datetime]:
    # Naive times are wall-clock times at the office
    return localize(value) if value is not None else None


class ManualAttendanceCreate(BaseModel):
    """Admin-created record for any employee/day."""

    employee_id: uuid.UUID
    date: date
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    status: Optional[AttendanceStatus] = None
    leave_type: Optional[str] = Field(None, max_length=50)

    @field_validator("check_in", "check_out")
    @classmethod
    def _local_times(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_local(value)

    @model_validator(mode="after")
    def _checkout_after_checkin(self) -> ManualAttendanceCreate:
        if self.check_in and self.check_out and self.check_out < self.check_in:
            raise ValueError("check_out must not be earlier than check_in")
        return self


class ManualAttendanceUpdate(BaseModel):
    """Admin edit — omitted fields keep their stored value."""

    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    status: Optional[AttendanceStatus] = None
    leave_type: Optional[str] = Field(None, max_length=50)

    @field_validator("check_in", "check_out")
    @classmethod
    def _local_times(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_local(value)


# ═════════════════════════════════════════════════════════════════════
# Attendance entries
# ═════════════════════════════════════════════════════════════════════


class AttendanceEntry(BaseModel):
    """A stored record or a synthesized (virtual) entry for one day.

    Virtual entries have ``id=None`` and ``is_missing_record=True``; they are
    computed for reporting and never written back.
    """

    model_config = ConfigDict(from_attributes=True)

    id: Optional[uuid.UUID] = None
    employee_id: uuid.UUID
    date: date
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    working_hours: float = 0.0
    overtime_hours: float = 0.0
    status: AttendanceStatus
    leave_type: Optional[str] = None
    leave_duration: Decimal = Decimal("0")
    source: Optional[AttendanceSource] = None
    is_missing_record: bool = False


class AttendanceRecordResponse(AttendanceEntry):
    """Stored record returned by check-in/out and manual edits."""

    check_in_location: Optional[GeoPoint] = None
    check_out_location: Optional[GeoPoint] = None


class AttendanceRangeResponse(BaseModel):
    """One entry per calendar day of the requested range, ascending."""

    employee_id: uuid.UUID
    from_date: date
    to_date: date
    data: list[AttendanceEntry]


class EmployeeBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    designation: Optional[str] = None


class DayLogItem(BaseModel):
    employee: EmployeeBrief
    entry: AttendanceEntry


class AttendanceLogResponse(BaseModel):
    """All-employee log over a date range.

    A single-day range lists every active employee (stored or synthesized);
    a longer range lists stored records only, newest day first.
    """

    from_date: date
    to_date: date
    data: list[DayLogItem]


# ═════════════════════════════════════════════════════════════════════
# Holidays
# ═════════════════════════════════════════════════════════════════════


class HolidayCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    date: date
    type: Optional[str] = Field(None, max_length=50)


class HolidayUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    date: Optional[dt.date] = None
    type: Optional[str] = Field(None, max_length=50)


class HolidayResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    date: date
    type: Optional[str] = None
