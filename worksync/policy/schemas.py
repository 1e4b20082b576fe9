"""Organization policy Pydantic v2 schemas.

``PolicySettings`` is the immutable snapshot handed to every engine call.
It is frozen so that a request never observes a policy changing under it.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from worksync.common.constants import (
    DEFAULT_GEOFENCE_RADIUS_METERS,
    DEFAULT_LEAVE_POLICY_FIELD,
    LEAVE_TYPE_POLICY_FIELDS,
)
from worksync.common.dates import weekday_index, weekday_set
from worksync.config import settings

HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


# ═════════════════════════════════════════════════════════════════════
# Snapshot parts
# ═════════════════════════════════════════════════════════════════════


class WorkingHours(BaseModel):
    model_config = ConfigDict(frozen=True)

    check_in: str = Field(default="09:00", pattern=HHMM_PATTERN)
    check_out: str = Field(default="18:00", pattern=HHMM_PATTERN)
    grace_period: int = Field(default=15, ge=0, le=720, description="Minutes")


class LeavePolicy(BaseModel):
    """Annual paid-leave quota per leave type, in days."""

    model_config = ConfigDict(frozen=True)

    casual_leave: float = Field(default=12, ge=0)
    sick_leave: float = Field(default=10, ge=0)
    annual_leave: float = Field(default=18, ge=0)
    maternity_leave: float = Field(default=12, ge=0)

    def quota_for(self, leave_type: Optional[str]) -> Decimal:
        field = LEAVE_TYPE_POLICY_FIELDS.get(
            (leave_type or "").strip().lower(), DEFAULT_LEAVE_POLICY_FIELD,
        )
        return Decimal(str(getattr(self, field)))


class GeoPoint(BaseModel):
    """Client-reported location."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class OfficeLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    radius: float = Field(default=DEFAULT_GEOFENCE_RADIUS_METERS, gt=0, description="Metres")

    @property
    def is_configured(self) -> bool:
        return self.latitude is not None and self.longitude is not None


# ═════════════════════════════════════════════════════════════════════
# Snapshot
# ═════════════════════════════════════════════════════════════════════


class PolicySettings(BaseModel):
    """Organization policy snapshot consumed by the attendance engine."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    company_name: str = "WorkSync"
    working_hours: Optional[WorkingHours] = Field(default_factory=WorkingHours)
    weekend_policy: frozenset[str] = frozenset({"Sat", "Sun"})
    leave_policy: LeavePolicy = Field(default_factory=LeavePolicy)
    office_location: Optional[OfficeLocation] = None

    @field_validator("weekend_policy")
    @classmethod
    def _known_weekdays(cls, v: frozenset[str]) -> frozenset[str]:
        for name in v:
            weekday_index(name)
        return v

    @classmethod
    def defaults(cls) -> PolicySettings:
        """Snapshot built from environment defaults (no saved settings yet)."""
        return cls(
            working_hours=WorkingHours(
                check_in=settings.DEFAULT_CHECK_IN,
                check_out=settings.DEFAULT_CHECK_OUT,
                grace_period=settings.DEFAULT_GRACE_MINUTES,
            ),
            weekend_policy=frozenset(settings.default_weekend_list),
        )

    @property
    def weekend_days(self) -> frozenset[int]:
        return weekday_set(self.weekend_policy)

    def is_weekend(self, day: date) -> bool:
        return day.weekday() in self.weekend_days


# ═════════════════════════════════════════════════════════════════════
# Settings API
# ═════════════════════════════════════════════════════════════════════


class PolicySettingsUpdate(BaseModel):
    """Partial update; omitted sections keep their saved value."""

    company_name: Optional[str] = Field(None, max_length=150)
    working_hours: Optional[WorkingHours] = None
    weekend_policy: Optional[list[str]] = None
    leave_policy: Optional[LeavePolicy] = None
    office_location: Optional[OfficeLocation] = None
    clear_office_location: bool = False

    @field_validator("weekend_policy")
    @classmethod
    def _known_weekdays(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        if v is not None:
            for name in v:
                weekday_index(name)
        return v
