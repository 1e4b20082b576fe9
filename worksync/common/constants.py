"""Enums and constants for WorkSync — matching PostgreSQL ENUM types."""

from __future__ import annotations

import enum


# ── Employee / Roles ────────────────────────────────────────────────

class EmployeeStatus(str, enum.Enum):
    active = "active"
    inactive = "inactive"
    on_leave = "on_leave"
    terminated = "terminated"
    blocked = "blocked"


class UserRole(str, enum.Enum):
    admin = "admin"
    sub_admin = "sub_admin"
    employee = "employee"


ADMIN_ROLES: tuple[UserRole, ...] = (UserRole.admin, UserRole.sub_admin)


# ── Attendance ──────────────────────────────────────────────────────

class AttendanceStatus(str, enum.Enum):
    present = "present"
    late = "late"
    half_day = "half_day"
    absent = "absent"
    leave = "leave"
    unpaid_leave = "unpaid_leave"
    holiday = "holiday"
    weekend = "weekend"


class AttendanceSource(str, enum.Enum):
    checkin = "checkin"
    manual = "manual"
    leave = "leave"


LEAVE_STATUSES: tuple[AttendanceStatus, ...] = (
    AttendanceStatus.leave,
    AttendanceStatus.unpaid_leave,
)


# ── Leave ───────────────────────────────────────────────────────────

class LeaveStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


# Leave type tag → LeavePolicy field holding its annual quota.
# Unmapped tags fall back to the casual quota.
LEAVE_TYPE_POLICY_FIELDS: dict[str, str] = {
    "casual": "casual_leave",
    "sick": "sick_leave",
    "annual": "annual_leave",
    "maternity": "maternity_leave",
}
DEFAULT_LEAVE_POLICY_FIELD = "casual_leave"


# ── Shift policy ────────────────────────────────────────────────────

STANDARD_SHIFT_HOURS = 9.0
HALF_DAY_HOURS = 4.0
MANUAL_FULL_DAY_RATIO = 0.8


# ── Geofence ────────────────────────────────────────────────────────

EARTH_RADIUS_METERS = 6_371_000
DEFAULT_GEOFENCE_RADIUS_METERS = 100


# ── Misc constants ──────────────────────────────────────────────────

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 50
