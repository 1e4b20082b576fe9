"""Auth dependencies — JWT validation, role enforcement.

Accounts and login live outside this service; it only verifies the bearer
token minted for an employee and loads that employee from the roster.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable

from fastapi import Depends, Request
from fastapi.exceptions import HTTPException
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from worksync.common.constants import ADMIN_ROLES, EmployeeStatus, UserRole
from worksync.common.exceptions import ForbiddenException
from worksync.config import settings
from worksync.core_hr.models import Employee
from worksync.database import get_db

# Statuses that may no longer authenticate
_LOCKED_OUT = (EmployeeStatus.inactive, EmployeeStatus.terminated, EmployeeStatus.blocked)


def create_access_token(employee_id: uuid.UUID, role: UserRole) -> str:
    payload = {
        "sub": str(employee_id),
        "role": role.value,
        "type": "access",
        "exp": datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRY_HOURS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def _extract_bearer(request: Request) -> str:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header.")
    return auth_header[7:]


# ── Core dependency ─────────────────────────────────────────────────

async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Employee:
    """Validate JWT, return the authenticated Employee."""
    token = _extract_bearer(request)

    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired.")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token.")

    if payload.get("type") != "access":
        raise HTTPException(status_code=401, detail="Invalid token type.")

    try:
        employee_id = uuid.UUID(payload["sub"])
    except (KeyError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token subject.")

    employee = await db.get(Employee, employee_id)
    if employee is None or employee.status in _LOCKED_OUT:
        raise HTTPException(status_code=401, detail="User account is inactive or not found.")

    # Role comes from the roster, not the token, so demotions apply at once
    request.state.user_role = employee.role
    return employee


# ── Role-based dependency ───────────────────────────────────────────

def require_role(*allowed_roles: UserRole) -> Callable:
    """Return a FastAPI dependency that enforces role membership."""

    async def _check(employee: Employee = Depends(get_current_user)) -> Employee:
        if employee.role not in allowed_roles:
            raise ForbiddenException(
                detail=(
                    f"Role '{employee.role.value}' is not permitted. "
                    f"Required: {[r.value for r in allowed_roles]}."
                ),
            )
        return employee

    return _check


require_admin = require_role(*ADMIN_ROLES)


def ensure_can_view(viewer: Employee, employee_id: uuid.UUID) -> None:
    """Employees may only read their own attendance and leave data."""
    if viewer.role not in ADMIN_ROLES and viewer.id != employee_id:
        raise ForbiddenException("Not authorized to view this employee's records.")
