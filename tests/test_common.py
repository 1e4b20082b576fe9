"""Tests for common utilities — pagination, RFC 7807 errors, auth dependency.

Exercises worksync/common/* and worksync/auth/dependencies.py directly and
through the app.
"""

from __future__ import annotations

import uuid

import pytest
from jose import jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from worksync.auth.dependencies import create_access_token as issue_token
from worksync.auth.dependencies import ensure_can_view
from worksync.common.constants import EmployeeStatus, UserRole
from worksync.common.exceptions import (
    EarlyCheckoutForbidden,
    ForbiddenException,
    NotFoundException,
)
from worksync.common.pagination import PaginationParams, paginate
from worksync.config import settings
from worksync.core_hr.models import Employee
from tests.conftest import _insert_employee, auth_headers


# ═════════════════════════════════════════════════════════════════════
# PAGINATION
# ═════════════════════════════════════════════════════════════════════


class TestPaginate:
    """Tests for the paginate helper."""

    async def _seed(self, db: AsyncSession, count: int) -> None:
        for i in range(count):
            await _insert_employee(db, email=f"user{i}@worksync.app", name=f"User {i:02d}")

    async def test_first_page(self, db: AsyncSession):
        await self._seed(db, 5)
        rows, meta = await paginate(
            db, select(Employee).order_by(Employee.name), PaginationParams(page=1, page_size=2),
        )
        assert [r.name for r in rows] == ["User 00", "User 01"]
        assert meta.total == 5
        assert meta.total_pages == 3
        assert meta.has_next is True
        assert meta.has_prev is False

    async def test_last_page(self, db: AsyncSession):
        await self._seed(db, 5)
        rows, meta = await paginate(
            db, select(Employee).order_by(Employee.name), PaginationParams(page=3, page_size=2),
        )
        assert [r.name for r in rows] == ["User 04"]
        assert meta.has_next is False
        assert meta.has_prev is True

    async def test_filtered_count(self, db: AsyncSession):
        await self._seed(db, 3)
        await _insert_employee(db, email="boss@worksync.app", role=UserRole.admin)
        query = select(Employee).where(Employee.role == UserRole.admin)
        rows, meta = await paginate(db, query, PaginationParams(page=1, page_size=10))
        assert meta.total == len(rows) == 1

    async def test_empty(self, db: AsyncSession):
        rows, meta = await paginate(db, select(Employee), PaginationParams(page=1, page_size=10))
        assert rows == []
        assert meta.total == meta.total_pages == 0
        assert meta.has_next is False


# ═════════════════════════════════════════════════════════════════════
# PROBLEM DETAILS
# ═════════════════════════════════════════════════════════════════════


class TestProblemDetails:
    """Exception classes and their RFC 7807 rendering."""

    def test_not_found_message(self):
        exc = NotFoundException("Employee", "abc")
        assert exc.status_code == 404
        assert "abc" in exc.detail

    def test_early_checkout_carries_hours(self):
        exc = EarlyCheckoutForbidden(2.25, 4.5)
        assert exc.status_code == 409
        assert "4.50" in exc.detail
        assert "2.25" in exc.detail

    async def test_not_found_renders_problem_json(self, client, admin):
        missing = uuid.uuid4()
        resp = await client.get(
            f"/api/v1/attendance/range/{missing}",
            params={"from_date": "2026-03-02", "to_date": "2026-03-02"},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 404
        assert resp.headers["content-type"].startswith("application/problem+json")
        body = resp.json()
        assert body["type"].endswith("/not-found")
        assert body["status"] == 404

    async def test_request_validation_renders_field_errors(self, client, admin):
        resp = await client.get(
            f"/api/v1/attendance/monthly/{uuid.uuid4()}",
            params={"year": 2026, "month": 13},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 422
        body = resp.json()
        assert body["type"].endswith("/validation-error")
        assert "month" in body["errors"]

    async def test_health(self, client):
        resp = await client.get("/api/v1/health")
        assert resp.status_code == 200


# ═════════════════════════════════════════════════════════════════════
# AUTH DEPENDENCY
# ═════════════════════════════════════════════════════════════════════


class TestAuth:
    """Bearer token validation and visibility rules."""

    async def test_issued_token_is_accepted(self, client, employee):
        token = issue_token(employee.id, employee.role)
        resp = await client.get(
            "/api/v1/settings", headers={"Authorization": f"Bearer {token}"},
        )
        assert resp.status_code == 200

    async def test_garbage_token_is_rejected(self, client):
        resp = await client.get(
            "/api/v1/settings", headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert resp.status_code == 401

    async def test_refresh_token_type_is_rejected(self, client, employee):
        token = jwt.encode(
            {"sub": str(employee.id), "type": "refresh"},
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
        )
        resp = await client.get(
            "/api/v1/settings", headers={"Authorization": f"Bearer {token}"},
        )
        assert resp.status_code == 401

    async def test_blocked_employee_is_rejected(self, client, db):
        blocked = await _insert_employee(
            db, email="blocked@worksync.app", status=EmployeeStatus.blocked,
        )
        resp = await client.get("/api/v1/settings", headers=auth_headers(blocked))
        assert resp.status_code == 401

    async def test_role_is_read_from_roster(self, client, db, employee):
        # Token still claims admin after a demotion
        token = issue_token(employee.id, UserRole.admin)
        resp = await client.get(
            "/api/v1/dashboard/snapshot", headers={"Authorization": f"Bearer {token}"},
        )
        assert resp.status_code == 403

    async def test_visibility_rules(self, db, admin, employee):
        ensure_can_view(employee, employee.id)
        ensure_can_view(admin, employee.id)
        with pytest.raises(ForbiddenException):
            ensure_can_view(employee, admin.id)
