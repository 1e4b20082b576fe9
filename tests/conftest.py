"""Shared test fixtures — async DB, client, auth helpers, factories.

Reusable across all test modules (attendance, leave, dashboard, policy).
Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Set test JWT_SECRET before any other import touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")

import uuid
from datetime import date, datetime, timedelta, timezone
from typing import AsyncGenerator, Optional
from zoneinfo import ZoneInfo

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from worksync.common.constants import EmployeeStatus, UserRole
from worksync.common.rate_limit import limiter
from worksync.config import settings
from worksync.database import Base, get_db
from worksync.main import create_app

# Import ALL model modules so SQLAlchemy can resolve cross-module relationships
import worksync.common.audit  # noqa: F401
import worksync.core_hr.models  # noqa: F401
import worksync.attendance.models  # noqa: F401
import worksync.leave.models  # noqa: F401
import worksync.policy.models  # noqa: F401

# ── SQLite compat: compile PG-specific types to TEXT ────────────────

from sqlalchemy.dialects.postgresql import JSONB, UUID as PG_UUID
from sqlalchemy.ext.compiler import compiles


@compiles(JSONB, "sqlite")
def _jsonb_sqlite(element, compiler, **kw):
    return "TEXT"


@compiles(PG_UUID, "sqlite")
def _uuid_sqlite(element, compiler, **kw):
    return "CHAR(36)"


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)

# Organization-local zone used by the engine (settings.TIMEZONE)
IST = ZoneInfo(settings.TIMEZONE)

# A Monday; the week of 2026-03-02 .. 2026-03-08 ends Sat/Sun
MONDAY = date(2026, 3, 2)


def ist(day: date, hour: int, minute: int = 0) -> datetime:
    """Aware timestamp for a wall-clock time in organization-local time."""
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=IST)


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    limiter.reset()
    yield


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with DB dependency overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Model factories ─────────────────────────────────────────────────

def _make_employee(
    *,
    email: str = "test.user@worksync.app",
    name: str = "Test User",
    role: UserRole = UserRole.employee,
    status: EmployeeStatus = EmployeeStatus.active,
    joining_date: Optional[date] = date(2024, 1, 15),
    designation: Optional[str] = "Engineer",
) -> dict:
    return dict(
        id=uuid.uuid4(),
        employee_code=f"WS-{uuid.uuid4().hex[:6].upper()}",
        name=name,
        email=email,
        designation=designation,
        role=role,
        status=status,
        joining_date=joining_date,
        created_at=datetime.now(timezone.utc),
        updated_at=datetime.now(timezone.utc),
    )


async def _insert_employee(db: AsyncSession, **overrides):
    """Insert and commit an employee; return the ORM object."""
    from worksync.core_hr.models import Employee

    employee = Employee(**_make_employee(**overrides))
    db.add(employee)
    await db.commit()
    return employee


@pytest.fixture
async def employee(db):
    """An active employee who joined well before the test dates."""
    return await _insert_employee(db)


@pytest.fixture
async def admin(db):
    return await _insert_employee(
        db,
        email="admin@worksync.app",
        name="Admin User",
        role=UserRole.admin,
        designation="HR",
    )


# ── Auth helpers ────────────────────────────────────────────────────

def create_access_token(
    employee_id: uuid.UUID,
    role: UserRole = UserRole.employee,
    expired: bool = False,
) -> str:
    """Generate a JWT access token for testing."""
    if expired:
        exp = datetime.now(timezone.utc) - timedelta(hours=1)
    else:
        exp = datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRY_HOURS)
    payload = {
        "sub": str(employee_id),
        "role": role.value,
        "type": "access",
        "exp": exp,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def auth_headers(employee) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(employee.id, employee.role)}"}
