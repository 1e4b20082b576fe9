"""001 – Initial schema: roster, attendance, leave, holidays, settings, audit.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-17 10:00:00.000000+05:30
"""

from alembic import op
import sqlalchemy as sa

# Revision identifiers
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

ENUM_TYPES: list[tuple[str, list[str]]] = [
    ("employee_status", ["active", "inactive", "on_leave", "terminated", "blocked"]),
    ("user_role", ["admin", "sub_admin", "employee"]),
    (
        "attendance_status",
        [
            "present",
            "late",
            "half_day",
            "absent",
            "leave",
            "unpaid_leave",
            "holiday",
            "weekend",
        ],
    ),
    ("attendance_source", ["checkin", "manual", "leave"]),
    ("leave_status", ["pending", "approved", "rejected"]),
]


def _create_enum(name: str, values: list[str]) -> None:
    vals = ", ".join(f"'{v}'" for v in values)
    op.execute(f"CREATE TYPE {name} AS ENUM ({vals})")


def _drop_enum(name: str) -> None:
    op.execute(f"DROP TYPE IF EXISTS {name}")


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    for name, values in ENUM_TYPES:
        _create_enum(name, values)

    # ── 1. employees ──────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE employees (
            id              UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_code   VARCHAR(20) UNIQUE,
            name            VARCHAR(150) NOT NULL,
            email           VARCHAR(255) NOT NULL UNIQUE,
            designation     VARCHAR(150),
            role            user_role NOT NULL DEFAULT 'employee',
            status          employee_status NOT NULL DEFAULT 'active',
            joining_date    DATE,
            created_at      TIMESTAMPTZ DEFAULT NOW(),
            updated_at      TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_employees_role_status ON employees (role, status)")

    # ── 2. attendance_records ─────────────────────────────────────────────
    op.execute("""
        CREATE TABLE attendance_records (
            id                  UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id         UUID NOT NULL REFERENCES employees(id),
            date                DATE NOT NULL,
            check_in            TIMESTAMPTZ,
            check_out           TIMESTAMPTZ,
            working_hours       DOUBLE PRECISION DEFAULT 0,
            overtime_hours      DOUBLE PRECISION DEFAULT 0,
            status              attendance_status NOT NULL DEFAULT 'absent',
            leave_type          VARCHAR(50),
            leave_duration      NUMERIC(2,1) DEFAULT 0,
            check_in_location   JSONB,
            check_out_location  JSONB,
            source              attendance_source DEFAULT 'checkin',
            created_at          TIMESTAMPTZ DEFAULT NOW(),
            updated_at          TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT uq_attendance_employee_date UNIQUE (employee_id, date),
            CONSTRAINT ck_attendance_checkout_after_checkin
                CHECK (check_out IS NULL OR check_in IS NULL OR check_out >= check_in)
        )
    """)
    op.execute("CREATE INDEX ix_attendance_records_date ON attendance_records (date)")

    # ── 3. leave_requests ─────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE leave_requests (
            id                UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id       UUID NOT NULL REFERENCES employees(id),
            leave_type        VARCHAR(50) NOT NULL,
            reason            TEXT,
            start_date        DATE NOT NULL,
            end_date          DATE NOT NULL,
            leave_duration    NUMERIC(2,1) NOT NULL DEFAULT 1,
            status            leave_status NOT NULL DEFAULT 'pending',
            approved_by       UUID REFERENCES employees(id),
            reviewed_at       TIMESTAMPTZ,
            reviewer_remarks  TEXT,
            created_at        TIMESTAMPTZ DEFAULT NOW(),
            updated_at        TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT ck_leave_dates_ordered CHECK (end_date >= start_date)
        )
    """)
    op.execute(
        "CREATE INDEX ix_leave_requests_employee_dates "
        "ON leave_requests (employee_id, start_date, end_date)"
    )

    # ── 4. holidays ───────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE holidays (
            id          UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            name        VARCHAR(150) NOT NULL,
            date        DATE NOT NULL UNIQUE,
            type        VARCHAR(50),
            created_at  TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # ── 5. organization_settings ──────────────────────────────────────────
    op.execute("""
        CREATE TABLE organization_settings (
            key              VARCHAR(50) PRIMARY KEY,
            company_name     VARCHAR(150) DEFAULT 'WorkSync',
            working_hours    JSONB,
            weekend_policy   JSONB NOT NULL,
            leave_policy     JSONB NOT NULL,
            office_location  JSONB,
            updated_at       TIMESTAMPTZ DEFAULT NOW(),
            updated_by       UUID REFERENCES employees(id)
        )
    """)

    # ── 6. audit_trail ────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE audit_trail (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            actor_id     UUID REFERENCES employees(id),
            action       VARCHAR(50) NOT NULL,
            entity_type  VARCHAR(50) NOT NULL,
            entity_id    UUID NOT NULL,
            old_values   JSONB,
            new_values   JSONB,
            created_at   TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_audit_trail_actor_id ON audit_trail (actor_id)")
    op.execute("CREATE INDEX ix_audit_trail_entity ON audit_trail (entity_type, entity_id)")
    op.execute("CREATE INDEX ix_audit_trail_created_at ON audit_trail (created_at)")


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    # Drop tables in reverse dependency order
    tables = [
        "audit_trail",
        "organization_settings",
        "holidays",
        "leave_requests",
        "attendance_records",
        "employees",
    ]
    for t in tables:
        op.execute(f"DROP TABLE IF EXISTS {t} CASCADE")

    for name, _ in reversed(ENUM_TYPES):
        _drop_enum(name)
