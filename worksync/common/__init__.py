"""Common module — shared utilities for WorkSync."""

from worksync.common.audit import AuditTrail, create_audit_entry
from worksync.common.constants import (
    ADMIN_ROLES,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    AttendanceSource,
    AttendanceStatus,
    EmployeeStatus,
    LeaveStatus,
    UserRole,
)
from worksync.common.exceptions import (
    AppException,
    ConflictError,
    ForbiddenException,
    NotFoundException,
    StateConflict,
    ValidationException,
    register_exception_handlers,
)
from worksync.common.pagination import (
    PaginationMeta,
    PaginationParams,
    paginate,
)

__all__ = [
    # Audit
    "AuditTrail",
    "create_audit_entry",
    # Constants / Enums
    "ADMIN_ROLES",
    "AttendanceSource",
    "AttendanceStatus",
    "EmployeeStatus",
    "LeaveStatus",
    "UserRole",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    # Exceptions
    "AppException",
    "ConflictError",
    "ForbiddenException",
    "NotFoundException",
    "StateConflict",
    "ValidationException",
    "register_exception_handlers",
    # Pagination
    "PaginationMeta",
    "PaginationParams",
    "paginate",
]
