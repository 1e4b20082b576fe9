"""Core HR module — the Employee roster read by attendance and leave."""

from worksync.core_hr.models import Employee

__all__ = ["Employee"]
