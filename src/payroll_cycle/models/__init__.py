"""ORM models."""

from payroll_cycle.models.base import Base, TimestampMixin
from payroll_cycle.models.employee import Employee
from payroll_cycle.models.payroll import (
    PayrollAuditEvent,
    PayrollComponent,
    PayrollEntry,
    PayrollPeriod,
    PayrollResult,
    PayrollTaxBracket,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "Employee",
    "PayrollAuditEvent",
    "PayrollComponent",
    "PayrollEntry",
    "PayrollPeriod",
    "PayrollResult",
    "PayrollTaxBracket",
]
