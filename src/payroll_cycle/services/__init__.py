"""Payroll cycle services."""

from payroll_cycle.services.state_machine import PeriodStateMachine, PeriodStatus, InvalidTransitionError
from payroll_cycle.services.period_service import PayrollPeriodService
from payroll_cycle.services.attendance_service import AttendanceService, EntryValues

__all__ = [
    "PeriodStateMachine",
    "PeriodStatus",
    "InvalidTransitionError",
    "PayrollPeriodService",
    "AttendanceService",
    "EntryValues",
]
