"""Business-rule errors raised by payroll services."""

from __future__ import annotations


class PayrollError(Exception):
    """Base class for user-presentable payroll failures."""

    code = "PAYROLL_ERROR"


class PayrollNotFoundError(PayrollError):
    """Raised when a referenced period, result, entry or employee does not exist."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: object):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class EmptyInputError(PayrollError):
    """Raised when there is nothing to calculate or aggregate."""

    code = "EMPTY_INPUT"


class DuplicateEntryError(PayrollError):
    """Raised when an employee already has an entry in the period."""

    code = "DUPLICATE"

    def __init__(self, period_id: object, employee_id: object):
        self.period_id = period_id
        self.employee_id = employee_id
        super().__init__(
            f"Employee {employee_id} already has an entry in period {period_id}"
        )


class InvalidStateError(PayrollError):
    """Raised when an operation is not permitted in the period's current status."""

    code = "INVALID_STATE"


class InvalidInputError(PayrollError):
    """Raised when caller-supplied values are out of range."""

    code = "INVALID_INPUT"
