"""Payroll period state machine with transition validation."""

from __future__ import annotations

from enum import Enum

from payroll_cycle.exceptions import InvalidStateError


class PeriodStatus(str, Enum):
    """Payroll period status values."""

    DRAFT = "draft"
    CALCULATED = "calculated"
    APPROVED = "approved"
    PAID = "paid"
    LOCKED = "locked"


class InvalidTransitionError(InvalidStateError):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = PeriodStatus(from_status).value
        self.to_status = PeriodStatus(to_status).value
        self.reason = reason
        msg = f"Invalid transition from '{self.from_status}' to '{self.to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class PeriodStateMachine:
    """State machine for payroll period status transitions.

    Allowed transitions:
    - draft → calculated
    - calculated → calculated (recalculate)
    - calculated → approved
    - approved → paid

    paid and locked are terminal here.
    """

    # Define valid transitions: {from_status: [allowed_to_statuses]}
    VALID_TRANSITIONS: dict[PeriodStatus, list[PeriodStatus]] = {
        PeriodStatus.DRAFT: [PeriodStatus.CALCULATED],
        PeriodStatus.CALCULATED: [PeriodStatus.CALCULATED, PeriodStatus.APPROVED],
        PeriodStatus.APPROVED: [PeriodStatus.PAID],
        PeriodStatus.PAID: [],  # Terminal state
        PeriodStatus.LOCKED: [],  # Terminal state
    }

    # Statuses where (re)calculation is allowed
    CALCULATION_ALLOWED = {
        PeriodStatus.DRAFT,
        PeriodStatus.CALCULATED,
    }

    # Statuses where attendance entries can be modified
    INPUTS_MUTABLE = {
        PeriodStatus.DRAFT,
        PeriodStatus.CALCULATED,
    }

    # Statuses where results exist and can be shown
    RESULTS_VISIBLE = {
        PeriodStatus.CALCULATED,
        PeriodStatus.APPROVED,
        PeriodStatus.PAID,
        PeriodStatus.LOCKED,
    }

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(PeriodStatus(from_status), [])
        return PeriodStatus(to_status) in allowed

    @classmethod
    def validate_transition(
        cls, from_status: str, to_status: str, reason: str | None = None
    ) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(from_status, to_status, reason)

    @classmethod
    def can_calculate(cls, status: str) -> bool:
        """Check if calculation is allowed in this status."""
        return PeriodStatus(status) in cls.CALCULATION_ALLOWED

    @classmethod
    def can_modify_inputs(cls, status: str) -> bool:
        """Check if attendance entries can be modified."""
        return PeriodStatus(status) in cls.INPUTS_MUTABLE

    @classmethod
    def has_results(cls, status: str) -> bool:
        """Check if the period has a calculated result set."""
        return PeriodStatus(status) in cls.RESULTS_VISIBLE

    @classmethod
    def get_next_statuses(cls, current_status: str) -> list[PeriodStatus]:
        """Get list of valid next statuses from current status."""
        return list(cls.VALID_TRANSITIONS.get(PeriodStatus(current_status), []))

    @classmethod
    def is_terminal(cls, status: str) -> bool:
        """Check if no transition leaves this status."""
        return not cls.VALID_TRANSITIONS.get(PeriodStatus(status))
