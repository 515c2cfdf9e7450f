"""Attendance entry maintenance for payroll periods."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from payroll_cycle.calculators.tax_calculator import round_to_cents
from payroll_cycle.exceptions import (
    DuplicateEntryError,
    EmptyInputError,
    InvalidInputError,
    InvalidStateError,
    PayrollNotFoundError,
)
from payroll_cycle.models import Employee, PayrollEntry, PayrollPeriod
from payroll_cycle.models.base import utcnow
from payroll_cycle.services.period_service import PayrollPeriodService, normalize_notes
from payroll_cycle.services.state_machine import PeriodStateMachine

logger = logging.getLogger(__name__)


@dataclass
class EntryValues:
    """New attendance values for one entry. Missing numbers count as zero."""

    entry_id: UUID
    overtime_hours: Decimal | None = None
    absence_hours: Decimal | None = None
    lateness_hours: Decimal | None = None
    bonus_amount: Decimal | None = None
    notes: str | None = None

    def __post_init__(self) -> None:
        for name in ("overtime_hours", "absence_hours", "lateness_hours", "bonus_amount"):
            value = getattr(self, name)
            setattr(self, name, Decimal("0") if value is None else Decimal(value))

    def validate(self) -> None:
        """Raise InvalidInputError if any value is negative."""
        for name in ("overtime_hours", "absence_hours", "lateness_hours", "bonus_amount"):
            value = getattr(self, name)
            if value < 0:
                raise InvalidInputError(f"{name} must not be negative, got {value}")


class AttendanceService:
    """Adds and edits the attendance facts a calculation reads.

    Entries can only change while the period is draft or calculated.
    Editing a calculated period does not touch its results; the next
    calculation picks the new values up.
    """

    def __init__(self, session: AsyncSession, tenant_id: UUID):
        self.session = session
        self.tenant_id = tenant_id
        self.period_service = PayrollPeriodService(session, tenant_id)

    async def list_entries(self, period_id: UUID) -> list[PayrollEntry]:
        """List a period's entries ordered by employee name."""
        await self.period_service.require_period(period_id)
        result = await self.session.execute(
            select(PayrollEntry)
            .join(Employee, PayrollEntry.employee_id == Employee.employee_id)
            .where(PayrollEntry.payroll_period_id == period_id)
            .options(selectinload(PayrollEntry.employee))
            .order_by(Employee.full_name)
        )
        return list(result.scalars().all())

    async def add_entry(
        self,
        period_id: UUID,
        employee_id: UUID,
        requested_by: UUID | None = None,
    ) -> PayrollEntry:
        """Add a blank entry for an employee not yet in the period."""
        period = await self.period_service.require_period(period_id)
        self._check_inputs_mutable(period)

        employee = await self.session.execute(
            select(Employee).where(
                Employee.employee_id == employee_id,
                Employee.tenant_id == self.tenant_id,
            )
        )
        if employee.scalar_one_or_none() is None:
            raise PayrollNotFoundError("Employee", employee_id)

        existing = await self.session.execute(
            select(PayrollEntry.payroll_entry_id).where(
                PayrollEntry.payroll_period_id == period_id,
                PayrollEntry.employee_id == employee_id,
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise DuplicateEntryError(period_id, employee_id)

        entry = PayrollEntry(
            payroll_period_id=period_id,
            employee_id=employee_id,
            updated_by_user_id=requested_by,
        )
        self.session.add(entry)
        await self.session.flush()

        logger.info("Added entry for employee %s to period %s", employee_id, period_id)
        return await self._get_entry(period_id, entry.payroll_entry_id)

    async def update_entry(
        self,
        period_id: UUID,
        entry_id: UUID,
        overtime_hours: Decimal = Decimal("0"),
        absence_hours: Decimal = Decimal("0"),
        lateness_hours: Decimal = Decimal("0"),
        bonus_amount: Decimal = Decimal("0"),
        notes: str | None = None,
        requested_by: UUID | None = None,
    ) -> PayrollEntry:
        """Replace an entry's hours, bonus and notes.

        Values are rounded to 2 decimals and must not be negative.
        """
        period = await self.period_service.require_period(period_id)
        self._check_inputs_mutable(period)

        values = EntryValues(
            entry_id=entry_id,
            overtime_hours=overtime_hours,
            absence_hours=absence_hours,
            lateness_hours=lateness_hours,
            bonus_amount=bonus_amount,
            notes=notes,
        )
        values.validate()

        entry = await self._get_entry(period_id, entry_id)
        self._apply(period, entry, values, requested_by, utcnow())
        await self.session.flush()

        return entry

    async def update_entries(
        self,
        period_id: UUID,
        items: Sequence[EntryValues],
        requested_by: UUID | None = None,
    ) -> list[PayrollEntry]:
        """Replace several entries of one period in a single step.

        Every item is checked before any entry changes: an unknown entry id,
        a repeated id or a negative value rejects the whole batch.
        """
        period = await self.period_service.require_period(period_id)
        self._check_inputs_mutable(period)
        if not items:
            raise EmptyInputError("No entries to update")

        seen: set[UUID] = set()
        for item in items:
            if item.entry_id in seen:
                raise InvalidInputError(f"Entry {item.entry_id} appears more than once")
            seen.add(item.entry_id)
            item.validate()

        result = await self.session.execute(
            select(PayrollEntry)
            .where(
                PayrollEntry.payroll_period_id == period_id,
                PayrollEntry.payroll_entry_id.in_(seen),
            )
            .options(selectinload(PayrollEntry.employee))
        )
        entries = {entry.payroll_entry_id: entry for entry in result.scalars().all()}
        for item in items:
            if item.entry_id not in entries:
                raise PayrollNotFoundError("Payroll entry", item.entry_id)

        now = utcnow()
        for item in items:
            self._apply(period, entries[item.entry_id], item, requested_by, now)
        await self.session.flush()

        logger.info("Updated %d entries of period %s", len(items), period_id)
        return [entries[item.entry_id] for item in items]

    @staticmethod
    def _apply(
        period: PayrollPeriod,
        entry: PayrollEntry,
        values: EntryValues,
        requested_by: UUID | None,
        now: datetime,
    ) -> None:
        entry.overtime_hours = round_to_cents(values.overtime_hours)
        entry.absence_hours = round_to_cents(values.absence_hours)
        entry.lateness_hours = round_to_cents(values.lateness_hours)
        entry.bonus_amount = round_to_cents(values.bonus_amount)
        entry.notes = normalize_notes(values.notes)
        entry.updated_at = now
        entry.updated_by_user_id = requested_by
        period.updated_at = now
        period.updated_by_user_id = requested_by

    async def _get_entry(self, period_id: UUID, entry_id: UUID) -> PayrollEntry:
        result = await self.session.execute(
            select(PayrollEntry)
            .where(
                PayrollEntry.payroll_entry_id == entry_id,
                PayrollEntry.payroll_period_id == period_id,
            )
            .options(selectinload(PayrollEntry.employee))
        )
        entry = result.scalar_one_or_none()
        if entry is None:
            raise PayrollNotFoundError("Payroll entry", entry_id)
        return entry

    @staticmethod
    def _check_inputs_mutable(period: PayrollPeriod) -> None:
        if not PeriodStateMachine.can_modify_inputs(period.status):
            raise InvalidStateError(
                f"Payroll period {period.payroll_period_id} is {period.status}; "
                "attendance entries can no longer change"
            )
