"""Payroll period service - orchestrates the period lifecycle."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone
from typing import Any
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from payroll_cycle.calculators import (
    CalculationConstants,
    PayrollCalculator,
    PeriodAggregator,
    TaxBracketProvider,
    TaxKind,
)
from payroll_cycle.calculators.types import AttendanceInput, CalculationResult, EmployeeSnapshot
from payroll_cycle.exceptions import (
    EmptyInputError,
    InvalidInputError,
    InvalidStateError,
    PayrollNotFoundError,
)
from payroll_cycle.models import (
    Employee,
    PayrollAuditEvent,
    PayrollComponent,
    PayrollEntry,
    PayrollPeriod,
    PayrollResult,
)
from payroll_cycle.models.base import utcnow
from payroll_cycle.services.state_machine import PeriodStateMachine, PeriodStatus

logger = logging.getLogger(__name__)

MIN_YEAR = 2000
MAX_YEAR = 2100


def normalize_notes(notes: str | None) -> str | None:
    """Strip notes; blank notes become None."""
    if notes is None:
        return None
    notes = notes.strip()
    return notes or None


def normalize_payment_date(payment_date: date | datetime) -> datetime:
    """Express a payment date as an aware UTC datetime.

    Plain dates and naive datetimes are taken as UTC.
    """
    if not isinstance(payment_date, datetime):
        return datetime.combine(payment_date, time.min, tzinfo=timezone.utc)
    if payment_date.tzinfo is None:
        return payment_date.replace(tzinfo=timezone.utc)
    return payment_date.astimezone(timezone.utc)


class PayrollPeriodService:
    """Service for managing payroll period lifecycle.

    Operations:
    - create_period: Open a Draft period with one entry per active employee
    - calculate: Replace all results of a period and roll up totals
    - approve: Calculated → Approved
    - mark_paid: Approved → Paid
    - get_period / list_periods / get_result: Read access

    The service never commits; the caller owns the transaction so a failed
    operation leaves nothing behind.
    """

    def __init__(
        self,
        session: AsyncSession,
        tenant_id: UUID,
        constants: CalculationConstants | None = None,
    ):
        self.session = session
        self.tenant_id = tenant_id
        self.calculator = PayrollCalculator(constants)
        self.bracket_provider = TaxBracketProvider(session, tenant_id)

    async def get_period(
        self,
        period_id: UUID,
        load_results: bool = True,
        refresh: bool = False,
    ) -> PayrollPeriod | None:
        """Load a period of this tenant, optionally with results and components."""
        stmt = select(PayrollPeriod).where(
            PayrollPeriod.payroll_period_id == period_id,
            PayrollPeriod.tenant_id == self.tenant_id,
        )
        if load_results:
            stmt = stmt.options(
                selectinload(PayrollPeriod.results).selectinload(PayrollResult.components)
            )
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def require_period(self, period_id: UUID, load_results: bool = False) -> PayrollPeriod:
        """Load a period or raise PayrollNotFoundError."""
        period = await self.get_period(period_id, load_results=load_results)
        if period is None:
            raise PayrollNotFoundError("Payroll period", period_id)
        return period

    async def list_periods(
        self,
        year: int | None = None,
        status: str | None = None,
    ) -> list[PayrollPeriod]:
        """List this tenant's periods, newest first."""
        stmt = select(PayrollPeriod).where(PayrollPeriod.tenant_id == self.tenant_id)
        if year is not None:
            stmt = stmt.where(PayrollPeriod.reference_year == year)
        if status is not None:
            try:
                status_value = PeriodStatus(status).value
            except ValueError:
                raise InvalidInputError(f"Unknown period status '{status}'") from None
            stmt = stmt.where(PayrollPeriod.status == status_value)

        stmt = stmt.order_by(
            PayrollPeriod.reference_year.desc(),
            PayrollPeriod.reference_month.desc(),
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_period_by_reference(
        self,
        month: int,
        year: int,
        load_results: bool = True,
    ) -> PayrollPeriod | None:
        """Find this tenant's period for a reference month and year."""
        result = await self.session.execute(
            select(PayrollPeriod.payroll_period_id).where(
                PayrollPeriod.tenant_id == self.tenant_id,
                PayrollPeriod.reference_month == month,
                PayrollPeriod.reference_year == year,
            )
        )
        period_id = result.scalar_one_or_none()
        if period_id is None:
            return None
        return await self.get_period(period_id, load_results=load_results)

    async def create_period(
        self,
        month: int,
        year: int,
        requested_by: UUID | None = None,
    ) -> PayrollPeriod:
        """Open a Draft period for month/year.

        Returns the existing period unchanged if one is already open for the
        same month and year. Otherwise seeds one blank attendance entry per
        active employee.
        """
        if not 1 <= month <= 12:
            raise InvalidInputError(f"Month must be between 1 and 12, got {month}")
        if not MIN_YEAR <= year <= MAX_YEAR:
            raise InvalidInputError(f"Year must be between {MIN_YEAR} and {MAX_YEAR}, got {year}")

        existing = await self.get_period_by_reference(month, year)
        if existing is not None:
            return existing

        period = PayrollPeriod(
            tenant_id=self.tenant_id,
            reference_month=month,
            reference_year=year,
            status=PeriodStatus.DRAFT.value,
            created_by_user_id=requested_by,
        )
        self.session.add(period)
        await self.session.flush()

        employees = await self.session.execute(
            select(Employee.employee_id)
            .where(Employee.tenant_id == self.tenant_id, Employee.is_active.is_(True))
            .order_by(Employee.full_name)
        )
        employee_ids = list(employees.scalars().all())
        for employee_id in employee_ids:
            self.session.add(
                PayrollEntry(
                    payroll_period_id=period.payroll_period_id,
                    employee_id=employee_id,
                )
            )

        await self._record_audit(
            period,
            action="created",
            actor_user_id=requested_by,
            details={"entries": len(employee_ids)},
        )
        await self.session.flush()

        logger.info(
            "Created payroll period %s for %02d/%d with %d entries",
            period.payroll_period_id,
            month,
            year,
            len(employee_ids),
        )
        return await self.get_period(period.payroll_period_id, refresh=True)

    async def calculate(
        self,
        period_id: UUID,
        requested_by: UUID | None = None,
    ) -> PayrollPeriod:
        """Calculate every entry of the period, replacing all prior results.

        Everything is computed and aggregated before the old result set is
        removed, so a failure leaves the period as it was.
        """
        period = await self.require_period(period_id)
        PeriodStateMachine.validate_transition(
            period.status,
            PeriodStatus.CALCULATED,
            "Calculation is only allowed for draft or calculated periods",
        )

        entries_result = await self.session.execute(
            select(PayrollEntry)
            .where(PayrollEntry.payroll_period_id == period_id)
            .options(selectinload(PayrollEntry.employee))
        )
        entries = list(entries_result.scalars().all())
        if not entries:
            raise EmptyInputError(f"Payroll period {period_id} has no attendance entries")

        reference_date = period.get_reference_date()
        contribution_brackets = await self.bracket_provider.get_brackets(
            TaxKind.CONTRIBUTION, reference_date
        )
        income_brackets = await self.bracket_provider.get_brackets(
            TaxKind.INCOME, reference_date
        )

        inputs: list[tuple[EmployeeSnapshot, AttendanceInput]] = []
        for entry in entries:
            if entry.employee is None:
                logger.warning(
                    "Skipping entry %s: employee %s not found",
                    entry.payroll_entry_id,
                    entry.employee_id,
                )
                continue
            inputs.append(
                (EmployeeSnapshot.from_employee(entry.employee), AttendanceInput.from_entry(entry))
            )

        calculations = self.calculator.calculate_all(inputs, contribution_brackets, income_brackets)
        totals = PeriodAggregator.aggregate(calculations)

        await self._delete_results(period_id)

        now = utcnow()
        for calculation in calculations:
            self.session.add(self._build_result(period_id, calculation, now, requested_by))

        from_status = period.status
        period.status = PeriodStatus.CALCULATED.value
        period.calculated_at = now
        period.updated_at = now
        period.updated_by_user_id = requested_by
        period.total_gross_amount = totals.total_gross_amount
        period.total_net_amount = totals.total_net_amount
        period.total_contribution_tax = totals.total_contribution_tax
        period.total_income_tax = totals.total_income_tax
        period.total_employer_cost = totals.total_employer_cost

        await self._record_audit(
            period,
            action="calculated",
            actor_user_id=requested_by,
            details={
                "from_status": from_status,
                "results": totals.result_count,
                "total_gross_amount": str(totals.total_gross_amount),
                "total_net_amount": str(totals.total_net_amount),
            },
        )
        await self.session.flush()

        logger.info(
            "Calculated payroll period %s: %d results, gross %s, net %s",
            period_id,
            totals.result_count,
            totals.total_gross_amount,
            totals.total_net_amount,
        )
        return await self.get_period(period_id, refresh=True)

    async def approve(
        self,
        period_id: UUID,
        requested_by: UUID | None = None,
        notes: str | None = None,
    ) -> PayrollPeriod:
        """Approve a calculated period."""
        period = await self.require_period(period_id)
        PeriodStateMachine.validate_transition(
            period.status,
            PeriodStatus.APPROVED,
            "Only calculated periods can be approved",
        )

        now = utcnow()
        period.status = PeriodStatus.APPROVED.value
        period.approved_at = now
        period.approved_by_user_id = requested_by
        period.updated_at = now
        period.updated_by_user_id = requested_by
        notes = normalize_notes(notes)
        if notes is not None:
            period.notes = notes

        await self._record_audit(
            period,
            action="approved",
            actor_user_id=requested_by,
            details={"notes": notes} if notes else None,
        )
        await self.session.flush()

        logger.info("Approved payroll period %s", period_id)
        return await self.get_period(period_id, refresh=True)

    async def mark_paid(
        self,
        period_id: UUID,
        payment_date: date | datetime,
        requested_by: UUID | None = None,
        notes: str | None = None,
    ) -> PayrollPeriod:
        """Record payment of an approved period."""
        period = await self.require_period(period_id)
        PeriodStateMachine.validate_transition(
            period.status,
            PeriodStatus.PAID,
            "Only approved periods can be marked as paid",
        )

        paid_at = normalize_payment_date(payment_date)
        period.status = PeriodStatus.PAID.value
        period.paid_at = paid_at
        period.paid_by_user_id = requested_by
        period.updated_at = utcnow()
        period.updated_by_user_id = requested_by
        notes = normalize_notes(notes)
        if notes is not None:
            period.notes = notes

        details: dict[str, Any] = {"paid_at": paid_at.isoformat()}
        if notes:
            details["notes"] = notes
        await self._record_audit(
            period, action="paid", actor_user_id=requested_by, details=details
        )
        await self.session.flush()

        logger.info("Marked payroll period %s as paid on %s", period_id, paid_at.date())
        return await self.get_period(period_id, refresh=True)

    async def get_result(self, period_id: UUID, result_id: UUID) -> PayrollResult:
        """Load one result with its components for slip rendering."""
        period = await self.require_period(period_id)
        if not PeriodStateMachine.has_results(period.status):
            raise InvalidStateError(
                f"Payroll period {period_id} is {period.status}; results are not available"
            )

        result = await self.session.execute(
            select(PayrollResult)
            .where(
                PayrollResult.payroll_result_id == result_id,
                PayrollResult.payroll_period_id == period_id,
            )
            .options(selectinload(PayrollResult.components))
        )
        payroll_result = result.scalar_one_or_none()
        if payroll_result is None:
            raise PayrollNotFoundError("Payroll result", result_id)
        return payroll_result

    async def _delete_results(self, period_id: UUID) -> None:
        """Remove the current result set and its components."""
        result_ids = select(PayrollResult.payroll_result_id).where(
            PayrollResult.payroll_period_id == period_id
        )
        await self.session.execute(
            delete(PayrollComponent)
            .where(PayrollComponent.payroll_result_id.in_(result_ids))
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(
            delete(PayrollResult)
            .where(PayrollResult.payroll_period_id == period_id)
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    def _build_result(
        period_id: UUID,
        calculation: CalculationResult,
        calculated_at: datetime,
        requested_by: UUID | None,
    ) -> PayrollResult:
        """Map a calculation onto a fresh result row with frozen employee fields."""
        employee = calculation.employee
        breakdown = calculation.breakdown
        return PayrollResult(
            payroll_period_id=period_id,
            employee_id=employee.employee_id,
            payroll_entry_id=calculation.attendance.entry_id,
            employee_name_snapshot=employee.name,
            tax_id_snapshot=employee.tax_id,
            department_snapshot=employee.department,
            position_snapshot=employee.position,
            bank_name_snapshot=employee.bank_name,
            bank_agency_snapshot=employee.bank_agency,
            bank_account_snapshot=employee.bank_account,
            dependents_snapshot=employee.dependent_count,
            base_salary_snapshot=breakdown.base_salary,
            total_earnings=breakdown.earnings_total,
            total_deductions=breakdown.total_deductions,
            gross_amount=breakdown.gross_amount,
            net_amount=breakdown.net_amount,
            contribution_tax=breakdown.contribution_tax,
            income_tax=breakdown.income_tax,
            additional_employer_cost=breakdown.additional_employer_cost,
            calculated_at=calculated_at,
            updated_by_user_id=requested_by,
            components=[
                PayrollComponent(
                    component_type=component.component_type.value,
                    code=component.code,
                    description=component.description,
                    amount=component.amount,
                    base_amount=component.base_amount,
                    reference_quantity=component.reference_quantity,
                    is_taxable=component.is_taxable,
                    impacts_severance_fund=component.impacts_severance_fund,
                    sequence=component.sequence,
                )
                for component in calculation.components
            ],
        )

    async def _record_audit(
        self,
        period: PayrollPeriod,
        action: str,
        actor_user_id: UUID | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Record an audit event for a period action."""
        self.session.add(
            PayrollAuditEvent(
                tenant_id=period.tenant_id,
                payroll_period_id=period.payroll_period_id,
                actor_user_id=actor_user_id,
                action=action,
                details_json=details,
            )
        )
