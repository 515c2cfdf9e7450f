"""Payroll period, attendance entry, result, component and tax bracket models."""

from __future__ import annotations

import calendar
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_cycle.models.base import Base, TimestampMixin, utcnow

if TYPE_CHECKING:
    from payroll_cycle.calculators.types import TaxBracket
    from payroll_cycle.models.employee import Employee


# ===== Period & Attendance Inputs =====


class PayrollPeriod(Base, TimestampMixin):
    """One month/year payroll cycle for a tenant."""

    __tablename__ = "payroll_period"

    payroll_period_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    reference_month: Mapped[int] = mapped_column(Integer, nullable=False)
    reference_year: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="draft")
    created_by_user_id: Mapped[UUID | None] = mapped_column(nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_by_user_id: Mapped[UUID | None] = mapped_column(nullable=True)

    calculated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    approved_by_user_id: Mapped[UUID | None] = mapped_column(nullable=True)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    paid_by_user_id: Mapped[UUID | None] = mapped_column(nullable=True)

    # Totals stay NULL until the first successful calculation
    total_gross_amount: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    total_net_amount: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    total_contribution_tax: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    total_income_tax: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    total_employer_cost: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "tenant_id", "reference_month", "reference_year",
            name="payroll_period_tenant_month_year_unique",
        ),
        CheckConstraint(
            "reference_month BETWEEN 1 AND 12",
            name="payroll_period_month_check",
        ),
        CheckConstraint(
            "status IN ('draft', 'calculated', 'approved', 'paid', 'locked')",
            name="payroll_period_status_check",
        ),
    )

    # Relationships
    entries: Mapped[list[PayrollEntry]] = relationship(back_populates="period")
    results: Mapped[list[PayrollResult]] = relationship(
        back_populates="period",
        order_by="PayrollResult.employee_name_snapshot",
    )

    def get_reference_date(self) -> date:
        """Last calendar day of the reference month (bracket lookup date)."""
        last_day = calendar.monthrange(self.reference_year, self.reference_month)[1]
        return date(self.reference_year, self.reference_month, last_day)


class PayrollEntry(Base, TimestampMixin):
    """Attendance facts for one employee in one period."""

    __tablename__ = "payroll_entry"

    payroll_entry_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    payroll_period_id: Mapped[UUID] = mapped_column(
        ForeignKey("payroll_period.payroll_period_id", ondelete="CASCADE"),
        nullable=False,
    )
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    overtime_hours: Mapped[Decimal | None] = mapped_column(Numeric(8, 2), nullable=True)
    absence_hours: Mapped[Decimal | None] = mapped_column(Numeric(8, 2), nullable=True)
    lateness_hours: Mapped[Decimal | None] = mapped_column(Numeric(8, 2), nullable=True)
    bonus_amount: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_by_user_id: Mapped[UUID | None] = mapped_column(nullable=True)

    __table_args__ = (
        UniqueConstraint("payroll_period_id", "employee_id", name="payroll_entry_unique"),
    )

    # Relationships
    period: Mapped[PayrollPeriod] = relationship(back_populates="entries")
    employee: Mapped[Employee] = relationship(back_populates="entries")


# ===== Calculated Results =====


class PayrollResult(Base, TimestampMixin):
    """Calculated pay for one employee in one period.

    Identity, bank and salary fields are frozen copies taken at calculation
    time; later edits to the employee record never change them.
    """

    __tablename__ = "payroll_result"

    payroll_result_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    payroll_period_id: Mapped[UUID] = mapped_column(
        ForeignKey("payroll_period.payroll_period_id", ondelete="CASCADE"),
        nullable=False,
    )
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id"),
        nullable=False,
    )
    payroll_entry_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("payroll_entry.payroll_entry_id", ondelete="SET NULL"),
        nullable=True,
    )

    # Snapshot
    employee_name_snapshot: Mapped[str] = mapped_column(String(200), nullable=False)
    tax_id_snapshot: Mapped[str | None] = mapped_column(String(20), nullable=True)
    department_snapshot: Mapped[str | None] = mapped_column(String(100), nullable=True)
    position_snapshot: Mapped[str | None] = mapped_column(String(100), nullable=True)
    bank_name_snapshot: Mapped[str | None] = mapped_column(String(100), nullable=True)
    bank_agency_snapshot: Mapped[str | None] = mapped_column(String(10), nullable=True)
    bank_account_snapshot: Mapped[str | None] = mapped_column(String(20), nullable=True)
    dependents_snapshot: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    base_salary_snapshot: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)

    # Amounts
    total_earnings: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    total_deductions: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    gross_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    net_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    contribution_tax: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    income_tax: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    additional_employer_cost: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)

    calculated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_by_user_id: Mapped[UUID | None] = mapped_column(nullable=True)

    __table_args__ = (
        UniqueConstraint("payroll_period_id", "employee_id", name="payroll_result_unique"),
        CheckConstraint("net_amount >= 0", name="payroll_result_net_nonnegative"),
    )

    # Relationships
    period: Mapped[PayrollPeriod] = relationship(back_populates="results")
    components: Mapped[list[PayrollComponent]] = relationship(
        back_populates="result",
        cascade="all, delete-orphan",
        order_by="PayrollComponent.sequence",
    )


class PayrollComponent(Base):
    """One labeled earning or deduction line of a result."""

    __tablename__ = "payroll_component"

    payroll_component_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    payroll_result_id: Mapped[UUID] = mapped_column(
        ForeignKey("payroll_result.payroll_result_id", ondelete="CASCADE"),
        nullable=False,
    )
    component_type: Mapped[str] = mapped_column(String, nullable=False)
    code: Mapped[str] = mapped_column(String(30), nullable=False)
    description: Mapped[str] = mapped_column(String(200), nullable=False)
    # Always positive; component_type carries the sign
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    base_amount: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    reference_quantity: Mapped[Decimal | None] = mapped_column(Numeric(8, 2), nullable=True)
    is_taxable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    impacts_severance_fund: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "component_type IN ('earning', 'deduction')",
            name="payroll_component_type_check",
        ),
    )

    # Relationships
    result: Mapped[PayrollResult] = relationship(back_populates="components")


# ===== Tax Catalog =====


class PayrollTaxBracket(Base, TimestampMixin):
    """One slice of a progressive schedule, effective-dated.

    tenant_id NULL means the shared catalog.
    """

    __tablename__ = "payroll_tax_bracket"

    payroll_tax_bracket_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[UUID | None] = mapped_column(nullable=True, index=True)
    tax_kind: Mapped[str] = mapped_column(String, nullable=False)
    range_start: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    range_end: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    rate: Mapped[Decimal] = mapped_column(Numeric(7, 4), nullable=False)
    deduction: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    effective_from: Mapped[date] = mapped_column(Date, nullable=False)
    effective_to: Mapped[date | None] = mapped_column(Date, nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint(
            "tax_kind IN ('contribution', 'income')",
            name="payroll_tax_bracket_kind_check",
        ),
        CheckConstraint(
            "effective_to IS NULL OR effective_to >= effective_from",
            name="payroll_tax_bracket_dates_check",
        ),
        CheckConstraint(
            "range_end IS NULL OR range_end >= range_start",
            name="payroll_tax_bracket_range_check",
        ),
    )

    def to_bracket(self) -> TaxBracket:
        """Convert to the calculator's bracket value."""
        from payroll_cycle.calculators.types import TaxBracket

        return TaxBracket(
            range_start=Decimal(self.range_start),
            range_end=Decimal(self.range_end) if self.range_end is not None else None,
            rate=Decimal(self.rate),
            deduction=Decimal(self.deduction or 0),
            sort_order=self.sort_order,
        )


# ===== Audit =====


class PayrollAuditEvent(Base, TimestampMixin):
    """Audit trail entry for a period lifecycle action."""

    __tablename__ = "payroll_audit_event"

    audit_event_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[UUID] = mapped_column(nullable=False)
    payroll_period_id: Mapped[UUID] = mapped_column(
        ForeignKey("payroll_period.payroll_period_id", ondelete="CASCADE"),
        nullable=False,
    )
    actor_user_id: Mapped[UUID | None] = mapped_column(nullable=True)
    action: Mapped[str] = mapped_column(String, nullable=False)
    details_json: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
