"""Type definitions for the calculation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from payroll_cycle.config import Settings
    from payroll_cycle.models import Employee, PayrollEntry


ZERO = Decimal("0.00")


class TaxKind(str, Enum):
    """Statutory withholding kinds."""

    CONTRIBUTION = "contribution"  # progressive, bracket-summed
    INCOME = "income"  # single bracket with fixed deduction


class ComponentType(str, Enum):
    """Payroll component types. Amounts are always positive."""

    EARNING = "earning"
    DEDUCTION = "deduction"


@dataclass(frozen=True)
class TaxBracket:
    """One slice of a progressive schedule."""

    range_start: Decimal
    range_end: Decimal | None  # None = no upper limit
    rate: Decimal  # As decimal, e.g., 0.075 for 7.5%
    deduction: Decimal = Decimal("0")
    sort_order: int = 0


@dataclass(frozen=True)
class CalculationConstants:
    """Jurisdiction constants injected into the calculator."""

    standard_monthly_hours: Decimal = Decimal("220")
    overtime_multiplier: Decimal = Decimal("1.5")
    per_dependent_deduction: Decimal = Decimal("189.59")

    @classmethod
    def from_settings(cls, settings: Settings) -> CalculationConstants:
        return cls(
            standard_monthly_hours=settings.standard_monthly_hours,
            overtime_multiplier=settings.overtime_multiplier,
            per_dependent_deduction=settings.per_dependent_deduction,
        )


@dataclass
class EmployeeSnapshot:
    """Employee directory data frozen at calculation time."""

    employee_id: UUID
    name: str
    base_salary: Decimal | None = None
    dependent_count: int = 0
    tax_id: str | None = None
    department: str | None = None
    position: str | None = None
    bank_name: str | None = None
    bank_agency: str | None = None
    bank_account: str | None = None

    @classmethod
    def from_employee(cls, employee: Employee) -> EmployeeSnapshot:
        return cls(
            employee_id=employee.employee_id,
            name=employee.display_name,
            base_salary=employee.base_salary,
            dependent_count=employee.dependent_count or 0,
            tax_id=employee.tax_id,
            department=employee.department,
            position=employee.position,
            bank_name=employee.bank_name,
            bank_agency=employee.bank_agency,
            bank_account=employee.bank_account,
        )


@dataclass
class AttendanceInput:
    """One period's attendance facts for an employee. Missing values count as zero."""

    overtime_hours: Decimal = Decimal("0")
    absence_hours: Decimal = Decimal("0")
    lateness_hours: Decimal = Decimal("0")
    bonus_amount: Decimal = Decimal("0")
    entry_id: UUID | None = None

    @classmethod
    def from_entry(cls, entry: PayrollEntry) -> AttendanceInput:
        return cls(
            overtime_hours=entry.overtime_hours or Decimal("0"),
            absence_hours=entry.absence_hours or Decimal("0"),
            lateness_hours=entry.lateness_hours or Decimal("0"),
            bonus_amount=entry.bonus_amount or Decimal("0"),
            entry_id=entry.payroll_entry_id,
        )


@dataclass
class PayrollBreakdown:
    """Every intermediate amount of one employee's calculation."""

    base_salary: Decimal = ZERO
    hourly_rate: Decimal = ZERO

    overtime_hours: Decimal = ZERO
    overtime_amount: Decimal = ZERO
    bonus_amount: Decimal = ZERO
    absence_hours: Decimal = ZERO
    absence_amount: Decimal = ZERO
    lateness_hours: Decimal = ZERO
    lateness_amount: Decimal = ZERO

    earnings_total: Decimal = ZERO
    pre_tax_deductions: Decimal = ZERO
    gross_amount: Decimal = ZERO

    contribution_tax: Decimal = ZERO
    income_tax_base: Decimal = ZERO
    income_tax: Decimal = ZERO

    total_deductions: Decimal = ZERO
    net_amount: Decimal = ZERO

    additional_employer_cost: Decimal = ZERO


@dataclass
class ComponentCandidate:
    """A payroll component before persistence."""

    component_type: ComponentType
    code: str
    description: str
    amount: Decimal
    sequence: int
    base_amount: Decimal | None = None
    reference_quantity: Decimal | None = None
    is_taxable: bool = True
    impacts_severance_fund: bool = False


@dataclass
class CalculationResult:
    """Result of calculating pay for one employee."""

    employee: EmployeeSnapshot
    attendance: AttendanceInput
    breakdown: PayrollBreakdown
    components: list[ComponentCandidate] = field(default_factory=list)

    @property
    def employee_id(self) -> UUID:
        return self.employee.employee_id

    # Aggregation reads these names from both calculation results and stored rows
    @property
    def gross_amount(self) -> Decimal:
        return self.breakdown.gross_amount

    @property
    def net_amount(self) -> Decimal:
        return self.breakdown.net_amount

    @property
    def contribution_tax(self) -> Decimal:
        return self.breakdown.contribution_tax

    @property
    def income_tax(self) -> Decimal:
        return self.breakdown.income_tax

    @property
    def additional_employer_cost(self) -> Decimal:
        return self.breakdown.additional_employer_cost


@dataclass
class PeriodTotals:
    """Period-level sums over all results."""

    total_gross_amount: Decimal
    total_net_amount: Decimal
    total_contribution_tax: Decimal
    total_income_tax: Decimal
    total_employer_cost: Decimal
    result_count: int
