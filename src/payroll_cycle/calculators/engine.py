"""Per-employee payroll calculation."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal

from payroll_cycle.calculators.component_builder import ComponentBuilder
from payroll_cycle.calculators.tax_calculator import TaxCalculator, round_to_cents
from payroll_cycle.calculators.types import (
    AttendanceInput,
    CalculationConstants,
    CalculationResult,
    EmployeeSnapshot,
    PayrollBreakdown,
    TaxBracket,
)
from payroll_cycle.exceptions import InvalidInputError

logger = logging.getLogger(__name__)

RATE_PRECISION = Decimal("0.0001")  # hourly rate keeps 4 decimals


class PayrollCalculator:
    """Pure per-employee payroll calculation.

    Calculation pipeline (stable order, every monetary step rounded to cents):
    1) hourly rate = base salary / standard monthly hours
    2) overtime = hourly rate * overtime hours * overtime multiplier
    3) absences and lateness = hourly rate * hours
    4) earnings = base salary + overtime + bonus
    5) pre-tax deductions = absences + lateness
    6) gross = max(earnings - pre-tax deductions, 0)
    7) contribution tax = progressive sum over gross
    8) income tax base = max(gross - contribution tax - dependents * deduction, 0)
    9) income tax = single bracket with deduction over the base
    10) total deductions = pre-tax deductions + both taxes
    11) net = max(earnings - total deductions, 0)
    Negative attendance values are rejected, and the built components must
    add up to the breakdown totals.
    """

    def __init__(self, constants: CalculationConstants | None = None):
        self.constants = constants or CalculationConstants()

    def hourly_rate(self, base_salary: Decimal) -> Decimal:
        """Base salary spread over the standard paid hours of a month."""
        hours = self.constants.standard_monthly_hours
        if not hours or hours <= 0:
            return Decimal("0")
        return (base_salary / hours).quantize(RATE_PRECISION, rounding=ROUND_HALF_UP)

    def calculate_breakdown(
        self,
        employee: EmployeeSnapshot,
        attendance: AttendanceInput,
        contribution_brackets: Sequence[TaxBracket],
        income_brackets: Sequence[TaxBracket],
    ) -> PayrollBreakdown:
        """Run the pipeline for one employee and return every intermediate amount."""
        self.validate_attendance(employee, attendance)
        if employee.base_salary is None:
            logger.warning(
                "Employee %s has no configured salary; calculating with zero",
                employee.employee_id,
            )
        base_salary = round_to_cents(max(employee.base_salary or Decimal("0"), Decimal("0")))
        hourly_rate = self.hourly_rate(base_salary)

        overtime_amount = round_to_cents(
            hourly_rate * attendance.overtime_hours * self.constants.overtime_multiplier
        )
        absence_amount = round_to_cents(hourly_rate * attendance.absence_hours)
        lateness_amount = round_to_cents(hourly_rate * attendance.lateness_hours)
        bonus_amount = round_to_cents(attendance.bonus_amount)

        earnings_total = round_to_cents(base_salary + overtime_amount + bonus_amount)
        pre_tax_deductions = round_to_cents(absence_amount + lateness_amount)
        gross_amount = round_to_cents(max(earnings_total - pre_tax_deductions, Decimal("0")))

        contribution_tax = TaxCalculator.progressive_sum(gross_amount, contribution_brackets)

        dependents_deduction = employee.dependent_count * self.constants.per_dependent_deduction
        income_tax_base = round_to_cents(
            max(gross_amount - contribution_tax - dependents_deduction, Decimal("0"))
        )
        income_tax = TaxCalculator.single_bracket_with_deduction(income_tax_base, income_brackets)

        total_deductions = round_to_cents(pre_tax_deductions + contribution_tax + income_tax)
        net_amount = round_to_cents(max(earnings_total - total_deductions, Decimal("0")))

        return PayrollBreakdown(
            base_salary=base_salary,
            hourly_rate=hourly_rate,
            overtime_hours=attendance.overtime_hours,
            overtime_amount=overtime_amount,
            bonus_amount=bonus_amount,
            absence_hours=attendance.absence_hours,
            absence_amount=absence_amount,
            lateness_hours=attendance.lateness_hours,
            lateness_amount=lateness_amount,
            earnings_total=earnings_total,
            pre_tax_deductions=pre_tax_deductions,
            gross_amount=gross_amount,
            contribution_tax=contribution_tax,
            income_tax_base=income_tax_base,
            income_tax=income_tax,
            total_deductions=total_deductions,
            net_amount=net_amount,
        )

    def calculate(
        self,
        employee: EmployeeSnapshot,
        attendance: AttendanceInput,
        contribution_brackets: Sequence[TaxBracket],
        income_brackets: Sequence[TaxBracket],
    ) -> CalculationResult:
        """Calculate one employee's breakdown and its components."""
        breakdown = self.calculate_breakdown(
            employee, attendance, contribution_brackets, income_brackets
        )
        components = ComponentBuilder.build(breakdown)

        errors = ComponentBuilder.validate_against(components, breakdown)
        if errors:
            raise InvalidInputError(
                f"Inconsistent components for employee {employee.employee_id}: "
                + "; ".join(errors)
            )

        return CalculationResult(
            employee=employee,
            attendance=attendance,
            breakdown=breakdown,
            components=components,
        )

    @staticmethod
    def validate_attendance(employee: EmployeeSnapshot, attendance: AttendanceInput) -> None:
        """Raise InvalidInputError if any hours or the bonus are negative."""
        for name in ("overtime_hours", "absence_hours", "lateness_hours", "bonus_amount"):
            value = getattr(attendance, name)
            if value < 0:
                raise InvalidInputError(
                    f"Employee {employee.employee_id} has negative {name}: {value}"
                )

    def calculate_all(
        self,
        inputs: Iterable[tuple[EmployeeSnapshot, AttendanceInput]],
        contribution_brackets: Sequence[TaxBracket],
        income_brackets: Sequence[TaxBracket],
    ) -> list[CalculationResult]:
        """Calculate every employee of a period, ordered by employee name.

        Employees are independent; the same brackets are reused for all.
        """
        ordered = sorted(inputs, key=lambda pair: (pair[0].name, str(pair[0].employee_id)))
        return [
            self.calculate(employee, attendance, contribution_brackets, income_brackets)
            for employee, attendance in ordered
        ]
