"""Tests for the per-employee payroll calculator."""

import logging
from decimal import Decimal
from uuid import uuid4

import pytest

from payroll_cycle.calculators.bracket_provider import default_brackets
from payroll_cycle.calculators.component_builder import ComponentBuilder
from payroll_cycle.calculators.engine import PayrollCalculator
from payroll_cycle.calculators.types import (
    AttendanceInput,
    CalculationConstants,
    ComponentType,
    EmployeeSnapshot,
    TaxKind,
)
from payroll_cycle.exceptions import InvalidInputError


CONTRIBUTION = default_brackets(TaxKind.CONTRIBUTION)
INCOME = default_brackets(TaxKind.INCOME)


def make_employee(name="Alice", salary="2200.00", dependents=0) -> EmployeeSnapshot:
    return EmployeeSnapshot(
        employee_id=uuid4(),
        name=name,
        base_salary=Decimal(salary) if salary is not None else None,
        dependent_count=dependents,
    )


@pytest.fixture
def calculator(constants) -> PayrollCalculator:
    return PayrollCalculator(constants)


class TestHourlyRate:
    """Test hourly rate derivation."""

    def test_even_division(self, calculator):
        assert calculator.hourly_rate(Decimal("2200.00")) == Decimal("10.0000")

    def test_keeps_four_decimals(self, calculator):
        # 3000 / 220 = 13.636363...
        assert calculator.hourly_rate(Decimal("3000.00")) == Decimal("13.6364")

    def test_zero_hours_gives_zero_rate(self):
        calc = PayrollCalculator(CalculationConstants(standard_monthly_hours=Decimal("0")))
        assert calc.hourly_rate(Decimal("2200.00")) == Decimal("0")


class TestCalculateBreakdown:
    """Test the full calculation pipeline for one employee."""

    def test_overtime_scenario(self, calculator):
        """2200.00 salary with 10 overtime hours at 1.5x."""
        breakdown = calculator.calculate_breakdown(
            make_employee(),
            AttendanceInput(overtime_hours=Decimal("10")),
            CONTRIBUTION,
            INCOME,
        )

        assert breakdown.hourly_rate == Decimal("10.0000")
        assert breakdown.overtime_amount == Decimal("150.00")
        assert breakdown.earnings_total == Decimal("2350.00")
        assert breakdown.pre_tax_deductions == Decimal("0.00")
        assert breakdown.gross_amount == Decimal("2350.00")
        assert breakdown.contribution_tax == Decimal("190.32")
        assert breakdown.income_tax_base == Decimal("2159.68")
        assert breakdown.income_tax == Decimal("0.00")
        assert breakdown.net_amount == Decimal("2159.68")

    def test_dependents_reduce_income_tax_base(self, calculator):
        breakdown = calculator.calculate_breakdown(
            make_employee(salary="3000.00", dependents=1),
            AttendanceInput(),
            CONTRIBUTION,
            INCOME,
        )

        # 3000.00 - 258.82 - 189.59
        assert breakdown.income_tax_base == Decimal("2551.59")
        assert breakdown.income_tax == Decimal("21.93")
        assert breakdown.total_deductions == Decimal("280.75")
        assert breakdown.net_amount == Decimal("2719.25")

    def test_absences_and_lateness_reduce_gross(self, calculator):
        breakdown = calculator.calculate_breakdown(
            make_employee(),
            AttendanceInput(
                absence_hours=Decimal("8"),
                lateness_hours=Decimal("1.5"),
                bonus_amount=Decimal("100.00"),
            ),
            CONTRIBUTION,
            INCOME,
        )

        assert breakdown.absence_amount == Decimal("80.00")
        assert breakdown.lateness_amount == Decimal("15.00")
        assert breakdown.earnings_total == Decimal("2300.00")
        assert breakdown.pre_tax_deductions == Decimal("95.00")
        assert breakdown.gross_amount == Decimal("2205.00")

    def test_net_floors_at_zero(self, calculator):
        """Deductions larger than earnings never give a negative net."""
        breakdown = calculator.calculate_breakdown(
            make_employee(salary="1000.00"),
            AttendanceInput(absence_hours=Decimal("300")),
            CONTRIBUTION,
            INCOME,
        )

        assert breakdown.gross_amount == Decimal("0.00")
        assert breakdown.contribution_tax == Decimal("0.00")
        assert breakdown.income_tax == Decimal("0.00")
        assert breakdown.total_deductions == Decimal("1363.65")
        assert breakdown.net_amount == Decimal("0.00")

    @pytest.mark.parametrize(
        "salary,overtime,absence,lateness,bonus,dependents",
        [
            ("1412.00", "0", "0", "0", "0", 0),
            ("2200.00", "10", "4", "0.5", "250.00", 2),
            ("4500.00", "0", "0", "0", "0", 0),
            ("8000.00", "12.5", "0", "0", "1000.00", 3),
            ("15000.00", "0", "16", "2", "0", 1),
            ("900.00", "0", "150", "40", "0", 0),
        ],
    )
    def test_net_matches_formula(
        self, calculator, salary, overtime, absence, lateness, bonus, dependents
    ):
        """net = earnings - deductions when non-negative, else zero."""
        breakdown = calculator.calculate_breakdown(
            make_employee(salary=salary, dependents=dependents),
            AttendanceInput(
                overtime_hours=Decimal(overtime),
                absence_hours=Decimal(absence),
                lateness_hours=Decimal(lateness),
                bonus_amount=Decimal(bonus),
            ),
            CONTRIBUTION,
            INCOME,
        )

        expected = breakdown.earnings_total - (
            breakdown.pre_tax_deductions + breakdown.contribution_tax + breakdown.income_tax
        )
        assert breakdown.net_amount >= 0
        assert breakdown.net_amount == max(expected, Decimal("0"))

    def test_missing_salary_calculates_as_zero(self, calculator, caplog):
        employee = make_employee(salary=None)

        with caplog.at_level(logging.WARNING, logger="payroll_cycle.calculators.engine"):
            breakdown = calculator.calculate_breakdown(
                employee,
                AttendanceInput(overtime_hours=Decimal("10")),
                CONTRIBUTION,
                INCOME,
            )

        assert breakdown.base_salary == Decimal("0.00")
        assert breakdown.gross_amount == Decimal("0.00")
        assert breakdown.net_amount == Decimal("0.00")
        assert str(employee.employee_id) in caplog.text

    def test_injected_constants(self):
        calc = PayrollCalculator(
            CalculationConstants(
                standard_monthly_hours=Decimal("200"),
                overtime_multiplier=Decimal("2"),
                per_dependent_deduction=Decimal("0"),
            )
        )

        breakdown = calc.calculate_breakdown(
            make_employee(salary="2000.00"),
            AttendanceInput(overtime_hours=Decimal("5")),
            [],
            [],
        )

        assert breakdown.overtime_amount == Decimal("100.00")
        assert breakdown.contribution_tax == Decimal("0.00")
        assert breakdown.net_amount == Decimal("2100.00")


class TestCalculate:
    """Test results with components."""

    def test_components_match_totals(self, calculator):
        result = calculator.calculate(
            make_employee(dependents=1),
            AttendanceInput(
                overtime_hours=Decimal("7.25"),
                absence_hours=Decimal("3"),
                lateness_hours=Decimal("0.75"),
                bonus_amount=Decimal("321.99"),
            ),
            CONTRIBUTION,
            INCOME,
        )

        totals = ComponentBuilder.sum_by_type(result.components)
        assert totals[ComponentType.EARNING] == result.breakdown.earnings_total
        assert totals[ComponentType.DEDUCTION] == result.breakdown.total_deductions
        assert ComponentBuilder.validate_against(result.components, result.breakdown) == []

    def test_result_exposes_amounts(self, calculator):
        employee = make_employee()
        result = calculator.calculate(employee, AttendanceInput(), CONTRIBUTION, INCOME)

        assert result.employee_id == employee.employee_id
        assert result.gross_amount == Decimal("2200.00")
        assert result.net_amount == result.breakdown.net_amount
        assert result.additional_employer_cost == Decimal("0.00")

    def test_calculate_all_orders_by_name(self, calculator):
        inputs = [
            (make_employee(name="Zoe"), AttendanceInput()),
            (make_employee(name="Ana"), AttendanceInput()),
            (make_employee(name="Marta"), AttendanceInput()),
        ]

        results = calculator.calculate_all(inputs, CONTRIBUTION, INCOME)

        assert [r.employee.name for r in results] == ["Ana", "Marta", "Zoe"]

    def test_calculate_all_empty(self, calculator):
        assert calculator.calculate_all([], CONTRIBUTION, INCOME) == []


class TestInputValidation:
    """Test that inconsistent inputs never produce a result."""

    @pytest.mark.parametrize(
        "field", ["overtime_hours", "absence_hours", "lateness_hours", "bonus_amount"]
    )
    def test_negative_attendance_rejected(self, calculator, field):
        employee = make_employee(salary="2000.00")

        with pytest.raises(InvalidInputError, match=field):
            calculator.calculate(
                employee,
                AttendanceInput(**{field: Decimal("-100")}),
                CONTRIBUTION,
                INCOME,
            )

    def test_negative_bonus_rejected_in_breakdown(self, calculator):
        with pytest.raises(InvalidInputError):
            calculator.calculate_breakdown(
                make_employee(salary="2000.00"),
                AttendanceInput(bonus_amount=Decimal("-0.01")),
                CONTRIBUTION,
                INCOME,
            )

    def test_components_not_matching_totals_rejected(self, calculator, monkeypatch):
        """A component set that disagrees with the breakdown is an error."""
        monkeypatch.setattr(ComponentBuilder, "build", lambda breakdown: [])

        with pytest.raises(InvalidInputError, match="Earning components sum to 0"):
            calculator.calculate(
                make_employee(salary="2000.00"), AttendanceInput(), CONTRIBUTION, INCOME
            )
