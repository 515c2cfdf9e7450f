"""Expands a calculation breakdown into labeled payroll components."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from payroll_cycle.calculators.tax_calculator import round_to_cents
from payroll_cycle.calculators.types import (
    ComponentCandidate,
    ComponentType,
    PayrollBreakdown,
)


class ComponentBuilder:
    """Builds the display/audit lines of a result.

    Fixed display order:
    BASE, OVERTIME, BONUS, ABSENCE, LATENESS, CONTRIBUTION_TAX, INCOME_TAX

    Rules:
    - Amounts are positive; component_type decides the side
    - Zero amounts are omitted, except BASE which is always emitted
    - Earnings are taxable and count toward the severance-fund base;
      absences, lateness and taxes do neither
    """

    SEQUENCE_START = 10
    SEQUENCE_STEP = 10

    @classmethod
    def build(cls, breakdown: PayrollBreakdown) -> list[ComponentCandidate]:
        """Build components for one breakdown, in display order."""
        rows = [
            (
                ComponentType.EARNING, "BASE", "Base salary",
                breakdown.base_salary, breakdown.base_salary, None, True,
            ),
            (
                ComponentType.EARNING, "OVERTIME", "Overtime",
                breakdown.overtime_amount, breakdown.base_salary, breakdown.overtime_hours, False,
            ),
            (
                ComponentType.EARNING, "BONUS", "Bonus",
                breakdown.bonus_amount, None, None, False,
            ),
            (
                ComponentType.DEDUCTION, "ABSENCE", "Absences",
                breakdown.absence_amount, None, breakdown.absence_hours, False,
            ),
            (
                ComponentType.DEDUCTION, "LATENESS", "Lateness",
                breakdown.lateness_amount, None, breakdown.lateness_hours, False,
            ),
            (
                ComponentType.DEDUCTION, "CONTRIBUTION_TAX", "Contribution tax",
                breakdown.contribution_tax, breakdown.gross_amount, None, False,
            ),
            (
                ComponentType.DEDUCTION, "INCOME_TAX", "Income tax",
                breakdown.income_tax, breakdown.income_tax_base, None, False,
            ),
        ]

        components: list[ComponentCandidate] = []
        sequence = cls.SEQUENCE_START
        for component_type, code, description, amount, base_amount, quantity, always in rows:
            if amount <= 0 and not always:
                continue

            is_earning = component_type == ComponentType.EARNING
            components.append(
                ComponentCandidate(
                    component_type=component_type,
                    code=code,
                    description=description,
                    amount=round_to_cents(amount),
                    sequence=sequence,
                    base_amount=round_to_cents(base_amount) if base_amount is not None else None,
                    reference_quantity=quantity,
                    is_taxable=is_earning,
                    impacts_severance_fund=is_earning,
                )
            )
            sequence += cls.SEQUENCE_STEP

        return components

    @staticmethod
    def sum_by_type(components: Iterable[ComponentCandidate]) -> dict[ComponentType, Decimal]:
        """Sum component amounts by type."""
        totals: dict[ComponentType, Decimal] = {ct: Decimal("0") for ct in ComponentType}
        for component in components:
            totals[ComponentType(component.component_type)] += component.amount
        return totals

    @classmethod
    def validate_against(
        cls, components: list[ComponentCandidate], breakdown: PayrollBreakdown
    ) -> list[str]:
        """Check that components add up to the breakdown totals.

        Returns list of error messages (empty if consistent).
        """
        errors: list[str] = []
        totals = cls.sum_by_type(components)

        if totals[ComponentType.EARNING] != breakdown.earnings_total:
            errors.append(
                f"Earning components sum to {totals[ComponentType.EARNING]}, "
                f"expected {breakdown.earnings_total}"
            )
        if totals[ComponentType.DEDUCTION] != breakdown.total_deductions:
            errors.append(
                f"Deduction components sum to {totals[ComponentType.DEDUCTION]}, "
                f"expected {breakdown.total_deductions}"
            )
        for i, component in enumerate(components):
            if component.amount < 0:
                errors.append(f"Component {i} ({component.code}) has negative amount {component.amount}")

        return errors
