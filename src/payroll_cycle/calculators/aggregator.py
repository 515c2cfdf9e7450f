"""Period-level roll-up of employee results."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal
from typing import Protocol

from payroll_cycle.calculators.types import PeriodTotals
from payroll_cycle.exceptions import EmptyInputError


class ResultAmounts(Protocol):
    """Fields read from a calculation result or a stored result row."""

    gross_amount: Decimal
    net_amount: Decimal
    contribution_tax: Decimal
    income_tax: Decimal
    additional_employer_cost: Decimal | None


class PeriodAggregator:
    """Sums employee results into period totals.

    Employer cost is gross plus any additional employer-side cost per result.
    Sums are exact: inputs are already rounded to cents.
    """

    @staticmethod
    def aggregate(results: Iterable[ResultAmounts]) -> PeriodTotals:
        """Aggregate results, raising EmptyInputError if there are none."""
        items = list(results)
        if not items:
            raise EmptyInputError("No payroll results were calculated for the period")

        total_gross = Decimal("0")
        total_net = Decimal("0")
        total_contribution = Decimal("0")
        total_income = Decimal("0")
        total_employer_cost = Decimal("0")

        for item in items:
            total_gross += item.gross_amount
            total_net += item.net_amount
            total_contribution += item.contribution_tax
            total_income += item.income_tax
            total_employer_cost += item.gross_amount + (item.additional_employer_cost or Decimal("0"))

        return PeriodTotals(
            total_gross_amount=total_gross,
            total_net_amount=total_net,
            total_contribution_tax=total_contribution,
            total_income_tax=total_income,
            total_employer_cost=total_employer_cost,
            result_count=len(items),
        )
