"""Tests for PeriodAggregator."""

from decimal import Decimal
from types import SimpleNamespace

import pytest

from payroll_cycle.calculators.aggregator import PeriodAggregator
from payroll_cycle.exceptions import EmptyInputError


def row(gross, net, contribution, income, extra=None):
    return SimpleNamespace(
        gross_amount=Decimal(gross),
        net_amount=Decimal(net),
        contribution_tax=Decimal(contribution),
        income_tax=Decimal(income),
        additional_employer_cost=Decimal(extra) if extra is not None else None,
    )


class TestAggregate:
    """Test period roll-up."""

    def test_sums_every_field(self):
        totals = PeriodAggregator.aggregate(
            [
                row("2350.00", "2159.68", "190.32", "0.00"),
                row("3000.00", "2719.25", "258.82", "21.93"),
            ]
        )

        assert totals.total_gross_amount == Decimal("5350.00")
        assert totals.total_net_amount == Decimal("4878.93")
        assert totals.total_contribution_tax == Decimal("449.14")
        assert totals.total_income_tax == Decimal("21.93")
        assert totals.result_count == 2

    def test_employer_cost_adds_extra_cost(self):
        totals = PeriodAggregator.aggregate(
            [
                row("1000.00", "900.00", "75.00", "0.00", extra="80.00"),
                row("500.00", "462.50", "37.50", "0.00"),
            ]
        )

        assert totals.total_employer_cost == Decimal("1580.00")

    def test_employer_cost_defaults_to_gross(self):
        totals = PeriodAggregator.aggregate([row("1234.56", "1000.00", "100.00", "0.00")])

        assert totals.total_employer_cost == Decimal("1234.56")

    def test_empty_results_rejected(self):
        with pytest.raises(EmptyInputError):
            PeriodAggregator.aggregate([])

    def test_accepts_generators(self):
        totals = PeriodAggregator.aggregate(
            row("10.00", "10.00", "0.00", "0.00") for _ in range(3)
        )

        assert totals.total_gross_amount == Decimal("30.00")
        assert totals.result_count == 3
