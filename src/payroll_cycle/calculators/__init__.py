"""Payroll calculation engine."""

from payroll_cycle.calculators.aggregator import PeriodAggregator
from payroll_cycle.calculators.bracket_provider import (
    TaxBracketProvider,
    default_brackets,
    seed_default_brackets,
)
from payroll_cycle.calculators.component_builder import ComponentBuilder
from payroll_cycle.calculators.engine import PayrollCalculator
from payroll_cycle.calculators.tax_calculator import TaxCalculator, round_to_cents
from payroll_cycle.calculators.types import CalculationConstants, CalculationResult, TaxKind

__all__ = [
    "CalculationConstants",
    "CalculationResult",
    "ComponentBuilder",
    "PayrollCalculator",
    "PeriodAggregator",
    "TaxBracketProvider",
    "TaxCalculator",
    "TaxKind",
    "default_brackets",
    "round_to_cents",
    "seed_default_brackets",
]
