"""Bracket-based withholding calculations."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from payroll_cycle.calculators.types import TaxBracket

CENTS = Decimal("0.01")


def round_to_cents(amount: Decimal) -> Decimal:
    """Round to 2 decimal places, halves away from zero."""
    return Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)


class TaxCalculator:
    """Calculates the two withholding schedules.

    Contribution tax is a progressive sum: each bracket taxes only the slice
    of the base that falls inside it, and the slices are added up.

    Income tax picks the single highest bracket whose start the base reaches
    and applies ``base * rate - deduction`` to the whole base.

    Brackets must already be in schedule order (see TaxBracketProvider).
    Both results are rounded to cents and never negative.
    """

    @staticmethod
    def progressive_sum(base: Decimal, brackets: Sequence[TaxBracket]) -> Decimal:
        """Sum the rate-weighted slices of ``base`` across ordered brackets."""
        if base <= 0 or not brackets:
            return round_to_cents(Decimal("0"))

        total = Decimal("0")
        for bracket in brackets:
            if base <= bracket.range_start:
                break

            upper = bracket.range_end if bracket.range_end is not None else base
            taxable_in_bracket = min(base, upper) - bracket.range_start
            if taxable_in_bracket > 0:
                total += taxable_in_bracket * bracket.rate

            if bracket.range_end is None or base <= bracket.range_end:
                break

        return round_to_cents(max(total, Decimal("0")))

    @staticmethod
    def select_bracket(base: Decimal, brackets: Sequence[TaxBracket]) -> TaxBracket | None:
        """Bracket with the largest start not above ``base``."""
        applied: TaxBracket | None = None
        for bracket in brackets:
            if base < bracket.range_start:
                continue
            if applied is None or bracket.range_start > applied.range_start:
                applied = bracket
        return applied

    @classmethod
    def single_bracket_with_deduction(
        cls, base: Decimal, brackets: Sequence[TaxBracket]
    ) -> Decimal:
        """Apply one bracket's rate to the whole base, minus its fixed deduction."""
        if base <= 0 or not brackets:
            return round_to_cents(Decimal("0"))

        bracket = cls.select_bracket(base, brackets)
        if bracket is None:
            return round_to_cents(Decimal("0"))

        tax = base * bracket.rate - bracket.deduction
        return round_to_cents(max(tax, Decimal("0")))
