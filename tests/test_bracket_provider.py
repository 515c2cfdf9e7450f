"""Tests for TaxBracketProvider against an in-memory database."""

import logging
from datetime import date
from decimal import Decimal
from uuid import uuid4

from payroll_cycle.calculators.bracket_provider import (
    TaxBracketProvider,
    default_brackets,
    seed_default_brackets,
)
from payroll_cycle.calculators.types import TaxKind
from payroll_cycle.models import PayrollTaxBracket


REFERENCE_DATE = date(2024, 3, 31)


def bracket_row(tax_kind, start, end, rate, sort_order, tenant_id=None, **fields):
    fields.setdefault("effective_from", date(2024, 1, 1))
    return PayrollTaxBracket(
        tenant_id=tenant_id,
        tax_kind=tax_kind.value,
        range_start=Decimal(start),
        range_end=Decimal(end) if end is not None else None,
        rate=Decimal(rate),
        sort_order=sort_order,
        **fields,
    )


class TestDefaults:
    """Test built-in fallback schedules."""

    def test_default_schedules_shape(self):
        contribution = default_brackets(TaxKind.CONTRIBUTION)
        income = default_brackets(TaxKind.INCOME)

        assert len(contribution) == 4
        assert contribution[-1].range_end == Decimal("7786.02")
        assert len(income) == 5
        assert income[-1].range_end is None
        assert income[-1].deduction == Decimal("896.00")

    async def test_falls_back_when_nothing_configured(self, session, caplog):
        provider = TaxBracketProvider(session, uuid4())

        with caplog.at_level(logging.INFO, logger="payroll_cycle.calculators.bracket_provider"):
            brackets = await provider.get_brackets(TaxKind.CONTRIBUTION, REFERENCE_DATE)

        assert brackets == default_brackets(TaxKind.CONTRIBUTION)
        assert "built-in defaults" in caplog.text


class TestConfiguredBrackets:
    """Test catalog lookup."""

    async def test_shared_catalog_ordered_by_sort_order(self, session):
        session.add_all(
            [
                bracket_row(TaxKind.INCOME, "1000", None, "0.20", 2),
                bracket_row(TaxKind.INCOME, "0", "999.99", "0", 1),
            ]
        )
        await session.flush()

        brackets = await TaxBracketProvider(session).get_brackets(TaxKind.INCOME, REFERENCE_DATE)

        assert [b.range_start for b in brackets] == [Decimal("0"), Decimal("1000")]
        assert brackets[1].rate == Decimal("0.20")
        assert brackets[1].range_end is None

    async def test_tenant_rows_override_shared(self, session, tenant_id):
        session.add_all(
            [
                bracket_row(TaxKind.CONTRIBUTION, "0", None, "0.10", 1),
                bracket_row(TaxKind.CONTRIBUTION, "0", None, "0.05", 1, tenant_id=tenant_id),
            ]
        )
        await session.flush()

        tenant_brackets = await TaxBracketProvider(session, tenant_id).get_brackets(
            TaxKind.CONTRIBUTION, REFERENCE_DATE
        )
        other_brackets = await TaxBracketProvider(session, uuid4()).get_brackets(
            TaxKind.CONTRIBUTION, REFERENCE_DATE
        )

        assert [b.rate for b in tenant_brackets] == [Decimal("0.05")]
        assert [b.rate for b in other_brackets] == [Decimal("0.10")]

    async def test_ignores_inactive_and_out_of_window_rows(self, session):
        session.add_all(
            [
                bracket_row(TaxKind.CONTRIBUTION, "0", None, "0.10", 1, is_active=False),
                bracket_row(
                    TaxKind.CONTRIBUTION, "0", None, "0.11", 1,
                    effective_from=date(2024, 4, 1),
                ),
                bracket_row(
                    TaxKind.CONTRIBUTION, "0", None, "0.12", 1,
                    effective_from=date(2023, 1, 1),
                    effective_to=date(2023, 12, 31),
                ),
            ]
        )
        await session.flush()

        brackets = await TaxBracketProvider(session).get_brackets(
            TaxKind.CONTRIBUTION, REFERENCE_DATE
        )

        assert brackets == default_brackets(TaxKind.CONTRIBUTION)

    async def test_effective_window_is_inclusive(self, session):
        session.add(
            bracket_row(
                TaxKind.INCOME, "0", None, "0.15", 1,
                effective_from=date(2024, 3, 1),
                effective_to=REFERENCE_DATE,
            )
        )
        await session.flush()

        brackets = await TaxBracketProvider(session).get_brackets(TaxKind.INCOME, REFERENCE_DATE)

        assert [b.rate for b in brackets] == [Decimal("0.15")]

    async def test_results_cached_per_kind_and_date(self, session):
        provider = TaxBracketProvider(session)
        first = await provider.get_brackets(TaxKind.INCOME, REFERENCE_DATE)

        session.add(bracket_row(TaxKind.INCOME, "0", None, "0.50", 1))
        await session.flush()

        assert await provider.get_brackets(TaxKind.INCOME, REFERENCE_DATE) == first
        assert await TaxBracketProvider(session).get_brackets(TaxKind.INCOME, REFERENCE_DATE) != first


class TestSeedDefaultBrackets:
    """Test storing the built-in schedules as catalog rows."""

    async def test_seeds_both_kinds_once(self, session):
        added = await seed_default_brackets(session, date(2024, 1, 1))
        again = await seed_default_brackets(session, date(2024, 1, 1))

        assert added == 9
        assert again == 0

    async def test_seeded_rows_match_defaults(self, session):
        await seed_default_brackets(session, date(2024, 1, 1))
        provider = TaxBracketProvider(session)

        for tax_kind in TaxKind:
            brackets = await provider.get_brackets(tax_kind, REFERENCE_DATE)
            assert brackets == default_brackets(tax_kind)

    async def test_seeds_tenant_scope(self, session, tenant_id):
        await seed_default_brackets(session, date(2024, 1, 1), tenant_id)

        shared = await TaxBracketProvider(session)._get_configured_brackets(
            TaxKind.INCOME, REFERENCE_DATE, None
        )
        tenant = await TaxBracketProvider(session)._get_configured_brackets(
            TaxKind.INCOME, REFERENCE_DATE, tenant_id
        )

        assert shared == []
        assert len(tenant) == 5
