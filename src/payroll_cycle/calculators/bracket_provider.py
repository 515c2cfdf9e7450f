"""Tax bracket resolution with effective dating and built-in fallbacks."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_cycle.calculators.types import TaxBracket, TaxKind
from payroll_cycle.models import PayrollTaxBracket

logger = logging.getLogger(__name__)


DEFAULT_BRACKETS: dict[TaxKind, tuple[TaxBracket, ...]] = {
    TaxKind.CONTRIBUTION: (
        TaxBracket(Decimal("0"), Decimal("1412.00"), Decimal("0.075"), sort_order=1),
        TaxBracket(Decimal("1412.01"), Decimal("2666.68"), Decimal("0.09"), sort_order=2),
        TaxBracket(Decimal("2666.69"), Decimal("4000.03"), Decimal("0.12"), sort_order=3),
        TaxBracket(Decimal("4000.04"), Decimal("7786.02"), Decimal("0.14"), sort_order=4),
    ),
    TaxKind.INCOME: (
        TaxBracket(Decimal("0"), Decimal("2259.20"), Decimal("0"), Decimal("0"), 1),
        TaxBracket(Decimal("2259.21"), Decimal("2826.65"), Decimal("0.075"), Decimal("169.44"), 2),
        TaxBracket(Decimal("2826.66"), Decimal("3751.05"), Decimal("0.15"), Decimal("381.44"), 3),
        TaxBracket(Decimal("3751.06"), Decimal("4664.68"), Decimal("0.225"), Decimal("662.77"), 4),
        TaxBracket(Decimal("4664.69"), None, Decimal("0.275"), Decimal("896.00"), 5),
    ),
}


def default_brackets(tax_kind: TaxKind) -> list[TaxBracket]:
    """Built-in reference schedule for a tax kind."""
    return list(DEFAULT_BRACKETS.get(TaxKind(tax_kind), ()))


class TaxBracketProvider:
    """Resolves the ordered bracket schedule for a tax kind on a date.

    Lookup order (first non-empty wins):
    1. Active tenant-specific brackets effective on the date
    2. Active shared-catalog brackets (tenant_id NULL) effective on the date
    3. Built-in defaults

    Brackets are ordered by sort_order, then range_start. A missing schedule
    is not an error.
    """

    def __init__(self, session: AsyncSession, tenant_id: UUID | None = None):
        self.session = session
        self.tenant_id = tenant_id
        self._cache: dict[str, list[TaxBracket]] = {}

    async def get_brackets(self, tax_kind: TaxKind, reference_date: date) -> list[TaxBracket]:
        """Get the bracket schedule for ``tax_kind`` active on ``reference_date``."""
        tax_kind = TaxKind(tax_kind)
        cache_key = f"{tax_kind.value}:{reference_date}"
        if cache_key in self._cache:
            return list(self._cache[cache_key])

        brackets: list[TaxBracket] = []
        if self.tenant_id is not None:
            brackets = await self._get_configured_brackets(tax_kind, reference_date, self.tenant_id)
        if not brackets:
            brackets = await self._get_configured_brackets(tax_kind, reference_date, None)
        if not brackets:
            logger.info(
                "No %s brackets configured for tenant %s on %s; using built-in defaults",
                tax_kind.value,
                self.tenant_id,
                reference_date,
            )
            brackets = default_brackets(tax_kind)

        self._cache[cache_key] = brackets
        return list(brackets)

    async def _get_configured_brackets(
        self,
        tax_kind: TaxKind,
        reference_date: date,
        tenant_id: UUID | None,
    ) -> list[TaxBracket]:
        """Query catalog rows for one tenant scope (None = shared catalog)."""
        tenant_filter = (
            PayrollTaxBracket.tenant_id.is_(None)
            if tenant_id is None
            else PayrollTaxBracket.tenant_id == tenant_id
        )
        result = await self.session.execute(
            select(PayrollTaxBracket)
            .where(
                PayrollTaxBracket.tax_kind == tax_kind.value,
                PayrollTaxBracket.is_active.is_(True),
                PayrollTaxBracket.effective_from <= reference_date,
                (
                    PayrollTaxBracket.effective_to.is_(None)
                    | (PayrollTaxBracket.effective_to >= reference_date)
                ),
                tenant_filter,
            )
            .order_by(PayrollTaxBracket.sort_order, PayrollTaxBracket.range_start)
        )
        return [row.to_bracket() for row in result.scalars().all()]


async def seed_default_brackets(
    session: AsyncSession,
    effective_from: date,
    tenant_id: UUID | None = None,
) -> int:
    """Store the built-in schedules as catalog rows for one scope.

    Tax kinds that already have rows in the scope are skipped.
    Returns the number of rows added.
    """
    added = 0
    scope = (
        PayrollTaxBracket.tenant_id.is_(None)
        if tenant_id is None
        else PayrollTaxBracket.tenant_id == tenant_id
    )
    for tax_kind in TaxKind:
        existing = await session.execute(
            select(PayrollTaxBracket.payroll_tax_bracket_id)
            .where(PayrollTaxBracket.tax_kind == tax_kind.value, scope)
            .limit(1)
        )
        if existing.scalar_one_or_none() is not None:
            logger.info("%s brackets already exist for tenant %s, skipping", tax_kind.value, tenant_id)
            continue

        for bracket in default_brackets(tax_kind):
            session.add(
                PayrollTaxBracket(
                    tenant_id=tenant_id,
                    tax_kind=tax_kind.value,
                    range_start=bracket.range_start,
                    range_end=bracket.range_end,
                    rate=bracket.rate,
                    deduction=bracket.deduction,
                    effective_from=effective_from,
                    sort_order=bracket.sort_order,
                )
            )
            added += 1

    await session.flush()
    return added
