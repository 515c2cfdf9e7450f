"""Seed script for the built-in tax bracket schedules.

Run with:
    python scripts/seed_tax_brackets.py
    python scripts/seed_tax_brackets.py --effective-from 2024-01-01 --tenant-id <uuid>

Without --tenant-id the rows go to the shared catalog.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import date
from uuid import UUID

from payroll_cycle.calculators import seed_default_brackets
from payroll_cycle.config import configure_logging
from payroll_cycle.database import create_tables, dispose_db, get_session

logger = logging.getLogger("seed_tax_brackets")


async def seed(effective_from: date, tenant_id: UUID | None, create_schema: bool) -> None:
    """Run seed script."""
    try:
        if create_schema:
            await create_tables()
        async with get_session() as session:
            added = await seed_default_brackets(session, effective_from, tenant_id)
        logger.info("Seeded %d tax brackets effective %s", added, effective_from)
    finally:
        await dispose_db()


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Seed built-in tax brackets")
    parser.add_argument(
        "--effective-from",
        type=date.fromisoformat,
        default=date(date.today().year, 1, 1),
        help="First day the brackets apply (default: January 1st of this year)",
    )
    parser.add_argument(
        "--tenant-id",
        type=UUID,
        default=None,
        help="Tenant that owns the brackets (default: shared catalog)",
    )
    parser.add_argument(
        "--create-schema",
        action="store_true",
        help="Create missing tables before seeding",
    )
    args = parser.parse_args()

    configure_logging()
    asyncio.run(seed(args.effective_from, args.tenant_id, args.create_schema))


if __name__ == "__main__":
    main()
