"""Pytest fixtures for payroll cycle tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from decimal import Decimal
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from payroll_cycle.calculators import CalculationConstants
from payroll_cycle.models import Base, Employee

# In-memory SQLite shared across sessions of one test
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh test database engine per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def tenant_id() -> UUID:
    return uuid4()


@pytest.fixture
def constants() -> CalculationConstants:
    """Reference constants: 220 hours, 1.5x overtime, 189.59 per dependent."""
    return CalculationConstants()


async def add_employee(
    session: AsyncSession,
    tenant_id: UUID,
    full_name: str,
    base_salary: Decimal | None,
    dependent_count: int = 0,
    is_active: bool = True,
    **fields,
) -> Employee:
    """Insert an employee directory record."""
    employee = Employee(
        tenant_id=tenant_id,
        full_name=full_name,
        base_salary=base_salary,
        dependent_count=dependent_count,
        is_active=is_active,
        **fields,
    )
    session.add(employee)
    await session.flush()
    return employee


@pytest.fixture
def make_employee(session: AsyncSession, tenant_id: UUID):
    """Factory for employees of the test tenant."""

    async def _make(full_name: str, base_salary: Decimal | None, **fields) -> Employee:
        return await add_employee(session, tenant_id, full_name, base_salary, **fields)

    return _make


@pytest_asyncio.fixture
async def employees(session: AsyncSession, tenant_id: UUID) -> dict[str, Employee]:
    """Two active employees and one inactive one.

    Bob is inserted first so ordering by name is observable.
    """
    bob = await add_employee(
        session,
        tenant_id,
        "Bob Souza",
        Decimal("3000.00"),
        dependent_count=1,
        tax_id="987.654.321-00",
        department="Operations",
        position="Analyst",
        bank_name="Banco Central",
        bank_agency="0001",
        bank_account="12345-6",
    )
    alice = await add_employee(
        session,
        tenant_id,
        "Alice Lima",
        Decimal("2200.00"),
        tax_id="123.456.789-00",
        department="Finance",
        position="Assistant",
    )
    carol = await add_employee(
        session, tenant_id, "Carol Dias", Decimal("5000.00"), is_active=False
    )
    return {"alice": alice, "bob": bob, "carol": carol}
