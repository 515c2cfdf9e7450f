"""API test fixtures: the app wired to the in-memory test database."""

from collections.abc import AsyncGenerator
from decimal import Decimal
from uuid import UUID

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_cycle.api.app import create_app
from payroll_cycle.api.dependencies import get_constants, get_db_session
from payroll_cycle.calculators import CalculationConstants
from payroll_cycle.models import Employee


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API testing."""
    app = create_app()

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_constants] = lambda: CalculationConstants()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def seeded_tenant(session_factory, tenant_id) -> dict[str, UUID]:
    """Commit two employees for the tenant and return their ids by first name."""
    async with session_factory() as session:
        alice = Employee(
            tenant_id=tenant_id,
            full_name="Alice Lima",
            base_salary=Decimal("2200.00"),
            tax_id="123.456.789-00",
        )
        bob = Employee(
            tenant_id=tenant_id,
            full_name="Bob Souza",
            base_salary=Decimal("3000.00"),
            dependent_count=1,
        )
        session.add_all([alice, bob])
        await session.commit()
        return {"alice": alice.employee_id, "bob": bob.employee_id}


@pytest.fixture
def headers(tenant_id) -> dict[str, str]:
    return {"X-Tenant-ID": str(tenant_id)}
