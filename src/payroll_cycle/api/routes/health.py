"""Health check endpoints."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, status
from pydantic import BaseModel
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError

from payroll_cycle.api.dependencies import DbSession
from payroll_cycle.config import get_settings
from payroll_cycle.models import PayrollTaxBracket

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    database: str
    version: str
    tax_brackets: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
)
async def health_check(db: DbSession) -> HealthResponse:
    """Check API and database health.

    `tax_brackets` is "catalog" when the shared bracket catalog has active
    rows, "defaults" when calculations fall back to the built-in schedules
    and "unknown" when the database is unreachable.
    """
    db_status = "unhealthy"
    brackets_status = "unknown"
    try:
        await db.execute(text("SELECT 1"))
        db_status = "healthy"
        catalog_rows = await db.scalar(
            select(func.count())
            .select_from(PayrollTaxBracket)
            .where(PayrollTaxBracket.tenant_id.is_(None), PayrollTaxBracket.is_active.is_(True))
        )
        brackets_status = "catalog" if catalog_rows else "defaults"
    except SQLAlchemyError:
        logger.warning("Database health check failed", exc_info=True)

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        timestamp=datetime.now(timezone.utc),
        database=db_status,
        version=get_settings().engine_version,
        tax_brackets=brackets_status,
    )


@router.get("/ready", status_code=status.HTTP_200_OK)
async def readiness_check() -> dict[str, str]:
    """Readiness check for container orchestration."""
    return {"status": "ready"}


@router.get("/live", status_code=status.HTTP_200_OK)
async def liveness_check() -> dict[str, str]:
    """Liveness check for container orchestration."""
    return {"status": "alive"}
