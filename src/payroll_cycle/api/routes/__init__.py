"""API routes."""

from payroll_cycle.api.routes.periods import router as periods_router
from payroll_cycle.api.routes.health import router as health_router

__all__ = ["periods_router", "health_router"]
