"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from payroll_cycle import __version__
from payroll_cycle.api.routes import health_router, periods_router
from payroll_cycle.config import configure_logging
from payroll_cycle.database import dispose_db, init_db
from payroll_cycle.exceptions import PayrollError
from payroll_cycle.services.state_machine import InvalidTransitionError

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[str, int] = {
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "INVALID_STATE": status.HTTP_409_CONFLICT,
    "DUPLICATE": status.HTTP_409_CONFLICT,
    "EMPTY_INPUT": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "INVALID_INPUT": status.HTTP_422_UNPROCESSABLE_ENTITY,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    configure_logging()
    init_db()
    yield
    # Shutdown
    await dispose_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Payroll Cycle API",
        description="Monthly payroll periods: calculation, approval and payment",
        version=__version__,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(PayrollError)
    async def payroll_error_handler(request: Request, exc: PayrollError) -> JSONResponse:
        """Map business-rule failures to their HTTP status."""
        content: dict = {"detail": str(exc), "code": exc.code}
        if isinstance(exc, InvalidTransitionError):
            content["context"] = {
                "from_status": exc.from_status,
                "to_status": exc.to_status,
            }
        return JSONResponse(
            status_code=ERROR_STATUS_CODES.get(exc.code, status.HTTP_400_BAD_REQUEST),
            content=content,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(periods_router, prefix="/api/v1")

    return app


# Default app instance for uvicorn
app = create_app()
