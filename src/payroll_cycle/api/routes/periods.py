"""Payroll period API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, Response, status

from payroll_cycle.api.dependencies import Constants, DbSession, TenantId
from payroll_cycle.api.schemas import (
    ApproveRequest,
    CalculateRequest,
    EntryBulkUpdate,
    EntryCreate,
    EntryListResponse,
    EntryResponse,
    EntryUpdate,
    ErrorResponse,
    MarkPaidRequest,
    PeriodCreate,
    PeriodListResponse,
    PeriodResponse,
    PeriodSummaryResponse,
    ResultResponse,
)
from payroll_cycle.exceptions import PayrollNotFoundError
from payroll_cycle.services.attendance_service import AttendanceService, EntryValues
from payroll_cycle.services.period_service import PayrollPeriodService

router = APIRouter(prefix="/payroll-periods", tags=["payroll-periods"])


# ============================================================================
# Periods
# ============================================================================


@router.post(
    "",
    response_model=PeriodResponse,
    status_code=status.HTTP_201_CREATED,
    responses={200: {"model": PeriodResponse}, 422: {"model": ErrorResponse}},
)
async def create_period(
    db: DbSession,
    tenant_id: TenantId,
    payload: PeriodCreate,
    response: Response,
) -> PeriodResponse:
    """Open a draft period, or return the one already open for that month.

    Answers 201 when a period is opened and 200 when an existing one is returned.
    """
    service = PayrollPeriodService(db, tenant_id)
    existing = await service.get_period_by_reference(payload.month, payload.year)
    if existing is not None:
        response.status_code = status.HTTP_200_OK
        return PeriodResponse.model_validate(existing)

    period = await service.create_period(payload.month, payload.year, payload.requested_by)
    await db.commit()
    return PeriodResponse.model_validate(period)


@router.get(
    "",
    response_model=PeriodListResponse,
    responses={422: {"model": ErrorResponse}},
)
async def list_periods(
    db: DbSession,
    tenant_id: TenantId,
    year: Annotated[int | None, Query(ge=2000, le=2100)] = None,
    status_filter: Annotated[str | None, Query(alias="status")] = None,
) -> PeriodListResponse:
    """List periods for a tenant, newest first."""
    service = PayrollPeriodService(db, tenant_id)
    periods = await service.list_periods(year=year, status=status_filter)
    return PeriodListResponse(
        items=[PeriodSummaryResponse.model_validate(p) for p in periods],
        total=len(periods),
    )


@router.get(
    "/by-reference",
    response_model=PeriodResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_period_by_reference(
    db: DbSession,
    tenant_id: TenantId,
    month: Annotated[int, Query(ge=1, le=12)],
    year: Annotated[int, Query(ge=2000, le=2100)],
) -> PeriodResponse:
    """Get the period for a reference month and year."""
    service = PayrollPeriodService(db, tenant_id)
    period = await service.get_period_by_reference(month, year)
    if period is None:
        raise PayrollNotFoundError("Payroll period", f"{month:02d}/{year}")
    return PeriodResponse.model_validate(period)


@router.get(
    "/{period_id}",
    response_model=PeriodResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_period(
    db: DbSession,
    tenant_id: TenantId,
    period_id: Annotated[UUID, Path()],
) -> PeriodResponse:
    """Get a period with its results and components."""
    service = PayrollPeriodService(db, tenant_id)
    period = await service.get_period(period_id)
    if period is None:
        raise PayrollNotFoundError("Payroll period", period_id)
    return PeriodResponse.model_validate(period)


# ============================================================================
# Lifecycle
# ============================================================================


@router.post(
    "/{period_id}/calculate",
    response_model=PeriodResponse,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def calculate_period(
    db: DbSession,
    tenant_id: TenantId,
    constants: Constants,
    period_id: Annotated[UUID, Path()],
    payload: CalculateRequest | None = None,
) -> PeriodResponse:
    """Calculate (or recalculate) every employee of the period."""
    service = PayrollPeriodService(db, tenant_id, constants)
    period = await service.calculate(period_id, payload.requested_by if payload else None)
    await db.commit()
    return PeriodResponse.model_validate(period)


@router.post(
    "/{period_id}/approve",
    response_model=PeriodResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def approve_period(
    db: DbSession,
    tenant_id: TenantId,
    period_id: Annotated[UUID, Path()],
    payload: ApproveRequest | None = None,
) -> PeriodResponse:
    """Approve a calculated period."""
    payload = payload or ApproveRequest()
    service = PayrollPeriodService(db, tenant_id)
    period = await service.approve(period_id, payload.requested_by, payload.notes)
    await db.commit()
    return PeriodResponse.model_validate(period)


@router.post(
    "/{period_id}/pay",
    response_model=PeriodResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def mark_period_paid(
    db: DbSession,
    tenant_id: TenantId,
    period_id: Annotated[UUID, Path()],
    payload: MarkPaidRequest,
) -> PeriodResponse:
    """Record payment of an approved period."""
    service = PayrollPeriodService(db, tenant_id)
    period = await service.mark_paid(
        period_id, payload.payment_date, payload.requested_by, payload.notes
    )
    await db.commit()
    return PeriodResponse.model_validate(period)


@router.get(
    "/{period_id}/results/{result_id}",
    response_model=ResultResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def get_result(
    db: DbSession,
    tenant_id: TenantId,
    period_id: Annotated[UUID, Path()],
    result_id: Annotated[UUID, Path()],
) -> ResultResponse:
    """Get one employee's result with components for slip rendering."""
    service = PayrollPeriodService(db, tenant_id)
    result = await service.get_result(period_id, result_id)
    return ResultResponse.model_validate(result)


# ============================================================================
# Attendance entries
# ============================================================================


@router.get(
    "/{period_id}/entries",
    response_model=EntryListResponse,
    responses={404: {"model": ErrorResponse}},
)
async def list_entries(
    db: DbSession,
    tenant_id: TenantId,
    period_id: Annotated[UUID, Path()],
) -> EntryListResponse:
    """List a period's attendance entries."""
    service = AttendanceService(db, tenant_id)
    entries = await service.list_entries(period_id)
    return EntryListResponse(
        items=[EntryResponse.model_validate(e) for e in entries],
        total=len(entries),
    )


@router.post(
    "/{period_id}/entries",
    response_model=EntryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def add_entry(
    db: DbSession,
    tenant_id: TenantId,
    period_id: Annotated[UUID, Path()],
    payload: EntryCreate,
) -> EntryResponse:
    """Add an employee to the period."""
    service = AttendanceService(db, tenant_id)
    entry = await service.add_entry(period_id, payload.employee_id, payload.requested_by)
    await db.commit()
    return EntryResponse.model_validate(entry)


@router.put(
    "/{period_id}/entries/{entry_id}",
    response_model=EntryResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_entry(
    db: DbSession,
    tenant_id: TenantId,
    period_id: Annotated[UUID, Path()],
    entry_id: Annotated[UUID, Path()],
    payload: EntryUpdate,
) -> EntryResponse:
    """Replace an entry's hours, bonus and notes."""
    service = AttendanceService(db, tenant_id)
    entry = await service.update_entry(
        period_id,
        entry_id,
        overtime_hours=payload.overtime_hours,
        absence_hours=payload.absence_hours,
        lateness_hours=payload.lateness_hours,
        bonus_amount=payload.bonus_amount,
        notes=payload.notes,
        requested_by=payload.requested_by,
    )
    await db.commit()
    return EntryResponse.model_validate(entry)


@router.put(
    "/{period_id}/entries",
    response_model=EntryListResponse,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def update_entries(
    db: DbSession,
    tenant_id: TenantId,
    period_id: Annotated[UUID, Path()],
    payload: EntryBulkUpdate,
) -> EntryListResponse:
    """Replace several entries of the period at once."""
    service = AttendanceService(db, tenant_id)
    entries = await service.update_entries(
        period_id,
        [EntryValues(**item.model_dump()) for item in payload.items],
        requested_by=payload.requested_by,
    )
    await db.commit()
    return EntryListResponse(
        items=[EntryResponse.model_validate(e) for e in entries],
        total=len(entries),
    )
