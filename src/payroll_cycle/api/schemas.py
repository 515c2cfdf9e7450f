"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Period schemas
# ============================================================================


class PeriodCreate(BaseModel):
    """Schema for opening a payroll period."""

    month: int = Field(ge=1, le=12)
    year: int = Field(ge=2000, le=2100)
    requested_by: UUID | None = None


class CalculateRequest(BaseModel):
    """Schema for a calculation request."""

    requested_by: UUID | None = None


class ApproveRequest(BaseModel):
    """Schema for an approval request."""

    requested_by: UUID | None = None
    notes: str | None = None


class MarkPaidRequest(BaseModel):
    """Schema for recording payment."""

    payment_date: datetime | date
    requested_by: UUID | None = None
    notes: str | None = None


class PeriodSummaryResponse(BaseModel):
    """Schema for a period without its results."""

    model_config = ConfigDict(from_attributes=True)

    payroll_period_id: UUID
    tenant_id: UUID
    reference_month: int
    reference_year: int
    status: str
    calculated_at: datetime | None = None
    approved_at: datetime | None = None
    approved_by_user_id: UUID | None = None
    paid_at: datetime | None = None
    paid_by_user_id: UUID | None = None
    total_gross_amount: Decimal | None = None
    total_net_amount: Decimal | None = None
    total_contribution_tax: Decimal | None = None
    total_income_tax: Decimal | None = None
    total_employer_cost: Decimal | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime | None = None


class PeriodListResponse(BaseModel):
    """Schema for listing periods."""

    items: list[PeriodSummaryResponse]
    total: int


# ============================================================================
# Result schemas
# ============================================================================


class ComponentResponse(BaseModel):
    """Schema for one earning or deduction line."""

    model_config = ConfigDict(from_attributes=True)

    payroll_component_id: UUID
    component_type: str
    code: str
    description: str
    amount: Decimal
    base_amount: Decimal | None = None
    reference_quantity: Decimal | None = None
    is_taxable: bool
    impacts_severance_fund: bool
    sequence: int


class ResultResponse(BaseModel):
    """Schema for one employee's result, as consumed by slip rendering."""

    model_config = ConfigDict(from_attributes=True)

    payroll_result_id: UUID
    payroll_period_id: UUID
    employee_id: UUID
    employee_name_snapshot: str
    tax_id_snapshot: str | None = None
    department_snapshot: str | None = None
    position_snapshot: str | None = None
    bank_name_snapshot: str | None = None
    bank_agency_snapshot: str | None = None
    bank_account_snapshot: str | None = None
    dependents_snapshot: int
    base_salary_snapshot: Decimal
    total_earnings: Decimal
    total_deductions: Decimal
    gross_amount: Decimal
    net_amount: Decimal
    contribution_tax: Decimal
    income_tax: Decimal
    calculated_at: datetime
    components: list[ComponentResponse] = []


class PeriodResponse(PeriodSummaryResponse):
    """Schema for a period with its results and components."""

    results: list[ResultResponse] = []


# ============================================================================
# Entry schemas
# ============================================================================


class EntryCreate(BaseModel):
    """Schema for adding an employee to a period."""

    employee_id: UUID
    requested_by: UUID | None = None


class EntryUpdate(BaseModel):
    """Schema for replacing an entry's attendance facts."""

    overtime_hours: Decimal = Field(default=Decimal("0"), ge=0)
    absence_hours: Decimal = Field(default=Decimal("0"), ge=0)
    lateness_hours: Decimal = Field(default=Decimal("0"), ge=0)
    bonus_amount: Decimal = Field(default=Decimal("0"), ge=0)
    notes: str | None = None
    requested_by: UUID | None = None


class EntryBulkItem(BaseModel):
    """One entry's replacement values inside a bulk update."""

    entry_id: UUID
    overtime_hours: Decimal = Field(default=Decimal("0"), ge=0)
    absence_hours: Decimal = Field(default=Decimal("0"), ge=0)
    lateness_hours: Decimal = Field(default=Decimal("0"), ge=0)
    bonus_amount: Decimal = Field(default=Decimal("0"), ge=0)
    notes: str | None = None


class EntryBulkUpdate(BaseModel):
    """Schema for replacing several entries of a period at once."""

    items: list[EntryBulkItem]
    requested_by: UUID | None = None


class EntryResponse(BaseModel):
    """Schema for an attendance entry."""

    model_config = ConfigDict(from_attributes=True)

    payroll_entry_id: UUID
    payroll_period_id: UUID
    employee_id: UUID
    overtime_hours: Decimal | None = None
    absence_hours: Decimal | None = None
    lateness_hours: Decimal | None = None
    bonus_amount: Decimal | None = None
    notes: str | None = None
    updated_at: datetime | None = None


class EntryListResponse(BaseModel):
    """Schema for listing entries."""

    items: list[EntryResponse]
    total: int


# ============================================================================
# Error schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Schema for error response."""

    detail: str
    code: str | None = None
    context: dict[str, Any] | None = None
