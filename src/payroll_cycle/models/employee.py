"""Employee directory model.

Owned by the HR directory; payroll only reads it and copies the display
fields into each result at calculation time.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_cycle.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from payroll_cycle.models.payroll import PayrollEntry


class Employee(Base, TimestampMixin):
    """Employee record."""

    __tablename__ = "employee"

    employee_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    tax_id: Mapped[str | None] = mapped_column(String(20), nullable=True)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    position: Mapped[str | None] = mapped_column(String(100), nullable=True)
    bank_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    bank_agency: Mapped[str | None] = mapped_column(String(10), nullable=True)
    bank_account: Mapped[str | None] = mapped_column(String(20), nullable=True)
    base_salary: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    dependent_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("dependent_count >= 0", name="employee_dependents_check"),
    )

    # Relationships
    entries: Mapped[list[PayrollEntry]] = relationship(back_populates="employee")

    @property
    def display_name(self) -> str:
        """Name used on payroll documents."""
        return self.full_name or f"Employee #{self.employee_id}"
