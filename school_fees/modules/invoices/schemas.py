"""Schemas for Invoices module."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import Field

from school_fees.modules.students.schemas import StudentBrief
from school_fees.shared.schemas import BaseSchema


class InvoiceCreate(BaseSchema):
    """Schema for creating an ad hoc invoice."""

    student_id: int = Field(..., alias="student")
    amount: Decimal = Field(..., gt=0)
    currency: str | None = Field(None, min_length=1, max_length=10)
    due_date: date
    term: str = Field(..., min_length=1, max_length=100)
    description: str | None = None


class InvoiceResponse(BaseSchema):
    """Schema for invoice response."""

    id: int
    school_id: int
    student_id: int
    student: StudentBrief | None = None
    amount: float
    currency: str
    due_date: date
    status: str
    term: str
    description: str | None
    created_at: datetime


class GenerateInvoicesRequest(BaseSchema):
    """Month and year to bill active fee structures for."""

    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000, le=9999)


class GenerateInvoicesResult(BaseSchema):
    """Outcome of a generation run. Per-student problems go to ``errors``."""

    created: int
    errors: list[str] | None = None
