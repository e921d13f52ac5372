"""Schemas for Fee Structures module."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import Field, model_validator

from school_fees.modules.fee_structures.scholarship import ScholarshipType
from school_fees.modules.students.schemas import StudentBrief
from school_fees.shared.schemas import BaseSchema


def _check_terms(
    scholarship_type: ScholarshipType | None,
    scholarship: Decimal | None,
    effective_from: date | None,
    effective_to: date | None,
) -> None:
    if (
        scholarship_type == ScholarshipType.PERCENTAGE
        and scholarship is not None
        and scholarship > 100
    ):
        raise ValueError("Percentage scholarship cannot exceed 100")
    if effective_from and effective_to and effective_to < effective_from:
        raise ValueError("effectiveTo cannot be before effectiveFrom")


class FeeStructureCreate(BaseSchema):
    """Schema for creating a fee structure. The new structure becomes the active one."""

    student_id: int = Field(..., alias="student")
    monthly_fee: Decimal = Field(..., ge=0)
    scholarship: Decimal = Field(Decimal("0"), ge=0)
    scholarship_type: ScholarshipType = ScholarshipType.NONE
    effective_from: date
    effective_to: date | None = None
    notes: str | None = None

    @model_validator(mode="after")
    def validate_terms(self) -> "FeeStructureCreate":
        _check_terms(
            self.scholarship_type, self.scholarship, self.effective_from, self.effective_to
        )
        return self


class FeeStructureUpdate(BaseSchema):
    """
    Schema for updating a fee structure.

    Only provided fields change. The student cannot be reassigned; a
    ``student`` key in the body is ignored.
    """

    monthly_fee: Decimal | None = Field(None, ge=0)
    scholarship: Decimal | None = Field(None, ge=0)
    scholarship_type: ScholarshipType | None = None
    effective_from: date | None = None
    effective_to: date | None = None
    notes: str | None = None

    @model_validator(mode="after")
    def validate_terms(self) -> "FeeStructureUpdate":
        _check_terms(
            self.scholarship_type, self.scholarship, self.effective_from, self.effective_to
        )
        return self


class FeeStructureResponse(BaseSchema):
    """Schema for fee structure response."""

    id: int
    school_id: int
    student_id: int
    student: StudentBrief | None = None
    monthly_fee: float
    scholarship: float
    scholarship_type: str
    actual_fee: float
    effective_from: date
    effective_to: date | None
    is_active: bool
    notes: str | None
    created_at: datetime
