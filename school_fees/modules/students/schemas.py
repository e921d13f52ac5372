"""Schemas for Students module."""

from datetime import datetime

from pydantic import Field, field_validator

from school_fees.shared.schemas import BaseSchema


class ParentBrief(BaseSchema):
    """Parent display fields embedded in student responses."""

    id: int
    name: str
    email: str


class StudentBrief(BaseSchema):
    """Student display fields embedded in fee structure and invoice responses."""

    id: int
    first_name: str
    last_name: str
    student_code: str
    class_name: str
    section: str


class StudentCreate(BaseSchema):
    """Schema for creating a student."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    student_code: str = Field(..., min_length=1, max_length=50)
    class_name: str = Field(..., min_length=1, max_length=50)
    section: str = Field(..., min_length=1, max_length=20)
    parent_id: int | None = Field(None, alias="parent")

    @field_validator("parent_id", mode="before")
    @classmethod
    def empty_parent_to_none(cls, v):
        """The frontend sends an empty string for "no parent"."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class StudentUpdate(BaseSchema):
    """Schema for updating a student. Only provided fields are changed."""

    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    student_code: str | None = Field(None, min_length=1, max_length=50)
    class_name: str | None = Field(None, min_length=1, max_length=50)
    section: str | None = Field(None, min_length=1, max_length=20)
    parent_id: int | None = Field(None, alias="parent")

    @field_validator("parent_id", mode="before")
    @classmethod
    def empty_parent_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class StudentResponse(BaseSchema):
    """Schema for student response."""

    id: int
    school_id: int
    first_name: str
    last_name: str
    full_name: str
    student_code: str
    class_name: str
    section: str
    parent_id: int | None
    parent: ParentBrief | None = None
    created_at: datetime


class LinkChildRequest(BaseSchema):
    """Parent links a child by the code the school issued."""

    student_code: str = Field(..., min_length=1, max_length=50)
