"""Schemas for Plans module."""

from datetime import datetime
from decimal import Decimal

from pydantic import Field

from school_fees.shared.schemas import BaseSchema


class PlanCreate(BaseSchema):
    """Schema for creating a plan."""

    name: str = Field(..., min_length=1, max_length=100)
    price_per_month: Decimal = Field(..., ge=0)
    max_students: int = Field(..., ge=0)
    features: list[str] = Field(default_factory=list)
    is_active: bool = True


class PlanResponse(BaseSchema):
    """Schema for plan response."""

    id: int
    name: str
    price_per_month: float
    max_students: int
    features: list[str]
    is_active: bool
    created_at: datetime
