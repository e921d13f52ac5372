"""Subscription plan model."""

from decimal import Decimal

from sqlalchemy import JSON, Boolean, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from school_fees.core.database.base import BaseModel


class Plan(BaseModel):
    """Platform subscription plan a school can be placed on."""

    __tablename__ = "plans"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    price_per_month: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    max_students: Mapped[int] = mapped_column(Integer, nullable=False)
    features: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
