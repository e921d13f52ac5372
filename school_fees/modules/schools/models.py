"""School model."""

from sqlalchemy import BigInteger, Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_fees.core.database.base import BaseModel


class School(BaseModel):
    """A tenant of the platform. Must be approved before its admin can log in."""

    __tablename__ = "schools"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    contact_email: Mapped[str] = mapped_column(String(255), nullable=False)
    contact_phone: Mapped[str] = mapped_column(String(50), nullable=False)
    is_approved: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False, index=True
    )
    subscription_plan_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("plans.id"), nullable=True
    )

    subscription_plan: Mapped["Plan | None"] = relationship("Plan")


# Import at the end to avoid circular imports
from school_fees.modules.plans.models import Plan  # noqa: E402
