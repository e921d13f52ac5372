from datetime import datetime
from enum import StrEnum

from sqlalchemy import BigInteger, Boolean, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_fees.core.database.base import BaseModel


class UserRole(StrEnum):
    """User roles in the system."""

    SUPER_ADMIN = "super_admin"
    SCHOOL_ADMIN = "school_admin"
    PARENT = "parent"

    @property
    def requires_school(self) -> bool:
        return self in (UserRole.SCHOOL_ADMIN, UserRole.PARENT)


class User(BaseModel):
    """
    Platform user.

    Super admins operate across schools and have no school. School admins and
    parents always belong to exactly one school.
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    school_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("schools.id"), nullable=True, index=True
    )

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    school: Mapped["School | None"] = relationship("School", foreign_keys=[school_id])


# Import at the end to avoid circular imports
from school_fees.modules.schools.models import School  # noqa: E402
