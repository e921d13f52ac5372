"""Student model."""

from sqlalchemy import BigInteger, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_fees.core.database.base import BaseModel, SchoolScopedMixin


class Student(SchoolScopedMixin, BaseModel):
    """Student enrolled in a school, optionally linked to a parent account."""

    __tablename__ = "students"

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    # Unique across the whole platform; parents link children by this code
    student_code: Mapped[str] = mapped_column(
        String(50), nullable=False, unique=True, index=True
    )
    class_name: Mapped[str] = mapped_column(String(50), nullable=False)
    section: Mapped[str] = mapped_column(String(20), nullable=False)

    parent_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=True, index=True
    )

    # Relationships
    school: Mapped["School"] = relationship("School")
    parent: Mapped["User | None"] = relationship("User", foreign_keys=[parent_id])

    @property
    def full_name(self) -> str:
        """Full name of the student."""
        return f"{self.first_name} {self.last_name}"


# Import at the end to avoid circular imports
from school_fees.modules.schools.models import School  # noqa: E402
from school_fees.core.auth.models import User  # noqa: E402
