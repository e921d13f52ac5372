"""Fee structure model."""

from datetime import date
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    Boolean,
    Date,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_fees.core.database.base import BaseModel, SchoolScopedMixin
from school_fees.modules.fee_structures.scholarship import (
    ScholarshipType,
    compute_actual_fee,
)


class FeeStructure(SchoolScopedMixin, BaseModel):
    """
    Monthly fee terms for one student.

    At most one structure per student is active; the partial unique index
    below rejects a second active row. Structures are never deleted.
    """

    __tablename__ = "fee_structures"
    __table_args__ = (
        Index(
            "uq_fee_structures_active_student",
            "student_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )
    student_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("students.id"), nullable=False, index=True
    )

    monthly_fee: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    scholarship: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False, default=Decimal("0.00")
    )
    scholarship_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ScholarshipType.NONE.value
    )
    effective_from: Mapped[date] = mapped_column(Date, nullable=False)
    effective_to: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    school: Mapped["School"] = relationship("School")
    student: Mapped["Student"] = relationship("Student")

    @property
    def actual_fee(self) -> Decimal:
        """Monthly fee after the scholarship, unrounded."""
        return compute_actual_fee(
            self.monthly_fee, self.scholarship_type, self.scholarship
        )


# Import at the end to avoid circular imports
from school_fees.modules.schools.models import School  # noqa: E402
from school_fees.modules.students.models import Student  # noqa: E402
