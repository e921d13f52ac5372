"""Invoice model."""

from datetime import date
from decimal import Decimal
from enum import StrEnum

from sqlalchemy import (
    BigInteger,
    Date,
    ForeignKey,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_fees.core.config import settings
from school_fees.core.database.base import BaseModel, SchoolScopedMixin


class InvoiceStatus(StrEnum):
    """Invoice status."""

    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


class Invoice(SchoolScopedMixin, BaseModel):
    """Bill for one student for one term."""

    __tablename__ = "invoices"
    __table_args__ = (
        UniqueConstraint(
            "school_id", "student_id", "term", name="uq_invoices_school_student_term"
        ),
    )
    student_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("students.id"), nullable=False, index=True
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    currency: Mapped[str] = mapped_column(
        String(10), nullable=False, default=lambda: settings.default_currency
    )
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=InvoiceStatus.PENDING.value, index=True
    )
    # Free text such as "April 2025"
    term: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    school: Mapped["School"] = relationship("School")
    student: Mapped["Student"] = relationship("Student")
    transactions: Mapped[list["Transaction"]] = relationship(
        "Transaction", back_populates="invoice"
    )

    @property
    def is_paid(self) -> bool:
        return self.status == InvoiceStatus.PAID.value


# Import at the end to avoid circular imports
from school_fees.modules.schools.models import School  # noqa: E402
from school_fees.modules.students.models import Student  # noqa: E402
from school_fees.modules.payments.models import Transaction  # noqa: E402
