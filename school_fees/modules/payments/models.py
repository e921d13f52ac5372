"""Payment transaction model."""

from decimal import Decimal
from enum import StrEnum
from typing import Any

from sqlalchemy import JSON, BigInteger, ForeignKey, Numeric, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_fees.core.database.base import BaseModel


class PaymentGateway(StrEnum):
    """Supported payment gateways."""

    ESEWA = "esewa"
    KHALTI = "khalti"
    FONEPAY = "fonepay"


class TransactionStatus(StrEnum):
    """Transaction status."""

    INITIATED = "initiated"
    SUCCESS = "success"
    FAILED = "failed"


class Transaction(BaseModel):
    """One payment attempt against an invoice."""

    __tablename__ = "transactions"

    invoice_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("invoices.id"), nullable=False, index=True
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    gateway: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TransactionStatus.INITIATED.value, index=True
    )
    gateway_ref_id: Mapped[str | None] = mapped_column(String(200), nullable=True)
    # Last webhook payload as received
    raw_response: Mapped[dict[str, Any] | None] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"), nullable=True
    )

    invoice: Mapped["Invoice"] = relationship("Invoice", back_populates="transactions")


# Import at the end to avoid circular imports
from school_fees.modules.invoices.models import Invoice  # noqa: E402
