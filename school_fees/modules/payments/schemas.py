"""Schemas for Payments module."""

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import Field

from school_fees.modules.payments.models import PaymentGateway
from school_fees.shared.schemas import BaseSchema


class WebhookStatus(StrEnum):
    """Outcomes a gateway may report."""

    SUCCESS = "success"
    FAILED = "failed"


class PaymentInitiateRequest(BaseSchema):
    """Schema for starting a payment."""

    invoice_id: int
    gateway: PaymentGateway


class PaymentInitiateResponse(BaseSchema):
    """Where to send the parent to complete the payment."""

    transaction_id: int
    gateway: str
    redirect_url: str
    amount: float


class PaymentWebhookPayload(BaseSchema):
    """Gateway callback body."""

    transaction_id: int
    status: WebhookStatus
    gateway_ref_id: str | None = Field(None, max_length=200)


class TransactionResponse(BaseSchema):
    """Schema for transaction response."""

    id: int
    invoice_id: int
    amount: float
    gateway: str
    status: str
    gateway_ref_id: str | None
    raw_response: dict[str, Any] | None
    created_at: datetime
    updated_at: datetime
