"""API endpoints for Payments module."""

import json
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from school_fees.core.auth.dependencies import require_capability
from school_fees.core.auth.models import User
from school_fees.core.auth.permissions import Capability
from school_fees.core.database.session import get_db
from school_fees.core.exceptions import AuthenticationError
from school_fees.core.logging import get_logger
from school_fees.modules.payments.gateways import verify_signature
from school_fees.modules.payments.schemas import (
    PaymentInitiateRequest,
    PaymentInitiateResponse,
    PaymentWebhookPayload,
    TransactionResponse,
)
from school_fees.modules.payments.service import PaymentService
from school_fees.shared.schemas import ApiResponse

logger = get_logger(__name__)

router = APIRouter(prefix="/payments", tags=["Payments"])


async def verify_webhook_signature(
    request: Request,
    x_webhook_signature: Annotated[str | None, Header()] = None,
) -> None:
    """Reject webhook calls whose body is not signed with the shared secret."""
    body = await request.body()
    if not verify_signature(body, x_webhook_signature):
        logger.warning(
            "Rejected payment webhook from %s: bad or missing signature",
            request.client.host if request.client else "unknown",
        )
        raise AuthenticationError("Invalid webhook signature")


@router.post("/initiate", response_model=ApiResponse[PaymentInitiateResponse])
async def initiate_payment(
    data: PaymentInitiateRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_capability(Capability.PAY_INVOICES)),
):
    """Start paying an invoice of the caller's child."""
    service = PaymentService(db)
    result = await service.initiate_payment(data.invoice_id, data.gateway, current_user)
    return ApiResponse(
        message="Payment initiated",
        data=PaymentInitiateResponse.model_validate(result),
    )


@router.post(
    "/webhook",
    response_model=ApiResponse[TransactionResponse],
    dependencies=[Depends(verify_webhook_signature)],
)
async def payment_webhook(
    payload: PaymentWebhookPayload,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Gateway callback. Signed with ``X-Webhook-Signature``.

    The body is stored as received, including fields this API does not read.
    """
    raw_payload = json.loads(await request.body())
    service = PaymentService(db)
    transaction = await service.handle_webhook(
        transaction_id=payload.transaction_id,
        status=payload.status,
        gateway_ref_id=payload.gateway_ref_id,
        raw_payload=raw_payload,
    )
    return ApiResponse(
        message="Webhook processed",
        data=TransactionResponse.model_validate(transaction),
    )
