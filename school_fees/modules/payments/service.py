"""Service for Payments module."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from school_fees.core.auth.models import User
from school_fees.core.exceptions import (
    AuthorizationError,
    InvalidStateError,
    NotFoundError,
)
from school_fees.core.logging import get_logger
from school_fees.modules.invoices.models import Invoice, InvoiceStatus
from school_fees.modules.payments.gateways import build_redirect_url
from school_fees.modules.payments.models import (
    PaymentGateway,
    Transaction,
    TransactionStatus,
)
from school_fees.modules.payments.schemas import WebhookStatus

logger = get_logger(__name__)


class PaymentService:
    """Payment attempts on invoices and the gateway callbacks that settle them."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_transaction(self, transaction_id: int) -> Transaction:
        """Get transaction by ID."""
        result = await self.db.execute(
            select(Transaction)
            .where(Transaction.id == transaction_id)
            .execution_options(populate_existing=True)
        )
        transaction = result.scalar_one_or_none()
        if not transaction:
            raise NotFoundError("Transaction not found")
        return transaction

    async def initiate_payment(
        self, invoice_id: int, gateway: PaymentGateway, parent: User
    ) -> dict[str, Any]:
        """
        Start a payment for an invoice of the parent's child.

        Raises:
            NotFoundError: invoice does not exist
            AuthorizationError: invoice's student is not linked to the parent
            InvalidStateError: invoice is already paid; no transaction is created
        """
        result = await self.db.execute(
            select(Invoice)
            .where(Invoice.id == invoice_id)
            .options(selectinload(Invoice.student))
        )
        invoice = result.scalar_one_or_none()
        if not invoice:
            raise NotFoundError("Invoice not found")

        if invoice.student is None or invoice.student.parent_id != parent.id:
            raise AuthorizationError("Invoice does not belong to your child")

        if invoice.status == InvoiceStatus.PAID.value:
            raise InvalidStateError("Invoice already paid")

        transaction = Transaction(
            invoice_id=invoice.id,
            amount=invoice.amount,
            gateway=PaymentGateway(gateway).value,
            status=TransactionStatus.INITIATED.value,
        )
        self.db.add(transaction)
        await self.db.commit()

        logger.info(
            "Payment initiated: transaction %s for invoice %s via %s",
            transaction.id, invoice.id, transaction.gateway,
        )
        return {
            "transaction_id": transaction.id,
            "gateway": transaction.gateway,
            "redirect_url": build_redirect_url(transaction.gateway, transaction.id),
            "amount": invoice.amount,
        }

    async def handle_webhook(
        self,
        transaction_id: int,
        status: WebhookStatus,
        gateway_ref_id: str | None,
        raw_payload: dict[str, Any],
    ) -> Transaction:
        """
        Record a gateway outcome.

        The latest callback wins: status, reference and payload are
        overwritten. A success marks the invoice paid; a failure leaves the
        invoice as it is.
        """
        transaction = await self.get_transaction(transaction_id)

        transaction.status = WebhookStatus(status).value
        transaction.gateway_ref_id = gateway_ref_id
        transaction.raw_response = raw_payload

        if transaction.status == TransactionStatus.SUCCESS.value:
            invoice = await self.db.get(Invoice, transaction.invoice_id)
            if invoice is not None:
                invoice.status = InvoiceStatus.PAID.value

        await self.db.commit()
        logger.info(
            "Webhook processed: transaction %s is %s (gateway ref %s)",
            transaction.id, transaction.status, gateway_ref_id,
        )
        return await self.get_transaction(transaction.id)
