"""API endpoints for Invoices module."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_fees.core.auth.dependencies import require_capability
from school_fees.core.auth.models import User
from school_fees.core.auth.permissions import Capability
from school_fees.core.database.session import get_db
from school_fees.modules.invoices.schemas import InvoiceCreate, InvoiceResponse
from school_fees.modules.invoices.service import InvoiceService
from school_fees.shared.schemas import ApiResponse

router = APIRouter(prefix="/invoices", tags=["Invoices"])


@router.post(
    "",
    response_model=ApiResponse[InvoiceResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_invoice(
    data: InvoiceCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(
        require_capability(Capability.MANAGE_INVOICES, school_scoped=True)
    ),
):
    """Create an invoice for a student of the caller's school."""
    service = InvoiceService(db)
    invoice = await service.create_invoice(current_user.school_id, data)
    return ApiResponse(
        message="Invoice created successfully",
        data=InvoiceResponse.model_validate(invoice),
    )


@router.get("/school", response_model=ApiResponse[list[InvoiceResponse]])
async def list_school_invoices(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(
        require_capability(Capability.MANAGE_INVOICES, school_scoped=True)
    ),
):
    """List invoices of the caller's school."""
    service = InvoiceService(db)
    invoices = await service.list_for_school(current_user.school_id)
    return ApiResponse(data=[InvoiceResponse.model_validate(i) for i in invoices])


@router.get("/parent", response_model=ApiResponse[list[InvoiceResponse]])
async def list_parent_invoices(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(
        require_capability(Capability.VIEW_CHILD_INVOICES, school_scoped=True)
    ),
):
    """List invoices of the caller's linked children."""
    service = InvoiceService(db)
    invoices = await service.list_for_parent(current_user)
    return ApiResponse(data=[InvoiceResponse.model_validate(i) for i in invoices])
