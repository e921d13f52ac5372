"""API endpoints for Fee Structures module."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_fees.core.auth.dependencies import require_capability
from school_fees.core.auth.models import User
from school_fees.core.auth.permissions import Capability
from school_fees.core.database.session import get_db
from school_fees.modules.fee_structures.schemas import (
    FeeStructureCreate,
    FeeStructureResponse,
    FeeStructureUpdate,
)
from school_fees.modules.fee_structures.service import FeeStructureService
from school_fees.modules.invoices.schemas import (
    GenerateInvoicesRequest,
    GenerateInvoicesResult,
)
from school_fees.modules.invoices.service import InvoiceService
from school_fees.shared.schemas import ApiResponse

router = APIRouter(prefix="/fee-structures", tags=["Fee Structures"])


@router.get("", response_model=ApiResponse[list[FeeStructureResponse]])
async def list_fee_structures(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(
        require_capability(Capability.MANAGE_FEES, school_scoped=True)
    ),
):
    """List active fee structures of the caller's school."""
    service = FeeStructureService(db)
    structures = await service.list_active(current_user.school_id)
    return ApiResponse(data=[FeeStructureResponse.model_validate(s) for s in structures])


@router.post(
    "",
    response_model=ApiResponse[FeeStructureResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_fee_structure(
    data: FeeStructureCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(
        require_capability(Capability.MANAGE_FEES, school_scoped=True)
    ),
):
    """Create a fee structure; the student's previous one is deactivated."""
    service = FeeStructureService(db)
    structure = await service.create(current_user.school_id, data)
    return ApiResponse(
        message="Fee structure created successfully",
        data=FeeStructureResponse.model_validate(structure),
    )


@router.put("/{structure_id}", response_model=ApiResponse[FeeStructureResponse])
async def update_fee_structure(
    structure_id: int,
    data: FeeStructureUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(
        require_capability(Capability.MANAGE_FEES, school_scoped=True)
    ),
):
    """Update a fee structure in place."""
    service = FeeStructureService(db)
    structure = await service.update(current_user.school_id, structure_id, data)
    return ApiResponse(
        message="Fee structure updated successfully",
        data=FeeStructureResponse.model_validate(structure),
    )


@router.post(
    "/generate-invoices",
    response_model=ApiResponse[GenerateInvoicesResult],
    response_model_exclude_none=True,
)
async def generate_invoices(
    data: GenerateInvoicesRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(
        require_capability(Capability.MANAGE_INVOICES, school_scoped=True)
    ),
):
    """Generate invoices for the month from all active fee structures."""
    service = InvoiceService(db)
    result = await service.generate_monthly_invoices(
        current_user.school_id, data.month, data.year
    )
    return ApiResponse(
        message=f"Generated {result.created} invoices",
        data=result,
    )
