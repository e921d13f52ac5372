"""API endpoints for Plans module."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_fees.core.auth.dependencies import require_capability
from school_fees.core.auth.models import User
from school_fees.core.auth.permissions import Capability
from school_fees.core.database.session import get_db
from school_fees.modules.plans.schemas import PlanCreate, PlanResponse
from school_fees.modules.plans.service import PlanService
from school_fees.shared.schemas import ApiResponse

router = APIRouter(prefix="/plans", tags=["Plans"])


@router.get("", response_model=ApiResponse[list[PlanResponse]])
async def list_plans(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_capability(Capability.MANAGE_PLANS)),
):
    """List all subscription plans."""
    service = PlanService(db)
    plans = await service.list_plans()
    return ApiResponse(data=[PlanResponse.model_validate(p) for p in plans])


@router.post(
    "",
    response_model=ApiResponse[PlanResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_plan(
    data: PlanCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_capability(Capability.MANAGE_PLANS)),
):
    """Create a subscription plan."""
    service = PlanService(db)
    plan = await service.create_plan(data)
    return ApiResponse(
        message="Plan created successfully",
        data=PlanResponse.model_validate(plan),
    )
