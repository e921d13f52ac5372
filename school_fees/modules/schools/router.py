"""API endpoints for Schools module."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from school_fees.core.auth.dependencies import require_capability
from school_fees.core.auth.models import User
from school_fees.core.auth.permissions import Capability
from school_fees.core.database.session import get_db
from school_fees.modules.invoices.schemas import InvoiceResponse
from school_fees.modules.schools.schemas import (
    ParentNotification,
    ParentNotificationsResponse,
    SchoolDetailsResponse,
    SchoolNotificationResponse,
    SchoolResponse,
    SchoolStatistics,
)
from school_fees.modules.schools.service import SchoolService
from school_fees.modules.students.schemas import ParentBrief, StudentResponse
from school_fees.shared.schemas import ApiResponse

router = APIRouter(prefix="/schools", tags=["Schools"])


# --- Public ---


@router.get("/approved", response_model=ApiResponse[list[SchoolResponse]])
async def list_approved_schools(db: AsyncSession = Depends(get_db)):
    """List approved schools, for parent registration."""
    service = SchoolService(db)
    schools = await service.list_schools(approved_only=True)
    return ApiResponse(data=[SchoolResponse.model_validate(s) for s in schools])


# --- School admin ---


@router.get("/my-school", response_model=ApiResponse[SchoolResponse])
async def get_my_school(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(
        require_capability(Capability.VIEW_OWN_SCHOOL, school_scoped=True)
    ),
):
    """Get the caller's school."""
    service = SchoolService(db)
    school = await service.get_school(current_user.school_id)
    return ApiResponse(data=SchoolResponse.model_validate(school))


# --- Super admin ---


@router.get("", response_model=ApiResponse[list[SchoolResponse]])
async def list_schools(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_capability(Capability.MANAGE_SCHOOLS)),
):
    """List all schools, approved or not."""
    service = SchoolService(db)
    schools = await service.list_schools()
    return ApiResponse(data=[SchoolResponse.model_validate(s) for s in schools])


@router.get("/{school_id}/details", response_model=ApiResponse[SchoolDetailsResponse])
async def get_school_details(
    school_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_capability(Capability.MANAGE_SCHOOLS)),
):
    """Get a school with its students, invoices and fee statistics."""
    service = SchoolService(db)
    details = await service.get_details(school_id)
    return ApiResponse(
        data=SchoolDetailsResponse(
            school=SchoolResponse.model_validate(details["school"]),
            students=[StudentResponse.model_validate(s) for s in details["students"]],
            invoices=[InvoiceResponse.model_validate(i) for i in details["invoices"]],
            statistics=SchoolStatistics(**details["statistics"]),
        )
    )


@router.patch("/{school_id}/approve", response_model=ApiResponse[SchoolResponse])
async def approve_school(
    school_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_capability(Capability.MANAGE_SCHOOLS)),
):
    """Approve a school so its admin can log in."""
    service = SchoolService(db)
    school = await service.set_approval(school_id, approved=True)
    return ApiResponse(
        message="School approved successfully",
        data=SchoolResponse.model_validate(school),
    )


@router.patch("/{school_id}/reject", response_model=ApiResponse[SchoolResponse])
async def reject_school(
    school_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_capability(Capability.MANAGE_SCHOOLS)),
):
    """Reject (or un-approve) a school."""
    service = SchoolService(db)
    school = await service.set_approval(school_id, approved=False)
    return ApiResponse(
        message="School rejected",
        data=SchoolResponse.model_validate(school),
    )


@router.post(
    "/{school_id}/notify-parents",
    response_model=ApiResponse[ParentNotificationsResponse],
)
async def notify_parents(
    school_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_capability(Capability.MANAGE_SCHOOLS)),
):
    """Prepare pending fee reminders for the school's parents."""
    service = SchoolService(db)
    prepared = await service.prepare_parent_notifications(school_id)
    notifications = [
        ParentNotification(
            parent=ParentBrief.model_validate(entry["parent"]),
            invoices=[InvoiceResponse.model_validate(i) for i in entry["invoices"]],
            total_amount=entry["total_amount"],
        )
        for entry in prepared["notifications"]
    ]
    return ApiResponse(
        message=f"Notifications prepared for {len(notifications)} parents",
        data=ParentNotificationsResponse(
            notifications=notifications,
            total_pending_amount=prepared["total_pending_amount"],
        ),
    )


@router.post(
    "/{school_id}/notify-school",
    response_model=ApiResponse[SchoolNotificationResponse],
)
async def notify_school(
    school_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_capability(Capability.MANAGE_SCHOOLS)),
):
    """Prepare a pending fee summary for the school admin."""
    service = SchoolService(db)
    prepared = await service.prepare_school_notification(school_id)
    return ApiResponse(
        message="School admin notification prepared",
        data=SchoolNotificationResponse.model_validate(prepared),
    )
