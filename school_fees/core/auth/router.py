from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_fees.core.auth.dependencies import CurrentUser, require_capability
from school_fees.core.auth.models import User
from school_fees.core.auth.permissions import Capability
from school_fees.core.auth.schemas import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RegisterParentRequest,
    RegisterParentResponse,
    RegisterSchoolRequest,
    RegisterSchoolResponse,
    TokenResponse,
    UserResponse,
)
from school_fees.core.auth.service import AuthService
from school_fees.core.database import get_db
from school_fees.shared.schemas import SuccessResponse

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=SuccessResponse[LoginResponse])
async def login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """Authenticate user and return tokens."""
    auth_service = AuthService(db)

    user, access_token, refresh_token = await auth_service.authenticate(
        email=data.email,
        password=data.password,
    )

    return SuccessResponse(
        data=LoginResponse(
            user=UserResponse.model_validate(user),
            access_token=access_token,
            refresh_token=refresh_token,
        ),
        message="Login successful",
    )


@router.post("/refresh", response_model=SuccessResponse[TokenResponse])
async def refresh_tokens(
    data: RefreshRequest,
    db: AsyncSession = Depends(get_db),
):
    """Refresh access token using refresh token."""
    auth_service = AuthService(db)

    access_token, refresh_token = await auth_service.refresh_tokens(data.refresh_token)

    return SuccessResponse(
        data=TokenResponse(
            access_token=access_token,
            refresh_token=refresh_token,
        ),
        message="Tokens refreshed",
    )


@router.get("/me", response_model=SuccessResponse[UserResponse])
async def get_current_user_info(current_user: CurrentUser):
    """Get current authenticated user info."""
    return SuccessResponse(
        data=UserResponse.model_validate(current_user),
        message="User info retrieved",
    )


@router.post(
    "/register-school",
    response_model=SuccessResponse[RegisterSchoolResponse],
    status_code=status.HTTP_201_CREATED,
)
async def register_school(
    data: RegisterSchoolRequest,
    db: AsyncSession = Depends(get_db),
):
    """Register a new school. The school admin can log in once a super admin approves it."""
    auth_service = AuthService(db)
    school, _ = await auth_service.register_school(
        school_name=data.school_name,
        address=data.address,
        contact_email=data.contact_email,
        contact_phone=data.contact_phone,
        admin_name=data.admin_name,
        admin_email=data.admin_email,
        admin_password=data.admin_password,
    )
    return SuccessResponse(
        data=RegisterSchoolResponse(school_id=school.id),
        message="School registered successfully. Waiting for approval from Super Admin.",
    )


@router.post(
    "/register-parent",
    response_model=SuccessResponse[RegisterParentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def register_parent(
    data: RegisterParentRequest,
    db: AsyncSession = Depends(get_db),
):
    """Register a parent account in an approved school."""
    auth_service = AuthService(db)
    parent = await auth_service.register_parent(
        name=data.name,
        email=data.email,
        password=data.password,
        school_id=data.school_id,
    )
    return SuccessResponse(
        data=RegisterParentResponse(user_id=parent.id),
        message="Parent registered successfully",
    )


@router.post("/change-password", response_model=SuccessResponse[UserResponse])
async def change_password(
    data: ChangePasswordRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_capability(Capability.CHANGE_OWN_PASSWORD)),
):
    """Change the caller's password."""
    auth_service = AuthService(db)
    user = await auth_service.change_password(current_user, data.old_password, data.new_password)
    return SuccessResponse(
        data=UserResponse.model_validate(user),
        message="Password updated successfully",
    )
