from datetime import datetime

from pydantic import EmailStr, Field

from school_fees.shared.schemas import BaseSchema


class LoginRequest(BaseSchema):
    """Login request schema."""

    email: EmailStr
    password: str


class TokenResponse(BaseSchema):
    """Token response schema."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshRequest(BaseSchema):
    """Refresh token request schema."""

    refresh_token: str


class UserResponse(BaseSchema):
    """User response schema."""

    id: int
    name: str
    email: str
    role: str
    school_id: int | None
    is_active: bool
    last_login_at: datetime | None
    created_at: datetime


class LoginResponse(BaseSchema):
    """Login response with user and tokens."""

    user: UserResponse
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RegisterSchoolRequest(BaseSchema):
    """Self-registration of a school and its first admin."""

    school_name: str = Field(..., min_length=1, max_length=200)
    address: str = Field(..., min_length=1, max_length=500)
    contact_email: EmailStr
    contact_phone: str = Field(..., min_length=1, max_length=50)
    admin_name: str = Field(..., min_length=1, max_length=200)
    admin_email: EmailStr
    admin_password: str = Field(..., min_length=6)


class RegisterSchoolResponse(BaseSchema):
    school_id: int


class RegisterParentRequest(BaseSchema):
    """Self-registration of a parent in an approved school."""

    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(..., min_length=6)
    school_id: int


class RegisterParentResponse(BaseSchema):
    user_id: int


class ChangePasswordRequest(BaseSchema):
    old_password: str
    new_password: str = Field(..., min_length=6)
