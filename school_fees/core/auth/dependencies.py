from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from school_fees.core.auth.jwt import decode_token
from school_fees.core.auth.models import User
from school_fees.core.auth.permissions import Capability, role_can
from school_fees.core.auth.service import AuthService
from school_fees.core.database import get_db
from school_fees.core.exceptions import AuthenticationError, AuthorizationError


async def get_current_user(
    authorization: Annotated[str | None, Header()] = None,
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Dependency to get current authenticated user from JWT token.

    Usage:
        @router.get("/me")
        async def get_me(user: User = Depends(get_current_user)):
            return user
    """
    if not authorization:
        raise AuthenticationError("Authorization header required")

    if not authorization.startswith("Bearer "):
        raise AuthenticationError("Invalid authorization header format")

    token = authorization.replace("Bearer ", "", 1)

    payload = decode_token(token, token_type="access")
    user_id = int(payload["sub"])

    auth_service = AuthService(db)
    user = await auth_service.get_user_by_id(user_id)

    if not user:
        raise AuthenticationError("User not found")

    if not user.is_active:
        raise AuthenticationError("User account is deactivated")

    return user


def require_capability(capability: Capability, school_scoped: bool = False):
    """
    Dependency factory to require a capability of the caller's role.

    With ``school_scoped=True`` the caller must also be linked to a school;
    the route can then rely on ``user.school_id`` being set.

    Usage:
        @router.post("/fee-structures")
        async def create_fee_structure(
            user: User = Depends(require_capability(Capability.MANAGE_FEES, school_scoped=True))
        ):
            ...
    """

    async def capability_checker(
        current_user: User = Depends(get_current_user),
    ) -> User:
        if not role_can(current_user.role, capability):
            raise AuthorizationError(f"Not allowed to {capability.value.replace('_', ' ')}")
        if school_scoped and current_user.school_id is None:
            raise AuthorizationError("User must be linked to a school")
        return current_user

    return capability_checker


# Convenience dependencies
CurrentUser = Annotated[User, Depends(get_current_user)]
