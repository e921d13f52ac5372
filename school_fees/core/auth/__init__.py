from school_fees.core.auth.models import User, UserRole
from school_fees.core.auth.permissions import Capability, ROLE_CAPABILITIES, role_can
from school_fees.core.auth.service import AuthService
from school_fees.core.auth.jwt import create_access_token, create_refresh_token, decode_token
from school_fees.core.auth.dependencies import get_current_user, require_capability

__all__ = [
    "User",
    "UserRole",
    "Capability",
    "ROLE_CAPABILITIES",
    "role_can",
    "AuthService",
    "create_access_token",
    "create_refresh_token",
    "decode_token",
    "get_current_user",
    "require_capability",
]
