from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from school_fees.core.config import settings
from school_fees.core.exceptions import AuthenticationError

ACCESS = "access"
REFRESH = "refresh"


def _issue(user_id: int, token_type: str, lifetime: timedelta, **claims: Any) -> str:
    issued_at = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "type": token_type,
        "iat": issued_at,
        "exp": issued_at + lifetime,
        **claims,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: int, role: str, school_id: int | None = None) -> str:
    """Short-lived token naming the caller's role and school (``None`` for super admins)."""
    return _issue(
        user_id,
        ACCESS,
        timedelta(minutes=settings.access_token_expire_minutes),
        role=role,
        school=school_id,
    )


def create_refresh_token(user_id: int) -> str:
    """Long-lived token that only identifies the user; role and school are reloaded on refresh."""
    return _issue(user_id, REFRESH, timedelta(days=settings.refresh_token_expire_days))


def decode_token(token: str, token_type: str = ACCESS) -> dict[str, Any]:
    """
    Verify signature, expiry and token kind.

    A refresh token presented where an access token is expected (or the
    reverse) is rejected like a forged one.

    Raises:
        AuthenticationError: If token is invalid, expired or of the wrong kind
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise AuthenticationError(f"Invalid token: {e}")

    if payload.get("type") != token_type:
        raise AuthenticationError(f"Invalid token type, expected {token_type}")
    if "sub" not in payload:
        raise AuthenticationError("Invalid token: missing subject")
    return payload
