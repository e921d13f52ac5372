from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from school_fees.core.auth.jwt import create_access_token, create_refresh_token, decode_token
from school_fees.core.auth.models import User, UserRole
from school_fees.core.auth.password import hash_password, verify_password
from school_fees.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DuplicateError,
    NotFoundError,
    ValidationError,
)
from school_fees.core.logging import get_logger
from school_fees.modules.schools.models import School

logger = get_logger(__name__)


class AuthService:
    """Service for authentication and self-registration."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_user_by_email(self, email: str) -> User | None:
        """Get user by email (case-insensitive)."""
        stmt = (
            select(User)
            .where(User.email == email.strip().lower())
            .options(selectinload(User.school))
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_user_by_id(self, user_id: int) -> User | None:
        """Get user by ID."""
        stmt = select(User).where(User.id == user_id).options(selectinload(User.school))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_user(
        self,
        email: str,
        password: str,
        name: str,
        role: UserRole,
        school_id: int | None = None,
    ) -> User:
        """Create a new user."""
        if role.requires_school and school_id is None:
            raise ValidationError(f"Role '{role.value}' requires a school", field="school_id")

        email = email.strip().lower()
        existing = await self.get_user_by_email(email)
        if existing:
            raise DuplicateError("User", "email", email, message="Email already registered")

        user = User(
            email=email,
            password_hash=hash_password(password),
            name=name,
            role=role.value,
            school_id=school_id,
            is_active=True,
        )

        self.session.add(user)
        await self.session.flush()

        logger.info("Created %s user id=%s", user.role, user.id)
        return user

    async def authenticate(self, email: str, password: str) -> tuple[User, str, str]:
        """
        Authenticate user and return tokens.

        Returns:
            Tuple of (user, access_token, refresh_token)

        Raises:
            AuthenticationError: If credentials are invalid
            AuthorizationError: If a school admin's school is not approved
        """
        user = await self.get_user_by_email(email)

        if not user or not verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid email or password")

        if not user.is_active:
            raise AuthenticationError("User account is deactivated")

        if user.role == UserRole.SCHOOL_ADMIN.value:
            if user.school is None or not user.school.is_approved:
                raise AuthorizationError(
                    "School is not approved yet. Please contact platform admin."
                )

        user.last_login_at = datetime.now(timezone.utc)
        await self.session.flush()

        access_token = create_access_token(user.id, user.role, user.school_id)
        refresh_token = create_refresh_token(user.id)

        return user, access_token, refresh_token

    async def refresh_tokens(self, refresh_token: str) -> tuple[str, str]:
        """
        Refresh access token using refresh token.

        Returns:
            Tuple of (new_access_token, new_refresh_token)

        Raises:
            AuthenticationError: If refresh token is invalid
        """
        payload = decode_token(refresh_token, token_type="refresh")

        user_id = int(payload["sub"])
        user = await self.get_user_by_id(user_id)

        if not user:
            raise AuthenticationError("User not found")

        if not user.is_active:
            raise AuthenticationError("User account is deactivated")

        new_access_token = create_access_token(user.id, user.role, user.school_id)
        new_refresh_token = create_refresh_token(user.id)

        return new_access_token, new_refresh_token

    async def register_school(
        self,
        school_name: str,
        address: str,
        contact_email: str,
        contact_phone: str,
        admin_name: str,
        admin_email: str,
        admin_password: str,
    ) -> tuple[School, User]:
        """Register a school (unapproved) together with its admin account."""
        if await self.get_user_by_email(admin_email):
            raise DuplicateError(
                "User", "email", admin_email.strip().lower(),
                message="Admin email already registered",
            )

        school = School(
            name=school_name,
            address=address,
            contact_email=contact_email,
            contact_phone=contact_phone,
            is_approved=False,
        )
        self.session.add(school)
        await self.session.flush()

        admin = await self.create_user(
            email=admin_email,
            password=admin_password,
            name=admin_name,
            role=UserRole.SCHOOL_ADMIN,
            school_id=school.id,
        )
        logger.info("School id=%s registered, awaiting approval", school.id)
        return school, admin

    async def register_parent(
        self, name: str, email: str, password: str, school_id: int
    ) -> User:
        """Register a parent account in an approved school."""
        if await self.get_user_by_email(email):
            raise DuplicateError(
                "User", "email", email.strip().lower(), message="Email already registered"
            )

        school = await self.session.get(School, school_id)
        if school is None:
            raise NotFoundError("School not found")
        if not school.is_approved:
            raise AuthorizationError("School is not approved yet")

        return await self.create_user(
            email=email,
            password=password,
            name=name,
            role=UserRole.PARENT,
            school_id=school.id,
        )

    async def change_password(
        self, user: User, old_password: str, new_password: str
    ) -> User:
        """Change own password (requires current password)."""
        if not verify_password(old_password, user.password_hash):
            raise AuthenticationError("Current password is incorrect")

        user.password_hash = hash_password(new_password)
        await self.session.flush()
        return user
