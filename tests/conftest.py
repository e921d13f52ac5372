import os
from collections.abc import AsyncGenerator

# Must be set before the application modules read settings
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("PAYMENT_WEBHOOK_SECRET", "test-webhook-secret")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from school_fees.core.auth.models import User, UserRole
from school_fees.core.database import get_db
from school_fees.core.database.base import Base
from school_fees.main import app
from school_fees.modules.schools.models import School

# Every model module must be imported so create_all sees all tables
from school_fees.modules.fee_structures.models import FeeStructure  # noqa: F401
from school_fees.modules.invoices.models import Invoice  # noqa: F401
from school_fees.modules.payments.models import Transaction  # noqa: F401
from school_fees.modules.plans.models import Plan  # noqa: F401
from tests.helpers import make_school, make_user

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database and session for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Get test HTTP client with overridden database dependency."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def school(db_session: AsyncSession) -> School:
    return await make_school(db_session)


@pytest.fixture
async def super_admin(db_session: AsyncSession) -> User:
    return await make_user(db_session, "superadmin@example.com", UserRole.SUPER_ADMIN, name="Super Admin")


@pytest.fixture
async def school_admin(db_session: AsyncSession, school: School) -> User:
    return await make_user(
        db_session, "schooladmin@example.com", UserRole.SCHOOL_ADMIN, school.id, name="School Admin"
    )


@pytest.fixture
async def parent_user(db_session: AsyncSession, school: School) -> User:
    return await make_user(
        db_session, "parent@example.com", UserRole.PARENT, school.id, name="Parent User"
    )
