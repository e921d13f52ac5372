from collections.abc import AsyncGenerator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from school_fees.core.config import settings
from school_fees.core.logging import get_logger

logger = get_logger(__name__)

if not settings.database_url:
    raise ValueError("DATABASE_URL environment variable is not set")

logger.info(
    "Database target: %s",
    make_url(settings.database_url).render_as_string(hide_password=True),
)

engine = create_async_engine(
    settings.database_url,
    echo=settings.debug and settings.log_level.upper() == "DEBUG",
    future=True,
)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database session."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
