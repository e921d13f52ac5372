from school_fees.core.database.session import async_session, engine, get_db
from school_fees.core.database.base import Base, BaseModel, BigIntPK, SchoolScopedMixin

__all__ = ["async_session", "engine", "get_db", "Base", "BaseModel", "BigIntPK", "SchoolScopedMixin"]
