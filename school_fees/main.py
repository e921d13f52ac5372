"""School fee management FastAPI application."""
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from school_fees.core.auth.router import router as auth_router
from school_fees.core.config import settings
from school_fees.core.database.session import engine
from school_fees.core.exceptions import AppException
from school_fees.core.exceptions.handlers import (
    app_exception_handler,
    http_exception_handler,
    unexpected_exception_handler,
    validation_exception_handler,
)
from school_fees.core.logging import get_logger, setup_logging
from school_fees.modules.fee_structures.router import router as fee_structures_router
from school_fees.modules.invoices.router import router as invoices_router
from school_fees.modules.payments.router import router as payments_router
from school_fees.modules.plans.router import router as plans_router
from school_fees.modules.schools.router import router as schools_router
from school_fees.modules.students.router import (
    parents_router,
    router as students_router,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup: an unreachable database stops the process here
    async with engine.connect() as connection:
        await connection.execute(text("SELECT 1"))
    logger.info("Database connection established (env=%s)", settings.app_env)
    yield
    # Shutdown
    await engine.dispose()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    setup_logging()

    app = FastAPI(
        title="School Fee Management",
        description="Multi-tenant school fee billing and payments",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unexpected_exception_handler)

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    # Routers
    app.include_router(auth_router, prefix="/api/v1")
    app.include_router(schools_router, prefix="/api/v1")
    app.include_router(plans_router, prefix="/api/v1")
    app.include_router(students_router, prefix="/api/v1")
    app.include_router(parents_router, prefix="/api/v1")
    app.include_router(fee_structures_router, prefix="/api/v1")
    app.include_router(invoices_router, prefix="/api/v1")
    app.include_router(payments_router, prefix="/api/v1")

    return app


app = create_app()
