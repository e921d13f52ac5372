import traceback

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from school_fees.core.config import settings
from school_fees.core.exceptions import AppException
from school_fees.core.logging import get_logger
from school_fees.shared.schemas import ErrorResponse, ErrorDetail

logger = get_logger(__name__)


def _error_content(response: ErrorResponse) -> dict:
    """Serialize the error envelope; ``stack`` only appears when filled in."""
    content = response.model_dump(by_alias=True)
    if content.get("stack") is None:
        content.pop("stack", None)
    return content


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle application exceptions."""
    field = exc.details.get("field")
    errors = [ErrorDetail(field=field, message=exc.message)]

    response = ErrorResponse(
        message=exc.message,
        errors=errors,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_content(response),
    )


def _format_validation_errors(errors: list[dict]) -> list[ErrorDetail]:
    details: list[ErrorDetail] = []
    for error in errors:
        loc = error.get("loc", ())
        # Drop top-level "body" for cleaner field paths
        if loc and loc[0] == "body":
            loc = loc[1:]
        field = ".".join(str(part) for part in loc) if loc else None
        details.append(ErrorDetail(field=field, message=error.get("msg", "Invalid value")))
    return details


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle FastAPI validation errors.

    The top-level message is the first failure, so clients that only read
    ``message`` still see what is wrong.
    """
    details = _format_validation_errors(exc.errors())
    message = "Validation error"
    if details:
        first = details[0]
        message = f"{first.field}: {first.message}" if first.field else first.message
    response = ErrorResponse(message=message, errors=details)
    return JSONResponse(
        status_code=422,
        content=_error_content(response),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle generic HTTP exceptions."""
    errors = [ErrorDetail(field=None, message=str(exc.detail) if exc.detail else "HTTP error")]
    response = ErrorResponse(
        message=str(exc.detail) if exc.detail else "HTTP error",
        errors=errors,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_content(response),
    )


async def unexpected_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log an unhandled exception and answer with a generic 500."""
    logger.error(
        "Unhandled error on %s %s",
        request.method,
        request.url.path,
        exc_info=(type(exc), exc, exc.__traceback__),
    )
    response = ErrorResponse(message="Server error", errors=[ErrorDetail(message="Server error")])
    if settings.expose_error_details:
        response.stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(
        status_code=500,
        content=_error_content(response),
    )
