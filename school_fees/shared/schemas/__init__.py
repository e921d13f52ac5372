from school_fees.shared.schemas.base import (
    ApiResponse,
    BaseSchema,
    SuccessResponse,
    ErrorResponse,
    ErrorDetail,
)

__all__ = [
    "ApiResponse",
    "BaseSchema",
    "SuccessResponse",
    "ErrorResponse",
    "ErrorDetail",
]
