from .response import (
    APIError,
    ErrorResponse,
    Internal,
    InvalidArgument,
    NotFound,
    SuccessResponse,
    Unauthorized,
    make_error_response,
)

__all__ = [
    "APIError",
    "InvalidArgument",
    "Unauthorized",
    "NotFound",
    "Internal",
    "ErrorResponse",
    "SuccessResponse",
    "make_error_response",
]
