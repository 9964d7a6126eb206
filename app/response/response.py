from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel


class APIError(Exception):
    def __init__(
        self,
        code: str,
        http_code: int,
        message: str,
        *,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.http_code = http_code
        self.message = message
        self.details = details


class InvalidArgument(APIError):
    def __init__(
        self,
        message: str,
        *,
        code: str = "INVALID_ARGUMENT",
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(code, 400, message, details=details)


class Unauthorized(APIError):
    def __init__(
        self,
        message: str = "Unauthorized",
        *,
        code: str = "UNAUTHORIZED",
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(code, 401, message, details=details)


class NotFound(APIError):
    def __init__(
        self,
        message: str,
        *,
        code: str = "NOT_FOUND",
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(code, 404, message, details=details)


class Internal(APIError):
    def __init__(
        self,
        message: str,
        *,
        code: str = "INTERNAL",
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(code, 500, message, details=details)


class ErrorResponse(BaseModel):
    error: str
    code: str
    details: Optional[Any] = None


class SuccessResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None


def make_error_response(
    code: str,
    message: str,
    *,
    details: Optional[Any] = None,
) -> ErrorResponse:
    return ErrorResponse(error=message, code=code, details=details)


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
