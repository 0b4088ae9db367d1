"""
Error envelope for the Studio Client Portal API.

Every failure leaves the API as
{error, code, message, details?, request_id?, timestamp}, whether it was
raised as an APIException, a plain HTTPException or escaped as an
unexpected exception.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Machine-readable error codes, grouped by family."""

    # Authentication (1xxx)
    INVALID_CREDENTIALS = "AUTH_1001"
    INVALID_PIN = "AUTH_1004"
    ACCOUNT_LOCKED = "AUTH_1006"
    LINK_INVALID = "AUTH_1010"

    # Authorization (2xxx)
    PERMISSION_DENIED = "AUTHZ_2001"
    NOT_ALLOWLISTED = "AUTHZ_2002"

    # Request validation (3xxx)
    VALIDATION_ERROR = "VAL_3001"
    INVALID_INPUT = "VAL_3002"

    # Shoots and share links (4xxx)
    RESOURCE_NOT_FOUND = "RES_4001"
    RESOURCE_CONFLICT = "RES_4005"

    # System (6xxx)
    INTERNAL_ERROR = "SYS_6001"
    RATE_LIMIT_EXCEEDED = "SYS_6004"
    SERVICE_UNAVAILABLE = "SYS_6005"


# Codes for HTTPExceptions raised by FastAPI/Starlette themselves
STATUS_TO_CODE: dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION_ERROR,
    401: ErrorCode.INVALID_CREDENTIALS,
    403: ErrorCode.PERMISSION_DENIED,
    404: ErrorCode.RESOURCE_NOT_FOUND,
    405: ErrorCode.INVALID_INPUT,
    409: ErrorCode.RESOURCE_CONFLICT,
    422: ErrorCode.INVALID_INPUT,
    429: ErrorCode.RATE_LIMIT_EXCEEDED,
    503: ErrorCode.SERVICE_UNAVAILABLE,
}


class ErrorDetail(BaseModel):
    field: str | None = None
    message: str
    code: str | None = None


class APIException(HTTPException):
    """HTTPException carrying an ErrorCode and optional field details."""

    def __init__(
        self,
        status_code: int,
        code: ErrorCode,
        message: str,
        details: list[ErrorDetail] | None = None,
        headers: dict[str, str] | None = None,
    ):
        self.code = code
        self.message = message
        self.details = details
        super().__init__(status_code=status_code, detail=message, headers=headers)


class NotFoundError(APIException):
    def __init__(self, resource: str, resource_id: str | None = None):
        if resource_id:
            message = f"{resource} '{resource_id}' not found"
        else:
            message = f"{resource} not found"
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            code=ErrorCode.RESOURCE_NOT_FOUND,
            message=message,
        )


class UnauthorizedError(APIException):
    """No usable producer credential."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            code=ErrorCode.INVALID_CREDENTIALS,
            message=message,
            headers={"WWW-Authenticate": "Bearer"},
        )


class InvalidPinError(APIException):
    """Wrong PIN; carries the attempts left before lockout."""

    def __init__(self, remaining_attempts: int):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            code=ErrorCode.INVALID_PIN,
            message="Incorrect PIN",
            details=[
                ErrorDetail(
                    field="remaining_attempts",
                    message=str(remaining_attempts),
                )
            ],
        )


class AccountLockedError(APIException):
    """PIN entry locked out after too many failures."""

    def __init__(self, retry_after: int):
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            code=ErrorCode.ACCOUNT_LOCKED,
            message=f"Too many failed attempts. Try again in {retry_after} seconds.",
            headers={"Retry-After": str(retry_after)},
        )


class InvalidLinkError(APIException):
    """Uniform client-gate failure.

    Raised for a malformed token, a wrong token, an expired link and a
    revoked link alike, so callers cannot tell which condition failed.
    """

    def __init__(self):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            code=ErrorCode.LINK_INVALID,
            message="This link is invalid or has expired",
        )


class ForbiddenError(APIException):
    """Authenticated, but not allowed to do this."""

    def __init__(self, message: str = "Permission denied", code: ErrorCode = ErrorCode.PERMISSION_DENIED):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            code=code,
            message=message,
        )


class ConflictError(APIException):
    def __init__(self, message: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            code=ErrorCode.RESOURCE_CONFLICT,
            message=message,
        )


class InternalError(APIException):
    """Server misconfiguration surfaced as a 500 with a fixed message."""

    def __init__(self, message: str = "An internal error occurred"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            code=ErrorCode.INTERNAL_ERROR,
            message=message,
        )


def create_error_response(
    code: ErrorCode,
    message: str,
    details: list[ErrorDetail] | None = None,
    request_id: str | None = None,
) -> dict[str, Any]:
    """Build the error envelope body."""
    body: dict[str, Any] = {
        "error": code.name.replace("_", " ").title(),
        "code": code.value,
        "message": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if details:
        body["details"] = [d.model_dump(exclude_none=True) for d in details]
    if request_id:
        body["request_id"] = request_id
    return body


def _request_id(request: Request) -> str | None:
    return request.headers.get("X-Request-ID")


async def api_exception_handler(request: Request, exc: APIException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(
            code=exc.code,
            message=exc.message,
            details=exc.details,
            request_id=_request_id(request),
        ),
        headers=exc.headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap framework HTTPExceptions (404 route, 405 method) in the envelope."""
    code = STATUS_TO_CODE.get(exc.status_code, ErrorCode.INTERNAL_ERROR)
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"

    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(
            code=code,
            message=message,
            request_id=_request_id(request),
        ),
        headers=getattr(exc, "headers", None),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Unexpected failures, storage errors included.

    Reported as a generic 500 and never retried.
    """
    logger.exception("Unhandled exception: %s", exc)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=create_error_response(
            code=ErrorCode.INTERNAL_ERROR,
            message="An unexpected error occurred",
            request_id=_request_id(request),
        ),
    )
