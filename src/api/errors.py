"""
RoMod - API Error System
========================

Centralized error codes and exception handling for consistent API responses.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from enum import Enum
from typing import Any, Dict, Optional

from fastapi import HTTPException
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_422_UNPROCESSABLE_ENTITY,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from src.core.errors import (
    CaseError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCode(str, Enum):
    """
    Centralized error codes for the API.

    Format: CATEGORY_SPECIFIC_ERROR

    Categories:
    - AUTH: Authentication errors
    - CASE: Case state machine outcomes
    - VALIDATION: Input validation errors
    - SERVER: Server-side errors
    - WS: Realtime channel errors
    """

    # Authentication errors (401)
    AUTH_INVALID_TOKEN = "AUTH_INVALID_TOKEN"
    AUTH_MISSING_TOKEN = "AUTH_MISSING_TOKEN"

    # Case errors (404, 409)
    CASE_NOT_FOUND = "CASE_NOT_FOUND"
    CASE_CONFLICT = "CASE_CONFLICT"
    CASE_INVALID_STATE = "CASE_INVALID_STATE"

    # Validation errors (400, 422)
    VALIDATION_FAILED = "VALIDATION_FAILED"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Server errors (500)
    SERVER_ERROR = "SERVER_ERROR"
    SERVER_DATABASE_ERROR = "SERVER_DATABASE_ERROR"

    # WebSocket errors
    WS_AUTH_REQUIRED = "WS_AUTH_REQUIRED"
    WS_INVALID_MESSAGE = "WS_INVALID_MESSAGE"
    WS_SCOPE_DENIED = "WS_SCOPE_DENIED"


# =============================================================================
# Error Messages
# =============================================================================

ERROR_MESSAGES: Dict[ErrorCode, str] = {
    # Auth
    ErrorCode.AUTH_INVALID_TOKEN: "Invalid or malformed authentication token",
    ErrorCode.AUTH_MISSING_TOKEN: "Authentication token is required",

    # Cases
    ErrorCode.CASE_NOT_FOUND: "Record not found",
    ErrorCode.CASE_CONFLICT: "The record was changed by another request",
    ErrorCode.CASE_INVALID_STATE: "This action is not allowed in the record's current state",

    # Validation
    ErrorCode.VALIDATION_FAILED: "Request validation failed",
    ErrorCode.VALIDATION_ERROR: "Request validation failed",

    # Server
    ErrorCode.SERVER_ERROR: "An internal server error occurred",
    ErrorCode.SERVER_DATABASE_ERROR: "A database error occurred",

    # WebSocket
    ErrorCode.WS_AUTH_REQUIRED: "WebSocket authentication required",
    ErrorCode.WS_INVALID_MESSAGE: "Invalid WebSocket message format",
    ErrorCode.WS_SCOPE_DENIED: "Server is outside your scope",
}


# =============================================================================
# Default Status Codes
# =============================================================================

ERROR_STATUS_CODES: Dict[ErrorCode, int] = {
    # Auth - 401
    ErrorCode.AUTH_INVALID_TOKEN: HTTP_401_UNAUTHORIZED,
    ErrorCode.AUTH_MISSING_TOKEN: HTTP_401_UNAUTHORIZED,

    # Cases - 404/409
    ErrorCode.CASE_NOT_FOUND: HTTP_404_NOT_FOUND,
    ErrorCode.CASE_CONFLICT: HTTP_409_CONFLICT,
    ErrorCode.CASE_INVALID_STATE: HTTP_409_CONFLICT,

    # Validation - 400/422
    ErrorCode.VALIDATION_FAILED: HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.VALIDATION_ERROR: HTTP_400_BAD_REQUEST,

    # Server - 500
    ErrorCode.SERVER_ERROR: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.SERVER_DATABASE_ERROR: HTTP_500_INTERNAL_SERVER_ERROR,

    # WebSocket - 400/401/403
    ErrorCode.WS_AUTH_REQUIRED: HTTP_401_UNAUTHORIZED,
    ErrorCode.WS_INVALID_MESSAGE: HTTP_400_BAD_REQUEST,
    ErrorCode.WS_SCOPE_DENIED: 403,
}

# Domain error -> API code. Order matters: first isinstance match wins.
CASE_ERROR_CODES = (
    (ValidationError, ErrorCode.VALIDATION_ERROR),
    (NotFoundError, ErrorCode.CASE_NOT_FOUND),
    (ConflictError, ErrorCode.CASE_CONFLICT),
    (InvalidStateError, ErrorCode.CASE_INVALID_STATE),
)


# =============================================================================
# API Error Exception
# =============================================================================

class APIError(HTTPException):
    """
    Custom API exception with error codes.

    Usage:
        raise APIError(ErrorCode.CASE_NOT_FOUND)
        raise APIError(ErrorCode.VALIDATION_ERROR, details={"field": "reason"})
        raise APIError(ErrorCode.AUTH_MISSING_TOKEN, headers={"WWW-Authenticate": "Bearer"})
    """

    def __init__(
        self,
        code: ErrorCode,
        status_code: Optional[int] = None,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.error_code = code
        self.error_message = message or ERROR_MESSAGES.get(code, "An error occurred")
        self.error_details = details

        # Use default status code if not provided
        if status_code is None:
            status_code = ERROR_STATUS_CODES.get(code, HTTP_400_BAD_REQUEST)

        super().__init__(
            status_code=status_code,
            detail={
                "success": False,
                "error_code": code.value,
                "message": self.error_message,
                "details": details,
            },
            headers=headers,
        )


# =============================================================================
# Helper Functions
# =============================================================================

def error_response(
    code: ErrorCode,
    status_code: Optional[int] = None,
    message: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    """
    Create a JSON error response without raising an exception.

    Useful for returning errors in exception handlers.
    """
    if status_code is None:
        status_code = ERROR_STATUS_CODES.get(code, HTTP_400_BAD_REQUEST)

    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error_code": code.value,
            "message": message or ERROR_MESSAGES.get(code, "An error occurred"),
            "details": details,
        },
    )


def code_for_case_error(exc: CaseError) -> ErrorCode:
    for error_type, code in CASE_ERROR_CODES:
        if isinstance(exc, error_type):
            return code
    return ErrorCode.SERVER_ERROR


def case_error_response(exc: CaseError) -> JSONResponse:
    """Render a domain error with its mapped code and status."""
    return error_response(
        code_for_case_error(exc),
        message=exc.message,
        details=exc.details or None,
    )


__all__ = [
    "ErrorCode",
    "ERROR_MESSAGES",
    "ERROR_STATUS_CODES",
    "APIError",
    "error_response",
    "code_for_case_error",
    "case_error_response",
]
