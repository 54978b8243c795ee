"""
JSON error bodies for the House Points API.

Every failed request answers with the same envelope:

    {"error": {"message": "...", "code": "INSUFFICIENT_BALANCE", ...extra fields}}

Domain exceptions carry their own code and extra fields (balance and
shortfall for a failed redemption, the offending field for validation).

Usage:
    from housepoints.utils.errors import error_response, ErrorCode

    return error_response("Reward not found", ErrorCode.NOT_FOUND, 404)
"""
import logging
from enum import Enum
from flask import jsonify
from typing import Optional

from .exceptions import HousePointsError

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Codes used by responses built outside the exception hierarchy."""

    # 401
    AUTH_REQUIRED = "AUTH_REQUIRED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"

    # 400 / 405
    INVALID_REQUEST = "INVALID_REQUEST"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"

    # 404
    NOT_FOUND = "NOT_FOUND"

    # 500
    INTERNAL_ERROR = "INTERNAL_ERROR"


def error_response(
    message: str,
    code=ErrorCode.INTERNAL_ERROR,
    status_code: int = 500,
    log_error: bool = True,
    details: Optional[dict] = None,
    extra: Optional[dict] = None
) -> tuple:
    """
    Build a (response, status) pair in the standard envelope.

    Args:
        message: Text shown to the caller
        code: ErrorCode member or a plain code string
        status_code: HTTP status
        log_error: Log client errors at WARNING and server errors at ERROR
        details: Logged only, never sent back
        extra: Merged into the error body
    """
    code_value = code.value if isinstance(code, ErrorCode) else code

    if log_error:
        level = logging.ERROR if status_code >= 500 else logging.WARNING
        logger.log(level, f"{status_code} {code_value}: {message}", extra={"details": details})

    body = {"message": message, "code": code_value}
    if extra:
        body.update(extra)

    return jsonify({"error": body}), status_code


def domain_error_response(error: HousePointsError) -> tuple:
    """Translate a domain exception into its JSON error response."""
    body = error.to_dict()
    message = body.pop('message')
    code = body.pop('code')
    return error_response(message, code, error.status_code, log_error=True, extra=body)


def unauthorized(message: str = "Authentication required", code: ErrorCode = ErrorCode.AUTH_REQUIRED) -> tuple:
    return error_response(message, code, 401, log_error=False)


def internal_error(message: str = "An unexpected error occurred", details: Optional[dict] = None) -> tuple:
    return error_response(message, ErrorCode.INTERNAL_ERROR, 500, log_error=True, details=details)
