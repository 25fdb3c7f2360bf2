"""Mapping of domain errors to HTTP responses.

Only the error code and the user-safe message leave the service.
"""

import logging
from typing import Any

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from scheduling.domain.errors import DomainError, ErrorCode, InvalidInputError

logger = logging.getLogger(__name__)

STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.SESSION_TYPE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.SLOT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.CHILD_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.BOOKING_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.PAST_SESSION: status.HTTP_409_CONFLICT,
    ErrorCode.DUPLICATE_BOOKING: status.HTTP_409_CONFLICT,
    ErrorCode.SLOT_FULL: status.HTTP_409_CONFLICT,
    ErrorCode.CANCELLATION_WINDOW_EXPIRED: status.HTTP_409_CONFLICT,
    ErrorCode.BOOKING_NOT_ACTIVE: status.HTTP_409_CONFLICT,
    ErrorCode.SLOT_HAS_BOOKINGS: status.HTTP_409_CONFLICT,
    ErrorCode.STORAGE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_body(error: DomainError) -> dict[str, Any]:
    body: dict[str, Any] = {"code": error.code.value, "message": error.message}
    if isinstance(error, InvalidInputError):
        body["field"] = error.field
    return {"error": body}


def domain_exception_handler(exc: Exception, context: dict[str, Any]) -> Response | None:
    """DRF exception handler that understands DomainError."""
    if isinstance(exc, DomainError):
        status_code = STATUS_BY_CODE.get(exc.code, status.HTTP_400_BAD_REQUEST)
        if status_code >= 500:
            logger.warning("Request failed: %s", exc)
        response = Response(error_body(exc), status=status_code)
        if exc.code is ErrorCode.STORAGE_UNAVAILABLE:
            response["Retry-After"] = "1"
        return response

    response = exception_handler(exc, context)
    if response is None:
        return None
    if isinstance(exc, (exceptions.NotAuthenticated, exceptions.AuthenticationFailed)):
        response.data = {
            "error": {"code": "NOT_AUTHENTICATED", "message": str(exc.detail)}
        }
    elif isinstance(exc, exceptions.PermissionDenied):
        response.data = {
            "error": {"code": ErrorCode.FORBIDDEN.value, "message": str(exc.detail)}
        }
    return response
