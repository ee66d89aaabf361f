"""Mapping of domain errors to HTTP responses."""

import structlog
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from events.domain.errors import DomainError, ErrorCode

logger = structlog.get_logger(__name__)

STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.EVENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.REGISTRATION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.PASS_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.PRODUCT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.PAYMENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.FILE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.SCHEDULED_EMAIL_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.UPDATE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.NO_RECIPIENTS: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_UPLOAD_TOKEN: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_WEBHOOK_SIGNATURE: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.NOT_AUTHORIZED: status.HTTP_403_FORBIDDEN,
    ErrorCode.ALREADY_REGISTERED: status.HTTP_409_CONFLICT,
    ErrorCode.REGISTRATION_CLOSED: status.HTTP_409_CONFLICT,
    ErrorCode.EVENT_AT_CAPACITY: status.HTTP_409_CONFLICT,
    ErrorCode.INVALID_STATUS: status.HTTP_409_CONFLICT,
    ErrorCode.NO_PARTICIPANT_LIMIT: status.HTTP_409_CONFLICT,
    ErrorCode.PASS_ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorCode.PASS_CODE_EXHAUSTED: status.HTTP_409_CONFLICT,
    ErrorCode.PASS_NOT_ACTIVE: status.HTTP_409_CONFLICT,
}


def error_response(error: DomainError) -> Response:
    return Response(
        {"error": error.code.value, "message": error.message},
        status=STATUS_BY_CODE.get(error.code, status.HTTP_400_BAD_REQUEST),
    )


def exception_handler(exc: Exception, context: dict) -> Response | None:
    """DRF exception handler that also understands domain errors."""
    if isinstance(exc, DomainError):
        view = context.get("view")
        logger.info(
            "domain_error",
            code=exc.code.value,
            view=type(view).__name__ if view else None,
        )
        return error_response(exc)
    return drf_exception_handler(exc, context)
