"""
Global exception handler for the Smart Scheduler platform.

This module provides a custom exception handler for DRF that handles
custom exceptions and provides consistent error responses.
"""

import logging
from typing import Any, Dict

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from utils.constants import ERROR_MESSAGES

from .custom_exceptions import APIException, BookingRejection

logger = logging.getLogger(__name__)


def get_error_code(exception: Exception) -> str:
    """
    Get standardized error code from exception.

    Args:
        exception: The exception to get code for

    Returns:
        str: Standardized error code
    """
    if isinstance(exception, APIException):
        return exception.code
    if isinstance(exception, ValidationError):
        return "validation_error"
    return getattr(exception, "default_code", "error")


def custom_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """
    Custom exception handler for DRF views.

    Scheduler exceptions are rendered from `to_dict()`; everything else goes
    through DRF's default handler and gets the same top-level keys.

    Args:
        exc: The exception
        context: The exception context

    Returns:
        Response: Consistent error response (None for unhandled errors)
    """
    view = context.get("view")
    view_name = view.__class__.__name__ if view is not None else "unknown"

    if isinstance(exc, APIException):
        if isinstance(exc, BookingRejection):
            logger.info(f"{view_name}: rejected with {exc.code} - {exc.message}")
        else:
            logger.error(f"{view_name}: {exc.code} - {exc.message}")
        return Response(exc.to_dict(), status=exc.status_code)

    # Handle Django ValidationError by converting to DRF ValidationError
    if isinstance(exc, DjangoValidationError):
        if hasattr(exc, "message_dict"):
            exc = ValidationError(detail=exc.message_dict)
        else:
            exc = ValidationError(detail=exc.messages)

    response = drf_exception_handler(exc, context)
    if response is None:
        return None

    error_code = get_error_code(exc)
    logger.warning(f"{view_name}: {error_code} ({response.status_code})")

    body = {
        "code": error_code,
        "message": ERROR_MESSAGES.get(error_code, str(getattr(exc, "detail", exc))),
        "status_code": response.status_code,
    }
    if isinstance(exc, ValidationError):
        body["errors"] = response.data
    response.data = body
    return response
