"""
DRF exception handler that renders service errors consistently.
"""
import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler

from .errors import InternalError, ServiceError

logger = logging.getLogger(__name__)


def service_exception_handler(exc, context):
    """
    Render ``ServiceError`` subclasses as ``{"error", "message"}`` payloads.
    Anything else goes through DRF's default handler.
    """
    if isinstance(exc, ServiceError):
        request = context.get("request")
        path = request.path if request is not None else "?"
        if isinstance(exc, InternalError):
            logger.error(f"Internal error on {path}: {exc.message}", exc_info=exc)
        else:
            logger.info(f"Service error on {path}: {exc.code} - {exc.message}")
        return Response(exc.to_dict(), status=exc.http_status)

    return exception_handler(exc, context)


def error_response(error: ServiceError):
    """Build the API response for a failed ``ServiceResult``."""
    return Response(error.to_dict(), status=error.http_status)
