import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class NotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class InvalidTransition(APIException):
    """Operation attempted from a state that does not allow it."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Operation not allowed in the current state."
    default_code = "invalid_transition"


class AlreadyCompleted(InvalidTransition):
    default_detail = "Session already completed"
    default_code = "already_completed"


class ConflictError(APIException):
    """Uniqueness violation reported by the database."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict."
    default_code = "conflict"


def api_exception_handler(exc, context):
    """
    Wraps DRF's handler so single-message errors come back as
    { "error": "...", "code": "..." }. Field validation errors keep DRF's shape.
    """
    response = exception_handler(exc, context)
    if response is None:
        return None

    data = response.data
    if isinstance(data, dict) and set(data) == {"detail"}:
        detail = data["detail"]
        response.data = {"error": str(detail), "code": getattr(detail, "code", "error")}

    if isinstance(exc, (InvalidTransition, ConflictError)):
        view = context.get("view")
        logger.warning("%s rejected: %s", view.__class__.__name__ if view else "request", exc.detail)

    return response
