# census_core/common/api/exceptions.py
"""
One error shape for every API failure:

    {"error": {"code": ..., "message": ..., "details": ..., "request_id": ...}}

Used by the DRF exception handler and by middleware that answers before
a view runs.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    AuthenticationFailed,
    NotAuthenticated,
    NotFound,
    PermissionDenied,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "Request failed."

# first match wins, so subclasses go before their bases
ERROR_CODES: tuple[tuple[type, str], ...] = (
    (ValidationError, "validation_error"),
    (NotAuthenticated, "not_authenticated"),
    (AuthenticationFailed, "authentication_failed"),
    (PermissionDenied, "permission_denied"),
    (NotFound, "not_found"),
    (Http404, "not_found"),
)


class ConflictError(APIException):
    """409: the record's current state does not allow the requested transition."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict."
    default_code = "conflict"


class PersistenceUnavailable(APIException):
    """503: the record store rejected a read or write. Nothing was retried."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "The record store did not accept the change."
    default_code = "persistence_error"


def ensure_request_id(request) -> str:
    if request is None:
        return uuid.uuid4().hex
    rid = getattr(request, "request_id", None)
    if not rid:
        rid = uuid.uuid4().hex
        request.request_id = rid
    return rid


def build_error_envelope(*, request=None, code: str, message: str, details: Any = None) -> dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details,
            "request_id": ensure_request_id(request),
        }
    }


def error_code_for(exc: Exception) -> str:
    for exc_type, code in ERROR_CODES:
        if isinstance(exc, exc_type):
            return code
    if isinstance(exc, APIException):
        return exc.default_code or "api_error"
    return "error"


def split_message(data: Any) -> tuple[str, Any]:
    """
    {"detail": "x"}            -> ("x", None)
    {"detail": "x", "k": ...}  -> ("x", {"k": ...})
    anything else              -> (GENERIC_MESSAGE, data)
    """
    if isinstance(data, dict) and "detail" in data:
        rest = {k: v for k, v in data.items() if k != "detail"}
        return str(data["detail"]), rest or None
    return GENERIC_MESSAGE, data


def field_lists(details: Any) -> Any:
    """Field errors always travel as lists of messages."""
    if not isinstance(details, dict):
        return details
    return {k: v if isinstance(v, (list, dict)) else [v] for k, v in details.items()}


def api_exception_handler(exc: Exception, context: dict[str, Any]):
    request = context.get("request")
    response = drf_exception_handler(exc, context)

    if response is None:
        logger.exception("Unhandled API error", exc_info=exc)
        envelope = build_error_envelope(
            request=request,
            code="server_error",
            message="Unexpected server error.",
        )
        return Response(envelope, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    message, details = split_message(response.data)
    if isinstance(exc, ValidationError):
        details = field_lists(details)
    envelope = build_error_envelope(
        request=request,
        code=error_code_for(exc),
        message=message,
        details=details,
    )
    return Response(envelope, status=response.status_code, headers=response.headers)
