"""
Error taxonomy shared by services and API handlers.

Every error is a DRF ``APIException`` so a service can raise it and the
view layer renders it without extra plumbing. ``api_exception_handler``
shapes all error bodies as ``{"success": false, "error": "..."}``;
authentication failures use the bare ``{"error": "Unauthorized"}`` body
the dashboard expects.
"""

import logging

from django.db import IntegrityError
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.settings import api_settings
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class DashboardError(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request failed"
    default_code = "error"

    def __init__(self, message=None):
        self.message = message or self.default_detail
        super().__init__(self.message)

    def __str__(self):
        return self.message


class UnauthorizedError(DashboardError):
    """Missing or invalid session / credential."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Unauthorized"
    default_code = "unauthorized"


class ValidationError(DashboardError):
    """A required request field is missing or malformed."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"
    default_code = "validation_error"


class ConflictError(DashboardError):
    """The store rejected a write on a uniqueness rule."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflicting record already exists"
    default_code = "conflict"


class UpstreamApiError(DashboardError):
    """Non-2xx answer from a third-party platform."""
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Upstream platform error"
    default_code = "upstream_error"

    def __init__(self, message=None, upstream_status=None):
        self.upstream_status = upstream_status
        super().__init__(message)


class UpstreamAuthError(UpstreamApiError):
    """The stored platform credential is missing, invalid or expired."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Platform credential is invalid or expired"
    default_code = "upstream_auth_error"


def _error_message(detail):
    if isinstance(detail, dict):
        parts = []
        for field, value in detail.items():
            message = _error_message(value)
            parts.append(message if field == api_settings.NON_FIELD_ERRORS_KEY else f"{field}: {message}")
        return "; ".join(parts)
    if isinstance(detail, (list, tuple)):
        return ", ".join(_error_message(item) for item in detail)
    return str(detail)


def api_exception_handler(exc, context):
    if isinstance(exc, (exceptions.NotAuthenticated, exceptions.AuthenticationFailed, UnauthorizedError)):
        return Response({"error": "Unauthorized"}, status=status.HTTP_401_UNAUTHORIZED)

    if isinstance(exc, IntegrityError):
        exc = ConflictError(str(exc))

    response = exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.error(f"Unhandled error in {view.__class__.__name__ if view else 'view'}: {exc}", exc_info=exc)
        return Response(
            {"success": False, "error": str(exc) or "Unknown error occurred"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, DashboardError):
        message = exc.message
    else:
        message = _error_message(response.data.get("detail", response.data)
                                 if isinstance(response.data, dict) else response.data)

    body = {"success": False, "error": message}
    if isinstance(exc, UpstreamApiError) and exc.upstream_status is not None:
        body["status"] = exc.upstream_status
    response.data = body
    return response
