"""Custom exception handling to enforce the API error envelope."""

import logging
from typing import Any

from django.conf import settings
from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed, NotAuthenticated
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from .errors import AccessDeniedError, DomainError, UpstreamError
from .logging_safety import loggable_correlation_id
from .middleware import get_correlation_id

logger = logging.getLogger(__name__)

AUTH_REQUIRED_MESSAGE = (
    "Authentication credentials were not provided or are invalid, or user is disabled."
)
FORBIDDEN_MESSAGE = "You do not have permission to perform this action on this resource."


def _normalize_errors(payload: Any) -> list[Any]:
    """Convert DRF's response.data into a list for the envelope."""

    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and "detail" in payload:
        # Common DRF pattern: {"detail": "..."}
        return [payload["detail"]]
    return [payload]


def _field_errors(detail: Any, prefix: str = "") -> list[dict[str, Any]]:
    """Flatten a serializer ValidationError detail into field/message pairs."""

    if isinstance(detail, dict):
        errors: list[dict[str, Any]] = []
        for key, value in detail.items():
            field = f"{prefix}.{key}" if prefix else str(key)
            if key == "non_field_errors":
                field = prefix or "non_field_errors"
            errors.extend(_field_errors(value, field))
        return errors
    if isinstance(detail, list):
        errors = []
        for item in detail:
            errors.extend(_field_errors(item, prefix))
        return errors
    return [{"field": prefix or "non_field_errors", "message": str(detail)}]


def _request(context: dict[str, Any]):
    request = context.get("request")
    return getattr(request, "_request", request)


def _is_anonymous(context: dict[str, Any]) -> bool:
    request = context.get("request")
    user = getattr(request, "user", None)
    return not getattr(user, "is_authenticated", False)


def _handle_domain_error(exc: DomainError, context: dict[str, Any]) -> Response:
    status_code = exc.status_code
    errors = exc.to_errors()

    if isinstance(exc, AccessDeniedError) and _is_anonymous(context):
        status_code = status.HTTP_401_UNAUTHORIZED
        errors = [AUTH_REQUIRED_MESSAGE]

    if isinstance(exc, UpstreamError):
        django_request = _request(context)
        correlation_id = get_correlation_id(django_request) if django_request is not None else None
        logger.error(
            "upstream.failure correlation_id=%s code=%s message=%s",
            loggable_correlation_id(correlation_id),
            exc.code,
            exc.message,
            exc_info=exc,
        )
        errors = [{"message": exc.message, "correlation_id": correlation_id}]

    return Response({"data": None, "errors": errors}, status=status_code)


def custom_exception_handler(exc: Exception, context: dict[str, Any]) -> Response | None:
    """Wrap errors in `{ "data": null, "errors": [...] }` shape.

    - Maps domain errors from ``core.errors`` to their status codes.
    - Uses DRF's default handler for framework errors.
    - Optionally exposes more detailed auth errors when DEBUG_AUTH_ERRORS is enabled.
    """

    if isinstance(exc, DomainError):
        return _handle_domain_error(exc, context)

    # Treat database errors as a temporary service outage and still respect the
    # global envelope format instead of returning Django's HTML 500 page.
    if isinstance(exc, DatabaseError):
        django_request = _request(context)
        correlation_id = get_correlation_id(django_request) if django_request is not None else None
        logger.error(
            "storage.failure correlation_id=%s",
            loggable_correlation_id(correlation_id),
            exc_info=exc,
        )
        return Response(
            {"data": None, "errors": ["Service temporarily unavailable."]},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    response = drf_exception_handler(exc, context)

    if response is None:
        return response

    if isinstance(exc, (AuthenticationFailed, NotAuthenticated)):
        response.status_code = status.HTTP_401_UNAUTHORIZED

    if response.status_code >= 400:
        base_errors = response.data

        if response.status_code == status.HTTP_401_UNAUTHORIZED:
            if getattr(settings, "DEBUG_AUTH_ERRORS", False):
                errors = _normalize_errors(base_errors)
            else:
                errors = [AUTH_REQUIRED_MESSAGE]
        elif response.status_code == status.HTTP_403_FORBIDDEN:
            errors = [FORBIDDEN_MESSAGE]
        elif isinstance(exc, DRFValidationError):
            errors = _field_errors(exc.detail)
        else:
            errors = _normalize_errors(base_errors)

        response.data = {"data": None, "errors": errors}

    return response


__all__ = ["custom_exception_handler"]
