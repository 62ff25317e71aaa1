"""Request middleware: correlation ids and JWT bearer authentication."""

import logging
import uuid
from typing import Optional

from django.conf import settings
from django.contrib.auth.models import AnonymousUser
from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin
from rest_framework import status

from authentication.models import User
from authentication.services import InvalidTokenError, TokenService
from .logging_safety import loggable_correlation_id

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-Id"


def get_correlation_id(request) -> str:
    """Return the request's correlation id, assigning one if missing."""
    existing = getattr(request, "correlation_id", None)
    if existing:
        return existing
    correlation_id = request.META.get("HTTP_X_CORRELATION_ID") or f"req-{uuid.uuid4()}"
    request.correlation_id = correlation_id
    return correlation_id


class CorrelationIdMiddleware(MiddlewareMixin):
    """Attach ``request.correlation_id`` and echo it on the response."""

    def process_request(self, request):  # type: ignore[override]
        get_correlation_id(request)
        return None

    def process_response(self, request, response):  # type: ignore[override]
        correlation_id = getattr(request, "correlation_id", None)
        if correlation_id:
            response[CORRELATION_HEADER] = correlation_id
        return response


class JWTAuthMiddleware(MiddlewareMixin):
    """Decode the bearer session token and attach ``request.user``.

    Requests without a bearer header stay anonymous. A header carrying an
    invalid token, or a token for a missing or disabled user, is rejected
    with 401 before any view runs.
    """

    def process_request(self, request):  # type: ignore[override]
        """Authenticate request using Bearer token if present."""
        auth_header = request.META.get("HTTP_AUTHORIZATION", "")
        if not auth_header or not auth_header.startswith("Bearer "):
            request.user = AnonymousUser()
            return None

        token = auth_header.split(" ", 1)[1].strip()
        safe_cid = loggable_correlation_id(get_correlation_id(request))

        try:
            claims = TokenService.validate_token(token)
        except InvalidTokenError as exc:
            logger.info(
                "auth.rejected correlation_id=%s path=%s reason=%s",
                safe_cid,
                request.path,
                exc.kind.value,
            )
            return _unauthorized(exc.message)

        user = self._get_user(claims.subject)
        if not user or not user.enabled:
            logger.info(
                "auth.rejected correlation_id=%s path=%s reason=user_unavailable",
                safe_cid,
                request.path,
            )
            return _unauthorized("User not found or disabled")

        request.user = user
        return None

    @staticmethod
    def _get_user(user_id: Optional[str]) -> Optional[User]:
        if not user_id:
            return None
        try:
            return User.objects.get(id=int(user_id))
        except (User.DoesNotExist, ValueError):
            return None


def _unauthorized(detail: str) -> JsonResponse:
    if getattr(settings, "DEBUG_AUTH_ERRORS", False):
        message = detail
    else:
        message = "Authentication credentials were not provided or are invalid, or user is disabled."
    return JsonResponse(
        {"data": None, "errors": [message]},
        status=status.HTTP_401_UNAUTHORIZED,
    )


__all__ = ["CorrelationIdMiddleware", "JWTAuthMiddleware", "get_correlation_id"]
