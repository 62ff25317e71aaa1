"""DRF authenticator that reuses the principal set by ``JWTAuthMiddleware``.

Token parsing happens once, in the middleware. DRF only needs to see the
user that is already attached to the Django request.
"""

from typing import Any, Optional, Tuple

from rest_framework.authentication import BaseAuthentication


class MiddlewareUserAuthentication(BaseAuthentication):
    """Expose ``request._request.user`` (set by middleware) to DRF."""

    def authenticate(self, request) -> Optional[Tuple[Any, None]]:
        django_request = getattr(request, "_request", None)
        user = getattr(django_request, "user", None)
        if user is None or not getattr(user, "is_authenticated", False):
            return None
        if not getattr(user, "enabled", False):
            return None
        return user, None

    def authenticate_header(self, request) -> str:
        """Advertise bearer auth so DRF answers 401 rather than 403."""
        return 'Bearer realm="api"'


__all__ = ["MiddlewareUserAuthentication"]
