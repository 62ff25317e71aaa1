"""Access policy: pure allow/deny decisions over principals and articles.

Nothing here touches the database or the request. A principal is any object
with ``id``, ``role``, ``enabled`` and ``is_authenticated``; anonymous callers
are passed as ``None`` (or an ``AnonymousUser``).
"""

from enum import Enum

from core.errors import AccessDeniedError, IllegalStateError

ADMIN_ROLE = "ADMIN"
CONTENT_ROLES = frozenset({"ADMIN", "CONTRIBUTOR"})


class Capability(str, Enum):
    """Coarse gates checked at the boundary before a manager is called."""

    AUTHENTICATED = "authenticated"
    CREATE_CONTENT = "create_content"
    ADMIN = "admin"


def _active(principal) -> bool:
    return (
        principal is not None
        and getattr(principal, "is_authenticated", False)
        and getattr(principal, "enabled", False)
    )


def is_admin(principal) -> bool:
    return _active(principal) and principal.role == ADMIN_ROLE


def can_create_content(principal) -> bool:
    return _active(principal) and principal.role in CONTENT_ROLES


def is_owner(principal, article) -> bool:
    return _active(principal) and article.owner_id == principal.id


def has_capability(principal, capability: Capability | None) -> bool:
    if capability is None:
        return True
    if capability is Capability.AUTHENTICATED:
        return _active(principal)
    if capability is Capability.CREATE_CONTENT:
        return can_create_content(principal)
    if capability is Capability.ADMIN:
        return is_admin(principal)
    return False


def can_read_article(principal, article) -> bool:
    if article.published:
        return True
    return is_admin(principal) or is_owner(principal, article)


def can_mutate_article(principal, article) -> bool:
    return is_admin(principal) or is_owner(principal, article)


def require_capability(principal, capability: Capability | None) -> None:
    if not has_capability(principal, capability):
        raise AccessDeniedError()


def ensure_can_read(principal, article) -> None:
    if not can_read_article(principal, article):
        raise AccessDeniedError("You do not have permission to view this article.")


def ensure_can_mutate(principal, article) -> None:
    if not can_mutate_article(principal, article):
        raise AccessDeniedError("You do not have permission to modify this article.")


def ensure_can_publish(principal, article) -> None:
    ensure_can_mutate(principal, article)
    if article.published:
        raise IllegalStateError("Article is already published")


__all__ = [
    "Capability",
    "is_admin",
    "is_owner",
    "can_create_content",
    "has_capability",
    "can_read_article",
    "can_mutate_article",
    "require_capability",
    "ensure_can_read",
    "ensure_can_mutate",
    "ensure_can_publish",
]
