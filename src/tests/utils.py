"""Shared helpers for tests (users, articles, clients, a fixed clock)."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from articles.models import Article
from authentication.managers import hash_secret
from authentication.models import Role, User
from authentication.services import TokenService

DEFAULT_PASSWORD = "StrongPass123"


class FixedClock:
    """Clock returning a settable instant."""

    def __init__(self, now: datetime | None = None):
        self.current = now or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


def create_user(
    email: str,
    password: str = DEFAULT_PASSWORD,
    role: str = Role.CONTRIBUTOR,
    approved: bool = True,
    enabled: bool = True,
    **extra,
) -> User:
    """Create a user with a bcrypt-hashed password for tests."""
    now = extra.pop("created_at", None) or datetime.now(timezone.utc)
    return User.objects.create(
        email=email,
        name=extra.pop("name", email.split("@")[0].title()),
        password_hash=hash_secret(password),
        role=role,
        approved=approved,
        enabled=enabled,
        created_at=now,
        updated_at=now,
        **extra,
    )


def create_admin(email: str = "admin@test.com", password: str = DEFAULT_PASSWORD, **extra) -> User:
    return create_user(email, password, role=Role.ADMIN, approved=True, **extra)


def create_article(owner: User, tags: list[str] | None = None, **fields) -> Article:
    """Insert an article directly, bypassing service validation."""
    now = fields.pop("created_at", None) or datetime.now(timezone.utc)
    published = fields.pop("published", False)
    defaults = {
        "title": "Untitled field report",
        "excerpt": "A short excerpt for the report.",
        "content": "",
        "publish_date": now if published else None,
    }
    defaults.update(fields)
    article = Article.objects.create(
        owner=owner,
        published=published,
        created_at=now,
        updated_at=now,
        **defaults,
    )
    if tags:
        article.set_tags(tags)
    return article


def auth_client(user: User) -> APIClient:
    """Return an APIClient authenticated with a fresh session token."""
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {TokenService.issue_for(user)}")
    return client


@override_settings(BCRYPT_ROUNDS=4)
class ContentApiTestCase(TestCase):
    """Base test case with cheap bcrypt hashing and an anonymous client."""

    def setUp(self):
        self.api_client: APIClient = APIClient()
