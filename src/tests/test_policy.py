"""Decision-table tests for the pure access policy functions."""

from __future__ import annotations

from types import SimpleNamespace

from django.test import SimpleTestCase

from access_control.policy import (
    Capability,
    can_mutate_article,
    can_read_article,
    ensure_can_publish,
    has_capability,
    is_admin,
)
from core.errors import AccessDeniedError, IllegalStateError


def principal(pk: int, role: str = "CONTRIBUTOR", enabled: bool = True):
    return SimpleNamespace(id=pk, role=role, enabled=enabled, is_authenticated=True)


def article(owner_id: int, published: bool):
    return SimpleNamespace(owner_id=owner_id, published=published)


ANONYMOUS = SimpleNamespace(is_authenticated=False)


class ArticlePolicyTests(SimpleTestCase):
    def setUp(self):
        self.owner = principal(1)
        self.other = principal(2)
        self.admin = principal(3, role="ADMIN")

    def test_published_article_is_readable_by_anyone(self):
        published = article(owner_id=1, published=True)
        for who in (None, ANONYMOUS, self.owner, self.other, self.admin):
            with self.subTest(who=who):
                self.assertTrue(can_read_article(who, published))

    def test_draft_is_readable_only_by_owner_or_admin(self):
        draft = article(owner_id=1, published=False)
        self.assertFalse(can_read_article(None, draft))
        self.assertFalse(can_read_article(ANONYMOUS, draft))
        self.assertFalse(can_read_article(self.other, draft))
        self.assertTrue(can_read_article(self.owner, draft))
        self.assertTrue(can_read_article(self.admin, draft))

    def test_mutation_requires_owner_or_admin(self):
        for published in (True, False):
            target = article(owner_id=1, published=published)
            self.assertTrue(can_mutate_article(self.owner, target))
            self.assertTrue(can_mutate_article(self.admin, target))
            self.assertFalse(can_mutate_article(self.other, target))
            self.assertFalse(can_mutate_article(None, target))
            self.assertFalse(can_mutate_article(ANONYMOUS, target))

    def test_disabled_principals_lose_every_right(self):
        disabled_owner = principal(1, enabled=False)
        disabled_admin = principal(3, role="ADMIN", enabled=False)
        draft = article(owner_id=1, published=False)

        self.assertFalse(can_read_article(disabled_owner, draft))
        self.assertFalse(can_mutate_article(disabled_admin, draft))
        self.assertFalse(is_admin(disabled_admin))

    def test_publish_checks_ownership_before_state(self):
        published = article(owner_id=1, published=True)
        with self.assertRaises(AccessDeniedError):
            ensure_can_publish(self.other, published)
        with self.assertRaises(IllegalStateError):
            ensure_can_publish(self.owner, published)
        ensure_can_publish(self.admin, article(owner_id=1, published=False))


class CapabilityTests(SimpleTestCase):
    def test_capability_matrix(self):
        contributor = principal(1)
        admin = principal(2, role="ADMIN")
        unknown_role = principal(3, role="READER")
        cases = [
            (None, Capability.AUTHENTICATED, False),
            (ANONYMOUS, Capability.CREATE_CONTENT, False),
            (contributor, Capability.AUTHENTICATED, True),
            (contributor, Capability.CREATE_CONTENT, True),
            (contributor, Capability.ADMIN, False),
            (admin, Capability.CREATE_CONTENT, True),
            (admin, Capability.ADMIN, True),
            (unknown_role, Capability.CREATE_CONTENT, False),
            (ANONYMOUS, None, True),
        ]
        for who, capability, expected in cases:
            with self.subTest(who=who, capability=capability):
                self.assertIs(has_capability(who, capability), expected)
