"""Tests for the seed_content management command."""

from __future__ import annotations

from io import StringIO

from django.core.management import call_command

from articles.models import Article
from authentication.models import Role, User
from tests.utils import ContentApiTestCase


class SeedContentCommandTests(ContentApiTestCase):
    def test_seed_is_idempotent(self):
        call_command("seed_content", stdout=StringIO())
        call_command("seed_content", stdout=StringIO())

        self.assertEqual(User.objects.filter(role=Role.ADMIN).count(), 1)
        self.assertEqual(User.objects.count(), 3)
        self.assertEqual(Article.objects.count(), 3)
        self.assertFalse(User.objects.get(email="newcomer@example.com").approved)
        self.assertTrue(User.objects.get(email="ranger@example.com").approved)

    def test_seeded_articles_follow_publish_rules(self):
        call_command("seed_content", stdout=StringIO())

        published = Article.objects.filter(published=True)
        self.assertEqual(published.count(), 2)
        self.assertFalse(published.filter(publish_date__isnull=True).exists())
        self.assertIsNone(Article.objects.get(published=False).publish_date)

    def test_reset_clears_seeded_rows(self):
        call_command("seed_content", stdout=StringIO())
        out = StringIO()
        call_command("seed_content", "--reset", stdout=out)

        self.assertIn("Seeded data cleared.", out.getvalue())
        self.assertEqual(Article.objects.count(), 3)
