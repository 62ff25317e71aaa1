"""Tests for the article lifecycle: create, read, edit, publish, delete."""

from __future__ import annotations

from articles.models import Article
from articles.services import ArticleService, clean_fields, normalize_tags
from core.errors import (
    AccessDeniedError,
    IllegalStateError,
    NotFoundError,
    ValidationFailedError,
)
from tests.utils import (
    ContentApiTestCase,
    FixedClock,
    auth_client,
    create_admin,
    create_article,
    create_user,
)

SERENGETI = {
    "title": "Elephants of the Serengeti",
    "excerpt": "How herds move across the plains.",
    "content": "Field notes from the dry season.",
    "category": "Mammals",
    "tags": ["elephants", " savanna ", "elephants", ""],
}


class TagNormalizationTests(ContentApiTestCase):
    def test_trims_and_deduplicates_preserving_order(self):
        self.assertEqual(
            normalize_tags([" birds", "wetlands", "birds", "  ", "Birds"]),
            ["birds", "wetlands", "Birds"],
        )

    def test_rejects_non_string_tags_and_long_tags(self):
        with self.assertRaises(ValidationFailedError):
            normalize_tags(["ok", 7])
        with self.assertRaises(ValidationFailedError):
            normalize_tags(["x" * 51])


class FieldValidationTests(ContentApiTestCase):
    def test_create_requires_title_and_excerpt(self):
        with self.assertRaises(ValidationFailedError) as ctx:
            clean_fields({}, creating=True)
        self.assertEqual(set(ctx.exception.field_errors), {"title", "excerpt"})

    def test_length_bounds(self):
        with self.assertRaises(ValidationFailedError) as ctx:
            clean_fields({"title": "Hi", "excerpt": "short"}, creating=True)
        self.assertEqual(
            ctx.exception.field_errors["title"],
            "Title should be between 5 and 255 characters",
        )
        self.assertIn("excerpt", ctx.exception.field_errors)

    def test_update_ignores_absent_and_null_fields(self):
        self.assertEqual(clean_fields({"title": None, "featured": True}, creating=False), {"featured": True})

    def test_invalid_media_descriptor(self):
        with self.assertRaises(ValidationFailedError) as ctx:
            clean_fields({"images": [{"caption": "no url"}]}, creating=False)
        self.assertIn("images", ctx.exception.field_errors)


class ArticleServiceTests(ContentApiTestCase):
    def setUp(self):
        super().setUp()
        self.clock = FixedClock()
        self.service = ArticleService(clock=self.clock)
        self.owner = create_user("owner@test.com")
        self.other = create_user("other@test.com")
        self.admin = create_admin()

    def test_create_draft_normalizes_tags_and_stamps_clock(self):
        article = self.service.create(self.owner, SERENGETI)

        self.assertFalse(article.published)
        self.assertIsNone(article.publish_date)
        self.assertEqual(article.views, 0)
        self.assertEqual(article.tags, ["elephants", "savanna"])
        self.assertEqual(article.created_at, self.clock.now())
        self.assertEqual(article.owner_id, self.owner.id)

    def test_create_published_sets_publish_date(self):
        article = self.service.create(self.owner, {**SERENGETI, "published": True})
        self.assertTrue(article.published)
        self.assertEqual(article.publish_date, self.clock.now())

    def test_disabled_contributor_cannot_create(self):
        disabled = create_user("disabled@test.com", enabled=False)
        with self.assertRaises(AccessDeniedError):
            self.service.create(disabled, SERENGETI)

    def test_publish_then_publish_again_is_illegal(self):
        article = self.service.create(self.owner, SERENGETI)
        self.clock.advance(hours=1)

        published = self.service.publish(article.id, self.owner)
        self.assertTrue(published.published)
        self.assertEqual(published.publish_date, self.clock.now())

        with self.assertRaises(IllegalStateError):
            self.service.publish(article.id, self.owner)

    def test_republish_keeps_original_publish_date(self):
        article = self.service.create(self.owner, {**SERENGETI, "published": True})
        first_date = article.publish_date

        self.clock.advance(days=1)
        self.service.update(article.id, self.owner, {"published": False})
        self.clock.advance(days=1)
        republished = self.service.publish(article.id, self.owner)

        self.assertEqual(republished.publish_date, first_date)

    def test_update_is_partial_and_replaces_tags(self):
        article = self.service.create(self.owner, SERENGETI)
        self.clock.advance(minutes=5)

        updated = self.service.update(article.id, self.owner, {"tags": ["herds"], "featured": True})

        self.assertEqual(updated.title, SERENGETI["title"])
        self.assertEqual(updated.tags, ["herds"])
        self.assertTrue(updated.featured)
        self.assertEqual(updated.updated_at, self.clock.now())

    def test_update_to_published_stamps_first_publish_date(self):
        article = self.service.create(self.owner, SERENGETI)
        self.clock.advance(hours=3)
        updated = self.service.update(article.id, self.owner, {"published": True})
        self.assertEqual(updated.publish_date, self.clock.now())

    def test_only_owner_or_admin_may_mutate(self):
        article = self.service.create(self.owner, SERENGETI)

        with self.assertRaises(AccessDeniedError):
            self.service.update(article.id, self.other, {"title": "Hijacked title"})
        with self.assertRaises(AccessDeniedError):
            self.service.delete(article.id, self.other)

        self.service.update(article.id, self.admin, {"title": "Edited by admin"})
        self.service.delete(article.id, self.admin)
        self.assertFalse(Article.objects.filter(pk=article.id).exists())

    def test_reads_count_views_only_when_published(self):
        draft = self.service.create(self.owner, SERENGETI)
        self.service.read(draft.id, self.owner)
        self.assertEqual(Article.objects.get(pk=draft.id).views, 0)

        self.service.publish(draft.id, self.owner)
        for expected in range(1, 4):
            self.assertEqual(self.service.read(draft.id, None).views, expected)
        self.assertEqual(Article.objects.get(pk=draft.id).views, 3)

    def test_draft_hidden_from_other_users(self):
        draft = self.service.create(self.owner, SERENGETI)
        with self.assertRaises(AccessDeniedError):
            self.service.read(draft.id, self.other)
        with self.assertRaises(AccessDeniedError):
            self.service.read(draft.id, None)
        self.assertEqual(self.service.read(draft.id, self.admin).id, draft.id)

    def test_missing_article(self):
        with self.assertRaises(NotFoundError):
            self.service.read(999999, self.owner)

    def test_statistics(self):
        create_article(self.owner, published=True)
        create_article(self.owner, published=True)
        create_article(self.owner, published=False)
        self.assertEqual(ArticleService.statistics(), {"total": 3, "published": 2, "draft": 1})


class ArticleApiTests(ContentApiTestCase):
    def setUp(self):
        super().setUp()
        self.owner = create_user("owner@test.com", name="Field Ranger")
        self.other = create_user("other@test.com")
        self.admin = create_admin()
        self.owner_client = auth_client(self.owner)
        self.other_client = auth_client(self.other)
        self.admin_client = auth_client(self.admin)

    def _create(self, **overrides):
        response = self.owner_client.post("/articles/", {**SERENGETI, **overrides}, format="json")
        self.assertEqual(response.status_code, 201, response.content)
        return response.json()["data"]

    def test_create_returns_enveloped_article(self):
        data = self._create()

        self.assertEqual(data["title"], "Elephants of the Serengeti")
        self.assertEqual(data["tags"], ["elephants", "savanna"])
        self.assertEqual(data["author_id"], self.owner.id)
        self.assertEqual(data["author_name"], "Field Ranger")
        self.assertFalse(data["published"])
        self.assertIsNone(data["publish_date"])

    def test_anonymous_create_is_unauthorized(self):
        response = self.api_client.post("/articles/", SERENGETI, format="json")
        self.assertEqual(response.status_code, 401)
        self.assertIsNone(response.json()["data"])

    def test_validation_errors_use_field_messages(self):
        response = self.owner_client.post(
            "/articles/", {"title": "Hi", "excerpt": "A valid excerpt"}, format="json"
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn(
            {"field": "title", "message": "Title should be between 5 and 255 characters"},
            response.json()["errors"],
        )

    def test_draft_visibility_matrix(self):
        article_id = self._create()["id"]
        url = f"/articles/{article_id}/"

        self.assertEqual(self.api_client.get(url).status_code, 401)
        self.assertEqual(self.other_client.get(url).status_code, 403)
        self.assertEqual(self.owner_client.get(url).status_code, 200)
        self.assertEqual(self.admin_client.get(url).status_code, 200)

    def test_publish_flow_and_view_counting(self):
        article_id = self._create()["id"]

        response = self.owner_client.patch(f"/articles/{article_id}/publish/")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["data"]["published"])
        self.assertIsNotNone(response.json()["data"]["publish_date"])

        again = self.owner_client.patch(f"/articles/{article_id}/publish/")
        self.assertEqual(again.status_code, 409)
        self.assertEqual(again.json()["errors"], ["Article is already published"])

        for expected in (1, 2, 3):
            response = self.api_client.get(f"/articles/{article_id}/")
            self.assertEqual(response.json()["data"]["views"], expected)

    def test_other_contributor_cannot_publish_or_edit(self):
        article_id = self._create()["id"]

        self.assertEqual(self.other_client.patch(f"/articles/{article_id}/publish/").status_code, 403)
        response = self.other_client.put(
            f"/articles/{article_id}/", {"title": "Taken over"}, format="json"
        )
        self.assertEqual(response.status_code, 403)
        self.assertEqual(self.other_client.delete(f"/articles/{article_id}/").status_code, 403)

    def test_partial_update_and_delete(self):
        article_id = self._create()["id"]

        response = self.owner_client.patch(
            f"/articles/{article_id}/", {"excerpt": "A revised excerpt for the herds."}, format="json"
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["excerpt"], "A revised excerpt for the herds.")
        self.assertEqual(response.json()["data"]["title"], SERENGETI["title"])

        self.assertEqual(self.owner_client.delete(f"/articles/{article_id}/").status_code, 204)
        self.assertEqual(self.owner_client.get(f"/articles/{article_id}/").status_code, 404)

    def test_images_round_trip_through_descriptors(self):
        image = {
            "url": "/media/images/abc/original.jpg",
            "id": "abc",
            "caption": "Matriarch",
            "sizes": {"thumbnail": "/media/images/abc/thumbnail.jpg"},
        }
        data = self._create(images=[image])
        self.assertEqual(data["images"][0]["url"], image["url"])
        self.assertEqual(data["images"][0]["sizes"], image["sizes"])

    def test_statistics_is_admin_only(self):
        self._create()
        self.assertEqual(self.owner_client.get("/articles/statistics/").status_code, 403)
        response = self.admin_client.get("/articles/statistics/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["draft"], 1)

    def test_disabled_token_holder_is_rejected(self):
        client = auth_client(self.owner)
        self.owner.enabled = False
        self.owner.save(update_fields=["enabled"])
        self.assertEqual(client.get("/articles/my-articles/").status_code, 401)
