"""Article lifecycle: creation, reads with view counting, edits and publishing.

The acting principal is passed into every call and checked against
``access_control.policy``. Timestamps come from the injected clock.
"""

import logging
from typing import Any

from django.db import transaction
from django.db.models import Count, F, Q

from access_control.policy import (
    Capability,
    ensure_can_mutate,
    ensure_can_publish,
    ensure_can_read,
    require_capability,
)
from core.clock import system_clock
from core.errors import NotFoundError, ValidationFailedError
from .descriptors import parse_images, parse_videos
from .models import Article

logger = logging.getLogger(__name__)

TITLE_MIN, TITLE_MAX = 5, 255
EXCERPT_MIN, EXCERPT_MAX = 10, 500
CATEGORY_MAX = 100
TAG_MAX = 50

EDITABLE_FIELDS = (
    "title",
    "excerpt",
    "content",
    "category",
    "published",
    "featured",
    "tags",
    "images",
    "videos",
)


def normalize_tags(tags: Any) -> list[str]:
    """Trim, drop blanks and duplicates, keep first-seen order."""
    if not isinstance(tags, (list, tuple)):
        raise ValidationFailedError({"tags": "Tags must be a list of strings"})
    seen: list[str] = []
    for tag in tags:
        if not isinstance(tag, str):
            raise ValidationFailedError({"tags": "Tags must be a list of strings"})
        tag = tag.strip()
        if not tag or tag in seen:
            continue
        if len(tag) > TAG_MAX:
            raise ValidationFailedError({"tags": f"Each tag must be at most {TAG_MAX} characters"})
        seen.append(tag)
    return seen


def _length_error(value: str, low: int, high: int, label: str) -> str | None:
    if not (low <= len(value) <= high):
        return f"{label} should be between {low} and {high} characters"
    return None


def clean_fields(fields: dict, creating: bool) -> dict:
    """Validate the editable fields present in ``fields``.

    Absent or ``None`` values are dropped so an update leaves them untouched.
    On create, title and excerpt are required.
    """
    cleaned: dict[str, Any] = {}
    errors: dict[str, str] = {}

    for name in EDITABLE_FIELDS:
        value = fields.get(name)
        if value is None:
            continue

        if name in ("title", "excerpt", "content", "category"):
            if not isinstance(value, str):
                errors[name] = f"{name.capitalize()} must be a string"
                continue
            if name != "content":
                value = value.strip()

        if name == "title":
            error = _length_error(value, TITLE_MIN, TITLE_MAX, "Title")
        elif name == "excerpt":
            error = _length_error(value, EXCERPT_MIN, EXCERPT_MAX, "Excerpt")
        elif name == "category":
            value = value or None
            error = None
            if value and len(value) > CATEGORY_MAX:
                error = f"Category must be at most {CATEGORY_MAX} characters"
        elif name in ("published", "featured"):
            error = None if isinstance(value, bool) else f"{name.capitalize()} must be a boolean"
        elif name == "tags":
            try:
                value = normalize_tags(value)
                error = None
            except ValidationFailedError as exc:
                error = exc.field_errors["tags"]
        elif name == "images":
            try:
                value = parse_images(value)
                error = None
            except ValueError as exc:
                error = f"Invalid images: {exc}"
        elif name == "videos":
            try:
                value = parse_videos(value)
                error = None
            except ValueError as exc:
                error = f"Invalid videos: {exc}"
        else:
            error = None

        if error:
            errors[name] = error
        else:
            cleaned[name] = value

    if creating:
        if "title" not in cleaned and "title" not in errors:
            errors["title"] = "Title is required"
        if "excerpt" not in cleaned and "excerpt" not in errors:
            errors["excerpt"] = "Excerpt is required"

    if errors:
        raise ValidationFailedError(errors)
    return cleaned


class ArticleService:
    """Owns the draft to published transition and view accounting."""

    def __init__(self, clock=None):
        self.clock = clock or system_clock

    @staticmethod
    def _get(article_id) -> Article:
        try:
            return Article.objects.select_related("owner").prefetch_related("tag_entries").get(pk=article_id)
        except (Article.DoesNotExist, ValueError, TypeError):
            raise NotFoundError(f"Article not found with id: {article_id}")

    @staticmethod
    def _apply(article: Article, cleaned: dict) -> None:
        for name, value in cleaned.items():
            if name == "tags":
                continue
            if name == "images":
                article.image_list = value
            elif name == "videos":
                article.video_list = value
            else:
                setattr(article, name, value)

    def create(self, owner, fields: dict) -> Article:
        """Create an article owned by ``owner``; may be published at once."""
        require_capability(owner, Capability.CREATE_CONTENT)
        cleaned = clean_fields(fields, creating=True)
        now = self.clock.now()

        article = Article(owner=owner, views=0, created_at=now, updated_at=now)
        self._apply(article, cleaned)
        if article.published:
            article.publish_date = now

        with transaction.atomic():
            article.save()
            article.set_tags(cleaned.get("tags", []))

        logger.info(
            "article.created article_id=%s owner_id=%s published=%s",
            article.pk,
            owner.id,
            article.published,
        )
        return self._get(article.pk)

    def read(self, article_id, principal=None) -> Article:
        """Return an article, counting one view when it is published."""
        article = self._get(article_id)
        ensure_can_read(principal, article)

        if article.published:
            Article.objects.filter(pk=article.pk).update(views=F("views") + 1)
            article.views = Article.objects.values_list("views", flat=True).get(pk=article.pk)
        return article

    def update(self, article_id, principal, fields: dict) -> Article:
        """Apply only the fields present; a first publish stamps publish_date."""
        article = self._get(article_id)
        ensure_can_mutate(principal, article)
        cleaned = clean_fields(fields, creating=False)

        now = self.clock.now()
        self._apply(article, cleaned)
        if article.published and article.publish_date is None:
            article.publish_date = now
        article.updated_at = now

        with transaction.atomic():
            update_fields = [
                name for name in cleaned if name != "tags"
            ] + ["publish_date", "updated_at"]
            article.save(update_fields=update_fields)
            if "tags" in cleaned:
                article.set_tags(cleaned["tags"])

        logger.info("article.updated article_id=%s actor_id=%s", article.pk, principal.id)
        return self._get(article.pk)

    def delete(self, article_id, principal) -> None:
        article = self._get(article_id)
        ensure_can_mutate(principal, article)
        article.delete()
        logger.info("article.deleted article_id=%s actor_id=%s", article_id, principal.id)

    def publish(self, article_id, principal) -> Article:
        """Publish a draft; publishing twice is an IllegalState error.

        A draft that was published before and then unpublished keeps its
        original publish_date.
        """
        article = self._get(article_id)
        ensure_can_publish(principal, article)

        now = self.clock.now()
        article.published = True
        if article.publish_date is None:
            article.publish_date = now
        article.updated_at = now
        article.save(update_fields=["published", "publish_date", "updated_at"])

        logger.info("article.published article_id=%s actor_id=%s", article.pk, principal.id)
        return article

    @staticmethod
    def statistics() -> dict[str, int]:
        return Article.objects.aggregate(
            total=Count("id"),
            published=Count("id", filter=Q(published=True)),
            draft=Count("id", filter=Q(published=False)),
        )


__all__ = ["ArticleService", "clean_fields", "normalize_tags"]
