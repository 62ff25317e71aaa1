"""Article and tag models."""

from django.conf import settings
from django.db import models

from .descriptors import ImageDescriptor, VideoDescriptor


class Article(models.Model):
    """Owned content unit moving from draft to published."""

    title = models.CharField(max_length=255)
    excerpt = models.CharField(max_length=500)
    content = models.TextField(blank=True)
    category = models.CharField(max_length=100, null=True, blank=True)
    published = models.BooleanField(default=False)
    featured = models.BooleanField(default=False)
    views = models.PositiveIntegerField(default=0)
    images = models.JSONField(default=list, blank=True)
    videos = models.JSONField(default=list, blank=True)
    publish_date = models.DateTimeField(null=True, blank=True)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="articles"
    )
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["published", "-publish_date"], name="article_published_idx"),
            models.Index(fields=["category"], name="article_category_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.title

    @property
    def tags(self) -> list[str]:
        entries = sorted(self.tag_entries.all(), key=lambda entry: entry.position)
        return [entry.tag for entry in entries]

    def set_tags(self, tags: list[str]) -> None:
        """Replace the stored tags; the article must already be saved."""
        self.tag_entries.all().delete()
        ArticleTag.objects.bulk_create(
            [ArticleTag(article=self, tag=tag, position=index) for index, tag in enumerate(tags)]
        )
        # Drop any prefetched tags so ``tags`` reads the new rows.
        getattr(self, "_prefetched_objects_cache", {}).pop("tag_entries", None)

    @property
    def image_list(self) -> list[ImageDescriptor]:
        return [ImageDescriptor.from_dict(item) for item in self.images or []]

    @image_list.setter
    def image_list(self, value: list[ImageDescriptor]) -> None:
        self.images = [item.to_dict() for item in value]

    @property
    def video_list(self) -> list[VideoDescriptor]:
        return [VideoDescriptor.from_dict(item) for item in self.videos or []]

    @video_list.setter
    def video_list(self, value: list[VideoDescriptor]) -> None:
        self.videos = [item.to_dict() for item in value]


class ArticleTag(models.Model):
    """One tag label on an article, kept in the order it was given."""

    article = models.ForeignKey(Article, on_delete=models.CASCADE, related_name="tag_entries")
    tag = models.CharField(max_length=50)
    position = models.PositiveSmallIntegerField(default=0)

    class Meta:
        ordering = ["position"]
        constraints = [
            models.UniqueConstraint(fields=["article", "tag"], name="unique_article_tag"),
        ]
        indexes = [models.Index(fields=["tag"], name="article_tag_idx")]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.tag


__all__ = ["Article", "ArticleTag"]
