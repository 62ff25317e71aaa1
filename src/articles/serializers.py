"""Serializers for article payloads.

Write serializers only check JSON types; length rules and tag normalization
live in ``articles.services`` so they apply to every caller.
"""

from rest_framework import serializers

from .models import Article


class ArticleWriteSerializer(serializers.Serializer):
    """Incoming create/update fields; absent or null means "no change"."""

    title = serializers.CharField(required=False, allow_null=True, allow_blank=True, trim_whitespace=False)
    excerpt = serializers.CharField(required=False, allow_null=True, allow_blank=True, trim_whitespace=False)
    content = serializers.CharField(required=False, allow_null=True, allow_blank=True, trim_whitespace=False)
    category = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    published = serializers.BooleanField(required=False, allow_null=True)
    featured = serializers.BooleanField(required=False, allow_null=True)
    tags = serializers.ListField(child=serializers.CharField(allow_blank=True, trim_whitespace=False), required=False, allow_null=True)
    images = serializers.ListField(child=serializers.DictField(), required=False, allow_null=True)
    videos = serializers.ListField(child=serializers.DictField(), required=False, allow_null=True)


class ArticleSerializer(serializers.ModelSerializer):
    """Public projection of an article."""

    author_id = serializers.IntegerField(source="owner_id", read_only=True)
    author_name = serializers.CharField(source="owner.name", read_only=True)
    tags = serializers.ListField(child=serializers.CharField(), read_only=True)
    images = serializers.SerializerMethodField()
    videos = serializers.SerializerMethodField()

    class Meta:
        """Everything is read-only; writes go through ArticleWriteSerializer."""
        model = Article
        fields = [
            "id",
            "title",
            "excerpt",
            "content",
            "category",
            "published",
            "featured",
            "views",
            "tags",
            "images",
            "videos",
            "publish_date",
            "author_id",
            "author_name",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_images(self, obj) -> list[dict]:
        return [item.to_dict() for item in obj.image_list]

    def get_videos(self, obj) -> list[dict]:
        return [item.to_dict() for item in obj.video_list]


__all__ = ["ArticleSerializer", "ArticleWriteSerializer"]
