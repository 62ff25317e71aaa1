"""App configuration for media uploads."""

from django.apps import AppConfig


class MediaConfig(AppConfig):
    """Media app stores uploaded images and videos for articles."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "media"
