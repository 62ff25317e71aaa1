"""URL patterns for media uploads."""

from django.urls import path

from .views import ImageUploadView, MediaDeleteView, MultipleImageUploadView, VideoUploadView

urlpatterns = [
    path("image/", ImageUploadView.as_view(), name="upload-image"),
    path("video/", VideoUploadView.as_view(), name="upload-video"),
    path("images/", MultipleImageUploadView.as_view(), name="upload-images"),
    path("<str:asset_id>/", MediaDeleteView.as_view(), name="upload-delete"),
]
