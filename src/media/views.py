"""Upload endpoints for article images and videos."""

from rest_framework import status
from rest_framework.parsers import FormParser, MultiPartParser

from access_control.permissions import CapabilityPermission
from access_control.policy import Capability
from core.response import BaseAPIView, api_response
from .services import MediaService


class MediaView(BaseAPIView):
    permission_classes = [CapabilityPermission]
    required_capabilities = {"*": Capability.CREATE_CONTENT}
    parser_classes = [MultiPartParser, FormParser]

    @property
    def media(self) -> MediaService:
        return MediaService()


class ImageUploadView(MediaView):
    def post(self, request):
        """Upload one image and return its descriptor with derived sizes."""
        descriptor = self.media.upload_image(
            request.FILES.get("file"),
            caption=request.data.get("caption"),
            alt=request.data.get("alt"),
        )
        return api_response(descriptor.to_dict(), status=status.HTTP_201_CREATED)


class VideoUploadView(MediaView):
    def post(self, request):
        descriptor = self.media.upload_video(
            request.FILES.get("file"), caption=request.data.get("caption")
        )
        return api_response(descriptor.to_dict(), status=status.HTTP_201_CREATED)


class MultipleImageUploadView(MediaView):
    def post(self, request):
        """Upload up to ten images sent as repeated ``files`` parts."""
        descriptors = self.media.upload_images(request.FILES.getlist("files"))
        return api_response([item.to_dict() for item in descriptors], status=status.HTTP_201_CREATED)


class MediaDeleteView(MediaView):
    def delete(self, request, asset_id):
        resource_type = request.query_params.get("resource_type", "image")
        deleted = self.media.delete(asset_id, resource_type)
        return api_response({"deleted": deleted, "id": asset_id})


__all__ = ["ImageUploadView", "VideoUploadView", "MultipleImageUploadView", "MediaDeleteView"]
