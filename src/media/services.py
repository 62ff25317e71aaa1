"""Media collaborator: validates uploads, stores them, renders image sizes.

Files go through Django's ``default_storage`` under
``<images|videos>/<asset_id>/``. Image renditions are produced with Pillow.
Failures of the storage backend or of image encoding surface as
:class:`UpstreamError` and are not retried.
"""

import io
import logging
import os
import re
import uuid

from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from PIL import Image, ImageOps

from articles.descriptors import ImageDescriptor, VideoDescriptor
from core.errors import NotFoundError, PayloadTooLargeError, UpstreamError, ValidationFailedError

logger = logging.getLogger(__name__)

MB = 1024 * 1024
MAX_IMAGE_SIZE = 10 * MB
MAX_VIDEO_SIZE = 100 * MB
MAX_IMAGES_PER_BATCH = 10

IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/avif": ".avif",
}
IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".avif"}

VIDEO_TYPES = {
    "video/mp4": "mp4",
    "video/quicktime": "mov",
    "video/mov": "mov",
    "video/x-msvideo": "avi",
    "video/avi": "avi",
    "video/x-matroska": "mkv",
    "video/mkv": "mkv",
    "video/webm": "webm",
}
VIDEO_EXTENSIONS = {".mp4", ".mov", ".avi", ".mkv", ".webm"}

# name -> (width, height, crop to fill)
IMAGE_SIZES = {
    "thumbnail": (300, 200, True),
    "medium": (800, 600, False),
    "large": (1200, 800, False),
}

RESOURCE_DIRS = {"image": "images", "video": "videos"}
ASSET_ID_RE = re.compile(r"^[0-9a-f]{32}$")


def _extension(upload) -> str:
    return os.path.splitext(upload.name or "")[1].lower()


def validate_image(upload) -> None:
    if upload is None:
        raise ValidationFailedError({"file": "File is required"})
    content_type = (getattr(upload, "content_type", "") or "").lower()
    if content_type not in IMAGE_TYPES and _extension(upload) not in IMAGE_EXTENSIONS:
        raise ValidationFailedError(
            {"file": "Invalid image type. Allowed: jpeg, jpg, png, webp, avif"}
        )
    if upload.size > MAX_IMAGE_SIZE:
        raise PayloadTooLargeError("Image size exceeds maximum allowed size of 10MB")


def validate_video(upload) -> None:
    if upload is None:
        raise ValidationFailedError({"file": "File is required"})
    content_type = (getattr(upload, "content_type", "") or "").lower()
    if content_type not in VIDEO_TYPES and _extension(upload) not in VIDEO_EXTENSIONS:
        raise ValidationFailedError(
            {"file": "Invalid video type. Allowed: mp4, mov, avi, mkv, webm"}
        )
    if upload.size > MAX_VIDEO_SIZE:
        raise PayloadTooLargeError("Video size exceeds maximum allowed size of 100MB")


def _render(image: Image.Image, width: int, height: int, fill: bool) -> tuple[bytes, str]:
    if fill:
        rendition = ImageOps.fit(image, (width, height), Image.Resampling.LANCZOS)
    else:
        rendition = image.copy()
        rendition.thumbnail((width, height), Image.Resampling.LANCZOS)

    has_alpha = rendition.mode in ("RGBA", "LA", "P")
    if has_alpha:
        rendition = rendition.convert("RGBA")
        fmt, ext = "PNG", ".png"
    else:
        rendition = rendition.convert("RGB")
        fmt, ext = "JPEG", ".jpg"

    buffer = io.BytesIO()
    rendition.save(buffer, format=fmt)
    return buffer.getvalue(), ext


class MediaService:
    """Store images and videos and describe them for articles."""

    def __init__(self, storage=None):
        self.storage = storage or default_storage

    def _save(self, path: str, content) -> str:
        try:
            name = self.storage.save(path, content)
            return self.storage.url(name)
        except OSError as exc:
            raise UpstreamError("Failed to store media file") from exc

    def upload_image(self, upload, caption: str | None = None, alt: str | None = None) -> ImageDescriptor:
        validate_image(upload)
        asset_id = uuid.uuid4().hex
        base = f"{RESOURCE_DIRS['image']}/{asset_id}"

        try:
            upload.seek(0)
            with Image.open(upload) as opened:
                opened.load()
                image = ImageOps.exif_transpose(opened)
        except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
            # Pillow reports truncated or malformed data with any of these.
            raise ValidationFailedError({"file": "File is not a readable image"}) from exc

        upload.seek(0)
        ext = _extension(upload) or IMAGE_TYPES.get(upload.content_type, ".img")
        original_url = self._save(f"{base}/original{ext}", upload)

        sizes = {}
        for name, (width, height, fill) in IMAGE_SIZES.items():
            try:
                data, rendition_ext = _render(image, width, height, fill)
            except (OSError, ValueError) as exc:
                raise UpstreamError("Failed to process image") from exc
            sizes[name] = self._save(f"{base}/{name}{rendition_ext}", ContentFile(data))
        sizes["original"] = original_url

        logger.info("media.image_uploaded asset_id=%s bytes=%s", asset_id, upload.size)
        return ImageDescriptor(
            id=asset_id, url=original_url, caption=caption or None, alt=alt or None, sizes=sizes
        )

    def upload_video(self, upload, caption: str | None = None) -> VideoDescriptor:
        validate_video(upload)
        asset_id = uuid.uuid4().hex
        ext = _extension(upload) or "." + VIDEO_TYPES.get(upload.content_type, "mp4")
        url = self._save(f"{RESOURCE_DIRS['video']}/{asset_id}/original{ext}", upload)

        logger.info("media.video_uploaded asset_id=%s bytes=%s", asset_id, upload.size)
        return VideoDescriptor(
            id=asset_id,
            url=url,
            caption=caption or None,
            thumbnail=None,
            duration=None,
            format=ext.lstrip("."),
        )

    def upload_images(self, uploads) -> list[ImageDescriptor]:
        """Upload a batch of images; every file is validated before any is stored."""
        uploads = list(uploads or [])
        if not uploads:
            raise ValidationFailedError({"files": "At least one file is required"})
        if len(uploads) > MAX_IMAGES_PER_BATCH:
            raise ValidationFailedError(
                {"files": f"Maximum {MAX_IMAGES_PER_BATCH} files allowed per upload"}
            )
        for upload in uploads:
            validate_image(upload)
        return [self.upload_image(upload) for upload in uploads]

    def delete(self, asset_id: str, resource_type: str = "image") -> bool:
        """Remove every stored file of an asset."""
        directory = RESOURCE_DIRS.get(resource_type)
        if directory is None:
            raise ValidationFailedError({"resource_type": "Must be 'image' or 'video'"})
        if not ASSET_ID_RE.match(asset_id or ""):
            raise NotFoundError(f"File not found: {asset_id}")

        path = f"{directory}/{asset_id}"
        try:
            _, files = self.storage.listdir(path)
        except FileNotFoundError:
            files = []
        except OSError as exc:
            raise UpstreamError("Failed to read media storage") from exc
        if not files:
            raise NotFoundError(f"File not found: {asset_id}")

        try:
            for name in files:
                self.storage.delete(f"{path}/{name}")
        except OSError as exc:
            raise UpstreamError("Failed to delete media file") from exc

        logger.info("media.deleted asset_id=%s resource_type=%s", asset_id, resource_type)
        return True


__all__ = ["MediaService", "validate_image", "validate_video"]
