"""Upload endpoint tests against a temporary MEDIA_ROOT."""

from __future__ import annotations

import io
import shutil
import tempfile
from unittest import mock

from django.core.files.storage import FileSystemStorage
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import override_settings
from PIL import Image

from core.errors import UpstreamError
from media.services import MediaService
from tests.utils import ContentApiTestCase, auth_client, create_user


def png_upload(name: str = "herd.png", size=(640, 480)) -> SimpleUploadedFile:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(120, 160, 80)).save(buffer, format="PNG")
    return SimpleUploadedFile(name, buffer.getvalue(), content_type="image/png")


class MediaTestCase(ContentApiTestCase):
    def setUp(self):
        super().setUp()
        media_root = tempfile.mkdtemp(prefix="wildlife-media-")
        self.addCleanup(shutil.rmtree, media_root, ignore_errors=True)
        override = override_settings(MEDIA_ROOT=media_root, MEDIA_URL="/media/")
        override.enable()
        self.addCleanup(override.disable)

        self.contributor = create_user("ranger@example.com")
        self.uploader = auth_client(self.contributor)


class ImageUploadTests(MediaTestCase):
    def test_upload_returns_descriptor_with_sizes(self):
        response = self.uploader.post(
            "/upload/image/",
            {"file": png_upload(), "caption": "Herd at dawn", "alt": "Elephants"},
            format="multipart",
        )
        self.assertEqual(response.status_code, 201, response.content)

        data = response.json()["data"]
        self.assertEqual(len(data["id"]), 32)
        self.assertTrue(data["url"].startswith(f"/media/images/{data['id']}/original"))
        self.assertEqual(set(data["sizes"]), {"thumbnail", "medium", "large", "original"})
        self.assertEqual(data["caption"], "Herd at dawn")
        self.assertEqual(data["alt"], "Elephants")

    def test_thumbnail_is_cropped_to_fill(self):
        descriptor = MediaService().upload_image(png_upload(size=(900, 300)))
        storage = FileSystemStorage()
        thumbnail_name = descriptor.sizes["thumbnail"].replace("/media/", "", 1)
        with storage.open(thumbnail_name) as handle, Image.open(handle) as thumbnail:
            self.assertEqual(thumbnail.size, (300, 200))

    def test_upload_requires_content_capability(self):
        response = self.api_client.post("/upload/image/", {"file": png_upload()}, format="multipart")
        self.assertEqual(response.status_code, 401)

    def test_wrong_type_is_rejected(self):
        upload = SimpleUploadedFile("notes.txt", b"hello", content_type="text/plain")
        response = self.uploader.post("/upload/image/", {"file": upload}, format="multipart")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["errors"][0]["field"], "file")

    def test_unreadable_image_is_rejected(self):
        upload = SimpleUploadedFile("broken.png", b"not really a png", content_type="image/png")
        response = self.uploader.post("/upload/image/", {"file": upload}, format="multipart")
        self.assertEqual(response.status_code, 400)

    def test_truncated_image_is_rejected(self):
        buffer = io.BytesIO()
        Image.new("RGB", (320, 240), color=(30, 90, 140)).save(buffer, format="JPEG")
        upload = SimpleUploadedFile("cut.jpg", buffer.getvalue()[:200], content_type="image/jpeg")
        response = self.uploader.post("/upload/image/", {"file": upload}, format="multipart")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["errors"][0]["field"], "file")

    def test_missing_file(self):
        response = self.uploader.post("/upload/image/", {}, format="multipart")
        self.assertEqual(response.status_code, 400)

    def test_oversized_image(self):
        with mock.patch("media.services.MAX_IMAGE_SIZE", 10):
            response = self.uploader.post("/upload/image/", {"file": png_upload()}, format="multipart")
        self.assertEqual(response.status_code, 413)

    def test_storage_failure_is_upstream_error(self):
        with mock.patch.object(FileSystemStorage, "save", side_effect=OSError("disk full")):
            response = self.uploader.post(
                "/upload/image/",
                {"file": png_upload()},
                format="multipart",
                HTTP_X_CORRELATION_ID="req-media-1",
            )
        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json()["errors"][0]["correlation_id"], "req-media-1")

    def test_service_wraps_storage_errors(self):
        storage = mock.Mock()
        storage.save.side_effect = OSError("disk full")
        with self.assertRaises(UpstreamError):
            MediaService(storage=storage).upload_video(
                SimpleUploadedFile("clip.mp4", b"\x00" * 16, content_type="video/mp4")
            )


class BatchAndVideoUploadTests(MediaTestCase):
    def test_multiple_images(self):
        response = self.uploader.post(
            "/upload/images/",
            {"files": [png_upload("a.png"), png_upload("b.png")]},
            format="multipart",
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(len(response.json()["data"]), 2)

    def test_batch_is_validated_before_storing(self):
        bad = SimpleUploadedFile("notes.txt", b"hello", content_type="text/plain")
        with mock.patch.object(MediaService, "upload_image") as upload_image:
            response = self.uploader.post(
                "/upload/images/", {"files": [png_upload(), bad]}, format="multipart"
            )
        self.assertEqual(response.status_code, 400)
        upload_image.assert_not_called()

    def test_too_many_images(self):
        with mock.patch("media.services.MAX_IMAGES_PER_BATCH", 1):
            response = self.uploader.post(
                "/upload/images/",
                {"files": [png_upload("a.png"), png_upload("b.png")]},
                format="multipart",
            )
        self.assertEqual(response.status_code, 400)

    def test_video_upload(self):
        upload = SimpleUploadedFile("clip.mp4", b"\x00" * 64, content_type="video/mp4")
        response = self.uploader.post("/upload/video/", {"file": upload}, format="multipart")
        self.assertEqual(response.status_code, 201)
        data = response.json()["data"]
        self.assertEqual(data["format"], "mp4")
        self.assertIsNone(data["duration"])


class MediaDeleteTests(MediaTestCase):
    def test_delete_removes_all_renditions(self):
        asset_id = self.uploader.post(
            "/upload/image/", {"file": png_upload()}, format="multipart"
        ).json()["data"]["id"]

        response = self.uploader.delete(f"/upload/{asset_id}/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"], {"deleted": True, "id": asset_id})

        self.assertEqual(self.uploader.delete(f"/upload/{asset_id}/").status_code, 404)

    def test_delete_unknown_asset(self):
        self.assertEqual(self.uploader.delete("/upload/" + "0" * 32 + "/").status_code, 404)
        self.assertEqual(self.uploader.delete("/upload/not-an-id/").status_code, 404)
