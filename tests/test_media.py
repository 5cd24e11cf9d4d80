"""Tests for the Cloudinary photo uploader (SDK and Telegram calls are faked)."""

from types import SimpleNamespace

import cloudinary.uploader
import pytest

from app.errors import UploadError
from config.settings import Settings
from infrastructure.media import CloudinaryUploader


class FakeBot:
    token = "123:abc"

    async def get_file(self, file_id):
        return SimpleNamespace(file_path=f"photos/{file_id}.jpg")


@pytest.fixture
def uploader():
    settings = Settings(
        cloudinary_cloud_name="demo",
        cloudinary_api_key="key",
        cloudinary_api_secret="secret",
        cloudinary_folder="test-folder",
    )
    return CloudinaryUploader(FakeBot(), settings)


class TestCloudinaryUploader:

    @pytest.mark.asyncio
    async def test_uploads_telegram_file_url(self, uploader, monkeypatch):
        calls = []

        def fake_upload(source, **options):
            calls.append((source, options))
            return {"secure_url": "https://res.cloudinary.com/demo/x.jpg"}

        monkeypatch.setattr(cloudinary.uploader, "upload", fake_upload)

        url = await uploader.upload_photo("file-1")

        assert url == "https://res.cloudinary.com/demo/x.jpg"
        source, options = calls[0]
        assert source == "https://api.telegram.org/file/bot123:abc/photos/file-1.jpg"
        assert options["folder"] == "test-folder"

    @pytest.mark.asyncio
    async def test_sdk_error_becomes_upload_error(self, uploader, monkeypatch):
        def fake_upload(source, **options):
            raise RuntimeError("quota exceeded")

        monkeypatch.setattr(cloudinary.uploader, "upload", fake_upload)

        with pytest.raises(UploadError):
            await uploader.upload_photo("file-1")

    @pytest.mark.asyncio
    async def test_missing_url_is_an_error(self, uploader, monkeypatch):
        monkeypatch.setattr(cloudinary.uploader, "upload", lambda source, **options: {})

        with pytest.raises(UploadError):
            await uploader.upload_photo("file-1")
