import io

import httpx
import pytest
from PIL import Image

from launchit.schemas.submission import LocalImage, RemoteImage
from launchit.services.media import MediaUploader
from conftest import FakeStorage, encode_image


class FlakyStorage(FakeStorage):
    """Rejects the first upload only."""

    def __init__(self) -> None:
        super().__init__()
        self.attempts = 0

    async def upload(self, path, data, content_type):
        self.attempts += 1
        if self.attempts == 1:
            self.fail = True
        try:
            return await super().upload(path, data, content_type)
        finally:
            self.fail = False


def remote_client(content: bytes, content_type: str = "image/png") -> httpx.AsyncClient:
    return httpx.AsyncClient(
        transport=httpx.MockTransport(
            lambda request: httpx.Response(200, content=content, headers={"content-type": content_type})
        )
    )


@pytest.mark.asyncio
async def test_local_upload_uses_sanitized_path(storage, http_client, image_bytes):
    uploader = MediaUploader(storage, http_client)
    image = LocalImage(data=image_bytes(), filename="My Logo.PNG", mime_type="image/png")

    url = await uploader.resolve(image, "logo")

    path, content_type, _ = storage.uploads[0]
    assert path.endswith("-logo-my-logo.png")
    assert content_type == "image/png"
    assert url == storage.public_url(path)


@pytest.mark.asyncio
async def test_normalized_upload_failure_retries_with_original(http_client, image_bytes, monkeypatch):
    from launchit.services import images

    monkeypatch.setattr(images, "_webp_available", lambda: False)
    storage = FlakyStorage()
    uploader = MediaUploader(storage, http_client)
    buffer = io.BytesIO()
    Image.effect_noise((64, 64), 120).convert("RGB").save(buffer, format="JPEG", quality=50)
    original = buffer.getvalue()

    await uploader.upload_local(LocalImage(data=original, filename="a.jpg", mime_type="image/jpeg"), "cover-0")

    assert storage.attempts == 2
    _, content_type, data = storage.uploads[0]
    assert content_type == "image/jpeg"
    assert data == original


@pytest.mark.asyncio
async def test_hosted_remote_images_are_kept(storage, http_client):
    uploader = MediaUploader(storage, http_client)
    hosted = storage.public_url("123-logo.png")

    assert await uploader.resolve(RemoteImage(url=hosted), "logo") == hosted
    assert storage.uploads == []


@pytest.mark.asyncio
async def test_foreign_remote_image_is_rehosted(storage):
    async with remote_client(encode_image()) as client:
        uploader = MediaUploader(storage, client)
        url = await uploader.resolve(RemoteImage(url="https://acme.io/logo.png"), "logo")

    path, content_type, _ = storage.uploads[0]
    assert "-ai-logo-" in path
    assert path.endswith(".png")
    assert content_type == "image/png"
    assert url == storage.public_url(path)


@pytest.mark.asyncio
async def test_rehost_failure_keeps_remote_url(http_client):
    storage = FakeStorage()
    uploader = MediaUploader(storage, http_client)

    url = await uploader.resolve(RemoteImage(url="https://acme.io/missing.png"), "thumbnail")

    assert url == "https://acme.io/missing.png"


@pytest.mark.asyncio
async def test_malformed_remote_url_is_kept(storage, http_client):
    uploader = MediaUploader(storage, http_client)

    url = await uploader.resolve(RemoteImage(url="http://[::1/logo.png"), "logo")

    assert url == "http://[::1/logo.png"
    assert storage.uploads == []


@pytest.mark.asyncio
async def test_empty_slot_resolves_to_none(storage, http_client):
    assert await MediaUploader(storage, http_client).resolve(None, "logo") is None
