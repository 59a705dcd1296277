"""Uploading form images to object storage at publish time."""
from __future__ import annotations

import logging
import time
from typing import Optional

import httpx

from launchit.core.exceptions import StorageError
from launchit.schemas.submission import ImageRef, LocalImage, RemoteImage
from launchit.services.gateway import ObjectStorage
from launchit.services.images import ImagePayload, prepare_for_upload
from launchit.services.validators import random_suffix, sanitize_file_name

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "image/png": "png",
    "image/webp": "webp",
    "image/jpeg": "jpg",
    "image/gif": "gif",
    "image/svg+xml": "svg",
    "image/x-icon": "ico",
    "image/vnd.microsoft.icon": "ico",
}


def _timestamp() -> int:
    return int(time.time() * 1000)


class MediaUploader:
    """Turns :data:`ImageRef` values into hosted public URLs."""

    def __init__(
        self,
        storage: ObjectStorage,
        http_client: httpx.AsyncClient,
        fetch_timeout: float = 15.0,
    ) -> None:
        self._storage = storage
        self._http = http_client
        self._fetch_timeout = fetch_timeout

    async def resolve(self, ref: Optional[ImageRef], kind: str) -> Optional[str]:
        if ref is None:
            return None
        if isinstance(ref, LocalImage):
            return await self.upload_local(ref, kind)
        return await self.rehost_remote(ref, kind)

    async def upload_local(self, image: LocalImage, kind: str) -> str:
        """Upload a user file; storage errors propagate and abort the publish."""

        original = ImagePayload(
            data=image.data, mime_type=image.mime_type, filename=image.filename
        )
        payload = prepare_for_upload(original)
        path = f"{_timestamp()}-{kind}-{sanitize_file_name(image.filename)}"
        try:
            return await self._storage.upload(path, payload.data, payload.mime_type)
        except StorageError:
            if payload is original:
                raise
            logger.warning(f"Upload of normalized {kind} failed, retrying with original")
            return await self._storage.upload(path, original.data, original.mime_type)

    async def rehost_remote(self, image: RemoteImage, kind: str) -> str:
        """Copy a foreign image into our bucket, keeping the URL on failure."""

        if self._storage.is_hosted(image.url):
            return image.url
        try:
            response = await self._http.get(
                image.url, timeout=self._fetch_timeout, follow_redirects=True
            )
            response.raise_for_status()
            mime = response.headers.get("content-type", "image/png").split(";")[0].strip()
            payload = prepare_for_upload(
                ImagePayload(
                    data=response.content,
                    mime_type=mime or "image/png",
                    filename=f"ai-generated-{kind}.png",
                )
            )
            extension = _EXTENSIONS.get(payload.mime_type, "png")
            path = f"{_timestamp()}-ai-{kind}-{random_suffix()}.{extension}"
            return await self._storage.upload(path, payload.data, payload.mime_type)
        except (httpx.HTTPError, httpx.InvalidURL, StorageError) as exc:
            logger.warning(f"Could not re-host {kind} from {image.url}: {exc}")
            return image.url
