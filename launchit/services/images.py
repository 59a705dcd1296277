"""Quality-preserving image re-encoding used before uploads."""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass

from PIL import Image, features

from launchit.core.config import settings

logger = logging.getLogger(__name__)

_LOSSLESS_TYPES = ("png", "webp")
_LOSSY_TYPES = ("jpeg", "jpg")


@dataclass(frozen=True)
class ImagePayload:
    data: bytes
    mime_type: str
    filename: str

    @property
    def size(self) -> int:
        return len(self.data)


def _webp_available() -> bool:
    try:
        return bool(features.check("webp"))
    except Exception:  # pragma: no cover - codec probing differs per build
        return False


def _redraw(image: Image.Image) -> Image.Image:
    """Paint the decoded image onto a fresh canvas of identical size."""

    mode = "RGBA" if ("A" in image.getbands() or "transparency" in image.info) else "RGB"
    canvas = Image.new(mode, image.size, (0, 0, 0, 0) if mode == "RGBA" else (0, 0, 0))
    source = image.convert(mode)
    canvas.paste(source, (0, 0), source if mode == "RGBA" else None)
    return canvas


def normalize_image(original: ImagePayload) -> ImagePayload:
    """Re-encode ``original`` at maximum quality without resizing.

    PNG and WebP inputs under the pass-through limit are returned untouched.
    JPEG inputs become WebP (PNG when the codec is missing), anything else
    becomes PNG. Any failure returns ``original``.
    """

    mime = (original.mime_type or "").lower()
    if original.size < settings.images.passthrough_max_bytes and any(
        kind in mime for kind in _LOSSLESS_TYPES
    ):
        return original

    try:
        with Image.open(io.BytesIO(original.data)) as decoded:
            decoded.load()
            canvas = _redraw(decoded)

        if any(kind in mime for kind in _LOSSY_TYPES) and _webp_available():
            output_format, output_mime = "WEBP", "image/webp"
            save_kwargs = {"quality": 100, "method": 6}
        else:
            output_format, output_mime = "PNG", "image/png"
            save_kwargs = {"optimize": False}

        buffer = io.BytesIO()
        canvas.save(buffer, format=output_format, **save_kwargs)
        data = buffer.getvalue()
    except Exception as exc:
        logger.warning(f"Image normalization failed for {original.filename}: {exc}")
        return original

    if not data:
        return original
    return ImagePayload(data=data, mime_type=output_mime, filename=original.filename)


def choose_upload_payload(original: ImagePayload, normalized: ImagePayload) -> ImagePayload:
    """Fall back to the original when re-encoding shrank it suspiciously."""

    if normalized.size < original.size * settings.images.min_size_ratio:
        logger.info(
            f"Normalized {original.filename} is {normalized.size} bytes "
            f"(original {original.size}); uploading original"
        )
        return original
    return normalized


def prepare_for_upload(original: ImagePayload) -> ImagePayload:
    return choose_upload_payload(original, normalize_image(original))
