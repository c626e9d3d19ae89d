"""Compression d'images (Pillow) et décodage des data-URL envoyées par le front."""

from __future__ import annotations

import base64
import binascii
import io
import logging
import re
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

_DATA_URL = re.compile(r"^data:image/(?P<kind>[a-zA-Z0-9.+-]+);base64,", re.IGNORECASE)
SUPPORTED_MIME_TYPES = ("image/png", "image/jpeg", "image/webp")
_PIL_FORMATS = {"image/png": "PNG", "image/jpeg": "JPEG", "image/webp": "WEBP"}


class ImageDecodeError(ValueError):
    """Raised when an uploaded image payload cannot be decoded."""


@dataclass(frozen=True)
class ImagePayload:
    data: bytes
    mime_type: str

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")


def detect_mime_type(payload: str, default: str = "image/jpeg") -> str:
    """Type MIME déclaré par le préfixe data-URL (``jpg`` normalisé en ``jpeg``)."""
    match = _DATA_URL.match(payload or "")
    if not match:
        return default
    kind = match.group("kind").lower()
    if kind == "jpg":
        kind = "jpeg"
    mime = f"image/{kind}"
    return mime if mime in SUPPORTED_MIME_TYPES else default


def strip_data_url(payload: str) -> str:
    return _DATA_URL.sub("", (payload or "").strip(), count=1)


def decode_data_url(payload: str) -> ImagePayload:
    """Décode une image base64, avec ou sans préfixe ``data:image/...;base64,``."""
    mime = detect_mime_type(payload)
    raw = strip_data_url(payload)
    try:
        data = base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ImageDecodeError("Image base64 invalide") from exc
    if not data:
        raise ImageDecodeError("Image vide")
    return ImagePayload(data=data, mime_type=mime)


def compress_image(
    data: bytes,
    *,
    max_width: int = 1200,
    max_height: int = 1200,
    quality: int = 80,
    max_size_mb: float = 2,
    mime_type: str = "image/jpeg",
) -> ImagePayload:
    """Redimensionne (ratio conservé) puis ré-encode ; seconde passe à qualité -20 si trop lourd."""
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageDecodeError("Format d'image non reconnu") from exc

    width, height = image.size
    if width > max_width or height > max_height:
        ratio = min(max_width / width, max_height / height)
        image = image.resize((max(1, int(width * ratio)), max(1, int(height * ratio))), Image.LANCZOS)

    fmt = _PIL_FORMATS.get(mime_type, "JPEG")
    if fmt == "JPEG" and image.mode not in {"RGB", "L"}:
        image = image.convert("RGB")

    def _encode(q: int) -> bytes:
        buffer = io.BytesIO()
        if fmt == "PNG":
            image.save(buffer, format=fmt, optimize=True)
        else:
            image.save(buffer, format=fmt, quality=q, optimize=True)
        return buffer.getvalue()

    encoded = _encode(quality)
    if len(encoded) > max_size_mb * 1024 * 1024:
        logger.info("Image encore trop lourde (%s octets), nouvelle passe", len(encoded))
        encoded = _encode(max(10, quality - 20))
    return ImagePayload(data=encoded, mime_type=f"image/{fmt.lower()}")
