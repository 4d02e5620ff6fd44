"""Image normalisation helpers for item photos."""

from __future__ import annotations

import base64
import binascii
import logging
import re
from io import BytesIO

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

_DATA_URL_META = re.compile(r"data:(.*?);base64")


def data_url_to_bytes(data_url: str) -> tuple[bytes, str]:
    """Decode a base64 data URL into ``(bytes, mime_type)``."""

    meta, _, encoded = data_url.partition(",")
    match = _DATA_URL_META.match(meta)
    mime = match.group(1) if match and match.group(1) else "image/jpeg"
    try:
        return base64.b64decode(encoded), mime
    except (ValueError, binascii.Error) as exc:
        raise ValueError("Image data is not valid base64.") from exc


def bytes_to_data_url(data: bytes, mime: str = "image/jpeg") -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def guess_extension(data_url: str) -> str:
    if "image/png" in data_url:
        return "png"
    if "image/webp" in data_url:
        return "webp"
    return "jpg"


class ImageNormalizer:
    """Downscales photos before upload or analysis."""

    def __init__(self, max_side: int = 1200, quality: int = 82) -> None:
        self._max_side = max_side
        self._quality = quality

    def resize(self, image_bytes: bytes) -> bytes:
        """Return JPEG bytes whose longest side is at most ``max_side``."""

        with Image.open(BytesIO(image_bytes)) as img:
            ratio = min(1.0, self._max_side / max(img.width, img.height))
            width = max(1, round(img.width * ratio))
            height = max(1, round(img.height * ratio))
            resized = img.convert("RGB").resize((width, height))
            buffer = BytesIO()
            resized.save(buffer, format="JPEG", quality=self._quality)
        return buffer.getvalue()

    def resize_data_url(self, data_url: str) -> str:
        """Resize a data URL, returning the input unchanged if it cannot be decoded."""

        try:
            raw, _ = data_url_to_bytes(data_url)
            return bytes_to_data_url(self.resize(raw), "image/jpeg")
        except (ValueError, UnidentifiedImageError, OSError) as exc:
            logger.warning("Could not resize image, sending original: %s", exc)
            return data_url
