"""Encoded image payloads: upload validation, data URIs and PNG export."""

import base64
import binascii
from dataclasses import dataclass
from io import BytesIO
from typing import Optional

from loguru import logger
from PIL import Image

import settings

SUPPORTED_MIME_TYPES = {"image/jpeg", "image/png", "image/webp"}
DEFAULT_MIME_TYPE = "image/png"
FALLBACK_PRESET_ID = "professional"


class InvalidImage(ValueError):
    pass


@dataclass(frozen=True)
class ImagePayload:
    data: bytes
    mime_type: str = DEFAULT_MIME_TYPE

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("utf-8")

    def to_data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.to_base64()}"

    @classmethod
    def from_data_uri(cls, uri: str) -> "ImagePayload":
        header, sep, encoded = uri.partition(",")
        if not sep or not header.startswith("data:") or not header.endswith(";base64"):
            raise InvalidImage("Not a base64 data URI.")
        mime_type = header[len("data:"):-len(";base64")] or DEFAULT_MIME_TYPE
        try:
            data = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise InvalidImage("Data URI payload is not valid base64.") from exc
        if not data:
            raise InvalidImage("Data URI payload is empty.")
        return cls(data=data, mime_type=mime_type)


def load_upload(
    data: bytes,
    content_type: Optional[str] = None,
    *,
    max_mb: Optional[float] = None,
) -> ImagePayload:
    """Validate uploaded bytes and wrap them in an :class:`ImagePayload`.

    The MIME type is taken from the decoded image, not from ``content_type``;
    browsers and the camera widget do not always report it correctly.
    """
    if not data:
        raise InvalidImage("The uploaded file is empty.")

    limit = settings.MAX_UPLOAD_MB if max_mb is None else max_mb
    size_mb = len(data) / (1024 * 1024)
    if size_mb > limit:
        logger.warning("Upload rejected; size={:.2f} MB exceeds limit {} MB", size_mb, limit)
        raise InvalidImage(f"Image exceeds the {limit:g} MB limit.")

    try:
        with Image.open(BytesIO(data)) as image:
            image.load()
            detected = Image.MIME.get(image.format or "")
            logger.debug(
                "Validated upload; format={}, mode={}, size={}x{}",
                image.format,
                image.mode,
                image.size[0],
                image.size[1],
            )
    except Exception as exc:  # noqa: BLE001
        logger.warning("Failed to decode uploaded image (declared type {}): {}", content_type, exc)
        raise InvalidImage("The uploaded file is not a valid image.") from exc

    if detected not in SUPPORTED_MIME_TYPES:
        logger.warning("Unsupported image format {} (declared type {})", detected, content_type)
        raise InvalidImage("Only PNG, JPG and WEBP images are supported.")

    if content_type and content_type != detected:
        logger.debug("Declared content type {} differs from detected {}", content_type, detected)

    return ImagePayload(data=data, mime_type=detected)


def to_png(payload: ImagePayload) -> bytes:
    if payload.mime_type == "image/png":
        return payload.data

    with Image.open(BytesIO(payload.data)) as image:
        if image.mode not in ("RGB", "RGBA", "L", "LA", "P"):
            image = image.convert("RGB")
        buffer = BytesIO()
        image.save(buffer, format="PNG")
    logger.debug("Re-encoded {} image as PNG; size={} bytes", payload.mime_type, buffer.tell())
    return buffer.getvalue()


def download_filename(preset_id: Optional[str]) -> str:
    return f"headshot-{preset_id or FALLBACK_PRESET_ID}.png"
