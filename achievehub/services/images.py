from __future__ import annotations
import io
from typing import Iterable, Optional

from PIL import Image, UnidentifiedImageError

from achievehub.config import settings

CONTENT_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "webp": "image/webp",
    "gif": "image/gif",
}


def extension(filename: str) -> str:
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()


def allowed_image(filename: str, exts: Optional[Iterable[str]] = None) -> bool:
    """Check extension against settings.ALLOWED_IMAGE_EXTS."""
    ext = extension(filename)
    return bool(ext) and ext in set(exts or settings.ALLOWED_IMAGE_EXTS)


def open_image(file_or_stream) -> Image.Image:
    """Load an image or raise ValueError."""
    try:
        img = Image.open(file_or_stream)
        img.load()
        return img
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise ValueError("Invalid image") from e


def check_image_bytes(data: bytes) -> str:
    """Make sure the bytes decode as an image; returns the detected format name (e.g. "PNG")."""
    img = open_image(io.BytesIO(data))
    return (img.format or "").upper()


def content_type_for(filename: str) -> str:
    return CONTENT_TYPES.get(extension(filename), "application/octet-stream")
