"""Public photo bucket backed by a directory served as static files.

Objects are addressed as ``{user_id}/{timestamp}-{filename}`` inside a bucket,
and every stored object has a public URL under ``settings.PHOTO_PUBLIC_URL``.
"""
from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

from werkzeug.utils import secure_filename

from achievehub.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredPhoto:
    storage_path: str
    public_url: str


def object_path(user_id: int, filename: str, timestamp_ms: Optional[int] = None) -> str:
    """Build the ``{user_id}/{timestamp}-{filename}`` key for an upload."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    safe = secure_filename(filename or "") or uuid4().hex[:8]
    return f"{user_id}/{timestamp_ms}-{safe}"


class PhotoStorage:
    def __init__(self, root: Optional[str] = None, bucket: Optional[str] = None, public_base: Optional[str] = None):
        self.root = root or settings.PHOTO_STORAGE_DIR
        self.bucket = bucket or settings.PHOTO_BUCKET
        self.public_base = (public_base or settings.PHOTO_PUBLIC_URL).rstrip("/")

    @property
    def bucket_dir(self) -> str:
        return os.path.join(self.root, self.bucket)

    def _file_path(self, storage_path: str) -> str:
        full = os.path.abspath(os.path.join(self.bucket_dir, storage_path))
        if not full.startswith(os.path.abspath(self.bucket_dir) + os.sep):
            raise ValueError(f"Path escapes bucket: {storage_path}")
        return full

    def upload(self, storage_path: str, data: bytes) -> None:
        """Write an object; refuses to overwrite an existing key."""
        fp = self._file_path(storage_path)
        os.makedirs(os.path.dirname(fp), exist_ok=True)
        with open(fp, "xb") as f:
            f.write(data)
        logger.debug("Stored %s/%s (%d bytes)", self.bucket, storage_path, len(data))

    def get_public_url(self, storage_path: str) -> str:
        return f"{self.public_base}/{self.bucket}/{storage_path}"

    def store(self, user_id: int, filename: str, data: bytes, timestamp_ms: Optional[int] = None) -> StoredPhoto:
        if timestamp_ms is None:
            timestamp_ms = int(time.time() * 1000)
        # Same file name within the same millisecond: move to the next free timestamp
        for offset in range(10):
            path = object_path(user_id, filename, timestamp_ms + offset)
            try:
                self.upload(path, data)
            except FileExistsError:
                continue
            return StoredPhoto(storage_path=path, public_url=self.get_public_url(path))
        raise FileExistsError(f"No free key for {filename}")

    def exists(self, storage_path: str) -> bool:
        return os.path.isfile(self._file_path(storage_path))

    def remove(self, storage_path: str) -> None:
        """Delete a stored object; a missing object is not an error."""
        try:
            os.remove(self._file_path(storage_path))
        except FileNotFoundError:
            pass


def get_photo_storage() -> PhotoStorage:
    return PhotoStorage()
