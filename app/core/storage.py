from __future__ import annotations

"""
KinoAdmin • Upload storage
==========================

Local-disk layout (served read-only by the app under `UPLOAD_URL_PREFIX`):

    {UPLOAD_DIR}/
      {uuid-hex}.{ext}        posters and movie files, flat

Stored names are generated, never taken from the client, so two uploads of
`movie.mp4` never collide and a crafted filename cannot escape the directory.
The catalog service writes through `LocalUploadStorage` and stores only the
resulting `StoredFile.url`.
"""

import logging
import re
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import anyio
from fastapi import UploadFile

from app.core.config import settings
from app.core.exceptions import InvalidInput

logger = logging.getLogger("storage")

CHUNK_SIZE = 1024 * 1024  # 1 MiB

# Common MIME→ext mapping used when the client filename has no usable suffix
_EXT_MAP = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "video/mp4": "mp4",
    "video/mpeg": "mpg",
    "video/webm": "webm",
    "video/quicktime": "mov",
    "video/x-matroska": "mkv",
}

_SAFE_EXT_RE = re.compile(r"^[a-z0-9]{1,8}$")


@dataclass(frozen=True)
class StoredFile:
    """A file already durably written to upload storage."""
    filename: str
    path: Path
    size_bytes: int
    content_type: Optional[str] = None

    @property
    def url(self) -> str:
        return f"{settings.UPLOAD_URL_PREFIX}/{self.filename}"


def _ext_for(upload: UploadFile) -> str:
    """Extension from the client filename when sane, else from the content type; fallback `bin`."""
    suffix = Path(upload.filename or "").suffix.lower().lstrip(".")
    if suffix and _SAFE_EXT_RE.match(suffix):
        return suffix
    return _EXT_MAP.get((upload.content_type or "").lower(), "bin")


async def save_upload(
    upload: Optional[UploadFile],
    *,
    max_bytes: int,
    allowed_types: Tuple[str, ...] = (),
) -> Optional[StoredFile]:
    """Stream an `UploadFile` to disk. Returns None when nothing was uploaded.

    `allowed_types` are content-type prefixes (e.g. `("image/",)`); empty means any.
    Raises `InvalidInput` for a disallowed type or an oversized file (the
    partial file is removed).
    """
    if upload is None or not (upload.filename or "").strip():
        return None

    content_type = (upload.content_type or "").lower()
    if allowed_types and not content_type.startswith(allowed_types):
        raise InvalidInput(f"Unsupported file type '{content_type or 'unknown'}'")

    upload_dir = Path(settings.UPLOAD_DIR)
    await anyio.Path(upload_dir).mkdir(parents=True, exist_ok=True)
    filename = f"{uuid.uuid4().hex}.{_ext_for(upload)}"
    path = upload_dir / filename

    size = 0
    try:
        async with await anyio.open_file(path, "wb") as out:
            while chunk := await upload.read(CHUNK_SIZE):
                size += len(chunk)
                if size > max_bytes:
                    raise InvalidInput(f"File exceeds the {max_bytes} byte limit")
                await out.write(chunk)
    except BaseException:
        await anyio.Path(path).unlink(missing_ok=True)
        raise

    logger.info(f"Stored upload {filename} ({size} bytes)")
    return StoredFile(filename=filename, path=path, size_bytes=size, content_type=content_type or None)


async def discard(stored: Optional[StoredFile]) -> None:
    """Best-effort removal of a stored file the request ended up not using."""
    if stored is None:
        return
    try:
        await anyio.Path(stored.path).unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Could not remove orphaned upload {stored.filename}: {e}")


class LocalUploadStorage:
    """`save_upload`/`discard` bound to per-kind limits; what the catalog service writes through."""

    poster_types: Tuple[str, ...] = ("image/",)
    video_types: Tuple[str, ...] = ("video/", "application/octet-stream")

    async def save_poster(self, upload: Optional[UploadFile]) -> Optional[StoredFile]:
        return await save_upload(upload, max_bytes=settings.MAX_POSTER_BYTES, allowed_types=self.poster_types)

    async def save_video(self, upload: Optional[UploadFile]) -> Optional[StoredFile]:
        return await save_upload(upload, max_bytes=settings.MAX_VIDEO_BYTES, allowed_types=self.video_types)

    async def discard(self, stored: Optional[StoredFile]) -> None:
        await discard(stored)


__all__ = ["StoredFile", "LocalUploadStorage", "save_upload", "discard"]
