"""
Resolve a single archived file into a downloadable payload.
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from backup_archive.db import with_timeout
from backup_archive.dependencies import DbHandle

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class FileDownload:
    filename: str
    content: bytes
    content_type: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Content-Disposition": content_disposition(self.filename)}


def guess_content_type(filename: Optional[str]) -> str:
    if not filename:
        return DEFAULT_CONTENT_TYPE
    content_type, _ = mimetypes.guess_type(filename, strict=False)
    return content_type or DEFAULT_CONTENT_TYPE


def content_disposition(filename: str) -> str:
    # Header values must be latin-1; fall back to RFC 5987 for anything else.
    if filename.isascii() and filename.isprintable() and '"' not in filename:
        return f'attachment; filename="{filename}"'
    return f"attachment; filename*=utf-8''{quote(filename)}"


def decode_content(payload) -> bytes:
    """Turn a stored BSON binary payload into raw bytes."""
    if isinstance(payload, (bytes, bytearray, memoryview)):
        return bytes(payload)
    raise TypeError(f"unsupported content payload: {type(payload).__name__}")


async def resolve_download(
    handle: DbHandle,
    backup_id: str,
    relative_path: str,
    timeout: Optional[float] = None,
) -> Optional[FileDownload]:
    """
    Look up one non-chunked file and return its inline content.

    Returns None when no document matches or the document carries no inline
    content; chunked files are therefore reported exactly like missing ones.
    """
    db = handle.require()
    doc = await with_timeout(db.find_file(backup_id, relative_path), timeout)
    if not doc or doc.get("content") is None:
        return None

    filename = doc.get("filename") or relative_path.rsplit("/", 1)[-1]
    return FileDownload(
        filename=filename,
        content=decode_content(doc["content"]),
        content_type=guess_content_type(filename),
    )
