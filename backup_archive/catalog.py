"""
Backup and file catalog readers.
"""

from __future__ import annotations

import re
from typing import Optional

from backup_archive.db import BACKUP_FIELDS, DOWNLOAD_FIELDS, FILE_FIELDS, with_timeout
from backup_archive.dependencies import DbHandle

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_limit(raw: Optional[str], default: int, maximum: Optional[int] = None) -> int:
    """
    Parse a `limit` query value the lenient way: the leading integer wins
    ("10abc" -> 10). Absent, non-numeric, zero and negative values fall back
    to `default`; anything above `maximum` is clamped.
    """
    if raw is None:
        return default
    match = _LEADING_INT.match(str(raw))
    if not match:
        return default
    value = int(match.group(1))
    if value <= 0:
        return default
    if maximum is not None and value > maximum:
        return maximum
    return value


async def list_backups(
    handle: DbHandle, limit: int, timeout: Optional[float] = None
) -> dict:
    db = handle.require()
    backups = await with_timeout(db.find_backups(BACKUP_FIELDS, limit), timeout)
    return {"success": True, "count": len(backups), "backups": backups}


async def list_downloadable(
    handle: DbHandle, limit: int, timeout: Optional[float] = None
) -> dict:
    """Lighter variant of `list_backups` without sizes, for download pickers."""
    db = handle.require()
    backups = await with_timeout(db.find_backups(DOWNLOAD_FIELDS, limit), timeout)
    return {"success": True, "count": len(backups), "backups": backups}


async def list_files(
    handle: DbHandle, backup_id: str, limit: int, timeout: Optional[float] = None
) -> dict:
    # The backup id is not checked against the backup catalog; unknown ids
    # produce an empty listing.
    db = handle.require()
    files = await with_timeout(db.find_files(backup_id, FILE_FIELDS, limit), timeout)
    return {
        "success": True,
        "backup_id": backup_id,
        "count": len(files),
        "files": files,
    }
