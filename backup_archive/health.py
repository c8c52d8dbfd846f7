"""
Database reachability reporting for the health endpoint.
"""

from __future__ import annotations

import logging
from typing import Literal, Optional

from backup_archive.db import with_timeout
from backup_archive.dependencies import DbHandle

logger = logging.getLogger(__name__)

DatabaseState = Literal["connected", "disconnected", "error"]


async def check_database(
    handle: DbHandle, timeout: Optional[float] = None
) -> DatabaseState:
    """Ping the store. Never raises; failures are reported as a state."""
    if not handle.available:
        return "disconnected"
    try:
        await with_timeout(handle.require().ping(), timeout)
    except Exception as exc:
        logger.warning("Database ping failed: %s", exc)
        return "error"
    return "connected"
