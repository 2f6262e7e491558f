"""Rotation detection.

Compares what is at a path right now against what an open descriptor points
at. Three independent checks, any one of which means the reader must reopen:

  device     the path now resolves on another filesystem
  inode      the path now names a different object (rename, delete+recreate)
  truncated  the file at the path is smaller than what was already consumed

Stat failures are not swallowed; they abort the caller's read.
"""

from __future__ import annotations

import logging

from .identity import FileMetadataProvider, get_provider

logger = logging.getLogger(__name__)


def rotation_reason(
    path: str,
    fd: int,
    last_position: int,
    provider: FileMetadataProvider | None = None,
) -> str | None:
    """Return why ``fd`` no longer tracks ``path``, or None if it still does."""
    provider = provider or get_provider()
    at_path = provider.identity_of_path(path)
    tracked = provider.identity_of_fd(fd)

    reason = None
    if at_path.device_id != tracked.device_id:
        reason = "device"
    elif at_path.inode != tracked.inode:
        reason = "inode"
    elif at_path.size < last_position:
        reason = "truncated"

    logger.debug(
        "rotation check %s: path=%s tracked=%s pos=%d -> %s",
        path, at_path, tracked, last_position, reason or "unchanged",
    )
    return reason


def is_inaccessible(
    path: str,
    fd: int,
    last_position: int,
    provider: FileMetadataProvider | None = None,
) -> bool:
    """True if the file behind ``fd`` is no longer the file at ``path``."""
    return rotation_reason(path, fd, last_position, provider) is not None
