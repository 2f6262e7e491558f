"""Core data types for tailf."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class FollowMode(enum.IntEnum):
    """What a reader does when it hits end-of-stream."""

    DISABLED = 0  # return immediately, like a plain file
    DESCRIPTOR = 1  # keep polling the same open handle
    NAME = 2  # keep polling, reopen the path when it changes identity


@dataclass(frozen=True)
class FileIdentity:
    """Fingerprint of an on-disk file taken from a single stat call."""

    device_id: int
    inode: int
    size: int
