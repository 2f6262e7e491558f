"""File identity extraction.

A provider turns a path or an open descriptor into a ``FileIdentity``
(device id, inode, size). Only POSIX-like platforms have a registered
provider; everything else gets one that refuses with
``UnsupportedPlatformError``.
"""

from __future__ import annotations

import os
from typing import Protocol

from .errors import StatError, UnsupportedPlatformError, wrap_os_error
from .registry import PROVIDERS, metadata_provider
from .types import FileIdentity


class FileMetadataProvider(Protocol):
    def identity_of_path(self, path: str) -> FileIdentity: ...

    def identity_of_fd(self, fd: int) -> FileIdentity: ...


def _to_identity(st: os.stat_result) -> FileIdentity:
    dev = getattr(st, "st_dev", 0)
    ino = getattr(st, "st_ino", 0)
    if not dev and not ino:
        raise UnsupportedPlatformError("stat result has no device/inode fields")
    return FileIdentity(device_id=int(dev), inode=int(ino), size=int(st.st_size))


@metadata_provider("posix")
class PosixMetadataProvider:
    """Identity from ``os.stat`` / ``os.fstat``."""

    def identity_of_path(self, path: str) -> FileIdentity:
        try:
            st = os.stat(path)
        except OSError as exc:
            raise wrap_os_error(StatError, exc, path) from exc
        return _to_identity(st)

    def identity_of_fd(self, fd: int) -> FileIdentity:
        try:
            st = os.fstat(fd)
        except OSError as exc:
            raise wrap_os_error(StatError, exc, f"<fd {fd}>") from exc
        return _to_identity(st)


class UnsupportedMetadataProvider:
    """Provider for platforms without inode semantics."""

    def __init__(self, platform: str = os.name):
        self.platform = platform

    def identity_of_path(self, path: str) -> FileIdentity:
        raise UnsupportedPlatformError(f"no file identity support on {self.platform!r}")

    def identity_of_fd(self, fd: int) -> FileIdentity:
        raise UnsupportedPlatformError(f"no file identity support on {self.platform!r}")


def get_provider(platform: str | None = None) -> FileMetadataProvider:
    """Return a provider for ``platform`` (default: ``os.name``)."""
    platform = platform or os.name
    cls = PROVIDERS.get(platform)
    if cls is None:
        return UnsupportedMetadataProvider(platform)
    return cls()


def identity_of_path(path: str, provider: FileMetadataProvider | None = None) -> FileIdentity:
    return (provider or get_provider()).identity_of_path(path)


def identity_of_fd(fd: int, provider: FileMetadataProvider | None = None) -> FileIdentity:
    return (provider or get_provider()).identity_of_fd(fd)
