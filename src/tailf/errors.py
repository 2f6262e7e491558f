"""Exceptions raised by tailf.

End-of-stream is never an exception here: reads return 0 / ``b""``.
"""

from __future__ import annotations


class TailError(Exception):
    """Base class for every error tailf raises itself."""


class OpenError(TailError, OSError):
    """The path could not be opened (or positioned) for reading."""


class StatError(TailError, OSError):
    """Metadata is unavailable for a path or an open descriptor."""


class UnsupportedPlatformError(TailError):
    """The platform's file metadata has no device/inode semantics."""


class Cancelled(TailError):
    """A blocking read was interrupted through the reader's cancel event."""


def wrap_os_error(cls: type, exc: OSError, filename=None) -> OSError:
    """Build ``cls`` carrying errno/strerror/filename from ``exc``."""
    if filename is None:
        filename = exc.filename
    if exc.errno is None:
        return cls(str(exc))
    return cls(exc.errno, exc.strerror, filename)
