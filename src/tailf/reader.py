"""Tail reader: a byte stream that waits at end-of-file.

``TailReader`` reads like a plain unbuffered binary file until it runs out of
data. What happens then depends on its follow mode:

  DISABLED    return 0 (end-of-stream) straight away
  DESCRIPTOR  sleep, read the same descriptor again, forever
  NAME        sleep and read again; every few polls compare the path with the
              open descriptor and reopen the path if it was rotated or
              truncated

Reads block the calling thread. Nothing here is thread-safe except
``cancel()``, which wakes a waiting read and makes it raise ``Cancelled``.
"""

from __future__ import annotations

import io
import logging
import os
import threading

from .detector import rotation_reason
from .errors import Cancelled, OpenError, wrap_os_error
from .identity import FileMetadataProvider, get_provider
from .types import FollowMode

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 1.0  # seconds
ROTATION_CHECK_THRESHOLD = 4  # empty polls before the path is re-checked


def _open_raw(path: str):
    try:
        return open(path, "rb", buffering=0)
    except OSError as exc:
        raise wrap_os_error(OpenError, exc, path) from exc


class TailReader(io.RawIOBase):
    """Raw binary stream over a tailed file.

    Build one with ``open_tail``, ``open_tail_by_descriptor`` or
    ``open_tail_by_name`` rather than directly. Wrap it in
    ``io.BufferedReader`` / ``io.TextIOWrapper`` for line-oriented reading.
    Note that ``read()`` with no size (``readall``) never returns on a
    following reader unless it is cancelled.
    """

    def __init__(
        self,
        fp,
        follow: FollowMode = FollowMode.DISABLED,
        name_pattern: str | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        position: int = 0,
        cancel_event: threading.Event | None = None,
        provider: FileMetadataProvider | None = None,
    ):
        super().__init__()
        self._fp = fp
        self._follow = FollowMode.DISABLED
        self._name_pattern: str | None = None
        self._poll_interval = DEFAULT_POLL_INTERVAL
        self._position = position
        self._not_changed = 0
        self._cancel = cancel_event if cancel_event is not None else threading.Event()
        self._provider = provider or get_provider()
        try:
            self.reconfigure(follow=follow, name_pattern=name_pattern, poll_interval=poll_interval)
        except ValueError:
            fp.close()
            raise

    # ─── Configuration ───────────────────────────────────────────────────────

    @property
    def follow(self) -> FollowMode:
        return self._follow

    @property
    def name_pattern(self) -> str | None:
        return self._name_pattern

    @property
    def poll_interval(self) -> float:
        return self._poll_interval

    @property
    def position(self) -> int:
        """Bytes consumed from the current handle (plus the starting offset)."""
        return self._position

    @property
    def name(self) -> str:
        return self._fp.name

    def reconfigure(
        self,
        follow: FollowMode | int | None = None,
        name_pattern: str | os.PathLike | None = None,
        poll_interval: float | None = None,
    ) -> None:
        """Change follow settings. Must not run concurrently with a read.

        Omitted arguments keep their current value. NAME mode needs a name
        pattern. Resets the rotation-check counter.
        """
        follow = self._follow if follow is None else FollowMode(follow)
        if name_pattern is not None:
            name_pattern = os.fspath(name_pattern)
        else:
            name_pattern = self._name_pattern
        poll_interval = self._poll_interval if poll_interval is None else float(poll_interval)

        if poll_interval < 0:
            raise ValueError(f"poll_interval must be >= 0, got {poll_interval}")
        if follow is FollowMode.NAME and not name_pattern:
            raise ValueError("FollowMode.NAME requires a name_pattern")

        self._follow = follow
        self._name_pattern = name_pattern
        self._poll_interval = poll_interval
        self._not_changed = 0

    # ─── Cancellation ────────────────────────────────────────────────────────

    @property
    def cancel_event(self) -> threading.Event:
        return self._cancel

    def cancel(self) -> None:
        """Interrupt a blocked read. Safe to call from any thread."""
        self._cancel.set()

    def _wait(self) -> None:
        if self._cancel.wait(self._poll_interval):
            raise Cancelled(f"tail of {self.name} cancelled")

    # ─── Rotation ────────────────────────────────────────────────────────────

    def _watched_path(self) -> str:
        return self._name_pattern or self.name

    def is_inaccessible(self) -> bool:
        """True if the watched path no longer names the file being read."""
        return self._rotation_reason() is not None

    def _rotation_reason(self) -> str | None:
        return rotation_reason(
            self._watched_path(), self._fp.fileno(), self._position, self._provider,
        )

    def reopen(self) -> None:
        """Swap the handle for a fresh one at the watched path.

        Consumption restarts at byte 0 of whatever file is there now. If the
        open fails the old handle stays in place and OpenError is raised.
        """
        path = self._watched_path()
        new_fp = _open_raw(path)
        old_fp, self._fp = self._fp, new_fp
        try:
            old_fp.close()
        except OSError as exc:
            logger.warning("Failed to close stale handle for %s: %s", path, exc)
        self._position = 0
        self._not_changed = 0

    # ─── Reading ─────────────────────────────────────────────────────────────

    def readable(self) -> bool:
        return True

    def fileno(self) -> int:
        return self._fp.fileno()

    def readinto(self, b) -> int:
        if self.closed:
            raise ValueError("I/O operation on closed file")
        if memoryview(b).nbytes == 0:
            return 0

        while True:
            n = self._fp.readinto(b) or 0
            self._position += n
            if n:
                return n
            if self._follow is FollowMode.DISABLED:
                return 0

            self._wait()
            if self._follow is FollowMode.DESCRIPTOR:
                continue

            self._not_changed += 1
            if self._not_changed <= ROTATION_CHECK_THRESHOLD:
                continue
            self._not_changed = 0

            reason = self._rotation_reason()
            if reason:
                logger.info("%s rotated (%s), reopening", self._watched_path(), reason)
                self.reopen()

    def close(self) -> None:
        if not self.closed:
            try:
                self._fp.close()
            finally:
                super().close()

    def __repr__(self) -> str:
        return (
            f"<TailReader name={self.name!r} follow={self._follow.name} "
            f"position={self._position}>"
        )


# ─── Constructors ────────────────────────────────────────────────────────────

def _open_at_end(
    path,
    follow: FollowMode,
    poll_interval: float,
    cancel_event: threading.Event | None,
    provider: FileMetadataProvider | None,
) -> TailReader:
    path = os.fspath(path)
    fp = _open_raw(path)
    try:
        end = fp.seek(0, os.SEEK_END)
    except OSError as exc:
        fp.close()
        raise wrap_os_error(OpenError, exc, path) from exc
    logger.debug("Opened %s at offset %d (%s)", path, end, follow.name)
    return TailReader(
        fp,
        follow=follow,
        name_pattern=path if follow is FollowMode.NAME else None,
        poll_interval=poll_interval,
        position=end,
        cancel_event=cancel_event,
        provider=provider,
    )


def open_tail(
    path,
    *,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    cancel_event: threading.Event | None = None,
    provider: FileMetadataProvider | None = None,
) -> TailReader:
    """Open ``path`` at its end, without following."""
    return _open_at_end(path, FollowMode.DISABLED, poll_interval, cancel_event, provider)


def open_tail_by_descriptor(
    path,
    *,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    cancel_event: threading.Event | None = None,
    provider: FileMetadataProvider | None = None,
) -> TailReader:
    """Open ``path`` at its end and follow the open descriptor (``tail -f``)."""
    return _open_at_end(path, FollowMode.DESCRIPTOR, poll_interval, cancel_event, provider)


def open_tail_by_name(
    path,
    *,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    cancel_event: threading.Event | None = None,
    provider: FileMetadataProvider | None = None,
) -> TailReader:
    """Open ``path`` at its end and follow the name across rotation (``tail -F``)."""
    return _open_at_end(path, FollowMode.NAME, poll_interval, cancel_event, provider)
