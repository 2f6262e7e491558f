"""tailf: polling ``tail -f`` / ``tail -F`` file readers."""

from .detector import is_inaccessible, rotation_reason
from .errors import Cancelled, OpenError, StatError, TailError, UnsupportedPlatformError
from .identity import (
    FileMetadataProvider,
    PosixMetadataProvider,
    UnsupportedMetadataProvider,
    get_provider,
    identity_of_fd,
    identity_of_path,
)
from .reader import (
    DEFAULT_POLL_INTERVAL,
    ROTATION_CHECK_THRESHOLD,
    TailReader,
    open_tail,
    open_tail_by_descriptor,
    open_tail_by_name,
)
from .types import FileIdentity, FollowMode

__version__ = "0.1.0"

__all__ = [
    "Cancelled",
    "DEFAULT_POLL_INTERVAL",
    "FileIdentity",
    "FileMetadataProvider",
    "FollowMode",
    "OpenError",
    "PosixMetadataProvider",
    "ROTATION_CHECK_THRESHOLD",
    "StatError",
    "TailError",
    "TailReader",
    "UnsupportedMetadataProvider",
    "UnsupportedPlatformError",
    "get_provider",
    "identity_of_fd",
    "identity_of_path",
    "is_inaccessible",
    "open_tail",
    "open_tail_by_descriptor",
    "open_tail_by_name",
    "rotation_reason",
]
