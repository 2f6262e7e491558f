"""Tests for file identity extraction and rotation detection."""

from __future__ import annotations

import errno
import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from tailf.detector import is_inaccessible, rotation_reason
from tailf.errors import StatError, TailError, UnsupportedPlatformError
from tailf.identity import (
    PosixMetadataProvider,
    UnsupportedMetadataProvider,
    get_provider,
    identity_of_fd,
    identity_of_path,
)
from tailf.registry import PROVIDERS
from tailf.types import FileIdentity

POSIX_ONLY = unittest.skipUnless(os.name == "posix", "needs inode semantics")


def fake_stat(dev: int, ino: int, size: int) -> os.stat_result:
    # (mode, ino, dev, nlink, uid, gid, size, atime, mtime, ctime)
    return os.stat_result((0o100644, ino, dev, 1, 0, 0, size, 0, 0, 0))


class FixedProvider:
    """Provider returning canned identities, for detector tests."""

    def __init__(self, at_path: FileIdentity, tracked: FileIdentity):
        self.at_path = at_path
        self.tracked = tracked

    def identity_of_path(self, path):
        return self.at_path

    def identity_of_fd(self, fd):
        return self.tracked


class TestProviderRegistry(unittest.TestCase):

    def test_posix_registered(self):
        self.assertIs(PROVIDERS["posix"], PosixMetadataProvider)
        self.assertIsInstance(get_provider("posix"), PosixMetadataProvider)

    def test_unknown_platform_unsupported(self):
        provider = get_provider("nt")
        self.assertIsInstance(provider, UnsupportedMetadataProvider)
        with self.assertRaises(UnsupportedPlatformError):
            provider.identity_of_path("whatever")
        with self.assertRaises(UnsupportedPlatformError):
            provider.identity_of_fd(0)

    def test_unsupported_is_tail_error(self):
        self.assertTrue(issubclass(UnsupportedPlatformError, TailError))


@POSIX_ONLY
class TestPosixIdentity(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.path = os.path.join(self.tmpdir, "app.log")
        Path(self.path).write_bytes(b"hello")

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_identity_of_path_matches_stat(self):
        st = os.stat(self.path)
        ident = identity_of_path(self.path)
        self.assertEqual(ident, FileIdentity(st.st_dev, st.st_ino, 5))

    def test_path_and_fd_agree(self):
        with open(self.path, "rb") as f:
            self.assertEqual(identity_of_fd(f.fileno()), identity_of_path(self.path))

    def test_identity_is_frozen(self):
        ident = identity_of_path(self.path)
        with self.assertRaises(AttributeError):
            ident.size = 0

    def test_missing_path_raises_stat_error(self):
        missing = os.path.join(self.tmpdir, "nope.log")
        with self.assertRaises(StatError) as ctx:
            identity_of_path(missing)
        self.assertEqual(ctx.exception.errno, errno.ENOENT)
        self.assertEqual(ctx.exception.filename, missing)
        self.assertIsInstance(ctx.exception, OSError)
        self.assertIsInstance(ctx.exception.__cause__, FileNotFoundError)

    def test_bad_fd_raises_stat_error(self):
        with patch("tailf.identity.os.fstat", side_effect=OSError(errno.EBADF, "Bad file descriptor")):
            with self.assertRaises(StatError) as ctx:
                identity_of_fd(12345)
        self.assertEqual(ctx.exception.errno, errno.EBADF)

    def test_stat_without_inode_is_unsupported(self):
        with patch("tailf.identity.os.stat", return_value=fake_stat(0, 0, 10)):
            with self.assertRaises(UnsupportedPlatformError):
                identity_of_path(self.path)


class TestRotationDetector(unittest.TestCase):
    """Detector logic against canned identities."""

    def test_unchanged(self):
        ident = FileIdentity(1, 100, 50)
        provider = FixedProvider(ident, ident)
        self.assertIsNone(rotation_reason("p", 3, 50, provider))
        self.assertFalse(is_inaccessible("p", 3, 50, provider))

    def test_growth_is_not_rotation(self):
        provider = FixedProvider(FileIdentity(1, 100, 80), FileIdentity(1, 100, 80))
        self.assertIsNone(rotation_reason("p", 3, 50, provider))

    def test_device_changed(self):
        provider = FixedProvider(FileIdentity(2, 100, 50), FileIdentity(1, 100, 50))
        self.assertEqual(rotation_reason("p", 3, 0, provider), "device")
        self.assertTrue(is_inaccessible("p", 3, 0, provider))

    def test_inode_changed(self):
        provider = FixedProvider(FileIdentity(1, 101, 50), FileIdentity(1, 100, 50))
        self.assertEqual(rotation_reason("p", 3, 0, provider), "inode")

    def test_truncated(self):
        provider = FixedProvider(FileIdentity(1, 100, 10), FileIdentity(1, 100, 10))
        self.assertEqual(rotation_reason("p", 3, 11, provider), "truncated")

    def test_size_equal_to_position_is_fine(self):
        provider = FixedProvider(FileIdentity(1, 100, 11), FileIdentity(1, 100, 11))
        self.assertIsNone(rotation_reason("p", 3, 11, provider))


@POSIX_ONLY
class TestRotationDetectorOnDisk(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.path = os.path.join(self.tmpdir, "app.log")
        Path(self.path).write_bytes(b"0123456789")
        self.fp = open(self.path, "rb")

    def tearDown(self):
        self.fp.close()
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_same_file(self):
        self.assertFalse(is_inaccessible(self.path, self.fp.fileno(), 10))

    def test_replaced_file(self):
        os.replace(self.path, self.path + ".1")
        Path(self.path).write_bytes(b"new")
        self.assertEqual(rotation_reason(self.path, self.fp.fileno(), 0), "inode")

    def test_truncated_file(self):
        with open(self.path, "wb") as w:
            w.write(b"abc")
        self.assertEqual(rotation_reason(self.path, self.fp.fileno(), 10), "truncated")

    def test_missing_path_propagates(self):
        os.remove(self.path)
        with self.assertRaises(StatError):
            is_inaccessible(self.path, self.fp.fileno(), 0)


if __name__ == "__main__":
    unittest.main()
