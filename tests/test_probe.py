"""Subvolume probe tests."""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from types import SimpleNamespace
from unittest import mock

from btrfs_subvol.probe import FIRST_FREE_OBJECTID, is_subvolume


class ProbeTests(unittest.TestCase):
    def test_missing_path_is_not_subvolume(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            self.assertFalse(is_subvolume(Path(temp_dir) / "missing"))

    def test_plain_file_is_not_subvolume(self) -> None:
        with tempfile.NamedTemporaryFile() as handle:
            self.assertFalse(is_subvolume(handle.name))

    def test_first_free_objectid_marks_subvolume(self) -> None:
        stat = SimpleNamespace(st_ino=FIRST_FREE_OBJECTID)
        with mock.patch("btrfs_subvol.probe.os.lstat", return_value=stat) as lstat:
            self.assertTrue(is_subvolume("/srv/pool/vol"))
        lstat.assert_called_once_with("/srv/pool/vol")

    def test_other_inode_is_not_subvolume(self) -> None:
        stat = SimpleNamespace(st_ino=257)
        with mock.patch("btrfs_subvol.probe.os.lstat", return_value=stat):
            self.assertFalse(is_subvolume("/srv/pool/vol/dir"))

    def test_unreadable_metadata_is_not_subvolume(self) -> None:
        with mock.patch(
            "btrfs_subvol.probe.os.lstat", side_effect=PermissionError("denied")
        ):
            self.assertFalse(is_subvolume("/srv/pool/vol"))

    def test_symlink_is_not_followed(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            link = Path(temp_dir) / "link"
            os.symlink(temp_dir, link)
            with mock.patch(
                "btrfs_subvol.probe.os.lstat", wraps=os.lstat
            ) as lstat:
                is_subvolume(link)
            lstat.assert_called_once_with(link)


if __name__ == "__main__":
    unittest.main()
