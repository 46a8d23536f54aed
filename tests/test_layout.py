"""Snapshot path layout tests."""

from __future__ import annotations

import unittest
from pathlib import Path

from btrfs_subvol.layout import (
    StorageLayout,
    project_prefix,
    shadow_path,
    split_snapshot_name,
)


class LayoutTests(unittest.TestCase):
    def test_project_prefix(self) -> None:
        self.assertEqual(project_prefix("default", "c1"), "c1")
        self.assertEqual(project_prefix("web", "c1"), "web_c1")

    def test_split_snapshot_name(self) -> None:
        self.assertEqual(split_snapshot_name("c1/snap0"), ("c1", "snap0"))
        self.assertEqual(split_snapshot_name("c1"), ("c1", ""))

    def test_shadow_path(self) -> None:
        self.assertEqual(shadow_path(Path("/p/c1/snap0")), Path("/p/c1/snap0.ro"))

    def test_snapshot_paths_for_default_project(self) -> None:
        paths = StorageLayout(Path("/var/lib/lxd")).snapshot_paths(
            "default", "pool1", "c1/snap0"
        )
        base = Path("/var/lib/lxd/storage-pools/pool1/containers-snapshots")
        self.assertEqual(paths.mount_point, base / "c1" / "snap0")
        self.assertEqual(paths.shadow, base / "c1" / "snap0.ro")
        self.assertEqual(paths.parent_dir, base / "c1")
        self.assertEqual(paths.mount_symlink, Path("/var/lib/lxd/snapshots/c1/snap0"))
        self.assertEqual(paths.parent_symlink, Path("/var/lib/lxd/snapshots/c1"))

    def test_snapshot_paths_for_named_project(self) -> None:
        paths = StorageLayout(Path("/var/lib/lxd")).snapshot_paths(
            "web", "pool1", "c1/snap0"
        )
        self.assertEqual(
            paths.parent_dir,
            Path("/var/lib/lxd/storage-pools/pool1/containers-snapshots/web_c1"),
        )
        self.assertEqual(paths.parent_symlink, Path("/var/lib/lxd/snapshots/web_c1"))

    def test_rejects_instance_name(self) -> None:
        with self.assertRaises(ValueError):
            StorageLayout(Path("/var/lib/lxd")).snapshot_paths("default", "p", "c1")


if __name__ == "__main__":
    unittest.main()
