"""Snapshot teardown for plain directory pools."""

from __future__ import annotations

import logging
from pathlib import Path

from btrfs_subvol.layout import SnapshotPaths
from btrfs_subvol.path_utils import path_exists, path_is_empty, remove_path, remove_tree


class SnapshotDeleteError(RuntimeError):
    """Raised when a directory snapshot cannot be removed."""


class DirSnapshotCleaner:
    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger(__name__)

    def delete_snapshot(self, paths: SnapshotPaths) -> None:
        if path_exists(paths.mount_point):
            _remove(remove_tree, paths.mount_point)

        if not path_is_empty(paths.parent_dir):
            self.logger.debug(
                "event=snapshot_parent_kept path=%s", paths.parent_dir
            )
            return

        _remove(remove_path, paths.parent_dir)
        if path_exists(paths.parent_symlink):
            _remove(remove_path, paths.parent_symlink)
        self.logger.info(
            "event=snapshot_parent_removed path=%s", paths.parent_dir
        )


def _remove(func, path: Path) -> None:
    try:
        func(path)
    except OSError as exc:
        raise SnapshotDeleteError(f"failed to remove {path}: {exc}") from exc
