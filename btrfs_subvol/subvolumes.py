"""Subvolume creation, discovery and recursive teardown."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator

from btrfs_subvol.path_utils import ensure_parent_dir, path_exists
from btrfs_subvol.probe import is_subvolume
from btrfs_subvol.properties import make_writable
from btrfs_subvol.qgroups import clear_quota_group
from btrfs_subvol.runner import CommandError, CommandRunner, best_effort


class SubvolumeError(RuntimeError):
    """Raised on subvolume management errors."""


class SubvolumeCreateError(SubvolumeError):
    """Raised when a subvolume or snapshot cannot be created."""


class SubvolumeDeleteError(SubvolumeError):
    """Raised when deleting a subvolume fails."""

    def __init__(self, path: Path, output: str) -> None:
        self.path = path
        self.output = output
        super().__init__(f"failed to delete subvolume {path}: {output}")


class SubvolumeManager:
    def __init__(
        self,
        runner: CommandRunner,
        logger: logging.Logger | None = None,
    ) -> None:
        self.runner = runner
        self.logger = logger or logging.getLogger(__name__)

    def create_subvolume(self, path: Path) -> Path:
        try:
            ensure_parent_dir(path)
        except OSError as exc:
            raise SubvolumeCreateError(
                f"failed to create parent of {path}: {exc}"
            ) from exc
        try:
            self.runner.run(["btrfs", "subvolume", "create", str(path)])
        except CommandError as exc:
            self.logger.error(
                "event=subvolume_create_failed path=%s error=%s", path, exc
            )
            raise SubvolumeCreateError(
                f"failed to create subvolume {path}: {exc.output}"
            ) from exc
        self.logger.info("event=subvolume_created path=%s", path)
        return path

    def delete_subvolume(self, path: Path) -> None:
        """Delete a single subvolume, clearing its qgroup and ro flag first."""
        best_effort(clear_quota_group, self.runner, path)
        best_effort(make_writable, self.runner, path)
        try:
            self.runner.run(["btrfs", "subvolume", "delete", str(path)])
        except CommandError as exc:
            self.logger.error(
                "event=subvolume_delete_failed path=%s error=%s", path, exc
            )
            raise SubvolumeDeleteError(path, exc.output) from exc
        self.logger.debug("event=subvolume_deleted path=%s", path)

    def delete_subvolume_tree(self, root: Path) -> None:
        """Delete ``root`` and every subvolume nested below it, deepest first."""
        # A root that is not itself a subvolume (gone, plain dir, symlink)
        # leaves everything below it untouched.
        if not is_subvolume(root):
            self.logger.info(
                "event=subvolume_tree_skipped path=%s reason=not_subvolume", root
            )
            return
        nested = deletion_order(list_nested_subvolumes(root))
        for relative in nested:
            self.delete_subvolume(root / relative)
        self.delete_subvolume(root)
        self.logger.info(
            "event=subvolume_tree_deleted path=%s nested=%d", root, len(nested)
        )

    def delete_subvolume_tree_if_exists(self, *paths: Path) -> list[Path]:
        deleted: list[Path] = []
        for path in paths:
            if path_exists(path) and is_subvolume(path):
                self.delete_subvolume_tree(path)
                deleted.append(path)
        return deleted


def list_nested_subvolumes(root: Path) -> list[str]:
    """Return subvolumes below ``root`` as relative paths, in walk order."""
    result: list[str] = []
    for directory in _walk_directories(str(root)):
        if is_subvolume(directory):
            result.append(os.path.relpath(directory, root))
    return result


def deletion_order(paths: Iterable[str]) -> list[str]:
    # A child's relative path extends its parent's with a separator, so
    # descending order always puts children before their parents.
    return sorted(paths, reverse=True)


def _walk_directories(top: str) -> Iterator[str]:
    """Pre-order, name-sorted walk of real directories below ``top``."""
    stack = [top]
    while stack:
        current = stack.pop()
        if current != top:
            yield current
        try:
            with os.scandir(current) as entries:
                children = sorted(entries, key=lambda entry: entry.name)
        except OSError:
            continue
        directories: list[str] = []
        for entry in children:
            try:
                if entry.is_dir(follow_symlinks=False):
                    directories.append(entry.path)
            except OSError:
                continue
        stack.extend(reversed(directories))
