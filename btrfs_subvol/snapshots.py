"""Snapshot creation and teardown for subvolume-backed pools."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from btrfs_subvol.environment import ExecutionEnvironment
from btrfs_subvol.layout import SnapshotPaths
from btrfs_subvol.path_utils import path_exists, remove_path
from btrfs_subvol.runner import CommandError, CommandRunner, best_effort
from btrfs_subvol.subvolumes import SubvolumeCreateError, SubvolumeManager


class SnapshotError(SubvolumeCreateError):
    """Raised when a snapshot cannot be created."""


@dataclass(frozen=True)
class Snapshot:
    source: Path
    path: Path
    readonly: bool


class SnapshotManager:
    def __init__(
        self,
        runner: CommandRunner,
        environment: ExecutionEnvironment,
        subvolumes: SubvolumeManager | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.runner = runner
        self.environment = environment
        self.logger = logger or logging.getLogger(__name__)
        self.subvolumes = subvolumes or SubvolumeManager(runner, self.logger)

    def create_snapshot(
        self, source: Path, dest: Path, readonly: bool = False
    ) -> Snapshot:
        # Unprivileged namespaces cannot set the ro flag, so fall back to
        # a writable snapshot there.
        readonly = readonly and not self.environment.restricted
        args = ["btrfs", "subvolume", "snapshot"]
        if readonly:
            args.append("-r")
        args.extend([str(source), str(dest)])
        try:
            self.runner.run(args)
        except CommandError as exc:
            raise SnapshotError(
                f"subvolume snapshot failed, source={source}, dest={dest}, "
                f"output={exc.output}"
            ) from exc
        self.logger.info(
            "event=snapshot_created source=%s path=%s readonly=%s",
            source,
            dest,
            readonly,
        )
        return Snapshot(source=source, path=dest, readonly=readonly)

    def delete_snapshot(self, paths: SnapshotPaths) -> None:
        """Delete a snapshot, its ro shadow and any now-empty bookkeeping."""
        self.subvolumes.delete_subvolume_tree_if_exists(
            paths.mount_point, paths.shadow
        )

        best_effort(remove_path, paths.mount_symlink)
        best_effort(remove_path, paths.mount_point)

        best_effort(remove_path, paths.parent_dir)
        if not path_exists(paths.parent_dir):
            best_effort(remove_path, paths.parent_symlink)
        self.logger.info(
            "event=snapshot_deleted path=%s", paths.mount_point
        )
