"""On-disk naming of instance snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DEFAULT_PROJECT = "default"
SHADOW_SUFFIX = ".ro"


@dataclass(frozen=True)
class SnapshotPaths:
    """Everything snapshot teardown touches, resolved to absolute paths."""

    mount_point: Path
    shadow: Path
    mount_symlink: Path
    parent_dir: Path
    parent_symlink: Path


class StorageLayout:
    def __init__(self, var_dir: Path) -> None:
        self.var_dir = var_dir

    def snapshot_mount_point(self, project: str, pool: str, name: str) -> Path:
        return (
            self.var_dir
            / "storage-pools"
            / pool
            / "containers-snapshots"
            / project_prefix(project, name)
        )

    def snapshot_symlink(self, project: str, name: str) -> Path:
        return self.var_dir / "snapshots" / project_prefix(project, name)

    def snapshot_paths(
        self, project: str, pool: str, snapshot_name: str
    ) -> SnapshotPaths:
        instance, snapshot = split_snapshot_name(snapshot_name)
        if not snapshot:
            raise ValueError(f"not a snapshot name: {snapshot_name}")
        mount_point = self.snapshot_mount_point(project, pool, snapshot_name)
        return SnapshotPaths(
            mount_point=mount_point,
            shadow=shadow_path(mount_point),
            mount_symlink=self.snapshot_symlink(project, snapshot_name),
            parent_dir=self.snapshot_mount_point(project, pool, instance),
            parent_symlink=self.snapshot_symlink(project, instance),
        )


def project_prefix(project: str, name: str) -> str:
    if project == DEFAULT_PROJECT:
        return name
    return f"{project}_{name}"


def split_snapshot_name(name: str) -> tuple[str, str]:
    instance, _, snapshot = name.partition("/")
    return instance, snapshot


def shadow_path(mount_point: Path) -> Path:
    return mount_point.with_name(mount_point.name + SHADOW_SUFFIX)
