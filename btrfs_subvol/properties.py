"""Read-only property handling."""

from __future__ import annotations

from pathlib import Path

from btrfs_subvol.runner import CommandError, CommandRunner


def is_read_only(runner: CommandRunner, path: Path) -> bool:
    """Return True only when the tool confirms ``ro=true``."""
    try:
        output = runner.run(["btrfs", "property", "get", "-ts", str(path)])
    except CommandError:
        return False
    return output.startswith("ro=true")


def set_read_only(runner: CommandRunner, path: Path, value: bool) -> None:
    runner.run(
        [
            "btrfs",
            "property",
            "set",
            "-ts",
            str(path),
            "ro",
            "true" if value else "false",
        ]
    )


def make_read_only(runner: CommandRunner, path: Path) -> None:
    set_read_only(runner, path, True)


def make_writable(runner: CommandRunner, path: Path) -> None:
    set_read_only(runner, path, False)
