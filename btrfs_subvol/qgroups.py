"""Quota group lookup and teardown."""

from __future__ import annotations

from pathlib import Path

from btrfs_subvol.runner import CommandError, CommandRunner


class QuotaGroupError(RuntimeError):
    """Raised when no quota group can be resolved for a subvolume."""


class QuotasDisabledError(QuotaGroupError):
    """Raised when the qgroup listing fails, usually with quotas off."""


class QuotaGroupNotFoundError(QuotaGroupError):
    """Raised when the listing holds no quota group row."""


def parse_qgroup_output(output: str) -> str:
    """Return the qgroup id from ``btrfs qgroup show -e -f`` output.

    The header, separator and blank lines are skipped. Rows must have
    exactly four columns; when several match, the last one wins.
    """
    qgroup = ""
    for line in output.split("\n"):
        if line == "" or line.startswith("qgroupid") or line.startswith("---"):
            continue
        fields = line.split()
        if len(fields) != 4:
            continue
        qgroup = fields[0]
    if not qgroup:
        raise QuotaGroupNotFoundError("unable to find quota group")
    return qgroup


def resolve_quota_group(runner: CommandRunner, path: Path) -> str:
    try:
        output = runner.run(["btrfs", "qgroup", "show", "-e", "-f", str(path)])
    except CommandError as exc:
        raise QuotasDisabledError("quotas disabled on filesystem") from exc
    return parse_qgroup_output(output)


def destroy_quota_group(runner: CommandRunner, qgroup: str, path: Path) -> None:
    runner.run(["btrfs", "qgroup", "destroy", qgroup, str(path)])


def clear_quota_group(runner: CommandRunner, path: Path) -> str | None:
    """Destroy the qgroup of ``path`` if it has one; return its id."""
    try:
        qgroup = resolve_quota_group(runner, path)
    except QuotaGroupError:
        return None
    destroy_quota_group(runner, qgroup, path)
    return qgroup
