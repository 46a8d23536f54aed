"""Execution environment capabilities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

UID_MAP_PATH = Path("/proc/self/uid_map")
_IDENTITY_UID_MAP = ["0", "0", "4294967295"]


@dataclass(frozen=True)
class ExecutionEnvironment:
    # True inside an unprivileged user namespace, where read-only
    # snapshots cannot be created.
    restricted: bool = False


def detect_environment(uid_map_path: Path = UID_MAP_PATH) -> ExecutionEnvironment:
    return ExecutionEnvironment(restricted=running_in_user_namespace(uid_map_path))


def running_in_user_namespace(uid_map_path: Path = UID_MAP_PATH) -> bool:
    try:
        content = uid_map_path.read_text()
    except OSError:
        return False
    lines = [line.split() for line in content.splitlines() if line.strip()]
    return lines != [_IDENTITY_UID_MAP]
