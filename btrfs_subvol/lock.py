"""Per-target lock files holding the owner's pid."""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from pathlib import Path


class LockError(RuntimeError):
    """Raised when a target is locked by a live process."""


def lock_path_for(lock_dir: Path, target: Path) -> Path:
    """Map a target path to its lock file, one lock per resolved target."""
    resolved = os.path.abspath(target)
    digest = hashlib.sha256(resolved.encode("utf-8")).hexdigest()[:16]
    return lock_dir / f"{digest}.lock"


@dataclass
class LockFile:
    path: Path
    pid: int | None = None

    @property
    def held(self) -> bool:
        return self.pid is not None

    def acquire(self) -> "LockFile":
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self._create():
            owner = lock_owner(self.path)
            if process_alive(owner):
                raise LockError(f"{self.path} held by pid {owner}")
            # Left behind by a dead process; one retry after clearing it.
            try:
                self.path.unlink(missing_ok=True)
            except OSError as exc:
                raise LockError(f"cannot clear stale lock {self.path}: {exc}") from exc
            if not self._create():
                raise LockError(
                    f"{self.path} held by pid {lock_owner(self.path) or 'unknown'}"
                )
        self.pid = os.getpid()
        return self

    def release(self) -> None:
        if not self.held:
            return
        self.pid = None
        self.path.unlink(missing_ok=True)

    def _create(self) -> bool:
        try:
            fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            return False
        with os.fdopen(fd, "w") as handle:
            handle.write(f"{os.getpid()}\n")
        return True

    def __enter__(self) -> "LockFile":
        return self.acquire()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


def lock_owner(path: Path) -> int | None:
    """Return the pid recorded in ``path``, or None if unreadable."""
    try:
        return int(path.read_text().strip())
    except (OSError, ValueError):
        return None


def process_alive(pid: int | None) -> bool:
    if pid is None or pid <= 0:
        return False
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        pass
    return True
