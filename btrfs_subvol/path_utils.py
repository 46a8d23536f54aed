"""Shared path helpers."""

from __future__ import annotations

import os
import shutil
from pathlib import Path

PARENT_DIR_MODE = 0o711


def ensure_sbin_on_path(path: str) -> str:
    parts = [entry for entry in path.split(os.pathsep) if entry]
    for entry in ("/usr/sbin", "/sbin"):
        if entry not in parts:
            parts.append(entry)
    return os.pathsep.join(parts)


def path_exists(path: Path) -> bool:
    """Return True if anything, including a dangling symlink, is at ``path``."""
    return os.path.lexists(path)


def path_is_empty(path: Path) -> bool:
    """Return True only for a readable directory without entries."""
    try:
        with os.scandir(path) as entries:
            for _entry in entries:
                return False
    except OSError:
        return False
    return True


def ensure_parent_dir(path: Path, mode: int = PARENT_DIR_MODE) -> None:
    parent = path.parent
    if not path_exists(parent):
        os.makedirs(parent, mode=mode)


def remove_path(path: Path) -> None:
    """Remove a file, symlink or empty directory."""
    if os.path.isdir(path) and not os.path.islink(path):
        os.rmdir(path)
    else:
        os.unlink(path)


def remove_tree(path: Path) -> None:
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
    elif path_exists(path):
        os.unlink(path)
