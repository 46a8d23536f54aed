"""Subvolume root detection."""

from __future__ import annotations

import os
from pathlib import Path

# BTRFS_FIRST_FREE_OBJECTID: inode number of every subvolume root directory.
FIRST_FREE_OBJECTID = 256


def is_subvolume(path: Path | str) -> bool:
    try:
        stat = os.lstat(path)
    except OSError:
        return False
    return stat.st_ino == FIRST_FREE_OBJECTID
