"""Package entrypoint."""

from __future__ import annotations

from btrfs_subvol.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
