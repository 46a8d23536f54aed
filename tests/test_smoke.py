"""Package import and entrypoint checks."""

from __future__ import annotations

import io
import unittest
from contextlib import redirect_stdout

import btrfs_subvol
from btrfs_subvol import cli


class PackageTests(unittest.TestCase):
    def test_version_is_set(self) -> None:
        self.assertRegex(btrfs_subvol.__version__, r"^\d+\.\d+\.\d+$")

    def test_bare_invocation_lists_commands(self) -> None:
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            self.assertEqual(cli.main([]), 0)
        usage = buffer.getvalue()
        for command in ("create", "snapshot", "delete", "snapshot-delete"):
            self.assertIn(command, usage)


if __name__ == "__main__":
    unittest.main()
