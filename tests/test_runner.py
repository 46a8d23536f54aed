"""Command runner tests."""

from __future__ import annotations

import subprocess
import unittest
from unittest import mock

from btrfs_subvol.runner import CommandError, ShellRunner, best_effort


class ShellRunnerTests(unittest.TestCase):
    def test_returns_stdout_and_extends_path(self) -> None:
        completed = subprocess.CompletedProcess(
            args=["btrfs"], returncode=0, stdout="ro=false\n", stderr=""
        )
        with mock.patch.dict("os.environ", {"PATH": "/usr/bin"}, clear=True):
            with mock.patch(
                "btrfs_subvol.runner.subprocess.run", return_value=completed
            ) as run:
                output = ShellRunner().run(["btrfs", "property", "get", "/x"])
        self.assertEqual(output, "ro=false\n")
        env = run.call_args.kwargs["env"]
        self.assertEqual(env["PATH"], "/usr/bin:/usr/sbin:/sbin")
        self.assertTrue(run.call_args.kwargs["check"])

    def test_non_zero_exit_raises_with_stderr(self) -> None:
        error = subprocess.CalledProcessError(
            1, ["btrfs"], output="", stderr="ERROR: not a subvolume\n"
        )
        with mock.patch("btrfs_subvol.runner.subprocess.run", side_effect=error):
            with self.assertRaises(CommandError) as context:
                ShellRunner().run(["btrfs", "subvolume", "delete", "/x"])
        self.assertEqual(context.exception.output, "ERROR: not a subvolume")
        self.assertEqual(
            context.exception.args_list, ["btrfs", "subvolume", "delete", "/x"]
        )
        self.assertIn("not a subvolume", str(context.exception))

    def test_non_zero_exit_falls_back_to_stdout(self) -> None:
        error = subprocess.CalledProcessError(
            1, ["btrfs"], output="partial output", stderr=""
        )
        with mock.patch("btrfs_subvol.runner.subprocess.run", side_effect=error):
            with self.assertRaises(CommandError) as context:
                ShellRunner().run(["btrfs"])
        self.assertEqual(context.exception.output, "partial output")

    def test_spawn_failure_raises_command_error(self) -> None:
        with mock.patch(
            "btrfs_subvol.runner.subprocess.run",
            side_effect=FileNotFoundError("btrfs"),
        ):
            with self.assertRaises(CommandError):
                ShellRunner().run(["btrfs"])


class BestEffortTests(unittest.TestCase):
    def test_returns_result(self) -> None:
        self.assertEqual(best_effort(lambda a, b: a + b, 1, 2), 3)

    def test_discards_command_and_os_errors(self) -> None:
        def fail_command() -> None:
            raise CommandError(["btrfs"], "boom")

        def fail_os() -> None:
            raise FileNotFoundError("missing")

        self.assertIsNone(best_effort(fail_command))
        self.assertIsNone(best_effort(fail_os))

    def test_other_errors_propagate(self) -> None:
        def fail() -> None:
            raise ValueError("bug")

        with self.assertRaises(ValueError):
            best_effort(fail)


if __name__ == "__main__":
    unittest.main()
