"""External command execution."""

from __future__ import annotations

import logging
import os
import subprocess
from typing import Any, Callable, TypeVar

from btrfs_subvol.path_utils import ensure_sbin_on_path

T = TypeVar("T")

logger = logging.getLogger(__name__)


class CommandError(RuntimeError):
    """Raised when an external tool fails to spawn or exits non-zero."""

    def __init__(self, args: list[str], output: str) -> None:
        self.args_list = list(args)
        self.output = output
        message = f"command failed: {' '.join(self.args_list)}"
        if output:
            message = f"{message}: {output}"
        super().__init__(message)


class CommandRunner:
    """Command runner abstraction for testability."""

    def run(self, args: list[str]) -> str:  # pragma: no cover - interface
        raise NotImplementedError


class ShellRunner(CommandRunner):
    def run(self, args: list[str]) -> str:
        env = os.environ.copy()
        env["PATH"] = ensure_sbin_on_path(env.get("PATH", ""))
        try:
            result = subprocess.run(
                args,
                check=True,
                text=True,
                capture_output=True,
                env=env,
            )
        except subprocess.CalledProcessError as exc:
            raise CommandError(args, _captured_output(exc)) from exc
        except OSError as exc:
            raise CommandError(args, str(exc)) from exc
        return result.stdout


def best_effort(func: Callable[..., T], *args: Any) -> T | None:
    """Call ``func`` and discard tool and filesystem failures."""
    try:
        return func(*args)
    except (CommandError, OSError) as exc:
        logger.debug(
            "event=best_effort_failed action=%s error=%s",
            getattr(func, "__name__", func),
            exc,
        )
        return None


def _captured_output(exc: subprocess.CalledProcessError) -> str:
    stderr = (exc.stderr or "").strip()
    if stderr:
        return stderr
    return (exc.stdout or "").strip()
