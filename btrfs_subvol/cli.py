"""CLI entrypoint and logging setup."""

from __future__ import annotations

import argparse
import logging
import sys
from contextlib import ExitStack
from pathlib import Path
from typing import Callable, Iterable, Sequence

from btrfs_subvol.config import Config, ConfigError, GlobalConfig, load_config, validate_config
from btrfs_subvol.dir_backend import DirSnapshotCleaner, SnapshotDeleteError
from btrfs_subvol.environment import ExecutionEnvironment, detect_environment
from btrfs_subvol.layout import StorageLayout
from btrfs_subvol.lock import LockError, LockFile, lock_path_for
from btrfs_subvol.probe import is_subvolume
from btrfs_subvol.properties import is_read_only, set_read_only
from btrfs_subvol.qgroups import QuotaGroupError, resolve_quota_group
from btrfs_subvol.runner import CommandError, ShellRunner
from btrfs_subvol.snapshots import SnapshotManager
from btrfs_subvol.subvolumes import (
    SubvolumeCreateError,
    SubvolumeDeleteError,
    SubvolumeManager,
    list_nested_subvolumes,
)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="btrfs_subvol")
    subparsers = parser.add_subparsers(dest="command")

    create = subparsers.add_parser("create", help="create a subvolume")
    create.add_argument("path", help="subvolume path")

    snapshot = subparsers.add_parser("snapshot", help="snapshot a subvolume")
    snapshot.add_argument("source", help="source subvolume")
    snapshot.add_argument("dest", help="snapshot path")
    snapshot.add_argument(
        "--readonly",
        action="store_true",
        help="request a read-only snapshot where the environment allows it",
    )

    delete = subparsers.add_parser(
        "delete", help="delete a subvolume and all nested subvolumes"
    )
    delete.add_argument("path", help="subvolume path")
    delete.add_argument(
        "--if-exists",
        action="store_true",
        help="skip paths that are missing or not subvolumes",
    )

    listing = subparsers.add_parser("list", help="list nested subvolumes")
    listing.add_argument("path", help="root path")

    show = subparsers.add_parser("show", help="show subvolume status")
    show.add_argument("path", help="subvolume path")

    readonly = subparsers.add_parser("readonly", help="set the ro property")
    readonly.add_argument("path", help="subvolume path")
    readonly.add_argument("value", choices=("true", "false"))

    snapshot_delete = subparsers.add_parser(
        "snapshot-delete", help="delete an instance snapshot from a pool"
    )
    snapshot_delete.add_argument("snapshot", help="instance/snapshot name")
    snapshot_delete.add_argument("--pool", required=True, help="storage pool")
    snapshot_delete.add_argument("--project", help="override project")

    for sub in subparsers.choices.values():
        sub.add_argument("--config", help="path to config.toml")
        sub.add_argument("--log-level", help="override log level")

    if argv is None:
        argv = sys.argv[1:]
    argv = list(argv)
    if not argv:
        parser.print_help()
        raise SystemExit(0)
    args = parser.parse_args(argv)
    if args.command is None:
        parser.error("command required")
    return args


def setup_logging(level: str) -> None:
    numeric = _parse_level(level)
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def main(argv: Iterable[str] | None = None) -> int:
    try:
        args = parse_args(argv)
    except SystemExit as exc:
        return int(exc.code or 0)

    try:
        config = _load_and_override_config(args)
    except ConfigError as exc:
        print(f"config error: {exc}", file=sys.stderr)
        return 2

    setup_logging(config.global_cfg.log_level)
    logging.getLogger(__name__).info(
        "event=command_start command=%s", args.command
    )
    handler = _COMMANDS.get(args.command)
    if handler is None:
        return 2
    return handler(args, config)


def run_create(args: argparse.Namespace, config: Config) -> int:
    logger = logging.getLogger(__name__)
    path = _target(args.path)

    def action() -> int:
        try:
            SubvolumeManager(ShellRunner(), logger).create_subvolume(path)
        except SubvolumeCreateError as exc:
            logger.error("event=create_failed path=%s error=%s", path, exc)
            return 1
        return 0

    return _run_locked(config, [path], action)


def run_snapshot(args: argparse.Namespace, config: Config) -> int:
    logger = logging.getLogger(__name__)
    source = _target(args.source)
    dest = _target(args.dest)

    def action() -> int:
        manager = SnapshotManager(
            ShellRunner(), resolve_environment(config), logger=logger
        )
        try:
            manager.create_snapshot(source, dest, readonly=args.readonly)
        except SubvolumeCreateError as exc:
            logger.error("event=snapshot_failed error=%s", exc)
            return 1
        return 0

    return _run_locked(config, [dest], action)


def run_delete(args: argparse.Namespace, config: Config) -> int:
    logger = logging.getLogger(__name__)
    path = _target(args.path)

    def action() -> int:
        manager = SubvolumeManager(ShellRunner(), logger)
        try:
            if args.if_exists:
                manager.delete_subvolume_tree_if_exists(path)
            else:
                manager.delete_subvolume_tree(path)
        except SubvolumeDeleteError as exc:
            logger.error(
                "event=delete_failed path=%s error=%s", exc.path, exc.output
            )
            return 1
        return 0

    return _run_locked(config, [path], action)


def run_list(args: argparse.Namespace, config: Config) -> int:
    for relative in list_nested_subvolumes(_target(args.path)):
        print(relative)
    return 0


def run_show(args: argparse.Namespace, config: Config) -> int:
    path = _target(args.path)
    runner = ShellRunner()
    subvolume = is_subvolume(path)
    print(f"subvolume={str(subvolume).lower()}")
    if not subvolume:
        return 0
    print(f"readonly={str(is_read_only(runner, path)).lower()}")
    try:
        qgroup = resolve_quota_group(runner, path)
    except QuotaGroupError:
        qgroup = "none"
    print(f"qgroup={qgroup}")
    return 0


def run_readonly(args: argparse.Namespace, config: Config) -> int:
    logger = logging.getLogger(__name__)
    path = _target(args.path)

    def action() -> int:
        try:
            set_read_only(ShellRunner(), path, args.value == "true")
        except CommandError as exc:
            logger.error("event=readonly_failed path=%s error=%s", path, exc)
            return 1
        logger.info("event=readonly_set path=%s value=%s", path, args.value)
        return 0

    return _run_locked(config, [path], action)


def run_snapshot_delete(args: argparse.Namespace, config: Config) -> int:
    logger = logging.getLogger(__name__)
    project = args.project or config.storage.project
    layout = StorageLayout(config.global_cfg.var_dir)
    try:
        paths = layout.snapshot_paths(project, args.pool, args.snapshot)
    except ValueError as exc:
        logger.error("event=snapshot_delete_failed error=%s", exc)
        return 2

    def action() -> int:
        try:
            if config.storage.driver == "dir":
                DirSnapshotCleaner(logger).delete_snapshot(paths)
            else:
                SnapshotManager(
                    ShellRunner(), resolve_environment(config), logger=logger
                ).delete_snapshot(paths)
        except (SubvolumeDeleteError, SnapshotDeleteError) as exc:
            logger.error("event=snapshot_delete_failed error=%s", exc)
            return 1
        return 0

    return _run_locked(config, [paths.parent_dir, paths.mount_point], action)


def resolve_environment(config: Config) -> ExecutionEnvironment:
    mode = config.environment.restricted
    if mode == "auto":
        return detect_environment()
    return ExecutionEnvironment(restricted=mode == "true")


_COMMANDS: dict[str, Callable[[argparse.Namespace, Config], int]] = {
    "create": run_create,
    "snapshot": run_snapshot,
    "delete": run_delete,
    "list": run_list,
    "show": run_show,
    "readonly": run_readonly,
    "snapshot-delete": run_snapshot_delete,
}


def _run_locked(
    config: Config, targets: Sequence[Path], action: Callable[[], int]
) -> int:
    logger = logging.getLogger(__name__)
    with ExitStack() as stack:
        for target in targets:
            lock = LockFile(lock_path_for(config.global_cfg.lock_dir, target))
            try:
                stack.enter_context(lock)
            except LockError as exc:
                logger.error("event=lock_failed target=%s error=%s", target, exc)
                return 1
        return action()


def _target(raw: str) -> Path:
    return Path(raw).expanduser().absolute()


def _load_and_override_config(args: argparse.Namespace) -> Config:
    if args.config:
        config = load_config(Path(args.config).expanduser())
    else:
        config = Config.from_dict({})
    if args.log_level:
        config = Config(
            global_cfg=GlobalConfig(
                log_level=args.log_level,
                var_dir=config.global_cfg.var_dir,
                lock_dir=config.global_cfg.lock_dir,
            ),
            storage=config.storage,
            environment=config.environment,
        )
        validate_config(config)
    return config


def _parse_level(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        pass
    normalized = value.lower()
    mapping = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warning": logging.WARNING,
        "error": logging.ERROR,
        "critical": logging.CRITICAL,
    }
    if normalized not in mapping:
        raise ConfigError(f"invalid log level: {value}")
    return mapping[normalized]
