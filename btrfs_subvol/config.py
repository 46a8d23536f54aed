"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

try:
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for 3.10
    import tomli as tomllib  # type: ignore[no-redef]

DEFAULT_LOG_LEVEL = "info"
DEFAULT_VAR_DIR = "/var/lib/btrfs_subvol"
DEFAULT_LOCK_DIR = "/run/btrfs_subvol/locks"
DEFAULT_STORAGE_DRIVER = "btrfs"
DEFAULT_PROJECT = "default"
DEFAULT_RESTRICTED = "auto"

STORAGE_DRIVERS = {"btrfs", "dir"}
RESTRICTED_MODES = {"auto", "true", "false"}


class ConfigError(ValueError):
    """Raised when configuration is invalid."""


@dataclass(frozen=True)
class GlobalConfig:
    log_level: str
    var_dir: Path
    lock_dir: Path


@dataclass(frozen=True)
class StorageConfig:
    driver: str
    project: str


@dataclass(frozen=True)
class EnvironmentConfig:
    restricted: str


@dataclass(frozen=True)
class Config:
    global_cfg: GlobalConfig
    storage: StorageConfig
    environment: EnvironmentConfig

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Config":
        global_data = data.get("global", {})
        storage_data = data.get("storage", {})
        environment_data = data.get("environment", {})

        global_cfg = GlobalConfig(
            log_level=str(global_data.get("log_level", DEFAULT_LOG_LEVEL)),
            var_dir=_expand_path(global_data.get("var_dir", DEFAULT_VAR_DIR)),
            lock_dir=_expand_path(global_data.get("lock_dir", DEFAULT_LOCK_DIR)),
        )
        storage = StorageConfig(
            driver=str(storage_data.get("driver", DEFAULT_STORAGE_DRIVER)),
            project=str(storage_data.get("project", DEFAULT_PROJECT)),
        )
        environment = EnvironmentConfig(
            restricted=_normalize_restricted(
                environment_data.get("restricted", DEFAULT_RESTRICTED)
            ),
        )
        config = Config(
            global_cfg=global_cfg,
            storage=storage,
            environment=environment,
        )
        validate_config(config)
        return config


def load_config(path: Path) -> Config:
    if not path.is_absolute():
        raise ConfigError(f"config path must be absolute: {path}")
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except OSError as exc:
        raise ConfigError(f"failed to read config: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"invalid config: {exc}") from exc
    return Config.from_dict(data)


def validate_config(config: Config) -> None:
    _validate_log_level(config.global_cfg.log_level)
    _validate_path(config.global_cfg.var_dir, "global.var_dir")
    _validate_path(config.global_cfg.lock_dir, "global.lock_dir")

    if config.storage.driver not in STORAGE_DRIVERS:
        raise ConfigError(
            f"storage.driver must be one of {sorted(STORAGE_DRIVERS)}; "
            f"got {config.storage.driver}"
        )
    if not config.storage.project:
        raise ConfigError("storage.project is required")
    if "/" in config.storage.project:
        raise ConfigError("storage.project must not contain '/'")

    if config.environment.restricted not in RESTRICTED_MODES:
        raise ConfigError("environment.restricted must be auto, true, or false")


def _expand_path(raw: Any) -> Path:
    return Path(str(raw)).expanduser()


def _normalize_restricted(raw: Any) -> str:
    if isinstance(raw, bool):
        return "true" if raw else "false"
    return str(raw).lower()


def _validate_path(path: Path, field: str) -> None:
    if not path.is_absolute():
        raise ConfigError(f"{field} must be an absolute path: {path}")


def _validate_log_level(value: str) -> None:
    valid = {"debug", "info", "warning", "error", "critical"}
    if value.lower() not in valid:
        raise ConfigError(
            f"global.log_level must be one of {sorted(valid)}; got {value}"
        )
