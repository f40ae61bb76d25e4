"""Persistent configuration stored in the user's home directory."""

from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .constants import SimCliError
from .devices import Device

CONFIG_DIR_NAME = ".sim-cli"
CONFIG_FILE_NAME = "config.json"


class ConfigError(SimCliError):
    default_message = "could not access configuration"


@dataclass
class Config:
    """Settings remembered between runs."""

    last_started_device: Device | None = None

    def to_dict(self) -> dict:
        """Return the JSON form."""
        if self.last_started_device is None:
            return {}
        return {"lastStartedDevice": self.last_started_device.to_dict()}

    @classmethod
    def from_dict(cls, data: Mapping | None) -> Config:
        """Build a config from its JSON form."""
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise TypeError("configuration must be a JSON object")
        device = data.get("lastStartedDevice")
        return cls(Device.from_dict(device) if device is not None else None)


def get_config_dir() -> Path:
    """Return the configuration directory."""
    try:
        home = Path.home()
    except (RuntimeError, KeyError):
        return Path(tempfile.gettempdir())
    return home / CONFIG_DIR_NAME


def get_config_path() -> Path:
    """Return the path of the configuration file."""
    return get_config_dir() / CONFIG_FILE_NAME


def _ensure_config_dir() -> Path:
    config_dir = get_config_dir()
    try:
        config_dir.mkdir(mode=0o755, parents=True, exist_ok=True)
    except OSError as err:
        raise ConfigError(f"could not create {config_dir}: {err}") from err
    return config_dir


def load_config() -> Config:
    """Read the configuration; an absent file gives an empty one."""
    path = _ensure_config_dir() / CONFIG_FILE_NAME
    if not path.exists():
        return Config()
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as err:
        raise ConfigError(f"could not read {path}: {err}") from err
    try:
        return Config.from_dict(json.loads(raw))
    except (ValueError, TypeError) as err:
        raise ConfigError(f"invalid configuration in {path}: {err}") from err


def save_config(config: Config) -> None:
    """Write the configuration, readable by the owner only."""
    path = _ensure_config_dir() / CONFIG_FILE_NAME
    payload = json.dumps(config.to_dict(), indent=2, ensure_ascii=False)
    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(payload)
    except OSError as err:
        raise ConfigError(f"could not write {path}: {err}") from err


def save_last_started_device(device: Device | None) -> None:
    """Remember the device that was started last."""
    try:
        config = load_config()
    except ConfigError:
        config = Config()
    config.last_started_device = device
    save_config(config)


def get_last_started_device() -> Device | None:
    """Return the device that was started last, if any."""
    return load_config().last_started_device