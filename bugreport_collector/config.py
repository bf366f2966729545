"""Configuration loading from CLI args, env vars, and optional YAML file."""

import logging
import os
from dataclasses import dataclass

import yaml

from bugreport_collector.helper import DEFAULT_BUGREPORT_DIR

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """A configuration value could not be converted to its field type."""


@dataclass(frozen=True)
class Config:
    bugreport_dir: str = "./bugreports"
    output_format: str = "text"
    top_n: int = 10
    device_serial: str | None = None
    adb_path: str = "adb"
    adb_timeout: float = 60.0
    remote_bugreport_dir: str = DEFAULT_BUGREPORT_DIR


def load_yaml_config(path: str | None) -> dict:
    """Load settings from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        logger.info("Loaded YAML config from %s", path)
        return data
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}


def _number(cast, name: str, value):
    try:
        return cast(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid value for {name}: {value!r}") from None


def load_config(cli_args=None, yaml_data: dict | None = None) -> Config:
    """Build Config: CLI args over env vars over YAML over defaults."""
    yaml_data = yaml_data or {}
    device = yaml_data.get("device") or {}

    def pick(arg_name: str, env_name: str, yaml_value, default):
        value = getattr(cli_args, arg_name, None) if cli_args is not None else None
        if value is not None:
            return value
        if env_name in os.environ:
            return os.environ[env_name]
        if yaml_value is not None:
            return yaml_value
        return default

    return Config(
        bugreport_dir=pick("dir", "BUGREPORT_DIR",
                           yaml_data.get("bugreport_dir"), Config.bugreport_dir),
        output_format=pick("output", "BUGREPORT_OUTPUT",
                           yaml_data.get("output"), Config.output_format),
        top_n=_number(int, "top",
                      pick("top", "BUGREPORT_TOP", yaml_data.get("top"), Config.top_n)),
        device_serial=pick("serial", "ANDROID_SERIAL", device.get("serial"), None),
        adb_path=pick("adb_path", "ADB_PATH", device.get("adb_path"), Config.adb_path),
        adb_timeout=_number(float, "adb timeout",
                            pick("adb_timeout", "ADB_TIMEOUT",
                                 device.get("timeout"), Config.adb_timeout)),
        remote_bugreport_dir=pick("remote_dir", "REMOTE_BUGREPORT_DIR",
                                  device.get("bugreport_dir"), Config.remote_bugreport_dir),
    )
