"""Configuration I/O utilities for reading and writing TOML config files.

This module handles serialization/deserialization of KitectlConfig to/from TOML format.
"""

import os
import platform
import tomllib
from pathlib import Path
from typing import Any

import tomli_w

from kitectl.domain.config import (
    DaemonConfig,
    KitectlConfig,
    PlatformOverrides,
    PollConfig,
    TimeoutConfig,
)

SECTIONS = ("daemon", "timeouts", "poll", "platform")


def get_global_config_path() -> Path:
    """Get the path to the global config file.

    The location is platform-dependent:
    - Linux/macOS: $XDG_CONFIG_HOME/kitectl/config.toml or ~/.config/kitectl/config.toml
    - Windows: %APPDATA%/kitectl/config.toml

    Returns:
        Path to the global config file (may not exist)
    """
    if platform.system() == "Windows":
        appdata = os.environ.get("APPDATA", "")
        if appdata:
            return Path(appdata) / "kitectl" / "config.toml"
        return Path.home() / ".config" / "kitectl" / "config.toml"
    else:
        xdg_config = os.environ.get("XDG_CONFIG_HOME", "")
        if xdg_config:
            return Path(xdg_config) / "kitectl" / "config.toml"
        return Path.home() / ".config" / "kitectl" / "config.toml"


def load_config_data(path: Path) -> dict[str, Any]:
    """Load raw TOML data from a config file.

    Args:
        path: Path to config.toml file

    Returns:
        Dictionary with parsed TOML data

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config file is malformed
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in config file: {e}") from e


def merge_config_data(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge two config dictionaries, with override values taking precedence.

    Sections are merged key by key - a key set in override replaces the same
    key in base; other keys in the section are kept.

    Args:
        base: Base configuration dictionary
        override: Override configuration dictionary (takes precedence)

    Returns:
        Merged configuration dictionary
    """
    result: dict[str, Any] = {}

    for section in set(base.keys()) | set(override.keys()):
        base_section = base.get(section, {})
        override_section = override.get(section, {})

        if isinstance(base_section, dict) and isinstance(override_section, dict):
            result[section] = {**base_section, **override_section}
        elif section in override:
            result[section] = override_section
        else:
            result[section] = base_section

    return result


def config_data_to_kitectl_config(data: dict[str, Any]) -> KitectlConfig:
    """Convert raw config data dictionary to KitectlConfig.

    Args:
        data: Dictionary with config sections

    Returns:
        KitectlConfig instance

    Raises:
        ValueError: If a section is not a table, has unknown keys, or fails
            validation
    """
    sections: dict[str, dict[str, Any]] = {}
    for name in SECTIONS:
        section = data.get(name, {})
        if not isinstance(section, dict):
            raise ValueError(f"[{name}] must be a table, got {type(section).__name__}")
        sections[name] = section

    try:
        return KitectlConfig(
            daemon=DaemonConfig(**sections["daemon"]),
            timeouts=TimeoutConfig(**sections["timeouts"]),
            poll=PollConfig(**sections["poll"]),
            platform=PlatformOverrides(**sections["platform"]),
        )
    except TypeError as e:
        # Unknown keys in a section
        raise ValueError(f"Invalid config: {e}") from e


def load_config(path: Path) -> KitectlConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to config.toml file

    Returns:
        Parsed KitectlConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config file is malformed
    """
    return config_data_to_kitectl_config(load_config_data(path))


def config_to_data(config: KitectlConfig) -> dict[str, Any]:
    """Convert KitectlConfig to a TOML-ready dictionary.

    Unset platform overrides are omitted (TOML has no null).
    """
    platform_data: dict[str, Any] = {"install_paths": config.platform.install_paths}
    if config.platform.executable is not None:
        platform_data["executable"] = config.platform.executable
    if config.platform.installer_url is not None:
        platform_data["installer_url"] = config.platform.installer_url

    return {
        "daemon": {
            "host": config.daemon.host,
            "port": config.daemon.port,
            "scheme": config.daemon.scheme,
        },
        "timeouts": {
            "reachable": config.timeouts.reachable,
            "request": config.timeouts.request,
            "process": config.timeouts.process,
            "install": config.timeouts.install,
            "download": config.timeouts.download,
        },
        "poll": {
            "attempts": config.poll.attempts,
            "interval": config.poll.interval,
        },
        "platform": platform_data,
    }


def config_to_toml(config: KitectlConfig) -> str:
    """Render configuration as TOML text."""
    return tomli_w.dumps(config_to_data(config))


def save_config(config: KitectlConfig, path: Path) -> None:
    """Save configuration to a TOML file.

    Args:
        config: KitectlConfig to save
        path: Destination path for config.toml
    """
    data = config_to_data(config)
    path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("wb") as f:
        tomli_w.dump(data, f)
