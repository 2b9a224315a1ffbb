"""Configuration file management for paytrack."""

import os
import tomllib
from pathlib import Path
from typing import Any

import tomli_w

DEFAULT_SETTINGS: dict[str, Any] = {
    "user_id": "local",
    "currency_symbol": "$",
    "savings_target": 20,
    "pay_frequency": "BIWEEKLY",
}


def get_xdg_config_home() -> Path:
    """XDG config home, defaulting to ~/.config."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config)
    return Path.home() / ".config"


def get_config_path() -> Path:
    """Location of paytrack's config.toml under the XDG config home.

    Returns:
        Path to the config file.
    """
    return get_xdg_config_home() / "paytrack" / "config.toml"


def create_default_config(config_path: Path | None = None) -> None:
    """Write DEFAULT_SETTINGS to a new config file readable by the owner only.

    Args:
        config_path: Config file; defaults to get_config_path().
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "wb") as f:
        tomli_w.dump(dict(DEFAULT_SETTINGS), f)

    os.chmod(config_path, 0o600)


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Read the TOML config file.

    Args:
        config_path: Config file; defaults to get_config_path().

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If paytrack has not been initialized.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "rb") as f:
        return tomllib.load(f)


def save_config(config: dict[str, Any], config_path: Path | None = None) -> None:
    """Write the config dict back to TOML, keeping 0600 permissions.

    Args:
        config: Settings to write.
        config_path: Config file; defaults to get_config_path().
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "wb") as f:
        tomli_w.dump(config, f)

    os.chmod(config_path, 0o600)


def get_setting(key: str, config_path: Path | None = None) -> Any:
    """Get a setting, falling back to its default.

    A missing config file is not an error: defaults apply until ``paytrack
    init`` writes one.

    Args:
        key: Setting name (see DEFAULT_SETTINGS).
        config_path: Config file; defaults to get_config_path().

    Returns:
        Configured value or the default.

    Raises:
        KeyError: If the setting is unknown.
    """
    if key not in DEFAULT_SETTINGS:
        raise KeyError(f"Unknown setting: {key}")

    try:
        config = load_config(config_path)
    except FileNotFoundError:
        return DEFAULT_SETTINGS[key]

    return config.get(key, DEFAULT_SETTINGS[key])


def set_setting(key: str, value: Any, config_path: Path | None = None) -> None:
    """Set a setting and save the config file.

    Raises:
        KeyError: If the setting is unknown.
    """
    if key not in DEFAULT_SETTINGS:
        raise KeyError(f"Unknown setting: {key}")

    try:
        config = load_config(config_path)
    except FileNotFoundError:
        create_default_config(config_path)
        config = load_config(config_path)

    config[key] = value
    save_config(config, config_path)
