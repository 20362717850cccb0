"""XDG-compliant path management for shadowvault.

This module provides standardized paths following the XDG Base Directory
Specification for the engine configuration and the audit journal.

XDG defaults:
- Config: ~/.config/shadowvault/
- State: ~/.local/state/shadowvault/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "shadowvault"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/shadowvault/ (or XDG_CONFIG_HOME/shadowvault/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_state_dir() -> Path:
    """Get the state directory path.

    State data is the audit journal of lifecycle operations.

    Returns:
        Path to ~/.local/state/shadowvault/ (or XDG_STATE_HOME/shadowvault/).
    """
    return _get_xdg_dir("XDG_STATE_HOME", ".local/state")


def get_engine_config_path() -> Path:
    """Get the engine configuration file path.

    Returns:
        Path to ~/.config/shadowvault/engine.toml.
    """
    return get_config_dir() / "engine.toml"


def get_history_path() -> Path:
    """Get the audit journal path.

    Returns:
        Path to ~/.local/state/shadowvault/history.jsonl.
    """
    return get_state_dir() / "history.jsonl"


def _ensure_dir(path: Path, name: str) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path


def ensure_config_dir() -> Path:
    """Create the configuration directory if it doesn't exist.

    Returns:
        Path to the configuration directory.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_config_dir(), "config")


def ensure_state_dir() -> Path:
    """Create the state directory if it doesn't exist.

    Returns:
        Path to the state directory.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_state_dir(), "state")
