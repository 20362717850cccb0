"""Engine configuration and settings.

This module provides the configuration model and I/O functions for the
lifecycle engine: the reserved backup directory name, crush policy,
backup name rendering and the modes used for created files.

Configuration is stored in ~/.config/shadowvault/engine.toml
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from shadowvault.core.paths import get_engine_config_path
from shadowvault.lifecycle.crush import CrushFill
from shadowvault.lifecycle.fileops import DEFAULT_FILE_MODE
from shadowvault.lifecycle.models import BACKUP_DIR_NAME, BLOCK_SIZE, DEFAULT_CRUSH_PASSES
from shadowvault.lifecycle.naming import BackupNameStyle
from shadowvault.lifecycle.pathing import DEFAULT_DIR_MODE

logger = logging.getLogger(__name__)


class EngineConfig(BaseModel):
    """Configuration for the lifecycle engine.

    Attributes:
        backup_dir_name: Reserved hidden directory holding backups. Changing
            it hides every existing backup set from the engine.
        crush_passes: Overwrite passes per crushed file (1-35).
        crush_fill: Overwrite content ("random" or "zero").
        backup_name_style: Timestamp suffix rendering ("padded" or "legacy").
        block_size: I/O block size in bytes for copy, fill and crush.
        dir_mode: Mode for directories created by the engine.
        file_mode: Mode for files created by the engine.
    """

    model_config = ConfigDict(extra="forbid")

    backup_dir_name: Annotated[
        str,
        Field(min_length=1, max_length=255, description="Reserved backup directory name"),
    ] = BACKUP_DIR_NAME
    crush_passes: Annotated[
        int,
        Field(ge=1, le=35, description="Overwrite passes per crushed file (1-35)"),
    ] = DEFAULT_CRUSH_PASSES
    crush_fill: Annotated[
        CrushFill,
        Field(description="Overwrite content"),
    ] = CrushFill.RANDOM
    backup_name_style: Annotated[
        BackupNameStyle,
        Field(description="Timestamp suffix rendering"),
    ] = BackupNameStyle.PADDED
    block_size: Annotated[
        int,
        Field(ge=512, le=16 * 1024 * 1024, description="I/O block size in bytes"),
    ] = BLOCK_SIZE
    dir_mode: Annotated[
        int,
        Field(ge=0, le=0o7777, description="Mode for created directories"),
    ] = DEFAULT_DIR_MODE
    file_mode: Annotated[
        int,
        Field(ge=0, le=0o7777, description="Mode for created files"),
    ] = DEFAULT_FILE_MODE

    @field_validator("backup_dir_name")
    @classmethod
    def validate_backup_dir_name(cls, v: str) -> str:
        """Validate that the backup directory name is a single path component."""
        if v in (".", "..") or os.sep in v or "\x00" in v:
            msg = f"backup_dir_name must be a single path component, got {v!r}"
            raise ValueError(msg)
        return v

    @field_validator("dir_mode", "file_mode", mode="before")
    @classmethod
    def parse_octal_mode(cls, v: object) -> object:
        """Accept modes written as octal strings such as "0755"."""
        if isinstance(v, str):
            try:
                return int(v, 8)
            except ValueError:
                msg = f"Invalid octal mode: {v!r}"
                raise ValueError(msg) from None
        return v


class EngineConfigError(Exception):
    """Base exception for engine configuration errors."""


class EngineConfigNotFoundError(EngineConfigError):
    """Raised when the engine config file is not found."""


class EngineConfigParseError(EngineConfigError):
    """Raised when the engine config file cannot be parsed."""


def load_engine_config(path: Path | None = None) -> EngineConfig:
    """Load engine configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default engine config path.

    Returns:
        Validated EngineConfig object.

    Raises:
        EngineConfigNotFoundError: If the config file doesn't exist.
        EngineConfigParseError: If the TOML syntax is invalid.
        EngineConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_engine_config_path()

    if not config_path.exists():
        raise EngineConfigNotFoundError(f"Engine config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise EngineConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise EngineConfigError(f"Failed to read engine config: {e}") from e

    try:
        return EngineConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise EngineConfigError(f"Invalid engine config content: {e}") from e


def load_engine_config_or_default(path: Path | None = None) -> EngineConfig:
    """Load engine configuration, falling back to defaults if no file exists.

    Parse and schema errors still raise: a broken config must not silently
    change the crush policy.

    Raises:
        EngineConfigParseError: If the TOML syntax is invalid.
        EngineConfigError: If the content doesn't match the schema.
    """
    try:
        return load_engine_config(path)
    except EngineConfigNotFoundError:
        logger.debug("No engine config found, using defaults")
        return get_default_config()


def save_engine_config(config: EngineConfig, path: Path | None = None) -> Path:
    """Save engine configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The EngineConfig object to save.
        path: Path to save the config. If None, uses the default engine config path.

    Returns:
        Path where the config was saved.

    Raises:
        EngineConfigError: If the file cannot be written.
    """
    config_path = path or get_engine_config_path()

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise EngineConfigError(f"Cannot create config directory: {e}") from e

    data = _config_to_dict(config)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise EngineConfigError(f"Failed to write engine config: {e}") from e

    return config_path


def _config_to_dict(config: EngineConfig) -> dict[str, object]:
    """Convert EngineConfig to a dictionary for TOML serialization.

    Modes are written as octal strings so the file stays readable.

    Args:
        config: The EngineConfig to convert.

    Returns:
        Dictionary ready for TOML serialization.
    """
    return {
        "backup_dir_name": config.backup_dir_name,
        "crush_passes": config.crush_passes,
        "crush_fill": config.crush_fill.value,
        "backup_name_style": config.backup_name_style.value,
        "block_size": config.block_size,
        "dir_mode": f"{config.dir_mode:04o}",
        "file_mode": f"{config.file_mode:04o}",
    }


def get_default_config() -> EngineConfig:
    """Create a default EngineConfig.

    Returns:
        EngineConfig with default settings.
    """
    return EngineConfig()
