"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from collections.abc import Callable
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from shadowvault.lifecycle.config import EngineConfig
from shadowvault.lifecycle.crush import CrushFill
from shadowvault.lifecycle.manager import BackupLifecycleManager
from shadowvault.lifecycle.models import BACKUP_DIR_NAME


@pytest.fixture(autouse=True)
def isolated_xdg(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG config and state directories at a temporary location.

    Keeps the audit journal and engine config of the user untouched.
    """
    base = tmp_path_factory.mktemp("xdg")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(base / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(base / "state"))
    return base


@pytest.fixture
def clock() -> Callable[[], datetime]:
    """Deterministic clock advancing one second per call."""
    start = datetime(2020, 3, 20, 13, 46, 23, 123)
    calls = {"n": 0}

    def tick() -> datetime:
        value = start + timedelta(seconds=calls["n"])
        calls["n"] += 1
        return value

    return tick


@pytest.fixture
def fast_config() -> EngineConfig:
    """Engine config with a single zero-fill crush pass."""
    return EngineConfig(crush_passes=1, crush_fill=CrushFill.ZERO)


@pytest.fixture
def manager(fast_config: EngineConfig, clock: Callable[[], datetime]) -> BackupLifecycleManager:
    """Lifecycle manager with deterministic backup names."""
    return BackupLifecycleManager(fast_config, clock=clock)


@pytest.fixture
def backup_dir_name() -> str:
    """Reserved backup directory name."""
    return BACKUP_DIR_NAME
