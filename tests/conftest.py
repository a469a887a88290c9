"""Shared test fixtures."""

import os
import time
from pathlib import Path

import pytest

import diskcleaner.categories as categories
from diskcleaner.config import CleanerConfig
from diskcleaner.engine import CleanerEngine
from diskcleaner.safety import SafetyPolicy

MB = 1024 * 1024
DAY = 86400


def make_file(path: Path, size: int = 0, age_days: float = 0, now: float | None = None) -> Path:
    """Create a (sparse) file of the given size, optionally backdated."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        f.truncate(size)
    if age_days:
        mtime = (now if now is not None else time.time()) - age_days * DAY
        os.utime(path, (mtime, mtime))
    return path


@pytest.fixture(autouse=True)
def no_external_tools(monkeypatch):
    """Never run real package manager commands (e.g. brew --cache) in tests."""
    monkeypatch.setattr(categories, "_find_executable", lambda name: None)


@pytest.fixture
def home(tmp_path) -> Path:
    """An empty fake home directory."""
    home = tmp_path.resolve() / "home"
    home.mkdir()
    return home


@pytest.fixture
def config(home) -> CleanerConfig:
    return CleanerConfig(home=home, log_path=home / "Library" / "Logs" / "test.log")


@pytest.fixture
def policy(home) -> SafetyPolicy:
    return SafetyPolicy(home)


@pytest.fixture
def engine(config) -> CleanerEngine:
    return CleanerEngine(config)


@pytest.fixture
def caches(home) -> Path:
    """~/Library/Caches inside the fake home."""
    path = home / "Library" / "Caches"
    path.mkdir(parents=True)
    return path
