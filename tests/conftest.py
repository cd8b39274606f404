"""Shared test fixtures and configuration for ldc tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from ldc.config import CacheSettings, get_settings

# =============================================================================
# Environment Isolation
# =============================================================================

@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep tests away from real config files in cwd and home."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =============================================================================
# Settings Fixtures
# =============================================================================

@pytest.fixture
def settings(tmp_path: Path) -> CacheSettings:
    """Settings rooted in a temp directory, fsync disabled for speed."""
    return CacheSettings(cache_dir=str(tmp_path / "cache"), fsync=False)


@pytest.fixture
def in_place_settings(settings: CacheSettings) -> CacheSettings:
    """Settings that truncate files in place instead of renaming."""
    settings.atomic_writes = False
    return settings


# =============================================================================
# Path Fixtures
# =============================================================================

@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Return an existing directory for cache files."""
    d = tmp_path / "data"
    d.mkdir()
    return d


@pytest.fixture
def bin_path(data_dir: Path) -> Path:
    """Path for a binary cache file (not created)."""
    return data_dir / "value.bin"


@pytest.fixture
def json_path(data_dir: Path) -> Path:
    """Path for a JSON config file (not created)."""
    return data_dir / "config.json"
