"""Global pytest configuration."""

import os

import pytest

from backend.discovery.config import get_airport_directory, get_settings

# Keep settings deterministic: packaged fixtures, no env-provided data paths
os.environ.pop("AIRPORTS_PATH", None)
os.environ.pop("STRATEGIES_PATH", None)


@pytest.fixture(autouse=True)
def _reset_settings_cache() -> None:
    """Each test sees settings and fixtures built from its own environment."""
    get_settings.cache_clear()
    get_airport_directory.cache_clear()
