"""
Project Tracker Test Configuration

Shared fixtures for all tests.
"""
import os

import pytest
import pytest_asyncio

from tracker.api import TrackerAPI
from tracker.config import StoreConfig, TrackerConfig
from tracker.storage import MemoryStore


# =============================================================================
# FIXTURES: Config
# =============================================================================

@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    """Keep tests independent of the developer's environment."""
    for var in ("TRACKER_CONFIG", "DATABASE_URL", "LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    for key in list(os.environ):
        if key.startswith("TRACKER__"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("TRACKER_CONFIG", str(tmp_path / "missing.yml"))


@pytest.fixture
def memory_config() -> TrackerConfig:
    return TrackerConfig(store=StoreConfig(backend="memory"))


# =============================================================================
# FIXTURES: Stores & API
# =============================================================================

@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def api(store) -> TrackerAPI:
    return TrackerAPI(store)


@pytest_asyncio.fixture
async def acme(api):
    """A client to hang projects on."""
    return await api.create_client("Acme", "a@x.com", "555")


@pytest_asyncio.fixture
async def site(api, acme):
    """A project for Acme in its default state."""
    return await api.create_project("Site", "build", acme.id)
