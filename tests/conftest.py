"""
Cloud Cache — Test Configuration and Shared Fixtures

Provides pytest configuration and shared fixtures for unit and integration tests.
Async tests run under pytest-asyncio in auto mode.
"""

import os
from collections.abc import Generator
from typing import Any

import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "DEBUG"


class FakeClock:
    """Manually advanced time source for expiration tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """Simulated clock starting at an arbitrary instant."""
    return FakeClock()


@pytest.fixture
def test_redis_url() -> str:
    """Get Redis URL for testing (database 15 for isolation)."""
    return os.environ.get("TEST_REDIS_URL", "redis://localhost:6379/15")


@pytest.fixture
def mock_env_memory(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set environment variables for memory cache provider."""
    monkeypatch.delenv("REDIS_URL", raising=False)
    monkeypatch.setenv("CACHE_PROVIDER", "memory")
    monkeypatch.setenv("CACHE_MAX_SIZE", "100")
    monkeypatch.setenv("CACHE_TTL_SECONDS", "3600")


@pytest.fixture
def sample_cache_data() -> dict[str, Any]:
    """Sample data for cache testing."""
    return {
        "simple_string": "hello",
        "simple_int": 42,
        "simple_float": 3.14,
        "simple_bool": True,
        "simple_none": None,
        "unicode": "héllo wörld ✓",
        "complex_dict": {
            "nested": {
                "key": "value",
                "number": 123,
                "list": [1, 2, 3],
            }
        },
        "complex_list": [
            {"id": 1, "name": "Alice"},
            {"id": 2, "name": "Bob"},
        ],
    }


@pytest.fixture(autouse=True)
def reset_loaded_config(tmp_path: Any, monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Isolate tests from a developer .env file and from each other's loaded config."""
    from cloud_cache.config import reset_config

    monkeypatch.chdir(tmp_path)
    reset_config()
    yield
    reset_config()
