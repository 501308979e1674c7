"""Configuration for all tests - asyncio backend only."""

import pytest

from strata import StrataSettings

# Ensure AnyIO's pytest plugin is loaded explicitly (even if autoload is disabled)
pytest_plugins = ("anyio",)


@pytest.fixture(scope="session")
def anyio_backend():
    """Force tests to run only on asyncio backend."""
    return "asyncio"


@pytest.fixture(autouse=True)
def _reset_settings(monkeypatch):
    """Keep the cached settings singleton and STRATA_* env vars out of other tests."""
    for key in ("STRATA_CLOSE_ABANDONED", "STRATA_RESUSPEND_POLICY", "STRATA_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(StrataSettings, "_instance", None)
    yield


