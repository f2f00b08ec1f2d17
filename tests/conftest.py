"""Pytest configuration for orc tests."""

import logging

import instrukt_ai_logging
import pytest


def _noop_configure_logging(*_args, **_kwargs):  # type: ignore[no-untyped-def]
    return None


instrukt_ai_logging.configure_logging = _noop_configure_logging  # type: ignore[assignment]
logging.getLogger("orc").handlers.clear()
logging.getLogger().handlers.clear()


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):  # type: ignore[no-untyped-def]
    """Keep tests away from the real ~/.orc."""
    for var in ("ORC_HOME", "ORC_CONFIG_PATH", "ORC_ENV_PATH", "ORC_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("ORC_CONFIG_PATH", str(tmp_path / "orc.yml"))


def pytest_collection_modifyitems(config, items):
    """Set per-marker timeouts: unit=1s, integration=5s."""
    for item in items:
        if "unit" in item.keywords:
            item.add_marker(pytest.mark.timeout(1))
        elif "integration" in item.keywords:
            item.add_marker(pytest.mark.timeout(5))
