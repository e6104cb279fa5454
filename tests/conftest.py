"""Shared pytest fixtures for sync-documenter tests."""

import pytest
from dotenv import load_dotenv

from sync_documenter.config import Config
from sync_documenter.diff.models import ConfigElement

load_dotenv()


@pytest.fixture
def default_config():
    """A Config with small, deterministic settings."""
    return Config(report_title="Test Report", max_parallel_connectors=2)


@pytest.fixture
def make_element():
    """Factory fixture for ConfigElement trees."""

    def _make(element_type, children=None, **attributes):
        return ConfigElement(
            element_type=element_type,
            attributes=attributes,
            children=children or [],
        )

    return _make


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep SYNC_DOCUMENTER_* and LOG_LEVEL from the developer's shell out."""
    for name in (
        "SYNC_DOCUMENTER_CONFIG",
        "SYNC_DOCUMENTER_REPORT_TITLE",
        "SYNC_DOCUMENTER_MAX_PARALLEL_CONNECTORS",
        "SYNC_DOCUMENTER_DEBUG",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
