"""
Shared pytest fixtures for the access-rules test suites.
"""

import pytest
from prometheus_client import CollectorRegistry

from shared.config import get_settings
from shared.metrics import MetricsCollector, set_metrics_collector


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Read settings from a clean environment for every test."""
    for name in ("ENV", "LOG_LEVEL", "LOG_JSON", "INHERITED_ROLE", "METRICS_ENABLED"):
        monkeypatch.delenv(f"ACCESS_RULES_{name}", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def metrics_collector():
    """Isolated metrics registry per test."""
    collector = MetricsCollector(registry=CollectorRegistry())
    set_metrics_collector(collector)
    return collector
