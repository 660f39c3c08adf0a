"""Shared test fixtures for the health dashboard engine."""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Allow running tests without `pip install -e .` by making `src/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _PROJECT_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from healthdash.core.metrics.loader import load_default_registry  # noqa: E402
from healthdash.core.metrics.registry import MetricRegistry  # noqa: E402

# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "HEALTHDASH_ALLOW_INSECURE_BIND",
        "METRICS_DIR",
        "STATS_WINDOW_DAYS",
        "TREND_WINDOW_DAYS",
        "CHART_WIDTH",
        "CHART_HEIGHT",
        "CHART_PADDING",
    ):
        monkeypatch.delenv(name, raising=False)


# ---------------------------------------------------------------------------
# Shared fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def now() -> datetime:
    """Fixed reference instant so window arithmetic is reproducible."""
    return datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def metric_registry() -> MetricRegistry:
    """Registry loaded from the packaged metric definitions."""
    return load_default_registry()
