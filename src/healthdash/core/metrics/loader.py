"""Metric loader — reads YAML metric definitions from disk."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from healthdash.core.metrics.models import MetricDefinition
from healthdash.core.metrics.registry import MetricRegistry

logger = logging.getLogger(__name__)

# Packaged definitions live under src/healthdash/domains/health/metrics/
DEFAULT_METRICS_DIR = (
    Path(__file__).resolve().parent.parent.parent / "domains" / "health" / "metrics"
)

REQUIRED_FIELDS = ["id", "display_name", "unit"]


def load_metric_directory(directory: str | Path, registry: MetricRegistry) -> int:
    """Load all YAML metric definitions from a directory (recursively).

    Returns the number of metrics loaded.
    Skips files starting with underscore.
    """
    directory = Path(directory)
    if not directory.is_dir():
        logger.warning("Metric directory does not exist: %s", directory)
        return 0

    count = 0
    for path in sorted(directory.rglob("*.yaml")):
        if path.name.startswith("_"):
            continue
        try:
            metric = load_metric_file(path)
            registry.register(metric)
            count += 1
            logger.info("Loaded metric: %s (%s)", metric.id, metric.unit)
        except Exception:
            logger.exception("Failed to load metric from %s", path)
    return count


def load_metric_file(path: Path) -> MetricDefinition:
    """Parse a YAML file into a MetricDefinition.

    Raises:
        ValueError: If a required field is missing or the normal range is malformed.
    """
    with open(path) as f:
        data: dict[str, Any] = yaml.safe_load(f) or {}

    missing = [name for name in REQUIRED_FIELDS if not data.get(name)]
    if missing:
        raise ValueError(f"{path.name}: missing required field(s): {', '.join(missing)}")

    normal_range = None
    range_data = data.get("normal_range")
    if range_data:
        low, high = float(range_data["min"]), float(range_data["max"])
        if low > high:
            raise ValueError(f"{path.name}: normal_range min {low} exceeds max {high}")
        normal_range = (low, high)

    trend_data = data.get("trend", {})
    significant = trend_data.get("significant_change")
    labels = trend_data.get("labels", {})

    return MetricDefinition(
        id=data["id"],
        display_name=data["display_name"],
        unit=data["unit"],
        normal_range=normal_range,
        composite_fields=list(data.get("composite_fields", [])),
        significant_change=float(significant) if significant is not None else None,
        direction_labels={
            "up": labels.get("up", "up"),
            "down": labels.get("down", "down"),
            "stable": labels.get("stable", "stable"),
        },
    )


def load_default_registry(directory: str | Path | None = None) -> MetricRegistry:
    """Registry populated from ``directory`` or the packaged definitions."""
    registry = MetricRegistry()
    source = Path(directory) if directory else DEFAULT_METRICS_DIR
    count = load_metric_directory(source, registry)
    logger.info("Loaded %d metric definitions from %s", count, source)
    return registry
