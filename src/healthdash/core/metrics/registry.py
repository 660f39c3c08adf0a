"""Metric registry — in-memory index of loaded metric definitions."""

from __future__ import annotations

import logging

from healthdash.core.metrics.models import MetricDefinition

logger = logging.getLogger(__name__)


class UnknownMetricError(KeyError):
    """Raised when a metric id has no registered definition."""


class MetricRegistry:
    """In-memory registry of metric definitions keyed by id."""

    def __init__(self) -> None:
        self._metrics: dict[str, MetricDefinition] = {}

    def register(self, metric: MetricDefinition) -> None:
        if metric.id in self._metrics:
            raise ValueError(f"Duplicate metric id registered: {metric.id!r}")
        self._metrics[metric.id] = metric

    def get(self, metric_id: str) -> MetricDefinition | None:
        """Look up a metric by id."""
        return self._metrics.get(metric_id)

    def require(self, metric_id: str) -> MetricDefinition:
        """Look up a metric by id, raising ``UnknownMetricError`` if absent."""
        metric = self._metrics.get(metric_id)
        if metric is None:
            known = ", ".join(sorted(self._metrics)) or "none"
            raise UnknownMetricError(f"Unknown metric {metric_id!r} (known: {known})")
        return metric

    def all(self) -> list[MetricDefinition]:
        """Return all registered metrics."""
        return list(self._metrics.values())

    def __contains__(self, metric_id: object) -> bool:
        return metric_id in self._metrics

    def __len__(self) -> int:
        return len(self._metrics)
