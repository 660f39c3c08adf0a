"""Direction of a metric over a recent window.

Two classifiers live here:

* ``classify_trend`` splits the windowed readings into an earlier and a later
  half and compares their means against a 5% relative threshold.
* ``compare_recent_weeks`` compares the last 7 days with the 7 days before
  them against an absolute, per-metric significance.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Iterable

from healthdash.domains.health.domain_logic.reading_models import (
    Reading,
    Trend,
    mean,
    parse_timestamp,
    sort_chronologically,
    within_window,
)

if TYPE_CHECKING:
    from healthdash.core.metrics.models import MetricDefinition

logger = logging.getLogger(__name__)

DEFAULT_TREND_WINDOW_DAYS = 7
RELATIVE_THRESHOLD = 0.05
UNKNOWN_TREND_LABEL = "unknown"


def classify_trend(
    readings: Iterable[Reading],
    *,
    now: datetime,
    window_days: float = DEFAULT_TREND_WINDOW_DAYS,
) -> Trend:
    """Classify a metric as rising, falling or stable within the window.

    Readings are sorted oldest-first before splitting; with an odd count the
    extra reading lands in the later half.
    """
    recent = sort_chronologically(within_window(readings, now=now, days=window_days))
    if len(recent) < 2:
        return Trend.STABLE

    mid = len(recent) // 2
    first_mean = mean([r.value for r in recent[:mid]])
    second_mean = mean([r.value for r in recent[mid:]])

    difference = second_mean - first_mean
    threshold = first_mean * RELATIVE_THRESHOLD

    if difference > threshold:
        return Trend.UP
    if difference < -threshold:
        return Trend.DOWN
    return Trend.STABLE


def compare_recent_weeks(
    readings: Iterable[Reading],
    *,
    now: datetime,
    significant_change: float,
) -> Trend | None:
    """Compare the last week's mean with the previous week's.

    Returns:
        ``Trend.UP``/``Trend.DOWN`` when the means differ by more than
        ``significant_change``, ``Trend.STABLE`` otherwise, and ``None`` when
        either week has no readings.
    """
    series = list(readings)
    if len(series) < 2:
        return None

    now = parse_timestamp(now)
    week_ago = now - timedelta(days=7)
    two_weeks_ago = now - timedelta(days=14)

    recent = [r.value for r in series if r.timestamp >= week_ago]
    previous = [r.value for r in series if two_weeks_ago <= r.timestamp < week_ago]
    if not recent or not previous:
        return None

    change = mean(recent) - mean(previous)
    if abs(change) > significant_change:
        return Trend.UP if change > 0 else Trend.DOWN
    return Trend.STABLE


def describe_trend(trend: Trend | None, metric: MetricDefinition) -> str:
    """Metric-specific wording ("gaining", "improving", ...) for a trend."""
    if trend is None:
        return UNKNOWN_TREND_LABEL
    return metric.direction_labels.get(trend.value, trend.value)


def recent_trend_label(
    readings: Iterable[Reading],
    metric: MetricDefinition,
    *,
    now: datetime,
) -> str:
    """Week-over-week trend in the metric's own wording."""
    if metric.significant_change is None:
        logger.debug("Metric %s has no significant_change; trend unknown", metric.id)
        return UNKNOWN_TREND_LABEL
    trend = compare_recent_weeks(
        readings, now=now, significant_change=metric.significant_change
    )
    return describe_trend(trend, metric)
