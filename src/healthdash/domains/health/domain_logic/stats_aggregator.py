"""Reduce a reading series to the counts and percentages shown on the dashboard."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Iterable, Sequence

from healthdash.domains.health.domain_logic.reading_models import (
    Reading,
    Statistics,
    latest_reading,
    mean,
    round_half_up,
    within_window,
)

if TYPE_CHECKING:
    from healthdash.core.metrics.models import MetricDefinition

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 7
AVERAGE_PLACEHOLDER = "--"


def compute_statistics(
    readings: Iterable[Reading],
    *,
    now: datetime,
    normal_range: tuple[float, float] | None = None,
    composite_fields: Sequence[str] = (),
    window_days: float = DEFAULT_WINDOW_DAYS,
) -> Statistics:
    """Summarize a reading series relative to ``now``.

    Args:
        readings: One metric's readings, in any order.
        now: Reference instant for the trailing window.
        normal_range: Inclusive ``(low, high)`` bounds. Without one the
            in-range percentage is 0.
        composite_fields: Metadata fields reported as ``last_composite``
            (``("systolic", "diastolic")`` for blood pressure).
        window_days: Size of the trailing window.

    Returns:
        A ``Statistics`` instance. An empty series gives zero counts and
        ``None`` last values.
    """
    series = list(readings)
    windowed = within_window(series, now=now, days=window_days)

    in_range_percent = 0
    if normal_range is not None and windowed:
        low, high = normal_range
        in_range = sum(1 for r in windowed if low <= r.value <= high)
        in_range_percent = int(round_half_up(in_range / len(windowed) * 100))

    latest = latest_reading(series)
    return Statistics(
        total_count=len(series),
        window_count=len(windowed),
        in_range_percent=in_range_percent,
        last_value=latest.value if latest else None,
        last_composite=latest.composite(composite_fields) if latest else None,
    )


def statistics_for_metric(
    readings: Iterable[Reading],
    metric: MetricDefinition,
    *,
    now: datetime,
    window_days: float = DEFAULT_WINDOW_DAYS,
) -> Statistics:
    """``compute_statistics`` with range and composite fields from a metric definition."""
    return compute_statistics(
        readings,
        now=now,
        normal_range=metric.normal_range,
        composite_fields=metric.composite_fields,
        window_days=window_days,
    )


def average_value(
    readings: Iterable[Reading],
    *,
    now: datetime,
    window_days: float = DEFAULT_WINDOW_DAYS,
    field: str | None = None,
) -> float | None:
    """Mean over the trailing window, or None when the window is empty.

    ``field`` averages a metadata field instead of ``value`` (e.g. ``"diastolic"``);
    readings missing that field are skipped.
    """
    windowed = within_window(readings, now=now, days=window_days)
    if field is None:
        values = [r.value for r in windowed]
    else:
        values = [v for v in (r.metadata_number(field) for r in windowed) if v is not None]
    return mean(values)


def format_average(
    average: float | None,
    decimals: int = 0,
    placeholder: str = AVERAGE_PLACEHOLDER,
) -> str:
    """Display form of an average; the placeholder stands in for an empty window."""
    if average is None:
        return placeholder
    rounded = round_half_up(average, decimals)
    if decimals == 0:
        return str(int(rounded))
    return f"{rounded:.{decimals}f}"
