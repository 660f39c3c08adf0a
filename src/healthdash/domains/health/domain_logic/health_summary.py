"""Current-health overview across metrics, plus a simple attention check.

Combines the latest reading of each metric, week-over-week trend wording and
recency into a ``CurrentHealth`` record, then ``assess_health`` lists the
concerns a dashboard should surface.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Mapping

from healthdash.core.metrics.models import MetricDefinition
from healthdash.core.metrics.registry import MetricRegistry
from healthdash.domains.health.domain_logic.reading_models import (
    Reading,
    latest_reading,
    within_window,
)
from healthdash.domains.health.domain_logic.trend_classifier import (
    UNKNOWN_TREND_LABEL,
    recent_trend_label,
)

logger = logging.getLogger(__name__)

BLOOD_SUGAR = "blood_sugar"
BLOOD_PRESSURE = "blood_pressure"
WEIGHT = "weight"

RECENT_DATA_DAYS = 3

# Shown when a blood-pressure reading lacks its composite metadata.
DEFAULT_SYSTOLIC = 120
DEFAULT_DIASTOLIC = 80

BLOOD_SUGAR_VERY_HIGH = 180
BLOOD_SUGAR_HIGH = 140
BLOOD_SUGAR_LOW = 70
SYSTOLIC_HIGH = 140
DIASTOLIC_HIGH = 90


@dataclass
class CurrentHealth:
    """Latest values and recent direction for the tracked metrics."""

    last_blood_sugar: float | None = None
    last_blood_pressure: dict[str, float] | None = None
    last_weight: float | None = None
    blood_sugar_trend: str = UNKNOWN_TREND_LABEL
    weight_trend: str = UNKNOWN_TREND_LABEL
    has_recent_data: bool = False
    last_updated: datetime | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "last_blood_sugar": self.last_blood_sugar,
            "last_blood_pressure": self.last_blood_pressure,
            "last_weight": self.last_weight,
            "recent_trends": {
                "blood_sugar": self.blood_sugar_trend,
                "weight": self.weight_trend,
            },
            "has_recent_data": self.has_recent_data,
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
        }


@dataclass
class HealthAssessment:
    """Concerns derived from a ``CurrentHealth`` record."""

    needs_attention: bool = False
    primary_concerns: list[str] = field(default_factory=list)
    last_checkup: datetime | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "needs_attention": self.needs_attention,
            "primary_concerns": list(self.primary_concerns),
            "last_checkup": self.last_checkup.isoformat() if self.last_checkup else None,
        }


def build_current_health(
    readings_by_type: Mapping[str, Iterable[Reading]],
    *,
    now: datetime,
    registry: MetricRegistry,
) -> CurrentHealth:
    """Assemble the current-health record from per-metric series.

    Metric ids missing from ``readings_by_type`` are treated as empty series.
    """
    series = {metric_id: list(readings) for metric_id, readings in readings_by_type.items()}
    blood_sugar = series.get(BLOOD_SUGAR, [])
    blood_pressure = series.get(BLOOD_PRESSURE, [])
    weight = series.get(WEIGHT, [])

    latest_sugar = latest_reading(blood_sugar)
    latest_weight = latest_reading(weight)
    latest_bp = latest_reading(blood_pressure)

    last_bp = None
    if latest_bp is not None:
        last_bp = {
            "systolic": latest_bp.metadata_number("systolic") or DEFAULT_SYSTOLIC,
            "diastolic": latest_bp.metadata_number("diastolic") or DEFAULT_DIASTOLIC,
        }

    everything = [r for readings in series.values() for r in readings]
    latest_any = latest_reading(everything)

    return CurrentHealth(
        last_blood_sugar=latest_sugar.value if latest_sugar else None,
        last_blood_pressure=last_bp,
        last_weight=latest_weight.value if latest_weight else None,
        blood_sugar_trend=_trend_label(blood_sugar, registry.get(BLOOD_SUGAR), now),
        weight_trend=_trend_label(weight, registry.get(WEIGHT), now),
        has_recent_data=bool(within_window(everything, now=now, days=RECENT_DATA_DAYS)),
        last_updated=latest_any.timestamp if latest_any else None,
    )


def _trend_label(
    readings: list[Reading],
    metric: MetricDefinition | None,
    now: datetime,
) -> str:
    if metric is None:
        return UNKNOWN_TREND_LABEL
    return recent_trend_label(readings, metric, now=now)


def assess_health(current: CurrentHealth) -> HealthAssessment:
    """List concerns; out-of-range blood sugar or high blood pressure needs attention."""
    concerns: list[str] = []
    needs_attention = False

    sugar = current.last_blood_sugar
    if sugar is not None:
        if sugar > BLOOD_SUGAR_VERY_HIGH:
            concerns.append("Very high blood sugar")
            needs_attention = True
        elif sugar > BLOOD_SUGAR_HIGH:
            concerns.append("Elevated blood sugar")
            needs_attention = True
        elif sugar < BLOOD_SUGAR_LOW:
            concerns.append("Low blood sugar")
            needs_attention = True

    bp = current.last_blood_pressure
    if bp is not None:
        if bp["systolic"] >= SYSTOLIC_HIGH or bp["diastolic"] >= DIASTOLIC_HIGH:
            concerns.append("High blood pressure")
            needs_attention = True

    # Weight gain is worth mentioning but not urgent.
    if current.weight_trend == "gaining":
        concerns.append("Recent weight gain")

    return HealthAssessment(
        needs_attention=needs_attention,
        primary_concerns=concerns,
        last_checkup=current.last_updated,
    )


# ---------------------------------------------------------------------------
# Display rows
# ---------------------------------------------------------------------------

def format_reading(reading: Reading, metric: MetricDefinition | None = None) -> str:
    """``"120/80"`` for composite metrics, ``"{value} {unit}"`` otherwise."""
    if metric is not None and metric.is_composite:
        composite = reading.composite(metric.composite_fields)
        if composite is not None:
            return "/".join(_plain_number(v) for v in composite.values())
    return f"{_plain_number(reading.value)} {reading.unit}".strip()


def _plain_number(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def recent_readings(
    readings_by_type: Mapping[str, Iterable[Reading]],
    *,
    registry: MetricRegistry,
    limit: int = 5,
) -> list[dict[str, Any]]:
    """Newest-first display rows across all metrics."""
    rows = [
        (metric_id, reading)
        for metric_id, readings in readings_by_type.items()
        for reading in readings
    ]
    rows.sort(key=lambda row: row[1].timestamp, reverse=True)

    return [
        {
            "type": metric_id,
            "value": format_reading(reading, registry.get(metric_id)),
            "timestamp": reading.timestamp.isoformat(),
            "notes": reading.metadata.get("notes"),
        }
        for metric_id, reading in rows[:limit]
    ]
