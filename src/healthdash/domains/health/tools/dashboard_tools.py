"""MCP tools exposing the dashboard engine.

Each tool takes plain JSON records (as the persistence layer returns them),
runs one engine operation in memory and returns a JSON string. Malformed
reading records are dropped and logged rather than failing the whole call.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from fastmcp import Context, FastMCP

from healthdash.core.metrics.registry import UnknownMetricError
from healthdash.domains.health.domain_logic.chart_geometry import (
    build_chart_geometry,
    point_at,
    tooltip_anchor,
)
from healthdash.domains.health.domain_logic.health_index import BodyProfile, body_metrics
from healthdash.domains.health.domain_logic.health_summary import (
    assess_health,
    build_current_health,
    recent_readings,
)
from healthdash.domains.health.domain_logic.reading_models import (
    InvalidReadingError,
    parse_readings,
    parse_timestamp,
)
from healthdash.domains.health.domain_logic.stats_aggregator import (
    average_value,
    format_average,
    statistics_for_metric,
)
from healthdash.domains.health.domain_logic.trend_classifier import (
    classify_trend,
    recent_trend_label,
)

if TYPE_CHECKING:
    from healthdash.core.config.settings import Settings
    from healthdash.core.metrics.registry import MetricRegistry

logger = logging.getLogger(__name__)


def _resolve_now(now: str | None) -> datetime:
    if now:
        return parse_timestamp(now)
    return datetime.now(timezone.utc)


def _error(message: str, **extra: Any) -> str:
    return json.dumps({"status": "error", "error": message, **extra})


def register_dashboard_tools(
    mcp: FastMCP,
    registry: MetricRegistry,
    settings: Settings,
) -> None:
    """Register the dashboard engine tools on the MCP server."""

    @mcp.tool
    async def reading_statistics(
        ctx: Context,
        metric: str,
        readings: list[dict],
        now: str | None = None,
        window_days: int | None = None,
    ) -> str:
        """Summarize one metric's readings: counts, in-range percentage, latest value, average.

        Args:
            metric: Metric id (e.g., 'blood_sugar', 'blood_pressure', 'weight').
            readings: Records with value, unit, timestamp (ISO 8601) and optional metadata.
            now: Reference time (ISO 8601). Defaults to the current UTC time.
            window_days: Trailing window size. Defaults to the configured window.
        """
        try:
            definition = registry.require(metric)
            reference = _resolve_now(now)
        except (UnknownMetricError, InvalidReadingError) as exc:
            return _error(str(exc).strip("'\""))

        days = settings.stats_window_days if window_days is None else window_days
        series = parse_readings(readings)
        stats = statistics_for_metric(series, definition, now=reference, window_days=days)

        averages: dict[str, Any] = {}
        for field_name in definition.composite_fields or [None]:
            avg = average_value(series, now=reference, window_days=days, field=field_name)
            averages[field_name or "value"] = {
                "average": avg,
                "display": format_average(avg),
            }

        logger.debug("reading_statistics: %s, %d readings", metric, len(series))
        return json.dumps({
            "status": "ok",
            "metric": definition.id,
            "unit": definition.unit,
            "window_days": days,
            "statistics": stats.as_dict(),
            "averages": averages,
        })

    @mcp.tool
    async def metric_trend(
        ctx: Context,
        readings: list[dict],
        metric: str | None = None,
        now: str | None = None,
        window_days: int | None = None,
    ) -> str:
        """Classify whether a metric is going up, down or staying stable.

        Args:
            readings: Records with value, unit, timestamp (ISO 8601) and optional metadata.
            metric: Optional metric id; adds the week-over-week trend in the metric's wording.
            now: Reference time (ISO 8601). Defaults to the current UTC time.
            window_days: Trailing window size. Defaults to the configured window.
        """
        try:
            reference = _resolve_now(now)
            definition = registry.require(metric) if metric else None
        except (UnknownMetricError, InvalidReadingError) as exc:
            return _error(str(exc).strip("'\""))

        days = settings.trend_window_days if window_days is None else window_days
        series = parse_readings(readings)
        payload: dict[str, Any] = {
            "status": "ok",
            "trend": classify_trend(series, now=reference, window_days=days).value,
            "window_days": days,
            "data_points": len(series),
        }
        if definition is not None:
            payload["metric"] = definition.id
            payload["week_over_week"] = recent_trend_label(series, definition, now=reference)
        return json.dumps(payload)

    @mcp.tool
    async def body_metrics_summary(
        ctx: Context,
        height_cm: float | None = None,
        weight_kg: float | None = None,
        age: float | None = None,
        gender: str | None = None,
        activity_level: str | None = None,
    ) -> str:
        """Compute BMI, BMI category and a daily calorie target from profile attributes.

        Args:
            height_cm: Height in centimetres.
            weight_kg: Weight in kilograms.
            age: Age in years.
            gender: 'male' or 'female'.
            activity_level: sedentary, lightly_active, moderately_active, very_active
                or extremely_active.
        """
        profile = BodyProfile(
            height_cm=height_cm,
            weight_kg=weight_kg,
            age=age,
            gender=gender,
            activity_level=activity_level,
        )
        return json.dumps({"status": "ok", **body_metrics(profile)})

    @mcp.tool
    async def trend_chart(
        ctx: Context,
        points: list[dict],
        width: float | None = None,
        height: float | None = None,
        padding: float | None = None,
        selected_index: int | None = None,
    ) -> str:
        """Compute line-chart geometry: pixel points, smooth line path, area path, y-axis labels.

        Args:
            points: Records with value, label and optional color, in display order.
            width: Chart width in pixels. Defaults to the configured width.
            height: Chart height in pixels. Defaults to the configured height.
            padding: Inset on every side. Defaults to the configured padding.
            selected_index: Optional tapped point; adds its tooltip position.
        """
        try:
            geometry = build_chart_geometry(
                points,
                width=settings.chart_width if width is None else width,
                height=settings.chart_height if height is None else height,
                padding=settings.chart_padding if padding is None else padding,
            )
        except ValueError as exc:
            return _error(str(exc))

        payload: dict[str, Any] = {"status": "ok", **geometry.as_dict()}
        if selected_index is not None:
            selected = point_at(geometry, selected_index)
            if selected is None:
                payload["selected"] = None
            else:
                left, top = tooltip_anchor(selected)
                payload["selected"] = {
                    "index": selected_index,
                    "point": selected.as_dict(),
                    "tooltip": {"left": left, "top": top},
                }
        return json.dumps(payload)

    @mcp.tool
    async def health_overview(
        ctx: Context,
        readings: list[dict],
        now: str | None = None,
        recent_limit: int = 5,
    ) -> str:
        """Current health snapshot across metrics, concerns, and the latest readings.

        Args:
            readings: Records with type (metric id), value, unit, timestamp and optional metadata.
            now: Reference time (ISO 8601). Defaults to the current UTC time.
            recent_limit: How many recent readings to list.
        """
        try:
            reference = _resolve_now(now)
        except InvalidReadingError as exc:
            return _error(str(exc))

        grouped: dict[str, list[dict]] = {}
        for record in readings:
            metric_id = record.get("type") if isinstance(record, dict) else None
            if not metric_id:
                logger.warning("Skipping reading without a type")
                continue
            grouped.setdefault(metric_id, []).append(record)
        by_type = {metric_id: parse_readings(records) for metric_id, records in grouped.items()}

        current = build_current_health(by_type, now=reference, registry=registry)
        assessment = assess_health(current)
        return json.dumps({
            "status": "ok",
            "current": current.as_dict(),
            "assessment": assessment.as_dict(),
            "recent_readings": recent_readings(by_type, registry=registry, limit=recent_limit),
        })
