"""Pixel-space geometry for the trend line chart.

Maps ``DataPoint`` values into screen coordinates (y grows downward), then
builds an SVG path that passes through every point using one cubic Bézier
per adjacent pair. Control points sit at one third and two thirds of the
horizontal gap, the first at the current point's height and the second at the
next point's height. The area path closes that curve down to the baseline.

Every function is pure; callers own selection state and memoization.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from healthdash.domains.health.domain_logic.reading_models import round_half_up

logger = logging.getLogger(__name__)

DEFAULT_PADDING = 20
HEADROOM = 1.1
FOOTROOM = 0.9
Y_AXIS_TICKS = 5
TOOLTIP_OFFSET_X = 40
TOOLTIP_OFFSET_Y = 50


class InvalidDataPointError(ValueError):
    """Raised when a chart value is not a finite number."""


@dataclass(frozen=True)
class DataPoint:
    """One chart input: a value and its x-axis label."""

    value: float
    label: str
    color: str | None = None

    def __post_init__(self) -> None:
        value = self.value
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise InvalidDataPointError(f"Chart value must be a finite number, got {value!r}")
        object.__setattr__(self, "value", float(value))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DataPoint:
        return cls(
            value=data.get("value"),
            label=str(data.get("label", "")),
            color=data.get("color"),
        )


@dataclass(frozen=True)
class Point:
    """A ``DataPoint`` placed in chart pixel space."""

    value: float
    label: str
    x: float
    y: float
    color: str | None = None

    @property
    def data_point(self) -> DataPoint:
        return DataPoint(value=self.value, label=self.label, color=self.color)

    def as_dict(self) -> dict[str, Any]:
        return {
            "value": self.value,
            "label": self.label,
            "color": self.color,
            "x": self.x,
            "y": self.y,
        }


@dataclass(frozen=True)
class BezierSegment:
    """Cubic Bézier from ``start`` to ``end`` with two control points."""

    start: tuple[float, float]
    control1: tuple[float, float]
    control2: tuple[float, float]
    end: tuple[float, float]

    def evaluate(self, t: float) -> tuple[float, float]:
        """Point on the curve at parameter ``t`` in [0, 1]."""
        u = 1 - t
        b0, b1, b2, b3 = u * u * u, 3 * u * u * t, 3 * u * t * t, t * t * t
        x = b0 * self.start[0] + b1 * self.control1[0] + b2 * self.control2[0] + b3 * self.end[0]
        y = b0 * self.start[1] + b1 * self.control1[1] + b2 * self.control2[1] + b3 * self.end[1]
        return x, y

    def to_path(self) -> str:
        return (
            f" C {_fmt(self.control1[0])} {_fmt(self.control1[1])},"
            f" {_fmt(self.control2[0])} {_fmt(self.control2[1])},"
            f" {_fmt(self.end[0])} {_fmt(self.end[1])}"
        )


@dataclass(frozen=True)
class ChartGeometry:
    """Everything the renderer needs for one chart."""

    points: list[Point] = field(default_factory=list)
    line_path: str = ""
    area_path: str = ""
    y_axis_labels: list[int] = field(default_factory=list)
    max_value: float | None = None
    min_value: float | None = None
    baseline_y: float | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "points": [p.as_dict() for p in self.points],
            "line_path": self.line_path,
            "area_path": self.area_path,
            "y_axis_labels": list(self.y_axis_labels),
            "max_value": self.max_value,
            "min_value": self.min_value,
            "baseline_y": self.baseline_y,
        }


def _fmt(number: float) -> str:
    """Format a coordinate the way a JS template literal would (``20`` not ``20.0``)."""
    if float(number).is_integer() and abs(number) < 1e21:
        return str(int(number))
    return repr(float(number))


# ---------------------------------------------------------------------------
# Coordinate mapping
# ---------------------------------------------------------------------------

def value_bounds(values: list[float]) -> tuple[float, float]:
    """``(max * 1.1, min * 0.9)`` so extremes are not drawn on the plot edge."""
    return max(values) * HEADROOM, min(values) * FOOTROOM


def layout_points(
    data: Iterable[DataPoint],
    *,
    width: float,
    height: float,
    padding: float = DEFAULT_PADDING,
) -> list[Point]:
    """Place each data point in pixel space."""
    items = list(data)
    if not items:
        return []

    max_value, min_value = value_bounds([d.value for d in items])
    value_range = max_value - min_value
    plot_width = width - 2 * padding
    plot_height = height - 2 * padding
    count = len(items)

    if count == 1:
        logger.debug("Single data point; centring horizontally")
    if value_range == 0:
        logger.debug("Zero value range; centring vertically")

    points: list[Point] = []
    for index, item in enumerate(items):
        if count == 1:
            x = width / 2
        else:
            x = padding + index * plot_width / (count - 1)
        if value_range == 0:
            y = height / 2
        else:
            y = height - padding - ((item.value - min_value) / value_range) * plot_height
        points.append(Point(value=item.value, label=item.label, x=x, y=y, color=item.color))
    return points


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

def curve_segments(points: list[Point]) -> list[BezierSegment]:
    """One Bézier per adjacent pair of points."""
    segments: list[BezierSegment] = []
    for current, nxt in zip(points, points[1:]):
        dx = nxt.x - current.x
        segments.append(BezierSegment(
            start=(current.x, current.y),
            control1=(current.x + dx / 3, current.y),
            control2=(current.x + 2 * dx / 3, nxt.y),
            end=(nxt.x, nxt.y),
        ))
    return segments


def smooth_path(points: list[Point]) -> str:
    """SVG path data for the smooth line; empty string for no points."""
    if not points:
        return ""
    first = points[0]
    path = f"M {_fmt(first.x)} {_fmt(first.y)}"
    for segment in curve_segments(points):
        path += segment.to_path()
    return path


def area_path(points: list[Point], baseline_y: float) -> str:
    """The smooth line closed down to ``baseline_y`` for a filled area."""
    if not points:
        return ""
    first, last = points[0], points[-1]
    return (
        f"{smooth_path(points)} L {_fmt(last.x)} {_fmt(baseline_y)}"
        f" L {_fmt(first.x)} {_fmt(baseline_y)} Z"
    )


def y_axis_labels(max_value: float, min_value: float, ticks: int = Y_AXIS_TICKS) -> list[int]:
    """Evenly spaced integer tick labels from ``max_value`` down to ``min_value``."""
    if ticks < 2:
        raise ValueError(f"Need at least two y-axis ticks, got {ticks!r}")
    value_range = max_value - min_value
    steps = ticks - 1
    return [int(round_half_up(max_value - i * value_range / steps)) for i in range(ticks)]


def build_chart_geometry(
    data: Iterable[DataPoint | Mapping[str, Any]],
    *,
    width: float,
    height: float,
    padding: float = DEFAULT_PADDING,
) -> ChartGeometry:
    """Compute points, line and area paths, and y-axis labels.

    Args:
        data: Points in display order (mappings are converted with
            ``DataPoint.from_dict``).
        width: Chart width in pixels.
        height: Chart height in pixels.
        padding: Inset applied on every side.

    Returns:
        A ``ChartGeometry``; empty when ``data`` is empty.

    Raises:
        InvalidDataPointError: If any value is not a finite number.
        ValueError: If width or height is not positive.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Chart dimensions must be positive, got {width!r}x{height!r}")

    items = [d if isinstance(d, DataPoint) else DataPoint.from_dict(d) for d in data]
    if not items:
        return ChartGeometry()

    max_value, min_value = value_bounds([d.value for d in items])
    points = layout_points(items, width=width, height=height, padding=padding)
    baseline_y = height - padding

    return ChartGeometry(
        points=points,
        line_path=smooth_path(points),
        area_path=area_path(points, baseline_y),
        y_axis_labels=y_axis_labels(max_value, min_value),
        max_value=max_value,
        min_value=min_value,
        baseline_y=baseline_y,
    )


# ---------------------------------------------------------------------------
# Interaction
# ---------------------------------------------------------------------------

def point_at(geometry: ChartGeometry, index: int) -> Point | None:
    """The point for a tapped x-axis label, or None if the index is out of range."""
    if 0 <= index < len(geometry.points):
        return geometry.points[index]
    return None


def nearest_point_index(geometry: ChartGeometry, x: float) -> int | None:
    """Index of the point horizontally closest to ``x``; ties go to the lower index."""
    best_index: int | None = None
    best_distance = math.inf
    for index, point in enumerate(geometry.points):
        distance = abs(point.x - x)
        if distance < best_distance:
            best_index, best_distance = index, distance
    return best_index


def tooltip_anchor(
    point: Point,
    *,
    offset_x: float = TOOLTIP_OFFSET_X,
    offset_y: float = TOOLTIP_OFFSET_Y,
) -> tuple[float, float]:
    """Top-left ``(left, top)`` of a tooltip drawn above and centred on ``point``."""
    return point.x - offset_x, point.y - offset_y
