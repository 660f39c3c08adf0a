"""Data models for metric definitions."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class MetricDefinition:
    """Per-metric constants the engine needs: unit, normal range, trend wording."""

    id: str
    display_name: str
    unit: str
    normal_range: tuple[float, float] | None = None
    composite_fields: list[str] = field(default_factory=list)
    significant_change: float | None = None  # week-over-week, in ``unit``
    direction_labels: dict[str, str] = field(
        default_factory=lambda: {"up": "up", "down": "down", "stable": "stable"}
    )

    @property
    def is_composite(self) -> bool:
        return bool(self.composite_fields)
