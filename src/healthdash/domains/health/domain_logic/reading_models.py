"""Reading value types and series helpers shared by the aggregation engine.

A reading series is any iterable of :class:`Reading`. Nothing here assumes an
order: callers sort explicitly before windowing or splitting.
"""

from __future__ import annotations

import logging
import math
import statistics
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Iterable, Mapping

logger = logging.getLogger(__name__)


class InvalidReadingError(ValueError):
    """Raised when a reading value or timestamp cannot be used."""


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round with halves going up, as the mobile dashboard does (not banker's rounding)."""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def _finite_number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidReadingError(f"Reading value must be a number, got {value!r}")
    number = float(value)
    if not math.isfinite(number):
        raise InvalidReadingError(f"Reading value must be finite, got {value!r}")
    return number


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 string (``Z`` suffix allowed) or datetime; naive values become UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise InvalidReadingError(f"Invalid timestamp: {value!r}") from exc
    else:
        raise InvalidReadingError(f"Invalid timestamp: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class Reading:
    """One timestamped health observation.

    Blood pressure stores its composite value under ``metadata``
    (``{"systolic": 120, "diastolic": 80}``) with ``value`` holding systolic.
    """

    value: float
    unit: str
    timestamp: datetime
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", _finite_number(self.value))
        object.__setattr__(self, "timestamp", parse_timestamp(self.timestamp))
        metadata = self.metadata or {}
        if not isinstance(metadata, Mapping):
            raise InvalidReadingError(f"Reading metadata must be a mapping, got {metadata!r}")
        object.__setattr__(self, "metadata", dict(metadata))

    @classmethod
    def from_dict(cls, record: Mapping[str, Any]) -> Reading:
        """Build a reading from a persistence record.

        Raises:
            InvalidReadingError: If ``value`` or ``timestamp`` is missing or malformed.
        """
        if "value" not in record or "timestamp" not in record:
            raise InvalidReadingError("Reading record needs 'value' and 'timestamp'")
        return cls(
            value=record["value"],
            unit=str(record.get("unit") or ""),
            timestamp=record["timestamp"],
            metadata=record.get("metadata") or {},
        )

    def composite(self, fields: Iterable[str]) -> dict[str, Any] | None:
        """Return the named metadata fields, or None if any is missing."""
        names = list(fields)
        if not names:
            return None
        if any(self.metadata.get(name) is None for name in names):
            return None
        return {name: self.metadata[name] for name in names}

    def metadata_number(self, name: str) -> float | None:
        """A metadata field as a finite float, or None if missing or not numeric."""
        value = self.metadata.get(name)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            return None
        return float(value)


class Trend(str, Enum):
    """Direction of a metric over a recent window."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"


@dataclass(frozen=True)
class Statistics:
    """Dashboard summary for one reading series."""

    total_count: int
    window_count: int
    in_range_percent: int
    last_value: float | None
    last_composite: dict[str, Any] | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "total_count": self.total_count,
            "window_count": self.window_count,
            "in_range_percent": self.in_range_percent,
            "last_value": self.last_value,
            "last_composite": self.last_composite,
        }


# ---------------------------------------------------------------------------
# Series helpers
# ---------------------------------------------------------------------------

def sort_chronologically(readings: Iterable[Reading]) -> list[Reading]:
    """Oldest first. Stable for equal timestamps."""
    return sorted(readings, key=lambda r: r.timestamp)


def latest_reading(readings: Iterable[Reading]) -> Reading | None:
    """The reading with the greatest timestamp, or None for an empty series."""
    latest: Reading | None = None
    for reading in readings:
        if latest is None or reading.timestamp > latest.timestamp:
            latest = reading
    return latest


def within_window(
    readings: Iterable[Reading],
    *,
    now: datetime,
    days: float,
) -> list[Reading]:
    """Readings with ``timestamp >= now - days``."""
    cutoff = parse_timestamp(now) - timedelta(days=days)
    return [r for r in readings if r.timestamp >= cutoff]


def mean(values: list[float]) -> float | None:
    """Arithmetic mean, None for an empty list."""
    if not values:
        return None
    return statistics.mean(values)


def parse_readings(
    records: Iterable[Mapping[str, Any] | Reading],
    *,
    strict: bool = False,
) -> list[Reading]:
    """Convert raw records to readings.

    With ``strict=False`` malformed records are dropped and logged; with
    ``strict=True`` the first malformed record raises ``InvalidReadingError``.
    """
    readings: list[Reading] = []
    dropped = 0
    for record in records:
        if isinstance(record, Reading):
            readings.append(record)
            continue
        try:
            readings.append(Reading.from_dict(record))
        except (InvalidReadingError, TypeError) as exc:
            if strict:
                if isinstance(exc, InvalidReadingError):
                    raise
                raise InvalidReadingError(str(exc)) from exc
            dropped += 1
            logger.debug("Dropping malformed reading record: %s", exc)
    if dropped:
        logger.warning("Dropped %d malformed reading record(s)", dropped)
    return readings
