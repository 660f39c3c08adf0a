"""Tests for the current-health overview and attention check."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from healthdash.domains.health.domain_logic.health_summary import (
    CurrentHealth,
    assess_health,
    build_current_health,
    format_reading,
    recent_readings,
)
from healthdash.domains.health.domain_logic.reading_models import Reading

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _reading(value: float, days_ago: float, unit: str = "mg/dL", **metadata) -> Reading:
    return Reading(
        value=value,
        unit=unit,
        timestamp=NOW - timedelta(days=days_ago),
        metadata=metadata,
    )


class TestBuildCurrentHealth:
    def test_empty(self, metric_registry):
        current = build_current_health({}, now=NOW, registry=metric_registry)
        assert current == CurrentHealth()
        assert current.blood_sugar_trend == "unknown"
        assert current.has_recent_data is False

    def test_latest_values_and_trends(self, metric_registry):
        readings = {
            "blood_sugar": [_reading(100, 10), _reading(104, 9), _reading(125, 2), _reading(121, 1)],
            "weight": [_reading(180.0, 10, "lbs"), _reading(181.5, 1, "lbs")],
            "blood_pressure": [_reading(128, 4, "mmHg", systolic=128, diastolic=82)],
        }
        current = build_current_health(readings, now=NOW, registry=metric_registry)
        assert current.last_blood_sugar == 121
        assert current.last_weight == 181.5
        assert current.last_blood_pressure == {"systolic": 128, "diastolic": 82}
        assert current.blood_sugar_trend == "declining"
        assert current.weight_trend == "gaining"
        assert current.has_recent_data is True
        assert current.last_updated == NOW - timedelta(days=1)

    def test_blood_pressure_defaults_when_metadata_missing(self, metric_registry):
        readings = {"blood_pressure": [_reading(130, 1, "mmHg")]}
        current = build_current_health(readings, now=NOW, registry=metric_registry)
        assert current.last_blood_pressure == {"systolic": 120, "diastolic": 80}

    def test_blood_pressure_ignores_non_numeric_metadata(self, metric_registry):
        readings = {"blood_pressure": [_reading(145, 1, "mmHg", systolic="145", diastolic=95)]}
        current = build_current_health(readings, now=NOW, registry=metric_registry)
        assert current.last_blood_pressure == {"systolic": 120, "diastolic": 95.0}
        assert assess_health(current).primary_concerns == ["High blood pressure"]

    def test_no_recent_data_after_three_days(self, metric_registry):
        readings = {"weight": [_reading(180, 4, "lbs")]}
        current = build_current_health(readings, now=NOW, registry=metric_registry)
        assert current.has_recent_data is False
        assert current.weight_trend == "unknown"

    def test_as_dict_serializes_timestamp(self, metric_registry):
        readings = {"blood_sugar": [_reading(100, 0)]}
        payload = build_current_health(readings, now=NOW, registry=metric_registry).as_dict()
        assert payload["last_updated"] == NOW.isoformat()
        assert payload["recent_trends"] == {"blood_sugar": "unknown", "weight": "unknown"}


class TestAssessHealth:
    def test_normal_values_need_no_attention(self):
        current = CurrentHealth(
            last_blood_sugar=110,
            last_blood_pressure={"systolic": 118, "diastolic": 76},
            weight_trend="stable",
        )
        assessment = assess_health(current)
        assert assessment.needs_attention is False
        assert assessment.primary_concerns == []

    def test_very_high_blood_sugar(self):
        assessment = assess_health(CurrentHealth(last_blood_sugar=190))
        assert assessment.needs_attention is True
        assert assessment.primary_concerns == ["Very high blood sugar"]

    def test_elevated_and_low_blood_sugar(self):
        assert assess_health(CurrentHealth(last_blood_sugar=150)).primary_concerns == [
            "Elevated blood sugar"
        ]
        assert assess_health(CurrentHealth(last_blood_sugar=65)).primary_concerns == [
            "Low blood sugar"
        ]

    def test_high_blood_pressure_on_either_number(self):
        systolic = assess_health(
            CurrentHealth(last_blood_pressure={"systolic": 140, "diastolic": 70})
        )
        diastolic = assess_health(
            CurrentHealth(last_blood_pressure={"systolic": 120, "diastolic": 90})
        )
        assert systolic.primary_concerns == ["High blood pressure"]
        assert diastolic.needs_attention is True

    def test_weight_gain_is_mentioned_without_attention(self):
        assessment = assess_health(CurrentHealth(weight_trend="gaining"))
        assert assessment.primary_concerns == ["Recent weight gain"]
        assert assessment.needs_attention is False

    def test_last_checkup_mirrors_last_update(self):
        assessment = assess_health(CurrentHealth(last_updated=NOW))
        assert assessment.last_checkup == NOW


class TestDisplayRows:
    def test_format_blood_pressure(self, metric_registry):
        reading = _reading(120, 0, "mmHg", systolic=120, diastolic=80)
        assert format_reading(reading, metric_registry.get("blood_pressure")) == "120/80"

    def test_format_plain_value(self, metric_registry):
        assert format_reading(_reading(180.5, 0, "lbs"), metric_registry.get("weight")) == "180.5 lbs"
        assert format_reading(_reading(98, 0)) == "98 mg/dL"

    def test_recent_readings_newest_first_with_limit(self, metric_registry):
        readings = {
            "blood_sugar": [_reading(100, 3), _reading(105, 1, notes="after lunch")],
            "weight": [_reading(180, 2, "lbs")],
        }
        rows = recent_readings(readings, registry=metric_registry, limit=2)
        assert [row["type"] for row in rows] == ["blood_sugar", "weight"]
        assert rows[0]["value"] == "105 mg/dL"
        assert rows[0]["notes"] == "after lunch"
