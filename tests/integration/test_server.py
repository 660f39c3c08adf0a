"""Integration tests for the health dashboard tool server."""

from __future__ import annotations

import asyncio
import json

import pytest
from fastmcp import Client

from healthdash.core.server.app import create_app


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio required)."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def _payload(result) -> dict:
    """Decode the JSON text returned by a tool call."""
    blocks = getattr(result, "content", result)
    text = "".join(getattr(block, "text", "") for block in blocks)
    return json.loads(text)


ALL_EXPECTED_TOOLS = [
    "health_check",
    "reading_statistics",
    "metric_trend",
    "body_metrics_summary",
    "trend_chart",
    "health_overview",
]

NOW = "2026-03-01T12:00:00Z"


@pytest.fixture
def client(metric_registry):
    mcp = create_app(registry_override=metric_registry)
    return Client(mcp)


def _call(client, tool: str, arguments: dict):
    async def _go():
        async with client:
            return await client.call_tool(tool, arguments)
    return _run(_go())


def test_server_starts_and_lists_tools(client):
    async def _check():
        async with client:
            tools = await client.list_tools()
            tool_names = [t.name for t in tools]
            for expected in ALL_EXPECTED_TOOLS:
                assert expected in tool_names, f"Missing tool: {expected}"
    _run(_check())


def test_health_check_returns_ok(client):
    result = _call(client, "health_check", {})
    assert "ok" in str(result)
    assert "blood_sugar" in str(result)


def test_reading_statistics(client):
    readings = [
        {"value": 65, "unit": "mg/dL", "timestamp": "2026-02-28T08:00:00Z"},
        {"value": 90, "unit": "mg/dL", "timestamp": "2026-02-27T08:00:00Z"},
        {"value": 150, "unit": "mg/dL", "timestamp": "2026-02-26T08:00:00Z"},
        {"value": "oops", "unit": "mg/dL", "timestamp": "2026-02-26T09:00:00Z"},
    ]
    payload = _payload(_call(client, "reading_statistics", {
        "metric": "blood_sugar", "readings": readings, "now": NOW,
    }))
    assert payload["status"] == "ok"
    assert payload["statistics"]["total_count"] == 3
    assert payload["statistics"]["in_range_percent"] == 33
    assert payload["statistics"]["last_value"] == 65
    assert payload["averages"]["value"]["display"] == "102"


def test_reading_statistics_unknown_metric(client):
    payload = _payload(_call(client, "reading_statistics", {
        "metric": "cholesterol", "readings": [], "now": NOW,
    }))
    assert payload["status"] == "error"
    assert "cholesterol" in payload["error"]


def test_metric_trend(client):
    readings = [
        {"value": 100, "unit": "mg/dL", "timestamp": "2026-02-24T08:00:00Z"},
        {"value": 100, "unit": "mg/dL", "timestamp": "2026-02-25T08:00:00Z"},
        {"value": 120, "unit": "mg/dL", "timestamp": "2026-02-28T08:00:00Z"},
        {"value": 120, "unit": "mg/dL", "timestamp": "2026-03-01T08:00:00Z"},
    ]
    payload = _payload(_call(client, "metric_trend", {
        "readings": readings, "metric": "blood_sugar", "now": NOW,
    }))
    assert payload["trend"] == "up"
    assert payload["week_over_week"] == "unknown"


def test_body_metrics_summary(client):
    payload = _payload(_call(client, "body_metrics_summary", {
        "height_cm": 175, "weight_kg": 70,
    }))
    assert payload["bmi"] == 22.9
    assert payload["bmi_category"] == "Normal"
    assert payload["target_calories"] == 2000


def test_trend_chart_with_selection(client):
    payload = _payload(_call(client, "trend_chart", {
        "points": [{"value": 0, "label": "Mon"}, {"value": 0, "label": "Tue"}],
        "width": 340,
        "height": 160,
        "padding": 20,
        "selected_index": 1,
    }))
    assert payload["line_path"] == "M 20 80 C 120 80, 220 80, 320 80"
    assert payload["area_path"].endswith("Z")
    assert payload["selected"]["point"]["label"] == "Tue"
    assert payload["selected"]["tooltip"] == {"left": 280, "top": 30}


def test_trend_chart_rejects_bad_value(client):
    payload = _payload(_call(client, "trend_chart", {
        "points": [{"label": "Mon"}],
    }))
    assert payload["status"] == "error"


def test_trend_chart_rejects_explicit_zero_width(client):
    payload = _payload(_call(client, "trend_chart", {
        "points": [{"value": 1, "label": "Mon"}],
        "width": 0,
    }))
    assert payload["status"] == "error"


def test_reading_statistics_honours_explicit_zero_window(client):
    readings = [{"value": 90, "unit": "mg/dL", "timestamp": "2026-02-28T08:00:00Z"}]
    payload = _payload(_call(client, "reading_statistics", {
        "metric": "blood_sugar", "readings": readings, "now": NOW, "window_days": 0,
    }))
    assert payload["window_days"] == 0
    assert payload["statistics"]["window_count"] == 0
    assert payload["averages"]["value"]["display"] == "--"


def test_health_overview(client):
    readings = [
        {"type": "blood_sugar", "value": 190, "unit": "mg/dL", "timestamp": "2026-03-01T07:00:00Z"},
        {"type": "blood_pressure", "value": 145, "unit": "mmHg",
         "timestamp": "2026-02-28T07:00:00Z", "metadata": {"systolic": 145, "diastolic": 92}},
        {"value": 180, "unit": "lbs", "timestamp": "2026-02-28T07:00:00Z"},
    ]
    payload = _payload(_call(client, "health_overview", {"readings": readings, "now": NOW}))
    assert payload["assessment"]["needs_attention"] is True
    assert payload["assessment"]["primary_concerns"] == [
        "Very high blood sugar",
        "High blood pressure",
    ]
    assert payload["recent_readings"][1]["value"] == "145/92"


def test_health_overview_survives_malformed_metadata(client):
    readings = [
        {"type": "blood_sugar", "value": 100, "unit": "mg/dL",
         "timestamp": "2026-03-01T07:00:00Z", "metadata": "fasting"},
        {"type": "blood_pressure", "value": 150, "unit": "mmHg",
         "timestamp": "2026-02-28T07:00:00Z", "metadata": {"systolic": "150", "diastolic": "95"}},
    ]
    payload = _payload(_call(client, "health_overview", {"readings": readings, "now": NOW}))
    assert payload["status"] == "ok"
    assert payload["current"]["last_blood_sugar"] is None
    assert payload["current"]["last_blood_pressure"] == {"systolic": 120, "diastolic": 80}
