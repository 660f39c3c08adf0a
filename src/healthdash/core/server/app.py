"""Health dashboard tool server — application factory.

This module provides:
- create_app() for testability (integration tests create fresh server instances)
- Module-level `mcp` variable for FastMCP discovery
"""

from __future__ import annotations

import logging

from fastmcp import FastMCP

from healthdash.core.config.settings import Settings, get_settings
from healthdash.core.metrics.loader import load_default_registry
from healthdash.core.metrics.registry import MetricRegistry
from healthdash.domains.health.tools.dashboard_tools import register_dashboard_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "Health Dashboard Engine"
SERVER_VERSION = "0.1.0"


def create_app(
    *,
    settings_override: Settings | None = None,
    registry_override: MetricRegistry | None = None,
) -> FastMCP:
    """Create and configure the health dashboard tool server.

    1. Creates the FastMCP server instance
    2. Loads metric definitions into a registry
    3. Registers the health check and dashboard tools
    """
    settings = settings_override or get_settings()

    server = FastMCP(
        SERVER_NAME,
        instructions=(
            "Computes dashboard statistics, trend directions, body-composition "
            "metrics and line-chart geometry from health readings you supply. "
            "Readings are processed in memory and never stored."
        ),
    )

    if registry_override is not None:
        registry = registry_override
    else:
        registry = load_default_registry(settings.metrics_dir or None)
    logger.info("Metric registry ready with %d definitions", len(registry))

    @server.tool
    def health_check() -> dict:
        """Check server health and return basic status information."""
        return {
            "status": "ok",
            "server": SERVER_NAME,
            "version": SERVER_VERSION,
            "metrics_loaded": sorted(m.id for m in registry.all()),
            "stats_window_days": settings.stats_window_days,
            "trend_window_days": settings.trend_window_days,
        }

    register_dashboard_tools(server, registry, settings)
    logger.info("Dashboard tools registered")

    return server


# Module-level instance for FastMCP discovery.
# Lazy: only created when this attribute is accessed (not when tests import create_app).
def __getattr__(name: str):
    if name == "mcp":
        global mcp  # noqa: PLW0603
        mcp = create_app()
        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
