"""Application settings loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Health dashboard engine configuration."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Tool server
    # Loopback by default: the tools accept raw health readings.
    healthdash_host: str = "127.0.0.1"
    healthdash_port: int = 8003
    healthdash_log_level: str = "info"
    # Binding to a non-loopback host is refused unless this is set true.
    healthdash_allow_insecure_bind: bool = False

    # Aggregation windows (days)
    stats_window_days: int = 7
    trend_window_days: int = 7

    # Chart defaults (pixels)
    chart_width: int = 320
    chart_height: int = 160
    chart_padding: int = 20

    # Metric definitions; empty means the packaged YAML files
    metrics_dir: str = ""


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
