"""Console entry point for the dashboard tool server (``healthdash-server``)."""

from __future__ import annotations

import ipaddress
import logging

from healthdash.core.config.settings import Settings, get_settings
from healthdash.core.server.app import create_app

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def is_loopback_host(host: str) -> bool:
    """True for ``localhost`` and loopback IPv4/IPv6 literals (brackets allowed)."""
    if host.lower() == "localhost":
        return True
    try:
        return ipaddress.ip_address(host.strip("[]")).is_loopback
    except ValueError:
        return False


def check_bind_host(settings: Settings) -> None:
    """Refuse a public bind unless ``HEALTHDASH_ALLOW_INSECURE_BIND`` is set.

    The tool server has no authentication, and its inputs are health readings.
    """
    host = settings.healthdash_host
    if is_loopback_host(host):
        return
    if not settings.healthdash_allow_insecure_bind:
        raise RuntimeError(
            f"healthdash-server will not listen on non-loopback host {host!r}; "
            "set HEALTHDASH_ALLOW_INSECURE_BIND=true to allow it."
        )
    logger.warning("Listening on non-loopback host %s without authentication", host)


def run() -> None:
    """Serve the dashboard tools over streamable HTTP."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.healthdash_log_level.upper(),
        format=LOG_FORMAT,
    )
    check_bind_host(settings)

    server = create_app(settings_override=settings)
    logger.info(
        "healthdash-server listening on %s:%d",
        settings.healthdash_host,
        settings.healthdash_port,
    )
    server.run(
        transport="streamable-http",
        host=settings.healthdash_host,
        port=settings.healthdash_port,
    )


if __name__ == "__main__":
    run()
