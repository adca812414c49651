"""Telemetry package: structured logging and request correlation."""

from __future__ import annotations

from sitecache.telemetry.logging import (
    RequestIdMiddleware,
    bind_site_context,
    configure_logging,
)

__all__ = [
    "RequestIdMiddleware",
    "bind_site_context",
    "configure_logging",
]
