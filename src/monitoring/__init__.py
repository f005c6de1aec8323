"""
Monitoring infrastructure for the revenue share engine.

This package provides:
- Application metrics collection (counters, gauges, histograms)
- Structured logging with JSON output
- Request timing middleware for the HTTP API (monitoring.middleware,
  imported by the API package only)

Usage:
    from monitoring import metrics, get_logger

    metrics.increment("allocations_total")
    logger = get_logger(__name__)
    logger.info("Allocated payouts", extra={"sales": 10})
"""

from monitoring.logging import LoggingContext, configure_logging, get_logger
from monitoring.metrics import MetricsCollector, counted, metrics, timed

__all__ = [
    "MetricsCollector",
    "metrics",
    "timed",
    "counted",
    "get_logger",
    "configure_logging",
    "LoggingContext",
]
