# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Observability for quick-reserve.

Provides metric name constants and the UnifiedMetricsCollector that records
them into a dict snapshot and prometheus_client.

Usage:
    >>> from quick_reserve.observability import get_metrics_collector
    >>> collector = get_metrics_collector()
    >>> collector.get_metrics()["counters"]
"""

from .collector import (
    METRIC_DEFINITIONS,
    MetricDefinition,
    UnifiedMetricsCollector,
    get_metrics_collector,
    reset_metrics_collector,
)
from .constants import (
    ACTIVE_RESERVATIONS,
    CLAIM_ATTEMPTS,
    CLAIM_CONFLICTS_TOTAL,
    METRIC_PREFIX,
    RELEASES_TOTAL,
    RESERVE_LATENCY_SECONDS,
    RESERVE_REQUESTS_TOTAL,
    STORE_ERRORS_TOTAL,
)

__all__ = [
    "ACTIVE_RESERVATIONS",
    "CLAIM_ATTEMPTS",
    "CLAIM_CONFLICTS_TOTAL",
    # Collector
    "METRIC_DEFINITIONS",
    # Metric names
    "METRIC_PREFIX",
    "RELEASES_TOTAL",
    "RESERVE_LATENCY_SECONDS",
    "RESERVE_REQUESTS_TOTAL",
    "STORE_ERRORS_TOTAL",
    "MetricDefinition",
    "UnifiedMetricsCollector",
    "get_metrics_collector",
    "reset_metrics_collector",
]
