# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Metric name constants for quick-reserve.

All metric names follow Prometheus naming conventions:
    - Counters end in ``_total``
    - Histograms of durations end in ``_seconds``
    - Everything is prefixed with ``quick_reserve``

Usage:
    >>> from quick_reserve.observability.constants import RESERVE_REQUESTS_TOTAL
    >>> collector.inc_counter(RESERVE_REQUESTS_TOTAL,
    ...                       labels={"device_type": "Server", "outcome": "reserved"})
"""

METRIC_PREFIX = "quick_reserve"


# =============================================================================
# Allocation Metrics (engine/allocator.py)
# =============================================================================

RESERVE_REQUESTS_TOTAL = f"{METRIC_PREFIX}_reserve_requests_total"
"""Reserve calls by device type and outcome."""

CLAIM_CONFLICTS_TOTAL = f"{METRIC_PREFIX}_claim_conflicts_total"
"""Claims lost to a concurrent caller and absorbed by the retry loop."""

CLAIM_ATTEMPTS = f"{METRIC_PREFIX}_claim_attempts"
"""Claim attempts needed per reserve call (histogram)."""

RESERVE_LATENCY_SECONDS = f"{METRIC_PREFIX}_reserve_latency_seconds"
"""Wall time of a reserve call (histogram)."""

RELEASES_TOTAL = f"{METRIC_PREFIX}_releases_total"
"""Release calls by outcome (released or noop)."""


# =============================================================================
# Store Metrics
# =============================================================================

STORE_ERRORS_TOTAL = f"{METRIC_PREFIX}_store_errors_total"
"""Store failures surfaced as StoreUnavailableError."""


# =============================================================================
# Listing Metrics (service.py)
# =============================================================================

ACTIVE_RESERVATIONS = f"{METRIC_PREFIX}_active_reservations"
"""Active reservations per device type at the last listing (gauge)."""


# =============================================================================
# Outcome label values
# =============================================================================

OUTCOME_RESERVED = "reserved"
OUTCOME_NO_AVAILABLE = "no_available"
OUTCOME_VALIDATION_ERROR = "validation_error"
OUTCOME_STORE_UNAVAILABLE = "store_unavailable"
OUTCOME_RELEASED = "released"
OUTCOME_NOOP = "noop"


# =============================================================================
# Histogram Buckets
# =============================================================================

LATENCY_BUCKETS: list[float] = [
    0.001,
    0.005,
    0.01,
    0.025,
    0.05,
    0.1,
    0.25,
    0.5,
    1.0,
    2.5,
]
"""Latency buckets for reserve calls (in seconds)."""

ATTEMPT_BUCKETS: list[float] = [1.0, 2.0, 3.0, 5.0, 10.0, 25.0, 50.0]
"""Buckets for claim attempts per reserve call."""


__all__ = [
    "ACTIVE_RESERVATIONS",
    "ATTEMPT_BUCKETS",
    "CLAIM_ATTEMPTS",
    "CLAIM_CONFLICTS_TOTAL",
    "LATENCY_BUCKETS",
    "METRIC_PREFIX",
    "OUTCOME_NOOP",
    "OUTCOME_NO_AVAILABLE",
    "OUTCOME_RELEASED",
    "OUTCOME_RESERVED",
    "OUTCOME_STORE_UNAVAILABLE",
    "OUTCOME_VALIDATION_ERROR",
    "RELEASES_TOTAL",
    "RESERVE_LATENCY_SECONDS",
    "RESERVE_REQUESTS_TOTAL",
    "STORE_ERRORS_TOTAL",
]
