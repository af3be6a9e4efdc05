# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Unified metrics collector backed by a dict snapshot and prometheus_client.

This module provides the UnifiedMetricsCollector class that serves as the
single place quick-reserve records metrics.

Features:
    1. Thread-safe counter/gauge/histogram operations
    2. Prometheus metric registration on first use
    3. Dict snapshot for JSON export and tests
    4. Label cardinality protection (max 1000 unique combinations per metric)
    5. Optional HTTP server for Prometheus scraping

Usage:
    >>> from quick_reserve.observability.collector import get_metrics_collector
    >>> collector = get_metrics_collector()
    >>> collector.inc_counter('quick_reserve_claim_conflicts_total',
    ...                       labels={'device_type': 'Server'})
    >>> metrics = collector.get_metrics()
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, ClassVar

from prometheus_client import REGISTRY, Counter, Gauge, Histogram, start_http_server

from .constants import (
    ACTIVE_RESERVATIONS,
    ATTEMPT_BUCKETS,
    CLAIM_ATTEMPTS,
    CLAIM_CONFLICTS_TOTAL,
    LATENCY_BUCKETS,
    RELEASES_TOTAL,
    RESERVE_LATENCY_SECONDS,
    RESERVE_REQUESTS_TOTAL,
    STORE_ERRORS_TOTAL,
)

logger = logging.getLogger(__name__)


@dataclass
class MetricDefinition:
    """
    Definition for a metric that can be instantiated.

    This dataclass defines the schema for metrics, including their type,
    description, labels, and histogram buckets.
    """

    name: str
    metric_type: str  # 'counter', 'gauge', 'histogram'
    description: str
    label_names: tuple[str, ...] = ()
    buckets: list[float] | None = None


METRIC_DEFINITIONS: dict[str, MetricDefinition] = {
    RESERVE_REQUESTS_TOTAL: MetricDefinition(
        RESERVE_REQUESTS_TOTAL,
        "counter",
        "Total reserve calls",
        ("device_type", "outcome"),
    ),
    CLAIM_CONFLICTS_TOTAL: MetricDefinition(
        CLAIM_CONFLICTS_TOTAL,
        "counter",
        "Total claims lost to a concurrent caller",
        ("device_type",),
    ),
    RELEASES_TOTAL: MetricDefinition(
        RELEASES_TOTAL,
        "counter",
        "Total release calls",
        ("outcome",),
    ),
    STORE_ERRORS_TOTAL: MetricDefinition(
        STORE_ERRORS_TOTAL,
        "counter",
        "Total reservation store failures",
        ("operation",),
    ),
    ACTIVE_RESERVATIONS: MetricDefinition(
        ACTIVE_RESERVATIONS,
        "gauge",
        "Active reservations at the last listing",
        ("device_type",),
    ),
    CLAIM_ATTEMPTS: MetricDefinition(
        CLAIM_ATTEMPTS,
        "histogram",
        "Claim attempts per reserve call",
        ("device_type",),
        buckets=ATTEMPT_BUCKETS,
    ),
    RESERVE_LATENCY_SECONDS: MetricDefinition(
        RESERVE_LATENCY_SECONDS,
        "histogram",
        "Reserve call latency",
        ("outcome",),
        buckets=LATENCY_BUCKETS,
    ),
}


class UnifiedMetricsCollector:
    """
    Metrics collector keeping a dict snapshot alongside Prometheus metrics.

    Thread Safety:
        All dict updates hold an RLock. Prometheus client objects are
        thread-safe on their own.

    Cardinality Protection:
        At most MAX_LABEL_COMBINATIONS label combinations are tracked per
        metric. Device types are user-defined, so this bounds the damage of
        a runaway tagging script.

    Example:
        >>> collector = UnifiedMetricsCollector(registry=CollectorRegistry())
        >>> collector.inc_counter('quick_reserve_releases_total',
        ...                       labels={'outcome': 'released'})
    """

    MAX_LABEL_COMBINATIONS: ClassVar[int] = 1000

    def __init__(
        self,
        enable_prometheus: bool = True,
        registry: Any | None = None,
    ) -> None:
        """
        Initialize the metrics collector.

        Args:
            enable_prometheus: Whether to register Prometheus metrics
            registry: Optional Prometheus CollectorRegistry (tests pass a
                fresh one to avoid duplicate registration)
        """
        self._enable_prometheus = enable_prometheus
        self._registry = registry if registry is not None else REGISTRY

        self._counters: dict[str, dict[str, int]] = defaultdict(
            lambda: defaultdict(int)
        )
        self._gauges: dict[str, dict[str, float]] = defaultdict(
            lambda: defaultdict(float)
        )
        self._histograms: dict[str, dict[str, list[float]]] = defaultdict(
            lambda: defaultdict(list)
        )
        self._label_combinations: dict[str, set[str]] = defaultdict(set)
        self._lock = threading.RLock()

        self._prom_metrics: dict[str, Any] = {}
        self._server_running = False

        logger.debug(
            f"UnifiedMetricsCollector initialized "
            f"(prometheus={'enabled' if self._enable_prometheus else 'disabled'})"
        )

    def _labels_to_key(self, labels: dict[str, str] | None) -> str:
        """Convert labels dict to a stable string key."""
        if not labels:
            return ""
        return ",".join(f"{k}={v}" for k, v in sorted(labels.items()))

    def _check_cardinality(self, name: str, label_key: str) -> bool:
        if label_key in self._label_combinations[name]:
            return True
        if len(self._label_combinations[name]) >= self.MAX_LABEL_COMBINATIONS:
            logger.warning(
                f"Cardinality limit ({self.MAX_LABEL_COMBINATIONS}) reached "
                f"for metric {name}. Dropping label combination: {label_key}"
            )
            return False
        self._label_combinations[name].add(label_key)
        return True

    def _get_or_create_prom_metric(self, name: str, metric_type: str) -> Any | None:
        """Get or create the Prometheus object for a metric name."""
        if not self._enable_prometheus:
            return None

        with self._lock:
            if name in self._prom_metrics:
                return self._prom_metrics[name]

            defn = METRIC_DEFINITIONS.get(name) or MetricDefinition(
                name, metric_type, f"Dynamic {metric_type}: {name}"
            )
            try:
                if metric_type == "counter":
                    metric: Any = Counter(
                        name,
                        defn.description,
                        list(defn.label_names),
                        registry=self._registry,
                    )
                elif metric_type == "gauge":
                    metric = Gauge(
                        name,
                        defn.description,
                        list(defn.label_names),
                        registry=self._registry,
                    )
                else:
                    metric = Histogram(
                        name,
                        defn.description,
                        list(defn.label_names),
                        buckets=defn.buckets or LATENCY_BUCKETS,
                        registry=self._registry,
                    )
            except ValueError as e:
                # Duplicate registration in the same registry
                logger.warning(f"Failed to create Prometheus {metric_type} {name}: {e}")
                return None

            self._prom_metrics[name] = metric
            return metric

    def _update_prometheus(
        self,
        name: str,
        metric_type: str,
        method: str,
        value: float,
        labels: dict[str, str] | None,
    ) -> None:
        metric = self._get_or_create_prom_metric(name, metric_type)
        if metric is None:
            return
        try:
            target = metric.labels(**labels) if labels else metric
            getattr(target, method)(value)
        except ValueError as e:
            logger.debug(f"Prometheus {metric_type} update failed for {name}: {e}")

    # === Counter Operations ===

    def inc_counter(
        self,
        name: str,
        value: int = 1,
        labels: dict[str, str] | None = None,
    ) -> None:
        """
        Increment a counter metric.

        Raises:
            ValueError: If value is negative
        """
        if value < 0:
            raise ValueError("Counter increment must be non-negative")

        label_key = self._labels_to_key(labels)
        with self._lock:
            if not self._check_cardinality(name, label_key):
                return
            self._counters[name][label_key] += value

        self._update_prometheus(name, "counter", "inc", value, labels)

    # === Gauge Operations ===

    def set_gauge(
        self,
        name: str,
        value: float,
        labels: dict[str, str] | None = None,
    ) -> None:
        label_key = self._labels_to_key(labels)
        with self._lock:
            if not self._check_cardinality(name, label_key):
                return
            self._gauges[name][label_key] = value

        self._update_prometheus(name, "gauge", "set", value, labels)

    # === Histogram Operations ===

    def observe_histogram(
        self,
        name: str,
        value: float,
        labels: dict[str, str] | None = None,
    ) -> None:
        label_key = self._labels_to_key(labels)
        with self._lock:
            if not self._check_cardinality(name, label_key):
                return
            observations = self._histograms[name][label_key]
            observations.append(value)
            if len(observations) > 10000:
                del observations[:-5000]

        self._update_prometheus(name, "histogram", "observe", value, labels)

    # === Snapshot Operations ===

    def get_counter(self, name: str, labels: dict[str, str] | None = None) -> int:
        """Current dict value of a counter (0 if never incremented)."""
        with self._lock:
            return self._counters.get(name, {}).get(self._labels_to_key(labels), 0)

    def get_metrics(self) -> dict[str, Any]:
        """
        Get a snapshot of all metrics.

        Returns a dict suitable for JSON serialization with structure:
        {
            "counters": {"metric_name": {"label_key": value, ...}, ...},
            "gauges": {"metric_name": {"label_key": value, ...}, ...},
            "histograms": {"metric_name": {"label_key": {...}, ...}, ...}
        }
        """
        with self._lock:
            counters = {name: dict(values) for name, values in self._counters.items()}
            gauges = {name: dict(values) for name, values in self._gauges.items()}
            histograms: dict[str, dict[str, dict[str, Any]]] = {}
            for name, label_values in self._histograms.items():
                histograms[name] = {
                    label_key: {
                        "count": len(observations),
                        "sum": sum(observations),
                        "avg": sum(observations) / len(observations),
                        "min": min(observations),
                        "max": max(observations),
                    }
                    for label_key, observations in label_values.items()
                    if observations
                }

        return {"counters": counters, "gauges": gauges, "histograms": histograms}

    def reset(self) -> None:
        """Reset the dict snapshot. Prometheus objects keep their values."""
        with self._lock:
            self._counters.clear()
            self._gauges.clear()
            self._histograms.clear()
            self._label_combinations.clear()

        logger.debug("Metrics collector reset")

    # === Prometheus HTTP Server ===

    def start_http_server(self, host: str = "127.0.0.1", port: int = 9090) -> bool:
        """
        Start the Prometheus HTTP server for metrics scraping.

        Binds to localhost unless told otherwise.

        Returns:
            True if the server is running, False if it failed to start
        """
        if not self._enable_prometheus:
            logger.warning("Cannot start Prometheus server: prometheus disabled")
            return False

        if self._server_running:
            logger.warning("Prometheus server already running")
            return True

        try:
            start_http_server(port, addr=host, registry=self._registry)
        except OSError as e:
            logger.error(f"Failed to start Prometheus server: {e}")
            return False

        self._server_running = True
        logger.info(f"Prometheus metrics server started on {host}:{port}")
        return True

    @property
    def prometheus_enabled(self) -> bool:
        return self._enable_prometheus

    @property
    def server_running(self) -> bool:
        return self._server_running


# =============================================================================
# Singleton Pattern
# =============================================================================

_global_collector: UnifiedMetricsCollector | None = None
_collector_lock = threading.Lock()


def get_metrics_collector(
    enable_prometheus: bool = True,
) -> UnifiedMetricsCollector:
    """
    Get or create the global metrics collector singleton.

    Args:
        enable_prometheus: Whether to enable Prometheus metrics
            (only used on first call)
    """
    global _global_collector

    if _global_collector is None:
        with _collector_lock:
            if _global_collector is None:
                _global_collector = UnifiedMetricsCollector(
                    enable_prometheus=enable_prometheus
                )

    return _global_collector


def reset_metrics_collector() -> None:
    """
    Reset the global metrics collector singleton (mainly for testing).

    Warning:
        Prometheus metrics stay registered in the default registry, so a new
        singleton with prometheus enabled will log duplicate-registration
        warnings and keep only its dict snapshot.
    """
    global _global_collector
    with _collector_lock:
        if _global_collector:
            _global_collector.reset()
        _global_collector = None


__all__ = [
    "METRIC_DEFINITIONS",
    "MetricDefinition",
    "UnifiedMetricsCollector",
    "get_metrics_collector",
    "reset_metrics_collector",
]
