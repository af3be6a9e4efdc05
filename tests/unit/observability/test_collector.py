"""
Unit tests for the observability collector module.

Tests cover:
- UnifiedMetricsCollector: dict snapshot and Prometheus registration
- Singleton pattern: get_metrics_collector, reset_metrics_collector
- Label cardinality protection
- Prometheus HTTP server
"""

from __future__ import annotations

import threading
from unittest.mock import patch

import pytest
from prometheus_client import CollectorRegistry

from quick_reserve.observability.collector import (
    METRIC_DEFINITIONS,
    UnifiedMetricsCollector,
    get_metrics_collector,
    reset_metrics_collector,
)
from quick_reserve.observability.constants import (
    ACTIVE_RESERVATIONS,
    CLAIM_CONFLICTS_TOTAL,
    RESERVE_LATENCY_SECONDS,
    RESERVE_REQUESTS_TOTAL,
)

# =============================================================================
# Metric definitions
# =============================================================================


class TestMetricDefinitions:
    def test_counters_end_in_total(self) -> None:
        for name, defn in METRIC_DEFINITIONS.items():
            assert defn.name == name
            if defn.metric_type == "counter":
                assert name.endswith("_total")

    def test_histograms_have_buckets(self) -> None:
        for defn in METRIC_DEFINITIONS.values():
            if defn.metric_type == "histogram":
                assert defn.buckets


# =============================================================================
# Collector
# =============================================================================


class TestUnifiedMetricsCollector:
    @pytest.fixture
    def registry(self) -> CollectorRegistry:
        return CollectorRegistry()

    @pytest.fixture
    def collector(self, registry) -> UnifiedMetricsCollector:
        return UnifiedMetricsCollector(registry=registry)

    def test_inc_counter(self, collector, registry) -> None:
        labels = {"device_type": "Server", "outcome": "reserved"}
        collector.inc_counter(RESERVE_REQUESTS_TOTAL, labels=labels)
        collector.inc_counter(RESERVE_REQUESTS_TOTAL, value=2, labels=labels)

        assert collector.get_counter(RESERVE_REQUESTS_TOTAL, labels) == 3
        assert registry.get_sample_value(RESERVE_REQUESTS_TOTAL, labels) == 3.0

    def test_negative_increment_rejected(self, collector) -> None:
        with pytest.raises(ValueError):
            collector.inc_counter(CLAIM_CONFLICTS_TOTAL, value=-1)

    def test_unknown_counter_is_zero(self, collector) -> None:
        assert collector.get_counter("nope_total") == 0

    def test_set_gauge(self, collector, registry) -> None:
        labels = {"device_type": "Router"}
        collector.set_gauge(ACTIVE_RESERVATIONS, 4, labels=labels)
        collector.set_gauge(ACTIVE_RESERVATIONS, 2, labels=labels)

        assert collector.get_metrics()["gauges"][ACTIVE_RESERVATIONS] == {
            "device_type=Router": 2
        }
        assert registry.get_sample_value(ACTIVE_RESERVATIONS, labels) == 2.0

    def test_observe_histogram(self, collector, registry) -> None:
        labels = {"outcome": "reserved"}
        collector.observe_histogram(RESERVE_LATENCY_SECONDS, 0.01, labels=labels)
        collector.observe_histogram(RESERVE_LATENCY_SECONDS, 0.03, labels=labels)

        summary = collector.get_metrics()["histograms"][RESERVE_LATENCY_SECONDS][
            "outcome=reserved"
        ]
        assert summary["count"] == 2
        assert summary["min"] == 0.01
        assert summary["max"] == 0.03
        assert (
            registry.get_sample_value(f"{RESERVE_LATENCY_SECONDS}_count", labels) == 2.0
        )

    def test_prometheus_disabled(self, registry) -> None:
        collector = UnifiedMetricsCollector(enable_prometheus=False, registry=registry)
        collector.inc_counter(CLAIM_CONFLICTS_TOTAL, labels={"device_type": "Server"})

        assert collector.prometheus_enabled is False
        assert (
            collector.get_counter(CLAIM_CONFLICTS_TOTAL, {"device_type": "Server"})
            == 1
        )
        assert (
            registry.get_sample_value(
                CLAIM_CONFLICTS_TOTAL, {"device_type": "Server"}
            )
            is None
        )

    def test_duplicate_registration_keeps_snapshot(self, registry) -> None:
        first = UnifiedMetricsCollector(registry=registry)
        second = UnifiedMetricsCollector(registry=registry)
        labels = {"device_type": "Server"}

        first.inc_counter(CLAIM_CONFLICTS_TOTAL, labels=labels)
        second.inc_counter(CLAIM_CONFLICTS_TOTAL, labels=labels)

        assert second.get_counter(CLAIM_CONFLICTS_TOTAL, labels) == 1

    def test_cardinality_limit(self, registry) -> None:
        collector = UnifiedMetricsCollector(enable_prometheus=False, registry=registry)
        with patch.object(UnifiedMetricsCollector, "MAX_LABEL_COMBINATIONS", 2):
            for label in ("a", "b", "c"):
                collector.inc_counter(
                    CLAIM_CONFLICTS_TOTAL, labels={"device_type": label}
                )

        counters = collector.get_metrics()["counters"][CLAIM_CONFLICTS_TOTAL]
        assert set(counters) == {"device_type=a", "device_type=b"}

    def test_reset(self, collector) -> None:
        collector.inc_counter(CLAIM_CONFLICTS_TOTAL, labels={"device_type": "x"})
        collector.reset()
        assert collector.get_metrics() == {
            "counters": {},
            "gauges": {},
            "histograms": {},
        }

    def test_thread_safety(self, collector) -> None:
        labels = {"device_type": "Server"}

        def work() -> None:
            for _ in range(100):
                collector.inc_counter(CLAIM_CONFLICTS_TOTAL, labels=labels)

        threads = [threading.Thread(target=work) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert collector.get_counter(CLAIM_CONFLICTS_TOTAL, labels) == 800


class TestPrometheusServer:
    def test_start_http_server(self) -> None:
        collector = UnifiedMetricsCollector(registry=CollectorRegistry())
        with patch(
            "quick_reserve.observability.collector.start_http_server"
        ) as start:
            assert collector.start_http_server(port=9999) is True
            assert collector.start_http_server(port=9999) is True

        start.assert_called_once()
        assert collector.server_running is True

    def test_start_http_server_failure(self) -> None:
        collector = UnifiedMetricsCollector(registry=CollectorRegistry())
        with patch(
            "quick_reserve.observability.collector.start_http_server",
            side_effect=OSError("address in use"),
        ):
            assert collector.start_http_server() is False
        assert collector.server_running is False

    def test_disabled_prometheus_does_not_start(self) -> None:
        collector = UnifiedMetricsCollector(
            enable_prometheus=False, registry=CollectorRegistry()
        )
        assert collector.start_http_server() is False


class TestSingleton:
    def test_get_returns_same_instance(self) -> None:
        reset_metrics_collector()
        try:
            first = get_metrics_collector(enable_prometheus=False)
            assert get_metrics_collector() is first
        finally:
            reset_metrics_collector()

    def test_reset_creates_new_instance(self) -> None:
        reset_metrics_collector()
        first = get_metrics_collector(enable_prometheus=False)
        reset_metrics_collector()
        try:
            assert get_metrics_collector(enable_prometheus=False) is not first
        finally:
            reset_metrics_collector()
