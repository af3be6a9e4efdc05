"""Shared fixtures for quick-reserve tests."""

from datetime import datetime, timedelta, timezone

import pytest
from prometheus_client import CollectorRegistry

from quick_reserve.observability.collector import UnifiedMetricsCollector
from quick_reserve.types import Reservation, Resource

FIXED_NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock(now):
    """Clock that always returns ``now``."""
    return lambda: now


@pytest.fixture
def metrics() -> UnifiedMetricsCollector:
    """Collector with a private Prometheus registry."""
    return UnifiedMetricsCollector(registry=CollectorRegistry())


@pytest.fixture
def resources() -> list[Resource]:
    return [
        Resource(id=1, name="server-1", device_type="Server"),
        Resource(id=2, name="router-1", device_type="Router"),
        Resource(id=3, name="server-2", device_type="Server"),
        Resource(id=4, name="untyped", device_type=None),
    ]


@pytest.fixture
def expired(now) -> Reservation:
    return Reservation(
        holder_name="old",
        reserved_at=now - timedelta(hours=2),
        reserved_until=now - timedelta(hours=1),
    )


@pytest.fixture
def far_future(now) -> Reservation:
    return Reservation(
        holder_name="bob",
        reserved_at=now - timedelta(minutes=5),
        reserved_until=now + timedelta(days=365),
    )
