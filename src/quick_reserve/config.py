# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Configuration for quick-reserve

This module provides the configuration dataclass used by
:func:`quick_reserve.service.create_service`, including store selection,
claim retry bounds, metrics, and quick duration presets.
"""

from dataclasses import dataclass, field
from enum import Enum


class StoreBackend(Enum):
    """Reservation store selected by the service factory.

    - MEMORY: Process-local store. Use for tests and single-process tools.
    - REDIS: Shared store. Use when several processes hand out the same
      resources.
    """

    MEMORY = "memory"
    REDIS = "redis"


DEFAULT_DURATION_PRESETS: dict[str, int] = {
    "30 min": 30 * 60,
    "1 hr": 60 * 60,
    "4 hrs": 4 * 60 * 60,
    "1 day": 24 * 60 * 60,
    "1 week": 7 * 24 * 60 * 60,
}
"""Quick-reserve duration buttons, in seconds."""


@dataclass
class QuickReserveConfig:
    """
    Configuration for the reservation service.

    The defaults give an in-memory store with metrics enabled and the
    standard duration presets.
    """

    # === Store ===

    store_backend: StoreBackend = StoreBackend.MEMORY
    """Which reservation store the factory builds."""

    redis_url: str | None = None
    """Redis URL for the redis store. Falls back to REDIS_URL, then localhost."""

    namespace: str = "quick_reserve"
    """Namespace isolating this service's reservations in the store."""

    max_cas_retries: int = 3
    """Re-reads a Redis claim may do after an unrelated concurrent write."""

    # === Allocation ===

    max_claim_attempts: int | None = None
    """Cap on claim attempts per reserve call.

    None means the number of candidates, which is always enough to visit
    every matching resource once.
    """

    # === Metrics and Monitoring ===

    metrics_enabled: bool = True
    """Enable metrics collection."""

    enable_prometheus: bool = True
    """Register metrics with the default Prometheus registry."""

    start_prometheus_server: bool = False
    """Serve metrics over HTTP when the service is created."""

    prometheus_host: str = "127.0.0.1"
    """Prometheus metrics host."""

    prometheus_port: int = 9090
    """Prometheus metrics port."""

    # === Presets ===

    duration_presets: dict[str, int] = field(
        default_factory=lambda: dict(DEFAULT_DURATION_PRESETS)
    )
    """Named durations offered as quick buttons, in seconds."""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if isinstance(self.store_backend, str):
            try:
                self.store_backend = StoreBackend(self.store_backend)
            except ValueError as e:
                raise ValueError(
                    f"store_backend must be one of "
                    f"{[b.value for b in StoreBackend]}, got {self.store_backend!r}"
                ) from e
        if not self.namespace:
            raise ValueError("namespace must be a non-empty string")
        if self.max_cas_retries < 1:
            raise ValueError("max_cas_retries must be at least 1")
        if self.max_claim_attempts is not None and self.max_claim_attempts < 1:
            raise ValueError("max_claim_attempts must be at least 1 or None")
        if not 0 < self.prometheus_port < 65536:
            raise ValueError("prometheus_port must be between 1 and 65535")
        for name, seconds in self.duration_presets.items():
            if seconds <= 0:
                raise ValueError(f"duration preset {name!r} must be positive")


__all__ = [
    "DEFAULT_DURATION_PRESETS",
    "QuickReserveConfig",
    "StoreBackend",
]
