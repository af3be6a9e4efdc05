# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Reservation store implementations.

Available stores:
- BaseReservationStore: Abstract base class defining the store interface
- MemoryReservationStore: In-memory store for single-process deployments
- RedisReservationStore: Redis-based store shared across processes
  (requires redis extra)

Supporting types:
- HealthCheckResult: Structured result from store health checks

Note: RedisReservationStore is lazily imported to avoid requiring the redis
package when only using MemoryReservationStore.
"""

from typing import TYPE_CHECKING, cast

from quick_reserve.stores.base import BaseReservationStore, HealthCheckResult
from quick_reserve.stores.memory import MemoryReservationStore

# Lazy import for optional redis store
if TYPE_CHECKING:
    from quick_reserve.stores.redis import RedisReservationStore

__all__ = [
    # Base classes
    "BaseReservationStore",
    "HealthCheckResult",
    # Memory store
    "MemoryReservationStore",
    # Redis store (lazy loaded)
    "RedisReservationStore",
]


def __getattr__(name: str) -> type:
    """Lazy import for optional redis store."""
    if name == "RedisReservationStore":
        try:
            from quick_reserve.stores import redis as redis_module

            return cast(type, getattr(redis_module, name))
        except ImportError as e:  # pragma: no cover
            raise ImportError(  # pragma: no cover
                f"'{name}' requires the 'redis' extra. "
                "Install with: pip install quick-reserve[redis]"
            ) from e
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
