# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""quick-reserve - Reserve the first free resource of a device type.

This library tags resources with a device type and hands out time-boxed or
eternal reservations on them, safely under concurrent callers.

Key Features:
    - Device type catalog derived from the live resource collection
    - Lazy reservation expiry, no background sweeper
    - First-available allocation with per-resource compare-and-swap claims
    - Automatic fallback to the next candidate when a race is lost
    - Memory and Redis reservation stores
    - Transport-agnostic reserve/release/listDeviceTypes commands

Quick Start:
    >>> from quick_reserve import Resource, ReserveRequest, create_service
    >>>
    >>> service = create_service(resources=[
    ...     Resource(id=1, name="rack-a-01", device_type="Server"),
    ...     Resource(id=2, name="edge-01", device_type="Router"),
    ... ])
    >>> response = await service.reserve(
    ...     ReserveRequest(device_type="Server", holder_name="alice",
    ...                    duration_seconds=3600)
    ... )
    >>> response.resource_name
    'rack-a-01'

Note: RedisReservationStore requires the 'redis' extra. Install with:
    pip install quick-reserve[redis]

Version: 1.0.0
"""

__version__ = "1.0.0"

from typing import TYPE_CHECKING

from .catalog import (
    add_type,
    group_by_device_type,
    list_types,
    matches_device_type,
    normalize_device_type,
)
from .config import DEFAULT_DURATION_PRESETS, QuickReserveConfig, StoreBackend
from .engine import Allocation, ReservationEngine
from .exceptions import (
    ClaimConflictError,
    ConfigurationError,
    NoAvailableResourceError,
    QuickReserveError,
    ResourceNotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from .expiry import is_active, reserved_until_for, time_remaining
from .protocols import ResourceSourceProtocol
from .service import QuickReserveService, ResourceStatus, create_service
from .sources import StaticResourceSource
from .stores import BaseReservationStore, HealthCheckResult, MemoryReservationStore
from .types import (
    DEVICE_TYPE_MAX_LENGTH,
    OTHER_DEVICE_TYPE,
    ErrorPayload,
    ReleaseRequest,
    ReleaseResponse,
    Reservation,
    ReserveRequest,
    ReserveResponse,
    Resource,
)

# Lazy import for optional redis store
if TYPE_CHECKING:
    from .stores import RedisReservationStore

__all__ = [
    "DEFAULT_DURATION_PRESETS",
    "DEVICE_TYPE_MAX_LENGTH",
    "OTHER_DEVICE_TYPE",
    # Engine
    "Allocation",
    # Stores
    "BaseReservationStore",
    # Exceptions
    "ClaimConflictError",
    "ConfigurationError",
    "ErrorPayload",
    "HealthCheckResult",
    "MemoryReservationStore",
    "NoAvailableResourceError",
    # Config
    "QuickReserveConfig",
    "QuickReserveError",
    # Service
    "QuickReserveService",
    "RedisReservationStore",  # Lazy loaded - requires redis extra
    # Messages
    "ReleaseRequest",
    "ReleaseResponse",
    "Reservation",
    "ReservationEngine",
    "ReserveRequest",
    "ReserveResponse",
    # Types
    "Resource",
    "ResourceNotFoundError",
    # Protocols
    "ResourceSourceProtocol",
    "ResourceStatus",
    "StaticResourceSource",
    "StoreBackend",
    "StoreUnavailableError",
    "ValidationError",
    # Catalog
    "add_type",
    "create_service",
    "group_by_device_type",
    # Expiry
    "is_active",
    "list_types",
    "matches_device_type",
    "normalize_device_type",
    "reserved_until_for",
    "time_remaining",
]


def __getattr__(name: str) -> type:
    """Lazy import for optional redis store."""
    if name == "RedisReservationStore":
        from .stores import RedisReservationStore

        return RedisReservationStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
