# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Base Reservation Store for quick-reserve

This module provides the BaseReservationStore abstract class that defines
the interface the allocation engine uses to read and mutate reservations.

The store is the only shared mutable state in the library. Implementations
must make :meth:`BaseReservationStore.claim` a per-resource compare-and-swap:
the live record is re-read and the new reservation is written only if that
record is not active at the caller's ``now``.
"""

import abc
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..types.reservation import Reservation

logger = logging.getLogger(__name__)


@dataclass
class HealthCheckResult:
    """
    Structured health check result for store monitoring.

    Attributes:
        healthy: Whether the store is operational
        store_type: Type of store (e.g., 'redis', 'memory')
        namespace: Store namespace
        error: Error message if unhealthy
        metadata: Additional store-specific information
    """

    healthy: bool
    store_type: str
    namespace: str
    error: str | None = None
    metadata: dict[str, Any] | None = None


class BaseReservationStore(abc.ABC):
    """
    An abstract base class for reservation state storage.

    The store behaves like a key-value table from resource id to an optional
    reservation record. It holds no opinion about which reservations are
    expired except inside :meth:`claim`, where it must use
    :func:`quick_reserve.expiry.is_active`.

    Implementations raise :class:`quick_reserve.exceptions.StoreUnavailableError`
    when the underlying storage cannot be reached.
    """

    store_type: str = "base"

    def __init__(self, namespace: str = "quick_reserve"):
        """
        Initialize the store with a namespace for isolation.

        Args:
            namespace: Namespace for isolating data across different instances
        """
        self.namespace = namespace

    # ==========================================================================
    # Reads
    # ==========================================================================

    @abc.abstractmethod
    async def get_reservation(self, resource_id: str) -> Reservation | None:
        """
        Get the stored reservation for a resource.

        Args:
            resource_id: Store key of the resource

        Returns:
            The stored reservation (active or expired), or None
        """
        pass

    async def get_reservations(
        self, resource_ids: Sequence[str]
    ) -> dict[str, Reservation | None]:
        """
        Snapshot the reservations of several resources.

        The snapshot is only used to pick a candidate; it is not required to
        be atomic across resources.

        Args:
            resource_ids: Store keys to read

        Returns:
            Mapping of every requested key to its reservation or None
        """
        return {
            resource_id: await self.get_reservation(resource_id)
            for resource_id in resource_ids
        }

    @abc.abstractmethod
    async def get_all_reservations(self) -> dict[str, Reservation]:
        """
        Get every stored reservation, including expired ones.

        Returns:
            Mapping of resource key to reservation
        """
        pass

    # ==========================================================================
    # Mutations
    # ==========================================================================

    @abc.abstractmethod
    async def claim(
        self, resource_id: str, reservation: Reservation, now: datetime
    ) -> bool:
        """
        Atomically store a reservation if the resource is free.

        The current record is re-read inside the critical section. The new
        reservation is written only if that record is absent or not active
        at ``now``. A refused claim leaves the stored record untouched.

        Args:
            resource_id: Store key of the resource
            reservation: Reservation to write
            now: Evaluation time fixed by the caller

        Returns:
            True if the reservation was written, False if another active
            reservation holds the resource
        """
        pass

    @abc.abstractmethod
    async def release(self, resource_id: str) -> bool:
        """
        Remove a resource's reservation unconditionally.

        Releasing a resource without a reservation is not an error.

        Args:
            resource_id: Store key of the resource

        Returns:
            True if a reservation was removed, False if there was none
        """
        pass

    @abc.abstractmethod
    async def purge_expired(self, now: datetime) -> int:
        """
        Remove stored reservations that are not active at ``now``.

        Expired records already count as free, so this only bounds storage.
        A record replaced by a concurrent claim must be left in place.

        Returns:
            Number of records removed
        """
        pass

    @abc.abstractmethod
    async def clear(self) -> None:
        """Remove every reservation in this store's namespace."""
        pass

    # ==========================================================================
    # Lifecycle
    # ==========================================================================

    @abc.abstractmethod
    async def health_check(self) -> HealthCheckResult:
        """
        Check whether the store is usable.

        Returns:
            HealthCheckResult describing the store
        """
        pass

    async def cleanup(self) -> None:  # noqa: B027
        """Release connections or other resources held by the store."""
        logger.debug(f"{self.store_type} store cleanup (namespace={self.namespace})")


__all__ = ["BaseReservationStore", "HealthCheckResult"]
