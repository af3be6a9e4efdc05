# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
MemoryReservationStore for quick-reserve

This module provides an in-memory reservation store that doesn't require
Redis. Suitable for testing, development, and single-process applications.
"""

import logging
import threading
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from ..expiry import is_active
from ..types.reservation import Reservation
from .base import BaseReservationStore, HealthCheckResult

logger = logging.getLogger(__name__)


class MemoryReservationStore(BaseReservationStore):
    """
    An in-memory reservation store.

    Key Features:
    - Pure dict-based storage keyed by resource id
    - Compare-and-swap claims under a short ``threading.Lock`` section
    - Safe to share between threads and between event loops in one process
    - No external dependencies beyond Python stdlib

    The lock only covers single-record read/evaluate/write steps. Candidate
    scans in the allocation engine run outside it.

    Note:
        This store is NOT suitable for:
        - Multi-process applications
        - Distributed systems
        - Deployments that need reservations to survive a restart
    """

    store_type = "memory"

    def __init__(self, namespace: str = "quick_reserve_memory") -> None:
        super().__init__(namespace)

        # resource key -> reservation (expired records are kept until
        # released, overwritten by a claim, or purged)
        self._reservations: dict[str, Reservation] = {}
        self._lock = threading.Lock()

        self._claims = 0
        self._conflicts = 0

    async def get_reservation(self, resource_id: str) -> Reservation | None:
        with self._lock:
            return self._reservations.get(resource_id)

    async def get_reservations(
        self, resource_ids: Sequence[str]
    ) -> dict[str, Reservation | None]:
        with self._lock:
            return {
                resource_id: self._reservations.get(resource_id)
                for resource_id in resource_ids
            }

    async def get_all_reservations(self) -> dict[str, Reservation]:
        with self._lock:
            return dict(self._reservations)

    async def claim(
        self, resource_id: str, reservation: Reservation, now: datetime
    ) -> bool:
        """Write ``reservation`` only if the live record is not active."""
        with self._lock:
            current = self._reservations.get(resource_id)
            if is_active(current, now):
                self._conflicts += 1
                return False
            self._reservations[resource_id] = reservation
            self._claims += 1
            return True

    async def release(self, resource_id: str) -> bool:
        with self._lock:
            removed = self._reservations.pop(resource_id, None)

        if removed is None:
            logger.warning(
                f"Release of resource {resource_id} with no reservation (no-op)"
            )
            return False
        return True

    async def purge_expired(self, now: datetime) -> int:
        """
        Drop stored reservations that are no longer active.

        Nothing depends on this running; expired records are already treated
        as free. It only bounds memory for long-lived processes.

        Returns:
            Number of records removed
        """
        with self._lock:
            expired = [
                key
                for key, reservation in self._reservations.items()
                if not is_active(reservation, now)
            ]
            for key in expired:
                del self._reservations[key]

        if expired:
            logger.debug(f"Purged {len(expired)} expired reservations")
        return len(expired)

    async def clear(self) -> None:
        with self._lock:
            self._reservations.clear()

    async def health_check(self) -> HealthCheckResult:
        """Perform a health check on the store."""
        with self._lock:
            metadata: dict[str, Any] = {
                "reservations_count": len(self._reservations),
                "claims": self._claims,
                "claim_conflicts": self._conflicts,
            }
        return HealthCheckResult(
            healthy=True,
            store_type=self.store_type,
            namespace=self.namespace,
            metadata=metadata,
        )


__all__ = ["MemoryReservationStore"]
