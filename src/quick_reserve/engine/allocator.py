# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Reservation allocation engine.

Given a device type and a duration, the engine picks the first matching
resource that is not actively reserved and claims it with a per-resource
compare-and-swap on the store. Concurrent callers may pick the same
resource from their snapshots; exactly one claim wins and the others fall
through to the next free candidate.
"""

import logging
import time
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta, timezone

from ..catalog import matches_device_type
from ..exceptions import (
    ClaimConflictError,
    NoAvailableResourceError,
    QuickReserveError,
    StoreUnavailableError,
    ValidationError,
)
from ..expiry import is_active
from ..observability.collector import UnifiedMetricsCollector
from ..observability.constants import (
    CLAIM_ATTEMPTS,
    CLAIM_CONFLICTS_TOTAL,
    OUTCOME_NO_AVAILABLE,
    OUTCOME_NOOP,
    OUTCOME_RELEASED,
    OUTCOME_RESERVED,
    OUTCOME_STORE_UNAVAILABLE,
    OUTCOME_VALIDATION_ERROR,
    RELEASES_TOTAL,
    RESERVE_LATENCY_SECONDS,
    RESERVE_REQUESTS_TOTAL,
    STORE_ERRORS_TOTAL,
)
from ..stores.base import BaseReservationStore
from ..types.reservation import Reservation
from ..types.resource import DEVICE_TYPE_MAX_LENGTH, Resource, ResourceId
from .allocation import Allocation
from .validation import (
    resolve_reserved_until,
    validate_device_type,
    validate_duration,
    validate_holder_name,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

_OUTCOME_BY_KIND = {
    ValidationError.kind: OUTCOME_VALIDATION_ERROR,
    NoAvailableResourceError.kind: OUTCOME_NO_AVAILABLE,
    StoreUnavailableError.kind: OUTCOME_STORE_UNAVAILABLE,
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReservationEngine:
    """
    Selects and atomically claims resources for reserve requests.

    The engine keeps no state between calls. Everything shared lives in the
    store, and the only critical section is the store's claim.

    Example:
        >>> engine = ReservationEngine(MemoryReservationStore())
        >>> allocation = await engine.reserve(
        ...     "Server", "alice", timedelta(hours=1), resources
        ... )
        >>> allocation.resource.name
        'rack-a-01'
    """

    def __init__(
        self,
        store: BaseReservationStore,
        clock: Clock | None = None,
        metrics: UnifiedMetricsCollector | None = None,
        max_claim_attempts: int | None = None,
    ):
        """
        Initialize the engine.

        Args:
            store: Reservation store to read and claim against
            clock: Returns the current timezone-aware time. Called once per
                reserve call.
            metrics: Optional metrics collector
            max_claim_attempts: Optional cap on claim attempts per call. The
                number of candidates is always an upper bound.
        """
        if max_claim_attempts is not None and max_claim_attempts < 1:
            raise ValueError("max_claim_attempts must be at least 1 or None")

        self._store = store
        self._clock = clock or utc_now
        self._metrics = metrics
        self._max_claim_attempts = max_claim_attempts

    @property
    def store(self) -> BaseReservationStore:
        return self._store

    def now(self) -> datetime:
        """Current time from the engine's clock."""
        return self._clock()

    # ==========================================================================
    # Reserve
    # ==========================================================================

    async def reserve(
        self,
        device_type: str | None,
        holder_name: str | None,
        duration: timedelta | None,
        candidates: Iterable[Resource],
        *,
        reserved_until: datetime | None = None,
    ) -> Allocation:
        """
        Claim the first free resource of ``device_type``.

        Args:
            device_type: Requested label; "Other" also matches untyped
                resources
            holder_name: Who the reservation is for
            duration: Reservation length, or None for an eternal reservation
            candidates: Resources in the order they should be tried
            reserved_until: Explicit expiry used instead of ``duration``

        Returns:
            The claimed resource and its new reservation

        Raises:
            ValidationError: The arguments were rejected before any store read
            NoAvailableResourceError: Every matching resource is taken
            StoreUnavailableError: The store failed; nothing is retried
        """
        started = time.perf_counter()
        try:
            allocation = await self._reserve(
                device_type, holder_name, duration, candidates, reserved_until
            )
        except QuickReserveError as e:
            self._record_reserve(
                _OUTCOME_BY_KIND.get(e.kind, e.kind), device_type, started
            )
            if isinstance(e, StoreUnavailableError):
                self._inc(STORE_ERRORS_TOTAL, {"operation": "reserve"})
            raise

        self._record_reserve(OUTCOME_RESERVED, device_type, started)
        if self._metrics is not None:
            self._metrics.observe_histogram(
                CLAIM_ATTEMPTS,
                allocation.attempts,
                labels={"device_type": _device_type_label(device_type)},
            )
        return allocation

    async def _reserve(
        self,
        device_type: str | None,
        holder_name: str | None,
        duration: timedelta | None,
        candidates: Iterable[Resource],
        reserved_until: datetime | None,
    ) -> Allocation:
        device_type = validate_device_type(device_type)
        holder_name = validate_holder_name(holder_name)
        duration = validate_duration(duration)

        now = self._clock()
        until = resolve_reserved_until(now, duration, reserved_until)

        ordered = list(candidates)
        remaining = [
            resource
            for resource in ordered
            if matches_device_type(resource.device_type, device_type)
        ]
        max_attempts = len(ordered)
        if self._max_claim_attempts is not None:
            max_attempts = min(max_attempts, self._max_claim_attempts)

        logger.debug(
            "Reserving %r for %r: %d of %d candidates match",
            device_type,
            holder_name,
            len(remaining),
            len(ordered),
        )

        attempts = 0
        while remaining and attempts < max_attempts:
            selection = await self._select(remaining, now)
            if selection is None:
                break

            attempts += 1
            reservation = Reservation(
                holder_name=holder_name, reserved_at=now, reserved_until=until
            )
            try:
                await self._claim(selection, reservation, now)
            except ClaimConflictError as e:
                logger.debug(
                    "Lost claim on %s (%s), trying remaining candidates",
                    e.resource_id,
                    device_type,
                )
                self._inc(CLAIM_CONFLICTS_TOTAL, {"device_type": device_type})
                remaining = [r for r in remaining if r.key != selection.key]
                continue

            logger.info(
                f"Reserved resource {selection.id} ({selection.name}) "
                f"for {holder_name} until "
                f"{until.isoformat() if until else 'released'}"
            )
            return Allocation(
                resource=selection, reservation=reservation, attempts=attempts
            )

        logger.info(f"No available resource of type {device_type!r} for {holder_name}")
        raise NoAvailableResourceError(device_type)

    async def _select(
        self, remaining: list[Resource], now: datetime
    ) -> Resource | None:
        """First candidate whose snapshot reservation is not active."""
        snapshot = await self._store.get_reservations(
            [resource.key for resource in remaining]
        )
        for resource in remaining:
            if not is_active(snapshot.get(resource.key), now):
                return resource
        return None

    async def _claim(
        self, resource: Resource, reservation: Reservation, now: datetime
    ) -> None:
        if not await self._store.claim(resource.key, reservation, now):
            raise ClaimConflictError(resource.key)

    # ==========================================================================
    # Release
    # ==========================================================================

    async def release(self, resource_id: ResourceId) -> bool:
        """
        Clear a resource's reservation.

        Idempotent: releasing a free resource succeeds and returns False.

        Returns:
            True if a reservation was removed

        Raises:
            ValidationError: ``resource_id`` is empty
            StoreUnavailableError: The store failed
        """
        key = str(resource_id) if resource_id is not None else ""
        if not key:
            raise ValidationError("resource_id is required", "resource_id")

        try:
            released = await self._store.release(key)
        except StoreUnavailableError:
            self._inc(STORE_ERRORS_TOTAL, {"operation": "release"})
            raise

        self._inc(
            RELEASES_TOTAL, {"outcome": OUTCOME_RELEASED if released else OUTCOME_NOOP}
        )
        if released:
            logger.info(f"Released reservation on resource {key}")
        return released

    # ==========================================================================
    # Metrics
    # ==========================================================================

    def _inc(self, name: str, labels: dict[str, str]) -> None:
        if self._metrics is not None:
            self._metrics.inc_counter(name, labels=labels)

    def _record_reserve(self, outcome: str, device_type: object, started: float) -> None:
        if self._metrics is None:
            return
        self._metrics.inc_counter(
            RESERVE_REQUESTS_TOTAL,
            labels={"device_type": _device_type_label(device_type), "outcome": outcome},
        )
        self._metrics.observe_histogram(
            RESERVE_LATENCY_SECONDS,
            time.perf_counter() - started,
            labels={"outcome": outcome},
        )


def _device_type_label(device_type: object) -> str:
    if (
        isinstance(device_type, str)
        and device_type.strip()
        and len(device_type) <= DEVICE_TYPE_MAX_LENGTH
    ):
        return device_type
    return "invalid"


__all__ = ["Clock", "ReservationEngine", "utc_now"]
