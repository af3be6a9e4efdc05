# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Reservation service for quick-reserve

This module provides the QuickReserveService facade that turns command
messages into engine calls, plus the create_service factory.

The service exposes three commands to callers:
- reserve: claim the first free resource of a device type
- release: clear a resource's reservation
- listDeviceTypes: known device types derived from the resources
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from .catalog import group_by_device_type, list_types, normalize_device_type
from .config import QuickReserveConfig, StoreBackend
from .engine.allocator import Clock, ReservationEngine
from .exceptions import (
    ConfigurationError,
    NoAvailableResourceError,
    StoreUnavailableError,
    ValidationError,
)
from .expiry import is_active, time_remaining
from .observability.collector import UnifiedMetricsCollector, get_metrics_collector
from .observability.constants import ACTIVE_RESERVATIONS
from .protocols.resource_source import ResourceSourceProtocol
from .sources import StaticResourceSource
from .stores.base import BaseReservationStore, HealthCheckResult
from .stores.memory import MemoryReservationStore
from .types.messages import (
    ErrorPayload,
    ReleaseRequest,
    ReleaseResponse,
    ReserveRequest,
    ReserveResponse,
)
from .types.reservation import Reservation
from .types.resource import Resource

logger = logging.getLogger(__name__)

COMMAND_RESERVE = "reserve"
COMMAND_RELEASE = "release"
COMMAND_LIST_DEVICE_TYPES = "listDeviceTypes"


@dataclass(frozen=True)
class ResourceStatus:
    """
    One row of the reservation listing.

    Attributes:
        resource: The resource
        reservation: Its stored reservation, active or expired, or None
        active: Result of ``is_active`` at listing time
        remaining: Time left; None for an eternal reservation
    """

    resource: Resource
    reservation: Reservation | None
    active: bool
    remaining: timedelta | None


class QuickReserveService:
    """
    Command facade over the allocation engine.

    Resources come from a ResourceSourceProtocol on every call, so the
    catalog and candidate order always reflect the live collection.

    Domain errors raised by ``reserve`` and ``release`` are the engine's.
    ``handle`` converts them into error payloads whose ``kind`` tells a
    validation problem, an exhausted device type, and a store outage apart.
    """

    def __init__(
        self,
        source: ResourceSourceProtocol,
        store: BaseReservationStore,
        config: QuickReserveConfig | None = None,
        metrics: UnifiedMetricsCollector | None = None,
        clock: Clock | None = None,
    ):
        self._source = source
        self._store = store
        self._config = config or QuickReserveConfig()
        self._metrics = metrics
        self._engine = ReservationEngine(
            store,
            clock=clock,
            metrics=metrics,
            max_claim_attempts=self._config.max_claim_attempts,
        )

    @property
    def engine(self) -> ReservationEngine:
        return self._engine

    @property
    def store(self) -> BaseReservationStore:
        return self._store

    @property
    def source(self) -> ResourceSourceProtocol:
        return self._source

    @property
    def config(self) -> QuickReserveConfig:
        return self._config

    # ==========================================================================
    # Commands
    # ==========================================================================

    async def reserve(self, request: ReserveRequest) -> ReserveResponse:
        """
        Reserve the first free resource matching the request.

        Raises:
            ValidationError: Malformed request
            NoAvailableResourceError: Every matching resource is taken
            StoreUnavailableError: The store failed
        """
        duration = None
        if request.duration_seconds is not None:
            try:
                duration = timedelta(seconds=request.duration_seconds)
            except OverflowError as e:
                raise ValidationError(
                    f"durationSeconds is out of range: {request.duration_seconds}",
                    "duration",
                ) from e
        resources = await self._source.list_resources()
        allocation = await self._engine.reserve(
            request.device_type,
            request.holder_name,
            duration,
            resources,
            reserved_until=request.reserved_until,
        )
        return ReserveResponse.from_allocation(allocation.resource, allocation.reservation)

    async def release(self, request: ReleaseRequest) -> ReleaseResponse:
        released = await self._engine.release(request.resource_id)
        return ReleaseResponse(resource_id=request.resource_id, released=released)

    async def list_device_types(self) -> list[str]:
        return list_types(await self._source.list_resources())

    # ==========================================================================
    # Views
    # ==========================================================================

    async def group_by_device_type(self) -> dict[str, list[Resource]]:
        return group_by_device_type(await self._source.list_resources())

    async def list_reservations(self, now: datetime | None = None) -> list[ResourceStatus]:
        """
        Every resource with its reservation and whether it is active.

        Args:
            now: Evaluation time; defaults to the engine's clock

        Returns:
            Statuses in candidate order
        """
        resources = await self._source.list_resources()
        snapshot = await self._store.get_reservations(
            [resource.key for resource in resources]
        )
        now = now or self._engine.now()

        statuses = []
        active_by_type: dict[str, int] = {}
        for resource in resources:
            reservation = snapshot.get(resource.key)
            active = is_active(reservation, now)
            label = normalize_device_type(resource.device_type)
            active_by_type[label] = active_by_type.get(label, 0) + int(active)
            statuses.append(
                ResourceStatus(
                    resource=resource,
                    reservation=reservation,
                    active=active,
                    remaining=time_remaining(reservation, now),
                )
            )

        if self._metrics is not None:
            for label, count in active_by_type.items():
                self._metrics.set_gauge(
                    ACTIVE_RESERVATIONS, count, labels={"device_type": label}
                )
        return statuses

    def resolve_duration(self, preset: str) -> int:
        """
        Seconds for a quick-reserve duration button such as "1 hr".

        Raises:
            ValidationError: Unknown preset
        """
        try:
            return self._config.duration_presets[preset]
        except KeyError:
            raise ValidationError(
                f"Unknown duration preset {preset!r}; expected one of "
                f"{sorted(self._config.duration_presets)}",
                "duration_preset",
            ) from None

    # ==========================================================================
    # Transport-agnostic dispatch
    # ==========================================================================

    async def handle(
        self, command: str, payload: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """
        Run a command from a camelCase payload and return a reply payload.

        A reserve payload may carry ``durationPreset`` instead of
        ``durationSeconds``. Validation, no-availability and store errors
        come back as ``{"kind": ..., "message": ...}``; anything else
        propagates.
        """
        payload = dict(payload or {})
        try:
            if command == COMMAND_RESERVE:
                preset = payload.pop("durationPreset", None)
                if preset is not None:
                    if payload.get("durationSeconds") is not None:
                        raise ValidationError(
                            "Give either durationSeconds or durationPreset",
                            "duration_preset",
                        )
                    payload["durationSeconds"] = self.resolve_duration(preset)
                response = await self.reserve(ReserveRequest.from_dict(payload))
                return response.to_dict()
            if command == COMMAND_RELEASE:
                release = await self.release(ReleaseRequest.from_dict(payload))
                return release.to_dict()
            if command == COMMAND_LIST_DEVICE_TYPES:
                return {"deviceTypes": await self.list_device_types()}
            raise ValidationError(f"Unknown command: {command!r}", "command")
        except (
            ValidationError,
            NoAvailableResourceError,
            StoreUnavailableError,
        ) as e:
            logger.debug(f"{command} failed with {e.kind}: {e}")
            return ErrorPayload(kind=e.kind, message=str(e)).to_dict()

    # ==========================================================================
    # Lifecycle
    # ==========================================================================

    async def purge_expired(self) -> int:
        """Remove stored reservations that have expired by the engine's clock."""
        return await self._store.purge_expired(self._engine.now())

    async def health_check(self) -> HealthCheckResult:
        return await self._store.health_check()

    async def close(self) -> None:
        await self._store.cleanup()

    async def __aenter__(self) -> "QuickReserveService":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


def _build_store(config: QuickReserveConfig) -> BaseReservationStore:
    if config.store_backend is StoreBackend.REDIS:
        try:
            from .stores.redis import RedisReservationStore
        except ImportError as e:
            raise ConfigurationError(
                "The redis store requires the 'redis' extra. "
                "Install with: pip install quick-reserve[redis]"
            ) from e
        return RedisReservationStore(
            redis_url=config.redis_url,
            namespace=config.namespace,
            max_cas_retries=config.max_cas_retries,
        )
    return MemoryReservationStore(namespace=config.namespace)


def create_service(
    resources: Iterable[Resource] | None = None,
    store: BaseReservationStore | None = None,
    config: QuickReserveConfig | None = None,
    source: ResourceSourceProtocol | None = None,
    metrics: UnifiedMetricsCollector | None = None,
    clock: Clock | None = None,
) -> QuickReserveService:
    """
    Factory function to create a QuickReserveService.

    Args:
        resources: Resources for a StaticResourceSource. Mutually exclusive
            with ``source``.
        store: Optional reservation store (built from config if omitted)
        config: Optional config (will create default if not provided)
        source: Optional resource source
        metrics: Optional metrics collector. If omitted and
            ``config.metrics_enabled`` is set, the global collector is used.
        clock: Optional clock returning timezone-aware datetimes

    Returns:
        Configured QuickReserveService instance

    Raises:
        ConfigurationError: Both ``resources`` and ``source`` were given, or
            the configured store cannot be built
    """
    if config is None:
        config = QuickReserveConfig()

    if source is not None and resources is not None:
        raise ConfigurationError("Pass either resources or source, not both")
    if source is None:
        source = StaticResourceSource(resources or ())
    elif not isinstance(source, ResourceSourceProtocol):
        raise ConfigurationError(
            f"source must implement list_resources(), got {type(source).__name__}"
        )

    if store is None:
        store = _build_store(config)

    if metrics is None and config.metrics_enabled:
        metrics = get_metrics_collector(enable_prometheus=config.enable_prometheus)

    if (
        metrics is not None
        and config.start_prometheus_server
        and metrics.prometheus_enabled
        and not metrics.server_running
    ):
        metrics.start_http_server(config.prometheus_host, config.prometheus_port)

    logger.debug(
        f"Created reservation service (store={store.store_type}, "
        f"namespace={store.namespace})"
    )
    return QuickReserveService(
        source=source, store=store, config=config, metrics=metrics, clock=clock
    )


__all__ = [
    "COMMAND_LIST_DEVICE_TYPES",
    "COMMAND_RELEASE",
    "COMMAND_RESERVE",
    "QuickReserveService",
    "ResourceStatus",
    "create_service",
]
