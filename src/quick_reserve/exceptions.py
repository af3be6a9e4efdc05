# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Exception classes for the quick-reserve library.

This module defines the exception hierarchy used throughout the library.
All exceptions inherit from QuickReserveError, making it easy to catch
every reservation-related failure with a single except clause.

Only ValidationError, NoAvailableResourceError and StoreUnavailableError
are raised out of the allocation engine. ClaimConflictError is raised and
absorbed inside the engine's retry loop.
"""


class QuickReserveError(Exception):
    """Base exception for all quick-reserve errors.

    Example:
        try:
            allocation = await engine.reserve("Server", "alice", None, resources)
        except QuickReserveError as e:
            logger.error(f"Reservation failed: {e}")
    """

    kind: str = "QuickReserveError"


class ValidationError(QuickReserveError):
    """Raised when a reservation request is malformed.

    Validation runs before any candidate scan, so a ValidationError never
    leaves reservation state modified. It is never retried.

    Attributes:
        field: Name of the offending request field, if known.

    Example:
        try:
            await engine.reserve("Server", "", None, resources)
        except ValidationError as e:
            print(f"Bad field {e.field}: {e}")
    """

    kind = "ValidationError"

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class NoAvailableResourceError(QuickReserveError):
    """Raised when no free resource of the requested device type exists.

    This is terminal for a single reserve call. Callers may issue a fresh
    request later; the engine does not retry beyond its bounded pass.

    Attributes:
        device_type: The device type that was requested.
    """

    kind = "NoAvailableResource"

    def __init__(self, device_type: str, message: str | None = None):
        super().__init__(
            message or f"No available resource of device type: {device_type}"
        )
        self.device_type = device_type


class ClaimConflictError(QuickReserveError):
    """Raised when a compare-and-swap claim loses a race.

    Internal to the allocation engine: the engine catches it and moves on
    to the next candidate.

    Attributes:
        resource_id: Identifier of the resource that was claimed by another
            caller first.
    """

    kind = "ClaimConflict"

    def __init__(self, resource_id: str):
        super().__init__(f"Resource already claimed: {resource_id}")
        self.resource_id = resource_id


class StoreUnavailableError(QuickReserveError):
    """Raised when the reservation store cannot be reached or fails.

    Propagated to the caller as fatal for the current request. The engine
    does not retry it.

    Attributes:
        store_type: Type of store that failed (e.g. "redis", "memory").

    Example:
        try:
            await service.reserve(request)
        except StoreUnavailableError as e:
            logger.error(f"{e.store_type} store unavailable: {e}")
    """

    kind = "StoreUnavailable"

    def __init__(self, message: str, store_type: str | None = None):
        super().__init__(message)
        self.store_type = store_type


class ResourceNotFoundError(QuickReserveError):
    """Raised when a resource id is not present in a resource source.

    Attributes:
        resource_id: The identifier that was looked up.
    """

    kind = "ResourceNotFound"

    def __init__(self, resource_id: str | int):
        super().__init__(f"Resource not found: {resource_id}")
        self.resource_id = resource_id


class ConfigurationError(QuickReserveError):
    """Raised when the library is configured inconsistently.

    Example:
        try:
            service = create_service(resources=resources, source=source)
        except ConfigurationError as e:
            print(f"Configuration error: {e}")
    """

    kind = "ConfigurationError"
