# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Type definitions and constants."""

from .messages import (
    ErrorPayload,
    ReleaseRequest,
    ReleaseResponse,
    ReserveRequest,
    ReserveResponse,
)
from .reservation import Reservation
from .resource import (
    DEVICE_TYPE_MAX_LENGTH,
    OTHER_DEVICE_TYPE,
    Resource,
    ResourceId,
)

__all__ = [
    "DEVICE_TYPE_MAX_LENGTH",
    "OTHER_DEVICE_TYPE",
    # Messages
    "ErrorPayload",
    "ReleaseRequest",
    "ReleaseResponse",
    "ReserveRequest",
    "ReserveResponse",
    # Reservation
    "Reservation",
    # Resources
    "Resource",
    "ResourceId",
]
