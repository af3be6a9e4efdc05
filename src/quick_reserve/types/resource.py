# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
# quick_reserve/types/resource.py
"""
Resource records and device type constants.

A resource is a monitored entity that can be reserved. The allocation engine
only reads resources; their lifecycle belongs to whoever owns the resource
collection.

Constants:
    OTHER_DEVICE_TYPE: Sentinel label for resources without a device type
    DEVICE_TYPE_MAX_LENGTH: Maximum stored length of a device type label

Example:
    >>> from quick_reserve.types import Resource
    >>> Resource(id=1, name="rack-a-01", device_type="Server")
"""

from dataclasses import dataclass

# Resources with a missing or empty device type are grouped and matched
# under this label.
OTHER_DEVICE_TYPE = "Other"

# Column width of resource.device_type
DEVICE_TYPE_MAX_LENGTH = 50

ResourceId = str | int


@dataclass(frozen=True)
class Resource:
    """
    A reservable resource as seen by the allocation engine.

    Attributes:
        id: Stable unique identifier. The reservation store keys records by
            ``str(id)``.
        name: Display name, echoed back in reserve responses.
        device_type: Optional device type label. None and "" are both
            treated as OTHER_DEVICE_TYPE for matching and grouping.
        custom_fields: Free-form text attached to the resource. Never
            interpreted by the engine.
    """

    id: ResourceId
    name: str
    device_type: str | None = None
    custom_fields: str | None = None

    @property
    def key(self) -> str:
        """Store key for this resource's reservation record."""
        return str(self.id)


__all__ = [
    "DEVICE_TYPE_MAX_LENGTH",
    "OTHER_DEVICE_TYPE",
    "Resource",
    "ResourceId",
]
