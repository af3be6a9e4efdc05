# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
In-process resource collection.

StaticResourceSource is the simplest ResourceSourceProtocol implementation:
an insertion-ordered collection of resources held in memory. Applications
with a real resource database implement the protocol over that instead.
"""

import dataclasses
import logging
import threading
from collections.abc import Iterable

from .exceptions import ResourceNotFoundError, ValidationError
from .types.resource import DEVICE_TYPE_MAX_LENGTH, Resource, ResourceId

logger = logging.getLogger(__name__)


def _check_device_type_length(device_type: str | None) -> None:
    if device_type is not None and len(device_type) > DEVICE_TYPE_MAX_LENGTH:
        raise ValidationError(
            f"device_type must be at most {DEVICE_TYPE_MAX_LENGTH} characters, "
            f"got {len(device_type)}",
            "device_type",
        )


class StaticResourceSource:
    """
    Insertion-ordered in-memory resource collection.

    ``list_resources`` returns resources in the order they were added, which
    the reservation service uses as its candidate order. Device types are
    stored as given: None and "" are legal and only fold to "Other" when
    matching or grouping.
    """

    def __init__(self, resources: Iterable[Resource] = ()) -> None:
        self._resources: dict[str, Resource] = {}
        self._lock = threading.Lock()
        for resource in resources:
            self.add(resource)

    async def list_resources(self) -> list[Resource]:
        with self._lock:
            return list(self._resources.values())

    def __len__(self) -> int:
        return len(self._resources)

    def add(self, resource: Resource) -> Resource:
        """
        Add a resource to the end of the candidate order.

        Raises:
            ValueError: A resource with the same id already exists
            ValidationError: The device type is longer than the column allows
        """
        _check_device_type_length(resource.device_type)
        with self._lock:
            if resource.key in self._resources:
                raise ValueError(f"Resource {resource.id} already exists")
            self._resources[resource.key] = resource
        logger.debug(f"Added resource {resource.id} ({resource.device_type!r})")
        return resource

    def get(self, resource_id: ResourceId) -> Resource:
        with self._lock:
            try:
                return self._resources[str(resource_id)]
            except KeyError:
                raise ResourceNotFoundError(resource_id) from None

    def remove(self, resource_id: ResourceId) -> Resource:
        with self._lock:
            try:
                return self._resources.pop(str(resource_id))
            except KeyError:
                raise ResourceNotFoundError(resource_id) from None

    def set_device_type(
        self, resource_id: ResourceId, device_type: str | None
    ) -> Resource:
        """
        Retag a resource, keeping its other fields and its position.

        Raises:
            ResourceNotFoundError: Unknown resource id
            ValidationError: The device type is longer than the column allows
        """
        _check_device_type_length(device_type)
        key = str(resource_id)
        with self._lock:
            if key not in self._resources:
                raise ResourceNotFoundError(resource_id)
            updated = dataclasses.replace(self._resources[key], device_type=device_type)
            self._resources[key] = updated
        return updated


__all__ = ["StaticResourceSource"]
