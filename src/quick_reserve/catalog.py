# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Device type catalog.

The catalog has no storage of its own: known device types are derived from
the live resource collection every time they are requested, so there is no
second list of labels that could drift from the resources.
"""

from collections.abc import Iterable, Sequence

from .types.resource import OTHER_DEVICE_TYPE, Resource


def normalize_device_type(device_type: str | None) -> str:
    """Fold a missing or empty device type into ``"Other"``."""
    return device_type if device_type else OTHER_DEVICE_TYPE


def matches_device_type(resource_type: str | None, requested: str) -> bool:
    """
    Return whether a resource's device type satisfies a request.

    A request for "Other" matches resources typed None, "" or "Other".
    Any other request requires exact, case-sensitive equality.
    """
    if requested == OTHER_DEVICE_TYPE:
        return normalize_device_type(resource_type) == OTHER_DEVICE_TYPE
    return resource_type == requested


def list_types(resources: Iterable[Resource]) -> list[str]:
    """
    Distinct device types present on the given resources.

    Missing, empty and whitespace-only labels are left out. Labels are
    returned as stored and sorted by code point, so the result is identical
    for an unchanged collection.

    Example:
        >>> list_types([Resource(1, "a", "Server"), Resource(2, "b", "Router"),
        ...             Resource(3, "c", "Server"), Resource(4, "d", None)])
        ['Router', 'Server']
    """
    return sorted(
        {
            resource.device_type
            for resource in resources
            if resource.device_type and resource.device_type.strip()
        }
    )


def add_type(existing: Sequence[str], candidate: str) -> list[str]:
    """
    Append a new label unless it is already present.

    Matching is exact and case-sensitive. The candidate is neither trimmed
    nor validated; blank labels are the caller's problem.
    """
    types = list(existing)
    if candidate not in types:
        types.append(candidate)
    return types


def group_by_device_type(resources: Iterable[Resource]) -> dict[str, list[Resource]]:
    """
    Bucket resources by normalized device type.

    Buckets appear in the order their first member is seen and keep their
    members in input order. Untyped resources land in the "Other" bucket.
    """
    groups: dict[str, list[Resource]] = {}
    for resource in resources:
        groups.setdefault(normalize_device_type(resource.device_type), []).append(
            resource
        )
    return groups


__all__ = [
    "add_type",
    "group_by_device_type",
    "list_types",
    "matches_device_type",
    "normalize_device_type",
]
