# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Protocol for supplying reservable resources."""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from ..types.resource import Resource


@runtime_checkable
class ResourceSourceProtocol(Protocol):
    """
    Protocol for the owner of the resource collection.

    The reservation service never creates or deletes resources. It asks a
    source for the current collection on every call and uses the returned
    order as the candidate order.
    """

    async def list_resources(self) -> Sequence[Resource]:
        """
        Return every resource in stable candidate order.

        Returns:
            Resources ordered by insertion or id, never re-sorted between
            calls
        """
        ...
