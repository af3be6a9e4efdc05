# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Allocation dataclass returned by a successful reserve call."""

from dataclasses import dataclass

from ..types.reservation import Reservation
from ..types.resource import Resource


@dataclass(frozen=True)
class Allocation:
    """
    A resource together with the reservation just written for it.

    Attributes:
        resource: The claimed resource
        reservation: The reservation now stored for it
        attempts: Claim attempts the engine needed; more than one means the
            caller lost at least one race and fell through to another
            candidate
    """

    resource: Resource
    reservation: Reservation
    attempts: int = 1
