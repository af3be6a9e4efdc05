# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Reservation allocation engine and its result type."""

from .allocation import Allocation
from .allocator import Clock, ReservationEngine, utc_now
from .validation import (
    resolve_reserved_until,
    validate_device_type,
    validate_duration,
    validate_holder_name,
)

__all__ = [
    "Allocation",
    "Clock",
    "ReservationEngine",
    "resolve_reserved_until",
    "utc_now",
    "validate_device_type",
    "validate_duration",
    "validate_holder_name",
]
