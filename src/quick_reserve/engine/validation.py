# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Argument validation for reserve calls.

Every check here runs before the engine reads the store, so a rejected
request never touches reservation state.
"""

from datetime import datetime, timedelta
from typing import Any

from ..exceptions import ValidationError
from ..expiry import reserved_until_for
from ..types.resource import DEVICE_TYPE_MAX_LENGTH


def validate_device_type(device_type: Any) -> str:
    """Require a non-blank device type that fits the stored column."""
    if device_type is None:
        raise ValidationError("device_type is required", "device_type")
    if not isinstance(device_type, str):
        raise ValidationError(
            f"device_type must be a string, got {type(device_type).__name__}",
            "device_type",
        )
    if not device_type.strip():
        raise ValidationError("device_type must not be blank", "device_type")
    if len(device_type) > DEVICE_TYPE_MAX_LENGTH:
        raise ValidationError(
            f"device_type must be at most {DEVICE_TYPE_MAX_LENGTH} characters, "
            f"got {len(device_type)}",
            "device_type",
        )
    return device_type


def validate_holder_name(holder_name: Any) -> str:
    if holder_name is None:
        raise ValidationError("holder_name is required", "holder_name")
    if not isinstance(holder_name, str):
        raise ValidationError(
            f"holder_name must be a string, got {type(holder_name).__name__}",
            "holder_name",
        )
    if not holder_name.strip():
        raise ValidationError("holder_name must not be blank", "holder_name")
    return holder_name


def validate_duration(duration: Any) -> timedelta | None:
    """
    Require a positive timedelta, or None for an eternal reservation.

    Zero and negative durations are rejected rather than read as eternal or
    as already expired.
    """
    if duration is None:
        return None
    if not isinstance(duration, timedelta):
        raise ValidationError(
            f"duration must be a timedelta, got {type(duration).__name__}",
            "duration",
        )
    if duration <= timedelta(0):
        raise ValidationError(
            f"duration must be positive, got {duration.total_seconds()}s",
            "duration",
        )
    return duration


def resolve_reserved_until(
    now: datetime,
    duration: timedelta | None,
    reserved_until: datetime | None = None,
) -> datetime | None:
    """
    Work out the expiry of a new reservation.

    An explicit ``reserved_until`` (from a date picker) replaces the
    duration. It must be timezone-aware and strictly after ``now``.

    Returns:
        The expiry timestamp, or None for an eternal reservation
    """
    if reserved_until is None:
        try:
            return reserved_until_for(now, duration)
        except OverflowError as e:
            raise ValidationError(
                f"Duration is out of range: {duration}", "duration"
            ) from e
    if duration is not None:
        raise ValidationError(
            "Give either duration or reserved_until, not both", "reserved_until"
        )
    if reserved_until.tzinfo is None:
        raise ValidationError(
            "reserved_until must be timezone-aware", "reserved_until"
        )
    if reserved_until <= now:
        raise ValidationError(
            f"reserved_until must be in the future, got {reserved_until.isoformat()}",
            "reserved_until",
        )
    return reserved_until


__all__ = [
    "resolve_reserved_until",
    "validate_device_type",
    "validate_duration",
    "validate_holder_name",
]
