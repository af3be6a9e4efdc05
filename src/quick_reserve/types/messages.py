# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Command messages exchanged with reservation callers.

These dataclasses are transport-agnostic: ``from_dict`` accepts the
camelCase payloads a UI or RPC layer sends, and ``to_dict`` produces the
matching response payloads. Field validation beyond basic shape checks
happens in the allocation engine.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from ..exceptions import ValidationError
from .reservation import Reservation
from .resource import Resource, ResourceId


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_datetime(value: Any, field_name: str) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be an ISO-8601 string", field_name)
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise ValidationError(
            f"{field_name} is not a valid ISO-8601 timestamp: {value!r}", field_name
        ) from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class ReserveRequest:
    """
    Request to reserve any free resource of a device type.

    Attributes:
        device_type: Requested device type label ("Other" matches untyped
            resources)
        holder_name: Who the reservation is for
        duration_seconds: Reservation length; None with no reserved_until
            means an eternal reservation
        reserved_until: Explicit expiry chosen from a date picker, used
            instead of duration_seconds
    """

    device_type: str | None
    holder_name: str | None
    duration_seconds: int | None = None
    reserved_until: datetime | None = None

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ReserveRequest":
        duration = payload.get("durationSeconds")
        if duration is not None and (
            isinstance(duration, bool) or not isinstance(duration, int)
        ):
            raise ValidationError(
                "durationSeconds must be an integer", "duration_seconds"
            )
        return cls(
            device_type=payload.get("deviceType"),
            holder_name=payload.get("holderName"),
            duration_seconds=duration,
            reserved_until=_parse_datetime(
                payload.get("reservedUntil"), "reserved_until"
            ),
        )


@dataclass
class ReserveResponse:
    """Successful reservation: the claimed resource and its expiry."""

    resource_id: ResourceId
    resource_name: str
    holder_name: str
    reserved_at: datetime
    reserved_until: datetime | None = None

    @classmethod
    def from_allocation(
        cls, resource: Resource, reservation: Reservation
    ) -> "ReserveResponse":
        return cls(
            resource_id=resource.id,
            resource_name=resource.name,
            holder_name=reservation.holder_name,
            reserved_at=reservation.reserved_at,
            reserved_until=reservation.reserved_until,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "resourceId": self.resource_id,
            "resourceName": self.resource_name,
            "holderName": self.holder_name,
            "reservedAt": _isoformat(self.reserved_at),
            "reservedUntil": _isoformat(self.reserved_until),
        }


@dataclass
class ReleaseRequest:
    resource_id: ResourceId

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ReleaseRequest":
        resource_id = payload.get("resourceId")
        if resource_id is None or resource_id == "":
            raise ValidationError("resourceId is required", "resource_id")
        return cls(resource_id=resource_id)


@dataclass
class ReleaseResponse:
    """Acknowledgement of a release.

    ``released`` is False when the resource had no reservation; that is
    still a success.
    """

    resource_id: ResourceId
    released: bool

    def to_dict(self) -> dict[str, Any]:
        return {"resourceId": self.resource_id, "released": self.released, "ok": True}


@dataclass
class ErrorPayload:
    """Error reply; ``kind`` is the exception's ``kind`` attribute."""

    kind: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message}


__all__ = [
    "ErrorPayload",
    "ReleaseRequest",
    "ReleaseResponse",
    "ReserveRequest",
    "ReserveResponse",
]
