# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Reservation records.

A reservation is attached to at most one resource at a time. It is created
by a successful claim and ends either when it is released or when
``reserved_until`` passes. Expiry is never swept in the background; readers
evaluate it with :func:`quick_reserve.expiry.is_active`.
"""

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def _parse_timestamp(value: str | None) -> datetime | None:
    if value is None:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class Reservation:
    """
    A claim on a single resource.

    Attributes:
        holder_name: Free text naming who holds the reservation
        reserved_at: UTC timestamp of the claim
        reserved_until: UTC expiry timestamp, or None for an eternal
            reservation
        reservation_id: Unique identifier of this claim. Two claims on the
            same resource never share an id, so stored records can be
            compared by value.
    """

    holder_name: str
    reserved_at: datetime
    reserved_until: datetime | None = None
    reservation_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def is_eternal(self) -> bool:
        return self.reserved_until is None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict with ISO-8601 timestamps."""
        return {
            "reservation_id": self.reservation_id,
            "holder_name": self.holder_name,
            "reserved_at": self.reserved_at.isoformat(),
            "reserved_until": (
                self.reserved_until.isoformat() if self.reserved_until else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Reservation":
        """Build a reservation from :meth:`to_dict` output.

        Naive timestamps are interpreted as UTC.
        """
        reserved_at = _parse_timestamp(data["reserved_at"])
        if reserved_at is None:
            raise ValueError("reserved_at is required")
        return cls(
            holder_name=data["holder_name"],
            reserved_at=reserved_at,
            reserved_until=_parse_timestamp(data.get("reserved_until")),
            reservation_id=data.get("reservation_id") or uuid.uuid4().hex,
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)

    @classmethod
    def from_json(cls, raw: str | bytes) -> "Reservation":
        return cls.from_dict(json.loads(raw))


__all__ = ["Reservation"]
