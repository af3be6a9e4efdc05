# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Reservation expiry evaluation.

Reservations are never swept in the background. Every code path that needs
to know whether a resource is taken (the allocation engine, the stores'
claim paths, listing views) asks :func:`is_active` with an explicit ``now``.
"""

from datetime import datetime, timedelta

from .types.reservation import Reservation


def is_active(reservation: Reservation | None, now: datetime) -> bool:
    """
    Return whether a reservation currently holds its resource.

    Args:
        reservation: The stored reservation, or None if there is none
        now: Evaluation time

    Returns:
        False for no reservation, True for an eternal one, otherwise
        ``now < reserved_until``. A reservation expiring exactly at ``now``
        is already expired.
    """
    if reservation is None:
        return False
    if reservation.reserved_until is None:
        return True
    return now < reservation.reserved_until


def reserved_until_for(now: datetime, duration: timedelta | None) -> datetime | None:
    """Expiry for a reservation made at ``now``; None means eternal."""
    if duration is None:
        return None
    return now + duration


def time_remaining(reservation: Reservation | None, now: datetime) -> timedelta | None:
    """
    Time left on a reservation, for display.

    Returns None for an eternal reservation and ``timedelta(0)`` when there
    is no reservation or it has expired.
    """
    if reservation is None:
        return timedelta(0)
    if reservation.reserved_until is None:
        return None
    if not is_active(reservation, now):
        return timedelta(0)
    return reservation.reserved_until - now


__all__ = ["is_active", "reserved_until_for", "time_remaining"]
