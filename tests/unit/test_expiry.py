from datetime import timedelta

from quick_reserve.expiry import is_active, reserved_until_for, time_remaining
from quick_reserve.types import Reservation


class TestIsActive:
    def test_no_reservation_is_inactive(self, now):
        assert is_active(None, now) is False

    def test_eternal_reservation_is_active(self, now):
        reservation = Reservation(holder_name="alice", reserved_at=now)
        assert is_active(reservation, now) is True
        assert is_active(reservation, now + timedelta(days=3650)) is True

    def test_future_expiry_is_active(self, now):
        reservation = Reservation(
            holder_name="alice",
            reserved_at=now,
            reserved_until=now + timedelta(seconds=1),
        )
        assert is_active(reservation, now) is True

    def test_expiry_boundary_is_exclusive(self, now):
        """A reservation that expires exactly now is already free."""
        reservation = Reservation(
            holder_name="alice",
            reserved_at=now - timedelta(hours=1),
            reserved_until=now,
        )
        assert is_active(reservation, now) is False
        assert is_active(reservation, now - timedelta(microseconds=1)) is True

    def test_past_expiry_is_inactive(self, expired, now):
        assert is_active(expired, now) is False


class TestReservedUntilFor:
    def test_none_duration_is_eternal(self, now):
        assert reserved_until_for(now, None) is None

    def test_duration_added_to_now(self, now):
        assert reserved_until_for(now, timedelta(hours=1)) == now + timedelta(hours=1)


class TestTimeRemaining:
    def test_no_reservation(self, now):
        assert time_remaining(None, now) == timedelta(0)

    def test_eternal(self, now):
        reservation = Reservation(holder_name="alice", reserved_at=now)
        assert time_remaining(reservation, now) is None

    def test_expired(self, expired, now):
        assert time_remaining(expired, now) == timedelta(0)

    def test_active(self, now):
        reservation = Reservation(
            holder_name="alice",
            reserved_at=now,
            reserved_until=now + timedelta(minutes=30),
        )
        assert time_remaining(reservation, now + timedelta(minutes=10)) == timedelta(
            minutes=20
        )
