import pytest

from quick_reserve.exceptions import (
    ClaimConflictError,
    ConfigurationError,
    NoAvailableResourceError,
    QuickReserveError,
    ResourceNotFoundError,
    StoreUnavailableError,
    ValidationError,
)


class TestExceptionHierarchy:
    @pytest.mark.parametrize(
        "exc",
        [
            ValidationError("bad"),
            NoAvailableResourceError("Server"),
            ClaimConflictError("1"),
            StoreUnavailableError("down"),
            ResourceNotFoundError(7),
            ConfigurationError("nope"),
        ],
    )
    def test_all_inherit_from_base(self, exc):
        assert isinstance(exc, QuickReserveError)
        assert isinstance(exc, Exception)

    def test_kinds_are_distinct(self):
        kinds = {
            ValidationError.kind,
            NoAvailableResourceError.kind,
            ClaimConflictError.kind,
            StoreUnavailableError.kind,
            ResourceNotFoundError.kind,
            ConfigurationError.kind,
        }
        assert len(kinds) == 6


class TestValidationError:
    def test_field(self):
        e = ValidationError("device_type is required", "device_type")
        assert e.field == "device_type"
        assert str(e) == "device_type is required"

    def test_field_optional(self):
        assert ValidationError("bad").field is None


class TestNoAvailableResourceError:
    def test_default_message(self):
        e = NoAvailableResourceError("Server")
        assert e.device_type == "Server"
        assert "Server" in str(e)
        assert e.kind == "NoAvailableResource"

    def test_custom_message(self):
        e = NoAvailableResourceError("Server", "all busy")
        assert str(e) == "all busy"


class TestOtherErrors:
    def test_claim_conflict(self):
        e = ClaimConflictError("42")
        assert e.resource_id == "42"
        assert "42" in str(e)

    def test_store_unavailable(self):
        e = StoreUnavailableError("connection refused", store_type="redis")
        assert e.store_type == "redis"
        assert e.kind == "StoreUnavailable"

    def test_resource_not_found(self):
        e = ResourceNotFoundError(3)
        assert e.resource_id == 3
        assert "3" in str(e)

    def test_catch_with_base(self):
        with pytest.raises(QuickReserveError):
            raise NoAvailableResourceError("Router")
