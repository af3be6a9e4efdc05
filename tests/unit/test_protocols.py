from collections.abc import Sequence
from dataclasses import is_dataclass

import pytest

from quick_reserve.config import QuickReserveConfig
from quick_reserve.protocols import ResourceSourceProtocol
from quick_reserve.service import create_service
from quick_reserve.types import ReserveRequest, Resource


class DatabaseSource:
    """Source shaped like an application's own resource table."""

    def __init__(self, rows: list[tuple[int, str, str | None]]):
        self.rows = rows
        self.calls = 0

    async def list_resources(self) -> Sequence[Resource]:
        self.calls += 1
        return tuple(Resource(id=i, name=n, device_type=t) for i, n, t in self.rows)


class TestProtocols:
    def test_resource_source_protocol_runtime_checkable(self):
        """Verify ResourceSourceProtocol is runtime checkable."""
        assert isinstance(DatabaseSource([]), ResourceSourceProtocol)

    def test_object_without_list_resources_rejected(self):
        class NotASource:
            async def resources(self):
                return []

        assert not isinstance(NotASource(), ResourceSourceProtocol)

    @pytest.mark.asyncio
    async def test_source_read_on_every_call(self):
        source = DatabaseSource([(10, "edge-1", "Router"), (11, "edge-2", "Router")])
        service = create_service(
            source=source, config=QuickReserveConfig(metrics_enabled=False)
        )

        first = await service.reserve(
            ReserveRequest(device_type="Router", holder_name="alice")
        )
        source.rows.append((12, "edge-3", "Router"))
        types = await service.list_device_types()

        assert first.resource_id == 10
        assert types == ["Router"]
        assert source.calls == 2


class TestDataclasses:
    def test_resource_is_dataclass(self):
        resource = Resource(id=1, name="a")
        assert is_dataclass(resource)
        assert resource.device_type is None
