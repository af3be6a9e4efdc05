import pytest

from quick_reserve.exceptions import ResourceNotFoundError, ValidationError
from quick_reserve.protocols import ResourceSourceProtocol
from quick_reserve.sources import StaticResourceSource
from quick_reserve.types import Resource


class TestStaticResourceSource:
    @pytest.fixture
    def source(self, resources):
        return StaticResourceSource(resources)

    def test_satisfies_protocol(self, source):
        assert isinstance(source, ResourceSourceProtocol)

    @pytest.mark.asyncio
    async def test_list_preserves_insertion_order(self, source):
        listed = await source.list_resources()
        assert [r.id for r in listed] == [1, 2, 3, 4]
        assert len(source) == 4

    @pytest.mark.asyncio
    async def test_list_returns_copy(self, source):
        listed = await source.list_resources()
        listed.clear()
        assert len(await source.list_resources()) == 4

    @pytest.mark.asyncio
    async def test_add_appends(self, source):
        source.add(Resource(id=5, name="switch-1", device_type="Switch"))
        assert (await source.list_resources())[-1].id == 5

    def test_add_duplicate_rejected(self, source):
        with pytest.raises(ValueError, match="already exists"):
            source.add(Resource(id=1, name="dup"))

    def test_string_and_int_ids_share_key(self, source):
        with pytest.raises(ValueError):
            source.add(Resource(id="1", name="dup"))

    def test_add_overlong_device_type_rejected(self, source):
        with pytest.raises(ValidationError) as exc_info:
            source.add(Resource(id=9, name="x", device_type="x" * 51))
        assert exc_info.value.field == "device_type"

    def test_device_type_at_limit_accepted(self, source):
        source.add(Resource(id=9, name="x", device_type="x" * 50))
        assert source.get(9).device_type == "x" * 50

    def test_untyped_resource_kept_as_none(self, source):
        assert source.get(4).device_type is None

    def test_get_and_remove(self, source):
        assert source.get("2").name == "router-1"
        removed = source.remove(2)
        assert removed.id == 2
        with pytest.raises(ResourceNotFoundError):
            source.get(2)

    def test_remove_unknown(self, source):
        with pytest.raises(ResourceNotFoundError):
            source.remove(99)

    @pytest.mark.asyncio
    async def test_set_device_type_keeps_fields_and_position(self):
        source = StaticResourceSource(
            [
                Resource(id=1, name="a", device_type="Server", custom_fields="rack 4"),
                Resource(id=2, name="b", device_type="Router"),
            ]
        )

        updated = source.set_device_type(1, "Switch")

        assert updated == Resource(
            id=1, name="a", device_type="Switch", custom_fields="rack 4"
        )
        assert [r.device_type for r in await source.list_resources()] == [
            "Switch",
            "Router",
        ]

    def test_set_device_type_unknown(self, source):
        with pytest.raises(ResourceNotFoundError):
            source.set_device_type(99, "Server")

    def test_set_device_type_overlong(self, source):
        with pytest.raises(ValidationError):
            source.set_device_type(1, "y" * 51)
        assert source.get(1).device_type == "Server"

    def test_clear_device_type(self, source):
        assert source.set_device_type(1, None).device_type is None
