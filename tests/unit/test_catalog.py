from quick_reserve.catalog import (
    add_type,
    group_by_device_type,
    list_types,
    matches_device_type,
    normalize_device_type,
)
from quick_reserve.types import Resource


class TestNormalizeDeviceType:
    def test_missing_and_empty_fold_to_other(self):
        assert normalize_device_type(None) == "Other"
        assert normalize_device_type("") == "Other"

    def test_label_kept_as_is(self):
        assert normalize_device_type("Server") == "Server"
        assert normalize_device_type("Other") == "Other"


class TestMatchesDeviceType:
    def test_exact_match(self):
        assert matches_device_type("Server", "Server") is True

    def test_case_sensitive(self):
        assert matches_device_type("server", "Server") is False

    def test_other_matches_untyped(self):
        assert matches_device_type(None, "Other") is True
        assert matches_device_type("", "Other") is True
        assert matches_device_type("Other", "Other") is True

    def test_other_does_not_match_typed(self):
        assert matches_device_type("Server", "Other") is False

    def test_untyped_does_not_match_named_request(self):
        assert matches_device_type(None, "Server") is False


class TestListTypes:
    def test_distinct_sorted(self, resources):
        assert list_types(resources) == ["Router", "Server"]

    def test_empty_collection(self):
        assert list_types([]) == []

    def test_blank_labels_left_out(self):
        resources = [
            Resource(id=1, name="a", device_type="  "),
            Resource(id=2, name="b", device_type=""),
            Resource(id=3, name="c", device_type="Switch"),
        ]
        assert list_types(resources) == ["Switch"]

    def test_sorted_by_code_point(self):
        resources = [
            Resource(id=1, name="a", device_type="router"),
            Resource(id=2, name="b", device_type="Server"),
            Resource(id=3, name="c", device_type="Router"),
        ]
        assert list_types(resources) == ["Router", "Server", "router"]

    def test_explicit_other_label_listed(self):
        resources = [Resource(id=1, name="a", device_type="Other")]
        assert list_types(resources) == ["Other"]

    def test_stable_for_unchanged_collection(self, resources):
        assert list_types(resources) == list_types(list(reversed(resources)))


class TestAddType:
    def test_appends_new_label(self):
        assert add_type(["Router", "Server"], "Switch") == ["Router", "Server", "Switch"]

    def test_existing_label_unchanged(self):
        assert add_type(["Router", "Server"], "Server") == ["Router", "Server"]

    def test_appends_custom_label(self):
        assert add_type(["Server", "Router"], "CustomSwitch") == [
            "Server",
            "Router",
            "CustomSwitch",
        ]

    def test_case_sensitive(self):
        assert add_type(["Server"], "server") == ["Server", "server"]

    def test_does_not_mutate_input(self):
        existing = ["Server"]
        add_type(existing, "Router")
        assert existing == ["Server"]


class TestGroupByDeviceType:
    def test_groups_in_first_seen_order(self, resources):
        groups = group_by_device_type(resources)

        assert list(groups) == ["Server", "Router", "Other"]
        assert [r.id for r in groups["Server"]] == [1, 3]
        assert [r.id for r in groups["Router"]] == [2]
        assert [r.id for r in groups["Other"]] == [4]

    def test_untyped_and_explicit_other_share_bucket(self):
        resources = [
            Resource(id=1, name="a", device_type="Other"),
            Resource(id=2, name="b", device_type=None),
            Resource(id=3, name="c", device_type=""),
        ]
        assert [r.id for r in group_by_device_type(resources)["Other"]] == [1, 2, 3]
