"""Tests for resolving and editing fields in JSON documents."""
import copy

import pytest

from contractfuzz.errors import FieldPathError
from contractfuzz.fuzzer import navigator
from contractfuzz.fuzzer.fieldpath import FieldPath


@pytest.fixture
def order():
    return {
        "id": 7,
        "customer": {"name": "Ann", "address": {"zip": "1000"}},
        "items": [
            {"sku": "A1", "qty": 1},
            {"sku": "B2", "qty": 3},
            {"note": "gift"},
        ],
    }


def test_resolve_nested_object(order):
    locations = navigator.resolve(order, "customer#address#zip")
    assert len(locations) == 1
    assert locations[0].value == "1000"


def test_resolve_fans_out_over_arrays(order):
    """Each array element holding the field is one location, in order."""
    locations = navigator.resolve(order, "items#sku")
    assert [loc.value for loc in locations] == ["A1", "B2"]


def test_missing_field_resolves_to_nothing(order):
    assert navigator.resolve(order, "customer#phone") == []
    assert navigator.resolve(order, "id#nested") == []
    assert not navigator.is_field_in(order, "missing")
    assert navigator.is_field_in(order, "items#note")


def test_resolve_on_root_array():
    document = [{"id": 1}, {"id": 2}, {"other": 3}]
    assert [loc.value for loc in navigator.resolve(document, "id")] == [1, 2]


def test_delete_removes_every_location(order):
    assert navigator.delete(order, "items#qty") == 2
    assert order["items"][0] == {"sku": "A1"}
    assert order["items"][1] == {"sku": "B2"}


def test_rename_keeps_value_and_sibling_order(order):
    count = navigator.rename_key(order, "customer#name", lambda key: key.upper())
    assert count == 1
    assert list(order["customer"]) == ["NAME", "address"]
    assert order["customer"]["NAME"] == "Ann"


def test_rename_onto_existing_sibling_is_skipped(order):
    count = navigator.rename_key(order, "customer#name", lambda key: "address")
    assert count == 0
    assert order["customer"] == {"name": "Ann", "address": {"zip": "1000"}}


def test_string_paths_respect_the_depth_limit():
    deep = {"a": {"b": {"c": {"d": {"e": {"f": 1}}}}}}
    assert navigator.resolve(deep, "a#b#c#d#e")
    with pytest.raises(FieldPathError):
        navigator.resolve(deep, "a#b#c#d#e#f")
    assert navigator.resolve(deep, FieldPath.parse("a#b#c#d#e#f", max_depth=6))[0].value == 1


def test_insert_key_at_root_and_under_parent(order):
    assert navigator.insert_key(order, None, "extra", True) == 1
    assert list(order)[-1] == "extra"

    assert navigator.insert_key(order, "items", "flag", 1) == 3
    assert all(item["flag"] == 1 for item in order["items"])


def test_insert_key_under_scalar_touches_nothing(order):
    assert navigator.insert_key(order, "id", "x", 1) == 0


def test_all_field_paths(order):
    fields = navigator.all_field_paths(order)
    assert fields == [
        "id", "customer", "customer#name", "customer#address", "customer#address#zip",
        "items", "items#sku", "items#qty", "items#note",
    ]


def test_resolve_does_not_mutate(order):
    before = copy.deepcopy(order)
    navigator.resolve(order, "items#sku")
    assert order == before


@pytest.mark.parametrize("payload", [None, "", "  ", "{}", '"{}"', {}])
def test_empty_payloads(payload):
    assert navigator.is_empty_payload(payload)


@pytest.mark.parametrize("payload", [{"a": 1}, "[]", '{"a": 1}', []])
def test_non_empty_payloads(payload):
    assert not navigator.is_empty_payload(payload)


def test_serialize_rejects_nan():
    with pytest.raises(ValueError):
        navigator.serialize({"value": float("nan")})


def test_parse_document_rejects_malformed_json():
    with pytest.raises(ValueError):
        navigator.parse_document('{"a": ')
