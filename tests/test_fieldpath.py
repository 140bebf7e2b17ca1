"""Tests for compound field names."""
import pytest

from contractfuzz.errors import FieldPathError
from contractfuzz.fuzzer.fieldpath import FieldPath, is_cyclic_reference


def test_parse_splits_on_hash():
    """A compound name splits into its segments."""
    path = FieldPath.parse("user#address#zip")
    assert path.segments == ("user", "address", "zip")
    assert path.name == "user#address#zip"
    assert path.leaf == "zip"
    assert path.depth == 3


def test_parent_and_child():
    path = FieldPath.parse("user#address")
    assert path.parent == FieldPath(("user",))
    assert FieldPath.parse("user").parent is None
    assert path.child("zip").name == "user#address#zip"


def test_root_array_prefix_is_stripped():
    """Exported contracts may address root arrays as $[*]#field."""
    assert FieldPath.parse("$[*]#id").segments == ("id",)
    assert FieldPath.parse("$[0]#items#id").segments == ("items", "id")


@pytest.mark.parametrize("name", ["", "   ", "a##b", "#a", "a#", "a\x00b", "user#na\nme"])
def test_invalid_names_rejected(name):
    with pytest.raises(FieldPathError):
        FieldPath.parse(name)


def test_depth_limit():
    """Names deeper than max_depth are rejected; at the limit they parse."""
    assert FieldPath.parse("a#b#c#d#e").depth == 5
    with pytest.raises(FieldPathError):
        FieldPath.parse("a#b#c#d#e#f")
    assert FieldPath.parse("a#b#c#d#e#f", max_depth=6).depth == 6


def test_non_string_rejected():
    with pytest.raises(FieldPathError):
        FieldPath.parse(None)


def test_cyclic_reference_detection():
    assert is_cyclic_reference("node#node#node#node", 3)
    assert not is_cyclic_reference("node#node#node", 3)
    assert not is_cyclic_reference("user#address#zip", 2)
    assert not is_cyclic_reference(None, 3)
    assert not is_cyclic_reference("", 3)


def test_cyclic_reference_is_case_insensitive_and_splits_underscores():
    assert is_cyclic_reference("Node#node_NODE#node", 3)
