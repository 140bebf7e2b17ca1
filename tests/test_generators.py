"""Tests for the fuzz value generators."""
import sys

import pytest

from contractfuzz.fuzzer import families
from contractfuzz.fuzzer.generators import GENERATORS, FuzzValue, generate_for
from contractfuzz.fuzzer.generators import boundary, invalid_values, type_coercion
from contractfuzz.fuzzer.strategy import is_large_string
from contractfuzz.models import SchemaDescriptor, SchemaType


def _values(values):
    return [v.value for v in values]


def test_all_generators_registered():
    assert set(GENERATORS) == {"boundary", "type_coercion", "invalid_values"}


def test_every_generator_handles_every_type():
    """Each generator returns a list (possibly empty) for every schema type."""
    for schema_type in SchemaType:
        schema = SchemaDescriptor(type=schema_type)
        for name in GENERATORS:
            values = generate_for(schema, [name])
            assert isinstance(values, list)
            for value in values:
                assert isinstance(value, FuzzValue)
                assert value.generator == name


def test_string_length_boundaries():
    schema = SchemaDescriptor(type=SchemaType.STRING, min_length=3, max_length=10)
    assert _values(boundary.generate(schema)) == ["aa", "a" * 11]


def test_string_min_length_one_yields_empty():
    schema = SchemaDescriptor(type=SchemaType.STRING, min_length=1, max_length=5)
    assert "" in _values(boundary.generate(schema))


def test_unbounded_string_is_large():
    values = _values(boundary.generate(SchemaDescriptor(type=SchemaType.STRING)))
    assert len(values) == 1
    assert is_large_string(values[0])
    assert len(values[0]) > boundary.DEFAULT_LARGE_LENGTH


def test_integer_range_boundaries():
    schema = SchemaDescriptor(type=SchemaType.INTEGER, minimum=0, maximum=150)
    values = _values(boundary.generate(schema))
    assert values[:2] == [-1, 151]
    assert boundary.MOST_POSITIVE_INTEGER in values
    assert boundary.MOST_NEGATIVE_INTEGER in values
    assert all(isinstance(v, int) for v in values)


def test_exclusive_bounds_yield_the_bound():
    schema = SchemaDescriptor(
        type=SchemaType.INTEGER, minimum=0, maximum=10,
        exclusive_minimum=True, exclusive_maximum=True,
    )
    assert _values(boundary.generate(schema))[:2] == [0, 10]


def test_decimal_boundaries_step_by_hundredths():
    schema = SchemaDescriptor(type=SchemaType.NUMBER, minimum=1.5, maximum=2.5)
    values = _values(boundary.generate(schema))
    assert values[:2] == [1.49, 2.51]
    assert sys.float_info.max in values


def test_array_item_boundaries():
    schema = SchemaDescriptor(type=SchemaType.ARRAY, min_items=2, max_items=3)
    assert _values(boundary.generate(schema)) == [["a"] * 4, ["a"]]


def test_type_coercion_strict_expects_rejection():
    values = type_coercion.generate(SchemaDescriptor(type=SchemaType.INTEGER), strict_types=True)
    assert {v.expected for v in values} == {families.FOURXX}
    assert "42" in _values(values)


def test_type_coercion_lax_allows_coercible_values():
    values = type_coercion.generate(SchemaDescriptor(type=SchemaType.INTEGER), strict_types=False)
    by_value = {repr(v.value): v.expected for v in values}
    assert by_value[repr("42")] == families.FOURXX_TWOXX
    assert by_value[repr("fuzz")] == families.FOURXX


def test_enum_values_are_outside_the_enum():
    schema = SchemaDescriptor(type=SchemaType.STRING, enum=("active", "inactive"))
    values = _values(invalid_values.generate(schema))
    assert values == ["ACTIVE", "active_FUZZ"]


def test_format_breakers():
    schema = SchemaDescriptor(type=SchemaType.STRING, format="email")
    assert _values(invalid_values.generate(schema)) == invalid_values.FORMAT_BREAKERS["email"]


def test_pattern_mismatch():
    schema = SchemaDescriptor(type=SchemaType.STRING, pattern="^[a-z]+$")
    assert _values(invalid_values.generate(schema)) == ["FUZZ"]


def test_broken_pattern_is_ignored():
    schema = SchemaDescriptor(type=SchemaType.STRING, pattern="[unclosed")
    assert invalid_values.generate(schema) == []


def test_generate_for_deduplicates():
    """The same value from two generators is sent once, keeping the first."""
    schema = SchemaDescriptor(type=SchemaType.STRING, min_length=1)
    values = generate_for(schema, ["boundary", "boundary"])
    assert len(values) == len({repr(v.value) for v in values})


def test_generate_for_keeps_distinct_types():
    schema = SchemaDescriptor(type=SchemaType.BOOLEAN)
    values = _values(generate_for(schema, ["type_coercion"]))
    assert "true" in values
    assert 1 in values


def test_unknown_generator():
    with pytest.raises(KeyError):
        generate_for(SchemaDescriptor(), ["nope"])
