"""Generate wrong-type values for a field, such as strings for numbers or primitives for objects."""

from contractfuzz.fuzzer.families import FOURXX, expected_for_type_coercion
from contractfuzz.fuzzer.generators.base import FuzzValue, require_exhaustive
from contractfuzz.models import SchemaDescriptor, SchemaType

GENERATOR_NAME = "type_coercion"
GENERATOR_DESCRIPTION = "Values of the wrong JSON type for the declared schema"


def _coercible(schema: SchemaDescriptor) -> list[tuple[str, object]]:
    # A lax service may legitimately coerce these
    mutations = {
        SchemaType.STRING: [("string_as_number", 42), ("string_as_boolean", True)],
        SchemaType.INTEGER: [("integer_as_string", "42"), ("integer_as_decimal", 42.5)],
        SchemaType.NUMBER: [("number_as_string", "42.5")],
        SchemaType.BOOLEAN: [("boolean_as_string", "true"), ("boolean_as_number", 1)],
        SchemaType.OBJECT: [],
        SchemaType.ARRAY: [],
    }
    return mutations[schema.type]


def _strings(schema: SchemaDescriptor) -> list[tuple[str, object]]:
    return [("string_as_object", {"value": "fuzz"}), ("string_as_array", ["fuzz"])]


def _integers(schema: SchemaDescriptor) -> list[tuple[str, object]]:
    return [("integer_as_text", "fuzz"), ("integer_as_object", {"value": 1}), ("integer_as_array", [1])]


def _numbers(schema: SchemaDescriptor) -> list[tuple[str, object]]:
    return [("number_as_text", "fuzz"), ("number_as_boolean", True), ("number_as_object", {"value": 1.5})]


def _booleans(schema: SchemaDescriptor) -> list[tuple[str, object]]:
    return [("boolean_as_text", "fuzz"), ("boolean_as_object", {"value": True}), ("boolean_as_array", [True])]


def _objects(schema: SchemaDescriptor) -> list[tuple[str, object]]:
    return [("object_as_string", "fuzz"), ("object_as_number", 42), ("object_as_array", [])]


def _arrays(schema: SchemaDescriptor) -> list[tuple[str, object]]:
    return [("array_as_object", {"value": []}), ("array_as_string", "fuzz")]


DISPATCH = require_exhaustive({
    SchemaType.STRING: _strings,
    SchemaType.INTEGER: _integers,
    SchemaType.NUMBER: _numbers,
    SchemaType.BOOLEAN: _booleans,
    SchemaType.OBJECT: _objects,
    SchemaType.ARRAY: _arrays,
}, GENERATOR_NAME)


def generate(schema: SchemaDescriptor, strict_types: bool = True) -> list[FuzzValue]:
    """
    Wrong-typed values. Values no service should accept expect ``FOURXX``;
    coercible ones (``"42"`` for an integer) follow ``strict_types``.
    """
    values = []
    for name, value in DISPATCH[schema.type](schema):
        values.append(FuzzValue(
            name=name, generator=GENERATOR_NAME, value=value,
            description=f"{schema.type.value} field set to {type(value).__name__}: {repr(value)[:50]}",
            expected=FOURXX,
        ))
    coercion_expected = expected_for_type_coercion(strict_types)
    for name, value in _coercible(schema):
        values.append(FuzzValue(
            name=name, generator=GENERATOR_NAME, value=value,
            description=f"{schema.type.value} field set to coercible {type(value).__name__}: {value!r}",
            expected=coercion_expected,
        ))
    return values
