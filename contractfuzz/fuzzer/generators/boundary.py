"""
Boundary Generator — values just outside declared limits.

Off-by-one validation is where most contract drift hides: lengths and
ranges one step past the bound, plus extremes far beyond any sane type.
"""

import sys
from decimal import Decimal

from contractfuzz.fuzzer.generators.base import FuzzValue, no_values, require_exhaustive
from contractfuzz.fuzzer.strategy import mark_large_string
from contractfuzz.models import SchemaDescriptor, SchemaType

GENERATOR_NAME = "boundary"
GENERATOR_DESCRIPTION = "Lengths, ranges and item counts just past the declared limits"

DEFAULT_LARGE_LENGTH = 10000
DECIMAL_STEP = Decimal("0.01")
INT64_MAX = 2**63 - 1

# Twice the 64-bit range: no 64-bit integer type can hold these
MOST_POSITIVE_INTEGER = 2 * INT64_MAX
MOST_NEGATIVE_INTEGER = 2 * -(INT64_MAX + 1)


def _value(name: str, value, description: str) -> FuzzValue:
    return FuzzValue(name=name, generator=GENERATOR_NAME, value=value, description=description)


def _strings(schema: SchemaDescriptor) -> list[FuzzValue]:
    values = []
    if schema.min_length and schema.min_length > 1:
        length = schema.min_length - 1
        values.append(_value(
            f"string_below_min_{length}", "a" * length,
            f"String of {length} chars, min_length is {schema.min_length}",
        ))
    elif schema.min_length == 1:
        values.append(_value("string_empty", "", "Empty string, min_length is 1"))

    if schema.max_length is not None:
        length = schema.max_length + 1
        values.append(_value(
            f"string_above_max_{length}", "a" * length,
            f"String of {length} chars, max_length is {schema.max_length}",
        ))
    else:
        values.append(_value(
            "string_very_large", mark_large_string("a" * DEFAULT_LARGE_LENGTH),
            f"Unbounded string field with {DEFAULT_LARGE_LENGTH} chars",
        ))
    return values


def _numbers(schema: SchemaDescriptor, step: Decimal, cast) -> list[FuzzValue]:
    values = []
    if schema.minimum is not None:
        bound = Decimal(str(schema.minimum))
        below = bound if schema.exclusive_minimum else bound - step
        values.append(_value(
            "number_below_min", cast(below),
            f"Just below minimum {schema.minimum}{' (exclusive)' if schema.exclusive_minimum else ''}",
        ))
    if schema.maximum is not None:
        bound = Decimal(str(schema.maximum))
        above = bound if schema.exclusive_maximum else bound + step
        values.append(_value(
            "number_above_max", cast(above),
            f"Just above maximum {schema.maximum}{' (exclusive)' if schema.exclusive_maximum else ''}",
        ))
    return values


def _integers(schema: SchemaDescriptor) -> list[FuzzValue]:
    values = _numbers(schema, Decimal(1), int)
    values.append(_value("integer_extreme_positive", MOST_POSITIVE_INTEGER, "Twice the 64-bit maximum"))
    values.append(_value("integer_extreme_negative", MOST_NEGATIVE_INTEGER, "Twice the 64-bit minimum"))
    return values


def _decimals(schema: SchemaDescriptor) -> list[FuzzValue]:
    values = _numbers(schema, DECIMAL_STEP, float)
    values.append(_value("decimal_extreme_positive", sys.float_info.max, "Largest double"))
    values.append(_value("decimal_extreme_negative", -sys.float_info.max, "Most negative double"))
    return values


def _arrays(schema: SchemaDescriptor) -> list[FuzzValue]:
    values = []
    if schema.max_items is not None:
        count = schema.max_items + 1
        values.append(_value(
            f"array_above_max_{count}", ["a"] * count,
            f"Array of {count} items, max_items is {schema.max_items}",
        ))
    if schema.min_items:
        count = schema.min_items - 1
        values.append(_value(
            f"array_below_min_{count}", ["a"] * count,
            f"Array of {count} items, min_items is {schema.min_items}",
        ))
    return values


DISPATCH = require_exhaustive({
    SchemaType.STRING: _strings,
    SchemaType.INTEGER: _integers,
    SchemaType.NUMBER: _decimals,
    SchemaType.BOOLEAN: no_values,
    SchemaType.OBJECT: no_values,
    SchemaType.ARRAY: _arrays,
}, GENERATOR_NAME)


def generate(schema: SchemaDescriptor) -> list[FuzzValue]:
    return DISPATCH[schema.type](schema)
