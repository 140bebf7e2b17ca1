"""
Invalid Values Generator — well-typed values that break a declared constraint.

Enum members that are not in the enum, strings that break the declared
format, and strings that cannot match the declared pattern.
"""

import re

from contractfuzz.fuzzer.generators.base import FuzzValue, no_values, require_exhaustive
from contractfuzz.models import SchemaDescriptor, SchemaType

GENERATOR_NAME = "invalid_values"
GENERATOR_DESCRIPTION = "Values outside enums, declared formats and patterns"

FORMAT_BREAKERS = {
    "date": ["2024-13-45", "not-a-date", "2024/01/01"],
    "date-time": ["2024-01-01T25:61:61Z", "yesterday", "2024-01-01 10:00"],
    "email": ["not-an-email", "user@", "@example.com", "user@@example.com"],
    "uuid": ["not-a-uuid", "123e4567-e89b-12d3-a456-42661417400", "zzzzzzzz-zzzz-zzzz-zzzz-zzzzzzzzzzzz"],
    "uri": ["not a uri", "ht!tp://bad", "://missing-scheme"],
    "url": ["not a url", "ht!tp://bad", "://missing-scheme"],
    "ipv4": ["256.256.256.256", "1.2.3", "not-an-ip"],
    "ipv6": ["2001:db8::g1", ":::", "not-an-ip"],
    "byte": ["not base64!", "===="],
    "password": [""],
}

PATTERN_CANDIDATES = ["fuzz", "FUZZ", "12345", "!@#$%^&*()", " ", "fuzz\nfuzz"]


def _value(name: str, value, description: str) -> FuzzValue:
    return FuzzValue(name=name, generator=GENERATOR_NAME, value=value, description=description)


def _enum_values(schema: SchemaDescriptor) -> list[FuzzValue]:
    if not schema.enum:
        return []
    first = schema.enum[0]
    if not isinstance(first, str):
        return []
    candidates = [first.swapcase(), f"{first}_FUZZ"]
    return [
        _value(f"enum_invalid_{i}", candidate, f"Value '{candidate}' is not one of the enum values")
        for i, candidate in enumerate(candidates)
        if candidate not in schema.enum
    ]


def _format_values(schema: SchemaDescriptor) -> list[FuzzValue]:
    fmt = (schema.format or "").lower()
    return [
        _value(f"{fmt}_invalid_{i}", candidate, f"Value '{candidate}' breaks format '{fmt}'")
        for i, candidate in enumerate(FORMAT_BREAKERS.get(fmt, []))
    ]


def _pattern_values(schema: SchemaDescriptor) -> list[FuzzValue]:
    if not schema.pattern:
        return []
    try:
        compiled = re.compile(schema.pattern)
    except re.error:
        return []
    for candidate in PATTERN_CANDIDATES:
        if not compiled.search(candidate):
            return [_value("pattern_mismatch", candidate, f"Value '{candidate}' does not match {schema.pattern}")]
    return []


def _strings(schema: SchemaDescriptor) -> list[FuzzValue]:
    return _enum_values(schema) + _format_values(schema) + _pattern_values(schema)


DISPATCH = require_exhaustive({
    SchemaType.STRING: _strings,
    SchemaType.INTEGER: no_values,
    SchemaType.NUMBER: no_values,
    SchemaType.BOOLEAN: no_values,
    SchemaType.OBJECT: no_values,
    SchemaType.ARRAY: no_values,
}, GENERATOR_NAME)


def generate(schema: SchemaDescriptor) -> list[FuzzValue]:
    return DISPATCH[schema.type](schema)
