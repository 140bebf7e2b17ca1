"""
Built-in fuzzers — data sources that turn an operation into fuzzing units.

Each fuzzer is a small recipe over the field and header iterators.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from contractfuzz.errors import ContractError
from contractfuzz.fuzzer import families
from contractfuzz.fuzzer.context import ContractContext
from contractfuzz.fuzzer.generators import generate_for
from contractfuzz.fuzzer.iterators import iterate_fields, iterate_headers, new_field_unit
from contractfuzz.fuzzer.strategy import duplicate_key, insert, prefix, remove, skip, trail
from contractfuzz.models import FuzzingUnit, InjectionKind, Operation, SchemaDescriptor, SchemaType

logger = logging.getLogger(__name__)

BODYLESS_METHODS = ("GET", "DELETE", "HEAD")

SQL_PAYLOADS = ["' OR '1'='1", "1; DROP TABLE users--", "' UNION SELECT NULL--", "admin'--"]
XSS_PAYLOADS = ["<script>alert('XSS')</script>", "<img src=x onerror=alert('XSS')>", "<svg onload=alert('XSS')>"]
COMMAND_PAYLOADS = ["; ls -la", "| cat /etc/passwd", "$(id)", "`uname -a`"]

Builder = Callable[[Operation, ContractContext], Iterable[FuzzingUnit]]


@dataclass
class FuzzerSpec:
    name: str
    description: str
    build: Builder
    skip_methods: tuple[str, ...] = ()


def _is_string(schema: Optional[SchemaDescriptor]) -> bool:
    return schema is None or schema.type is SchemaType.STRING


def _generated(kind: str, strict: bool = True):
    def producer(schema: Optional[SchemaDescriptor], field: str):
        if schema is None:
            return []
        return generate_for(schema, [kind], strict_types=strict)
    return producer


def _once(schema: Optional[SchemaDescriptor], field: str):
    return [None]


def _payloads(values: list[str]):
    return lambda schema, field: values


def _required_family(field: str, schema: Optional[SchemaDescriptor], value) -> families.ResponseCodeFamily:
    return families.for_required(bool(schema and schema.required))


# ── Field fuzzers ────────────────────────────────────────────────────────────

def _boundary(operation: Operation, context: ContractContext):
    return iterate_fields(operation, context, "Boundary", _generated("boundary"), families.FOURXX)


def _type_coercion(operation: Operation, context: ContractContext):
    return iterate_fields(
        operation, context, "TypeCoercion",
        _generated("type_coercion", context.strict_types),
        families.expected_for_type_coercion(context.strict_types),
    )


def _invalid_values(operation: Operation, context: ContractContext):
    return iterate_fields(operation, context, "InvalidValues", _generated("invalid_values"), families.FOURXX)


def _remove_fields(operation: Operation, context: ContractContext):
    return iterate_fields(
        operation, context, "RemoveFields", _once, _required_family,
        strategy_factory=lambda _: remove(),
    )


def _duplicate_keys(operation: Operation, context: ContractContext):
    return iterate_fields(
        operation, context, "DuplicateKeys", _once, families.FOURXX,
        strategy_factory=lambda _: duplicate_key(),
    )


def _zero_width_names(operation: Operation, context: ContractContext):
    return iterate_fields(
        operation, context, "ZeroWidthCharsInNames", _once, families.FOURXX,
        strategy_factory=lambda _: insert("\u200b"),
    )


def _leading_control_chars(operation: Operation, context: ContractContext):
    return iterate_fields(
        operation, context, "LeadingControlChars", _payloads(["\u0000", "\u200b"]), families.FOURXX_TWOXX,
        strategy_factory=prefix, schema_filter=_is_string,
    )


def _trailing_control_chars(operation: Operation, context: ContractContext):
    return iterate_fields(
        operation, context, "TrailingControlChars", _payloads(["\u0000", "\u200b"]), families.FOURXX_TWOXX,
        strategy_factory=trail, schema_filter=_is_string,
    )


def _new_fields(operation: Operation, context: ContractContext):
    unit = new_field_unit(operation)
    return [unit] if unit else []


def _injection(name: str, kind: InjectionKind, payloads: list[str]) -> Builder:
    def build(operation: Operation, context: ContractContext):
        return iterate_fields(
            operation, context, name, _payloads(payloads), families.FOURXX_TWOXX,
            schema_filter=_is_string, security=kind,
        )
    return build


# ── Header fuzzers ───────────────────────────────────────────────────────────

def _remove_headers(operation: Operation, context: ContractContext):
    return iterate_headers(operation, "RemoveHeaders", [remove()])


def _duplicate_headers(operation: Operation, context: ContractContext):
    return iterate_headers(
        operation, "DuplicateHeaders", [duplicate_key(None)],
        families.FOURXX_TWOXX, families.FOURXX_TWOXX,
    )


def _zero_width_headers(operation: Operation, context: ContractContext):
    return iterate_headers(
        operation, "ZeroWidthCharsInHeaders", [prefix("\u200b"), trail("\u200b")],
        families.FOURXX, families.FOURXX_TWOXX,
    )


FUZZERS: dict[str, FuzzerSpec] = {spec.name: spec for spec in [
    FuzzerSpec("Boundary", "Values just outside declared lengths, ranges and item counts", _boundary, BODYLESS_METHODS),
    FuzzerSpec("TypeCoercion", "Values of the wrong JSON type", _type_coercion, BODYLESS_METHODS),
    FuzzerSpec("InvalidValues", "Values outside enums, formats and patterns", _invalid_values, BODYLESS_METHODS),
    FuzzerSpec("RemoveFields", "Remove one field at a time", _remove_fields, BODYLESS_METHODS),
    FuzzerSpec("DuplicateKeys", "Send a field's key twice in its object", _duplicate_keys, BODYLESS_METHODS),
    FuzzerSpec("ZeroWidthCharsInNames", "Insert a zero-width space in field names", _zero_width_names, BODYLESS_METHODS),
    FuzzerSpec("LeadingControlChars", "Prefix string values with control characters", _leading_control_chars, BODYLESS_METHODS),
    FuzzerSpec("TrailingControlChars", "Suffix string values with control characters", _trailing_control_chars, BODYLESS_METHODS),
    FuzzerSpec("NewFields", "Add an undeclared field to the payload", _new_fields, BODYLESS_METHODS),
    FuzzerSpec("SqlInjection", "SQL injection payloads in string fields", _injection("SqlInjection", InjectionKind.SQL, SQL_PAYLOADS), ("HEAD",)),
    FuzzerSpec("XssInjection", "XSS payloads in string fields", _injection("XssInjection", InjectionKind.XSS, XSS_PAYLOADS), ("HEAD",)),
    FuzzerSpec("CommandInjection", "OS command injection payloads in string fields", _injection("CommandInjection", InjectionKind.COMMAND, COMMAND_PAYLOADS), ("HEAD",)),
    FuzzerSpec("RemoveHeaders", "Remove one header at a time", _remove_headers),
    FuzzerSpec("DuplicateHeaders", "Send a header twice", _duplicate_headers),
    FuzzerSpec("ZeroWidthCharsInHeaders", "Zero-width characters around header values", _zero_width_headers),
]}


def build_units(operations: list[Operation], context: ContractContext, fuzzers: Optional[list[str]] = None) -> list[FuzzingUnit]:
    """Collect units from all enabled fuzzers for every operation."""
    active = fuzzers or list(FUZZERS)
    unknown = [name for name in active if name not in FUZZERS]
    if unknown:
        raise ContractError(f"Unknown fuzzer(s): {', '.join(unknown)}")

    units: list[FuzzingUnit] = []
    for operation in operations:
        for name in active:
            spec = FUZZERS[name]
            if operation.method.upper() in spec.skip_methods:
                units.append(FuzzingUnit(
                    fuzzer=name,
                    operation=operation,
                    strategy=skip(f"{name} does not apply to {operation.method.upper()} requests"),
                    expected=families.TWOXX_GENERIC,
                ))
                continue
            built = list(spec.build(operation, context))
            logger.debug("%s built %d unit(s) for %s", name, len(built), operation.label)
            units.extend(built)
    return units
