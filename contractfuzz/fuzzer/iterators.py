"""
Unit builders — turn an operation plus a value source into fuzzing units,
one per field (or header) per value.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Iterable, Iterator, Optional, Union

from contractfuzz.errors import ContractError
from contractfuzz.fuzzer import navigator
from contractfuzz.fuzzer.context import ContractContext
from contractfuzz.fuzzer.families import FOURXX, TWOXX, ResponseCodeFamily
from contractfuzz.fuzzer.fieldpath import is_cyclic_reference
from contractfuzz.fuzzer.generators.base import FuzzValue
from contractfuzz.fuzzer.strategy import MutationStrategy, noop, replace
from contractfuzz.models import FuzzingUnit, InjectionKind, Operation, SchemaDescriptor, UnitTarget

logger = logging.getLogger(__name__)

NEW_FIELD = "contractfuzzField"

AUTH_HEADERS = {
    "authorization", "jwt", "api-key", "api_key", "apikey", "x-api-key",
    "secret", "secret-key", "secret_key", "api-secret", "api_secret", "apisecret",
    "api-token", "api_token", "apitoken", "token",
}

METHODS_WITH_BODY = {"POST", "PUT", "PATCH"}

ValueProducer = Callable[[Optional[SchemaDescriptor], str], Iterable[Any]]
ExpectedFor = Callable[[str, Optional[SchemaDescriptor], Any], ResponseCodeFamily]


def is_auth_header(name: str) -> bool:
    return name.lower() in AUTH_HEADERS


def _document(operation: Operation) -> Any:
    document = operation.payload
    if isinstance(document, (str, bytes)):
        if navigator.is_empty_payload(document):
            return None
        try:
            return navigator.parse_document(document)
        except ValueError as e:
            raise ContractError(f"Payload of {operation.label} is not valid JSON: {e}") from e
    return document


def fields_of(operation: Operation) -> list[str]:
    """Fields declared by the contract first, then any others the payload carries."""
    fields = list(operation.schemas)
    for name in navigator.all_field_paths(_document(operation)):
        if name not in fields:
            fields.append(name)
    return fields


def iterate_fields(
    operation: Operation,
    context: ContractContext,
    fuzzer: str,
    value_producer: ValueProducer,
    expected: Union[ResponseCodeFamily, ExpectedFor],
    strategy_factory: Callable[[Any], MutationStrategy] = replace,
    field_filter: Optional[Callable[[str], bool]] = None,
    schema_filter: Optional[Callable[[Optional[SchemaDescriptor]], bool]] = None,
    security: Optional[InjectionKind] = None,
    scenario: str = "",
) -> Iterator[FuzzingUnit]:
    """
    Yield one unit per field per produced value.

    Discriminator fields, runaway self references and fields rejected by
    either filter are skipped. ``expected`` is either a fixed family or a
    callable of ``(field, schema, value)``; a ``FuzzValue`` carrying its own
    expected family overrides both.
    """
    for field in fields_of(operation):
        schema = context.schema_for(operation, field)

        if context.is_discriminator(field):
            logger.debug("Skipping discriminator field %s for %s", field, fuzzer)
            continue
        if is_cyclic_reference(field, context.max_depth):
            logger.debug("Skipping cyclic field %s for %s", field, fuzzer)
            continue
        if (schema_filter and not schema_filter(schema)) or (field_filter and not field_filter(field)):
            logger.debug("Skipping %s for %s: filtered out", field, fuzzer)
            continue

        for produced in value_producer(schema, field):
            value = produced.value if isinstance(produced, FuzzValue) else produced
            if isinstance(produced, FuzzValue) and produced.expected is not None:
                family = produced.expected
            elif isinstance(expected, ResponseCodeFamily):
                family = expected
            else:
                family = expected(field, schema, value)

            yield FuzzingUnit(
                fuzzer=fuzzer,
                operation=operation,
                field=field,
                strategy=strategy_factory(value),
                expected=family,
                security=security,
                scenario=scenario or f"Send [{value!r:.60}] in field [{field}]",
            )


def iterate_headers(
    operation: Operation,
    fuzzer: str,
    strategies: Iterable[MutationStrategy],
    expected_required: ResponseCodeFamily = FOURXX,
    expected_optional: ResponseCodeFamily = TWOXX,
    skip_auth: bool = True,
) -> Iterator[FuzzingUnit]:
    """Yield one header unit per header per strategy; the expectation follows ``required``."""
    headers = [h for h in operation.headers if not (skip_auth and is_auth_header(h.name))]
    if not headers:
        logger.debug("No headers to fuzz for %s on %s", fuzzer, operation.label)
        return

    strategies = list(strategies)
    for header in headers:
        for strategy in strategies:
            yield FuzzingUnit(
                fuzzer=fuzzer,
                operation=operation,
                field=header.name,
                strategy=strategy,
                expected=expected_required if header.required else expected_optional,
                target=UnitTarget.HEADER,
                scenario=f"Header [{header.name}] with {strategy}",
            )


def new_field_unit(operation: Operation, fuzzer: str = "NewFields", parent: str = "", key: str = NEW_FIELD, value: Any = NEW_FIELD) -> Optional[FuzzingUnit]:
    """
    A unit that sends the payload with one extra, undeclared member.

    Operations that carry a body should reject it; others may ignore it.
    Returns ``None`` when the payload has no object to extend.
    """
    document = _document(operation)
    if navigator.is_empty_payload(document):
        return None

    document = copy.deepcopy(document)
    if navigator.insert_key(document, parent or None, key, value) == 0:
        return None

    expected = FOURXX if operation.method.upper() in METHODS_WITH_BODY else TWOXX
    return FuzzingUnit(
        fuzzer=fuzzer,
        operation=operation,
        strategy=noop(),
        expected=expected,
        document=document,
        scenario=f"Add new field [{key}] inside the request",
    )
