"""
Units file loader — operations and explicit fuzzing units from JSON or YAML.

    operations:
      - path: /users
        method: POST
        payload: {"user": {"age": 30}}
        headers: [{name: X-Request-Id, value: abc, required: true}]
        response_codes: ["201", "400", "4XX"]
        schemas:
          user#age: {type: integer, minimum: 0, maximum: 150}
    units:
      - operation: 0
        fuzzer: AgeBelowZero
        field: user#age
        strategy: REPLACE
        value: -1
        expected: 4XX
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from contractfuzz.errors import ContractError
from contractfuzz.fuzzer import families, navigator
from contractfuzz.fuzzer.strategy import MutationStrategy, StrategyKind
from contractfuzz.models import FuzzingUnit, HeaderSpec, InjectionKind, Operation, SchemaDescriptor, UnitTarget

logger = logging.getLogger(__name__)


def read_document(path: Path) -> dict[str, Any]:
    """Read a JSON or YAML (by extension) units file."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ContractError(f"Cannot read units file {path}: {e}") from e

    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ContractError(f"Malformed units file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ContractError(f"Units file {path} must contain a mapping at the top level")
    return data


def parse_operation(raw: dict[str, Any]) -> Operation:
    if not isinstance(raw, dict) or "path" not in raw:
        raise ContractError(f"Operation needs at least a 'path': {raw!r:.80}")

    required = set(raw.get("required", []))
    schemas = {
        name: SchemaDescriptor.from_openapi(schema or {}, required=name in required)
        for name, schema in (raw.get("schemas") or {}).items()
    }
    payload = raw.get("payload")
    if isinstance(payload, str):
        try:
            payload = None if navigator.is_empty_payload(payload) else navigator.parse_document(payload)
        except ValueError as e:
            raise ContractError(f"Payload of {raw['path']} is not valid JSON: {e}") from e

    headers = [
        HeaderSpec(name=h, value="") if isinstance(h, str) else HeaderSpec(**h)
        for h in raw.get("headers", [])
    ]
    return Operation(
        path=raw["path"],
        method=str(raw.get("method", "POST")).upper(),
        payload=payload,
        headers=headers,
        response_codes=[str(code) for code in raw.get("response_codes", [])],
        schemas=schemas,
        discriminators=list(raw.get("discriminators", [])),
    )


def parse_unit(raw: dict[str, Any], operations: list[Operation]) -> FuzzingUnit:
    ref = raw.get("operation", 0)
    if isinstance(ref, int):
        if not 0 <= ref < len(operations):
            raise ContractError(f"Unit refers to unknown operation index {ref}")
        operation = operations[ref]
    else:
        matches = [op for op in operations if op.path == ref or op.label == ref]
        if not matches:
            raise ContractError(f"Unit refers to unknown operation {ref!r}")
        operation = matches[0]

    try:
        kind = StrategyKind(str(raw.get("strategy", "REPLACE")).upper())
        expected = families.resolve(str(raw.get("expected", "4XX")))
        security = InjectionKind(raw["security"]) if raw.get("security") else None
        target = UnitTarget(raw.get("target", "body"))
    except ValueError as e:
        raise ContractError(f"Invalid unit {raw!r:.80}: {e}") from e

    return FuzzingUnit(
        fuzzer=str(raw.get("fuzzer", "Custom")),
        operation=operation,
        field=str(raw.get("field", "")),
        strategy=MutationStrategy(kind, raw.get("value")),
        expected=expected,
        target=target,
        security=security,
        allow_discriminator=bool(raw.get("allow_discriminator", False)),
        scenario=str(raw.get("scenario", "")),
    )


def load_units_file(path: Path) -> tuple[list[Operation], list[FuzzingUnit]]:
    """Load operations and explicit units. Raises ``ContractError`` on malformed input."""
    data = read_document(path)
    try:
        operations = [parse_operation(raw) for raw in data.get("operations", [])]
        units = [parse_unit(raw, operations) for raw in data.get("units", [])]
    except (ValidationError, ValueError, TypeError) as e:
        raise ContractError(f"Invalid units file {path}: {e}") from e

    if not operations:
        raise ContractError(f"Units file {path} declares no operations")
    logger.info("Loaded %d operation(s) and %d explicit unit(s) from %s", len(operations), len(units), path)
    return operations, units
