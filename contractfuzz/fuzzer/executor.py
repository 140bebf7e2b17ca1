"""
Executor — runs one fuzzing unit through PREPARE → MUTATE → INVOKE →
CLASSIFY → REPORT and hands every verdict to the reporter.

Ineligible units (empty payload, invalid or absent field, protected
discriminator, unserializable result) produce no request and no verdict.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from contractfuzz.errors import FieldPathError, IneligibleUnit, TransportError, TransportTimeout
from contractfuzz.fuzzer import families, indicators, navigator
from contractfuzz.fuzzer.context import ContractContext
from contractfuzz.fuzzer.fieldpath import FieldPath
from contractfuzz.fuzzer.strategy import StrategyKind, TRUNCATE_AT, format_value
from contractfuzz.fuzzer.transport.http_transport import TransportResponse
from contractfuzz.models import FuzzingUnit, UnitTarget, Verdict, VerdictStatus

logger = logging.getLogger(__name__)


class Transport(Protocol):
    def call(self, method: str, url: str, headers: list[tuple[str, str]], body: Optional[str], timeout: Optional[float] = None) -> TransportResponse:
        ...


class Reporter(Protocol):
    def report(self, verdict: Verdict) -> None:
        ...


@dataclass
class PreparedRequest:
    """One request ready to send: the payload for one fan-out location."""
    body: Optional[str]
    headers: list[tuple[str, str]]
    location: int = 0
    value_preview: str = ""


class Executor:
    def __init__(self, transport: Transport, reporter: Reporter, context: Optional[ContractContext] = None, timeout: Optional[float] = None):
        self.transport = transport
        self.reporter = reporter
        self.context = context or ContractContext()
        self.timeout = timeout

    def execute(self, unit: FuzzingUnit) -> list[Verdict]:
        """Run a unit to completion. Returns the verdicts reported (possibly none)."""
        if unit.strategy.kind is StrategyKind.SKIP:
            verdict = self.verdict_for(
                unit, VerdictStatus.SKIPPED,
                diagnostic=f"Skipped: {unit.strategy.data or 'not applicable'}",
            )
            self.reporter.report(verdict)
            return [verdict]

        try:
            document, path = self._prepare(unit)
            requests = self._mutate(unit, document, path)
        except (IneligibleUnit, FieldPathError) as e:
            logger.debug("Unit %d (%s) ineligible: %s", unit.unit_id, unit.fuzzer, e)
            return []

        verdicts = []
        for request in requests:
            verdict = self._send(unit, request)
            self.reporter.report(verdict)
            verdicts.append(verdict)
        return verdicts

    # ── PREPARE / MUTATE ─────────────────────────────────────────────────────

    def _prepare(self, unit: FuzzingUnit) -> tuple[Any, Optional[FieldPath]]:
        """Check eligibility. Returns the parsed baseline and the validated path, if any."""
        document = self._baseline(unit)

        if unit.target is UnitTarget.HEADER:
            return document, None

        if navigator.is_empty_payload(document):
            raise IneligibleUnit("empty payload")

        if unit.strategy.kind is StrategyKind.NOOP and not unit.field:
            return document, None

        path = self.context.parse_path(unit.field)
        if self.context.is_discriminator(path.name) and not unit.allow_discriminator:
            raise IneligibleUnit(f"field '{path.name}' is a discriminator")
        if not navigator.is_field_in(document, path):
            raise IneligibleUnit(f"field '{path.name}' not in payload")
        return document, path

    def _mutate(self, unit: FuzzingUnit, document: Any, path: Optional[FieldPath]) -> list[PreparedRequest]:
        headers = list(unit.request_headers.items())

        if unit.target is UnitTarget.HEADER:
            body = None if navigator.is_empty_payload(document) else self._serialize(document)
            if unit.strategy.kind is StrategyKind.NOOP:
                return [PreparedRequest(body, headers)]
            mutated = unit.strategy.apply_to_headers(headers, unit.field)
            if mutated is None:
                raise IneligibleUnit(f"header '{unit.field}' not present")
            return [PreparedRequest(body, mutated, 0, _preview(unit.strategy.data))]

        if unit.strategy.kind is StrategyKind.NOOP:
            return [PreparedRequest(self._serialize(document), headers)]

        try:
            results = unit.strategy.apply(document, path)
        except (TypeError, ValueError) as e:
            raise IneligibleUnit(f"payload cannot be serialized: {e}") from e
        if not results:
            raise IneligibleUnit(f"field '{unit.field}' not applicable")

        return [
            PreparedRequest(r.payload, headers, r.index, _preview(r.new_value))
            for r in results
        ]

    @staticmethod
    def _baseline(unit: FuzzingUnit) -> Any:
        document = unit.baseline
        if isinstance(document, (str, bytes)):
            if navigator.is_empty_payload(document):
                return None
            try:
                return navigator.parse_document(document)
            except ValueError as e:
                raise IneligibleUnit(f"payload is not valid JSON: {e}") from e
        return document

    @staticmethod
    def _serialize(document) -> str:
        try:
            return navigator.serialize(document)
        except (TypeError, ValueError) as e:
            raise IneligibleUnit(f"payload cannot be serialized: {e}") from e

    # ── INVOKE / CLASSIFY ────────────────────────────────────────────────────

    def _send(self, unit: FuzzingUnit, request: PreparedRequest) -> Verdict:
        operation = unit.operation
        try:
            response = self.transport.call(
                operation.method, operation.path, request.headers, request.body, self.timeout
            )
        except TransportTimeout as e:
            return self.verdict_for(
                unit, VerdictStatus.ERROR, request,
                diagnostic=f"Request timeout: {e}", cause=repr(e.cause or e),
            )
        except TransportError as e:
            return self.verdict_for(
                unit, VerdictStatus.ERROR, request,
                diagnostic=f"Transport error: {e}", cause=repr(e.cause or e),
            )

        status, matched, diagnostic = classify(unit, response)
        return self.verdict_for(
            unit, status, request,
            response_code=response.status_code,
            matched=matched,
            diagnostic=diagnostic,
            elapsed_ms=response.elapsed_ms,
        )

    @staticmethod
    def verdict_for(unit: FuzzingUnit, status: VerdictStatus, request: Optional[PreparedRequest] = None, **fields) -> Verdict:
        return Verdict(
            unit_id=unit.unit_id,
            fuzzer=unit.fuzzer,
            method=unit.operation.method.upper(),
            path=unit.operation.path,
            field=unit.field,
            strategy=str(unit.strategy),
            expected=str(unit.expected),
            status=status,
            location=request.location if request else 0,
            value_preview=request.value_preview if request else "",
            **fields,
        )


def classify(unit: FuzzingUnit, response: TransportResponse) -> tuple[VerdictStatus, bool, str]:
    """Classify a response against the unit's expected family. Returns (status, matched, diagnostic)."""
    code = response.status_code
    matched = unit.expected.accepts(code)

    if unit.security is not None:
        match = indicators.scan(unit.security, response.body)
        if match:
            return match.status, matched, f"{match.describe()} (response code {code})"

    if matched:
        operation = unit.operation
        if (
            not operation.response_codes
            or operation.is_documented(code)
            or code in families.UNDOCUMENTED_ALLOWED
        ):
            return VerdictStatus.PASS, True, f"Response code {code} matches expected {unit.expected}"
        return VerdictStatus.WARN, True, f"Response code {code} matches expected but is an undocumented response code"

    if families.is_unimplemented(code):
        return VerdictStatus.WARN, False, "Response code 501: operation not implemented"

    return VerdictStatus.FAIL, False, f"Unexpected response code {code}, expected {unit.expected}"


def _preview(value) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        value = json.dumps(value, ensure_ascii=False, default=str)
    text = format_value(value) or ""
    return text[:TRUNCATE_AT] + "..." if len(text) > TRUNCATE_AT else text
