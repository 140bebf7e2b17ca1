"""
Core data models for contractfuzz.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from contractfuzz.fuzzer.families import ResponseCodeFamily, match_code_or_range
from contractfuzz.fuzzer.strategy import MutationStrategy


class VerdictStatus(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"
    ERROR = "ERROR"
    SKIPPED = "SKIPPED"
    WARN = "WARN"


class SchemaType(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"


class UnitTarget(str, Enum):
    BODY = "body"
    HEADER = "header"


class InjectionKind(str, Enum):
    SQL = "sql"
    XSS = "xss"
    COMMAND = "command"


class SchemaDescriptor(BaseModel):
    """Per-field schema facets. Parsed once, read-only."""
    model_config = ConfigDict(frozen=True)

    type: SchemaType = SchemaType.STRING
    format: str | None = None
    minimum: float | None = None
    maximum: float | None = None
    exclusive_minimum: bool = False
    exclusive_maximum: bool = False
    min_length: int | None = None
    max_length: int | None = None
    min_items: int | None = None
    max_items: int | None = None
    pattern: str | None = None
    enum: tuple[Any, ...] = ()
    default: Any = None
    example: Any = None
    required: bool = False
    discriminator: bool = False
    additional_properties: bool = True

    @classmethod
    def from_openapi(cls, raw: dict[str, Any], required: bool = False) -> SchemaDescriptor:
        """Build a descriptor from an OpenAPI-style schema fragment."""
        exclusive_min = raw.get("exclusiveMinimum", False)
        exclusive_max = raw.get("exclusiveMaximum", False)
        minimum = raw.get("minimum")
        maximum = raw.get("maximum")
        # OpenAPI 3.1 carries the bound itself in the exclusive keyword
        if not isinstance(exclusive_min, bool):
            minimum, exclusive_min = exclusive_min, True
        if not isinstance(exclusive_max, bool):
            maximum, exclusive_max = exclusive_max, True

        examples = raw.get("examples")
        if not isinstance(examples, list):
            examples = []
        additional = raw.get("additionalProperties", True)
        # A list-valued "required" belongs to the parent object, not this field
        if isinstance(raw.get("required"), bool):
            required = raw["required"]
        return cls(
            type=SchemaType(raw.get("type", "string")),
            format=raw.get("format"),
            minimum=minimum,
            maximum=maximum,
            exclusive_minimum=exclusive_min,
            exclusive_maximum=exclusive_max,
            min_length=raw.get("minLength"),
            max_length=raw.get("maxLength"),
            min_items=raw.get("minItems"),
            max_items=raw.get("maxItems"),
            pattern=raw.get("pattern"),
            enum=tuple(raw.get("enum") or ()),
            default=raw.get("default"),
            example=raw.get("example", examples[0] if examples else None),
            required=required,
            discriminator=bool(raw.get("discriminator", False)),
            additional_properties=additional is not False,
        )


class HeaderSpec(BaseModel):
    """A request header declared by an operation."""
    name: str
    value: str = ""
    required: bool = False


class Operation(BaseModel):
    """One HTTP operation with its example payload and contract metadata."""
    path: str
    method: str = "POST"
    payload: Any = None
    headers: list[HeaderSpec] = Field(default_factory=list)
    response_codes: list[str] = Field(default_factory=list)
    schemas: dict[str, SchemaDescriptor] = Field(default_factory=dict)
    discriminators: list[str] = Field(default_factory=list)

    def is_documented(self, code: int) -> bool:
        """True when ``code`` (or its ``NXX`` class) is a documented response."""
        return any(match_code_or_range(documented, code) for documented in self.response_codes)

    def header_map(self) -> dict[str, str]:
        return {h.name: h.value for h in self.headers}

    @property
    def label(self) -> str:
        return f"{self.method.upper()} {self.path}"


class FuzzingUnit(BaseModel):
    """One (field, strategy, expected outcome) to exercise against an operation."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    unit_id: int = 0
    fuzzer: str
    operation: Operation
    field: str = ""
    strategy: MutationStrategy
    expected: ResponseCodeFamily
    target: UnitTarget = UnitTarget.BODY
    security: InjectionKind | None = None
    allow_discriminator: bool = False
    scenario: str = ""
    # Overrides of the operation's baseline, e.g. a payload with a new field added
    headers: dict[str, str] | None = None
    document: Any = None

    @property
    def baseline(self) -> Any:
        return self.document if self.document is not None else self.operation.payload

    @property
    def request_headers(self) -> dict[str, str]:
        return dict(self.headers) if self.headers is not None else self.operation.header_map()


class Verdict(BaseModel):
    """The outcome of one request sent (or skipped) for a fuzzing unit."""
    model_config = ConfigDict(frozen=True)

    unit_id: int = 0
    fuzzer: str
    method: str = ""
    path: str = ""
    field: str = ""
    strategy: str = ""
    expected: str = ""
    status: VerdictStatus
    response_code: int | None = None
    matched: bool = False
    diagnostic: str = ""
    cause: str = ""
    elapsed_ms: float = 0.0
    location: int = 0
    value_preview: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def short_str(self) -> str:
        code = self.response_code if self.response_code is not None else "-"
        target = f" field={self.field}" if self.field else ""
        return f"[{self.status.value}] {self.fuzzer} {self.method} {self.path}{target} -> {code}"


class RunSummary(BaseModel):
    """Complete fuzzing run result."""
    run_id: str = ""
    target: str = ""
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: datetime | None = None
    cancelled: bool = False
    verdicts: list[Verdict] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    def _count(self, status: VerdictStatus) -> int:
        return sum(1 for v in self.verdicts if v.status == status)

    @property
    def pass_count(self) -> int:
        return self._count(VerdictStatus.PASS)

    @property
    def fail_count(self) -> int:
        return self._count(VerdictStatus.FAIL)

    @property
    def error_count(self) -> int:
        return self._count(VerdictStatus.ERROR)

    @property
    def warn_count(self) -> int:
        return self._count(VerdictStatus.WARN)

    @property
    def skipped_count(self) -> int:
        return self._count(VerdictStatus.SKIPPED)

    @property
    def total_count(self) -> int:
        return len(self.verdicts)

    def counts(self) -> dict[str, int]:
        return {status.value: self._count(status) for status in VerdictStatus}

    def to_json(self, indent: int = 2) -> str:
        return self.model_dump_json(indent=indent)

    def mark_complete(self):
        self.completed_at = datetime.now(timezone.utc)
