from dataclasses import dataclass
from typing import Any, Callable, Optional

from contractfuzz.fuzzer.families import ResponseCodeFamily
from contractfuzz.models import SchemaDescriptor, SchemaType

ValueGenerator = Callable[[SchemaDescriptor], list["FuzzValue"]]


@dataclass
class FuzzValue:
    """A single candidate value for a field."""
    name: str                # Human-readable name
    generator: str           # Generator that created this
    value: Any               # Value to put in the field
    description: str         # What this tests
    # Overrides the fuzzer's expected family, e.g. for values a lax service may coerce
    expected: Optional[ResponseCodeFamily] = None


def require_exhaustive(dispatch: dict[SchemaType, ValueGenerator], generator: str) -> dict[SchemaType, ValueGenerator]:
    """Fail at import time when a generator does not handle every schema type."""
    missing = set(SchemaType) - set(dispatch)
    if missing:
        raise RuntimeError(
            f"Generator '{generator}' does not handle: {', '.join(sorted(m.value for m in missing))}"
        )
    return dispatch


def no_values(schema: SchemaDescriptor) -> list[FuzzValue]:
    return []
