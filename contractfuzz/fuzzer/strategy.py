"""
Mutation strategies: the closed set of structural edits applied to a field.

Every strategy works on a deep copy of the baseline document. A path that
fans out over arrays produces one mutated payload per resolved location.
"""

from __future__ import annotations

import copy
import json
import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import Any

from contractfuzz.fuzzer import navigator
from contractfuzz.fuzzer.fieldpath import FieldPath
from contractfuzz.fuzzer.navigator import Location

TRUNCATE_AT = 30
LARGE_STRING_MARKER = ("ca", "ts")


class StrategyKind(str, Enum):
    REPLACE = "REPLACE"
    PREFIX = "PREFIX"
    TRAIL = "TRAIL"
    INSERT = "INSERT"
    REMOVE = "REMOVE"
    DUPLICATE_KEY = "DUPLICATE_KEY"
    SKIP = "SKIP"
    NOOP = "NOOP"


@dataclass
class MutationResult:
    """One mutated payload produced for one resolved location."""
    payload: str             # Serialized JSON text to send
    index: int               # Position of the location in fan-out order
    old_value: Any
    new_value: Any


@dataclass(frozen=True)
class MutationStrategy:
    """A strategy kind plus the data it applies (value, characters or skip reason)."""

    kind: StrategyKind
    data: Any = None

    def with_data(self, data: Any) -> MutationStrategy:
        return MutationStrategy(self.kind, data)

    @property
    def name(self) -> str:
        return self.kind.value

    @property
    def is_skip(self) -> bool:
        return self.kind is StrategyKind.SKIP

    def process(self, old_value: Any) -> Any:
        """Compute the new value for a location from its current value."""
        if self.kind is StrategyKind.REPLACE:
            return self.data
        if self.kind is StrategyKind.PREFIX:
            return f"{self.data}{_as_text(old_value)}"
        if self.kind is StrategyKind.TRAIL:
            return f"{_as_text(old_value)}{self.data}"
        return old_value

    def apply(self, document: Any, path: FieldPath) -> list[MutationResult]:
        """
        Apply the strategy to every location ``path`` resolves to.

        The baseline ``document`` is never touched. An empty list means the
        strategy is not applicable to this document instance.
        """
        if self.kind in (StrategyKind.SKIP, StrategyKind.NOOP):
            return []

        count = len(navigator.resolve(document, path))
        results = []
        for index in range(count):
            clone = copy.deepcopy(document)
            location = navigator.resolve(clone, path)[index]
            result = self._apply_at(clone, location, index)
            if result is not None:
                results.append(result)
        return results

    def _apply_at(self, clone: Any, location: Location, index: int) -> MutationResult | None:
        """Mutate one location of ``clone``. Returns ``None`` when nothing would change."""
        old_value = location.value

        if self.kind is StrategyKind.REMOVE:
            location.delete()
            return MutationResult(navigator.serialize(clone), index, old_value, None)

        if self.kind is StrategyKind.INSERT:
            old_key = location.key
            new_key = insert_in_the_middle(str(old_key), str(self.data or ""))
            if new_key == old_key or not location.rename(new_key):
                return None
            return MutationResult(navigator.serialize(clone), index, old_key, new_key)

        if self.kind is StrategyKind.DUPLICATE_KEY:
            if isinstance(old_value, list) and old_value:
                location.set(old_value[:1] + old_value)
                return MutationResult(navigator.serialize(clone), index, old_value, old_value[0])
            rendered = render_with_duplicate(clone, location, self.data)
            return MutationResult(rendered, index, old_value, self.data)

        if old_value == [] and self.kind is not StrategyKind.REPLACE:
            return None
        new_value = self._process_value(old_value)
        location.set(new_value)
        return MutationResult(navigator.serialize(clone), index, old_value, new_value)

    def apply_to_headers(self, headers: list[tuple[str, str]], name: str) -> list[tuple[str, str]] | None:
        """
        Apply the strategy to header ``name`` (case-insensitive) in a copy of
        ``headers``. Returns ``None`` when the header is not present.
        """
        index = next((i for i, (k, _) in enumerate(headers) if k.lower() == name.lower()), None)
        if index is None:
            return None

        mutated = list(headers)
        key, value = mutated[index]
        if self.kind is StrategyKind.REMOVE:
            del mutated[index]
        elif self.kind is StrategyKind.DUPLICATE_KEY:
            mutated.insert(index + 1, (key, _as_text(self.data) if self.data is not None else value))
        elif self.kind is StrategyKind.INSERT:
            mutated[index] = (insert_in_the_middle(key, str(self.data or "")), value)
        elif self.kind in (StrategyKind.REPLACE, StrategyKind.PREFIX, StrategyKind.TRAIL):
            mutated[index] = (key, _as_text(self.process(value)))
        return mutated

    def _process_value(self, old_value: Any) -> Any:
        # PREFIX and TRAIL edit each element of an array of primitives; REPLACE swaps the whole value.
        if self.kind is not StrategyKind.REPLACE and _is_primitive_array(old_value):
            return [self.process(v) for v in old_value]
        return self.process(old_value)

    def truncated(self) -> str:
        if self.data is None:
            return self.name
        text = format_value(str(self.data))
        if len(text) > TRUNCATE_AT:
            text = text[:TRUNCATE_AT] + "..."
        return f"{self.name} with {text}"

    def __str__(self) -> str:
        return self.truncated()


# ── Factories ────────────────────────────────────────────────────────────────

def replace(value: Any = None) -> MutationStrategy:
    return MutationStrategy(StrategyKind.REPLACE, value)


def prefix(value: Any = None) -> MutationStrategy:
    return MutationStrategy(StrategyKind.PREFIX, value)


def trail(value: Any = None) -> MutationStrategy:
    return MutationStrategy(StrategyKind.TRAIL, value)


def insert(chars: str | None = None) -> MutationStrategy:
    return MutationStrategy(StrategyKind.INSERT, chars)


def remove() -> MutationStrategy:
    return MutationStrategy(StrategyKind.REMOVE)


def duplicate_key(value: Any = "contractfuzzDup") -> MutationStrategy:
    return MutationStrategy(StrategyKind.DUPLICATE_KEY, value)


def skip(reason: str = "") -> MutationStrategy:
    return MutationStrategy(StrategyKind.SKIP, reason or None)


def noop() -> MutationStrategy:
    return MutationStrategy(StrategyKind.NOOP)


def _is_primitive_array(value: Any) -> bool:
    return isinstance(value, list) and all(not isinstance(v, (dict, list)) for v in value)


# ── Helpers ──────────────────────────────────────────────────────────────────

def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def _is_invisible(ch: str) -> bool:
    return ch.isspace() or unicodedata.category(ch) in ("Cc", "Cf", "Zs", "Zl", "Zp")


def _leading_invisible(value: str) -> str:
    end = 0
    while end < len(value) and _is_invisible(value[end]):
        end += 1
    return value[:end]


def _trailing_invisible(value: str) -> str:
    start = len(value)
    while start > 0 and _is_invisible(value[start - 1]):
        start -= 1
    return value[start:]


def insert_in_the_middle(value: str, what: str) -> str:
    position = len(value) // 2
    return value[:position] + what + value[position:]


def mark_large_string(value: str) -> str:
    return LARGE_STRING_MARKER[0] + value + LARGE_STRING_MARKER[1]


def is_large_string(value: str | None) -> bool:
    """Large generated strings are wrapped as ``ca<body>ts`` with a non-empty body."""
    start, end = LARGE_STRING_MARKER
    if not value or len(value) <= len(start) + len(end):
        return False
    return value.startswith(start) and value.endswith(end)


def format_value(value: str | None) -> str | None:
    """Render control and invisible characters as ``\\uXXXX`` for reporting."""
    if value is None:
        return None
    return "".join(
        f"\\u{ord(ch):04x}" if _is_invisible(ch) and ch != " " else ch
        for ch in value
    )


def merge_fuzzing(fuzzed: str | None, supplied: str | None) -> Any:
    """
    Blend a fuzz value into a valid value, keeping the valid part meaningful.

    Leading invisible characters are prefixed to ``supplied``, trailing ones
    are appended, special characters within are inserted in the middle.
    Blank fuzz values and large generated strings replace the value outright.
    """
    if fuzzed is None or not fuzzed.strip() or is_large_string(fuzzed):
        return fuzzed
    supplied = supplied or ""

    leading = _leading_invisible(fuzzed)
    if leading:
        return leading + supplied

    trailing = _trailing_invisible(fuzzed)
    if trailing:
        return supplied + trailing

    special = "".join(ch for ch in fuzzed if not ch.isalnum())
    if special:
        return insert_in_the_middle(supplied, special)

    return fuzzed


def from_value(value: str | None) -> MutationStrategy:
    """Infer the strategy a raw fuzz value calls for."""
    if value is None or not value.strip():
        return replace(value)
    if _leading_invisible(value):
        return prefix(value)
    if _trailing_invisible(value):
        return trail(value)
    return replace(value)


def render_with_duplicate(document: Any, location: Location, duplicate_value: Any) -> str:
    """
    Serialize ``document`` with ``location.key`` appearing twice in its owning
    object: the original member first, the duplicate right after it.
    """
    target, key = location.container, location.key

    def render(node: Any) -> str:
        if isinstance(node, dict):
            members = []
            for k, v in node.items():
                members.append(f"{json.dumps(k, ensure_ascii=False)}:{render(v)}")
                if node is target and k == key:
                    members.append(
                        f"{json.dumps(k, ensure_ascii=False)}:{navigator.serialize(duplicate_value)}"
                    )
            return "{" + ",".join(members) + "}"
        if isinstance(node, list):
            return "[" + ",".join(render(item) for item in node) + "]"
        return navigator.serialize(node)

    return render(document)
