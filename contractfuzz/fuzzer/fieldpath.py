"""
Compound field names.

A field is addressed by its segments joined with ``#``, e.g. ``user#address#zip``.
Arrays are transparent: ``items#id`` addresses ``id`` inside every element of
``items``. Validation happens here, once, so traversal never has to.
"""

from __future__ import annotations

import re
import unicodedata
from collections import Counter
from dataclasses import dataclass

from contractfuzz.errors import FieldPathError

SEPARATOR = "#"
DEFAULT_MAX_DEPTH = 5

# Root-array addressing accepted for compatibility with exported contracts.
ROOT_ARRAY_PREFIXES = ("$[*]#", "$[0]#")


@dataclass(frozen=True)
class FieldPath:
    """A validated compound field name. Carries no guarantee the field exists."""

    segments: tuple[str, ...]

    @classmethod
    def parse(cls, name: str, max_depth: int = DEFAULT_MAX_DEPTH) -> FieldPath:
        """Split and validate a compound field name."""
        if not isinstance(name, str) or not name.strip():
            raise FieldPathError("Field name must be a non-empty string")

        for prefix in ROOT_ARRAY_PREFIXES:
            if name.startswith(prefix):
                name = name[len(prefix):]
                break

        segments = tuple(name.split(SEPARATOR))
        if len(segments) > max_depth:
            raise FieldPathError(
                f"Field '{name}' has {len(segments)} segments, max depth is {max_depth}"
            )

        for segment in segments:
            if not segment:
                raise FieldPathError(f"Field '{name}' contains an empty segment")
            if any(unicodedata.category(ch) == "Cc" for ch in segment):
                raise FieldPathError(f"Field '{name}' contains control characters")

        return cls(segments)

    @property
    def name(self) -> str:
        return SEPARATOR.join(self.segments)

    @property
    def leaf(self) -> str:
        return self.segments[-1]

    @property
    def parent(self) -> FieldPath | None:
        if len(self.segments) == 1:
            return None
        return FieldPath(self.segments[:-1])

    @property
    def depth(self) -> int:
        return len(self.segments)

    def child(self, segment: str) -> FieldPath:
        return FieldPath(self.segments + (segment,))

    def __str__(self) -> str:
        return self.name


def is_cyclic_reference(name: str | None, depth: int) -> bool:
    """
    Detect runaway self references in the form ``prop#prop#prop#...``.

    True when any token (case-insensitive, ``#`` and ``_`` both split) occurs
    more than ``depth`` times.
    """
    if not name:
        return False

    tokens = [t for t in re.split(r"[#_]", name) if t.strip()]
    if len(tokens) < depth:
        return False

    counts = Counter(t.lower().replace(".items", "") for t in tokens)
    return any(count > depth for count in counts.values())
