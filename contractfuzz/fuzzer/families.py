"""
Response code families: the expected-outcome side of every fuzzing unit.

A family is either a union of named classes (``2XX``, ``4XX``...) or an
explicit set of codes. Two families are equal when they accept the same codes
in 100..599, however they were built.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

CODE_RANGE = range(100, 600)


class NamedFamily(str, Enum):
    ONEXX = "1XX"
    TWOXX = "2XX"
    THREEXX = "3XX"
    FOURXX = "4XX"
    FIVEXX = "5XX"

    def accepts(self, code: int) -> bool:
        return code // 100 == int(self.value[0])


@dataclass(frozen=True, eq=False)
class ResponseCodeFamily:
    named: tuple[NamedFamily, ...] = ()
    explicit: frozenset[int] = frozenset()
    label: str = field(default="", compare=False)

    def __post_init__(self):
        if bool(self.named) == bool(self.explicit):
            raise ValueError("A family is either named classes or explicit codes, not both or neither")

    def accepts(self, code: int) -> bool:
        if self.named:
            return any(family.accepts(code) for family in self.named)
        return code in self.explicit

    @property
    def accepted_codes(self) -> frozenset[int]:
        return frozenset(code for code in CODE_RANGE if self.accepts(code))

    def as_string(self) -> str:
        if self.named:
            return "|".join(family.value for family in self.named)
        return "|".join(str(code) for code in sorted(self.explicit))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResponseCodeFamily):
            return NotImplemented
        return self.accepted_codes == other.accepted_codes

    def __hash__(self) -> int:
        return hash(self.accepted_codes)

    def __str__(self) -> str:
        return self.label or self.as_string()


def named(*families: NamedFamily, label: str = "") -> ResponseCodeFamily:
    return ResponseCodeFamily(named=tuple(families), label=label)


def codes(*values: int, label: str = "") -> ResponseCodeFamily:
    for value in values:
        if value not in CODE_RANGE:
            raise ValueError(f"Response code out of range: {value}")
    return ResponseCodeFamily(explicit=frozenset(values), label=label)


def union(*families: ResponseCodeFamily, label: str = "") -> ResponseCodeFamily:
    """Accepts a code iff any member family accepts it."""
    if not families:
        raise ValueError("union() needs at least one family")
    if all(f.named for f in families):
        merged: list[NamedFamily] = []
        for family in families:
            merged.extend(n for n in family.named if n not in merged)
        return ResponseCodeFamily(named=tuple(merged), label=label)
    accepted: set[int] = set()
    for family in families:
        accepted |= family.accepted_codes
    return ResponseCodeFamily(explicit=frozenset(accepted), label=label)


def from_string(text: str) -> ResponseCodeFamily:
    """
    Parse ``"4XX|2XX"``, ``"401,403"`` or ``"2XX"``.

    Named classes and explicit codes may be mixed; the result is then an
    explicit family.
    """
    tokens = [t.strip().upper() for t in text.replace(",", "|").split("|") if t.strip()]
    if not tokens:
        raise ValueError(f"Empty response code family: {text!r}")

    parts: list[ResponseCodeFamily] = []
    for token in tokens:
        if token.isdigit():
            parts.append(codes(int(token)))
        else:
            try:
                parts.append(named(NamedFamily(token)))
            except ValueError:
                raise ValueError(f"Unknown response code family: {token!r}") from None
    return union(*parts)


# ── Predefined families ──────────────────────────────────────────────────────

ONEXX = named(NamedFamily.ONEXX, label="1XX")
TWOXX = codes(200, 201, 202, 204, label="2XX")
TWOXX_GENERIC = named(NamedFamily.TWOXX, label="2XX")
THREEXX = named(NamedFamily.THREEXX, label="3XX")
FOURXX = codes(400, 413, 414, 422, 431, label="4XX")
FOURXX_GENERIC = named(NamedFamily.FOURXX, label="4XX")
FOURXX_AA = codes(401, 403, label="401, 403")
FOURXX_MT = codes(406, 415, label="406, 415")
FOURXX_NF_AND_VALIDATION = codes(400, 404, 422, label="400, 404, 422")
FIVEXX = codes(500, 501, label="5XX")
FIVEXX_GENERIC = named(NamedFamily.FIVEXX, label="5XX")
FOUR00_FIVE01 = codes(400, 501, label="400, 501")
FOURXX_TWOXX = named(NamedFamily.FOURXX, NamedFamily.TWOXX, label="4XX|2XX")

PREDEFINED: dict[str, ResponseCodeFamily] = {
    "ONEXX": ONEXX,
    "TWOXX": TWOXX,
    "TWOXX_GENERIC": TWOXX_GENERIC,
    "THREEXX": THREEXX,
    "FOURXX": FOURXX,
    "FOURXX_GENERIC": FOURXX_GENERIC,
    "FOURXX_AA": FOURXX_AA,
    "FOURXX_MT": FOURXX_MT,
    "FOURXX_NF_AND_VALIDATION": FOURXX_NF_AND_VALIDATION,
    "FIVEXX": FIVEXX,
    "FIVEXX_GENERIC": FIVEXX_GENERIC,
    "FOUR00_FIVE01": FOUR00_FIVE01,
    "FOURXX_TWOXX": FOURXX_TWOXX,
}

# Codes an operation does not have to document for a matching response to pass.
UNDOCUMENTED_ALLOWED = frozenset({406, 415, 414})


# ── Helpers ──────────────────────────────────────────────────────────────────

def resolve(name_or_expr: str) -> ResponseCodeFamily:
    """Look up a predefined family by name, falling back to ``from_string``."""
    key = name_or_expr.strip().upper()
    if key in PREDEFINED:
        return PREDEFINED[key]
    return from_string(name_or_expr)


def family_of(code: int) -> NamedFamily:
    if code not in CODE_RANGE:
        raise ValueError(f"Response code out of range: {code}")
    return NamedFamily(f"{code // 100}XX")


def is_2xx(code: int) -> bool:
    return code // 100 == 2


def is_4xx(code: int) -> bool:
    return code // 100 == 4


def is_5xx(code: int) -> bool:
    return code // 100 == 5


def is_unimplemented(code: int) -> bool:
    return code == 501


def for_required(required: bool) -> ResponseCodeFamily:
    return FOURXX if required else TWOXX


def expected_for_type_coercion(strict_types: bool) -> ResponseCodeFamily:
    """Wrong-typed values must be rejected, or may be coerced when typing is lax."""
    return FOURXX if strict_types else FOURXX_TWOXX


def match_code_or_range(range_or_code: str, code: str | int) -> bool:
    """``"4XX"`` matches any 4xx code, ``"404"`` only itself."""
    pattern = str(range_or_code).strip().upper()
    actual = str(code).strip()
    if pattern.endswith("XX") and len(pattern) == 3:
        return len(actual) == 3 and actual[0] == pattern[0]
    return pattern == actual
