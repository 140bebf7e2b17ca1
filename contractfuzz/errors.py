"""
Exception hierarchy for contractfuzz.

Only ContractError is fatal for a run. Everything else is contained at the
unit level and turned into a verdict (or silently dropped when ineligible).
"""

from __future__ import annotations


class ContractFuzzError(Exception):
    """Base class for all contractfuzz errors."""


class ContractError(ContractFuzzError):
    """Malformed or unparsable contract / units input. Aborts the run."""


class FieldPathError(ContractFuzzError):
    """A compound field name failed validation (depth or segment charset)."""


class IneligibleUnit(ContractFuzzError):
    """A unit cannot be executed against this payload instance. No call is made."""


class TransportError(ContractFuzzError):
    """The HTTP call failed before a status code was received."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


class TransportTimeout(TransportError):
    """The HTTP call exceeded its per-call timeout."""
