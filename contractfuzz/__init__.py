"""contractfuzz — API contract fuzzing engine."""

__version__ = "0.1.0"
