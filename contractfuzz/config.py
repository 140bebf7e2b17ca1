"""
contractfuzz configuration — engine options.

Config file: ~/.contractfuzz/config.json
Resolution order: override → env var → config file → default
"""

import json
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

from contractfuzz.errors import ContractError

CONFIG_DIR = Path.home() / ".contractfuzz"
CONFIG_FILE = CONFIG_DIR / "config.json"

ENV_VARS = {
    "timeout": "CONTRACTFUZZ_TIMEOUT",
    "concurrency": "CONTRACTFUZZ_CONCURRENCY",
    "max_depth": "CONTRACTFUZZ_MAX_DEPTH",
    "strict_types": "CONTRACTFUZZ_STRICT_TYPES",
    "log_level": "CONTRACTFUZZ_LOG_LEVEL",
    "event_log": "CONTRACTFUZZ_EVENT_LOG",
}


class EngineConfig(BaseModel):
    """Options for one fuzzing run."""
    timeout: float = Field(default=10.0, gt=0)
    concurrency: int = Field(default=1, ge=1)
    max_depth: int = Field(default=5, ge=1)
    strict_types: bool = True
    log_level: str = "WARNING"
    event_log: str = ""


def load_config(path: Optional[Path] = None) -> dict:
    """Load config from ~/.contractfuzz/config.json."""
    path = path or CONFIG_FILE
    if path.exists():
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            return {}
    return {}


def save_config(config: EngineConfig, path: Optional[Path] = None) -> None:
    """Save engine options to the config file."""
    path = path or CONFIG_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(config.model_dump_json(indent=2), encoding="utf-8")


def _from_env() -> dict:
    values = {}
    for key, env_var in ENV_VARS.items():
        raw = os.environ.get(env_var)
        if raw is None or raw == "":
            continue
        values[key] = raw
    return values


def resolve_config(path: Optional[Path] = None, **overrides: Any) -> EngineConfig:
    """
    Resolve engine options.

    Resolution order:
    1. Explicit overrides (CLI flags), ``None`` meaning "not given"
    2. Environment variables
    3. ~/.contractfuzz/config.json
    4. Defaults
    """
    merged: dict[str, Any] = {}
    file_values = load_config(path)
    merged.update({k: v for k, v in file_values.items() if k in EngineConfig.model_fields})
    merged.update(_from_env())
    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return EngineConfig(**merged)
    except ValidationError as e:
        raise ContractError(f"Invalid configuration: {e}") from e
