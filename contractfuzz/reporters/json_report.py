"""
JSON Reporter — writes a run summary with per-status counts.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from datetime import datetime, timezone

from contractfuzz import __version__
from contractfuzz.models import RunSummary

logger = logging.getLogger(__name__)


def generate_json_report(summary: RunSummary, output_path: str) -> bool:
    """
    Generate a detailed JSON report from a RunSummary.

    Args:
        summary: The RunSummary holding every verdict of the run
        output_path: Path to write the JSON file

    Returns:
        True if successful, False otherwise
    """
    try:
        report_data = summary.model_dump(mode="json")
        report_data["counts"] = summary.counts()
        report_data["report_generated_at"] = datetime.now(timezone.utc).isoformat()
        report_data["version"] = __version__

        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)

        with open(output_file, "w", encoding="utf-8") as f:
            json.dump(report_data, f, indent=2, ensure_ascii=False)

        return True
    except (OSError, TypeError, ValueError) as e:
        logger.error("Could not write JSON report to %s: %s", output_path, e)
        return False
