from contractfuzz.reporters.collector import VerdictCollector
from contractfuzz.reporters.json_report import generate_json_report

__all__ = [
    "VerdictCollector",
    "generate_json_report",
]
