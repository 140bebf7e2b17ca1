"""Tests for verdict collection and the JSON report."""
import json
import threading

from contractfuzz.models import RunSummary, Verdict, VerdictStatus
from contractfuzz.reporters import VerdictCollector, generate_json_report


def _verdict(unit_id, status=VerdictStatus.PASS):
    return Verdict(unit_id=unit_id, fuzzer="Boundary", method="POST", path="/users", status=status)


def test_collector_is_thread_safe():
    collector = VerdictCollector()

    def report_many(start):
        for i in range(start, start + 100):
            collector.report(_verdict(i))

    threads = [threading.Thread(target=report_many, args=(n * 100,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(collector) == 800
    assert sorted(v.unit_id for v in collector.verdicts) == list(range(800))


def test_collector_callback_and_filter():
    seen = []
    collector = VerdictCollector(on_verdict=seen.append)
    collector.report(_verdict(1))
    collector.report(_verdict(2, VerdictStatus.FAIL))
    assert len(seen) == 2
    assert [v.unit_id for v in collector.by_status(VerdictStatus.FAIL)] == [2]


def test_json_report(tmp_path):
    summary = RunSummary(run_id="abc", target="http://api.test")
    summary.verdicts = [_verdict(1), _verdict(2, VerdictStatus.FAIL), _verdict(3, VerdictStatus.WARN)]
    summary.mark_complete()

    path = tmp_path / "out" / "report.json"
    assert generate_json_report(summary, str(path))

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["run_id"] == "abc"
    assert data["counts"] == {"PASS": 1, "FAIL": 1, "ERROR": 0, "SKIPPED": 0, "WARN": 1}
    assert len(data["verdicts"]) == 3
    assert data["verdicts"][1]["status"] == "FAIL"
    assert "report_generated_at" in data
    assert data["version"]


def test_json_report_unwritable_path(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    assert generate_json_report(RunSummary(), str(blocker / "report.json")) is False


def test_short_str():
    verdict = Verdict(fuzzer="Boundary", method="POST", path="/users", field="age", status=VerdictStatus.FAIL, response_code=201)
    assert verdict.short_str() == "[FAIL] Boundary POST /users field=age -> 201"
