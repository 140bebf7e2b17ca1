"""Tests for the command line interface."""
import json
import signal

import httpx
import pytest
from fakes import FakeTransport, status
from typer.testing import CliRunner

from contractfuzz import __version__, cli
from contractfuzz.config import ENV_VARS
from contractfuzz.fuzzer.transport import HttpTransport

runner = CliRunner()

UNITS = {
    "operations": [{
        "path": "/users",
        "payload": {"name": "Ann", "age": 30},
        "response_codes": ["201", "400"],
        "schemas": {"age": {"type": "integer", "minimum": 0, "maximum": 150}},
    }],
}


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    for env_var in ENV_VARS.values():
        monkeypatch.delenv(env_var, raising=False)
    monkeypatch.setattr("contractfuzz.config.CONFIG_FILE", tmp_path / "config.json")


@pytest.fixture
def units_file(tmp_path):
    path = tmp_path / "units.json"
    path.write_text(json.dumps(UNITS))
    return path


def _mock_service(monkeypatch, code, on_request=None):
    seen = []

    def handler(request):
        seen.append(request)
        if on_request:
            on_request(seen)
        return httpx.Response(code)

    def factory(base_url, timeout=10.0, event_log=""):
        client = httpx.Client(transport=httpx.MockTransport(handler))
        return HttpTransport(base_url, timeout, client=client, event_log=event_log)

    monkeypatch.setattr(cli, "HttpTransport", factory)
    return seen


def test_version():
    result = runner.invoke(cli.app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_list_fuzzers():
    result = runner.invoke(cli.app, ["list-fuzzers"])
    assert result.exit_code == 0
    assert "Boundary" in result.output
    assert "RemoveHeaders" in result.output


def test_families():
    result = runner.invoke(cli.app, ["families"])
    assert result.exit_code == 0
    assert "FOURXX_AA" in result.output


def test_config_shows_resolved_options():
    result = runner.invoke(cli.app, ["config", "--concurrency", "3"])
    assert result.exit_code == 0
    assert "concurrency" in result.output
    assert "3" in result.output


def test_config_rejects_invalid_options():
    result = runner.invoke(cli.app, ["config", "--concurrency", "0"])
    assert result.exit_code == 2


def test_run_passing_service(monkeypatch, units_file, tmp_path):
    """A service that rejects everything with 400 passes the boundary fuzzer."""
    seen = _mock_service(monkeypatch, 400)
    report = tmp_path / "report.json"
    result = runner.invoke(cli.app, [
        "run", str(units_file), "--base-url", "http://api.test",
        "--fuzzers", "Boundary", "--quiet", "--output", str(report),
    ])

    assert result.exit_code == 0, result.output
    assert seen
    data = json.loads(report.read_text(encoding="utf-8"))
    assert data["counts"]["PASS"] == len(seen)
    assert data["target"] == "http://api.test"


def test_run_failing_service_exits_1(monkeypatch, units_file):
    _mock_service(monkeypatch, 201)
    result = runner.invoke(cli.app, [
        "run", str(units_file), "-u", "http://api.test", "-F", "Boundary", "-q",
    ])
    assert result.exit_code == 1


def test_run_unknown_fuzzer_exits_2(monkeypatch, units_file):
    _mock_service(monkeypatch, 400)
    result = runner.invoke(cli.app, ["run", str(units_file), "-u", "http://api.test", "-F", "Nope"])
    assert result.exit_code == 2


def test_run_adds_headers_to_every_request(monkeypatch, units_file):
    seen = _mock_service(monkeypatch, 400)
    result = runner.invoke(cli.app, [
        "run", str(units_file), "-u", "http://api.test", "-F", "Boundary", "-q",
        "-H", "Authorization: Bearer t0k3n",
    ])
    assert result.exit_code == 0, result.output
    assert all(r.headers["Authorization"] == "Bearer t0k3n" for r in seen)


def test_run_malformed_payload_exits_2(monkeypatch, tmp_path):
    _mock_service(monkeypatch, 400)
    path = tmp_path / "units.json"
    path.write_text(json.dumps({"operations": [{"path": "/users", "payload": "{bad json"}]}))
    result = runner.invoke(cli.app, ["run", str(path), "-u", "http://api.test", "-q"])
    assert result.exit_code == 2
    assert "not valid JSON" in result.output


def test_interrupt_finishes_current_unit_and_saves_report(monkeypatch, units_file, tmp_path):
    """Ctrl+C stops the run after the unit in flight; its verdict still lands in the report."""
    def interrupt_once(seen):
        if len(seen) == 1:
            signal.raise_signal(signal.SIGINT)

    seen = _mock_service(monkeypatch, 400, on_request=interrupt_once)
    before = signal.getsignal(signal.SIGINT)
    report = tmp_path / "report.json"
    result = runner.invoke(cli.app, [
        "run", str(units_file), "-u", "http://api.test", "-F", "Boundary", "-q", "-o", str(report),
    ])

    assert result.exit_code == 130, result.output
    assert len(seen) == 1
    data = json.loads(report.read_text(encoding="utf-8"))
    assert data["cancelled"] is True
    assert data["counts"]["PASS"] == 1
    assert signal.getsignal(signal.SIGINT) is before


def test_cancel_on_interrupt_sets_the_engine_flag():
    engine = cli.FuzzEngine(FakeTransport(status(400)), show_progress=False)
    with cli._cancel_on_interrupt(engine):
        signal.raise_signal(signal.SIGINT)
    assert engine.cancelled
