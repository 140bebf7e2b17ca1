"""Tests for loading operations and explicit units."""
import json

import pytest

from contractfuzz.errors import ContractError
from contractfuzz.fuzzer import families
from contractfuzz.fuzzer.strategy import StrategyKind
from contractfuzz.models import InjectionKind, SchemaType, UnitTarget
from contractfuzz.units_file import load_units_file

YAML_UNITS = """
operations:
  - path: /users
    method: post
    payload: {"user": {"name": "Ann", "age": 30}}
    headers:
      - {name: X-Request-Id, value: abc, required: true}
      - X-Trace
    response_codes: [201, "4XX"]
    required: ["user#name"]
    schemas:
      user#name: {type: string, maxLength: 10}
      user#age: {type: integer, minimum: 0, exclusiveMaximum: 151}
    discriminators: [type]
units:
  - operation: 0
    fuzzer: AgeBelowZero
    field: user#age
    value: -1
    expected: FOURXX
  - operation: POST /users
    fuzzer: RemoveRequestId
    field: X-Request-Id
    strategy: remove
    target: header
    expected: "400,422"
  - operation: /users
    fuzzer: Sql
    field: user#name
    value: "' OR 1=1"
    security: sql
    expected: 4XX|2XX
"""


def test_load_yaml(tmp_path):
    path = tmp_path / "units.yaml"
    path.write_text(YAML_UNITS, encoding="utf-8")
    operations, units = load_units_file(path)

    op = operations[0]
    assert op.method == "POST"
    assert op.response_codes == ["201", "4XX"]
    assert [h.name for h in op.headers] == ["X-Request-Id", "X-Trace"]
    assert op.headers[0].required
    assert op.schemas["user#name"].required
    assert op.schemas["user#name"].max_length == 10
    assert op.schemas["user#age"].type is SchemaType.INTEGER
    assert op.schemas["user#age"].maximum == 151
    assert op.schemas["user#age"].exclusive_maximum
    assert op.discriminators == ["type"]

    first, second, third = units
    assert first.strategy.kind is StrategyKind.REPLACE
    assert first.strategy.data == -1
    assert first.expected is families.FOURXX
    assert second.target is UnitTarget.HEADER
    assert second.strategy.kind is StrategyKind.REMOVE
    assert second.expected == families.codes(400, 422)
    assert third.security is InjectionKind.SQL
    assert third.expected == families.FOURXX_TWOXX


def test_load_json(tmp_path):
    path = tmp_path / "units.json"
    path.write_text(json.dumps({"operations": [{"path": "/items", "payload": {"id": 1}}]}))
    operations, units = load_units_file(path)
    assert operations[0].method == "POST"
    assert units == []


@pytest.mark.parametrize("content", [
    "{not json",
    "[]",
    '{"operations": []}',
    '{"operations": [{"method": "GET"}]}',
    '{"operations": [{"path": "/x"}], "units": [{"operation": 3}]}',
    '{"operations": [{"path": "/x"}], "units": [{"operation": "/nope"}]}',
    '{"operations": [{"path": "/x"}], "units": [{"strategy": "EXPLODE"}]}',
    '{"operations": [{"path": "/x"}], "units": [{"expected": "9XX"}]}',
    '{"operations": [{"path": "/x", "schemas": {"a": {"type": "uuid"}}}]}',
    '{"operations": [{"path": "/x", "payload": "{bad json"}]}',
])
def test_malformed_files_raise_contract_error(tmp_path, content):
    path = tmp_path / "units.json"
    path.write_text(content)
    with pytest.raises(ContractError):
        load_units_file(path)


def test_missing_file(tmp_path):
    with pytest.raises(ContractError):
        load_units_file(tmp_path / "missing.yaml")


def test_string_payload_is_parsed(tmp_path):
    path = tmp_path / "units.json"
    path.write_text(json.dumps({"operations": [{"path": "/items", "payload": '{"id": 1}'}]}))
    operations, _ = load_units_file(path)
    assert operations[0].payload == {"id": 1}
