import pytest

from contractfuzz.fuzzer import families
from contractfuzz.fuzzer.strategy import replace
from contractfuzz.models import FuzzingUnit, Operation


@pytest.fixture
def operation():
    return Operation(
        path="/users",
        method="POST",
        payload={"user": {"name": "Ann", "age": 30}, "items": [{"id": 1}, {"id": 2}]},
        response_codes=["201", "400", "422"],
    )


@pytest.fixture
def make_unit(operation):
    def make(field="user#age", value=-1, expected=families.FOURXX, **kwargs):
        kwargs.setdefault("strategy", replace(value))
        return FuzzingUnit(
            fuzzer=kwargs.pop("fuzzer", "Test"),
            operation=kwargs.pop("operation", operation),
            field=field,
            expected=expected,
            **kwargs,
        )
    return make
