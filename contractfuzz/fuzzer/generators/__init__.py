import json

from contractfuzz.fuzzer.generators import boundary, invalid_values, type_coercion
from contractfuzz.fuzzer.generators.base import FuzzValue
from contractfuzz.models import SchemaDescriptor

GENERATORS = {
    boundary.GENERATOR_NAME: boundary.generate,
    type_coercion.GENERATOR_NAME: type_coercion.generate,
    invalid_values.GENERATOR_NAME: invalid_values.generate,
}


def generate_for(schema: SchemaDescriptor, kinds: list[str] | None = None, strict_types: bool = True) -> list[FuzzValue]:
    """Collect values from the requested generators, de-duplicated in order."""
    values: list[FuzzValue] = []
    seen: set[tuple[str, str]] = set()

    for name in kinds or list(GENERATORS):
        if name not in GENERATORS:
            raise KeyError(f"Unknown generator: {name}")
        if name == type_coercion.GENERATOR_NAME:
            produced = type_coercion.generate(schema, strict_types=strict_types)
        else:
            produced = GENERATORS[name](schema)

        for value in produced:
            key = (type(value.value).__name__, json.dumps(value.value, sort_keys=True))
            if key in seen:
                continue
            seen.add(key)
            values.append(value)
    return values


__all__ = ["FuzzValue", "GENERATORS", "generate_for"]
