"""
Contract context for one load of a contract: discriminator fields, field
schemas and the run options that shape path validation and expectations.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from contractfuzz.config import EngineConfig
from contractfuzz.fuzzer.fieldpath import DEFAULT_MAX_DEPTH, SEPARATOR, FieldPath
from contractfuzz.models import Operation, SchemaDescriptor


@dataclass
class ContractContext:
    discriminators: set[str] = field(default_factory=set)
    max_depth: int = DEFAULT_MAX_DEPTH
    strict_types: bool = True

    @classmethod
    def from_operations(cls, operations: list[Operation], config: EngineConfig | None = None) -> ContractContext:
        config = config or EngineConfig()
        discriminators: set[str] = set()
        for operation in operations:
            discriminators.update(operation.discriminators)
            discriminators.update(
                name for name, schema in operation.schemas.items() if schema.discriminator
            )
        return cls(discriminators, config.max_depth, config.strict_types)

    def parse_path(self, name: str) -> FieldPath:
        """Parse with this contract's depth limit. Raises ``FieldPathError``."""
        return FieldPath.parse(name, self.max_depth)

    def is_discriminator(self, name: str) -> bool:
        """Discriminators match by full compound name or by leaf name."""
        leaf = name.rsplit(SEPARATOR, 1)[-1]
        return name in self.discriminators or leaf in self.discriminators

    def schema_for(self, operation: Operation, name: str) -> SchemaDescriptor | None:
        return operation.schemas.get(name)
