"""
FieldPath navigator — finds, inserts, deletes and renames fields in a JSON tree.

All functions operate on already-parsed Python structures (dict / list /
scalars). Mutating helpers work in place: callers are expected to pass a
deep copy, never the shared baseline document.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable

from contractfuzz.fuzzer.fieldpath import SEPARATOR, FieldPath

logger = logging.getLogger(__name__)


@dataclass
class Location:
    """A mutable handle to one resolved field: its owning container and key."""

    container: dict | list
    key: str | int

    @property
    def value(self) -> Any:
        return self.container[self.key]

    def set(self, value: Any) -> None:
        self.container[self.key] = value

    def delete(self) -> None:
        if isinstance(self.container, dict):
            self.container.pop(self.key, None)
        else:
            del self.container[self.key]

    def rename(self, new_key: str) -> bool:
        """
        Rename the key in place, keeping its value and position among siblings.

        Returns False, leaving the object untouched, when a sibling already
        uses ``new_key``.
        """
        if not isinstance(self.container, dict):
            raise TypeError("Only object members can be renamed")
        if new_key != self.key and new_key in self.container:
            return False
        items = [
            (new_key if k == self.key else k, v)
            for k, v in self.container.items()
        ]
        self.container.clear()
        self.container.update(items)
        self.key = new_key
        return True


def _as_path(path: FieldPath | str) -> FieldPath:
    if isinstance(path, FieldPath):
        return path
    return FieldPath.parse(path)


def resolve(document: Any, path: FieldPath | str) -> list[Location]:
    """
    Resolve a field path against a document.

    Objects are entered by key, arrays fan out: the remaining path is applied
    to every element. A field missing in this document instance yields an
    empty list, never an error.
    """
    matches: list[Location] = []
    _walk(document, _as_path(path).segments, matches)
    return matches


def _walk(node: Any, segments: tuple[str, ...], matches: list[Location]) -> None:
    if isinstance(node, list):
        for element in node:
            _walk(element, segments, matches)
        return

    if not isinstance(node, dict) or not segments:
        return

    head, rest = segments[0], segments[1:]
    if head not in node:
        return

    if not rest:
        matches.append(Location(node, head))
        return

    _walk(node[head], rest, matches)


def is_field_in(document: Any, path: FieldPath | str) -> bool:
    return bool(resolve(document, path))


def insert_key(document: Any, parent: FieldPath | str | None, key: str, value: Any) -> int:
    """
    Add a new member ``key`` to every object the parent path resolves to.

    With no parent, the member is added to the root object (or to every object
    of a root array). New members are appended, so sibling order is kept.
    Returns the number of objects touched.
    """
    if parent:
        targets = [loc.value for loc in resolve(document, parent)]
    else:
        targets = [document]

    touched = 0
    for target in _objects_in(targets):
        target[key] = value
        touched += 1

    logger.debug("Inserted key %r under %r in %d object(s)", key, str(parent or "$"), touched)
    return touched


def _objects_in(nodes: list[Any]) -> list[dict]:
    objects: list[dict] = []
    for node in nodes:
        if isinstance(node, dict):
            objects.append(node)
        elif isinstance(node, list):
            objects.extend(_objects_in(node))
    return objects


def delete(document: Any, path: FieldPath | str) -> int:
    """Remove the terminal key wherever the path resolves. Returns the count removed."""
    locations = resolve(document, path)
    for location in locations:
        location.delete()
    return len(locations)


def rename_key(document: Any, path: FieldPath | str, new_name: Callable[[str], str]) -> int:
    """
    Rename the terminal key wherever the path resolves, leaving values untouched.
    Locations where the new name is already taken are skipped. Returns the count renamed.
    """
    return sum(1 for location in resolve(document, path) if location.rename(new_name(location.key)))


def all_field_paths(document: Any) -> list[str]:
    """Every compound field name present in the document, arrays transparent."""
    fields: list[str] = []
    _collect(document, (), fields)
    return fields


def _collect(node: Any, prefix: tuple[str, ...], fields: list[str]) -> None:
    if isinstance(node, list):
        for element in node:
            _collect(element, prefix, fields)
    elif isinstance(node, dict):
        for key, value in node.items():
            current = prefix + (str(key),)
            name = SEPARATOR.join(current)
            if name not in fields:
                fields.append(name)
            _collect(value, current, fields)


def is_empty_payload(payload: Any) -> bool:
    """True for ``None``, blank text, ``{}`` or ``"{}"`` (raw or parsed)."""
    if payload is None:
        return True
    if isinstance(payload, str):
        stripped = payload.strip()
        return not stripped or stripped in ("{}", '"{}"')
    return isinstance(payload, dict) and not payload


def parse_document(raw: str | bytes) -> Any:
    """Parse raw JSON text. Raises ``ValueError`` on malformed input."""
    return json.loads(raw)


def serialize(document: Any) -> str:
    """Serialize a document to compact JSON text. Raises ``ValueError`` / ``TypeError``."""
    return json.dumps(document, ensure_ascii=False, allow_nan=False)
