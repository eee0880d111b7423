"""Registry for managing agent definitions."""

from __future__ import annotations

import logging
import threading
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from .base import AgentDefinition
from .errors import DuplicateNameError, NotFoundError, ParseError


logger = logging.getLogger(__name__)

Table = Mapping[str, AgentDefinition]


class AgentRegistry:
    """In-memory, name-keyed store of agent definitions.

    The table is never mutated in place. ``register`` and ``reload`` build a
    fresh mapping and replace the reference in a single assignment, so readers
    holding the previous table keep a consistent view.
    """

    def __init__(self, records: Iterable[AgentDefinition] = ()) -> None:
        self._write_lock = threading.Lock()
        self._table: Table = _build_table(records)

    def register(self, record: AgentDefinition) -> None:
        """Register a new definition, rejecting names already present."""
        with self._write_lock:
            current = self._table
            if record.key in current:
                existing = current[record.key]
                raise DuplicateNameError(record.name, _sources(existing, record))
            self._table = _build_table([*current.values(), record])
        logger.debug("Registered agent %s", record.name)

    def get(self, name: str) -> AgentDefinition:
        """Retrieve a definition by name, raising ``NotFoundError`` when missing."""
        table = self._table
        try:
            return table[name.lower()]
        except KeyError:
            raise NotFoundError(name) from None

    def all(self) -> Iterator[AgentDefinition]:
        """Iterate over a snapshot of the registered definitions in name order."""
        return iter(self._table.values())

    def snapshot(self) -> tuple[AgentDefinition, ...]:
        """Return the current definitions as an immutable tuple."""
        return tuple(self._table.values())

    def names(self) -> list[str]:
        """Return registered agent names in name order."""
        return [record.name for record in self._table.values()]

    def reload(self, records: Iterable[AgentDefinition]) -> None:
        """Replace the whole table, or nothing at all if any record is invalid."""
        table = _build_table(records)
        with self._write_lock:
            previous = len(self._table)
            self._table = table
        logger.info("Reloaded agent registry: %d -> %d agents", previous, len(table))

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._table


def _build_table(records: Iterable[AgentDefinition]) -> Table:
    table: dict[str, AgentDefinition] = {}
    for record in records:
        _validate(record)
        if record.key in table:
            raise DuplicateNameError(record.name, _sources(table[record.key], record))
        table[record.key] = record
    return MappingProxyType(dict(sorted(table.items())))


def _validate(record: AgentDefinition) -> None:
    source = record.source or record.name or "<unknown>"
    if not record.name.strip():
        raise ParseError(source, "missing required field 'name'")
    if not record.description.strip():
        raise ParseError(source, "missing required field 'description'")
    if not record.instructions.strip():
        raise ParseError(source, "document has no instructions body")


def _sources(*records: AgentDefinition) -> list[str]:
    return [record.source for record in records if record.source]
