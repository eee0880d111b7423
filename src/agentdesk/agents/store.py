"""Loading and parsing of agent-definition documents.

A document starts with a front-matter block delimited by ``---`` lines::

    ---
    name: flutter-android-integration
    description: Use this agent for Android platform work in Flutter apps.
    model: sonnet
    color: green
    ---
    You are an Android integration specialist...

The block is read as YAML with every scalar kept as a string. Agent
descriptions frequently embed ``key: value`` looking text that YAML rejects,
so a line-oriented ``key: value`` reader is used when YAML fails.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Mapping, Sequence

import yaml

from .base import AgentDefinition, _frozen_mapping
from .errors import ParseError


logger = logging.getLogger(__name__)

DELIMITER = "---"
NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")
_KEY_LINE = re.compile(r"^([A-Za-z_][A-Za-z0-9_-]*)\s*:(?:\s+(.*)|)$")


def parse_document(text: str, source: str = "<string>") -> AgentDefinition:
    """Parse a single document into an :class:`AgentDefinition`."""
    lines = text.splitlines()
    start = 0
    while start < len(lines) and not lines[start].strip():
        start += 1
    if start >= len(lines) or lines[start].strip() != DELIMITER:
        raise ParseError(source, "missing front matter (expected a leading '---' line)")

    end = None
    for index in range(start + 1, len(lines)):
        if lines[index].strip() == DELIMITER:
            end = index
            break
    if end is None:
        raise ParseError(source, "unterminated front matter (no closing '---' line)")

    fields = _parse_front_matter(lines[start + 1 : end], source)
    body = "\n".join(lines[end + 1 :]).strip()

    name = fields.pop("name", "").strip()
    description = fields.pop("description", "").strip()
    if not name:
        raise ParseError(source, "missing required field 'name'")
    if not NAME_PATTERN.match(name):
        raise ParseError(source, f"invalid agent name {name!r}")
    if not description:
        raise ParseError(source, "missing required field 'description'")
    if not body:
        raise ParseError(source, "document has no instructions body")

    return AgentDefinition(
        name=name,
        description=description,
        instructions=body,
        model_hint=fields.pop("model", "").strip() or None,
        color_hint=fields.pop("color", "").strip() or None,
        source=source,
        metadata=_frozen_mapping(fields),
    )


def parse_documents(blobs: Iterable[tuple[str, str]]) -> list[AgentDefinition]:
    """Parse ``(source, text)`` pairs, failing on the first malformed document."""
    return [parse_document(text, source) for source, text in blobs]


def read_documents(directory: str | Path, pattern: str = "*.md") -> list[tuple[str, str]]:
    """Read every document matching ``pattern`` in ``directory`` in path order."""
    root = Path(directory)
    if not root.is_dir():
        raise FileNotFoundError(f"Agent directory '{root}' does not exist.")
    blobs = [(str(path), _read_text(path)) for path in sorted(root.glob(pattern)) if path.is_file()]
    logger.debug("Read %d agent documents from %s", len(blobs), root)
    return blobs


def load_directory(directory: str | Path, pattern: str = "*.md") -> list[AgentDefinition]:
    """Read and parse all agent documents in ``directory``."""
    return parse_documents(read_documents(directory, pattern))


def _parse_front_matter(lines: Sequence[str], source: str) -> dict[str, str]:
    block = "\n".join(lines)
    try:
        # BaseLoader keeps every scalar a string ("0123", "off", "yes").
        loaded = yaml.load(block, Loader=yaml.BaseLoader) if block.strip() else {}
    except yaml.YAMLError:
        logger.debug("%s: front matter is not valid YAML, reading it line by line", source)
        return _parse_key_values(lines, source)
    if not isinstance(loaded, Mapping):
        return _parse_key_values(lines, source)
    return {str(key): _stringify(value) for key, value in loaded.items() if value is not None}


def _parse_key_values(lines: Sequence[str], source: str) -> dict[str, str]:
    fields: dict[str, list[str]] = {}
    current: str | None = None
    for offset, raw in enumerate(lines, start=1):
        if not raw.strip():
            continue
        match = _KEY_LINE.match(raw)
        if match:
            current = match.group(1)
            fields[current] = [match.group(2) or ""]
        elif current is not None:
            fields[current].append(raw.strip())
        else:
            raise ParseError(source, f"malformed front matter line {offset}: {raw.strip()!r}")
    return {key: _unquote("\n".join(parts).strip()) for key, parts in fields.items()}


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    return value


def _stringify(value: object) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    return str(value)


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError(str(path), f"not valid UTF-8: {exc.reason} at byte {exc.start}") from exc
