"""Agent definitions, their loader and the registry that indexes them."""

from .base import AgentDefinition, DispatchRecord, MatchResult
from .errors import (
    AgentDeskError,
    BackendUnavailableError,
    DuplicateNameError,
    NotFoundError,
    ParseError,
)
from .registry import AgentRegistry
from .store import load_directory, parse_document, parse_documents, read_documents

__all__ = [
    "AgentDefinition",
    "DispatchRecord",
    "MatchResult",
    "AgentRegistry",
    "AgentDeskError",
    "ParseError",
    "DuplicateNameError",
    "NotFoundError",
    "BackendUnavailableError",
    "parse_document",
    "parse_documents",
    "read_documents",
    "load_directory",
]
