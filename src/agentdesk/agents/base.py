"""Base definitions for agentdesk agents."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional


INHERIT_MODEL = "inherit"


def _frozen_mapping(values: Mapping[str, str] | None = None) -> Mapping[str, str]:
    return MappingProxyType(dict(values or {}))


@dataclass(frozen=True, slots=True)
class AgentDefinition:
    """A parsed agent-definition document.

    The front matter supplies ``name``, ``description`` and the optional
    ``model``/``color`` hints; the markdown body becomes ``instructions``.
    Unrecognised front-matter keys are kept in ``metadata``.
    """

    name: str
    description: str
    instructions: str
    model_hint: Optional[str] = None
    color_hint: Optional[str] = None
    source: Optional[str] = None
    metadata: Mapping[str, str] = field(default_factory=_frozen_mapping, hash=False)

    @property
    def key(self) -> str:
        """Registry key for this definition."""
        return self.name.lower()

    @property
    def summary(self) -> str:
        """First non-empty line of the description."""
        for line in self.description.splitlines():
            if line.strip():
                return line.strip()
        return ""


@dataclass(frozen=True, slots=True)
class MatchResult:
    """A candidate agent ranked against a query."""

    agent: AgentDefinition
    score: float

    @property
    def name(self) -> str:
        return self.agent.name


@dataclass(slots=True)
class DispatchRecord:
    """One task sent to an agent's backend and what came back.

    ``selection`` is ``"matched"`` when the agent was picked by the matcher
    (``score`` is then set) and ``"explicit"`` when the caller named it.
    """

    agent_name: str
    request: str
    response: str
    model: str
    context: Mapping[str, Any] = field(default_factory=dict)
    selection: str = "explicit"
    score: Optional[float] = None
    backend: str = ""
    elapsed_s: float = 0.0
