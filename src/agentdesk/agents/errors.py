"""Error types raised while loading, looking up and dispatching agents."""

from __future__ import annotations

from typing import Sequence


class AgentDeskError(RuntimeError):
    """Base class for every error raised by agentdesk."""


class ParseError(AgentDeskError):
    """An agent-definition document is malformed or missing required fields."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason


class DuplicateNameError(AgentDeskError):
    """Two definitions share a name within a single load."""

    def __init__(self, name: str, sources: Sequence[str] = ()) -> None:
        detail = f" (defined in {', '.join(sources)})" if sources else ""
        super().__init__(f"Agent '{name}' is defined more than once{detail}.")
        self.name = name
        self.sources = tuple(sources)


class NotFoundError(AgentDeskError, KeyError):
    """Lookup of an agent name that is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Agent '{name}' is not registered.")
        self.name = name

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message.
        return str(self.args[0])


class BackendUnavailableError(AgentDeskError):
    """The execution backend could not be reached or answered with an error."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
