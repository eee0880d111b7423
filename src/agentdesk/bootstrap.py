"""Helpers to bootstrap the agent registry from a directory of documents."""

from __future__ import annotations

import logging
from pathlib import Path

from common import Settings

from .agents.registry import AgentRegistry
from .agents.store import load_directory


logger = logging.getLogger(__name__)


def build_registry(settings: Settings, agents_dir: str | Path | None = None) -> AgentRegistry:
    """Construct a registry populated from the configured agents directory."""
    directory = Path(agents_dir) if agents_dir is not None else settings.agents_dir
    records = load_directory(directory, settings.agent_glob)
    registry = AgentRegistry(records)
    logger.info("Loaded %d agents from %s", len(registry), directory)
    return registry


def reload_registry(
    registry: AgentRegistry,
    settings: Settings,
    agents_dir: str | Path | None = None,
) -> AgentRegistry:
    """Re-read the agents directory and swap it into ``registry`` all-or-nothing."""
    directory = Path(agents_dir) if agents_dir is not None else settings.agents_dir
    registry.reload(load_directory(directory, settings.agent_glob))
    return registry
