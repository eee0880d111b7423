"""Central logging configuration for agentdesk."""

from __future__ import annotations

import logging
from logging import Logger


def configure_logging(level: int = logging.INFO) -> Logger:
    """Configure and return the root ``agentdesk`` logger used across the project."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    logger = logging.getLogger("agentdesk")
    logger.setLevel(level)
    return logger
