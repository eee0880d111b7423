"""Registry, matcher and dispatcher for natural-language agent definitions."""

from importlib import metadata


try:
    __version__ = metadata.version("agentdesk")
except metadata.PackageNotFoundError:  # pragma: no cover - not installed
    __version__ = "0.1.0"

__all__ = ["__version__"]
