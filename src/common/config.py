"""Configuration helpers for the agent registry and dispatcher."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from dotenv import dotenv_values


DEFAULT_ENVIRONMENT = "development"
DEFAULT_AGENTS_DIR = "agents"
DEFAULT_AGENT_GLOB = "*.md"
DEFAULT_MODEL = "default"
DEFAULT_TIMEOUT_S = 60.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_BASE_S = 0.5
DEFAULT_BACKOFF_MAX_S = 8.0
DEFAULT_MATCH_LIMIT = 5
DEFAULT_TRANSCRIPTS_DIR = "transcripts"


@dataclass
class Settings:
    """Container for environment-derived configuration."""

    environment: str = DEFAULT_ENVIRONMENT
    agents_dir: Path = Path(DEFAULT_AGENTS_DIR)
    agent_glob: str = DEFAULT_AGENT_GLOB
    backend_url: Optional[str] = None
    backend_api_key: Optional[str] = None
    default_model: str = DEFAULT_MODEL
    timeout_s: float = DEFAULT_TIMEOUT_S
    max_retries: int = DEFAULT_MAX_RETRIES
    backoff_base_s: float = DEFAULT_BACKOFF_BASE_S
    backoff_max_s: float = DEFAULT_BACKOFF_MAX_S
    match_limit: int = DEFAULT_MATCH_LIMIT
    transcripts_dir: Path = Path(DEFAULT_TRANSCRIPTS_DIR)

    @classmethod
    def from_env(cls, *, env_files: Iterable[str] | None = None) -> "Settings":
        """Build settings from environment variables, optionally loading dotenv files.

        Process environment wins over values read from ``env_files``; later
        files override earlier ones.
        """

        env_overrides: dict[str, str] = {}
        if env_files:
            for candidate in env_files:
                candidate_path = os.path.abspath(candidate)
                if os.path.isfile(candidate_path):
                    values = {
                        key: value
                        for key, value in dotenv_values(candidate_path).items()
                        if value is not None
                    }
                    env_overrides.update(values)

        def get_override(key: str) -> str | None:
            if key in os.environ:
                return os.environ[key]
            return env_overrides.get(key)

        def lookup(key: str, default: str) -> str:
            value = get_override(key)
            return value if value is not None else default

        def lookup_optional(key: str) -> Optional[str]:
            value = get_override(key)
            if value is None:
                return None
            stripped = value.strip()
            return stripped or None

        def lookup_float(key: str, default: float) -> float:
            raw = lookup(key, str(default))
            try:
                return float(raw)
            except ValueError:
                raise ValueError(f"{key} must be a number, got {raw!r}.") from None

        def lookup_int(key: str, default: int) -> int:
            raw = lookup(key, str(default))
            try:
                return int(raw)
            except ValueError:
                raise ValueError(f"{key} must be an integer, got {raw!r}.") from None

        max_retries = lookup_int("AGENTDESK_MAX_RETRIES", DEFAULT_MAX_RETRIES)
        if max_retries < 0:
            raise ValueError("AGENTDESK_MAX_RETRIES must be zero or greater.")

        return cls(
            environment=lookup("AGENTDESK_ENV", DEFAULT_ENVIRONMENT),
            agents_dir=Path(lookup("AGENTDESK_AGENTS_DIR", DEFAULT_AGENTS_DIR)),
            agent_glob=lookup("AGENTDESK_AGENT_GLOB", DEFAULT_AGENT_GLOB),
            backend_url=lookup_optional("AGENTDESK_BACKEND_URL"),
            backend_api_key=lookup_optional("AGENTDESK_BACKEND_API_KEY"),
            default_model=lookup("AGENTDESK_DEFAULT_MODEL", DEFAULT_MODEL),
            timeout_s=lookup_float("AGENTDESK_TIMEOUT_S", DEFAULT_TIMEOUT_S),
            max_retries=max_retries,
            backoff_base_s=lookup_float("AGENTDESK_BACKOFF_BASE_S", DEFAULT_BACKOFF_BASE_S),
            backoff_max_s=lookup_float("AGENTDESK_BACKOFF_MAX_S", DEFAULT_BACKOFF_MAX_S),
            match_limit=lookup_int("AGENTDESK_MATCH_LIMIT", DEFAULT_MATCH_LIMIT),
            transcripts_dir=Path(lookup("AGENTDESK_TRANSCRIPTS_DIR", DEFAULT_TRANSCRIPTS_DIR)),
        )
