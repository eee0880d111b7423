"""Unit tests for environment-derived settings."""

from pathlib import Path

import pytest

from common import Settings
from common.config import DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT_S


def test_defaults_without_environment() -> None:
    settings = Settings.from_env()

    assert settings.agents_dir == Path("agents")
    assert settings.backend_url is None
    assert settings.max_retries == DEFAULT_MAX_RETRIES
    assert settings.timeout_s == DEFAULT_TIMEOUT_S


def test_env_file_values_are_applied(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "AGENTDESK_BACKEND_URL=https://llm.example/invoke\n"
        "AGENTDESK_MAX_RETRIES=5\n"
        "AGENTDESK_TIMEOUT_S=2.5\n"
        "AGENTDESK_BACKEND_API_KEY=   \n",
        encoding="utf-8",
    )

    settings = Settings.from_env(env_files=[str(env_file), str(tmp_path / "missing.env")])

    assert settings.backend_url == "https://llm.example/invoke"
    assert settings.max_retries == 5
    assert settings.timeout_s == 2.5
    assert settings.backend_api_key is None


def test_process_environment_wins_over_env_file(tmp_path: Path, monkeypatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("AGENTDESK_DEFAULT_MODEL=from-file\n", encoding="utf-8")
    monkeypatch.setenv("AGENTDESK_DEFAULT_MODEL", "from-env")

    assert Settings.from_env(env_files=[str(env_file)]).default_model == "from-env"


def test_negative_retries_are_rejected(monkeypatch) -> None:
    monkeypatch.setenv("AGENTDESK_MAX_RETRIES", "-1")

    with pytest.raises(ValueError):
        Settings.from_env()


@pytest.mark.parametrize(
    ("key", "value", "message"),
    [
        ("AGENTDESK_TIMEOUT_S", "abc", "AGENTDESK_TIMEOUT_S must be a number"),
        ("AGENTDESK_BACKOFF_MAX_S", "", "AGENTDESK_BACKOFF_MAX_S must be a number"),
        ("AGENTDESK_MAX_RETRIES", "2.5", "AGENTDESK_MAX_RETRIES must be an integer"),
        ("AGENTDESK_MATCH_LIMIT", "many", "AGENTDESK_MATCH_LIMIT must be an integer"),
    ],
)
def test_malformed_numbers_name_the_variable(monkeypatch, key: str, value: str, message: str) -> None:
    monkeypatch.setenv(key, value)

    with pytest.raises(ValueError, match=message):
        Settings.from_env()
