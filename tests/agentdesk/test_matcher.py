"""Unit tests for ranking agents against a task request."""

from pathlib import Path

import pytest

from agentdesk.agents import AgentDefinition, AgentRegistry, load_directory
from agentdesk.matcher import Matcher, match, tokenize


def _agent(name: str, description: str) -> AgentDefinition:
    return AgentDefinition(name=name, description=description, instructions="Do the work.")


def test_tokenize_lowercases_and_drops_stop_words() -> None:
    assert tokenize("Wire the Android Platform-Channel to iOS") == {
        "wire",
        "android",
        "platform",
        "channel",
        "ios",
    }


def test_android_query_ranks_android_agent_first(agents_dir: Path) -> None:
    registry = AgentRegistry(load_directory(agents_dir))

    results = match(registry, "Android platform channel")

    names = [result.name for result in results]
    assert names[0] == "flutter-android-integration"
    assert names.index("flutter-android-integration") < names.index("flutter-ios-integration")


def test_exact_name_in_query_takes_precedence() -> None:
    agents = [
        _agent("builder", "Builds features with tests and docs and more tests."),
        _agent("auditor", "Reviews tests."),
    ]

    results = Matcher().match("ask auditor to review tests and docs", agents)

    assert results[0].name == "auditor"
    assert results[0].score > 1000


def test_empty_query_is_rejected() -> None:
    with pytest.raises(ValueError):
        Matcher().match("", [_agent("a", "anything")])
    with pytest.raises(ValueError):
        Matcher().match("   ", [_agent("a", "anything")])


def test_no_overlap_returns_empty_list() -> None:
    assert Matcher().match("quantum chromodynamics", [_agent("a", "flutter widgets")]) == []


def test_ties_are_broken_by_name() -> None:
    agents = [_agent("zeta", "flutter layout"), _agent("alpha", "flutter layout")]

    results = Matcher().match("layout", agents)

    assert [result.name for result in results] == ["alpha", "zeta"]
    assert results[0].score == results[1].score


def test_rare_tokens_outweigh_common_ones() -> None:
    agents = [
        _agent("common", "flutter widgets"),
        _agent("rare", "flutter firebase"),
        _agent("other", "flutter gradle"),
    ]

    results = Matcher().match("flutter firebase", agents)

    assert results[0].name == "rare"
    assert results[0].score > results[1].score


def test_ordering_is_deterministic_and_limited(agents_dir: Path) -> None:
    registry = AgentRegistry(load_directory(agents_dir))

    first = Matcher().match("flutter apps", registry)
    second = Matcher().match("flutter apps", registry)

    assert first == second
    assert len(Matcher().match("flutter apps", registry, limit=1)) == 1
