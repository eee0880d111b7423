"""Rank registered agents against a free-text task request."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

from .agents.base import AgentDefinition, MatchResult
from .agents.registry import AgentRegistry


DEFAULT_NAME_BOOST = 1000.0

_TOKEN = re.compile(r"[a-z0-9]+")
STOP_WORDS = frozenset(
    {
        "a", "an", "and", "are", "as", "at", "be", "by", "for", "from", "how",
        "i", "in", "is", "it", "me", "my", "of", "on", "or", "that", "the",
        "this", "to", "we", "with", "you", "your",
    }
)

Candidates = Union[AgentRegistry, Iterable[AgentDefinition]]


def tokenize(text: str) -> frozenset[str]:
    """Lowercase word set of ``text`` without stop words."""
    return frozenset(token for token in _TOKEN.findall(text.lower()) if token not in STOP_WORDS)


@dataclass(frozen=True)
class Matcher:
    """Score candidates by IDF-weighted token overlap with an exact-name boost."""

    name_boost: float = DEFAULT_NAME_BOOST

    def match(
        self,
        query: str,
        candidates: Candidates,
        limit: Optional[int] = None,
    ) -> list[MatchResult]:
        """Return candidates sharing a token with ``query``, best first.

        Ties are broken by agent name so identical inputs always give the same
        order. No overlap yields an empty list.
        """
        if not query or not query.strip():
            raise ValueError("Query must be a non-empty string.")

        agents = _resolve(candidates)
        query_tokens = tokenize(query)
        lowered_query = query.lower()

        corpora = [tokenize(f"{agent.name} {agent.description}") for agent in agents]
        idf = _inverse_document_frequency(corpora)

        results: list[MatchResult] = []
        for agent, corpus in zip(agents, corpora):
            overlap = query_tokens & corpus
            if not overlap:
                continue
            score = sum(idf[token] for token in overlap)
            if agent.name.lower() in lowered_query:
                score += self.name_boost
            results.append(MatchResult(agent=agent, score=score))

        results.sort(key=lambda result: (-result.score, result.agent.name))
        if limit is not None:
            return results[: max(limit, 0)]
        return results


def match(candidates: Candidates, query: str, limit: Optional[int] = None) -> list[MatchResult]:
    """Rank ``candidates`` against ``query`` with the default matcher."""
    return Matcher().match(query, candidates, limit=limit)


def _resolve(candidates: Candidates) -> Sequence[AgentDefinition]:
    if isinstance(candidates, AgentRegistry):
        return candidates.snapshot()
    return tuple(candidates)


def _inverse_document_frequency(corpora: Sequence[frozenset[str]]) -> dict[str, float]:
    total = len(corpora)
    frequency: dict[str, int] = {}
    for corpus in corpora:
        for token in corpus:
            frequency[token] = frequency.get(token, 0) + 1
    return {
        token: math.log((1 + total) / (1 + count)) + 1.0
        for token, count in frequency.items()
    }
