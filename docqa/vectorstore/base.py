from __future__ import annotations

"""Shared matcher contract and ranking rules."""

from typing import Iterable, Protocol

from docqa.rag.types import DocumentMatch


class MatchError(RuntimeError):
    """Raised when the vector store query fails."""
    pass


class VectorDimensionError(MatchError):
    """Raised when a query vector does not match the corpus dimension."""
    pass


class MatcherConfigError(RuntimeError):
    """Raised when matcher configuration is invalid."""
    pass


class VectorMatcher(Protocol):
    """Protocol for similarity matchers."""

    async def match(
        self, vector: list[float], threshold: float, limit: int
    ) -> list[DocumentMatch]:
        """Return documents above the threshold, best first."""
        raise NotImplementedError


def rank_matches(
    candidates: Iterable[DocumentMatch], threshold: float, limit: int
) -> list[DocumentMatch]:
    """Keep matches strictly above threshold, sorted descending and unique by id.

    The sort is stable, so ties keep the order the store returned them in.
    When an id repeats, its first occurrence after sorting wins.
    """
    if limit <= 0:
        return []
    above = [match for match in candidates if match.similarity > threshold]
    above.sort(key=lambda match: match.similarity, reverse=True)
    seen: set[str] = set()
    ranked: list[DocumentMatch] = []
    for match in above:
        if match.id in seen:
            continue
        seen.add(match.id)
        ranked.append(match)
        if len(ranked) >= limit:
            break
    return ranked
