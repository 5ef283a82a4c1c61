from __future__ import annotations

"""Core data types for retrieval and answers."""

from dataclasses import dataclass, field

OUTCOME_ANSWERED = "answered"
OUTCOME_NO_MATCH = "no_match"
OUTCOME_STORE_ERROR = "store_error"


@dataclass(frozen=True)
class DocumentMatch:
    """Corpus document that cleared the similarity threshold."""
    id: str
    title: str
    url: str
    similarity: float


@dataclass(frozen=True)
class ParsedDocument:
    """Fetched document split into front-matter metadata and body."""
    metadata: dict[str, str] = field(default_factory=dict)
    body: str = ""

    @classmethod
    def empty(cls) -> ParsedDocument:
        """Return the neutral document used when a fetch fails."""
        return cls(metadata={}, body="")


@dataclass(frozen=True)
class AnswerResult:
    """Final answer returned to the caller."""
    message: str
    docs: tuple[DocumentMatch, ...] = ()
    outcome: str = OUTCOME_ANSWERED
