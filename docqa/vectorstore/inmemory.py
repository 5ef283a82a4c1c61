from __future__ import annotations

"""In-memory matcher for local development and small corpora."""

import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from docqa.rag.types import DocumentMatch
from docqa.vectorstore.base import MatcherConfigError, VectorDimensionError, rank_matches


@dataclass(frozen=True)
class CorpusEntry:
    """Pre-embedded corpus document."""
    id: str
    title: str
    url: str
    embedding: list[float]


@dataclass
class InMemoryMatcher:
    """Cosine similarity matcher over pre-embedded documents."""
    entries: list[CorpusEntry] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Ensure every entry shares one dimension."""
        dimensions = {len(entry.embedding) for entry in self.entries}
        if len(dimensions) > 1:
            raise MatcherConfigError(f"Corpus mixes embedding dimensions: {sorted(dimensions)}")

    @property
    def dimension(self) -> int:
        if not self.entries:
            return 0
        return len(self.entries[0].embedding)

    async def match(
        self, vector: list[float], threshold: float, limit: int
    ) -> list[DocumentMatch]:
        """Score every entry against the vector and rank the results."""
        if not vector or not self.entries:
            return []
        if len(vector) != self.dimension:
            raise VectorDimensionError(
                f"Query vector has dimension {len(vector)}, corpus uses {self.dimension}"
            )
        scored = [
            DocumentMatch(
                id=entry.id,
                title=entry.title,
                url=entry.url,
                similarity=_cosine_similarity(vector, entry.embedding),
            )
            for entry in self.entries
        ]
        return rank_matches(scored, threshold, limit)

    def stats(self) -> dict[str, int | str]:
        """Return basic stats for the corpus."""
        return {
            "backend": "memory",
            "document_count": len(self.entries),
            "embedding_dimension": self.dimension,
        }


def _cosine_similarity(a: list[float], b: list[float]) -> float:
    """Compute cosine similarity between two vectors."""
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return dot / (norm_a * norm_b)


def entries_from_records(
    records: Iterable[dict[str, object]], url_template: str
) -> list[CorpusEntry]:
    """Build corpus entries from JSON-like records."""
    entries: list[CorpusEntry] = []
    for record in records:
        doc_id = record.get("id")
        embedding = record.get("embedding")
        if not isinstance(doc_id, str) or not isinstance(embedding, list):
            raise MatcherConfigError("Corpus records need a string id and an embedding list")
        url = record.get("url") or url_template.format(id=doc_id)
        entries.append(
            CorpusEntry(
                id=doc_id,
                title=str(record.get("title") or ""),
                url=str(url),
                embedding=[float(value) for value in embedding],
            )
        )
    return entries


def load_corpus_file(path: Path, url_template: str) -> InMemoryMatcher:
    """Load a JSON array of pre-embedded documents."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise MatcherConfigError(f"Unable to read corpus file {path}") from exc
    if not isinstance(data, list):
        raise MatcherConfigError("Corpus file must contain a JSON array")
    return InMemoryMatcher(entries=entries_from_records(data, url_template))
