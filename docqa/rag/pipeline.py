from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field

from docqa.loaders.docs import DocumentFetcher, fetch_all
from docqa.rag.embeddings import EmbeddingProvider, embed_or_empty
from docqa.rag.llm import Answerer, generate_or_fallback
from docqa.rag.prompt import PromptAssembler
from docqa.rag.types import (
    OUTCOME_ANSWERED,
    OUTCOME_NO_MATCH,
    OUTCOME_STORE_ERROR,
    AnswerResult,
)
from docqa.vectorstore.base import MatchError, VectorMatcher

logger = logging.getLogger(__name__)

STORE_ERROR_MESSAGE = "Error matching documents."


class InvalidQueryError(ValueError):
    """Raised when a query is empty after trimming."""
    pass


@dataclass
class AnswerPipeline:
    """Embed, match, fetch, prompt and generate for one query at a time.

    The pipeline holds only process-wide collaborators, so one instance can
    serve concurrent requests.
    """
    embedder: EmbeddingProvider
    matcher: VectorMatcher
    fetcher: DocumentFetcher
    answerer: Answerer
    assembler: PromptAssembler = field(default_factory=PromptAssembler)
    match_threshold: float = 0.3
    match_count: int = 3
    fetch_concurrency: int = 0

    def __post_init__(self) -> None:
        if not 0.0 <= self.match_threshold <= 1.0:
            raise ValueError("match_threshold must be within [0, 1]")
        if self.match_count <= 0:
            raise ValueError("match_count must be positive")

    @property
    def clarification(self) -> str:
        return self.assembler.fallback_phrase

    async def answer(self, query: str, request_id: str | None = None) -> AnswerResult:
        """Answer a query from the matched documents."""
        if not query or not query.strip():
            raise InvalidQueryError("Query must not be empty")
        request_id = request_id or str(uuid.uuid4())
        start = time.monotonic()
        logger.info(
            "query_received",
            extra={"request_id": request_id, "query_length": len(query)},
        )

        vector = await embed_or_empty(self.embedder, query, request_id=request_id)
        try:
            matches = await self.matcher.match(vector, self.match_threshold, self.match_count)
        except MatchError as exc:
            logger.error(
                "match_failed",
                extra={"request_id": request_id, "detail": type(exc).__name__},
            )
            return AnswerResult(message=STORE_ERROR_MESSAGE, docs=(), outcome=OUTCOME_STORE_ERROR)
        logger.info(
            "match_complete",
            extra={
                "request_id": request_id,
                "matches": len(matches),
                "top": [(match.id, round(match.similarity, 4)) for match in matches],
            },
        )
        if not matches:
            return AnswerResult(message=self.clarification, docs=(), outcome=OUTCOME_NO_MATCH)

        documents = await fetch_all(self.fetcher, matches, concurrency=self.fetch_concurrency)
        logger.info(
            "fetch_complete",
            extra={
                "request_id": request_id,
                "documents": len(documents),
                "empty": sum(1 for document in documents if not document.body),
            },
        )
        prompt = self.assembler.assemble(query, [document.body for document in documents])
        message = await generate_or_fallback(self.answerer, prompt, request_id=request_id)
        logger.info(
            "answer_complete",
            extra={
                "request_id": request_id,
                "answer_length": len(message),
                "elapsed_ms": int((time.monotonic() - start) * 1000),
            },
        )
        return AnswerResult(message=message, docs=tuple(matches), outcome=OUTCOME_ANSWERED)
