from __future__ import annotations

"""Embedding providers for query vectors."""

import hashlib
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Protocol

import openai

_TOKEN_RE = re.compile(r"[a-z0-9]+")

logger = logging.getLogger(__name__)


class EmbeddingError(RuntimeError):
    """Raised when embeddings fail or are invalid."""
    pass


class EmbeddingConfigError(RuntimeError):
    """Raised when embedding configuration is invalid."""
    pass


class EmbeddingProvider(Protocol):
    """Protocol for embedding providers."""
    dimension: int

    async def embed(self, text: str) -> list[float]:
        """Return an embedding vector for the provided text."""
        raise NotImplementedError


def validate_vector(vector: list[float], dimension: int) -> list[float]:
    """Validate embedding vectors against the configured dimension."""
    if len(vector) != dimension:
        raise EmbeddingError(
            f"Embedding dimension mismatch: expected {dimension}, got {len(vector)}"
        )
    cleaned: list[float] = []
    for value in vector:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise EmbeddingError("Embedding contains a non-numeric value")
        if not math.isfinite(value):
            raise EmbeddingError("Embedding contains a non-finite value")
        cleaned.append(float(value))
    return cleaned


def resolve_openai_dimension(model: str) -> int | None:
    """Return expected dimension for OpenAI embedding model."""
    mapping = {
        "text-embedding-3-small": 1536,
        "text-embedding-3-large": 3072,
        "text-embedding-ada-002": 1536,
    }
    return mapping.get(model)


@dataclass
class HashEmbedder:
    """Deterministic hash-based embedder for testing or offline use."""
    dimension: int = 256

    async def embed(self, text: str) -> list[float]:
        """Embed text using token hashing and L2 normalization."""
        tokens = _TOKEN_RE.findall(text.lower())
        vector = [0.0] * self.dimension
        for token in tokens:
            digest = hashlib.sha256(token.encode("utf-8")).digest()
            vector[digest[0] % self.dimension] += 1.0
        return validate_vector(_l2_normalize(vector), self.dimension)


def _l2_normalize(vector: list[float]) -> list[float]:
    norm = math.sqrt(sum(value * value for value in vector))
    if norm == 0.0:
        return vector
    return [value / norm for value in vector]


@dataclass
class OpenAIEmbedder:
    """Embedding provider using the OpenAI embeddings API."""
    api_key: str
    model: str
    dimension: int
    timeout: float = 15.0
    client: Any = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate OpenAI configuration and create a client."""
        if not self.api_key:
            raise EmbeddingConfigError("OPENAI_API_KEY is required for OpenAIEmbedder")
        if not self.model:
            raise EmbeddingConfigError("OPENAI_EMBEDDING_MODEL is required for OpenAIEmbedder")
        resolved = resolve_openai_dimension(self.model)
        if self.dimension <= 0:
            if resolved is None:
                raise EmbeddingConfigError(
                    "EMBEDDING_DIMENSION must be set for OpenAI embeddings when model is unknown"
                )
            self.dimension = resolved
        elif resolved is not None and self.dimension != resolved:
            raise EmbeddingConfigError(
                f"EMBEDDING_DIMENSION should be {resolved} for model {self.model}"
            )
        self.client = openai.AsyncOpenAI(api_key=self.api_key, timeout=self.timeout)

    async def embed(self, text: str) -> list[float]:
        """Embed text using the OpenAI embeddings API."""
        try:
            response = await self.client.embeddings.create(
                model=self.model,
                input=text,
                encoding_format="float",
            )
        except openai.OpenAIError as exc:
            raise EmbeddingError(str(exc)) from exc
        if not response.data:
            raise EmbeddingError("OpenAI embedding response missing data")
        return validate_vector(list(response.data[0].embedding), self.dimension)


async def embed_or_empty(
    provider: EmbeddingProvider, text: str, request_id: str | None = None
) -> list[float]:
    """Embed text, returning an empty vector when the provider fails."""
    try:
        return await provider.embed(text)
    except EmbeddingError as exc:
        logger.error(
            "embedding_failed",
            extra={"request_id": request_id, "detail": type(exc).__name__},
        )
        return []
