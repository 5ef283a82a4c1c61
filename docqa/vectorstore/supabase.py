from __future__ import annotations

"""Supabase (PostgREST RPC) backed document matcher."""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from docqa.rag.types import DocumentMatch
from docqa.vectorstore.base import MatchError, MatcherConfigError, rank_matches

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SupabaseConfig:
    """Connection settings for the match RPC."""
    url: str
    api_key: str
    function: str = "match_documents"
    timeout: float = 10.0
    public_url_template: str = "https://docs.expo.dev/{id}"


@dataclass
class SupabaseMatcher:
    """Call a pgvector match function exposed through Supabase RPC."""
    config: SupabaseConfig
    client: httpx.AsyncClient | None = None

    def __post_init__(self) -> None:
        """Validate connection settings."""
        if not self.config.url:
            raise MatcherConfigError("SUPABASE_URL is required for the supabase matcher")
        if not self.config.api_key:
            raise MatcherConfigError("SUPABASE_ANON_KEY is required for the supabase matcher")

    @property
    def rpc_url(self) -> str:
        return f"{self.config.url.rstrip('/')}/rest/v1/rpc/{self.config.function}"

    async def match(
        self, vector: list[float], threshold: float, limit: int
    ) -> list[DocumentMatch]:
        """Run the match RPC and return ranked documents."""
        payload = {
            "query_embedding": vector,
            "match_threshold": threshold,
            "match_count": limit,
        }
        headers = {
            "apikey": self.config.api_key,
            "Authorization": f"Bearer {self.config.api_key}",
        }
        owns_client = self.client is None
        client = self.client or httpx.AsyncClient(timeout=self.config.timeout)
        try:
            response = await client.post(self.rpc_url, json=payload, headers=headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            raise MatchError(str(exc)) from exc
        except ValueError as exc:
            raise MatchError("Match RPC returned invalid JSON") from exc
        finally:
            if owns_client:
                await client.aclose()
        if not isinstance(data, list):
            raise MatchError("Match RPC returned an unexpected payload")
        rows = [self._row_to_match(row) for row in data]
        logger.debug("match_rpc_rows", extra={"rows": len(rows)})
        return rank_matches(rows, threshold, limit)

    def _row_to_match(self, row: Any) -> DocumentMatch:
        """Convert an RPC row into a DocumentMatch."""
        if not isinstance(row, dict):
            raise MatchError("Match RPC row is not an object")
        doc_id = row.get("id")
        similarity = row.get("similarity")
        if doc_id is None or not isinstance(similarity, (int, float)):
            raise MatchError("Match RPC row is missing id or similarity")
        doc_id = str(doc_id)
        url = row.get("url") or self.config.public_url_template.format(id=doc_id)
        return DocumentMatch(
            id=doc_id,
            title=str(row.get("title") or ""),
            url=str(url),
            similarity=float(similarity),
        )
