from __future__ import annotations

"""Fetch matched documents from the raw docs source."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol, Sequence
from urllib.parse import quote

import httpx

from docqa.loaders.frontmatter import FrontMatterError, parse_front_matter
from docqa.rag.types import DocumentMatch, ParsedDocument

logger = logging.getLogger(__name__)

DEFAULT_RAW_URL_TEMPLATE = (
    "https://raw.githubusercontent.com/expo/expo/main/docs/pages/{id}.mdx"
)


class DocumentFetchError(RuntimeError):
    pass


class DocumentFetcher(Protocol):
    """Protocol for document fetchers."""

    async def fetch(self, doc_id: str) -> ParsedDocument:
        """Return the parsed document, or an empty one on failure."""
        raise NotImplementedError


@dataclass(frozen=True)
class DocsFetchConfig:
    url_template: str = DEFAULT_RAW_URL_TEMPLATE
    timeout: float = 10.0
    max_bytes: int = 1_048_576


@dataclass
class DocsFetcher:
    """Fetch raw Markdown/MDX pages and parse their front-matter."""
    config: DocsFetchConfig
    client: httpx.AsyncClient | None = None

    def build_url(self, doc_id: str) -> str:
        """Map a corpus id to its raw-content URL."""
        try:
            return self.config.url_template.format(id=quote(doc_id.strip("/"), safe="/-_."))
        except (KeyError, IndexError, ValueError) as exc:
            raise DocumentFetchError("Invalid document URL template") from exc

    async def fetch(self, doc_id: str) -> ParsedDocument:
        """Fetch and parse one document without raising."""
        try:
            url = self.build_url(doc_id)
            content = await self._download(url)
            return parse_front_matter(content)
        except (DocumentFetchError, FrontMatterError) as exc:
            logger.warning(
                "document_fetch_failed",
                extra={"doc_id": doc_id, "detail": str(exc)},
            )
            return ParsedDocument.empty()

    async def _download(self, url: str) -> str:
        owns_client = self.client is None
        client = self.client or httpx.AsyncClient(timeout=self.config.timeout)
        try:
            async with client.stream("GET", url) as response:
                if response.status_code < 200 or response.status_code >= 300:
                    raise DocumentFetchError(f"HTTP {response.status_code} for {url}")
                content = await self._read_limited(response)
        except httpx.HTTPError as exc:
            raise DocumentFetchError(type(exc).__name__) from exc
        finally:
            if owns_client:
                await client.aclose()
        try:
            return content.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DocumentFetchError("Document is not valid UTF-8") from exc

    async def _read_limited(self, response: httpx.Response) -> bytes:
        """Read the body, stopping as soon as it passes ``max_bytes``."""
        limit = self.config.max_bytes
        chunks: list[bytes] = []
        total = 0
        async for chunk in response.aiter_bytes():
            total += len(chunk)
            if limit and total > limit:
                raise DocumentFetchError("Document exceeds maximum size limit")
            chunks.append(chunk)
        return b"".join(chunks)


async def fetch_all(
    fetcher: DocumentFetcher,
    matches: Sequence[DocumentMatch],
    concurrency: int = 0,
) -> list[ParsedDocument]:
    """Fetch every match concurrently, keeping match order.

    A task that fails for any reason contributes an empty document instead of
    failing the whole batch. ``concurrency`` of zero means unbounded.
    """
    semaphore = asyncio.Semaphore(concurrency) if concurrency > 0 else None

    async def _fetch(doc_id: str) -> ParsedDocument:
        if semaphore is None:
            return await fetcher.fetch(doc_id)
        async with semaphore:
            return await fetcher.fetch(doc_id)

    results = await asyncio.gather(
        *(_fetch(match.id) for match in matches), return_exceptions=True
    )
    documents: list[ParsedDocument] = []
    for match, result in zip(matches, results):
        if isinstance(result, asyncio.CancelledError):
            raise result
        if isinstance(result, BaseException):
            logger.error(
                "document_fetch_crashed",
                extra={"doc_id": match.id, "detail": type(result).__name__},
            )
            documents.append(ParsedDocument.empty())
            continue
        documents.append(result)
    return documents
