from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from docqa.app.settings import settings
from docqa.loaders.docs import DocsFetchConfig, DocsFetcher
from docqa.rag.embeddings import (
    EmbeddingConfigError,
    EmbeddingProvider,
    HashEmbedder,
    OpenAIEmbedder,
)
from docqa.rag.llm import build_llm_answerer
from docqa.rag.pipeline import AnswerPipeline
from docqa.rag.prompt import PromptAssembler
from docqa.vectorstore.base import MatcherConfigError, VectorMatcher
from docqa.vectorstore.inmemory import load_corpus_file
from docqa.vectorstore.supabase import SupabaseConfig, SupabaseMatcher


@lru_cache
def get_pipeline() -> AnswerPipeline:
    answerer = build_llm_answerer(
        settings.llm_provider,
        api_key_openai=settings.openai_api_key,
        openai_base_url=settings.openai_base_url,
        openai_model=settings.openai_chat_model,
        ollama_base_url=settings.ollama_base_url,
        ollama_model=settings.ollama_model,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
        timeout=settings.llm_timeout,
    )
    return AnswerPipeline(
        embedder=build_embedder(),
        matcher=build_matcher(),
        fetcher=build_fetcher(),
        answerer=answerer,
        assembler=PromptAssembler(domain=settings.domain_name),
        match_threshold=settings.match_threshold,
        match_count=settings.match_count,
        fetch_concurrency=settings.fetch_concurrency,
    )


def reset_pipeline_cache() -> None:
    get_pipeline.cache_clear()


def build_embedder() -> EmbeddingProvider:
    provider = settings.embedding_provider.lower().strip()
    if provider == "hash":
        return HashEmbedder(dimension=settings.embedding_dimension)
    if provider == "openai":
        return OpenAIEmbedder(
            api_key=settings.openai_api_key or "",
            model=settings.openai_embedding_model,
            dimension=settings.embedding_dimension,
            timeout=settings.embedding_timeout,
        )
    raise EmbeddingConfigError(f"Unsupported embedding provider: {provider}")


def build_matcher() -> VectorMatcher:
    backend = settings.matcher_backend.lower().strip()
    if backend == "supabase":
        return SupabaseMatcher(
            config=SupabaseConfig(
                url=settings.supabase_url,
                api_key=settings.supabase_anon_key,
                function=settings.supabase_match_function,
                timeout=settings.match_timeout,
                public_url_template=settings.docs_public_url_template,
            )
        )
    if backend == "memory":
        if not settings.corpus_path:
            raise MatcherConfigError("RAG_CORPUS_PATH is required for the memory matcher")
        return load_corpus_file(Path(settings.corpus_path), settings.docs_public_url_template)
    raise MatcherConfigError(f"Unsupported matcher backend: {backend}")


def build_fetcher() -> DocsFetcher:
    return DocsFetcher(
        config=DocsFetchConfig(
            url_template=settings.docs_raw_url_template,
            timeout=settings.fetch_timeout,
            max_bytes=settings.fetch_max_bytes,
        )
    )
