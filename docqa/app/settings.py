from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from docqa.loaders.docs import DEFAULT_RAW_URL_TEMPLATE

load_dotenv()


@dataclass(frozen=True)
class Settings:
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    matcher_backend: str = os.getenv("RAG_MATCHER", "supabase")
    corpus_path: str = os.getenv("RAG_CORPUS_PATH", "")
    supabase_url: str = os.getenv("SUPABASE_URL", "")
    supabase_anon_key: str = os.getenv("SUPABASE_ANON_KEY", "")
    supabase_match_function: str = os.getenv("SUPABASE_MATCH_FUNCTION", "match_documents")
    match_threshold: float = float(os.getenv("RAG_MATCH_THRESHOLD", "0.3"))
    match_count: int = int(os.getenv("RAG_MATCH_COUNT", "3"))
    match_timeout: float = float(os.getenv("RAG_MATCH_TIMEOUT", "10"))
    embedding_provider: str = os.getenv("EMBEDDING_PROVIDER", "openai")
    embedding_dimension: int = int(os.getenv("EMBEDDING_DIMENSION", "1536"))
    embedding_timeout: float = float(os.getenv("RAG_EMBEDDING_TIMEOUT", "15"))
    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    openai_embedding_model: str = os.getenv("OPENAI_EMBEDDING_MODEL", "text-embedding-3-small")
    openai_base_url: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    openai_chat_model: str = os.getenv("OPENAI_CHAT_MODEL", "gpt-4o")
    llm_provider: str = os.getenv("RAG_LLM_PROVIDER", "openai")
    ollama_base_url: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    ollama_model: str = os.getenv("OLLAMA_MODEL", "llama3.1")
    llm_temperature: float = float(os.getenv("RAG_LLM_TEMPERATURE", "0.2"))
    llm_max_tokens: int = int(os.getenv("RAG_LLM_MAX_TOKENS", "1000"))
    llm_timeout: float = float(os.getenv("RAG_LLM_TIMEOUT", "60"))
    docs_raw_url_template: str = os.getenv("DOCS_RAW_URL_TEMPLATE", DEFAULT_RAW_URL_TEMPLATE)
    docs_public_url_template: str = os.getenv(
        "DOCS_PUBLIC_URL_TEMPLATE", "https://docs.expo.dev/{id}"
    )
    fetch_timeout: float = float(os.getenv("RAG_FETCH_TIMEOUT", "10"))
    fetch_max_bytes: int = int(os.getenv("RAG_FETCH_MAX_BYTES", "1048576"))
    fetch_concurrency: int = int(os.getenv("RAG_FETCH_CONCURRENCY", "0"))
    domain_name: str = os.getenv("RAG_DOMAIN_NAME", "Expo")
    metrics_enabled: bool = os.getenv("RAG_METRICS_ENABLED", "true").lower() in {"1", "true", "yes"}


settings = Settings()
