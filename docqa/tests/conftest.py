from __future__ import annotations

"""Shared pytest fixtures and test environment defaults."""

import os
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.pop("OPENAI_API_KEY", None)
os.environ["EMBEDDING_PROVIDER"] = "hash"
os.environ["EMBEDDING_DIMENSION"] = "64"
os.environ["RAG_LLM_PROVIDER"] = "ollama"
os.environ.setdefault("RAG_MATCHER", "supabase")
os.environ.setdefault("SUPABASE_URL", "http://supabase.test")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("RAG_METRICS_ENABLED", "true")

import pytest


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
