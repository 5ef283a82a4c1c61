from __future__ import annotations

import httpx
import pytest

from docqa.app import main
from docqa.app.main import app
from docqa.rag.pipeline import AnswerPipeline
from docqa.rag.prompt import CLARIFICATION_MESSAGE
from docqa.rag.types import DocumentMatch
from fakes import FakeAnswerer, FakeEmbedder, FakeFetcher, FakeMatcher

pytestmark = pytest.mark.anyio

SUBMIT = DocumentMatch(
    id="submit/overview", title="Submit", url="https://x/submit", similarity=0.81
)


def get_client(raise_app_exceptions: bool = True) -> httpx.AsyncClient:
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=raise_app_exceptions)
    return httpx.AsyncClient(transport=transport, base_url="http://test")


def use_pipeline(monkeypatch, **overrides) -> AnswerPipeline:
    pipeline = AnswerPipeline(
        embedder=overrides.get("embedder", FakeEmbedder()),
        matcher=overrides.get("matcher", FakeMatcher(rows=[SUBMIT])),
        fetcher=overrides.get("fetcher", FakeFetcher(bodies={"submit/overview": "Use EAS Submit."})),
        answerer=overrides.get("answerer", FakeAnswerer()),
    )
    monkeypatch.setattr(main, "get_pipeline", lambda: pipeline)
    return pipeline


async def test_health_endpoint() -> None:
    async with get_client() as client:
        response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_prompt_answers_with_docs(monkeypatch) -> None:
    use_pipeline(monkeypatch)

    async with get_client() as client:
        response = await client.post("/prompt", json={"query": "How do I submit a project?"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["message"] == "Run `eas submit` to upload your build."
    assert payload["docs"] == [
        {
            "id": "submit/overview",
            "title": "Submit",
            "url": "https://x/submit",
            "similarity": 0.81,
        }
    ]


async def test_prompt_without_matches_asks_to_clarify(monkeypatch) -> None:
    use_pipeline(monkeypatch, matcher=FakeMatcher(rows=[]))

    async with get_client() as client:
        response = await client.post("/prompt", json={"query": "asdfqwerty nonsense"})

    assert response.status_code == 200
    assert response.json() == {"message": CLARIFICATION_MESSAGE, "docs": []}


async def test_prompt_store_error_returns_500(monkeypatch) -> None:
    use_pipeline(monkeypatch, matcher=FakeMatcher(fail=True))

    async with get_client() as client:
        response = await client.post("/prompt", json={"query": "How do I submit a project?"})

    assert response.status_code == 500
    assert response.json() == {"message": "Error matching documents.", "docs": []}


async def test_prompt_missing_document_still_answers(monkeypatch) -> None:
    answerer = FakeAnswerer()
    use_pipeline(monkeypatch, fetcher=FakeFetcher(bodies={}), answerer=answerer)

    async with get_client() as client:
        response = await client.post("/prompt", json={"query": "How do I submit a project?"})

    assert response.status_code == 200
    assert [doc["id"] for doc in response.json()["docs"]] == ["submit/overview"]
    assert "CONTEXT:\n\n\nUSER QUERY" in answerer.prompts[0]


async def test_prompt_rejects_blank_query(monkeypatch) -> None:
    pipeline = use_pipeline(monkeypatch)

    async with get_client() as client:
        response = await client.post("/prompt", json={"query": "   "})

    assert response.status_code == 400
    assert response.json() == {"message": "Please enter a question.", "docs": []}
    assert pipeline.embedder.calls == []


@pytest.mark.parametrize("body", [b"not json", b"{}", b'{"query": 42}'])
async def test_prompt_malformed_body_returns_generic_error(monkeypatch, body: bytes) -> None:
    use_pipeline(monkeypatch)

    async with get_client() as client:
        response = await client.post(
            "/prompt", content=body, headers={"Content-Type": "application/json"}
        )

    assert response.status_code == 500
    assert response.json() == {
        "message": "There was an error processing your request.",
        "docs": [],
    }


async def test_prompt_unexpected_failure_hides_details(monkeypatch) -> None:
    def broken_pipeline() -> AnswerPipeline:
        raise RuntimeError("SUPABASE_URL=http://secret.internal")

    monkeypatch.setattr(main, "get_pipeline", broken_pipeline)

    async with get_client() as client:
        response = await client.post("/prompt", json={"query": "How do I submit a project?"})

    assert response.status_code == 500
    assert "secret" not in response.text
    assert response.json()["docs"] == []


async def test_prompt_accepts_long_query(monkeypatch) -> None:
    pipeline = use_pipeline(monkeypatch)
    query = "How do I submit a project? " * 400

    async with get_client() as client:
        response = await client.post("/prompt", json={"query": query})

    assert response.status_code == 200
    assert response.json()["message"] == "Run `eas submit` to upload your build."
    assert pipeline.embedder.calls == [query]


async def test_prompt_late_failure_returns_generic_json_error(monkeypatch) -> None:
    class ShapelessPipeline:
        async def answer(self, query: str, request_id: str | None = None) -> object:
            return object()

    monkeypatch.setattr(main, "get_pipeline", ShapelessPipeline)

    async with get_client(raise_app_exceptions=False) as client:
        response = await client.post("/prompt", json={"query": "How do I submit a project?"})

    assert response.status_code == 500
    assert response.json() == {
        "message": "There was an error processing your request.",
        "docs": [],
    }


async def test_request_id_is_echoed(monkeypatch) -> None:
    use_pipeline(monkeypatch)

    async with get_client() as client:
        response = await client.post(
            "/prompt",
            json={"query": "How do I submit a project?"},
            headers={"X-Request-ID": "req-123"},
        )

    assert response.headers["X-Request-ID"] == "req-123"


async def test_metrics_count_outcomes(monkeypatch) -> None:
    use_pipeline(monkeypatch, matcher=FakeMatcher(rows=[]))

    async with get_client() as client:
        await client.post("/prompt", json={"query": "nothing relevant"})
        response = await client.get("/metrics")

    assert response.status_code == 200
    assert 'rag_answers_total{outcome="no_match"}' in response.text
