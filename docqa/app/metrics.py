from __future__ import annotations

"""Prometheus metrics for HTTP traffic and answer outcomes."""

import time

from fastapi import Request
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.responses import Response

from docqa.app.settings import settings

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)
ANSWER_OUTCOMES = Counter(
    "rag_answers_total",
    "Answers returned by the pipeline, by outcome",
    ["outcome"],
)


def mark_outcome(request: Request, outcome: str) -> None:
    """Tag the request with its answer outcome for the metrics middleware."""
    request.state.answer_outcome = outcome


async def metrics_middleware(request: Request, call_next):
    """Count requests, time them and tally the answer outcome they carried."""
    if not settings.metrics_enabled or request.url.path == "/metrics":
        return await call_next(request)
    start = time.monotonic()
    status = 500
    try:
        response = await call_next(request)
        status = response.status_code
        return response
    finally:
        _observe(request, status, time.monotonic() - start)


def _observe(request: Request, status: int, duration: float) -> None:
    path = request.url.path
    REQUEST_COUNT.labels(request.method, path, str(status)).inc()
    REQUEST_LATENCY.labels(request.method, path).observe(duration)
    outcome = getattr(request.state, "answer_outcome", None)
    if outcome:
        ANSWER_OUTCOMES.labels(outcome).inc()


def metrics_response() -> Response:
    if not settings.metrics_enabled:
        return Response(status_code=404)
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
