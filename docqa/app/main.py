from __future__ import annotations

"""FastAPI application entrypoint for the documentation Q&A service."""

import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from docqa.app.dependencies import get_pipeline
from docqa.app.metrics import mark_outcome, metrics_middleware, metrics_response
from docqa.app.schemas import PromptRequest, PromptResponse
from docqa.app.settings import settings
from docqa.rag.pipeline import InvalidQueryError
from docqa.rag.types import OUTCOME_STORE_ERROR

logger = logging.getLogger(__name__)

app = FastAPI(title="Docs Q&A", version="0.1.0")

GENERIC_ERROR_MESSAGE = "There was an error processing your request."
EMPTY_QUERY_MESSAGE = "Please enter a question."


def _configure_logging() -> None:
    """Configure root logging using environment settings."""
    level_name = settings.log_level.strip().upper()
    level = getattr(logging, level_name, logging.INFO)
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )
    logger.setLevel(level)


_configure_logging()


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=PromptResponse(message=message, docs=[]).model_dump(),
    )


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Attach or create a request ID for traceability."""
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.middleware("http")
async def record_metrics(request: Request, call_next):
    """Capture request metrics before returning the response."""
    return await metrics_middleware(request, call_next)


@app.exception_handler(RequestValidationError)
async def invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Answer malformed bodies with the generic error payload."""
    logger.error(
        "request_invalid",
        extra={
            "request_id": getattr(request.state, "request_id", None),
            "errors": len(exc.errors()),
        },
    )
    return _error_response(500, GENERIC_ERROR_MESSAGE)


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    """Hide unexpected failures behind the generic error payload."""
    logger.error(
        "request_failed",
        extra={
            "request_id": getattr(request.state, "request_id", None),
            "detail": type(exc).__name__,
        },
    )
    return _error_response(500, GENERIC_ERROR_MESSAGE)


@app.get("/metrics")
async def metrics():
    """Expose Prometheus-style metrics."""
    return metrics_response()


@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness check for uptime monitors."""
    return {"status": "ok"}


@app.post("/prompt", response_model=PromptResponse)
async def prompt(request: PromptRequest, http_request: Request):
    """Answer a question from the documentation corpus."""
    request_id = getattr(http_request.state, "request_id", None) or str(uuid.uuid4())
    try:
        pipeline = get_pipeline()
        result = await pipeline.answer(request.query, request_id=request_id)
    except InvalidQueryError:
        return _error_response(400, EMPTY_QUERY_MESSAGE)
    except Exception as exc:
        logger.error(
            "request_failed",
            extra={"request_id": request_id, "detail": type(exc).__name__},
        )
        return _error_response(500, GENERIC_ERROR_MESSAGE)
    mark_outcome(http_request, result.outcome)
    response = PromptResponse.from_result(result)
    if result.outcome == OUTCOME_STORE_ERROR:
        return JSONResponse(status_code=500, content=response.model_dump())
    return response
