from __future__ import annotations

"""LLM answer generators."""

from dataclasses import dataclass, field
import logging
from typing import Protocol

import httpx


class LLMError(RuntimeError):
    """Raised when LLM requests fail or responses are invalid."""
    pass


logger = logging.getLogger(__name__)

GENERATION_FALLBACK = "I’m sorry, but I had trouble generating an answer. Please try again."


class Answerer(Protocol):
    """Protocol for answer generators."""

    async def generate(self, prompt: str) -> str:
        """Return the model reply for a prompt."""
        raise NotImplementedError


@dataclass(frozen=True)
class OpenAIAnswerer:
    """LLM answerer backed by OpenAI chat completions."""
    api_key: str
    base_url: str
    model: str
    temperature: float
    max_tokens: int
    timeout: float
    client: httpx.AsyncClient | None = field(default=None, compare=False, repr=False)

    async def generate(self, prompt: str) -> str:
        """Send the prompt as a single user message and return the reply text."""
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        data = await _post_json(
            f"{self.base_url}/chat/completions",
            payload,
            headers=headers,
            timeout=self.timeout,
            client=self.client,
        )
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            raise LLMError("Invalid OpenAI response")
        message = choices[0].get("message")
        if not isinstance(message, dict):
            raise LLMError("Invalid OpenAI response message")
        content = message.get("content")
        if not isinstance(content, str) or not content.strip():
            raise LLMError("Invalid OpenAI response content")
        return content.strip()


@dataclass(frozen=True)
class OllamaAnswerer:
    """LLM answerer backed by Ollama chat API."""
    base_url: str
    model: str
    temperature: float
    max_tokens: int
    timeout: float
    client: httpx.AsyncClient | None = field(default=None, compare=False, repr=False)

    async def generate(self, prompt: str) -> str:
        """Generate an answer using a local Ollama model."""
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "stream": False,
            "options": {
                "temperature": self.temperature,
                "num_predict": self.max_tokens,
            },
        }
        data = await _post_json(
            f"{self.base_url}/api/chat",
            payload,
            headers={},
            timeout=self.timeout,
            client=self.client,
        )
        message = data.get("message")
        if not isinstance(message, dict):
            raise LLMError("Invalid LLM response message")
        content = message.get("content")
        if not isinstance(content, str) or not content.strip():
            raise LLMError("Invalid LLM response")
        return content.strip()


async def _post_json(
    url: str,
    payload: dict[str, object],
    *,
    headers: dict[str, str],
    timeout: float,
    client: httpx.AsyncClient | None,
) -> dict[str, object]:
    """POST a JSON payload and return the decoded JSON object."""
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout) as owned:
                response = await owned.post(url, json=payload, headers=headers)
        else:
            response = await client.post(url, json=payload, headers=headers, timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPError as exc:
        raise LLMError(str(exc)) from exc
    except ValueError as exc:
        raise LLMError("LLM response is not valid JSON") from exc
    if not isinstance(data, dict):
        raise LLMError("LLM response is not a JSON object")
    return data


async def generate_or_fallback(
    answerer: Answerer, prompt: str, request_id: str | None = None
) -> str:
    """Generate an answer, returning a fixed apology when the provider fails."""
    try:
        return await answerer.generate(prompt)
    except LLMError as exc:
        logger.error(
            "llm_failed",
            extra={"request_id": request_id, "detail": type(exc).__name__},
        )
        return GENERATION_FALLBACK


def build_llm_answerer(
    provider: str,
    *,
    api_key_openai: str | None,
    openai_base_url: str,
    openai_model: str | None,
    ollama_base_url: str,
    ollama_model: str,
    temperature: float,
    max_tokens: int,
    timeout: float,
) -> OpenAIAnswerer | OllamaAnswerer:
    """Factory for LLM answerers based on provider."""
    normalized = provider.strip().lower()
    if normalized == "openai":
        if not api_key_openai:
            raise LLMError("OPENAI_API_KEY is required for OpenAI provider")
        if not openai_model:
            raise LLMError("OPENAI_CHAT_MODEL is required for OpenAI provider")
        return OpenAIAnswerer(
            api_key=api_key_openai,
            base_url=openai_base_url.rstrip("/"),
            model=openai_model,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
        )
    if normalized == "ollama":
        return OllamaAnswerer(
            base_url=ollama_base_url.rstrip("/"),
            model=ollama_model,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
        )
    raise LLMError(f"Unsupported LLM provider: {provider}")
