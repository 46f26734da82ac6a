"""LLM client — the text-generation backend behind LLMSynthesizer.

Anything matching the LLM protocol can be injected:

    async def __call__(self, stage: str, prompt: str) -> str: ...

``stage`` is "event", "paradise_date" or "ceremony"; it only shows up in logs.

    HttpLLM   — one POST per call to KoboldCpp, an OpenAI-compatible
                completions server, or the Anthropic messages API
    EchoLLM   — hands the prompt straight back, for eyeballing prompts
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Literal, NamedTuple, Protocol

import httpx

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "2023-06-01"

ProviderFormat = Literal["koboldcpp", "openai", "anthropic"]


class LLM(Protocol):
    async def __call__(self, stage: str, prompt: str) -> str: ...


class LLMError(RuntimeError):
    """The backend was unreachable, timed out, failed, or answered in an unknown shape."""


# ── Wire formats ─────────────────────────────────────────


def _first_text(items: Any, key: str = "text", kind: str | None = None) -> str | None:
    if not items or not isinstance(items, list) or not isinstance(items[0], dict):
        return None
    first = items[0]
    if kind is not None and first.get("type") != kind:
        return None
    return first.get(key)


class _Wire(NamedTuple):
    label: str
    path: str
    body: Callable[["HttpLLM", str], dict[str, Any]]
    text: Callable[[dict[str, Any]], str | None]


def _openai_body(llm: "HttpLLM", prompt: str) -> dict[str, Any]:
    return {"prompt": prompt, **({"model": llm.model} if llm.model else {})}


_WIRES: dict[str, _Wire] = {
    "koboldcpp": _Wire(
        "KoboldCpp", "/api/v1/generate",
        lambda llm, prompt: {"prompt": prompt},
        lambda data: _first_text(data.get("results")),
    ),
    "openai": _Wire(
        "OpenAI-compatible", "/v1/completions",
        _openai_body,
        lambda data: _first_text(data.get("choices")),
    ),
    "anthropic": _Wire(
        "Anthropic", "/v1/messages",
        lambda llm, prompt: {
            "model": llm.model,
            "max_tokens": llm.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        },
        lambda data: _first_text(data.get("content"), kind="text"),
    ),
}


# ── Clients ──────────────────────────────────────────────


class HttpLLM:
    """Async HTTP client for a text-generation backend.

    Args:
        provider_url:    Base URL, e.g. "http://localhost:5001" or
                         "https://api.anthropic.com".
        api_key:         Sent as a Bearer token, or as x-api-key for anthropic.
        provider_format: "koboldcpp" (default), "openai" or "anthropic".
        model:           Model name; koboldcpp ignores it.
        timeout:         Seconds before a call fails with LLMError.
        max_tokens:      Reply token limit; anthropic requires one.
    """

    def __init__(
        self,
        provider_url: str,
        api_key: str = "",
        provider_format: ProviderFormat = "koboldcpp",
        model: str = "",
        timeout: float = 120.0,
        max_tokens: int = 1024,
    ) -> None:
        if provider_format not in _WIRES:
            raise ValueError(f"Unknown provider format: {provider_format!r}")
        self.base_url = provider_url.rstrip("/")
        self.api_key = api_key
        self.provider_format = provider_format
        self.model = model
        self.timeout = timeout
        self.max_tokens = max_tokens
        self._wire = _WIRES[provider_format]

    def headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.provider_format == "anthropic":
            headers["anthropic-version"] = ANTHROPIC_VERSION
            if self.api_key:
                headers["x-api-key"] = self.api_key
        elif self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def __call__(self, stage: str, prompt: str) -> str:
        url = self.base_url + self._wire.path
        logger.debug("llm call stage=%s url=%s prompt_len=%d", stage, url, len(prompt))

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(
                    url, json=self._wire.body(self, prompt), headers=self.headers()
                )
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise LLMError(f"Cannot connect to LLM backend at {self.base_url}") from e
        except httpx.TimeoutException as e:
            raise LLMError(f"LLM backend timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise LLMError(f"LLM backend returned HTTP {e.response.status_code}") from e

        text = self._wire.text(resp.json())
        if not isinstance(text, str):
            raise LLMError(f"Unexpected response format from {self._wire.label} backend")
        logger.debug("llm reply stage=%s len=%d", stage, len(text))
        return text


class EchoLLM:
    """Returns the rendered prompt unchanged; no network.

    The reply is not JSON, so LLMSynthesizer rejects it. Use it to read prompts.
    """

    async def __call__(self, stage: str, prompt: str) -> str:
        logger.debug("echo stage=%s prompt_len=%d", stage, len(prompt))
        return prompt
