"""LLM provider adapters for OpenAI, Anthropic and a local Ollama runtime.

Each adapter maps a CompletionRequest onto one vendor call and back into a
CompletionResponse. Credentials are bound when the registry is built at
process start; nothing here reads global settings at call time.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol

import anthropic
import httpx
import openai

from app.config import Settings
from app.models.errors import ConfigurationMissing, GenerationFailed
from app.models.research import LLMProvider
from app.services import logger as log_service


@dataclass
class Usage:
    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    def to_dict(self) -> dict[str, int]:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass(frozen=True)
class CompletionRequest:
    model: str
    prompt: str
    temperature: float = 0.7
    max_tokens: int = 2000


@dataclass
class CompletionResponse:
    content: str
    model: str
    provider: LLMProvider
    usage: Usage = field(default_factory=Usage)

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": self.content,
            "model": self.model,
            "provider": self.provider.value,
            "usage": self.usage.to_dict(),
        }


class LLMAdapter(Protocol):
    provider: LLMProvider

    async def complete(self, request: CompletionRequest) -> CompletionResponse: ...


class OpenAIAdapter:
    provider = LLMProvider.OPENAI

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "",
        timeout: float = 120.0,
        client: Any | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.strip()
        self.timeout = timeout
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            if not self.api_key:
                raise ConfigurationMissing("OPENAI_API_KEY is not configured")
            kwargs: dict[str, Any] = {"api_key": self.api_key, "timeout": self.timeout}
            if self.base_url:
                kwargs["base_url"] = self.base_url
            self._client = openai.AsyncOpenAI(**kwargs)
        return self._client

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        client = self._get_client()
        try:
            response = await client.chat.completions.create(
                model=request.model,
                messages=[{"role": "user", "content": request.prompt}],
                temperature=request.temperature,
                max_tokens=request.max_tokens,
            )
        except openai.OpenAIError as exc:
            raise GenerationFailed(f"Failed to generate response from OpenAI: {exc}") from exc

        choices = getattr(response, "choices", None) or []
        if not choices:
            raise GenerationFailed("OpenAI response contained no choices")
        message = getattr(choices[0], "message", None)
        usage = getattr(response, "usage", None)
        return CompletionResponse(
            content=getattr(message, "content", None) or "",
            model=getattr(response, "model", None) or request.model,
            provider=self.provider,
            usage=Usage(
                prompt_tokens=getattr(usage, "prompt_tokens", 0) or 0,
                completion_tokens=getattr(usage, "completion_tokens", 0) or 0,
            ),
        )


class AnthropicAdapter:
    provider = LLMProvider.ANTHROPIC

    def __init__(self, api_key: str, *, timeout: float = 120.0, client: Any | None = None):
        self.api_key = api_key
        self.timeout = timeout
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            if not self.api_key:
                raise ConfigurationMissing("ANTHROPIC_API_KEY is not configured")
            self._client = anthropic.AsyncAnthropic(api_key=self.api_key, timeout=self.timeout)
        return self._client

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        client = self._get_client()
        try:
            response = await client.messages.create(
                model=request.model,
                max_tokens=request.max_tokens,
                temperature=request.temperature,
                messages=[{"role": "user", "content": request.prompt}],
            )
        except anthropic.AnthropicError as exc:
            raise GenerationFailed(f"Failed to generate response from Anthropic: {exc}") from exc

        blocks = getattr(response, "content", None) or []
        text = "".join(
            getattr(block, "text", "") or ""
            for block in blocks
            if getattr(block, "type", "text") == "text"
        )
        usage = getattr(response, "usage", None)
        return CompletionResponse(
            content=text,
            model=getattr(response, "model", None) or request.model,
            provider=self.provider,
            usage=Usage(
                prompt_tokens=getattr(usage, "input_tokens", 0) or 0,
                completion_tokens=getattr(usage, "output_tokens", 0) or 0,
            ),
        )


class OllamaAdapter:
    provider = LLMProvider.OLLAMA

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        *,
        timeout: float = 120.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http_client = http_client

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        async def _do_request(client: httpx.AsyncClient) -> Any:
            response = await client.request(
                method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs
            )
            response.raise_for_status()
            return response.json()

        if self._http_client is None:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                return await _do_request(client)
        return await _do_request(self._http_client)

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        try:
            data = await self._request(
                "POST",
                "/api/generate",
                json={
                    "model": request.model,
                    "prompt": request.prompt,
                    "stream": False,
                    "options": {
                        "temperature": request.temperature,
                        "num_predict": request.max_tokens,
                    },
                },
            )
        except (httpx.HTTPError, ValueError) as exc:
            raise GenerationFailed(f"Failed to generate response from Ollama: {exc}") from exc

        if not isinstance(data, dict):
            raise GenerationFailed("Ollama returned a non-object payload")
        return CompletionResponse(
            content=str(data.get("response") or ""),
            model=request.model,
            provider=self.provider,
            usage=Usage(
                prompt_tokens=int(data.get("prompt_eval_count") or 0),
                completion_tokens=int(data.get("eval_count") or 0),
            ),
        )

    async def list_models(self) -> list[str]:
        """Names of locally available models. Any failure yields an empty list."""
        try:
            data = await self._request("GET", "/api/tags")
            models = (data.get("models") or []) if isinstance(data, dict) else []
            return [str(m["name"]) for m in models if isinstance(m, dict) and m.get("name")]
        except Exception as exc:
            log_service.log_provider_failure("ollama", str(exc), operation="list_models")
            return []


@dataclass(frozen=True)
class LLMRegistry:
    """One adapter per LLMProvider member; construction fails if any is missing."""

    adapters: Mapping[LLMProvider, LLMAdapter]

    def __post_init__(self) -> None:
        missing = [p.value for p in LLMProvider if p not in self.adapters]
        if missing:
            raise ValueError(f"LLM registry is missing adapters for: {', '.join(missing)}")

    def adapter_for(self, provider: LLMProvider) -> LLMAdapter:
        return self.adapters[provider]

    async def generate(
        self,
        provider: LLMProvider,
        request: CompletionRequest,
        *,
        caller: str = "completion",
    ) -> CompletionResponse:
        """Run one completion and log it. Non-pipeline errors become GenerationFailed."""
        adapter = self.adapter_for(provider)
        t0 = time.monotonic()
        try:
            response = await adapter.complete(request)
        except (GenerationFailed, ConfigurationMissing) as exc:
            log_service.log_llm_call(
                model=request.model,
                caller=caller,
                provider=provider.value,
                duration_ms=int((time.monotonic() - t0) * 1000),
                status="error",
                error=str(exc),
            )
            raise
        except Exception as exc:
            log_service.log_llm_call(
                model=request.model,
                caller=caller,
                provider=provider.value,
                duration_ms=int((time.monotonic() - t0) * 1000),
                status="error",
                error=str(exc),
            )
            raise GenerationFailed(f"Failed to generate AI response: {exc}") from exc

        log_service.log_llm_call(
            model=response.model,
            caller=caller,
            provider=provider.value,
            input_tokens=response.usage.prompt_tokens,
            output_tokens=response.usage.completion_tokens,
            duration_ms=int((time.monotonic() - t0) * 1000),
        )
        return response


def build_llm_registry(
    config: Settings,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> LLMRegistry:
    return LLMRegistry(
        adapters={
            LLMProvider.OPENAI: OpenAIAdapter(
                config.openai_api_key,
                base_url=config.openai_base_url,
                timeout=config.llm_timeout_seconds,
            ),
            LLMProvider.ANTHROPIC: AnthropicAdapter(
                config.anthropic_api_key,
                timeout=config.llm_timeout_seconds,
            ),
            LLMProvider.OLLAMA: OllamaAdapter(
                config.ollama_base_url,
                timeout=config.llm_timeout_seconds,
                http_client=http_client,
            ),
        }
    )


OPENAI_MODELS: list[tuple[str, str]] = [
    ("gpt-4-turbo-preview", "GPT-4 Turbo Preview (128K)"),
    ("gpt-4-1106-preview", "GPT-4 Turbo 1106 (128K)"),
    ("gpt-4-vision-preview", "GPT-4 Vision (128K)"),
    ("gpt-4-32k", "GPT-4 32K"),
    ("gpt-4", "GPT-4 (8K)"),
    ("gpt-4-turbo", "GPT-4 Turbo (128K)"),
    ("gpt-3.5-turbo-16k", "GPT-3.5 Turbo 16K"),
    ("gpt-3.5-turbo", "GPT-3.5 Turbo (4K)"),
]

ANTHROPIC_MODELS: list[tuple[str, str]] = [
    ("claude-3-5-sonnet-20240620", "Claude 3.5 Sonnet (200K)"),
    ("claude-3-opus-20240229", "Claude 3 Opus (200K)"),
    ("claude-3-sonnet-20240229", "Claude 3.0 Sonnet (200K)"),
    ("claude-3-haiku-20240307", "Claude 3 Haiku (200K)"),
]
