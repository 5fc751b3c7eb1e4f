"""LLM gateway client: one request/response contract over Anthropic and OpenAI.

The ``simulate`` provider answers locally without a key or network call.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

import anthropic
import openai

from jd_tailor.clients.errors import GatewayError
from jd_tailor.clients.simulator import simulate_response

logger = logging.getLogger(__name__)

DEFAULT_MODELS: dict[str, str] = {
    "anthropic": "claude-haiku-4-5-20251001",
    "openai": "gpt-4o",
    "simulate": "simulate",
}

_API_KEY_ENV: dict[str, str] = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
}

_PROVIDER_NAMES: dict[str, str] = {"anthropic": "Anthropic", "openai": "OpenAI"}


@dataclass
class GatewayRequest:
    """Provider-agnostic completion request."""

    provider: str
    model: str
    system: str
    messages: list[dict] = field(default_factory=list)
    max_tokens: int = 1024
    temperature: float = 0.5


@dataclass
class GatewayResponse:
    """Response from the gateway including usage metadata."""

    content: str
    input_tokens: int = 0
    output_tokens: int = 0


class LLMClient:
    """Async gateway to the configured LLM provider.

    Retrying is left to the caller, so the SDKs' built-in retries are disabled.
    """

    def __init__(
        self,
        provider: str = "anthropic",
        api_key: str | None = None,
        timeout: float | None = None,
    ):
        if provider not in DEFAULT_MODELS:
            raise ValueError(f"Unknown LLM provider: {provider}")
        self.provider = provider
        self._api_key = api_key
        self._timeout = timeout
        self._clients: dict[str, object] = {}
        self._token_log: list[tuple[str, int, int]] = []  # (model, input_tokens, output_tokens)

    def _resolve_key(self, provider: str) -> str:
        key = self._api_key if provider == self.provider else None
        key = key or os.environ.get(_API_KEY_ENV[provider])
        if not key:
            raise GatewayError(f"{_PROVIDER_NAMES[provider]} API key not configured")
        return key

    def _sdk_client(self, provider: str):
        if provider in self._clients:
            return self._clients[provider]

        kwargs: dict = {"api_key": self._resolve_key(provider), "max_retries": 0}
        if self._timeout is not None:
            kwargs["timeout"] = self._timeout
        if provider == "anthropic":
            client = anthropic.AsyncAnthropic(**kwargs)
        elif provider == "openai":
            client = openai.AsyncOpenAI(**kwargs)
        else:
            raise GatewayError(f"Unknown LLM provider: {provider}", status=400)
        self._clients[provider] = client
        logger.debug("Initialised %s client", provider)
        return client

    async def complete(self, request: GatewayRequest) -> GatewayResponse:
        """Send one request through the gateway. Raises GatewayError on failure."""
        logger.debug("LLM call: provider=%s model=%s", request.provider, request.model)
        try:
            if request.provider == "simulate":
                response = GatewayResponse(content=simulate_response(request.messages))
            elif request.provider == "openai":
                response = await self._call_openai(request)
            else:
                response = await self._call_anthropic(request)
        except GatewayError:
            raise
        except (anthropic.APIStatusError, openai.APIStatusError) as exc:
            raise GatewayError(str(exc.message), status=exc.status_code) from exc
        except (anthropic.APIError, openai.APIError) as exc:
            raise GatewayError(str(exc)) from exc

        logger.debug(
            "LLM response: %d input, %d output tokens",
            response.input_tokens,
            response.output_tokens,
        )
        self._token_log.append((request.model, response.input_tokens, response.output_tokens))
        return response

    async def _call_anthropic(self, request: GatewayRequest) -> GatewayResponse:
        client = self._sdk_client("anthropic")
        kwargs: dict = {
            "model": request.model,
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
            "messages": [m for m in request.messages if m.get("role") != "system"],
        }
        if request.system:
            kwargs["system"] = request.system
        message = await client.messages.create(**kwargs)
        if not message.content:
            raise GatewayError("LLM response format unexpected or empty.")
        return GatewayResponse(
            content=message.content[0].text,
            input_tokens=message.usage.input_tokens,
            output_tokens=message.usage.output_tokens,
        )

    async def _call_openai(self, request: GatewayRequest) -> GatewayResponse:
        client = self._sdk_client("openai")
        messages = []
        if request.system:
            messages.append({"role": "system", "content": request.system})
        messages.extend(request.messages)
        completion = await client.chat.completions.create(
            model=request.model,
            messages=messages,
            max_tokens=request.max_tokens,
            temperature=request.temperature,
        )
        if not completion.choices or completion.choices[0].message.content is None:
            raise GatewayError("LLM response format unexpected or empty.")
        usage = completion.usage
        return GatewayResponse(
            content=completion.choices[0].message.content,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
        )

    def get_token_summary(self) -> dict:
        """Return accumulated token usage and reset the log."""
        summary = {
            "input": sum(t[1] for t in self._token_log),
            "output": sum(t[2] for t in self._token_log),
            "calls": list(self._token_log),
        }
        self._token_log.clear()
        return summary
