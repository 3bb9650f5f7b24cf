"""
Thin adapter layer over the OpenAI SDK (OpenAI and Azure OpenAI).

Both providers expose the same interface so callers never import
provider-specific code.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from config.settings import Settings, config

logger = logging.getLogger(__name__)


class BaseLLMProvider(ABC):
    """Common interface that every concrete provider implements."""

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        *,
        system: str | None = None,
        temperature: float = 0.3,
        model: str | None = None,
        max_tokens: int = 4096,
        json_output: bool = False,
    ) -> Dict[str, Any] | str:
        ...


class _ChatCompletionsProvider(BaseLLMProvider):
    """Shared chat-completions call; subclasses only build the client."""

    client: Any
    default_model: str

    async def generate(
        self,
        prompt: str,
        *,
        system: str | None = None,
        temperature: float = 0.3,
        model: str | None = None,
        max_tokens: int = 4096,
        json_output: bool = False,
    ) -> Dict[str, Any] | str:
        model = model or self.default_model

        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        kwargs: Dict[str, Any] = {}
        if json_output:
            kwargs["response_format"] = {"type": "json_object"}

        response = await self.client.chat.completions.create(
            model=model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs,
        )

        text = response.choices[0].message.content or ""

        if json_output:
            try:
                return json.loads(text)
            except json.JSONDecodeError:
                logger.warning("LLM did not return valid JSON; returning raw text")
                return {"raw": text}

        return text


# ═══════════════════════════════════════════════════════════════════════════════
# OpenAI
# ═══════════════════════════════════════════════════════════════════════════════


class OpenAIProvider(_ChatCompletionsProvider):
    def __init__(self, api_key: str, default_model: str = "gpt-4o-mini"):
        from openai import AsyncOpenAI

        self.client = AsyncOpenAI(api_key=api_key)
        self.default_model = default_model


# ═══════════════════════════════════════════════════════════════════════════════
# Azure OpenAI
# ═══════════════════════════════════════════════════════════════════════════════


class AzureOpenAIProvider(_ChatCompletionsProvider):
    def __init__(self, endpoint: str, api_key: str, deployment: str, api_version: str):
        from openai import AsyncAzureOpenAI

        self.client = AsyncAzureOpenAI(
            azure_endpoint=endpoint,
            api_key=api_key,
            api_version=api_version,
        )
        # Azure routes by deployment name, passed as ``model``.
        self.default_model = deployment


# ═══════════════════════════════════════════════════════════════════════════════
# Factory
# ═══════════════════════════════════════════════════════════════════════════════

_provider_cache: Dict[str, BaseLLMProvider] = {}


def get_llm_provider(
    provider_name: str,
    *,
    settings: Optional[Settings] = None,
    default_model: str | None = None,
) -> BaseLLMProvider:
    """
    Return (and cache) an LLM provider instance.

    Parameters
    ----------
    provider_name : "openai" | "azure"
    settings      : credentials source; defaults to the application config.
    default_model : override the default model for this provider instance.
    """
    settings = settings or config

    cache_key = f"{provider_name}:{default_model or 'default'}"
    if cache_key in _provider_cache:
        return _provider_cache[cache_key]

    if provider_name == "openai":
        instance = OpenAIProvider(
            api_key=settings.openai_api_key,
            default_model=default_model or "gpt-4o-mini",
        )
    elif provider_name == "azure":
        instance = AzureOpenAIProvider(
            endpoint=settings.azure_openai_endpoint,
            api_key=settings.azure_openai_api_key,
            deployment=default_model or settings.azure_openai_deployment,
            api_version=settings.azure_openai_api_version,
        )
    else:
        raise ValueError(f"Unsupported LLM provider: {provider_name}")

    _provider_cache[cache_key] = instance
    return instance
