"""Async LLM provider interface and implementations.

One provider class per wire shape: OpenAI-compatible chat completions
(openai, deepseek, grok), Anthropic messages, and Gemini streaming. All
SDKs are sync, so calls run through asyncio.to_thread under a timeout.
Each provider validates its own response and returns plain text.
"""
import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Optional

from resource_arena.config import settings

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Base class for model gateway failures."""
    pass


class LLMResponseError(LLMError):
    """Provider answered, but not with the shape we expect."""
    pass


class LLMTimeoutError(LLMError):
    """Raised when an LLM call exceeds the configured timeout."""
    pass


class LLMConfigurationError(LLMError):
    """Missing API key or model name for the requested provider."""
    pass


class UnsupportedProviderError(LLMError):
    """Raised for provider values the gateway has no client for."""
    pass


class BaseLLMProvider(ABC):
    """Abstract base class for async LLM providers."""

    provider_name = ""

    def __init__(self, api_key: str, model_name: str, timeout: Optional[float] = None):
        if not api_key:
            raise LLMConfigurationError(f"No API key configured for provider '{self.provider_name}'")
        if not model_name:
            raise LLMConfigurationError("No model name given")
        self.api_key = api_key
        self.model_name = model_name
        self.timeout = timeout if timeout is not None else settings.LLM_TIMEOUT_SECONDS

    @abstractmethod
    def _sync_generate(self, prompt: str) -> str:
        pass

    async def generate(self, prompt: str) -> str:
        """Send a single-turn prompt and return the model's raw text output."""
        start = time.monotonic()
        try:
            text = await asyncio.wait_for(
                asyncio.to_thread(self._sync_generate, prompt),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "LLM call to %s/%s timed out after %ss",
                self.provider_name, self.model_name, self.timeout,
            )
            raise LLMTimeoutError(f"LLM generate call timed out after {self.timeout}s")
        except Exception as e:
            logger.warning("LLM call to %s/%s failed: %s", self.provider_name, self.model_name, e)
            raise
        duration_ms = (time.monotonic() - start) * 1000
        logger.info(
            "LLM call to %s/%s finished in %.0fms (%d chars)",
            self.provider_name, self.model_name, duration_ms, len(text),
        )
        return text


class OpenAICompatibleProvider(BaseLLMProvider):
    """Chat completions API; also serves DeepSeek and Grok via base_url."""

    def __init__(
        self, api_key: str, model_name: str,
        base_url: Optional[str] = None, provider_name: str = "openai",
        timeout: Optional[float] = None,
    ):
        self.provider_name = provider_name
        super().__init__(api_key, model_name, timeout)
        from openai import OpenAI
        kwargs = {"api_key": api_key}
        if base_url:
            kwargs["base_url"] = base_url
        self.client = OpenAI(**kwargs)

    def _sync_generate(self, prompt):
        response = self.client.chat.completions.create(
            model=self.model_name,
            messages=[{"role": "user", "content": prompt}],
        )
        choices = getattr(response, "choices", None)
        if not choices:
            raise LLMResponseError(f"Invalid response from {self.provider_name}: no choices")
        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        if not isinstance(content, str):
            raise LLMResponseError(f"Invalid response from {self.provider_name}: no message content")
        return content


class AnthropicProvider(BaseLLMProvider):
    """Anthropic messages API with a fixed output token cap."""

    provider_name = "anthropic"

    def __init__(
        self, api_key: str, model_name: str,
        max_tokens: Optional[int] = None, timeout: Optional[float] = None,
    ):
        super().__init__(api_key, model_name, timeout)
        from anthropic import Anthropic
        self.client = Anthropic(api_key=api_key)
        self.max_tokens = max_tokens or settings.ANTHROPIC_MAX_TOKENS

    def _sync_generate(self, prompt):
        response = self.client.messages.create(
            model=self.model_name,
            max_tokens=self.max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )
        blocks = getattr(response, "content", None) or []
        texts = [
            block.text for block in blocks
            if getattr(block, "type", None) == "text" and isinstance(getattr(block, "text", None), str)
        ]
        if not texts:
            raise LLMResponseError("Invalid response from anthropic: no text content")
        return "".join(texts)


class GeminiProvider(BaseLLMProvider):
    """Gemini streaming generation; chunks are joined in arrival order."""

    provider_name = "gemini"

    def __init__(self, api_key: str, model_name: str, timeout: Optional[float] = None):
        super().__init__(api_key, model_name, timeout)
        from google import genai
        self.client = genai.Client(api_key=api_key)

    def _sync_generate(self, prompt):
        stream = self.client.models.generate_content_stream(
            model=self.model_name, contents=prompt,
        )
        chunks = []
        for chunk in stream:
            text = getattr(chunk, "text", None)
            if isinstance(text, str):
                chunks.append(text)
        if not chunks:
            raise LLMResponseError("Empty response from gemini")
        return "".join(chunks)


SUPPORTED_PROVIDERS = ("openai", "anthropic", "gemini", "deepseek", "grok")


def create_llm_provider(provider: str, model_name: str) -> BaseLLMProvider:
    """Factory keyed on the ai_models.provider value; credentials come from settings."""
    if provider == "openai":
        return OpenAICompatibleProvider(settings.OPENAI_API_KEY, model_name)
    elif provider == "deepseek":
        return OpenAICompatibleProvider(
            settings.DEEPSEEK_API_KEY, model_name,
            base_url=settings.DEEPSEEK_BASE_URL, provider_name="deepseek",
        )
    elif provider == "grok":
        return OpenAICompatibleProvider(
            settings.GROK_API_KEY, model_name,
            base_url=settings.GROK_BASE_URL, provider_name="grok",
        )
    elif provider == "anthropic":
        return AnthropicProvider(settings.ANTHROPIC_API_KEY, model_name)
    elif provider == "gemini":
        return GeminiProvider(settings.GEMINI_API_KEY, model_name)
    else:
        raise UnsupportedProviderError(
            f"Unsupported provider: {provider} (expected one of {', '.join(SUPPORTED_PROVIDERS)})"
        )


async def generate_with_model(model, prompt: str) -> str:
    """Run one prompt against an ai_models row (anything with .provider and .name)."""
    provider = create_llm_provider(model.provider, model.name)
    return await provider.generate(prompt)
