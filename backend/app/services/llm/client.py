"""
LLM Client Abstraction

Provides unified interface for Google Gemini, Anthropic Claude and OpenAI.
Handles provider switching and fallback.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class LLMProvider(str, Enum):
    GEMINI = "gemini"
    ANTHROPIC = "anthropic"
    OPENAI = "openai"


@dataclass
class LLMConfig:
    """Configuration for LLM client."""

    provider: LLMProvider
    gemini_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    gemini_model: str = "gemini-1.5-flash"
    anthropic_model: str = "claude-3-haiku-20240307"
    openai_model: str = "gpt-4o-mini"
    max_tokens: int = 2048
    temperature: float = 0.9


@dataclass
class LLMResponse:
    """Response from LLM."""

    content: str
    model: str
    provider: LLMProvider
    usage: dict


class BaseLLMClient(ABC):
    """Abstract base class for LLM clients."""

    provider: LLMProvider

    def __init__(self, config: LLMConfig):
        self.config = config
        self._client = None

    @abstractmethod
    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Generate a response from the LLM."""
        pass

    def _sampling(self, temperature: Optional[float], max_tokens: Optional[int]) -> tuple[float, int]:
        temp = temperature if temperature is not None else self.config.temperature
        tokens = max_tokens if max_tokens is not None else self.config.max_tokens
        return temp, tokens


class GeminiClient(BaseLLMClient):
    """Google Gemini client implementation."""

    provider = LLMProvider.GEMINI

    def _get_model(self):
        """Lazy initialization of the Gemini model."""
        if self._client is None:
            try:
                import google.generativeai as genai
            except ImportError:
                raise RuntimeError(
                    "google-generativeai package not installed. Run: pip install google-generativeai"
                )
            genai.configure(api_key=self.config.gemini_api_key)
            self._client = genai.GenerativeModel(self.config.gemini_model)
        return self._client

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Generate response using Gemini."""
        model = self._get_model()
        temp, tokens = self._sampling(temperature, max_tokens)

        # Combine system and user prompts for Gemini
        full_prompt = f"{system_prompt}\n\n---\n\n{user_prompt}"
        generation_config = {"temperature": temp, "max_output_tokens": tokens}

        try:
            # Gemini's generate_content is synchronous, wrap in executor
            loop = asyncio.get_running_loop()
            response = await loop.run_in_executor(
                None,
                lambda: model.generate_content(full_prompt, generation_config=generation_config),
            )
        except Exception as e:
            logger.error(f"Gemini API error: {e}")
            raise

        usage = getattr(response, "usage_metadata", None)
        return LLMResponse(
            content=response.text,
            model=self.config.gemini_model,
            provider=self.provider,
            usage={
                "prompt_tokens": getattr(usage, "prompt_token_count", 0),
                "completion_tokens": getattr(usage, "candidates_token_count", 0),
            },
        )


class AnthropicClient(BaseLLMClient):
    """Anthropic Claude client implementation."""

    provider = LLMProvider.ANTHROPIC

    def _get_client(self):
        """Lazy initialization of Anthropic client."""
        if self._client is None:
            try:
                import anthropic
            except ImportError:
                raise RuntimeError(
                    "anthropic package not installed. Run: pip install anthropic"
                )
            self._client = anthropic.AsyncAnthropic(api_key=self.config.anthropic_api_key)
        return self._client

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Generate response using Claude."""
        client = self._get_client()
        temp, tokens = self._sampling(temperature, max_tokens)

        try:
            response = await client.messages.create(
                model=self.config.anthropic_model,
                max_tokens=tokens,
                temperature=min(temp, 1.0),
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
            )
        except Exception as e:
            logger.error(f"Anthropic API error: {e}")
            raise

        return LLMResponse(
            content=response.content[0].text,
            model=self.config.anthropic_model,
            provider=self.provider,
            usage={
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            },
        )


class OpenAIClient(BaseLLMClient):
    """OpenAI GPT client implementation."""

    provider = LLMProvider.OPENAI

    def _get_client(self):
        """Lazy initialization of OpenAI client."""
        if self._client is None:
            try:
                import openai
            except ImportError:
                raise RuntimeError(
                    "openai package not installed. Run: pip install openai"
                )
            self._client = openai.AsyncOpenAI(api_key=self.config.openai_api_key)
        return self._client

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Generate response using GPT."""
        client = self._get_client()
        temp, tokens = self._sampling(temperature, max_tokens)

        try:
            response = await client.chat.completions.create(
                model=self.config.openai_model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temp,
                max_tokens=tokens,
            )
        except Exception as e:
            logger.error(f"OpenAI API error: {e}")
            raise

        return LLMResponse(
            content=response.choices[0].message.content,
            model=self.config.openai_model,
            provider=self.provider,
            usage={
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
            },
        )


_CLIENT_TYPES = {
    LLMProvider.GEMINI: (GeminiClient, "gemini_api_key"),
    LLMProvider.ANTHROPIC: (AnthropicClient, "anthropic_api_key"),
    LLMProvider.OPENAI: (OpenAIClient, "openai_api_key"),
}


class LLMClient:
    """
    Unified LLM client with provider switching and fallback.

    The configured provider is tried first; the first other provider with
    an API key is used as fallback.
    """

    def __init__(self, config: LLMConfig):
        self.config = config
        self._primary: Optional[BaseLLMClient] = None
        self._fallback: Optional[BaseLLMClient] = None
        self._setup_clients()

    def _setup_clients(self):
        """Setup primary and fallback clients based on config."""
        for provider, (client_type, key_attr) in _CLIENT_TYPES.items():
            if not getattr(self.config, key_attr):
                continue
            if provider == self.config.provider:
                self._primary = client_type(self.config)
            elif self._fallback is None:
                self._fallback = client_type(self.config)

        if self._primary is None and self._fallback is None:
            logger.warning("No LLM API keys configured. AI assistant disabled.")

    @property
    def is_configured(self) -> bool:
        return self._primary is not None or self._fallback is not None

    def get_active_provider(self) -> Optional[LLMProvider]:
        """Provider that will be tried first."""
        active = self._primary or self._fallback
        return active.provider if active else None

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """
        Generate LLM response with automatic fallback.

        Tries primary provider first, falls back to secondary on failure.
        """
        if not self.is_configured:
            raise RuntimeError("No LLM providers configured")

        if self._primary:
            try:
                return await self._primary.generate(
                    system_prompt, user_prompt, temperature, max_tokens
                )
            except Exception as e:
                if self._fallback is None:
                    raise
                logger.warning(f"Primary LLM failed: {e}, trying fallback...")

        return await self._fallback.generate(
            system_prompt, user_prompt, temperature, max_tokens
        )


# Singleton instance management
_llm_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    """Get or create LLM client singleton."""
    global _llm_client
    if _llm_client is None:
        from app.core.config import settings

        config = LLMConfig(
            provider=LLMProvider(settings.llm_primary_provider),
            gemini_api_key=settings.gemini_api_key,
            anthropic_api_key=settings.anthropic_api_key,
            openai_api_key=settings.openai_api_key,
            gemini_model=settings.gemini_model,
            anthropic_model=settings.anthropic_model,
            openai_model=settings.openai_model,
            max_tokens=settings.llm_max_tokens,
            temperature=settings.llm_temperature,
        )
        _llm_client = LLMClient(config)
    return _llm_client
