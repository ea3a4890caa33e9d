"""
AI Service - LLM integration for vocabulary enrichment.

Provides abstraction over multiple LLM providers (OpenAI, Anthropic, local
models) for the two text-shaped tasks of the app:
- free-form text generation (structured definition lookups)
- vision-to-text (extracting words from a photo of a word list)
"""

import asyncio
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

import aiohttp

from ..config import Config
from ..errors import AIServiceError

logger = logging.getLogger(__name__)


class AIProvider(Enum):
    """Supported AI providers."""
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    OLLAMA = "ollama"  # Local models
    GROQ = "groq"  # Fast inference


MODEL_DEFAULTS = {
    AIProvider.OPENAI: "gpt-4o-mini",
    AIProvider.ANTHROPIC: "claude-3-haiku-20240307",
    AIProvider.OLLAMA: "llava",
    AIProvider.GROQ: "llama-3.1-8b-instant",
}

API_KEY_ENV = {
    AIProvider.OPENAI: "OPENAI_API_KEY",
    AIProvider.ANTHROPIC: "ANTHROPIC_API_KEY",
    AIProvider.GROQ: "GROQ_API_KEY",
}


@dataclass
class AIConfig:
    """Configuration for AI service."""
    provider: AIProvider = AIProvider.OPENAI
    model: str = "gpt-4o-mini"
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    temperature: float = 0.3
    max_tokens: int = 1000
    timeout: int = 30


@dataclass
class ImageInput:
    """Base64-encoded image attached to a prompt."""
    data: str
    media_type: str = "image/jpeg"

    @property
    def data_url(self) -> str:
        return f"data:{self.media_type};base64,{self.data}"


class BaseAIProvider(ABC):
    """Abstract base class for AI providers."""

    supports_vision: bool = True

    def __init__(self, config: AIConfig):
        self.config = config
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self) -> None:
        """Close the session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def _post_json(self, name: str, url: str, payload: Dict[str, Any],
                         headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """POST a JSON payload and return the decoded JSON answer."""
        session = await self._get_session()
        try:
            async with session.post(url, headers=headers, json=payload) as response:
                if response.status != 200:
                    error = await response.text()
                    raise AIServiceError(f"{name} API error {response.status}: {error[:200]}")
                data = await response.json(content_type=None)
        except asyncio.TimeoutError:
            raise AIServiceError(f"{name} API timeout")
        except aiohttp.ClientError as e:
            raise AIServiceError(f"{name} request failed: {e}")
        except ValueError:
            raise AIServiceError(f"{name} API returned invalid JSON")

        if not isinstance(data, dict):
            raise AIServiceError(f"{name} API returned an unexpected payload")
        return data

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        image: Optional[ImageInput] = None,
        max_tokens: Optional[int] = None
    ) -> str:
        """Generate completion for the given prompt, optionally about an image."""
        pass


class OpenAIProvider(BaseAIProvider):
    """OpenAI API provider (also works with compatible APIs)."""

    DEFAULT_BASE_URL = "https://api.openai.com/v1"
    NAME = "OpenAI"

    def _base_url(self) -> str:
        return self.config.base_url or self.DEFAULT_BASE_URL

    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        image: Optional[ImageInput] = None,
        max_tokens: Optional[int] = None
    ) -> str:
        """Generate completion using the chat completions endpoint."""
        if image is not None and not self.supports_vision:
            raise AIServiceError(f"{self.NAME} provider does not accept images")

        url = f"{self._base_url()}/chat/completions"

        messages: List[Dict[str, Any]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        if image is not None:
            messages.append({
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {"type": "image_url", "image_url": {"url": image.data_url}},
                ],
            })
        else:
            messages.append({"role": "user", "content": prompt})

        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

        payload = {
            "model": self.config.model,
            "messages": messages,
            "temperature": self.config.temperature,
            "max_tokens": max_tokens or self.config.max_tokens,
        }

        data = await self._post_json(self.NAME, url, payload, headers)
        try:
            return data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError):
            raise AIServiceError(f"{self.NAME} API returned an unexpected payload")


class GroqProvider(OpenAIProvider):
    """Groq fast inference provider (OpenAI-compatible, text only)."""

    DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"
    NAME = "Groq"
    supports_vision = False


class AnthropicProvider(BaseAIProvider):
    """Anthropic Claude API provider."""

    BASE_URL = "https://api.anthropic.com/v1"

    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        image: Optional[ImageInput] = None,
        max_tokens: Optional[int] = None
    ) -> str:
        """Generate completion using the messages endpoint."""
        url = f"{self.config.base_url or self.BASE_URL}/messages"

        headers = {
            "x-api-key": self.config.api_key or "",
            "anthropic-version": "2023-06-01",
            "Content-Type": "application/json",
        }

        if image is not None:
            content: Any = [
                {
                    "type": "image",
                    "source": {"type": "base64", "media_type": image.media_type, "data": image.data},
                },
                {"type": "text", "text": prompt},
            ]
        else:
            content = prompt

        payload: Dict[str, Any] = {
            "model": self.config.model,
            "max_tokens": max_tokens or self.config.max_tokens,
            "messages": [{"role": "user", "content": content}],
        }
        if system_prompt:
            payload["system"] = system_prompt

        data = await self._post_json("Anthropic", url, payload, headers)
        try:
            return "".join(block.get("text", "") for block in data["content"])
        except (KeyError, TypeError, AttributeError):
            raise AIServiceError("Anthropic API returned an unexpected payload")


class OllamaProvider(BaseAIProvider):
    """Ollama local model provider."""

    DEFAULT_BASE_URL = "http://localhost:11434"

    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        image: Optional[ImageInput] = None,
        max_tokens: Optional[int] = None
    ) -> str:
        """Generate completion using local Ollama."""
        url = f"{self.config.base_url or self.DEFAULT_BASE_URL}/api/generate"

        full_prompt = f"{system_prompt}\n\n{prompt}" if system_prompt else prompt

        payload: Dict[str, Any] = {
            "model": self.config.model,
            "prompt": full_prompt,
            "stream": False,
            "options": {
                "temperature": self.config.temperature,
                "num_predict": max_tokens or self.config.max_tokens,
            },
        }
        if image is not None:
            payload["images"] = [image.data]

        try:
            data = await self._post_json("Ollama", url, payload)
        except AIServiceError as e:
            if "request failed" in str(e):
                raise AIServiceError("Cannot connect to Ollama. Is it running?")
            raise
        return data.get("response", "")


class AIService:
    """
    High-level AI service used by ingestion and the definition source.

    Usage:
        async with AIService() as ai:
            text = await ai.generate_text("Define 'casa' in English")
    """

    PROVIDER_CLASSES = {
        AIProvider.OPENAI: OpenAIProvider,
        AIProvider.ANTHROPIC: AnthropicProvider,
        AIProvider.OLLAMA: OllamaProvider,
        AIProvider.GROQ: GroqProvider,
    }

    def __init__(self, config: Optional[AIConfig] = None):
        """
        Initialize AI service.

        Args:
            config: AI configuration. If None, uses environment variables.
        """
        self.config = config or self._config_from_env()
        self._provider: Optional[BaseAIProvider] = None

    @staticmethod
    def _config_from_env() -> AIConfig:
        """Create config from environment variables."""
        provider = _provider_from_name(Config.AI_PROVIDER)
        env_key = API_KEY_ENV.get(provider)
        return AIConfig(
            provider=provider,
            model=Config.AI_MODEL or MODEL_DEFAULTS[provider],
            api_key=os.environ.get(env_key) if env_key else None,
            base_url=Config.AI_BASE_URL or None,
            temperature=float(os.environ.get("AI_TEMPERATURE", "0.3")),
            timeout=Config.TIMEOUT,
        )

    def _get_provider(self) -> BaseAIProvider:
        """Get or create the appropriate provider."""
        if self._provider is None:
            provider_class = self.PROVIDER_CLASSES.get(self.config.provider, OpenAIProvider)
            self._provider = provider_class(self.config)
        return self._provider

    async def close(self) -> None:
        """Close the AI service and release resources."""
        if self._provider:
            await self._provider.close()
            self._provider = None

    async def __aenter__(self) -> "AIService":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def is_configured(self) -> bool:
        """Check if AI service is properly configured."""
        if self.config.provider == AIProvider.OLLAMA:
            return True  # Ollama doesn't need API key
        return bool(self.config.api_key)

    async def generate_text(self, prompt: str, max_tokens: Optional[int] = None) -> str:
        """
        Generate free text for a prompt.

        Raises:
            AIServiceError: provider failed or is not configured
        """
        if not self.is_configured:
            raise AIServiceError(f"No API key configured for {self.config.provider.value}")
        logger.debug("AI text request (%d chars)", len(prompt))
        return await self._get_provider().complete(prompt, max_tokens=max_tokens)

    async def extract_text_from_image(self, image: ImageInput, instruction: str) -> str:
        """
        Ask a vision model to read an image.

        Args:
            image: Encoded image
            instruction: What to extract and how to format it

        Returns:
            The model's free-text answer

        Raises:
            AIServiceError: provider failed, is not configured, or has no vision
        """
        if not self.is_configured:
            raise AIServiceError(f"No API key configured for {self.config.provider.value}")
        logger.debug("AI vision request (%s, %d bytes base64)", image.media_type, len(image.data))
        return await self._get_provider().complete(instruction, image=image)


def _provider_from_name(name: str) -> AIProvider:
    try:
        return AIProvider(name.lower())
    except ValueError:
        logger.warning("Unknown AI provider %r, using openai", name)
        return AIProvider.OPENAI


# Convenience factory function
def create_ai_service(
    provider: str = "openai",
    model: Optional[str] = None,
    api_key: Optional[str] = None
) -> AIService:
    """
    Create an AI service with specified configuration.

    Args:
        provider: Provider name (openai, anthropic, ollama, groq)
        model: Model name (uses default if None)
        api_key: API key (uses environment if None)

    Returns:
        Configured AIService instance
    """
    provider_enum = _provider_from_name(provider)
    env_key = API_KEY_ENV.get(provider_enum)

    config = AIConfig(
        provider=provider_enum,
        model=model or MODEL_DEFAULTS[provider_enum],
        api_key=api_key or (os.environ.get(env_key) if env_key else None),
        timeout=Config.TIMEOUT,
    )

    return AIService(config)
