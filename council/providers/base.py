"""Abstract base for all completion backends."""

import asyncio
import logging
import os
import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable
from typing import Any

from config.config_loader import ModelConfig
from council.models import AgentPersona, ModelResponse

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a member of a DeFi strategy council. "
    "Respond only with one valid JSON object. No markdown, no extra text."
)


class ProviderError(Exception):
    """Raised when a provider call fails."""

    def __init__(self, provider_name: str, message: str) -> None:
        self.provider_name = provider_name
        super().__init__(f"[{provider_name}] {message}")


def require_api_key(config: ModelConfig) -> str:
    """Read the backend's key from the environment or raise ProviderError."""
    api_key = os.environ.get(config.api_key_env, "").strip()
    if not api_key:
        raise ProviderError(config.name, f"Missing API key: {config.api_key_env}")
    return api_key


class AIProvider(ABC):
    """Abstract base for all completion backends."""

    @abstractmethod
    def name(self) -> str:
        """Return the short provider name (e.g. 'groq', 'claude')."""
        ...

    @abstractmethod
    def model_string(self) -> str:
        """Return the actual model identifier string."""
        ...

    @abstractmethod
    async def generate(self, prompt: str, persona: AgentPersona) -> ModelResponse:
        """Generate a JSON reply for the given prompt on behalf of ``persona``.

        Args:
            prompt: The full prompt text to send.
            persona: The council persona the reply is produced for.

        Returns:
            ModelResponse dataclass with content and metadata.

        Raises:
            ProviderError: On API failure, timeout, or invalid response.
        """
        ...

    def now_ms(self) -> int:
        """Timestamp for council messages produced from this backend's replies."""
        return int(time.time() * 1000)

    async def _await_sdk(self, call: Awaitable[Any], persona: AgentPersona, timeout_sec: float) -> Any:
        """Await one SDK request, turning timeouts and SDK exceptions into ProviderError."""
        start = time.monotonic()
        try:
            result = await asyncio.wait_for(call, timeout=timeout_sec)
        except TimeoutError as exc:
            raise ProviderError(self.name(), f"Request timed out after {timeout_sec}s") from exc
        except Exception as exc:
            raise ProviderError(self.name(), f"API call failed: {exc}") from exc
        logger.info("%s answered for %s in %.2fs", self.name(), persona.id, time.monotonic() - start)
        return result

    def _response(self, persona: AgentPersona, content: str) -> ModelResponse:
        return ModelResponse(
            provider=self.name(),
            model=self.model_string(),
            persona_id=persona.id,
            content=content,
        )
