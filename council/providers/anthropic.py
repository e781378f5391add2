"""Claude backend on the anthropic SDK's async client."""

import anthropic as anthropic_sdk

from config.config_loader import ModelConfig
from council.models import AgentPersona, ModelResponse
from council.providers.base import SYSTEM_PROMPT, AIProvider, ProviderError, require_api_key


class AnthropicProvider(AIProvider):
    def __init__(self, config: ModelConfig) -> None:
        self._config = config
        self._client = anthropic_sdk.AsyncAnthropic(api_key=require_api_key(config))

    def name(self) -> str:
        return self._config.name

    def model_string(self) -> str:
        return self._config.model

    async def generate(self, prompt: str, persona: AgentPersona) -> ModelResponse:
        message = await self._await_sdk(
            self._client.messages.create(
                model=self._config.model,
                max_tokens=self._config.max_tokens,
                temperature=self._config.temperature,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
            ),
            persona,
            self._config.timeout_sec,
        )
        # No JSON mode on Claude; text blocks are joined as-is.
        text = "\n".join(block.text for block in message.content or [] if block.type == "text")
        if not text:
            raise ProviderError(self._config.name, f"No text in reply for {persona.display_name}")
        return self._response(persona, text)
