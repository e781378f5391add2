"""OpenAI-compatible provider (OpenAI, Groq) using openai SDK with native async."""

from openai import AsyncOpenAI

from config.config_loader import ModelConfig
from council.models import AgentPersona, ModelResponse
from council.providers.base import SYSTEM_PROMPT, AIProvider, ProviderError, require_api_key


class OpenAIProvider(AIProvider):
    """OpenAI chat completions in JSON mode; ``base_url`` points it at Groq."""

    def __init__(self, config: ModelConfig) -> None:
        self._config = config
        self._client = AsyncOpenAI(api_key=require_api_key(config), base_url=config.base_url)

    def name(self) -> str:
        return self._config.name

    def model_string(self) -> str:
        return self._config.model

    async def generate(self, prompt: str, persona: AgentPersona) -> ModelResponse:
        completion = await self._await_sdk(
            self._client.chat.completions.create(
                model=self._config.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                response_format={"type": "json_object"},
                temperature=self._config.temperature,
                max_tokens=self._config.max_tokens,
            ),
            persona,
            self._config.timeout_sec,
        )
        choice = completion.choices[0] if completion.choices else None
        if not choice or not choice.message.content:
            raise ProviderError(self._config.name, f"Empty response for {persona.display_name}")
        return self._response(persona, choice.message.content)
