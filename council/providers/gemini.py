"""Gemini backend via google-genai, asking for an application/json reply."""

from google import genai
from google.genai import types as genai_types

from config.config_loader import ModelConfig
from council.models import AgentPersona, ModelResponse
from council.providers.base import SYSTEM_PROMPT, AIProvider, ProviderError, require_api_key


class GeminiProvider(AIProvider):
    def __init__(self, config: ModelConfig) -> None:
        self._config = config
        self._client = genai.Client(api_key=require_api_key(config))
        self._generation_config = genai_types.GenerateContentConfig(
            system_instruction=SYSTEM_PROMPT,
            response_mime_type="application/json",
            temperature=config.temperature,
            max_output_tokens=config.max_tokens,
        )

    def name(self) -> str:
        return self._config.name

    def model_string(self) -> str:
        return self._config.model

    async def generate(self, prompt: str, persona: AgentPersona) -> ModelResponse:
        result = await self._await_sdk(
            self._client.aio.models.generate_content(
                model=self._config.model,
                contents=prompt,
                config=self._generation_config,
            ),
            persona,
            self._config.timeout_sec,
        )
        if not result.text:
            raise ProviderError(self._config.name, f"Empty reply for {persona.display_name}")
        return self._response(persona, result.text)
