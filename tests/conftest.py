"""Shared pytest fixtures."""

import json
from unittest.mock import AsyncMock

import pytest

from config.config_loader import AppConfig, DefaultsConfig, ModelConfig, PromptsConfig, load_config
from council.models import AgentPersona, CouncilMessage, ModelResponse, Question, RequestContext
from council.providers.base import AIProvider


@pytest.fixture
def sample_model_config() -> ModelConfig:
    return ModelConfig(
        name="test_model",
        sdk="openai",
        model="test-model-1",
        api_key_env="TEST_API_KEY",
        timeout_sec=30,
        max_tokens=500,
        base_url=None,
    )


@pytest.fixture
def prompts_config() -> PromptsConfig:
    """The real templates from settings.yaml."""
    return load_config().prompts


@pytest.fixture
def sample_app_config(prompts_config: PromptsConfig) -> AppConfig:
    model_cfg = ModelConfig(
        name="claude",
        sdk="anthropic",
        model="claude-sonnet-4-20250514",
        api_key_env="ANTHROPIC_API_KEY",
        timeout_sec=25,
        max_tokens=600,
    )
    return AppConfig(
        defaults=DefaultsConfig(backend="claude"),
        models={"claude": model_cfg},
        prompts=prompts_config,
        available_providers={"claude"},
    )


@pytest.fixture
def sample_context() -> RequestContext:
    return RequestContext(balance="0.5 ETH", risk_level="medium", preferred_tokens=["USDC", "WETH"])


@pytest.fixture
def sample_question(sample_context: RequestContext) -> Question:
    return Question(text="Should I rotate some ETH into stables?", source="cli", context=sample_context)


def make_message(
    opinion: str,
    role_tag: str = "alpha",
    reasoning: str = "Looks fine.",
    confidence: int = 70,
    agent_id: str | None = None,
) -> CouncilMessage:
    return CouncilMessage(
        agent_id=agent_id or f"{role_tag}-agent",
        agent_name=f"{role_tag.title()} Agent",
        role_tag=role_tag,
        opinion=opinion,
        reasoning=reasoning,
        confidence=confidence,
        timestamp=1_000,
    )


def verdict(opinion: str, reasoning: str = "Reasoned take.", confidence: int = 70) -> str:
    return json.dumps({"opinion": opinion, "reasoning": reasoning, "confidence": confidence})


class MockProvider(AIProvider):
    """Test double AIProvider scripted per persona id.

    ``replies`` maps persona id to reply text, or to an exception instance
    that ``generate`` raises for that persona. Personas without a script get
    ``default``.
    """

    def __init__(
        self,
        replies: dict[str, str | Exception] | None = None,
        default: str = verdict("NEUTRAL"),
        provider_name: str = "mock",
    ) -> None:
        self._name = provider_name
        self._replies = replies or {}
        self._default = default
        self._clock = 0
        # Shadow the class method with an AsyncMock at the instance level so
        # tests can inspect call_args_list.
        self.generate = AsyncMock(side_effect=self._reply)  # type: ignore[assignment]

    def name(self) -> str:
        return self._name

    def model_string(self) -> str:
        return "mock-model"

    def now_ms(self) -> int:
        self._clock += 1
        return self._clock

    async def _reply(self, prompt: str, persona: AgentPersona) -> ModelResponse:
        reply = self._replies.get(persona.id, self._default)
        if isinstance(reply, Exception):
            raise reply
        return ModelResponse(
            provider=self._name,
            model="mock-model",
            persona_id=persona.id,
            content=reply,
        )

    async def generate(self, prompt: str, persona: AgentPersona) -> ModelResponse:
        """Default implementation; replaced by AsyncMock in __init__."""
        return await self._reply(prompt, persona)

    def prompts_for(self, persona_id: str) -> list[str]:
        return [c.args[0] for c in self.generate.call_args_list if c.args[1].id == persona_id]


@pytest.fixture
def mock_provider() -> MockProvider:
    return MockProvider()
