"""Debate orchestration: sequential persona calls over a growing transcript."""

import asyncio
import logging
from collections.abc import Callable

from config.config_loader import PromptsConfig
from council.models import AgentPersona, CouncilMessage, ModelResponse, Question
from council.personas import debating_personas
from council.prompts import build_agent_prompt
from council.providers.base import AIProvider, ProviderError
from council.validation import ResponseFormatError, parse_json_object, validate_agent_response

logger = logging.getLogger(__name__)

FALLBACK_REASONING = "Unable to provide analysis at this time."
FALLBACK_CONFIDENCE = 50
DEFAULT_STEP_TIMEOUT_SEC = 30.0


async def call_with_timeout(
    provider: AIProvider,
    prompt: str,
    persona: AgentPersona,
    timeout_sec: float,
) -> ModelResponse | ProviderError:
    """Call the backend for one persona, bounded by ``timeout_sec``.

    Never raises. Returns ProviderError on any failure.
    """
    try:
        return await asyncio.wait_for(provider.generate(prompt, persona), timeout=timeout_sec)
    except TimeoutError:
        err = ProviderError(provider.name(), f"{persona.display_name} timed out after {timeout_sec}s")
    except ProviderError as exc:
        err = exc
    except Exception as exc:
        err = ProviderError(provider.name(), f"Unexpected error: {exc}")
    logger.warning("Backend call for %s failed: %s", persona.display_name, err)
    return err


def fallback_message(persona: AgentPersona, timestamp: int) -> CouncilMessage:
    return CouncilMessage(
        agent_id=persona.id,
        agent_name=persona.display_name,
        role_tag=persona.role_tag,
        opinion="NEUTRAL",
        reasoning=FALLBACK_REASONING,
        confidence=FALLBACK_CONFIDENCE,
        timestamp=timestamp,
    )


async def _consult(
    persona: AgentPersona,
    question: Question,
    transcript: list[CouncilMessage],
    provider: AIProvider,
    prompts: PromptsConfig,
    step_timeout_sec: float,
) -> CouncilMessage:
    prompt = build_agent_prompt(persona, question, transcript, prompts)
    result = await call_with_timeout(provider, prompt, persona, step_timeout_sec)
    timestamp = provider.now_ms()

    if isinstance(result, ProviderError):
        return fallback_message(persona, timestamp)

    try:
        verdict = validate_agent_response(parse_json_object(result.content))
    except ResponseFormatError as exc:
        logger.warning("%s returned unusable output: %s", persona.display_name, exc)
        return fallback_message(persona, timestamp)

    if verdict.suggested_strategy:
        logger.debug("%s suggests %s", persona.display_name, verdict.suggested_strategy)

    return CouncilMessage(
        agent_id=persona.id,
        agent_name=persona.display_name,
        role_tag=persona.role_tag,
        opinion=verdict.opinion,
        reasoning=verdict.reasoning,
        confidence=verdict.confidence,
        timestamp=timestamp,
    )


async def run_debate(
    question: Question,
    provider: AIProvider,
    prompts: PromptsConfig,
    step_timeout_sec: float = DEFAULT_STEP_TIMEOUT_SEC,
    on_message: Callable[[CouncilMessage], None] | None = None,
) -> list[CouncilMessage]:
    """Run every debating persona once, in registry order.

    Each persona's prompt carries the transcript produced by the personas
    before it, so the calls are strictly sequential. A failed, timed out or
    unparsable call yields a NEUTRAL fallback message; the debate always
    produces exactly one message per persona.

    Args:
        question: The sanitized request with context and detected intent.
        provider: Completion backend (live or canned).
        prompts: Prompt templates from config.
        step_timeout_sec: Upper bound for each backend call.
        on_message: Optional callback invoked after each persona speaks.

    Returns:
        The transcript, one CouncilMessage per debating persona.
    """
    transcript: list[CouncilMessage] = []

    for persona in debating_personas():
        message = await _consult(persona, question, transcript, provider, prompts, step_timeout_sec)
        transcript = [*transcript, message]
        logger.info("%s: %s (%d%%)", persona.display_name, message.opinion, message.confidence)
        if on_message:
            on_message(message)

    return transcript
