"""Top-level entry point: one request in, one deliberation outcome out."""

import logging
from collections.abc import Callable

import httpx

from config.config_loader import PromptsConfig
from council.debate import DEFAULT_STEP_TIMEOUT_SEC, run_debate
from council.delegate import try_delegate
from council.hooks import extract_hook_parameters, validate_hook_params
from council.intent import detect_intent
from council.models import (
    RISK_LEVELS,
    CouncilMessage,
    CouncilOutcome,
    CouncilRequest,
    Question,
)
from council.providers.base import AIProvider
from council.sanitizer import sanitize_prompt
from council.synthesis import synthesize

logger = logging.getLogger(__name__)


class CouncilRequestError(ValueError):
    """The request cannot be deliberated (empty prompt, bad risk level)."""


async def run_council(
    request: CouncilRequest,
    provider: AIProvider,
    prompts: PromptsConfig,
    source: str = "cli",
    step_timeout_sec: float = DEFAULT_STEP_TIMEOUT_SEC,
    allow_localhost: bool = False,
    on_message: Callable[[CouncilMessage], None] | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> CouncilOutcome:
    """Deliberate on a request and return the proposal with hook parameters.

    The prompt is sanitized before anything else sees it. When the request
    names a delegate endpoint the delegate is tried first; if it is
    unavailable the local council runs as if no endpoint had been given.

    Raises:
        CouncilRequestError: the prompt is empty after sanitization or the
            risk level is not one of low/medium/high.
    """
    prompt = sanitize_prompt(request.user_prompt)
    if not prompt:
        raise CouncilRequestError("Prompt is empty after sanitization")
    risk_level = request.context.risk_level
    if risk_level not in RISK_LEVELS:
        raise CouncilRequestError(f"Invalid risk level: {risk_level!r} (expected one of {', '.join(RISK_LEVELS)})")

    intent = detect_intent(prompt)
    question = Question(
        text=prompt,
        source=source,
        context=request.context,
        intent=intent,
        deployed_agents=list(request.deployed_agents),
    )
    logger.info("Council convened (%s): intent=%s", source, intent.strategy if intent else "none")

    delegated = None
    if request.agent_endpoint:
        delegated = await try_delegate(
            request,
            prompt,
            question.is_token_launch,
            client=http_client,
            allow_localhost=allow_localhost,
        )

    payment_ref = None
    if delegated is not None:
        deliberation, proposal, payment_ref = delegated
    else:
        transcript = await run_debate(question, provider, prompts, step_timeout_sec, on_message)
        deliberation, proposal = await synthesize(
            question,
            transcript,
            provider,
            prompts,
            step_timeout_sec,
            request.wallet_address,
        )

    hook_parameters = extract_hook_parameters(deliberation.consensus, deliberation.vote_tally, risk_level)
    for problem in validate_hook_params(hook_parameters):
        logger.error("Hook parameter out of range: %s", problem)
    return CouncilOutcome(
        deliberation=deliberation,
        proposal=proposal,
        hook_parameters=hook_parameters,
        delegated=delegated is not None,
        payment_ref=payment_ref,
    )
