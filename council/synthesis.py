"""Final synthesis: clerk call, forced-intent override, proposal assembly."""

import logging
from dataclasses import replace

from config.config_loader import PromptsConfig
from council import canned
from council.consensus import calculate_consensus, has_veto
from council.debate import DEFAULT_STEP_TIMEOUT_SEC, call_with_timeout
from council.models import (
    CouncilMessage,
    DeliberationResult,
    Intent,
    ModelResponse,
    Proposal,
    Question,
    TokenLaunchProposal,
    TokenPair,
    TokenRef,
    TradeProposal,
)
from council.personas import clerk_persona
from council.prompts import build_clerk_prompt
from council.providers.base import AIProvider, ProviderError
from council.validation import (
    KNOWN_TOKENS,
    ResponseFormatError,
    TokenSynthesis,
    TradeSynthesis,
    parse_json_object,
    validate_token_synthesis,
    validate_trade_synthesis,
)

logger = logging.getLogger(__name__)

LOCKUP_DAYS = 7
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def _read_payload(result: ModelResponse | ProviderError) -> dict | None:
    if isinstance(result, ProviderError):
        return None
    try:
        return parse_json_object(result.content)
    except ResponseFormatError as exc:
        logger.warning("Clerk returned unusable output: %s", exc)
        return None


def trade_synthesis_from(result: ModelResponse | ProviderError) -> TradeSynthesis:
    payload = _read_payload(result)
    if payload is None:
        logger.warning("Clerk synthesis failed, using canned trade synthesis")
        payload = canned.trade_synthesis()
    return validate_trade_synthesis(payload)


def token_synthesis_from(result: ModelResponse | ProviderError, prompt: str) -> TokenSynthesis:
    fallback = canned.fallback_token_synthesis(prompt)
    payload = _read_payload(result)
    if payload is None:
        logger.warning("Clerk token synthesis failed, using canned token synthesis")
        return fallback
    return validate_token_synthesis(payload, fallback)


def apply_intent_override(synthesis: TradeSynthesis, intent: Intent | None, vetoed: bool) -> TradeSynthesis:
    """Force the detected swap/dca intent onto the synthesis unless vetoed."""
    if intent is None or vetoed or intent.strategy == "token_launch":
        return synthesis
    if synthesis.strategy != intent.strategy:
        logger.info("Overriding clerk strategy %s with detected intent %s", synthesis.strategy, intent.strategy)
    return replace(synthesis, strategy=intent.strategy)


def build_trade_proposal(synthesis: TradeSynthesis, deliberation: DeliberationResult) -> TradeProposal:
    return TradeProposal(
        pair=TokenPair(
            token_in=TokenRef(synthesis.token_in, KNOWN_TOKENS[synthesis.token_in]),
            token_out=TokenRef(synthesis.token_out, KNOWN_TOKENS[synthesis.token_out]),
        ),
        action=synthesis.strategy,
        strategy_type=synthesis.strategy,
        amount_in=synthesis.amount_in,
        expected_amount_out=synthesis.expected_amount_out,
        max_slippage_bps=synthesis.max_slippage_bps,
        risk_level=synthesis.risk_level,
        reasoning=synthesis.reasoning,
        confidence=synthesis.confidence,
        deliberation=deliberation,
    )


def build_token_launch_proposal(
    synthesis: TokenSynthesis,
    deliberation: DeliberationResult,
    wallet_address: str = ZERO_ADDRESS,
) -> TokenLaunchProposal:
    return TokenLaunchProposal(
        token_name=synthesis.token_name,
        token_symbol=synthesis.token_symbol,
        token_description=synthesis.token_description,
        vault_pct=synthesis.vault_pct,
        lockup_days=LOCKUP_DAYS,
        reward_recipient=wallet_address,
        risk_level=synthesis.risk_level,
        reasoning=synthesis.reasoning,
        confidence=synthesis.confidence,
        deliberation=deliberation,
    )


async def synthesize(
    question: Question,
    transcript: list[CouncilMessage],
    provider: AIProvider,
    prompts: PromptsConfig,
    step_timeout_sec: float = DEFAULT_STEP_TIMEOUT_SEC,
    wallet_address: str = ZERO_ADDRESS,
) -> tuple[DeliberationResult, Proposal]:
    """Run the clerk over the debate and assemble the final proposal.

    The clerk does not vote: its message is always SUPPORT and it is left out
    of the tally. Any backend or parse failure is replaced by the canned
    synthesis, so this never raises for backend problems.

    Args:
        question: The sanitized request with context and detected intent.
        transcript: Messages from the debating personas, in order.
        provider: Completion backend (live or canned).
        prompts: Prompt templates from config.
        step_timeout_sec: Upper bound for the clerk call.
        wallet_address: Reward recipient for token launch proposals.

    Returns:
        (deliberation, proposal); the proposal variant follows the question's intent.
    """
    clerk = clerk_persona()
    prompt = build_clerk_prompt(clerk, question, transcript, prompts)

    logger.info("Running synthesis via %s", provider.name())
    result = await call_with_timeout(provider, prompt, clerk, step_timeout_sec)

    synthesis: TradeSynthesis | TokenSynthesis
    if question.is_token_launch:
        synthesis = token_synthesis_from(result, question.text)
    else:
        synthesis = trade_synthesis_from(result)
        synthesis = apply_intent_override(synthesis, question.intent, has_veto(transcript))

    clerk_message = CouncilMessage(
        agent_id=clerk.id,
        agent_name=clerk.display_name,
        role_tag=clerk.role_tag,
        opinion="SUPPORT",
        reasoning=synthesis.reasoning,
        confidence=synthesis.confidence,
        timestamp=provider.now_ms(),
    )
    messages = [*transcript, clerk_message]
    consensus, tally = calculate_consensus(messages)
    deliberation = DeliberationResult(messages=messages, consensus=consensus, vote_tally=tally, rounds=1)

    logger.info("Deliberation complete: %s", consensus)

    if isinstance(synthesis, TokenSynthesis):
        return deliberation, build_token_launch_proposal(synthesis, deliberation, wallet_address)
    return deliberation, build_trade_proposal(synthesis, deliberation)
