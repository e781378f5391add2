"""Render persona and clerk prompts from the configured templates."""

from collections.abc import Sequence

from config.config_loader import PromptsConfig
from council.models import AgentPersona, CouncilMessage, Question

_NO_DISCUSSION = "(no discussion yet)"


def format_transcript(messages: Sequence[CouncilMessage], with_confidence: bool = False) -> str:
    """One line per message, in debate order."""
    if not messages:
        return _NO_DISCUSSION
    if with_confidence:
        return "\n".join(
            f"{m.agent_name} ({m.opinion}, {m.confidence}% confident): {m.reasoning}"
            for m in messages
        )
    return "\n".join(f"{m.agent_name} ({m.opinion}): {m.reasoning}" for m in messages)


def _deployed_section(question: Question) -> str:
    if not question.deployed_agents:
        return ""
    lines = "\n".join(f"- {a.name} ({a.id})" for a in question.deployed_agents)
    return f"\n\nDeployed Agents:\n{lines}"


def _agent_intent_guidance(question: Question) -> str:
    if question.intent is None:
        return ""
    return (
        f"\nIMPORTANT: {question.intent.hint} Your suggestedStrategy.type MUST be "
        f'"{question.intent.strategy}" unless there\'s a critical risk.'
    )


def _clerk_intent_guidance(question: Question) -> str:
    if question.intent is None:
        return ""
    return (
        f"\nCRITICAL: {question.intent.hint} finalStrategy MUST be "
        f'"{question.intent.strategy}" unless Risk Sentinel issued a VETO.'
    )


def build_agent_prompt(
    persona: AgentPersona,
    question: Question,
    transcript: Sequence[CouncilMessage],
    prompts: PromptsConfig,
) -> str:
    """Prompt for one debating persona, including everything said so far."""
    ctx = question.context
    if question.is_token_launch:
        return prompts.token_agent.format(
            persona=persona.directive_template,
            question=question.text,
            balance=ctx.balance or "unknown",
            risk_level=ctx.risk_level,
            transcript=format_transcript(transcript),
        )
    return prompts.agent.format(
        persona=persona.directive_template,
        question=question.text,
        balance=ctx.balance or "unknown",
        risk_level=ctx.risk_level,
        preferred_tokens=", ".join(ctx.preferred_tokens) or "USDC, WETH",
        intent_guidance=_agent_intent_guidance(question),
        deployed_agents=_deployed_section(question),
        transcript=format_transcript(transcript),
    )


def build_clerk_prompt(
    clerk: AgentPersona,
    question: Question,
    transcript: Sequence[CouncilMessage],
    prompts: PromptsConfig,
) -> str:
    """Synthesis prompt over the full debate transcript."""
    ctx = question.context
    if question.is_token_launch:
        return prompts.token_clerk.format(
            persona=clerk.directive_template,
            question=question.text,
            balance=ctx.balance or "unknown",
            risk_level=ctx.risk_level,
            transcript=format_transcript(transcript, with_confidence=True),
        )
    return prompts.clerk.format(
        persona=clerk.directive_template,
        question=question.text,
        balance=ctx.balance or "unknown",
        risk_level=ctx.risk_level,
        intent_guidance=_clerk_intent_guidance(question),
        deployed_agents=_deployed_section(question),
        transcript=format_transcript(transcript, with_confidence=True),
    )
