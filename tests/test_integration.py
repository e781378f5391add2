"""Integration tests: real API calls, no mocks. Requires .env with a backend API key."""

import os

import pytest
from dotenv import load_dotenv

load_dotenv()

_BACKEND_KEYS = {
    "groq": "GROQ_API_KEY",
    "openai": "OPENAI_API_KEY",
    "claude": "ANTHROPIC_API_KEY",
    "gemini": "GEMINI_API_KEY",
}
_AVAILABLE = [name for name, env in _BACKEND_KEYS.items() if os.environ.get(env, "").strip()]

pytestmark = pytest.mark.integration

if not _AVAILABLE:
    pytestmark = pytest.mark.skip(reason="No backend API key set")


async def test_live_council_produces_valid_outcome(monkeypatch):
    """Run a full deliberation against the first live backend, verify no crash."""
    from config.config_loader import load_config
    from council.cli import build_provider
    from council.engine import run_council
    from council.hooks import validate_hook_params
    from council.models import CouncilRequest, RequestContext, TradeProposal
    from council.providers.canned import CannedProvider
    from council.validation import KNOWN_TOKENS

    monkeypatch.delenv("COUNCIL_MOCK", raising=False)
    config = load_config()
    provider = build_provider(config, _AVAILABLE[0])
    assert not isinstance(provider, CannedProvider)

    request = CouncilRequest(
        user_prompt="Swap a small amount of ETH into USDC",
        context=RequestContext(balance="0.2 ETH", risk_level="low"),
    )
    outcome = await run_council(request, provider, config.prompts, step_timeout_sec=config.defaults.step_timeout_sec)

    assert len(outcome.deliberation.messages) == 5
    assert outcome.deliberation.consensus in ("unanimous", "majority", "contested", "vetoed")
    assert isinstance(outcome.proposal, TradeProposal)
    assert outcome.proposal.pair.token_in.symbol in KNOWN_TOKENS
    assert outcome.proposal.pair.token_in.symbol != outcome.proposal.pair.token_out.symbol
    assert validate_hook_params(outcome.hook_parameters) == []
