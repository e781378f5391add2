"""Tests for council/output.py."""

import json

from rich.console import Console

from council import output
from council.hooks import extract_hook_parameters
from council.models import CouncilOutcome, DeliberationResult, TokenLaunchProposal, VoteTally
from tests.conftest import make_message


def _outcome() -> CouncilOutcome:
    messages = [make_message("SUPPORT", "alpha", "Ship it."), make_message("CONCERN", "risk", "Careful.")]
    deliberation = DeliberationResult(messages=messages, consensus="contested", vote_tally=VoteTally(1, 0, 1))
    proposal = TokenLaunchProposal(
        token_name="Meow Token",
        token_symbol="MEOW",
        token_description="For cats.",
        vault_pct=5,
        lockup_days=7,
        reward_recipient="0x0000000000000000000000000000000000000000",
        risk_level="medium",
        reasoning="Cats are popular.",
        confidence=72,
        deliberation=deliberation,
    )
    return CouncilOutcome(
        deliberation=deliberation,
        proposal=proposal,
        hook_parameters=extract_hook_parameters("contested", deliberation.vote_tally, "medium"),
    )


def test_outcome_to_dict_drops_nested_deliberation():
    data = output.outcome_to_dict(_outcome())
    assert data["proposal"]["kind"] == "token_launch"
    assert "deliberation" not in data["proposal"]
    assert data["deliberation"]["vote_tally"] == {"support": 1, "oppose": 0, "abstain": 1}


def test_outcome_to_json_round_trips():
    data = json.loads(output.outcome_to_json(_outcome()))
    assert data["proposal"]["token_symbol"] == "MEOW"
    assert data["hook_parameters"]["fee_bps"] == 5000


def test_print_outcome_renders_token_launch(monkeypatch):
    console = Console(record=True, width=120)
    monkeypatch.setattr(output, "console", console)
    outcome = _outcome()
    output.print_transcript(outcome.deliberation.messages)
    output.print_outcome(outcome)
    text = console.export_text()
    assert "Token Launch Proposal" in text
    assert "Meow Token (MEOW)" in text
    assert "contested" in text
    assert "Alpha Agent" in text


def test_print_outcome_shows_payment_ref(monkeypatch):
    console = Console(record=True, width=120)
    monkeypatch.setattr(output, "console", console)
    outcome = _outcome()
    outcome.delegated = True
    outcome.payment_ref = "0xsettled"
    output.print_outcome(outcome)
    text = console.export_text()
    assert "via external agent" in text
    assert "Payment settled: 0xsettled" in text
    assert output.outcome_to_dict(outcome)["payment_ref"] == "0xsettled"
