"""Rich console rendering and JSON serialisation of council outcomes."""

import json
from dataclasses import asdict

from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from council.models import CouncilMessage, CouncilOutcome, TokenLaunchProposal, TradeProposal

console = Console(legacy_windows=False)

_OPINION_STYLES = {
    "SUPPORT": "green",
    "CONCERN": "yellow",
    "OPPOSE": "red",
    "NEUTRAL": "dim",
}

_CONSENSUS_STYLES = {
    "unanimous": "bold green",
    "majority": "green",
    "contested": "yellow",
    "vetoed": "bold red",
}


def print_message(message: CouncilMessage) -> None:
    """Print one council message as a panel."""
    style = _OPINION_STYLES.get(message.opinion, "white")
    console.print(
        Panel(
            message.reasoning,
            title=f"[bold]{message.agent_name}[/bold] [{style}]{message.opinion}[/{style}]",
            subtitle=f"{message.confidence}% confident",
            border_style=style,
        )
    )


def print_transcript(messages: list[CouncilMessage]) -> None:
    console.print(Rule("[bold cyan]Council Discussion[/bold cyan]"))
    for message in messages:
        print_message(message)


def _proposal_table(proposal: TradeProposal | TokenLaunchProposal) -> Table:
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold")
    table.add_column()
    if isinstance(proposal, TradeProposal):
        table.add_row("Strategy", proposal.strategy_type)
        table.add_row("Pair", f"{proposal.pair.token_in.symbol} -> {proposal.pair.token_out.symbol}")
        table.add_row("Amount in", proposal.amount_in)
        table.add_row("Expected out", proposal.expected_amount_out)
        table.add_row("Max slippage", f"{proposal.max_slippage_bps} bps")
    else:
        table.add_row("Token", f"{proposal.token_name} ({proposal.token_symbol})")
        table.add_row("Description", proposal.token_description)
        table.add_row("Vault", f"{proposal.vault_pct}% locked {proposal.lockup_days} days")
        table.add_row("Paired with", proposal.paired_token)
        table.add_row("Rewards to", proposal.reward_recipient)
    table.add_row("Risk", proposal.risk_level)
    table.add_row("Confidence", f"{proposal.confidence}%")
    return table


def print_outcome(outcome: CouncilOutcome) -> None:
    """Print consensus, proposal and hook parameters."""
    deliberation = outcome.deliberation
    tally = deliberation.vote_tally
    consensus_style = _CONSENSUS_STYLES.get(deliberation.consensus, "white")

    console.print(Rule("[bold green]Council Verdict[/bold green]"))
    source = "external agent" if outcome.delegated else "local council"
    console.print(
        Text.assemble(
            ("Consensus: ", "bold"),
            (deliberation.consensus, consensus_style),
            (f"  | {tally.support} support, {tally.oppose} oppose, {tally.abstain} abstain | via {source}", "dim"),
        )
    )

    kind = "Trade Proposal" if isinstance(outcome.proposal, TradeProposal) else "Token Launch Proposal"
    console.print(Panel(_proposal_table(outcome.proposal), title=f"[bold]{kind}[/bold]", border_style="cyan"))
    console.print(Panel(outcome.proposal.reasoning, title="Reasoning", border_style="dim"))

    hooks = outcome.hook_parameters
    hook_table = Table(title="Hook Parameters", show_header=True)
    hook_table.add_column("Fee (bps)", justify="right")
    hook_table.add_column("Max swap (wei)", justify="right")
    hook_table.add_column("Sentiment", justify="right")
    hook_table.add_row(str(hooks.fee_bps), hooks.max_swap_size, str(hooks.sentiment_score))
    console.print(hook_table)
    console.print(Text(hooks.sentiment_reason, style="dim"))
    if outcome.payment_ref:
        console.print(Text(f"Payment settled: {outcome.payment_ref}", style="dim"))


def outcome_to_dict(outcome: CouncilOutcome) -> dict:
    """Plain-dict form of an outcome. The proposal's deliberation is not repeated."""
    data = asdict(outcome)
    data["proposal"].pop("deliberation", None)
    data["proposal"]["kind"] = "trade" if isinstance(outcome.proposal, TradeProposal) else "token_launch"
    return data


def outcome_to_json(outcome: CouncilOutcome) -> str:
    return json.dumps(outcome_to_dict(outcome), indent=2)
