"""Consensus verdict and vote tally over a council transcript. Pure functions."""

from collections.abc import Iterable

from council.models import CouncilMessage, VoteTally


def tally_votes(messages: Iterable[CouncilMessage]) -> VoteTally:
    """Count votes of every non-clerk message. CONCERN counts as an abstention."""
    tally = VoteTally()
    for message in messages:
        if message.role_tag == "clerk":
            continue
        if message.opinion == "SUPPORT":
            tally.support += 1
        elif message.opinion == "OPPOSE":
            tally.oppose += 1
        else:
            tally.abstain += 1
    return tally


def has_veto(messages: Iterable[CouncilMessage]) -> bool:
    """True iff the risk persona's reasoning mentions VETO (any case)."""
    return any(
        m.role_tag == "risk" and "VETO" in m.reasoning.upper()
        for m in messages
    )


def classify_consensus(tally: VoteTally, vetoed: bool) -> str:
    """Map a tally to a verdict. Veto beats every vote count."""
    if vetoed:
        return "vetoed"
    if tally.support == tally.total:
        return "unanimous"
    if tally.support > tally.total / 2:
        return "majority"
    return "contested"


def calculate_consensus(messages: list[CouncilMessage]) -> tuple[str, VoteTally]:
    """Return (consensus, vote_tally) for a transcript."""
    tally = tally_votes(messages)
    return classify_consensus(tally, has_veto(messages)), tally
