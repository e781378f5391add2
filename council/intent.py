"""Keyword-family intent classifier run over the sanitized prompt."""

from council.models import Intent

TOKEN_LAUNCH_KEYWORDS = (
    "launch a token",
    "launch token",
    "create a token",
    "create token",
    "deploy a token",
    "deploy token",
    "launch a memecoin",
    "launch memecoin",
    "create a memecoin",
    "create memecoin",
    "make a token",
    "make token",
    "new token",
    "token for",
    "coin for",
)
SWAP_KEYWORDS = ("swap", "exchange", "convert", "trade")
LIQUIDITY_KEYWORDS = ("liquidity", " lp ", "provide lp", "add lp")
DCA_KEYWORDS = ("dca", "dollar cost", "recurring", "weekly")


def is_token_launch_prompt(prompt: str) -> bool:
    lower = prompt.lower()
    return any(kw in lower for kw in TOKEN_LAUNCH_KEYWORDS)


def detect_intent(prompt: str) -> Intent | None:
    """Classify the request into a forced strategy, or None when nothing matches.

    Families are checked in order and the first match wins. Liquidity
    provision is not offered downstream, so it is redirected to a swap.
    """
    # Pad so " lp " also matches at the start or end of the prompt.
    lower = f" {prompt.lower()} "

    if is_token_launch_prompt(prompt):
        return Intent("token_launch", "User wants to LAUNCH A TOKEN. Use token_launch strategy.")
    if any(kw in lower for kw in SWAP_KEYWORDS):
        return Intent("swap", "User explicitly wants a SWAP. Respect this intent.")
    if any(kw in lower for kw in LIQUIDITY_KEYWORDS):
        return Intent("swap", "LP positions are disabled. Recommend a swap instead.")
    if any(kw in lower for kw in DCA_KEYWORDS):
        return Intent("dca", "User wants DCA strategy. Respect this intent.")
    return None
