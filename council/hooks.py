"""Deterministic mapping from a deliberation outcome to hook control parameters.

Applying the parameters (on-chain or elsewhere) is the caller's job.
"""

from council.models import HookParameters, VoteTally

FEE_BPS_MAX = 10_000
FEE_BPS_LOW_RISK = 500
FEE_BPS_CONTESTED = 5_000
FEE_BPS_DEFAULT = 3_000
FEE_BPS_MIN = 10

WEI_PER_ETH = 10**18
MAX_SWAP_SIZE_SMALL = str(WEI_PER_ETH // 10)    # 0.1 ETH
MAX_SWAP_SIZE_MEDIUM = str(WEI_PER_ETH)         # 1 ETH
MAX_SWAP_SIZE_LARGE = str(WEI_PER_ETH * 10)     # 10 ETH
MIN_SWAP_SIZE = WEI_PER_ETH // 100              # 0.01 ETH
MAX_REASONABLE_SWAP_SIZE = WEI_PER_ETH * 1_000_000

MAX_SENTIMENT_REASON_CHARS = 500


def _fee_bps(consensus: str, risk_level: str) -> int:
    if risk_level == "high" or consensus == "vetoed":
        return FEE_BPS_MAX
    if risk_level == "low" and consensus == "unanimous":
        return FEE_BPS_LOW_RISK
    if consensus == "contested":
        return FEE_BPS_CONTESTED
    return FEE_BPS_DEFAULT


def _max_swap_size(consensus: str, risk_level: str) -> str:
    if risk_level == "high" or consensus == "vetoed":
        return MAX_SWAP_SIZE_SMALL
    if risk_level == "medium":
        return MAX_SWAP_SIZE_MEDIUM
    return MAX_SWAP_SIZE_LARGE


def _sentiment_score(tally: VoteTally) -> int:
    if tally.total <= 0:
        return 0
    score = round((tally.support - tally.oppose) / tally.total * 100)
    return max(-100, min(100, score))


def extract_hook_parameters(consensus: str, vote_tally: VoteTally, risk_level: str) -> HookParameters:
    """Derive fee, swap cap and sentiment from the council verdict."""
    reason = (
        f"Council {consensus}: {vote_tally.support} support, {vote_tally.oppose} oppose, "
        f"{vote_tally.abstain} abstain (risk: {risk_level})"
    )
    return HookParameters(
        fee_bps=_fee_bps(consensus, risk_level),
        max_swap_size=_max_swap_size(consensus, risk_level),
        sentiment_score=_sentiment_score(vote_tally),
        sentiment_reason=reason[:MAX_SENTIMENT_REASON_CHARS],
    )


def validate_hook_params(params: HookParameters) -> list[str]:
    """Check parameters against the ranges the hook contracts accept.

    Returns:
        List of error messages; empty when every field is in range.
    """
    errors: list[str] = []

    if not FEE_BPS_MIN <= params.fee_bps <= FEE_BPS_MAX:
        errors.append(f"fee_bps must be an integer between {FEE_BPS_MIN} and {FEE_BPS_MAX}")

    try:
        size = int(params.max_swap_size)
    except ValueError:
        errors.append("max_swap_size must be a valid integer string")
    else:
        if size < MIN_SWAP_SIZE:
            errors.append("max_swap_size must be at least 0.01 ETH (in wei)")
        elif size > MAX_REASONABLE_SWAP_SIZE:
            errors.append("max_swap_size exceeds maximum")

    if not -100 <= params.sentiment_score <= 100:
        errors.append("sentiment_score must be an integer between -100 and 100")

    if len(params.sentiment_reason) > MAX_SENTIMENT_REASON_CHARS:
        errors.append(f"sentiment_reason must be {MAX_SENTIMENT_REASON_CHARS} characters or fewer")

    return errors
