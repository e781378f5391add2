"""Fixed council transcripts and syntheses.

Served by the canned backend for offline runs and used as the deterministic
fallback when the clerk's synthesis cannot be obtained.
"""

import re

from council.validation import TokenSynthesis

_THEME_PATTERN = re.compile(r"\b(lobster|cat|dog)s?\b", re.IGNORECASE)

_TOKEN_THEMES: dict[str, tuple[str, str, str]] = {
    "lobster": ("Lobster Coin", "LOBSTR", "The clawsome token for the lobster community"),
    "cat": ("Meow Token", "MEOW", "Purrfect token for cat lovers everywhere"),
    "dog": ("Good Boy Coin", "WOOF", "The loyal token for dog enthusiasts"),
    "community": ("Community Token", "CMTY", "A token by the community, for the community"),
}

_TRADE_VERDICTS: dict[str, dict] = {
    "alpha-hunter": {
        "opinion": "SUPPORT",
        "reasoning": "WETH/USDC is the deepest pair on the network; a small rotation here "
                     "captures upside with tight spreads.",
        "confidence": 85,
        "suggestedStrategy": {"type": "swap", "tokenIn": "WETH", "tokenOut": "USDC", "amountIn": "0.05"},
    },
    "risk-sentinel": {
        "opinion": "CONCERN",
        "reasoning": "ETH volatility is around 4% daily. Keep the size small and slippage "
                     "capped at 50 bps to limit execution risk.",
        "confidence": 70,
    },
    "macro-oracle": {
        "opinion": "NEUTRAL",
        "reasoning": "Market is ranging, neither strongly bullish nor bearish. Timing is "
                     "acceptable but not compelling.",
        "confidence": 75,
    },
    "devils-advocate": {
        "opinion": "CONCERN",
        "reasoning": "What if ETH drops 20% overnight? Gas and slippage eat into small "
                     "trades, and there is no exit plan yet.",
        "confidence": 65,
    },
}

_TRADE_SYNTHESIS: dict = {
    "finalStrategy": "swap",
    "tokenIn": "WETH",
    "tokenOut": "USDC",
    "amountIn": "0.05",
    "expectedAmountOut": "165",
    "maxSlippage": 50,
    "reasoning": "Council recommends a small WETH to USDC swap. Risk Sentinel noted moderate "
                 "concerns, Alpha Hunter and Macro Oracle see acceptable conditions. "
                 "Devil's Advocate reminder: have an exit plan.",
    "confidence": 75,
    "riskLevel": "medium",
}


def token_theme(prompt: str) -> str:
    match = _THEME_PATTERN.search(prompt)
    return match.group(1).lower() if match else "community"


def trade_verdict(persona_id: str) -> dict:
    return dict(_TRADE_VERDICTS[persona_id])


def trade_synthesis() -> dict:
    return dict(_TRADE_SYNTHESIS)


def token_verdict(persona_id: str, prompt: str) -> dict:
    name, symbol, _ = _TOKEN_THEMES[token_theme(prompt)]
    verdicts = {
        "alpha-hunter": (
            "SUPPORT", 80,
            f"{name} has meme potential! Community tokens often see strong early demand "
            "if launched at the right time.",
        ),
        "risk-sentinel": (
            "CONCERN", 65,
            "Token launches are high risk and most new tokens fail. Make sure liquidity "
            "is locked and use a small vault percentage.",
        ),
        "macro-oracle": (
            "NEUTRAL", 70,
            "Meme coin season is active. Market conditions are favorable for community "
            "token launches.",
        ),
        "devils-advocate": (
            "CONCERN", 60,
            "What if nobody buys? You could end up with worthless tokens and stuck "
            "liquidity. Consider starting on testnet first.",
        ),
    }
    opinion, confidence, reasoning = verdicts[persona_id]
    return {
        "opinion": opinion,
        "reasoning": reasoning,
        "confidence": confidence,
        "suggestedToken": {"name": name, "symbol": symbol},
    }


def token_synthesis(prompt: str) -> dict:
    name, symbol, description = _TOKEN_THEMES[token_theme(prompt)]
    return {
        "tokenName": name,
        "tokenSymbol": symbol,
        "tokenDescription": description,
        "vaultPercentage": 5,
        "reasoning": f"Council approves launching {name} (${symbol}). Alpha Hunter sees upside "
                     "potential, Risk Sentinel advises caution with a 5% vault lock. Market "
                     "timing is favorable per Macro Oracle.",
        "confidence": 72,
        "riskLevel": "medium",
    }


def fallback_token_synthesis(prompt: str) -> TokenSynthesis:
    """Canned token synthesis as a validated record, used for field defaults."""
    raw = token_synthesis(prompt)
    return TokenSynthesis(
        token_name=raw["tokenName"],
        token_symbol=raw["tokenSymbol"],
        token_description=raw["tokenDescription"],
        vault_pct=raw["vaultPercentage"],
        reasoning=raw["reasoning"],
        confidence=raw["confidence"],
        risk_level=raw["riskLevel"],
    )
