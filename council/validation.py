"""Clamp and repair structured output from an untrusted completion backend.

Every parsed agent, clerk or delegate payload goes through these functions
before any field is trusted, whatever backend produced it.
"""

import json
import logging
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from council.models import OPINIONS, RISK_LEVELS, TRADE_STRATEGIES

logger = logging.getLogger(__name__)

# Base Sepolia token table
KNOWN_TOKENS: dict[str, str] = {
    "USDC": "0x036CbD53842c5426634e7929541eC2318f3dCF7e",
    "WETH": "0x4200000000000000000000000000000000000006",
}
DEFAULT_TOKEN_IN = "USDC"
DEFAULT_TOKEN_OUT = "WETH"

MAX_AMOUNT = Decimal("1000000")
DEFAULT_CONFIDENCE = 50
DEFAULT_OPINION = "NEUTRAL"
DEFAULT_RISK_LEVEL = "medium"
DEFAULT_STRATEGY = "swap"
DEFAULT_SLIPPAGE_BPS = 50
MAX_SLIPPAGE_BPS = 10_000
DEFAULT_VAULT_PCT = 5
MAX_VAULT_PCT = 10

_MAX_REASONING_CHARS = 1000
_MAX_TOKEN_NAME_CHARS = 64
_MAX_TOKEN_DESCRIPTION_CHARS = 280
_MAX_TOKEN_SYMBOL_CHARS = 10

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


class ResponseFormatError(ValueError):
    """Raised when backend output cannot be read as a single JSON object."""


@dataclass
class AgentVerdict:
    opinion: str
    reasoning: str
    confidence: int
    suggested_strategy: str | None = None


@dataclass
class TradeSynthesis:
    strategy: str
    token_in: str
    token_out: str
    amount_in: str
    expected_amount_out: str
    max_slippage_bps: int
    reasoning: str
    confidence: int
    risk_level: str


@dataclass
class TokenSynthesis:
    token_name: str
    token_symbol: str
    token_description: str
    vault_pct: int
    reasoning: str
    confidence: int
    risk_level: str


def parse_json_object(text: str) -> dict:
    """Extract one JSON object from model output.

    Tolerates Markdown fences and prose around the object.

    Raises:
        ResponseFormatError: If no JSON object can be decoded.
    """
    if not text or not text.strip():
        raise ResponseFormatError("Empty response")

    fenced = _FENCED_BLOCK.search(text)
    candidate = fenced.group(1) if fenced else text
    start = candidate.find("{")
    end = candidate.rfind("}")
    if start == -1 or end <= start:
        raise ResponseFormatError("No JSON object found in response")

    try:
        data = json.loads(candidate[start:end + 1])
    except json.JSONDecodeError as exc:
        raise ResponseFormatError(f"Invalid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise ResponseFormatError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def _as_int(value: object) -> int | None:
    """Integral numbers (or numeric strings) as int; anything else as None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
        return int(number) if number.is_integer() else None
    return None


def _bounded_int(value: object, low: int, high: int, default: int) -> int:
    number = _as_int(value)
    if number is None or not low <= number <= high:
        return default
    return number


def _clean_text(value: object, limit: int, default: str) -> str:
    if not isinstance(value, str):
        return default
    text = value.strip()
    return text[:limit] if text else default


def validate_opinion(value: object) -> str:
    if isinstance(value, str) and value.strip().upper() in OPINIONS:
        return value.strip().upper()
    return DEFAULT_OPINION


def validate_confidence(value: object) -> int:
    return _bounded_int(value, 0, 100, DEFAULT_CONFIDENCE)


def validate_risk_level(value: object) -> str:
    if isinstance(value, str) and value.strip().lower() in RISK_LEVELS:
        return value.strip().lower()
    return DEFAULT_RISK_LEVEL


def validate_strategy(value: object) -> str:
    if isinstance(value, str) and value.strip().lower() in TRADE_STRATEGIES:
        return value.strip().lower()
    return DEFAULT_STRATEGY


def validate_slippage_bps(value: object) -> int:
    return _bounded_int(value, 0, MAX_SLIPPAGE_BPS, DEFAULT_SLIPPAGE_BPS)


def validate_amount(value: object) -> str:
    """Return the amount as a plain decimal string, or "0" when unusable.

    NaN, infinities, non-positive values and anything above 1,000,000 are
    rejected. The bound is dimensionless; token decimals are not considered.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return "0"
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        return "0"
    if not amount.is_finite() or amount <= 0 or amount > MAX_AMOUNT:
        return "0"
    return format(amount.normalize(), "f")


def _symbol_of(value: object) -> object:
    # Delegates send {"symbol": ..., "address": ...}; the clerk sends a bare symbol.
    if isinstance(value, dict):
        return value.get("symbol")
    return value


def validate_token_symbol(value: object, side: str) -> str:
    """Known token symbol, or the side's default ("in" gives USDC, "out" gives WETH)."""
    symbol = _symbol_of(value)
    if isinstance(symbol, str) and symbol.strip().upper() in KNOWN_TOKENS:
        return symbol.strip().upper()
    return DEFAULT_TOKEN_IN if side == "in" else DEFAULT_TOKEN_OUT


def validate_token_pair(token_in: object, token_out: object) -> tuple[str, str]:
    symbol_in = validate_token_symbol(token_in, "in")
    symbol_out = validate_token_symbol(token_out, "out")
    if symbol_in == symbol_out:
        symbol_out = next(s for s in KNOWN_TOKENS if s != symbol_in)
        logger.debug("Repaired identical pair %s/%s", symbol_in, symbol_out)
    return symbol_in, symbol_out


def validate_agent_response(raw: dict) -> AgentVerdict:
    """Validate one debating persona's JSON reply."""
    suggested = raw.get("suggestedStrategy")
    strategy = None
    if isinstance(suggested, dict) and "type" in suggested:
        strategy = validate_strategy(suggested.get("type"))

    return AgentVerdict(
        opinion=validate_opinion(raw.get("opinion")),
        reasoning=_clean_text(raw.get("reasoning"), _MAX_REASONING_CHARS, "No reasoning provided."),
        confidence=validate_confidence(raw.get("confidence")),
        suggested_strategy=strategy,
    )


def validate_trade_synthesis(raw: dict) -> TradeSynthesis:
    """Validate the clerk's trade synthesis."""
    token_in, token_out = validate_token_pair(raw.get("tokenIn"), raw.get("tokenOut"))
    return TradeSynthesis(
        strategy=validate_strategy(raw.get("finalStrategy")),
        token_in=token_in,
        token_out=token_out,
        amount_in=validate_amount(raw.get("amountIn")),
        expected_amount_out=validate_amount(raw.get("expectedAmountOut")),
        max_slippage_bps=validate_slippage_bps(raw.get("maxSlippage")),
        reasoning=_clean_text(raw.get("reasoning"), _MAX_REASONING_CHARS, "Council synthesis unavailable."),
        confidence=validate_confidence(raw.get("confidence")),
        risk_level=validate_risk_level(raw.get("riskLevel")),
    )


def validate_trade_proposal_payload(raw: dict) -> TradeSynthesis:
    """Validate a trade proposal returned by an external delegate."""
    pair = raw.get("pair") if isinstance(raw.get("pair"), dict) else {}
    token_in, token_out = validate_token_pair(pair.get("tokenIn"), pair.get("tokenOut"))
    return TradeSynthesis(
        strategy=validate_strategy(raw.get("strategyType", raw.get("action"))),
        token_in=token_in,
        token_out=token_out,
        amount_in=validate_amount(raw.get("amountIn")),
        expected_amount_out=validate_amount(raw.get("expectedAmountOut")),
        max_slippage_bps=validate_slippage_bps(raw.get("maxSlippage")),
        reasoning=_clean_text(raw.get("reasoning"), _MAX_REASONING_CHARS, "Proposal from external agent."),
        confidence=validate_confidence(raw.get("confidence")),
        risk_level=validate_risk_level(raw.get("riskLevel")),
    )


def validate_token_symbol_ticker(value: object, default: str) -> str:
    if not isinstance(value, str):
        return default
    ticker = re.sub(r"[^A-Za-z0-9]", "", value).upper()
    if not ticker or len(ticker) > _MAX_TOKEN_SYMBOL_CHARS:
        return default
    return ticker


def validate_token_synthesis(raw: dict, fallback: TokenSynthesis) -> TokenSynthesis:
    """Validate the clerk's (or a delegate's) token launch synthesis.

    Unusable name, symbol or description fields fall back to ``fallback``.
    """
    return TokenSynthesis(
        token_name=_clean_text(raw.get("tokenName"), _MAX_TOKEN_NAME_CHARS, fallback.token_name),
        token_symbol=validate_token_symbol_ticker(raw.get("tokenSymbol"), fallback.token_symbol),
        token_description=_clean_text(
            raw.get("tokenDescription"), _MAX_TOKEN_DESCRIPTION_CHARS, fallback.token_description
        ),
        vault_pct=_bounded_int(
            raw.get("vaultPercentage", raw.get("vaultPct")), 0, MAX_VAULT_PCT, DEFAULT_VAULT_PCT
        ),
        reasoning=_clean_text(raw.get("reasoning"), _MAX_REASONING_CHARS, fallback.reasoning),
        confidence=validate_confidence(raw.get("confidence")),
        risk_level=validate_risk_level(raw.get("riskLevel")),
    )
