"""External delegation gateway: SSRF-guarded, time- and size-bounded agent call.

A user may point the council at their own agent service. The endpoint is
validated against fixed allow-lists before any request is made, the call is
bounded to 10 seconds and 1 MiB, and every failure is reported as "delegate
unavailable" so the local council takes over.
"""

import asyncio
import ipaddress
import json
import logging
import time
import uuid
from dataclasses import dataclass
from urllib.parse import urlsplit

import httpx

from council import canned
from council.consensus import calculate_consensus
from council.models import (
    EXTERNAL_ROLE,
    CouncilMessage,
    CouncilRequest,
    DeliberationResult,
    ExternalAgentRequest,
    ExternalAgentResponse,
    Proposal,
)
from council.synthesis import ZERO_ADDRESS, build_token_launch_proposal, build_trade_proposal
from council.validation import (
    TradeSynthesis,
    validate_token_synthesis,
    validate_trade_proposal_payload,
)

logger = logging.getLogger(__name__)

EXTERNAL_AGENT_TIMEOUT_SEC = 10.0
MAX_RESPONSE_BYTES = 1024 * 1024
EXTERNAL_CONFIDENCE = 85

ALLOWED_API_DOMAINS = frozenset({
    "api.openai.com",
    "api.groq.com",
    "api.anthropic.com",
    "generativelanguage.googleapis.com",
})

# Hosted agents live on a subdomain of one of these; the bare suffix is not accepted.
ALLOWED_PLATFORM_SUFFIXES = (
    "vercel.app",
    "netlify.app",
    "onrender.com",
    "fly.dev",
    "railway.app",
    "herokuapp.com",
    "workers.dev",
)

_DEFAULT_TRADE = TradeSynthesis(
    strategy="swap",
    token_in="USDC",
    token_out="WETH",
    amount_in="10",
    expected_amount_out="0.003",
    max_slippage_bps=50,
    reasoning="Fallback proposal from external agent",
    confidence=50,
    risk_level="medium",
)


class DelegateError(Exception):
    """Raised inside the gateway when a delegate response is unusable."""


@dataclass(frozen=True)
class EndpointCheck:
    valid: bool
    error: str | None = None


def _is_internal_ip(hostname: str) -> bool:
    try:
        ip = ipaddress.ip_address(hostname)
    except ValueError:
        return False
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped
    return (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_unspecified
        or ip.is_reserved
        or ip.is_multicast
    )


def _host_allowed(hostname: str) -> bool:
    if hostname in ALLOWED_API_DOMAINS:
        return True
    return any(hostname.endswith("." + suffix) for suffix in ALLOWED_PLATFORM_SUFFIXES)


def validate_external_endpoint(endpoint: str, allow_localhost: bool = False) -> EndpointCheck:
    """Decide whether ``endpoint`` may be called. Fails closed.

    Args:
        endpoint: Delegate URL supplied by the user.
        allow_localhost: Accept plain ``localhost`` (over http too). Only set
            outside production.

    Returns:
        EndpointCheck with ``error`` naming the reason when rejected.
    """
    try:
        parts = urlsplit(endpoint.strip())
        hostname = parts.hostname
        parts.port  # noqa: B018 - raises ValueError on a malformed port
    except (AttributeError, ValueError):
        return EndpointCheck(False, "Invalid URL format")

    if parts.scheme not in ("http", "https") or not hostname:
        return EndpointCheck(False, "Invalid URL format")
    if parts.username or parts.password:
        return EndpointCheck(False, "Credentials in URL are not allowed")

    hostname = hostname.lower().rstrip(".")

    if _is_internal_ip(hostname):
        return EndpointCheck(False, "Private IP addresses are not allowed")

    if hostname == "localhost":
        if allow_localhost:
            return EndpointCheck(True)
        return EndpointCheck(False, "localhost is only allowed outside production")

    if parts.scheme != "https":
        return EndpointCheck(False, "HTTPS required for external endpoints")

    if not _host_allowed(hostname):
        return EndpointCheck(False, f"Domain not in allowlist: {hostname}")

    return EndpointCheck(True)


def _wire_request(request: ExternalAgentRequest) -> dict:
    return {
        "prompt": request.prompt,
        "context": {
            "balance": request.context.balance,
            "riskLevel": request.context.risk_level,
            "preferredTokens": list(request.context.preferred_tokens),
        },
        "requestId": request.request_id,
    }


async def _post_bounded(
    client: httpx.AsyncClient,
    endpoint: str,
    request: ExternalAgentRequest,
    max_bytes: int,
) -> ExternalAgentResponse:
    async with client.stream("POST", endpoint, json=_wire_request(request)) as response:
        if not response.is_success:
            raise DelegateError(f"External agent error: {response.status_code}")

        declared = response.headers.get("Content-Length", "")
        if declared.isdigit() and int(declared) > max_bytes:
            raise DelegateError(f"Response too large: {declared} bytes (max {max_bytes})")

        body = bytearray()
        async for chunk in response.aiter_bytes():
            body.extend(chunk)
            if len(body) > max_bytes:
                raise DelegateError(f"Response too large: over {max_bytes} bytes")

        payment_ref = response.headers.get("X-Payment-Response")

    try:
        data = json.loads(bytes(body))
    except ValueError as exc:
        raise DelegateError(f"Malformed response: {exc}") from exc
    if not isinstance(data, dict):
        raise DelegateError("Malformed response: expected a JSON object")

    proposal = data.get("proposal")
    error = data.get("error")
    return ExternalAgentResponse(
        success=data.get("success") is True,
        proposal=proposal if isinstance(proposal, dict) else None,
        error=str(error) if error is not None else None,
        payment_ref=payment_ref or data.get("paymentRef"),
    )


async def call_external_agent(
    endpoint: str,
    request: ExternalAgentRequest,
    client: httpx.AsyncClient | None = None,
    allow_localhost: bool = False,
    timeout_sec: float = EXTERNAL_AGENT_TIMEOUT_SEC,
    max_bytes: int = MAX_RESPONSE_BYTES,
) -> ExternalAgentResponse:
    """POST the request to a validated delegate endpoint.

    Never raises; failures come back as ``success=False`` with an error.
    """
    check = validate_external_endpoint(endpoint, allow_localhost=allow_localhost)
    if not check.valid:
        logger.error("SSRF blocked: %s", check.error)
        return ExternalAgentResponse(success=False, error=f"Endpoint blocked: {check.error}")

    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=timeout_sec, follow_redirects=False)

    logger.info("Calling external agent: %s", endpoint)
    try:
        return await asyncio.wait_for(
            _post_bounded(client, endpoint, request, max_bytes),
            timeout=timeout_sec,
        )
    except TimeoutError:
        logger.error("External agent timeout after %ss", timeout_sec)
        return ExternalAgentResponse(success=False, error="Request timeout")
    except (DelegateError, httpx.HTTPError) as exc:
        logger.error("External agent failed: %s", exc)
        return ExternalAgentResponse(success=False, error=str(exc))
    except Exception as exc:
        logger.error("External agent failed unexpectedly: %s", exc)
        return ExternalAgentResponse(success=False, error=f"Unexpected error: {exc}")
    finally:
        if owns_client:
            await client.aclose()


def _is_token_launch_payload(proposal: dict) -> bool:
    if proposal.get("strategyType") == "token_launch" or proposal.get("action") == "token_launch":
        return True
    return "pair" not in proposal


def external_message(endpoint: str, timestamp: int | None = None) -> CouncilMessage:
    """The single synthetic council message standing in for a delegate."""
    return CouncilMessage(
        agent_id="external-agent",
        agent_name="External Agent",
        role_tag=EXTERNAL_ROLE,
        opinion="SUPPORT",
        reasoning=f"Proposal from external agent at {endpoint}",
        confidence=EXTERNAL_CONFIDENCE,
        timestamp=timestamp if timestamp is not None else int(time.time() * 1000),
    )


def convert_external_proposal(
    proposal: dict,
    messages: list[CouncilMessage],
    expect_token_launch: bool,
    prompt: str,
    wallet_address: str = ZERO_ADDRESS,
) -> tuple[DeliberationResult, Proposal]:
    """Validate a delegate's proposal and wrap it in a one-round deliberation.

    A proposal of the wrong variant is replaced by a safe default of the
    expected variant instead of being passed through.
    """
    consensus, tally = calculate_consensus(messages)
    deliberation = DeliberationResult(messages=messages, consensus=consensus, vote_tally=tally, rounds=1)
    returned_token_launch = _is_token_launch_payload(proposal)
    fallback_token = canned.fallback_token_synthesis(prompt)

    if expect_token_launch:
        if returned_token_launch:
            synthesis = validate_token_synthesis(proposal, fallback_token)
        else:
            logger.error("External agent returned a trade proposal for a token launch, using default launch")
            synthesis = fallback_token
        return deliberation, build_token_launch_proposal(synthesis, deliberation, wallet_address)

    if returned_token_launch:
        logger.error("External agent returned token launch proposal, converting to default swap")
        return deliberation, build_trade_proposal(_DEFAULT_TRADE, deliberation)

    return deliberation, build_trade_proposal(validate_trade_proposal_payload(proposal), deliberation)


async def try_delegate(
    request: CouncilRequest,
    prompt: str,
    expect_token_launch: bool,
    client: httpx.AsyncClient | None = None,
    allow_localhost: bool = False,
) -> tuple[DeliberationResult, Proposal, str | None] | None:
    """Hand the whole deliberation to the request's delegate endpoint.

    Returns:
        (deliberation, proposal, payment_ref) on success, or None when the
        delegate is unavailable for any reason and the local council should run.
    """
    if not request.agent_endpoint:
        return None

    external_request = ExternalAgentRequest(
        prompt=prompt,
        context=request.context,
        request_id=f"req-{uuid.uuid4().hex[:12]}",
    )
    response = await call_external_agent(
        request.agent_endpoint,
        external_request,
        client=client,
        allow_localhost=allow_localhost,
    )

    if not response.success or response.proposal is None:
        logger.warning(
            "External agent unavailable, falling back to local council: %s",
            response.error or "no proposal returned",
        )
        return None

    if response.payment_ref:
        logger.info("x402 payment settled: %s", response.payment_ref)

    logger.info("Using external agent proposal")
    messages = [external_message(request.agent_endpoint)]
    deliberation, proposal = convert_external_proposal(
        response.proposal,
        messages,
        expect_token_launch,
        prompt,
        request.wallet_address,
    )
    return deliberation, proposal, response.payment_ref
