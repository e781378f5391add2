"""Council requests from markdown files with optional YAML frontmatter.

Example::

    ---
    balance: 2 ETH
    risk_level: low
    preferred_tokens: [USDC, WETH]
    agent_endpoint: https://my-agent.vercel.app/api/council
    wallet_address: 0xabc...
    ---
    Swap some ETH into stables before the weekend.
"""

from pathlib import Path

import frontmatter

from council.models import CouncilRequest, DeployedAgent, RequestContext


def _token_list(value: object) -> list[str]:
    if isinstance(value, str):
        return [t.strip().upper() for t in value.split(",") if t.strip()]
    if isinstance(value, (list, tuple)):
        return [str(t).strip().upper() for t in value if str(t).strip()]
    return []


def _deployed_agents(value: object) -> list[DeployedAgent]:
    if not isinstance(value, list):
        return []
    agents = []
    for item in value:
        if isinstance(item, dict) and "id" in item:
            agents.append(DeployedAgent(id=str(item["id"]), name=str(item.get("name", item["id"]))))
    return agents


def parse_request_file(file_path: Path) -> CouncilRequest:
    """Parse a request file. Body is the prompt; frontmatter fills the context.

    Recognised keys: balance, risk_level (or risk), preferred_tokens (list or
    comma-separated string), agent_endpoint, wallet_address, deployed_agents
    (list of {id, name}). Unknown keys are ignored. Values are not validated
    here; the engine rejects a bad risk level.
    """
    post = frontmatter.load(str(file_path))
    meta = dict(post.metadata)

    context = RequestContext()
    if "balance" in meta:
        context.balance = str(meta["balance"])
    risk = meta.get("risk_level", meta.get("risk"))
    if risk is not None:
        context.risk_level = str(risk).strip().lower()
    tokens = _token_list(meta.get("preferred_tokens"))
    if tokens:
        context.preferred_tokens = tokens

    request = CouncilRequest(
        user_prompt=post.content.strip(),
        context=context,
        agent_endpoint=str(meta["agent_endpoint"]) if meta.get("agent_endpoint") else None,
        deployed_agents=_deployed_agents(meta.get("deployed_agents")),
    )
    if meta.get("wallet_address"):
        request.wallet_address = str(meta["wallet_address"])
    return request
