"""Pure dataclasses for the council deliberation pipeline. No logic, no deps."""

from dataclasses import dataclass, field

OPINIONS = ("SUPPORT", "CONCERN", "OPPOSE", "NEUTRAL")
ROLE_TAGS = ("alpha", "risk", "macro", "devil", "clerk")
EXTERNAL_ROLE = "external"
RISK_LEVELS = ("low", "medium", "high")
CONSENSUS_LABELS = ("unanimous", "majority", "contested", "vetoed")
TRADE_STRATEGIES = ("swap", "dca")


@dataclass(frozen=True)
class AgentPersona:
    id: str
    display_name: str
    role_tag: str            # one of ROLE_TAGS
    directive_template: str


@dataclass
class CouncilMessage:
    agent_id: str
    agent_name: str
    role_tag: str            # ROLE_TAGS or EXTERNAL_ROLE
    opinion: str             # one of OPINIONS
    reasoning: str
    confidence: int          # 0-100
    timestamp: int           # epoch milliseconds


@dataclass
class VoteTally:
    support: int = 0
    oppose: int = 0
    abstain: int = 0

    @property
    def total(self) -> int:
        return self.support + self.oppose + self.abstain


@dataclass
class DeliberationResult:
    messages: list[CouncilMessage]
    consensus: str           # one of CONSENSUS_LABELS
    vote_tally: VoteTally
    rounds: int = 1


@dataclass
class TokenRef:
    symbol: str
    address: str


@dataclass
class TokenPair:
    token_in: TokenRef
    token_out: TokenRef


@dataclass
class TradeProposal:
    pair: TokenPair
    action: str              # "swap" or "dca"
    strategy_type: str       # one of TRADE_STRATEGIES
    amount_in: str
    expected_amount_out: str
    max_slippage_bps: int
    risk_level: str
    reasoning: str
    confidence: int
    deliberation: DeliberationResult | None = None


@dataclass
class TokenLaunchProposal:
    token_name: str
    token_symbol: str
    token_description: str
    vault_pct: int
    lockup_days: int
    reward_recipient: str
    risk_level: str
    reasoning: str
    confidence: int
    paired_token: str = "WETH"
    deliberation: DeliberationResult | None = None


Proposal = TradeProposal | TokenLaunchProposal


@dataclass
class HookParameters:
    fee_bps: int
    max_swap_size: str       # wei, decimal string
    sentiment_score: int     # -100..100
    sentiment_reason: str


@dataclass
class RequestContext:
    balance: str = "0.1 ETH"
    risk_level: str = "medium"
    preferred_tokens: list[str] = field(default_factory=lambda: ["USDC", "WETH"])


@dataclass
class DeployedAgent:
    id: str
    name: str


@dataclass
class CouncilRequest:
    user_prompt: str
    context: RequestContext = field(default_factory=RequestContext)
    agent_endpoint: str | None = None
    deployed_agents: list[DeployedAgent] = field(default_factory=list)
    wallet_address: str = "0x0000000000000000000000000000000000000000"


@dataclass
class Intent:
    strategy: str            # "swap", "dca" or "token_launch"
    hint: str


@dataclass
class Question:
    text: str                # sanitized prompt
    source: str              # "cli", file path, or caller label
    context: RequestContext
    intent: Intent | None = None
    deployed_agents: list[DeployedAgent] = field(default_factory=list)

    @property
    def is_token_launch(self) -> bool:
        return self.intent is not None and self.intent.strategy == "token_launch"


@dataclass
class ModelResponse:
    provider: str            # "groq", "openai", "claude", "gemini", "canned"
    model: str               # actual model string used
    persona_id: str
    content: str


@dataclass
class ExternalAgentRequest:
    prompt: str
    context: RequestContext
    request_id: str


@dataclass
class ExternalAgentResponse:
    success: bool
    proposal: dict | None = None
    error: str | None = None
    payment_ref: str | None = None


@dataclass
class CouncilOutcome:
    deliberation: DeliberationResult
    proposal: Proposal
    hook_parameters: HookParameters
    delegated: bool = False
    payment_ref: str | None = None   # settlement reference from a paid delegate
