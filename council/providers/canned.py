"""Deterministic offline backend serving fixed council transcripts."""

import json
import logging
import re

from council import canned
from council.models import AgentPersona, ModelResponse
from council.providers.base import AIProvider

logger = logging.getLogger(__name__)

# 2025-01-01T00:00:00Z; canned runs share one clock so transcripts are reproducible.
CANNED_EPOCH_MS = 1_735_689_600_000

_USER_REQUEST = re.compile(r"<user_request>(.*?)</user_request>", re.DOTALL)
_TOKEN_LAUNCH_MARKER = "TOKEN LAUNCH"


class CannedProvider(AIProvider):
    """Answers every persona from the canned transcripts. Never fails."""

    def name(self) -> str:
        return "canned"

    def model_string(self) -> str:
        return "canned-council-v1"

    def now_ms(self) -> int:
        return CANNED_EPOCH_MS

    async def generate(self, prompt: str, persona: AgentPersona) -> ModelResponse:
        match = _USER_REQUEST.search(prompt)
        user_request = match.group(1) if match else ""
        token_launch = _TOKEN_LAUNCH_MARKER in _USER_REQUEST.sub("", prompt)

        if persona.role_tag == "clerk":
            payload = canned.token_synthesis(user_request) if token_launch else canned.trade_synthesis()
        elif token_launch:
            payload = canned.token_verdict(persona.id, user_request)
        else:
            payload = canned.trade_verdict(persona.id)

        logger.debug("Canned reply for %s (token_launch=%s)", persona.id, token_launch)

        return ModelResponse(
            provider=self.name(),
            model=self.model_string(),
            persona_id=persona.id,
            content=json.dumps(payload),
        )
