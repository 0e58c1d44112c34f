"""AI coach chat."""

import logging
from dataclasses import dataclass

from fitness_planner.domain.errors import MalformedJSON, ProfileMissing
from fitness_planner.domain.profiles import Profile
from fitness_planner.services.completion import CompletionClient, CompletionRequest
from fitness_planner.services.validation import parse_completion, strip_code_fences

_logger = logging.getLogger(__name__)


@dataclass
class CoachService:
    """Answers free-text questions in the coach persona."""

    completion_client: CompletionClient

    async def reply(self, profile: Profile | None, message: str) -> str:
        """Return the coach's answer to a user message."""
        if profile is None:
            raise ProfileMissing("A profile is required to chat with the coach")
        if not message.strip():
            raise ValueError("Message must not be empty")
        request = CompletionRequest(
            type="CHAT",
            profile=profile.to_prompt_dict(),
            preferences="",
            message=message.strip(),
        )
        raw = await self.completion_client.complete(request)
        try:
            payload = parse_completion(raw)
        except MalformedJSON:
            _logger.info("Coach answered with plain text")
            return strip_code_fences(raw)
        response = payload.get("response")
        if isinstance(response, str) and response.strip():
            return response.strip()
        return strip_code_fences(raw)
