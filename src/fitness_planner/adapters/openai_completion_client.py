"""OpenAI-compatible chat completions client (Groq by default)."""

import json
from dataclasses import dataclass

from openai import APIConnectionError, APIStatusError, AsyncOpenAI, RateLimitError

from fitness_planner.domain.errors import CompletionServiceUnavailable
from fitness_planner.services.completion import CompletionClient, CompletionRequest
from fitness_planner.services.validation import QUOTA_EXCEEDED


@dataclass
class OpenAICompletionClient(CompletionClient):
    """Completion client backed by the chat completions API in JSON mode."""

    client: AsyncOpenAI
    model: str
    temperature: float = 0.2
    max_tokens: int = 3500

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        api_key: str,
        model: str,
        *,
        base_url: str | None = None,
        temperature: float = 0.2,
        max_tokens: int = 3500,
        timeout: float = 60.0,
    ) -> "OpenAICompletionClient":
        """Create a client for OpenAI or any compatible endpoint."""
        return cls(
            client=AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout),
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
        )

    async def complete(self, request: CompletionRequest) -> str:
        """Run one chat completion and return the raw message text.

        Provider failures are reported the same way the edge function reports
        them: as an `{"error": ...}` document, so the validator classifies them.
        """
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": request.system_prompt()},
                    {"role": "user", "content": request.user_prompt()},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                response_format={"type": "json_object"},
            )
        except RateLimitError:
            return json.dumps({"error": QUOTA_EXCEEDED})
        except APIStatusError as exc:
            return json.dumps({"error": f"Provider error {exc.status_code}"})
        except APIConnectionError as exc:
            raise CompletionServiceUnavailable(
                "Completion provider is unreachable"
            ) from exc

        if not response.choices:
            raise CompletionServiceUnavailable(
                "Completion provider returned no choices"
            )
        content = response.choices[0].message.content
        if not content:
            raise CompletionServiceUnavailable(
                "Completion provider returned an empty response"
            )
        return content

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
