"""Client for the Supabase `generate-plan` edge function."""

import json
from dataclasses import dataclass

import httpx

from fitness_planner.domain.errors import CompletionServiceUnavailable
from fitness_planner.services.completion import CompletionClient, CompletionRequest
from fitness_planner.services.validation import QUOTA_EXCEEDED


@dataclass
class HttpxEdgeFunctionClient(CompletionClient):
    """HTTPX-backed client for the plan generation edge function."""

    supabase_url: str
    service_key: str
    function_name: str
    http_client: httpx.AsyncClient
    timeout: float = 60.0

    @classmethod
    def create(
        cls,
        supabase_url: str,
        service_key: str,
        function_name: str = "generate-plan",
        timeout: float = 60.0,
    ) -> "HttpxEdgeFunctionClient":
        """Create an edge function client with a managed httpx session."""
        return cls(
            supabase_url=supabase_url.rstrip("/"),
            service_key=service_key,
            function_name=function_name,
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def complete(self, request: CompletionRequest) -> str:
        """Invoke the edge function and return its raw response body."""
        url = f"{self.supabase_url}/functions/v1/{self.function_name}"
        body: dict[str, object] = {
            "type": request.type,
            "userProfile": request.profile,
            "preferences": request.preferences,
        }
        if request.calorie_target is not None:
            body["calorieTarget"] = request.calorie_target
        if request.message is not None:
            body["userMessage"] = request.message
        try:
            response = await self.http_client.post(
                url,
                headers={
                    "Authorization": f"Bearer {self.service_key}",
                    "apikey": self.service_key,
                },
                json=body,
                timeout=self.timeout,
            )
        except httpx.TransportError as exc:
            raise CompletionServiceUnavailable("Edge function is unreachable") from exc

        if response.status_code == httpx.codes.TOO_MANY_REQUESTS:
            return json.dumps({"error": QUOTA_EXCEEDED})
        if response.is_success or _is_error_document(response):
            # `{"error": ...}` bodies are classified by the validator.
            return response.text
        raise CompletionServiceUnavailable(
            f"Edge function failed with status {response.status_code}"
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _is_error_document(response: httpx.Response) -> bool:
    try:
        payload = response.json()
    except ValueError:
        return False
    return isinstance(payload, dict) and "error" in payload
