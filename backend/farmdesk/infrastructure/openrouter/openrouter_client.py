"""OpenRouter API client — implements the ChatProvider interface.

Communicates with an OpenAI-compatible chat completions endpoint
(OpenRouter by default, https://openrouter.ai/api/v1) using httpx.
"""

import logging

import httpx

from farmdesk.application.interfaces.chat_provider import ChatProvider
from farmdesk.domain.entities import (
    ChatMessage,
    ChatCompletionResult,
    TokenUsage,
)
from farmdesk.domain.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)


class OpenRouterClient(ChatProvider):
    """Infrastructure adapter — connects to the OpenRouter API.

    An ``http_client`` may be injected (tests pass one built on
    ``httpx.MockTransport``); otherwise a client is created per call.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://openrouter.ai/api/v1",
        app_name: str = "FarmDesk",
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._app_name = app_name
        self._http_client = http_client
        self._timeout = timeout

    @property
    def provider_name(self) -> str:
        return "openrouter"

    def _get_headers(self) -> dict[str, str]:
        """Standard headers for OpenRouter requests."""
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "X-Title": self._app_name,
        }

    def _build_payload(
        self,
        messages: list[ChatMessage],
        model: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> dict:
        """Build the request payload for the completions API."""
        payload: dict = {
            "model": model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
        }
        if temperature is not None:
            payload["temperature"] = temperature
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        return payload

    async def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or create a new one."""
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self._timeout)

    async def complete(
        self,
        messages: list[ChatMessage],
        model: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> ChatCompletionResult:
        """Send a non-streaming chat completion to OpenRouter."""
        payload = self._build_payload(
            messages, model, temperature=temperature, max_tokens=max_tokens
        )
        url = f"{self._base_url}/chat/completions"

        client = await self._get_client()
        should_close = self._http_client is None

        try:
            logger.debug("Sending completion request (model=%s)", model)
            response = await client.post(
                url, headers=self._get_headers(), json=payload
            )

            if response.status_code != 200:
                self._raise_provider_error(response)

            return self._parse_completion_response(response.json())

        except httpx.TransportError as exc:
            raise UpstreamServiceError(
                provider=self.provider_name,
                status_code=503,
                message=f"Could not reach completion API: {exc}",
            ) from exc

        finally:
            if should_close:
                await client.aclose()

    def _parse_completion_response(self, data: dict) -> ChatCompletionResult:
        """Parse the OpenRouter JSON response into a domain entity."""
        # Check for error in response body
        if "error" in data:
            error = data["error"]
            if not isinstance(error, dict):
                error = {"message": str(error)}
            raise UpstreamServiceError(
                provider=self.provider_name,
                status_code=error.get("code", 500),
                message=error.get("message", "Unknown error"),
            )

        choices = data.get("choices", [])
        if not choices or "message" not in choices[0]:
            raise UpstreamServiceError(
                provider=self.provider_name,
                status_code=502,
                message="Invalid response structure: no choices",
            )

        choice = choices[0]
        message = choice.get("message", {})
        usage_data = data.get("usage", {})

        return ChatCompletionResult(
            model=data.get("model", ""),
            content=message.get("content", "") or "",
            finish_reason=choice.get("finish_reason", "stop") or "stop",
            usage=TokenUsage(
                prompt_tokens=usage_data.get("prompt_tokens", 0),
                completion_tokens=usage_data.get("completion_tokens", 0),
                total_tokens=usage_data.get("total_tokens", 0),
            ),
            provider=self.provider_name,
        )

    def _raise_provider_error(self, response: httpx.Response) -> None:
        """Raise UpstreamServiceError from a non-200 httpx Response."""
        message = _error_message(response)

        logger.warning(
            "Completion API returned %d: %s", response.status_code, message[:200]
        )
        raise UpstreamServiceError(
            provider=self.provider_name,
            status_code=response.status_code,
            message=message,
        )


def _error_message(response: httpx.Response) -> str:
    """Pull ``error.message`` (or a bare ``error`` string) out of an error body."""
    try:
        data = response.json()
    except ValueError:
        return response.text
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict):
        return str(error.get("message", response.text))
    if isinstance(error, str):
        return error
    return response.text
