"""Async client for OpenAI-compatible chat-completion endpoints.

One POST per request, bearer-authenticated. There are no retries and, unless
configured, no timeout: transport failures surface to the caller unchanged.
"""

import logging
from typing import Any

import httpx

from tool_relay.llm.types import ChatCompletion, ProviderError

logger = logging.getLogger(__name__)

CHAT_COMPLETIONS_PATH = "/chat/completions"


class ChatCompletionsClient:
    """Thin wrapper around ``httpx.AsyncClient`` for ``/chat/completions``.

    Create it once at startup and reuse it; the connection pool lives as long
    as the client.

    Attributes:
        base_url: Provider base URL (without the ``/chat/completions`` suffix)
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Provider base URL
            api_key: Bearer token sent with every request
            timeout: Request timeout in seconds, or None to wait indefinitely
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )
        logger.info(f"ChatCompletionsClient initialized with base URL: {self.base_url}")

    async def create(self, body: dict[str, Any]) -> ChatCompletion:
        """Send one chat-completion request.

        Args:
            body: Request body (model, messages, options, tools)

        Returns:
            The decoded response body

        Raises:
            ProviderError: If the provider reports an error
            httpx.HTTPError: On transport failures
        """
        response = await self._client.post(CHAT_COMPLETIONS_PATH, json=body)

        try:
            payload = response.json()
        except ValueError:
            if response.is_error:
                raise ProviderError(
                    response.text or response.reason_phrase,
                    status_code=response.status_code,
                )
            raise

        if not isinstance(payload, dict):
            raise ProviderError(
                f"Unexpected response body: {type(payload).__name__}",
                status_code=response.status_code,
            )

        if payload.get("error"):
            error = ProviderError.from_payload(
                payload["error"], status_code=response.status_code
            )
            logger.error(f"Provider error ({error.code}): {error.message}")
            raise error

        if response.is_error:
            raise ProviderError(
                f"HTTP {response.status_code} without error payload",
                status_code=response.status_code,
            )

        return payload  # type: ignore[return-value]

    async def close(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()
        logger.debug("ChatCompletionsClient closed")
