"""
Client for the Shapes relay service.

Forwards a user message to a Shapes persona through the OpenAI-compatible
``chat/completions`` endpoint. User, channel and guild ids travel as
headers so the service keeps per-user, per-channel memory.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

import httpx
from loguru import logger


class FailureKind(str, Enum):
    """Classification of a failed relay call."""
    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    OTHER = "other"


class RelayError(Exception):
    """Raised when the relay call fails."""

    def __init__(self, kind: FailureKind, detail: str = ""):
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)
        self.kind = kind
        self.detail = detail


@dataclass
class RelayResponse:
    """Reply from the relay service."""
    text: str
    is_automated_origin: bool = False


class RelayClient(Protocol):
    """Outbound conversational relay."""

    async def complete(
        self,
        user_id: str,
        channel_id: str,
        guild_id: str | None,
        text: str,
    ) -> RelayResponse:
        ...


def classify_failure(error: Exception) -> FailureKind:
    """Map a transport or HTTP error onto a failure kind."""
    if isinstance(error, httpx.TimeoutException):
        return FailureKind.TIMEOUT
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        if status == 429:
            return FailureKind.RATE_LIMITED
        if status in (500, 502, 503, 504):
            return FailureKind.UPSTREAM_UNAVAILABLE
        return FailureKind.OTHER
    if isinstance(error, httpx.ConnectError):
        return FailureKind.UPSTREAM_UNAVAILABLE
    return FailureKind.OTHER


class ShapesClient:
    """
    HTTP client for a Shapes persona.

    Configuration:
    - api_key: Shapes API key
    - username: Shape username; the model is ``shapesinc/<username>``
    - api_base: API base URL
    - timeout: Request timeout in seconds
    """

    def __init__(
        self,
        api_key: str,
        username: str,
        api_base: str = "https://api.shapes.inc/v1",
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.username = username
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def model(self) -> str:
        return f"shapesinc/{self.username}"

    def _headers(self, user_id: str, channel_id: str, guild_id: str | None) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "X-User-Id": user_id,
            "X-Channel-Id": channel_id,
        }
        if guild_id:
            headers["X-Guild-Id"] = guild_id
        return headers

    async def complete(
        self,
        user_id: str,
        channel_id: str,
        guild_id: str | None,
        text: str,
    ) -> RelayResponse:
        """
        Send a message to the shape and return its reply.

        Args:
            user_id: Author id, used by the service for per-user memory.
            channel_id: Channel the message came from.
            guild_id: Guild/server id, when known.
            text: Message text to forward.

        Returns:
            RelayResponse with the reply text (possibly empty).

        Raises:
            RelayError: If the call fails.
        """
        logger.debug(
            f"[Shapes API] Sending to {self.model}: user {user_id}, "
            f"channel {channel_id}, guild {guild_id or 'N/A'}"
        )

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    f"{self.api_base}/chat/completions",
                    headers=self._headers(user_id, channel_id, guild_id),
                    json={
                        "model": self.model,
                        "messages": [{"role": "user", "content": text}],
                    },
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            kind = classify_failure(e)
            logger.error(f"[Shapes API] {kind.value}: {e}")
            raise RelayError(kind, str(e)) from e
        except ValueError as e:
            logger.error(f"[Shapes API] Invalid response body: {e}")
            raise RelayError(FailureKind.OTHER, f"invalid response body: {e}") from e

        return self._parse_response(data)

    def _parse_response(self, data: Any) -> RelayResponse:
        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices:
            logger.warning(f"[Shapes API] Unexpected response structure or empty choices: {data}")
            return RelayResponse(text="")

        first = choices[0] if isinstance(choices, list) and isinstance(choices[0], dict) else {}
        message = first.get("message")
        if not isinstance(message, dict):
            message = {}
        text = message.get("content")
        if not isinstance(text, str):
            if text is not None:
                logger.warning(f"[Shapes API] Ignoring non-text content: {text!r}")
            text = ""
        is_bot = bool(message.get("isBot", False))

        logger.debug(f"[Shapes API] Response received ({len(text)} chars), isBot: {is_bot}")
        return RelayResponse(text=text, is_automated_origin=is_bot)
