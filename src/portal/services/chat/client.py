from __future__ import annotations

import logging
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Dict, List, Optional

import httpx

from src.portal.config import settings
from src.portal.domain.chat.completion import CompletionMessage
from src.portal.services.chat.formatter import build_completion_request


logger = logging.getLogger("chat")


class CompletionError(Exception):
    """Base class for failures of a completion call.

    ``reason`` is a short human-readable description that is safe to show to
    the user; ``status_code`` is set when the upstream answered with an HTTP
    error.
    """

    def __init__(self, reason: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.status_code = status_code


class CompletionHTTPError(CompletionError):
    """The completion endpoint answered with a non-2xx status."""


class CompletionTransportError(CompletionError):
    """The completion endpoint could not be reached."""


class CompletionFormatError(CompletionError):
    """The completion endpoint answered 2xx without ``choices[0].message.content``."""


@dataclass
class CompletionResult:
    content: str
    raw: Dict[str, Any] = field(default_factory=dict)


@dataclass
class CompletionClientConfig:
    url: str
    api_key: Optional[str]
    customer_id: Optional[str]
    timeout_seconds: float

    @classmethod
    def from_settings(cls) -> "CompletionClientConfig":
        return cls(
            url=settings.completion_api_url,
            api_key=settings.completion_api_key,
            customer_id=settings.completion_customer_id,
            timeout_seconds=settings.completion_timeout_seconds,
        )

    @property
    def headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.customer_id:
            headers["CustomerId"] = self.customer_id
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers


def _extract_content(data: Any) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    if not isinstance(content, str) or not content:
        return None
    return content


class CompletionClient:
    """Issues a single chat-completion request and parses the reply.

    One request per call: no retries, no caching and no streaming. An
    optional ``transport`` can be supplied to route requests elsewhere (tests
    pass an ``httpx.MockTransport``).
    """

    def __init__(
        self,
        config: Optional[CompletionClientConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or CompletionClientConfig.from_settings()
        self._transport = transport
        if not self._config.api_key or not self._config.customer_id:
            logger.warning(
                "COMPLETION_API_KEY or COMPLETION_CUSTOMER_ID is not set; "
                "requests to %s will likely be rejected.",
                self._config.url,
            )

    async def complete(
        self,
        messages: List[CompletionMessage],
        model: str,
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> CompletionResult:
        request = build_completion_request(messages, model, temperature=temperature, max_tokens=max_tokens)
        payload = request.model_dump(mode="json")

        async with httpx.AsyncClient(timeout=self._config.timeout_seconds, transport=self._transport) as client:
            try:
                response = await client.post(self._config.url, json=payload, headers=self._config.headers)
            except httpx.HTTPError as exc:
                logger.exception("Error calling completion endpoint %s", self._config.url)
                raise CompletionTransportError(f"AI service unreachable: {exc.__class__.__name__}") from exc

        if not response.is_success:
            logger.error(
                "Completion request for model %s failed with status %s",
                model,
                response.status_code,
            )
            raise CompletionHTTPError(
                f"AI service error: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            logger.error("Completion endpoint returned non-JSON response")
            raise CompletionFormatError("Invalid response format from AI service") from exc

        content = _extract_content(data)
        if content is None:
            logger.error("Completion response is missing choices[0].message.content")
            raise CompletionFormatError("Invalid response format from AI service")

        return CompletionResult(content=content, raw=data)


_client_lock: Lock = Lock()
_client_instance: Optional[CompletionClient] = None


def get_completion_client() -> CompletionClient:
    """Return the process-wide CompletionClient built from settings."""

    global _client_instance
    if _client_instance is not None:
        return _client_instance

    with _client_lock:
        if _client_instance is None:
            _client_instance = CompletionClient()

    return _client_instance
