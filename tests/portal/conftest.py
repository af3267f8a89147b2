import json
from typing import Any, Callable, Dict, List

import httpx
import pytest

from src.portal.infra.storage.documents import InMemoryDocumentStore
from src.portal.main import app
from src.portal.services.chat.client import CompletionClient, CompletionClientConfig
from src.portal.services.users.service import UserService

COMPLETION_URL = "https://completions.test/chat/completions"


def completion_client(handler: Callable[[httpx.Request], Any]) -> CompletionClient:
    """CompletionClient whose requests are answered by ``handler``."""

    config = CompletionClientConfig(
        url=COMPLETION_URL,
        api_key="test-key",
        customer_id="cus_test",
        timeout_seconds=5,
    )
    return CompletionClient(config, transport=httpx.MockTransport(handler))


def reply_with(content: str, sent: List[Dict[str, Any]] = None) -> Callable[[httpx.Request], httpx.Response]:
    """Handler answering every request with ``content``; request bodies are appended to ``sent``."""

    def handler(request: httpx.Request) -> httpx.Response:
        if sent is not None:
            sent.append(json.loads(request.content))
        return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})

    return handler


def fail_with(status_code: int) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json={"error": "upstream failure"})

    return handler


@pytest.fixture
def users() -> UserService:
    return UserService(InMemoryDocumentStore(), auth_mode="demo", demo_password="demo123")


@pytest.fixture(autouse=True)
def clear_dependency_overrides():
    yield
    app.dependency_overrides.clear()
