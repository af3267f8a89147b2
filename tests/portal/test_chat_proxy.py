from httpx import ASGITransport, AsyncClient
from fastapi import status

from conftest import completion_client, fail_with, reply_with
from src.portal.api.routes_chat import get_chat_service
from src.portal.main import app
from src.portal.services.chat.service import ChatService
from src.portal.services.specialties.registry import get_specialty_by_id


def _specialty_payload(specialty_id: str) -> dict:
    return get_specialty_by_id(specialty_id).model_dump(mode="json", by_alias=True)


def _messages_payload() -> list:
    return [
        {"id": "welcome", "role": "assistant", "content": "Hello!", "timestamp": "2025-03-01T09:00:00Z"},
        {"id": "1740819700000", "role": "user", "content": "Headache and photophobia", "timestamp": "2025-03-01T09:01:40Z"},
    ]


async def test_proxy_requires_messages_and_specialty():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        no_specialty = await ac.post("/api/chat", json={"messages": _messages_payload()})
        no_messages = await ac.post("/api/chat", json={"specialty": _specialty_payload("neurology")})
        no_body = await ac.post("/api/chat")

    for response in (no_specialty, no_messages, no_body):
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "Messages and specialty are required"}


async def test_proxy_relays_and_wraps_reply():
    sent = []
    app.dependency_overrides[get_chat_service] = lambda: ChatService(
        client=completion_client(reply_with("Consider migraine; rule out meningitis.", sent))
    )

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.post(
            "/api/chat",
            json={"messages": _messages_payload(), "specialty": _specialty_payload("neurology")},
        )

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["sessionId"].startswith("session_")
    assert body["message"]["role"] == "assistant"
    assert body["message"]["content"] == "Consider migraine; rule out meningitis."
    assert body["message"]["id"]
    assert body["message"]["timestamp"]

    request_body = sent[0]
    assert request_body["messages"][0]["role"] == "system"
    assert request_body["messages"][0]["content"] == get_specialty_by_id("neurology").system_prompt
    assert len(request_body["messages"]) == 3
    assert request_body["messages"][-1] == {"role": "user", "content": "Headache and photophobia"}


async def test_proxy_reports_upstream_failure_envelope():
    app.dependency_overrides[get_chat_service] = lambda: ChatService(client=completion_client(fail_with(502)))

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.post(
            "/api/chat",
            json={"messages": _messages_payload(), "specialty": _specialty_payload("cardiology")},
        )

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"error": "AI service error: 502", "message": "Failed to process chat request"}


async def test_unexpected_failure_still_answers_json_envelope():
    def explode(request):
        raise RuntimeError("boom")

    app.dependency_overrides[get_chat_service] = lambda: ChatService(client=completion_client(explode))

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.post(
            "/api/chat",
            json={"messages": _messages_payload(), "specialty": _specialty_payload("pediatrics")},
        )

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"error": "Internal server error", "message": "Failed to process chat request"}
