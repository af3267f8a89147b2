from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Optional, Sequence
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from src.portal.config import settings
from src.portal.domain.models.chat import ChatMessage, ChatRole, FileAttachment
from src.portal.domain.models.specialty import MedicalSpecialty
from src.portal.services.chat.client import CompletionClient, get_completion_client
from src.portal.services.chat.formatter import format_messages


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: ChatMessage
    # Correlation token for this one exchange, not a durable session.
    session_id: str = Field(alias="sessionId")


def new_message_id() -> str:
    return uuid4().hex


def new_session_id() -> str:
    return f"session_{int(time.time() * 1000)}"


class ChatService:
    """Formats a transcript for a specialty and relays it to the completion endpoint.

    This is the one implementation shared by the HTTP proxy route and by
    in-process callers such as the consultation service.
    """

    def __init__(self, client: Optional[CompletionClient] = None) -> None:
        self._client = client

    @property
    def client(self) -> CompletionClient:
        return self._client or get_completion_client()

    async def send_message(
        self,
        messages: Sequence[ChatMessage],
        specialty: MedicalSpecialty,
        attachments: Optional[Sequence[FileAttachment]] = None,
    ) -> ChatResponse:
        """Return the assistant reply for ``messages``.

        Raises :class:`~src.portal.services.chat.client.CompletionError` when
        the upstream call fails or answers in an unexpected shape.
        """

        formatted = format_messages(messages, specialty, attachments)
        result = await self.client.complete(formatted, specialty.model or settings.default_model)

        reply = ChatMessage(
            id=new_message_id(),
            role=ChatRole.ASSISTANT,
            content=result.content,
            timestamp=datetime.now(timezone.utc),
        )
        return ChatResponse(message=reply, session_id=new_session_id())


chat_service = ChatService()
