from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Set
from uuid import uuid4

from src.portal.domain.models.chat import ChatMessage, ChatRole, ChatSession, SessionStatus
from src.portal.domain.models.specialty import MedicalSpecialty
from src.portal.services.chat.attachments import UploadedFile, attachment_metadata, read_attachments
from src.portal.services.chat.client import CompletionError
from src.portal.services.chat.service import ChatService, chat_service, new_message_id
from src.portal.services.specialties.registry import get_specialty_by_id


logger = logging.getLogger("chat")


class ConsultationError(Exception):
    pass


class ConsultationNotFoundError(ConsultationError):
    pass


class SpecialtyNotFoundError(ConsultationError):
    pass


class EmptyMessageError(ConsultationError):
    pass


class ConsultationBusyError(ConsultationError):
    pass


class ConsultationClosedError(ConsultationError):
    pass


def welcome_message(specialty: MedicalSpecialty) -> ChatMessage:
    return ChatMessage(
        id="welcome",
        role=ChatRole.ASSISTANT,
        content=(
            f"Hello! I'm your AI {specialty.name} specialist. I'm here to assist you with medical "
            "consultations, diagnostic support, and clinical guidance in "
            f"{specialty.name.lower()}.\n\n"
            "How can I help you today? You can:\n"
            "• Ask about symptoms and conditions\n"
            "• Upload medical images or documents for analysis\n"
            "• Request treatment recommendations\n"
            "• Discuss diagnostic approaches\n"
            "• Get clinical decision support\n\n"
            "Please remember that while I provide evidence-based guidance, final clinical decisions "
            "should always involve direct patient assessment and your professional judgment."
        ),
        timestamp=datetime.now(timezone.utc),
    )


def _apology(text: str) -> ChatMessage:
    return ChatMessage(
        id=f"error_{int(time.time() * 1000)}_{uuid4().hex[:6]}",
        role=ChatRole.ASSISTANT,
        content=text,
        timestamp=datetime.now(timezone.utc),
    )


class InMemoryConsultationService:
    """In-process consultations with a specialty assistant.

    Transcripts live in memory only and are gone after a restart. Each
    consultation accepts one submission at a time; the downstream call is
    never allowed to break the transcript, failures are recorded as an
    assistant apology instead.
    """

    def __init__(self, chat: Optional[ChatService] = None) -> None:
        self._chat = chat or chat_service
        self._sessions: Dict[str, ChatSession] = {}
        self._in_flight: Set[str] = set()

    def start(self, *, user_id: str, specialty_id: str, title: Optional[str] = None) -> ChatSession:
        specialty = get_specialty_by_id(specialty_id)
        if specialty is None:
            raise SpecialtyNotFoundError(f"Unknown specialty '{specialty_id}'")

        now = datetime.now(timezone.utc)
        session = ChatSession(
            id=f"consultation_{uuid4().hex}",
            user_id=user_id,
            specialty=specialty,
            title=title or f"{specialty.name} consultation",
            messages=[welcome_message(specialty)],
            created_at=now,
            updated_at=now,
        )
        self._sessions[session.id] = session
        return session

    def get(self, session_id: str) -> Optional[ChatSession]:
        return self._sessions.get(session_id)

    def list_for_user(self, user_id: str) -> List[ChatSession]:
        sessions = [s for s in self._sessions.values() if s.user_id == user_id]
        return sorted(sessions, key=lambda s: s.updated_at, reverse=True)

    def end(self, session_id: str) -> ChatSession:
        session = self._require(session_id)
        session.status = SessionStatus.ENDED
        session.updated_at = datetime.now(timezone.utc)
        return session

    def _require(self, session_id: str) -> ChatSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise ConsultationNotFoundError("Consultation not found")
        return session

    async def submit(
        self,
        session_id: str,
        content: str,
        files: Optional[Sequence[UploadedFile]] = None,
    ) -> ChatMessage:
        """Append a user turn, relay it, and append the assistant's answer.

        Returns the appended assistant message, which is an apology when the
        completion call failed.
        """

        session = self._require(session_id)
        text = content.strip()
        if not text and not files:
            raise EmptyMessageError("Message is empty")
        if session.status != SessionStatus.ACTIVE:
            raise ConsultationClosedError("Consultation has ended")
        if session_id in self._in_flight:
            raise ConsultationBusyError("A message is already being processed")

        self._in_flight.add(session_id)
        try:
            attachments = await read_attachments(files) if files else []
            user_message = ChatMessage(
                id=new_message_id(),
                role=ChatRole.USER,
                content=text,
                timestamp=datetime.now(timezone.utc),
                attachments=attachment_metadata(attachments),
            )
            session.messages.append(user_message)

            try:
                response = await self._chat.send_message(session.messages, session.specialty, attachments)
                reply = response.message
            except CompletionError as exc:
                reply = _apology(f"I apologize, but I encountered an error: {exc.reason}. Please try again.")
            except Exception:
                logger.exception("Unexpected error while relaying consultation %s", session_id)
                reply = _apology(
                    "I apologize, but I encountered a technical error. Please try again in a moment."
                )

            session.messages.append(reply)
            session.updated_at = datetime.now(timezone.utc)
            return reply
        finally:
            self._in_flight.discard(session_id)


consultation_service = InMemoryConsultationService()
