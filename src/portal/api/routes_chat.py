from __future__ import annotations

import logging
from typing import List, Optional, Union

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.portal.domain.models.chat import ChatMessage
from src.portal.domain.models.specialty import MedicalSpecialty
from src.portal.security import get_api_key
from src.portal.services.audit.service import audit_service
from src.portal.services.chat.client import CompletionError
from src.portal.services.chat.service import ChatResponse, ChatService, chat_service


logger = logging.getLogger("chat")

router = APIRouter(
    prefix="",
    tags=["chat"],
    dependencies=[Depends(get_api_key)],
)


class ChatProxyRequest(BaseModel):
    messages: Optional[List[ChatMessage]] = None
    specialty: Optional[MedicalSpecialty] = None


def get_chat_service() -> ChatService:
    return chat_service


@router.post("/chat", response_model=ChatResponse)
async def chat_completion(
    payload: Optional[ChatProxyRequest] = Body(default=None),
    chat: ChatService = Depends(get_chat_service),
) -> Union[ChatResponse, JSONResponse]:
    """Relay a transcript to the completion endpoint on the caller's behalf.

    Answers 400 when ``messages`` or ``specialty`` is missing and 500 with an
    ``{error, message}`` envelope when the upstream call fails.
    """

    if payload is None or payload.messages is None or payload.specialty is None:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Messages and specialty are required"},
        )

    try:
        response = await chat.send_message(payload.messages, payload.specialty)
    except CompletionError as exc:
        audit_service.log_event(
            action="chat_completion_failed",
            resource_type="chat",
            extra={"specialty": payload.specialty.id, "status_code": exc.status_code},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": exc.reason, "message": "Failed to process chat request"},
        )
    except Exception:
        logger.exception("Unexpected error while relaying chat request")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error", "message": "Failed to process chat request"},
        )

    audit_service.log_event(
        action="chat_completion",
        resource_type="chat",
        resource_id=response.session_id,
        extra={"specialty": payload.specialty.id, "message_count": len(payload.messages)},
    )
    return response
