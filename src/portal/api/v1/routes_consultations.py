from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile, status
from pydantic import BaseModel, ConfigDict, Field

from src.portal.domain.models.chat import ChatMessage, ChatSession
from src.portal.domain.models.user import User
from src.portal.security import get_api_key, get_current_user
from src.portal.services.audit.service import audit_service
from src.portal.services.consultation.export import build_export, export_filename, render_export
from src.portal.services.consultation.service import (
    ConsultationBusyError,
    ConsultationClosedError,
    EmptyMessageError,
    InMemoryConsultationService,
    SpecialtyNotFoundError,
    consultation_service,
)

router = APIRouter(
    prefix="/consultations",
    tags=["consultations"],
    dependencies=[Depends(get_api_key)],
)


class StartConsultationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    specialty_id: str = Field(alias="specialtyId")
    title: Optional[str] = None


class ConsultationReply(BaseModel):
    message: ChatMessage
    consultation: ChatSession


def get_consultation_service() -> InMemoryConsultationService:
    return consultation_service


def _owned_consultation(
    consultation_id: str,
    current_user: User,
    consultations: InMemoryConsultationService,
) -> ChatSession:
    session = consultations.get(consultation_id)
    # Consultations of other users are reported as missing.
    if session is None or session.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Consultation not found")
    return session


@router.post("/", response_model=ChatSession, status_code=status.HTTP_201_CREATED)
async def start_consultation(
    payload: StartConsultationRequest,
    current_user: User = Depends(get_current_user),
    consultations: InMemoryConsultationService = Depends(get_consultation_service),
) -> ChatSession:
    try:
        session = consultations.start(
            user_id=current_user.id,
            specialty_id=payload.specialty_id,
            title=payload.title,
        )
    except SpecialtyNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Specialty not found") from exc

    audit_service.log_event(
        action="start_consultation",
        resource_type="consultation",
        resource_id=session.id,
        extra={"specialty": session.specialty.id},
    )
    return session


@router.get("/", response_model=List[ChatSession])
async def list_consultations(
    current_user: User = Depends(get_current_user),
    consultations: InMemoryConsultationService = Depends(get_consultation_service),
) -> List[ChatSession]:
    return consultations.list_for_user(current_user.id)


@router.get("/{consultation_id}", response_model=ChatSession)
async def get_consultation(
    consultation_id: str,
    current_user: User = Depends(get_current_user),
    consultations: InMemoryConsultationService = Depends(get_consultation_service),
) -> ChatSession:
    return _owned_consultation(consultation_id, current_user, consultations)


@router.post("/{consultation_id}/messages", response_model=ConsultationReply)
async def send_consultation_message(
    consultation_id: str,
    content: str = Form(""),
    files: List[UploadFile] = File(default=[]),
    current_user: User = Depends(get_current_user),
    consultations: InMemoryConsultationService = Depends(get_consultation_service),
) -> ConsultationReply:
    """Submit one turn (text and/or files) and return the assistant's answer.

    Upstream failures do not produce an error status: the answer is then an
    apology message that is also recorded in the transcript.
    """

    session = _owned_consultation(consultation_id, current_user, consultations)
    try:
        reply = await consultations.submit(session.id, content, files)
    except EmptyMessageError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except (ConsultationBusyError, ConsultationClosedError) as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    audit_service.log_event(
        action="consultation_message",
        resource_type="consultation",
        resource_id=session.id,
        extra={"attachment_count": len(files), "message_count": len(session.messages)},
    )
    return ConsultationReply(message=reply, consultation=session)


@router.post("/{consultation_id}/end", response_model=ChatSession)
async def end_consultation(
    consultation_id: str,
    current_user: User = Depends(get_current_user),
    consultations: InMemoryConsultationService = Depends(get_consultation_service),
) -> ChatSession:
    session = _owned_consultation(consultation_id, current_user, consultations)
    return consultations.end(session.id)


@router.get("/{consultation_id}/export")
async def export_consultation(
    consultation_id: str,
    current_user: User = Depends(get_current_user),
    consultations: InMemoryConsultationService = Depends(get_consultation_service),
) -> Response:
    session = _owned_consultation(consultation_id, current_user, consultations)
    export = build_export(session.specialty.name, current_user.name, session.messages)

    audit_service.log_event(
        action="export_consultation",
        resource_type="consultation",
        resource_id=session.id,
        extra={"message_count": len(export.messages)},
    )
    return Response(
        content=render_export(export),
        media_type="application/json",
        headers={
            "Content-Disposition": f'attachment; filename="{export_filename(session.specialty.name, export.timestamp)}"'
        },
    )
