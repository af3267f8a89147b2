from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from src.portal.domain.models.chat import ChatMessage
from src.portal.security import get_api_key
from src.portal.services.audit.service import audit_service
from src.portal.services.consultation.export import build_export, export_filename, render_export

router = APIRouter(
    prefix="/transcripts",
    tags=["transcripts"],
    dependencies=[Depends(get_api_key)],
)


class TranscriptExportRequest(BaseModel):
    specialty: Optional[str] = None
    doctor: Optional[str] = None
    messages: List[ChatMessage]


@router.post("/export")
async def export_transcript(payload: TranscriptExportRequest) -> Response:
    """Render a client-held transcript as a downloadable JSON document."""

    export = build_export(payload.specialty, payload.doctor, payload.messages)
    audit_service.log_event(
        action="export_transcript",
        resource_type="transcript",
        extra={"message_count": len(export.messages)},
    )
    return Response(
        content=render_export(export),
        media_type="application/json",
        headers={
            "Content-Disposition": f'attachment; filename="{export_filename(payload.specialty, export.timestamp)}"'
        },
    )
