from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional, Sequence

from pydantic import BaseModel

from src.portal.domain.models.chat import ChatMessage, ChatRole


class ExportedMessage(BaseModel):
    role: ChatRole
    content: str
    timestamp: datetime


class TranscriptExport(BaseModel):
    """Downloadable consultation transcript."""

    specialty: Optional[str] = None
    timestamp: datetime
    doctor: Optional[str] = None
    messages: List[ExportedMessage]


def build_export(
    specialty_name: Optional[str],
    doctor_name: Optional[str],
    messages: Sequence[ChatMessage],
    *,
    now: Optional[datetime] = None,
) -> TranscriptExport:
    return TranscriptExport(
        specialty=specialty_name,
        timestamp=now or datetime.now(timezone.utc),
        doctor=doctor_name,
        messages=[
            ExportedMessage(role=msg.role, content=msg.content, timestamp=msg.timestamp) for msg in messages
        ],
    )


def export_filename(specialty_name: Optional[str], when: Optional[datetime] = None) -> str:
    """``consultation-<specialty>-<YYYY-MM-DD>.json``"""

    day = (when or datetime.now(timezone.utc)).date().isoformat()
    slug = (specialty_name or "unknown").lower()
    return f"consultation-{slug}-{day}.json"


def render_export(export: TranscriptExport) -> str:
    return export.model_dump_json(indent=2)
