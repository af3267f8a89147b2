from __future__ import annotations

import asyncio
import base64
import logging
from datetime import datetime, timezone
from typing import List, Optional, Protocol, Sequence
from uuid import uuid4

from src.portal.config import settings
from src.portal.domain.models.chat import FileAttachment


logger = logging.getLogger("attachments")


class UploadedFile(Protocol):
    """The subset of ``fastapi.UploadFile`` the attachment reader relies on."""

    filename: Optional[str]
    content_type: Optional[str]

    async def read(self) -> bytes:  # pragma: no cover - interface
        ...


def to_data_url(content: bytes, content_type: str) -> str:
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


async def read_attachment(file: UploadedFile) -> Optional[FileAttachment]:
    """Read one upload into an inline attachment, or None if it is unusable."""

    name = file.filename or "attachment"
    content_type = file.content_type or "application/octet-stream"
    try:
        content = await file.read()
    except Exception:
        logger.exception("Failed to read attachment %s", name)
        return None

    if len(content) > settings.max_attachment_bytes:
        logger.warning(
            "Dropping attachment %s: %s bytes exceeds limit of %s",
            name,
            len(content),
            settings.max_attachment_bytes,
        )
        return None

    return FileAttachment(
        id=f"file_{uuid4().hex}",
        name=name,
        type=content_type,
        size=len(content),
        url=to_data_url(content, content_type),
        uploaded_at=datetime.now(timezone.utc),
    )


async def read_attachments(files: Sequence[UploadedFile]) -> List[FileAttachment]:
    """Read all uploads concurrently; files that fail to read are dropped."""

    results = await asyncio.gather(*(read_attachment(f) for f in files))
    return [attachment for attachment in results if attachment is not None]


def attachment_metadata(attachments: Sequence[FileAttachment]) -> List[FileAttachment]:
    """Display-only copies of ``attachments`` with the inline data removed."""

    return [attachment.model_copy(update={"url": ""}) for attachment in attachments]
