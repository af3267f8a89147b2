from __future__ import annotations

from typing import List, Optional, Sequence

from src.portal.config import settings
from src.portal.domain.chat.completion import (
    CompletionMessage,
    CompletionRequest,
    CompletionRole,
    ContentPart,
    FileData,
    FilePart,
    ImageURL,
    ImageURLPart,
    TextPart,
)
from src.portal.domain.models.chat import ChatMessage, FileAttachment
from src.portal.domain.models.specialty import MedicalSpecialty


def attachment_part(attachment: FileAttachment) -> ContentPart:
    """Map a resolved attachment onto its multimodal content part.

    Images are sent as ``image_url`` parts; every other type goes out as a
    ``file`` part carrying the original filename.
    """

    if attachment.type.startswith("image/"):
        return ImageURLPart(image_url=ImageURL(url=attachment.url))
    return FilePart(file=FileData(filename=attachment.name, file_data=attachment.url))


def format_messages(
    transcript: Sequence[ChatMessage],
    specialty: MedicalSpecialty,
    attachments: Optional[Sequence[FileAttachment]] = None,
) -> List[CompletionMessage]:
    """Build the ``messages`` array for a completion request.

    The system prompt is always first and is derived from ``specialty`` on
    every call. Past messages are forwarded as plain text; their attachments
    are display-only and never replayed. When ``attachments`` are given for
    the current turn, the last message is rewritten into a multimodal user
    message: a text part followed by one part per attachment. Attachments
    without inline data (``url`` empty) are dropped; if none remain the last
    message is forwarded as plain text.
    """

    formatted: List[CompletionMessage] = [
        CompletionMessage(role=CompletionRole.SYSTEM, content=specialty.system_prompt)
    ]
    if not transcript:
        return formatted

    resolved = [att for att in attachments or () if att.url]
    if not resolved:
        formatted.extend(
            CompletionMessage(role=CompletionRole(msg.role.value), content=msg.content) for msg in transcript
        )
        return formatted

    *prior, last = transcript
    formatted.extend(
        CompletionMessage(role=CompletionRole(msg.role.value), content=msg.content) for msg in prior
    )

    parts: List[ContentPart] = [TextPart(text=last.content or "")]
    parts.extend(attachment_part(att) for att in resolved)
    formatted.append(CompletionMessage(role=CompletionRole.USER, content=parts))
    return formatted


def build_completion_request(
    messages: List[CompletionMessage],
    model: str,
    *,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
) -> CompletionRequest:
    return CompletionRequest(
        model=model,
        messages=messages,
        temperature=settings.completion_temperature if temperature is None else temperature,
        max_tokens=settings.completion_max_tokens if max_tokens is None else max_tokens,
    )
