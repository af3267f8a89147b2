from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.portal.domain.models.specialty import MedicalSpecialty


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class SessionStatus(str, Enum):
    ACTIVE = "active"
    ENDED = "ended"
    ARCHIVED = "archived"


class FileAttachment(BaseModel):
    """A file attached to a chat turn.

    ``url`` holds the inline ``data:`` URL once the file has been read. On
    transcript messages it is left empty: only the metadata is displayed.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    type: str = ""
    size: int = 0
    url: str = ""
    uploaded_at: datetime = Field(alias="uploadedAt")


class ChatMessage(BaseModel):
    id: str
    role: ChatRole
    content: str
    timestamp: datetime
    attachments: Optional[List[FileAttachment]] = None

    @field_validator("attachments")
    @classmethod
    def _empty_attachments_as_none(cls, value: Optional[List[FileAttachment]]) -> Optional[List[FileAttachment]]:
        # A message either has no attachments or a non-empty list of them.
        return value or None


class ChatSession(BaseModel):
    """A single consultation transcript with one specialty assistant."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    user_id: str = Field(alias="userId")
    specialty: MedicalSpecialty
    title: str
    messages: List[ChatMessage] = Field(default_factory=list)
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")
    status: SessionStatus = SessionStatus.ACTIVE
