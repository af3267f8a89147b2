from __future__ import annotations

from enum import Enum
from typing import List, Literal, Union

from pydantic import BaseModel


class CompletionRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class TextPart(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ImageURL(BaseModel):
    url: str


class ImageURLPart(BaseModel):
    type: Literal["image_url"] = "image_url"
    image_url: ImageURL


class FileData(BaseModel):
    filename: str
    file_data: str


class FilePart(BaseModel):
    type: Literal["file"] = "file"
    file: FileData


ContentPart = Union[TextPart, ImageURLPart, FilePart]


class CompletionMessage(BaseModel):
    """One entry of the ``messages`` array sent to the completion endpoint.

    ``content`` is plain text, or a list of typed parts for a multimodal turn.
    """

    role: CompletionRole
    content: Union[str, List[ContentPart]]


class CompletionRequest(BaseModel):
    model: str
    messages: List[CompletionMessage]
    temperature: float
    max_tokens: int
