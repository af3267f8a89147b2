from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class MedicalSpecialty(BaseModel):
    """A medical domain with the prompt and model that condition the assistant."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    name: str
    description: str
    system_prompt: str = Field(alias="systemPrompt")
    color: str
    icon: str
    model: str
