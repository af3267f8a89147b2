from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class User(BaseModel):
    """A registered medical professional.

    Field names are snake_case in Python; the JSON documents and API payloads
    use the camelCase aliases (``licenseNumber``, ``createdAt``).
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    email: EmailStr
    name: str
    specialty: Optional[str] = None
    credentials: Optional[str] = None
    license_number: Optional[str] = Field(default=None, alias="licenseNumber")
    hospital: Optional[str] = None
    created_at: datetime = Field(alias="createdAt")


class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str
    password: str
    # Optional so that programmatic callers may skip the confirmation step.
    confirm_password: Optional[str] = Field(default=None, alias="confirmPassword")
    name: str
    specialty: Optional[str] = None
    credentials: Optional[str] = None
    license_number: Optional[str] = Field(default=None, alias="licenseNumber")
    hospital: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str


class ProfileUpdate(BaseModel):
    """Partial profile update; only fields explicitly set are applied."""

    model_config = ConfigDict(populate_by_name=True)

    email: Optional[EmailStr] = None
    name: Optional[str] = None
    specialty: Optional[str] = None
    credentials: Optional[str] = None
    license_number: Optional[str] = Field(default=None, alias="licenseNumber")
    hospital: Optional[str] = None
