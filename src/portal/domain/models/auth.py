from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AuthPointer(BaseModel):
    """The persisted record naming the logged-in user.

    Its presence implies an authenticated session; ``timestamp`` is the login
    time in epoch milliseconds.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    timestamp: int
