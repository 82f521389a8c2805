from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SessionData(BaseModel):
    """Server-side session record."""

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    oauth_state: Optional[str] = None


class AuthStatusResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_authenticated: bool = Field(alias="isAuthenticated")
