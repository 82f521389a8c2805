from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class OAuthTokenResponse(BaseModel):
    """Token endpoint reply; both tokens are required."""

    access_token: str
    refresh_token: str
    token_type: Optional[str] = None
    expires_in: Optional[int] = None


class OAuthCallbackQuery(BaseModel):
    """Query parameters of the provider redirect.

    Values must be plain strings; a repeated parameter fails validation.
    """

    model_config = ConfigDict(extra="ignore")

    code: Optional[str] = None
    error: Optional[str] = None
    state: Optional[str] = None


class CallbackErrorType(str, Enum):
    MISSING_CODE = "missing_code"
    AUTH = "auth"
    CSRF = "csrf"
    TOKEN_FAILED = "token_failed"


class CallbackResult(BaseModel):
    """Outcome of the callback flow: where to send the browser."""

    success: bool
    error_type: Optional[CallbackErrorType] = None
    details: Optional[str] = Field(default=None, description="Diagnostic text for the error view")
