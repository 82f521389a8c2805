from fastapi import HTTPException, status
from typing import Optional, Dict, Any


class BaseAPIException(HTTPException):
    """Base exception for API errors"""
    def __init__(
        self,
        status_code: int,
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.error_code = error_code
        self.message = message
        self.details = details or {}

        super().__init__(status_code=status_code, detail={"error": message})

    def __str__(self) -> str:  # Ensure str(e) returns the human message
        return self.message


class AuthenticationError(BaseAPIException):
    """Session carries no access token"""
    def __init__(self, message: str = "Not authenticated", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="AUTH_001",
            message=message,
            details=details
        )


class UpstreamAPIError(BaseAPIException):
    """Downstream (partner or provider) API call failed"""
    def __init__(self, message: str = "API call failed", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="UPSTREAM_001",
            message=message,
            details=details
        )


class InternalServerError(BaseAPIException):
    """Internal server errors"""
    def __init__(self, message: str = "Internal server error", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="INTERNAL_001",
            message=message,
            details=details
        )


class OAuthError(Exception):
    """Token exchange against the provider failed.

    Raised inside the callback flow and always converted into an error-view
    redirect there, so it is not an HTTP exception.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SessionStoreError(Exception):
    """Session backend could not read, write or destroy a record"""
    pass
