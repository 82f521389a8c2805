from .oauth import OAuthTokenResponse, OAuthCallbackQuery, CallbackErrorType, CallbackResult
from .session import SessionData, AuthStatusResponse
