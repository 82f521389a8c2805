from typing import Dict, Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )
    # Application
    APP_NAME: str = "Ecair Partner OAuth Example"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    PORT: int = 3000
    APP_BASE_URL: str = "http://localhost:3000"
    STATIC_DIR: Optional[str] = None

    # OAuth provider (Clerk)
    ECAIR_CLERK_DOMAIN: str = ""
    CLERK_OAUTH_CLIENT_ID: str = ""
    CLERK_OAUTH_CLIENT_SECRET: str = ""
    OAUTH_SCOPE: str = "profile email"

    # Partner API
    ECAIR_API_URL: str = ""
    ECAIR_API_TEST_PATH: str = "/v1/credit/oauth-test"

    # Outbound HTTP
    HTTP_TIMEOUT_SECONDS: float = 30.0

    # Session
    SESSION_SECRET: str = "dev-secret-change-me"
    SESSION_COOKIE_NAME: str = "sid"
    SESSION_COOKIE_SECURE: bool = False
    SESSION_TTL_SECONDS: int = 86400
    SESSION_BACKEND: Literal["memory", "redis"] = "memory"

    # Redis (SESSION_BACKEND=redis)
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: Optional[str] = None

    @property
    def oauth_urls(self) -> Dict[str, str]:
        """Provider endpoints derived from the Clerk domain"""

        base = f"https://{self.ECAIR_CLERK_DOMAIN}/oauth"
        return {
            "authorize": f"{base}/authorize",
            "token": f"{base}/token",
            "userinfo": f"{base}/userinfo",
            "token_info": f"{base}/token_info",
        }

    @property
    def redirect_uri(self) -> str:
        return f"{self.APP_BASE_URL.rstrip('/')}/callback"

    @property
    def partner_test_url(self) -> str:
        return f"{self.ECAIR_API_URL.rstrip('/')}{self.ECAIR_API_TEST_PATH}"
