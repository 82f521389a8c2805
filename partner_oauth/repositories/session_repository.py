"""
Session storage keyed by opaque session id.

Handlers only see ``SessionRepository``; the backend (process memory or
Redis) is picked by configuration.
"""

import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple

import redis.asyncio as redis
from redis.exceptions import RedisError

from partner_oauth.config import Settings
from partner_oauth.core.exceptions import SessionStoreError
from partner_oauth.schemas.session import SessionData

logger = logging.getLogger(__name__)


class SessionRepository(ABC):
    """get / set / destroy by session id"""

    def __init__(self, ttl_seconds: int):
        self.ttl_seconds = ttl_seconds

    @abstractmethod
    async def get(self, session_id: str) -> Optional[SessionData]:
        ...

    @abstractmethod
    async def set(self, session_id: str, data: SessionData) -> None:
        ...

    @abstractmethod
    async def destroy(self, session_id: str) -> None:
        ...

    async def close(self) -> None:
        return None


class InMemorySessionRepository(SessionRepository):
    """Process-local store; lost on restart."""

    def __init__(self, ttl_seconds: int):
        super().__init__(ttl_seconds)
        self._records: Dict[str, Tuple[float, str]] = {}

    async def get(self, session_id: str) -> Optional[SessionData]:
        record = self._records.get(session_id)
        if record is None:
            return None

        expires_at, payload = record
        if expires_at < time.monotonic():
            self._records.pop(session_id, None)
            return None
        return SessionData.model_validate_json(payload)

    def _purge_expired(self, now: float) -> None:
        expired = [sid for sid, (expires_at, _) in self._records.items() if expires_at < now]
        for sid in expired:
            del self._records[sid]

    async def set(self, session_id: str, data: SessionData) -> None:
        now = time.monotonic()
        self._purge_expired(now)
        # Stored serialized so callers never share a mutable record
        self._records[session_id] = (now + self.ttl_seconds, data.model_dump_json())

    async def destroy(self, session_id: str) -> None:
        self._records.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._records)


class RedisSessionRepository(SessionRepository):
    """Redis-backed store with lazy connection.

    Reads degrade to "no session" when Redis is unreachable; writes and
    destroys raise ``SessionStoreError`` so callers can decide.
    """

    KEY_PREFIX = "session:"

    def __init__(self, settings: Settings):
        super().__init__(settings.SESSION_TTL_SECONDS)
        self._settings = settings
        self._client: Optional[redis.Redis] = None

    def _key(self, session_id: str) -> str:
        return f"{self.KEY_PREFIX}{session_id}"

    async def _get_client(self) -> redis.Redis:
        """Lazy connection with health check"""
        if self._client is None:
            redis_kwargs = {
                "host": self._settings.REDIS_HOST,
                "port": self._settings.REDIS_PORT,
                "db": self._settings.REDIS_DB,
                "decode_responses": True,
                "socket_connect_timeout": 5,
                "socket_keepalive": True,
                "health_check_interval": 30,
            }

            # Only add password if it's set
            if self._settings.REDIS_PASSWORD:
                redis_kwargs["password"] = self._settings.REDIS_PASSWORD

            client = redis.Redis(**redis_kwargs)
            try:
                await client.ping()
            except RedisError as e:
                raise SessionStoreError(f"Redis connection failed: {e}") from e
            self._client = client
        return self._client

    async def get(self, session_id: str) -> Optional[SessionData]:
        try:
            client = await self._get_client()
            value = await client.get(self._key(session_id))
        except (SessionStoreError, RedisError) as e:
            logger.warning(f"Redis GET failed for session {session_id[:8]}...: {e}")
            return None

        if not value:
            return None
        try:
            return SessionData.model_validate(json.loads(value))
        except ValueError as e:
            logger.warning(f"Discarding unreadable session {session_id[:8]}...: {e}")
            return None

    async def set(self, session_id: str, data: SessionData) -> None:
        try:
            client = await self._get_client()
            await client.setex(self._key(session_id), self.ttl_seconds, data.model_dump_json())
        except RedisError as e:
            raise SessionStoreError(f"Redis SET failed: {e}") from e

    async def destroy(self, session_id: str) -> None:
        try:
            client = await self._get_client()
            await client.delete(self._key(session_id))
        except RedisError as e:
            raise SessionStoreError(f"Redis DEL failed: {e}") from e

    async def close(self) -> None:
        """Close connection pool on app shutdown"""
        if self._client:
            await self._client.aclose()
            self._client = None


def build_session_repository(settings: Settings) -> SessionRepository:
    if settings.SESSION_BACKEND == "redis":
        return RedisSessionRepository(settings)
    return InMemorySessionRepository(ttl_seconds=settings.SESSION_TTL_SECONDS)
