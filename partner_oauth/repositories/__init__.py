# Repository layer - session storage backends

from .session_repository import (
    SessionRepository,
    InMemorySessionRepository,
    RedisSessionRepository,
    build_session_repository,
)

__all__ = [
    "SessionRepository",
    "InMemorySessionRepository",
    "RedisSessionRepository",
    "build_session_repository",
]
