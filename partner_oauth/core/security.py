import hmac
import re
import secrets
from typing import Optional

from jose import jwt, JWTError

STATE_BYTES = 32
SESSION_ID_BYTES = 32
SESSION_JWT_ALGORITHM = "HS256"
_COMPACT_JWT = re.compile(r"[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+")


def generate_state() -> str:
    """Anti-forgery token for the authorize redirect (URL-safe)."""
    return secrets.token_urlsafe(STATE_BYTES)


def generate_session_id() -> str:
    return secrets.token_urlsafe(SESSION_ID_BYTES)


def states_match(received: Optional[str], stored: Optional[str]) -> bool:
    """Exact comparison of callback state against the session's stored state.

    A session without a stored state never matches.
    """
    if received is None or stored is None:
        return False
    return hmac.compare_digest(received.encode("utf-8"), stored.encode("utf-8"))


def sign_session_id(session_id: str, secret: str) -> str:
    return jwt.encode({"sid": session_id}, secret, algorithm=SESSION_JWT_ALGORITHM)


def unsign_session_id(cookie_value: Optional[str], secret: str) -> Optional[str]:
    """Return the session id if the cookie signature verifies, else None."""
    # base64 decoding skips non-alphabet characters; reject them up front
    if not cookie_value or not _COMPACT_JWT.fullmatch(cookie_value):
        return None
    try:
        payload = jwt.decode(cookie_value, secret, algorithms=[SESSION_JWT_ALGORITHM])
    except JWTError:
        return None

    session_id = payload.get("sid")
    if not isinstance(session_id, str) or not session_id:
        return None
    return session_id
