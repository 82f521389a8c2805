from jose import jwt

from partner_oauth.core.security import (
    generate_state,
    sign_session_id,
    states_match,
    unsign_session_id,
)


def test_generate_state_is_url_safe_and_unique():
    states = {generate_state() for _ in range(50)}

    assert len(states) == 50
    for state in states:
        assert len(state) >= 22
        assert all(c.isalnum() or c in "-_" for c in state)


def test_states_match_is_exact():
    assert states_match("abc", "abc")
    assert not states_match("abc", "abcd")
    assert not states_match("ABC", "abc")
    assert not states_match("abc ", "abc")


def test_missing_state_never_matches():
    assert not states_match(None, "abc")
    assert not states_match("abc", None)
    assert not states_match(None, None)


def test_signed_session_id_round_trip():
    cookie = sign_session_id("sid-123", "secret")

    assert cookie.count(".") == 2
    assert unsign_session_id(cookie, "secret") == "sid-123"


def test_unsign_rejects_tampering():
    cookie = sign_session_id("sid-123", "secret")
    header, _, signature = cookie.split(".")
    other_payload = sign_session_id("sid-999", "secret").split(".")[1]

    assert unsign_session_id(cookie, "other-secret") is None
    assert unsign_session_id(f"{header}.{other_payload}.{signature}", "secret") is None
    assert unsign_session_id(cookie + "é", "secret") is None
    assert unsign_session_id(cookie + "x", "secret") is None
    assert unsign_session_id(cookie + "!", "secret") is None
    assert unsign_session_id("sid-123", "secret") is None
    assert unsign_session_id("", "secret") is None
    assert unsign_session_id(None, "secret") is None


def test_unsign_requires_session_claim():
    token = jwt.encode({"user": "sid-123"}, "secret", algorithm="HS256")

    assert unsign_session_id(token, "secret") is None
