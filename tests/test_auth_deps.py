"""Tests for token extraction and the authorization gate"""

import asyncio

import pytest
from starlette.requests import Request

from portal.auth.session_store import SessionStore
from portal.utils.exceptions import Forbidden, Unauthenticated
from portal_web.auth_deps import authenticate, authorize_admin, extract_token


def make_request(headers=None) -> Request:
    raw_headers = [
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in (headers or {}).items()
    ]
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw_headers})


def test_extract_token_from_bearer_header():
    assert extract_token(make_request({"Authorization": "Bearer abc123"})) == "abc123"


def test_extract_token_from_raw_header():
    assert extract_token(make_request({"Authorization": "abc123"})) == "abc123"


def test_extract_token_from_cookie():
    request = make_request({"Cookie": "theme=dark; sessionId=abc123"})
    assert extract_token(request) == "abc123"


def test_header_takes_precedence_over_cookie():
    request = make_request({"Authorization": "Bearer fromheader", "Cookie": "sessionId=fromcookie"})
    assert extract_token(request) == "fromheader"


def test_custom_cookie_name():
    request = make_request({"Cookie": "portal_sid=abc123"})
    assert extract_token(request) is None
    assert extract_token(request, cookie_name="portal_sid") == "abc123"


def test_no_token():
    assert extract_token(make_request()) is None
    assert extract_token(make_request({"Authorization": "Bearer "})) is None


def test_authenticate_resolves_session():
    store = SessionStore()
    token = store.create("alice", "a@x.com", "user")

    session = asyncio.run(authenticate(token, store))
    assert session.username == "alice"


@pytest.mark.parametrize("token", [None, "", "not-a-token"])
def test_authenticate_rejects_missing_or_unknown(token):
    with pytest.raises(Unauthenticated):
        asyncio.run(authenticate(token, SessionStore()))


def test_authenticate_fails_after_destroy():
    store = SessionStore()
    token = store.create("alice", "a@x.com", "user")
    store.destroy(token)

    with pytest.raises(Unauthenticated):
        asyncio.run(authenticate(token, store))


def test_authorize_admin_branches():
    store = SessionStore()
    admin_token = store.create("root", "root@x.com", "admin")
    user_token = store.create("alice", "a@x.com", "user")

    admin_session = asyncio.run(authenticate(admin_token, store))
    assert asyncio.run(authorize_admin(admin_session)).username == "root"

    user_session = asyncio.run(authenticate(user_token, store))
    with pytest.raises(Forbidden):
        asyncio.run(authorize_admin(user_session))
