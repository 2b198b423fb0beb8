"""Unit tests for the in-memory session store"""

import re

from portal.auth.session_store import SessionStore


def test_create_returns_hex_token_and_resolves():
    store = SessionStore()
    token = store.create("alice", "a@x.com", "user")

    assert re.fullmatch(r"[0-9a-f]{32}", token)
    session = store.resolve(token)
    assert session is not None
    assert session.username == "alice"
    assert session.email == "a@x.com"
    assert session.role == "user"
    assert session.login_time is not None


def test_tokens_are_unique():
    store = SessionStore()
    tokens = {store.create("alice", "a@x.com", "user") for _ in range(200)}
    assert len(tokens) == 200
    assert len(store) == 200


def test_missing_role_defaults_to_user():
    store = SessionStore()
    token = store.create("bob", "b@x.com", None)
    assert store.resolve(token).role == "user"


def test_resolve_unknown_or_empty_token():
    store = SessionStore()
    assert store.resolve("deadbeef") is None
    assert store.resolve("") is None
    assert store.resolve(None) is None


def test_destroy_is_idempotent():
    store = SessionStore()
    token = store.create("alice", "a@x.com", "user")

    assert store.destroy(token) is True
    assert store.resolve(token) is None
    assert store.destroy(token) is False
    assert store.destroy(None) is False


def test_destroy_all_for_user_leaves_other_users():
    store = SessionStore()
    alice_tokens = [store.create("alice", "a@x.com", "user") for _ in range(3)]
    bob_token = store.create("bob", "b@x.com", "admin")

    removed = store.destroy_all_for_user("alice")

    assert removed == 3
    assert all(store.resolve(t) is None for t in alice_tokens)
    assert store.resolve(bob_token).username == "bob"
    assert store.destroy_all_for_user("nobody") == 0


def test_session_serializes_with_login_time_alias():
    store = SessionStore()
    token = store.create("alice", "a@x.com", "admin")
    data = store.resolve(token).model_dump(mode="json", by_alias=True)
    assert set(data) == {"username", "email", "role", "loginTime"}
    assert data["role"] == "admin"
