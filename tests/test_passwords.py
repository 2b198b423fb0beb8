"""Tests for password storage schemes"""

import pytest

from portal.auth.passwords import hash_password, verify_password


def test_plain_scheme_stores_verbatim():
    assert hash_password("secret") == "secret"
    assert verify_password("secret", "secret")
    assert not verify_password("Secret", "secret")


def test_bcrypt_scheme_round_trip():
    stored = hash_password("secret", "bcrypt")
    assert stored != "secret"
    assert stored.startswith("$2")
    assert verify_password("secret", stored, "bcrypt")
    assert not verify_password("wrong", stored, "bcrypt")


def test_bcrypt_rejects_non_hash_value():
    assert not verify_password("secret", "secret", "bcrypt")


def test_unknown_scheme():
    with pytest.raises(ValueError):
        hash_password("secret", "md5")
