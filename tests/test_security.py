"""Tests for password hashing and access tokens."""

from __future__ import annotations

import inspect

from app.core.security import create_access_token, decode_access_token, hash_password, verify_password


def test_password_hash_roundtrip():
    hashed = hash_password("correct-horse-battery")
    assert hashed != "correct-horse-battery"
    assert verify_password("correct-horse-battery", hashed)
    assert not verify_password("wrong", hashed)


def test_access_token_carries_only_subject():
    assert list(inspect.signature(create_access_token).parameters) == ["subject", "expires_minutes"]
    assert decode_access_token(create_access_token("user-1")) == "user-1"


def test_expired_or_garbage_token_is_rejected():
    assert decode_access_token(create_access_token("user-1", expires_minutes=-1)) is None
    assert decode_access_token("not-a-jwt") is None
