"""Tests for the HOTP/TOTP engine, checked against RFC vectors and pyotp."""

from __future__ import annotations

from urllib.parse import parse_qs, urlparse

import pyotp
import pytest

from app.core import base32, totp

RFC_SECRET = b"12345678901234567890"

# RFC 4226 apéndice D
HOTP_VECTORS = [
    "755224", "287082", "359152", "969429", "338314",
    "254676", "287922", "162583", "399871", "520489",
]

# RFC 6238 apéndice B, HMAC-SHA1, 8 dígitos
TOTP_SHA1_VECTORS = [
    (59, "94287082"),
    (1111111109, "07081804"),
    (1111111111, "14050471"),
    (1234567890, "89005924"),
    (2000000000, "69279037"),
    (20000000000, "65353130"),
]


@pytest.mark.parametrize("counter", range(10))
def test_hotp_rfc4226_vectors(counter):
    assert totp.derive_code(RFC_SECRET, counter) == HOTP_VECTORS[counter]


@pytest.mark.parametrize(("unix_time", "expected"), TOTP_SHA1_VECTORS)
def test_totp_rfc6238_sha1_vectors_eight_digits(unix_time, expected):
    assert totp.derive_code(RFC_SECRET, totp.time_step(unix_time), digits=8) == expected


@pytest.mark.parametrize(("unix_time", "expected"), TOTP_SHA1_VECTORS)
def test_totp_rfc6238_sha1_vectors_six_digits(unix_time, expected):
    assert totp.derive_code(RFC_SECRET, totp.time_step(unix_time)) == expected[-6:]


def test_authenticator_secret_at_59_matches_pyotp():
    secret = base32.decode("JBSWY3DPEHPK3PXP")
    assert totp.derive_code(secret, totp.time_step(59)) == pyotp.TOTP("JBSWY3DPEHPK3PXP").at(59)


def test_derive_code_is_deterministic_six_ascii_digits():
    secret = b"\x01" * 20
    codes = {totp.derive_code(secret, 42) for _ in range(5)}
    assert len(codes) == 1
    code = codes.pop()
    assert len(code) == 6 and code.isascii() and code.isdigit()


def test_derive_code_rejects_negative_step():
    with pytest.raises(ValueError):
        totp.derive_code(RFC_SECRET, -1)


def test_matches_pyotp_for_random_secrets():
    for _ in range(20):
        secret_b32 = pyotp.random_base32()
        secret = base32.decode(secret_b32)
        for unix_time in (0, 29, 30, 1_700_000_000):
            assert totp.derive_code(secret, totp.time_step(unix_time)) == pyotp.TOTP(secret_b32).at(unix_time)


class TestVerifyWindow:
    step = 1000

    @property
    def code(self) -> str:
        return totp.derive_code(RFC_SECRET, self.step)

    @pytest.mark.parametrize("now", [30 * 1000, 30 * 1000 + 29])
    def test_accepts_same_step(self, now):
        assert totp.verify_code(RFC_SECRET, self.code, now)

    @pytest.mark.parametrize("now", [30 * 999, 30 * 999 + 29, 30 * 1001, 30 * 1001 + 29])
    def test_accepts_adjacent_steps(self, now):
        assert totp.verify_code(RFC_SECRET, self.code, now)

    @pytest.mark.parametrize("now", [30 * 998 + 29, 30 * 1002, 30 * 1010])
    def test_rejects_two_or_more_steps_away(self, now):
        assert not totp.verify_code(RFC_SECRET, self.code, now)

    def test_wider_window(self):
        assert totp.verify_code(RFC_SECRET, self.code, 30 * 1002, window=2)

    def test_strips_surrounding_whitespace(self):
        assert totp.verify_code(RFC_SECRET, f" {self.code}\n", 30 * 1000)


@pytest.mark.parametrize("candidate", ["", "12345", "1234567", "abcdef", "12 456", "１２３４５６"])
def test_verify_rejects_malformed_candidates(candidate):
    assert not totp.verify_code(RFC_SECRET, candidate, 30 * 1000)


def test_verify_near_epoch_skips_negative_steps():
    code = totp.derive_code(RFC_SECRET, 0)
    assert totp.verify_code(RFC_SECRET, code, 5)


def test_provisioning_uri_format():
    uri = totp.provisioning_uri("JBSWY3DPEHPK3PXP", "ada@example.com", "UserManagement")
    assert uri == (
        "otpauth://totp/UserManagement:ada%40example.com"
        "?secret=JBSWY3DPEHPK3PXP&issuer=UserManagement&algorithm=SHA1&digits=6&period=30"
    )


def test_provisioning_uri_encodes_issuer_and_is_parseable():
    uri = totp.provisioning_uri("JBSWY3DPEHPK3PXP", "ada@example.com", "User Management")
    parsed = urlparse(uri)
    assert parsed.scheme == "otpauth"
    assert parse_qs(parsed.query)["issuer"] == ["User Management"]

    otp = pyotp.parse_uri(uri)
    assert otp.secret == "JBSWY3DPEHPK3PXP"
    assert otp.issuer == "User Management"
    assert otp.name == "ada@example.com"
