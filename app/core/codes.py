# app/core/codes.py
import hashlib
import secrets
from typing import Callable

# fuente de bytes aleatorios; en prod siempre secrets.token_bytes (CSPRNG)
RandomSource = Callable[[int], bytes]

SECRET_BYTES = 20
BACKUP_CODE_COUNT = 10
SETUP_TOKEN_BYTES = 32


def generate_secret(length: int = SECRET_BYTES, random_bytes: RandomSource = secrets.token_bytes) -> bytes:
    # 160 bits mínimo para HMAC-SHA1 (RFC 4226 §4)
    if length < SECRET_BYTES:
        raise ValueError(f"TOTP secret must be at least {SECRET_BYTES} bytes")
    return random_bytes(length)


def generate_backup_codes(
    count: int = BACKUP_CODE_COUNT,
    random_bytes: RandomSource = secrets.token_bytes,
) -> list[str]:
    """Códigos de respaldo tipo 1A2B-3C4D (no se chequean duplicados)."""
    codes = []
    for _ in range(count):
        raw = random_bytes(4).hex().upper()
        codes.append(f"{raw[:4]}-{raw[4:]}")
    return codes


def generate_token(nbytes: int = SETUP_TOKEN_BYTES, random_bytes: RandomSource = secrets.token_bytes) -> str:
    return random_bytes(nbytes).hex()


def normalize_backup_code(code: str) -> str:
    return "".join(ch for ch in code.upper() if ch in "0123456789ABCDEF")


def hash_backup_code(code: str) -> str:
    return hashlib.sha256(normalize_backup_code(code).encode("ascii")).hexdigest()
