# app/core/totp.py
"""
TOTP (RFC 6238) sobre HOTP (RFC 4226) con HMAC-SHA1.

Todo recibe el secreto ya decodificado (bytes) y el tiempo como parámetro,
así el reloj se inyecta desde afuera.
"""

import hashlib
import hmac
import struct
from urllib.parse import quote

DEFAULT_PERIOD = 30
DEFAULT_DIGITS = 6
DEFAULT_WINDOW = 1


def derive_code(secret: bytes, step: int, digits: int = DEFAULT_DIGITS) -> str:
    """
    Código HOTP para un contador (time step).

    Args:
        secret: secreto crudo (no base32)
        step: contador, floor(unix_time / period) para TOTP
        digits: largo del código

    Returns:
        str: código de `digits` dígitos, con ceros a la izquierda
    """
    if step < 0:
        raise ValueError("time step must be non-negative")
    digest = hmac.new(secret, struct.pack(">Q", step), hashlib.sha1).digest()
    offset = digest[-1] & 0x0F
    binary = struct.unpack(">I", digest[offset:offset + 4])[0] & 0x7FFFFFFF
    return str(binary % (10 ** digits)).zfill(digits)


def time_step(now: float, period: int = DEFAULT_PERIOD) -> int:
    return int(now // period)


def verify_code(
    secret: bytes,
    candidate: str,
    now: float,
    *,
    period: int = DEFAULT_PERIOD,
    window: int = DEFAULT_WINDOW,
    digits: int = DEFAULT_DIGITS,
) -> bool:
    """Acepta el código del step actual y de `window` steps antes/después."""
    candidate = (candidate or "").strip()
    if len(candidate) != digits or not (candidate.isascii() and candidate.isdigit()):
        return False

    step0 = time_step(now, period)
    for offset in range(-window, window + 1):
        step = step0 + offset
        if step < 0:
            continue
        if hmac.compare_digest(derive_code(secret, step, digits), candidate):
            return True
    return False


def provisioning_uri(
    secret_b32: str,
    account: str,
    issuer: str,
    *,
    digits: int = DEFAULT_DIGITS,
    period: int = DEFAULT_PERIOD,
) -> str:
    """URI otpauth:// para el QR de Google Authenticator & co."""
    issuer_q = quote(issuer, safe="")
    account_q = quote(account, safe="")
    return (
        f"otpauth://totp/{issuer_q}:{account_q}"
        f"?secret={secret_b32}&issuer={issuer_q}"
        f"&algorithm=SHA1&digits={digits}&period={period}"
    )
