# app/core/base32.py
"""
Base32 (RFC 4648 alphabet, sin padding) para mostrar/escanear secretos TOTP.

El decode es permisivo a propósito: las apps autenticadoras copian el secreto
con espacios, guiones o en minúsculas, y todo lo que no pertenece al alfabeto
se ignora. No usar como validador.
"""

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
_INDEX = {ch: i for i, ch in enumerate(ALPHABET)}


def encode(data: bytes) -> str:
    out: list[str] = []
    value = 0
    bits = 0
    for byte in data:
        value = ((value << 8) | byte) & 0xFFFF
        bits += 8
        while bits >= 5:
            out.append(ALPHABET[(value >> (bits - 5)) & 0x1F])
            bits -= 5
    if bits > 0:
        out.append(ALPHABET[(value << (5 - bits)) & 0x1F])
    return "".join(out)


def decode(text: str) -> bytes:
    out = bytearray()
    value = 0
    bits = 0
    for ch in text.upper():
        idx = _INDEX.get(ch)
        if idx is None:
            continue
        value = ((value << 5) | idx) & 0xFFFF
        bits += 5
        if bits >= 8:
            out.append((value >> (bits - 8)) & 0xFF)
            bits -= 8
    return bytes(out)
