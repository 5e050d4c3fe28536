# cryptocore/base32.py
"""
RFC 4648 Base32 (alphabet A-Z 2-7, '=' padding).

Encoding always pads to a multiple of 8 characters. Decoding is
case-insensitive, tolerates missing padding and drops trailing partial bits.
"""
from __future__ import annotations

from typing import Dict

from .errors import InvalidArgument, InvalidCharacter


ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
PAD = "="

_VALUES: Dict[str, int] = {c: i for i, c in enumerate(ALPHABET)}
_VALUES.update({c.lower(): i for i, c in enumerate(ALPHABET) if c.isalpha()})


def encode(data: bytes) -> str:
    if not isinstance(data, (bytes, bytearray)):
        raise InvalidArgument("base32_input_must_be_bytes")

    out = []
    buffer = 0
    bits = 0
    for b in bytes(data):
        buffer = (buffer << 8) | b
        bits += 8
        while bits >= 5:
            bits -= 5
            out.append(ALPHABET[(buffer >> bits) & 0x1F])
        buffer &= (1 << bits) - 1

    if bits:
        out.append(ALPHABET[(buffer << (5 - bits)) & 0x1F])

    out.extend(PAD * (-len(out) % 8))
    return "".join(out)


def decode(text: str) -> bytes:
    if not isinstance(text, str):
        raise InvalidArgument("base32_input_must_be_str")

    out = bytearray()
    buffer = 0
    bits = 0
    for pos, ch in enumerate(text.rstrip(PAD)):
        value = _VALUES.get(ch)
        if value is None:
            raise InvalidCharacter("not_a_base32_character", position=pos)
        buffer = (buffer << 5) | value
        bits += 5
        if bits >= 8:
            bits -= 8
            out.append((buffer >> bits) & 0xFF)
            buffer &= (1 << bits) - 1

    return bytes(out)


def encode_string(text: str) -> str:
    return encode(text.encode("ascii"))


def decode_string(text: str) -> str:
    return decode(text).decode("ascii")
