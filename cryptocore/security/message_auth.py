# cryptocore/security/message_auth.py
from __future__ import annotations

import hmac


TAG_SIZE = 32


def compute_hmac(key: bytes, data: bytes, algorithm: str = "sha256") -> bytes:
    """Full-length HMAC over data with the given hashlib digest name."""
    return hmac.new(bytes(key), bytes(data), algorithm).digest()


def compute_tag(key: bytes, data: bytes) -> bytes:
    """
    Compute the 32-byte HMAC-SHA256 tag used by the encrypt-then-MAC payloads.
    """
    return compute_hmac(key, data, "sha256")


def constant_time_equals(a: bytes, b: bytes) -> bool:
    """
    Constant-time comparison: every byte is looked at no matter where the
    first difference is. Only the lengths leak.
    """
    return hmac.compare_digest(bytes(a), bytes(b))


def verify_tag(key: bytes, data: bytes, tag: bytes) -> bool:
    """
    Constant-time verification.
    """
    if not isinstance(tag, (bytes, bytearray)) or len(tag) != TAG_SIZE:
        return False
    return constant_time_equals(compute_tag(key, data), tag)
