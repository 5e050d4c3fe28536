# cryptocore/security/otp.py
"""
HOTP (RFC 4226) and TOTP (RFC 6238).

- HOTP: code = Truncate(HMAC-SHA1(key=secret, msg=counter as 8-byte BE)) mod 10^digits
- TOTP: HOTP with counter = floor((now - unix epoch) / 30)

Secrets are short strings from A-Z0-9 (15 characters by default) and are used
as the HMAC key through their ASCII bytes. The HOTP step itself accepts a
secret of any length; only the TOTP helpers enforce OtpSettings.secret_length.
"""
from __future__ import annotations

import logging
import struct
import time
from typing import Optional, Union

from .. import base32
from ..audit_logging import audit_line
from ..charsets import CharacterSetGroups, new_string_key
from ..config import MAX_OTP_DIGITS, OtpSettings
from ..errors import InvalidArgument, InvalidKeyLength
from ..random_source import RandomSource
from .message_auth import compute_hmac, constant_time_equals


log = logging.getLogger(__name__)

MAX_DIGITS = MAX_OTP_DIGITS
SECRET_ALPHABET = CharacterSetGroups.UPPERCASE | CharacterSetGroups.NUMERIC

Secret = Union[str, bytes]


def _secret_bytes(secret: Secret) -> bytes:
    if not secret:
        raise InvalidArgument("secret_empty")
    if isinstance(secret, str):
        return secret.encode("ascii")
    return bytes(secret)


def _check_secret_length(secret: Secret, settings: OtpSettings) -> None:
    if not secret:
        raise InvalidArgument("secret_empty")
    if settings.secret_length is not None and len(secret) != settings.secret_length:
        raise InvalidKeyLength("secret_wrong_length", secret_length=len(secret), expected=settings.secret_length)


def generate_secret(
    encode_base32: bool = False,
    settings: Optional[OtpSettings] = None,
    rng: Optional[RandomSource] = None,
) -> str:
    """
    New secret of settings.secret_length characters from A-Z0-9.
    With encode_base32=True the Base32 form of its ASCII bytes is returned instead.
    """
    settings = settings or OtpSettings()
    length = settings.secret_length or 15
    secret = new_string_key(length, SECRET_ALPHABET, rng=rng)
    if encode_base32:
        return base32.encode_string(secret)
    return secret


def dynamic_truncate(digest: bytes) -> int:
    """
    RFC 4226 dynamic truncation.

    - offset = last_byte & 0x0F
    - take 4 bytes from offset, clear the MSB of the first one
    - return the 31-bit unsigned integer
    """
    offset = digest[-1] & 0x0F
    return (
        ((digest[offset] & 0x7F) << 24)
        | ((digest[offset + 1] & 0xFF) << 16)
        | ((digest[offset + 2] & 0xFF) << 8)
        | (digest[offset + 3] & 0xFF)
    )


def hotp(secret: Secret, counter: int, digits: int = 6, max_digits: int = MAX_DIGITS) -> str:
    limit = min(max_digits, MAX_DIGITS)
    if not 1 <= digits <= limit:
        raise InvalidArgument("digits_out_of_range", digits=digits, maximum=limit)
    if counter < 0:
        raise InvalidArgument("counter_negative", counter=counter)
    if counter > 0xFFFFFFFFFFFFFFFF:
        raise InvalidArgument("counter_out_of_range")

    digest = compute_hmac(_secret_bytes(secret), struct.pack(">Q", counter), "sha1")
    return str(dynamic_truncate(digest) % 10 ** digits).zfill(digits)


def current_counter(now: Optional[float] = None, time_step: int = 30) -> int:
    if now is None:
        now = time.time()
    return int(now // time_step)


def totp_at(secret: Secret, counter: int, settings: Optional[OtpSettings] = None) -> str:
    settings = settings or OtpSettings()
    _check_secret_length(secret, settings)
    return hotp(secret, counter, settings.digits, settings.max_digits)


def totp(secret: Secret, now: Optional[float] = None, settings: Optional[OtpSettings] = None) -> str:
    settings = settings or OtpSettings()
    return totp_at(secret, current_counter(now, settings.time_step), settings)


def check_code(
    secret: Secret,
    code: str,
    window: int = 1,
    now: Optional[float] = None,
    settings: Optional[OtpSettings] = None,
) -> bool:
    """
    True if code matches the current time step or any step within +/- window
    (clock drift). Steps that would fall before the epoch are skipped.
    """
    settings = settings or OtpSettings()
    _check_secret_length(secret, settings)
    if not 0 <= window <= settings.max_window:
        raise InvalidArgument("window_out_of_range", window=window, maximum=settings.max_window)
    if not code:
        return False

    counter = current_counter(now, settings.time_step)
    candidate = str(code).strip().encode("ascii", "replace")

    matched = False
    for step in [counter] + [c for i in range(1, window + 1) for c in (counter + i, counter - i)]:
        if step < 0:
            continue
        # every step in the window is compared, match or not
        if constant_time_equals(totp_at(secret, step, settings).encode("ascii"), candidate):
            matched = True

    if not matched:
        log.info(audit_line("otp_code_rejected", operation="check_code", counter=counter, extra={"window": window}))
    return matched
