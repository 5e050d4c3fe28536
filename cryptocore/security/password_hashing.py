# cryptocore/security/password_hashing.py
from __future__ import annotations

import base64
import binascii
import logging
from typing import Optional

from ..audit_logging import audit_line
from ..config import HashingSettings
from ..errors import InvalidArgument, MalformedPayload
from ..random_source import RandomSource
from . import key_derivation
from .message_auth import constant_time_equals


log = logging.getLogger(__name__)


def _derive(
    message: str,
    salt: bytes,
    pepper: bytes,
    iterations: int,
    algorithm: str,
    allow_insecure: bool,
    settings: HashingSettings,
) -> bytes:
    return key_derivation.derive(
        message.encode("utf-8") + pepper,
        salt,
        iterations,
        settings.hash_byte_size,
        algorithm,
        allow_insecure=allow_insecure,
        min_iterations=settings.min_iterations,
    )


def create_hash(
    message: str,
    iterations: Optional[int] = None,
    algorithm: Optional[str] = None,
    *,
    allow_insecure: bool = False,
    settings: Optional[HashingSettings] = None,
    rng: Optional[RandomSource] = None,
) -> bytes:
    """
    Return salt || derived_key (16 + 20 bytes with default settings).

    NOTE:
    - The pepper (settings.pepper) is NOT part of the output.
    - If you set a pepper later, check_hash() still accepts hashes made without one.
    """
    settings = settings or HashingSettings()
    if not message or not message.strip():
        raise InvalidArgument("message_empty")

    iterations = settings.iterations if iterations is None else iterations
    algorithm = algorithm or settings.algorithm
    key_derivation.normalize_algorithm(algorithm, allow_insecure=allow_insecure)
    if iterations < settings.min_iterations:
        raise InvalidArgument("iterations_below_minimum", iterations=iterations, minimum=settings.min_iterations)

    salt = key_derivation.new_salt(settings.salt_byte_size, rng)
    dk = _derive(message, salt, settings.pepper, iterations, algorithm, allow_insecure, settings)
    return salt + dk


def check_hash(
    message: str,
    stored: bytes,
    iterations: Optional[int] = None,
    algorithm: Optional[str] = None,
    *,
    allow_insecure: bool = False,
    settings: Optional[HashingSettings] = None,
) -> bool:
    """
    Constant-time verification.

    Backward compatibility strategy:
    - If a pepper is configured, try with pepper first.
    - If that fails, try without pepper (hashes created before the pepper existed).
    """
    settings = settings or HashingSettings()
    if not message or not message.strip():
        raise InvalidArgument("message_empty")
    if not stored:
        raise InvalidArgument("stored_hash_empty")

    salt_size, hash_size = settings.salt_byte_size, settings.hash_byte_size
    if len(stored) != salt_size + hash_size:
        log.warning(audit_line("malformed_payload:stored_hash_wrong_size", operation="check_hash", payload_length=len(stored)))
        raise MalformedPayload("stored_hash_wrong_size", payload_length=len(stored))

    iterations = settings.iterations if iterations is None else iterations
    algorithm = algorithm or settings.algorithm
    salt, expected = bytes(stored[:salt_size]), bytes(stored[salt_size:])

    dk = _derive(message, salt, settings.pepper, iterations, algorithm, allow_insecure, settings)
    if constant_time_equals(dk, expected):
        return True

    if settings.pepper:
        dk2 = _derive(message, salt, b"", iterations, algorithm, allow_insecure, settings)
        return constant_time_equals(dk2, expected)

    return False


def create_hash_text(
    message: str,
    iterations: Optional[int] = None,
    *,
    settings: Optional[HashingSettings] = None,
    rng: Optional[RandomSource] = None,
) -> str:
    """Base64 form of create_hash(), using the configured algorithm."""
    return base64.b64encode(create_hash(message, iterations, settings=settings, rng=rng)).decode("ascii")


def check_hash_text(
    message: str,
    stored: str,
    iterations: Optional[int] = None,
    *,
    settings: Optional[HashingSettings] = None,
) -> bool:
    if not stored or not stored.strip() or len(stored) % 4:
        raise InvalidArgument("stored_hash_not_base64")
    try:
        raw = base64.b64decode(stored.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise InvalidArgument("stored_hash_not_base64") from e
    return check_hash(message, raw, iterations, settings=settings)
