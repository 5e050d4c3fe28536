# cryptocore/security/encryption_service.py
"""
Authenticated symmetric encryption (AES-CBC + HMAC-SHA256, encrypt-then-MAC).

Payload layouts (no length prefixes, no version byte):

  password:  salt_crypt || salt_auth || iv || ciphertext || tag(32)
  keys:      associated_data || iv || ciphertext || tag(32)

The tag covers everything before it. On decrypt the tag is checked first and
the cipher is only invoked once it matches.
"""
from __future__ import annotations

import base64
import binascii
import logging
from typing import Optional, Tuple

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..audit_logging import audit_line
from ..charsets import CharacterSetGroups, new_string_key, new_string_key_from
from ..config import EncryptionSettings
from ..errors import AuthenticationFailed, InvalidArgument, InvalidKeyLength, MalformedPayload
from ..random_source import RandomSource, resolve
from . import key_derivation, symmetric_cipher
from .message_auth import TAG_SIZE, compute_tag, verify_tag


log = logging.getLogger(__name__)

__all__ = [
    "CharacterSetGroups",
    "new_key",
    "new_string_key",
    "new_string_key_from",
    "encrypt_symmetric",
    "encrypt_symmetric_with_keys",
    "decrypt_symmetric",
    "decrypt_symmetric_with_keys",
    "encrypt_text",
    "encrypt_text_with_keys",
    "decrypt_text",
    "decrypt_text_with_keys",
]


def new_key(
    settings: Optional[EncryptionSettings] = None,
    *,
    use_cipher: bool = False,
    rng: Optional[RandomSource] = None,
) -> bytes:
    """
    Random key of settings.aes_key_byte_size bytes.
    use_cipher=True asks the cipher library for the key instead of the RandomSource.
    """
    settings = settings or EncryptionSettings()
    if use_cipher:
        return AESGCM.generate_key(bit_length=settings.aes_key_size_bits)
    return resolve(rng).token_bytes(settings.aes_key_byte_size)


def _check_password(password: str, settings: EncryptionSettings) -> None:
    if not password or not password.strip() or len(password) < settings.min_password_length:
        raise InvalidArgument("password_too_short", minimum=settings.min_password_length)


def _check_keys(crypt_key: bytes, auth_key: bytes, settings: EncryptionSettings) -> None:
    expected = settings.aes_key_byte_size
    if not crypt_key or len(crypt_key) != expected:
        raise InvalidKeyLength("crypt_key_wrong_size", key_size=len(crypt_key or b""), expected=expected)
    if not auth_key or len(auth_key) != expected:
        raise InvalidKeyLength("auth_key_wrong_size", key_size=len(auth_key or b""), expected=expected)


def _derive_keys(password: str, salt_crypt: bytes, salt_auth: bytes, settings: EncryptionSettings) -> Tuple[bytes, bytes]:
    def _one(salt: bytes) -> bytes:
        return key_derivation.derive(
            password,
            salt,
            settings.key_derivation_iterations,
            settings.aes_key_byte_size,
            settings.key_derivation_algorithm,
            min_iterations=settings.min_iterations,
        )

    return _one(salt_crypt), _one(salt_auth)


def encrypt_symmetric(
    message: bytes,
    password: str,
    settings: Optional[EncryptionSettings] = None,
    rng: Optional[RandomSource] = None,
) -> bytes:
    settings = settings or EncryptionSettings()
    _check_password(password, settings)
    if not message:
        raise InvalidArgument("message_empty")

    # two separate draws so the crypt and auth keys stay independent
    salt_crypt = key_derivation.new_salt(settings.salt_byte_size, rng)
    salt_auth = key_derivation.new_salt(settings.salt_byte_size, rng)
    crypt_key, auth_key = _derive_keys(password, salt_crypt, salt_auth, settings)

    return encrypt_symmetric_with_keys(message, crypt_key, auth_key, salt_crypt + salt_auth, settings, rng)


def encrypt_symmetric_with_keys(
    message: bytes,
    crypt_key: bytes,
    auth_key: bytes,
    associated_data: bytes = b"",
    settings: Optional[EncryptionSettings] = None,
    rng: Optional[RandomSource] = None,
) -> bytes:
    settings = settings or EncryptionSettings()
    _check_keys(crypt_key, auth_key, settings)
    if not message:
        raise InvalidArgument("message_empty")

    associated_data = bytes(associated_data or b"")
    iv = resolve(rng).token_bytes(settings.iv_byte_size)
    ciphertext = symmetric_cipher.encrypt(message, crypt_key, iv)

    body = associated_data + iv + ciphertext
    return body + compute_tag(auth_key, body)


def decrypt_symmetric(
    payload: bytes,
    password: str,
    settings: Optional[EncryptionSettings] = None,
) -> bytes:
    settings = settings or EncryptionSettings()
    _check_password(password, settings)
    if not payload:
        raise InvalidArgument("payload_empty")

    n = settings.salt_byte_size
    if len(payload) < 2 * n + settings.iv_byte_size + TAG_SIZE:
        log.warning(audit_line("malformed_payload:payload_too_short", operation="decrypt_symmetric", payload_length=len(payload)))
        raise MalformedPayload("payload_too_short", payload_length=len(payload))

    crypt_key, auth_key = _derive_keys(password, payload[:n], payload[n : 2 * n], settings)
    return decrypt_symmetric_with_keys(payload, crypt_key, auth_key, 2 * n, settings)


def decrypt_symmetric_with_keys(
    payload: bytes,
    crypt_key: bytes,
    auth_key: bytes,
    associated_data_length: int = 0,
    settings: Optional[EncryptionSettings] = None,
) -> bytes:
    settings = settings or EncryptionSettings()
    _check_keys(crypt_key, auth_key, settings)
    if not payload:
        raise InvalidArgument("payload_empty")
    if associated_data_length < 0:
        raise InvalidArgument("associated_data_length_negative")

    payload = bytes(payload)
    iv_size = settings.iv_byte_size
    if len(payload) < associated_data_length + iv_size + TAG_SIZE:
        log.warning(audit_line("malformed_payload:payload_too_short", operation="decrypt_symmetric", payload_length=len(payload)))
        raise MalformedPayload("payload_too_short", payload_length=len(payload))

    body, tag = payload[:-TAG_SIZE], payload[-TAG_SIZE:]
    if not verify_tag(auth_key, body, tag):
        log.warning(audit_line("authentication_failed:tag_mismatch", operation="decrypt_symmetric", payload_length=len(payload)))
        raise AuthenticationFailed("tag_mismatch", payload_length=len(payload))

    iv = body[associated_data_length : associated_data_length + iv_size]
    return symmetric_cipher.decrypt(body[associated_data_length + iv_size :], crypt_key, iv)


def _text_bytes(message: str) -> bytes:
    if not message or not message.strip():
        raise InvalidArgument("message_empty")
    return message.encode("utf-8")


def _b64decode(payload: str) -> bytes:
    if not payload or not payload.strip():
        raise InvalidArgument("payload_empty")
    try:
        return base64.b64decode(payload.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise MalformedPayload("payload_not_base64") from e


def _b64encode(payload: bytes) -> str:
    return base64.b64encode(payload).decode("ascii")


def encrypt_text(
    message: str,
    password: str,
    settings: Optional[EncryptionSettings] = None,
    rng: Optional[RandomSource] = None,
) -> str:
    """UTF-8 message in, base64 payload out."""
    return _b64encode(encrypt_symmetric(_text_bytes(message), password, settings, rng))


def decrypt_text(payload: str, password: str, settings: Optional[EncryptionSettings] = None) -> str:
    return decrypt_symmetric(_b64decode(payload), password, settings).decode("utf-8")


def encrypt_text_with_keys(
    message: str,
    crypt_key: bytes,
    auth_key: bytes,
    associated_data: Optional[bytes] = None,
    settings: Optional[EncryptionSettings] = None,
    rng: Optional[RandomSource] = None,
) -> str:
    return _b64encode(
        encrypt_symmetric_with_keys(_text_bytes(message), crypt_key, auth_key, associated_data or b"", settings, rng)
    )


def decrypt_text_with_keys(
    payload: str,
    crypt_key: bytes,
    auth_key: bytes,
    associated_data_length: int = 0,
    settings: Optional[EncryptionSettings] = None,
) -> str:
    return decrypt_symmetric_with_keys(_b64decode(payload), crypt_key, auth_key, associated_data_length, settings).decode("utf-8")
