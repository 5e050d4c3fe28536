# cryptocore/security/__init__.py
"""
Security package.

This package centralizes:
- Key derivation (PBKDF2-HMAC)
- AES-CBC / PKCS7 encryption primitives
- HMAC-SHA256 tags with constant-time verification
- Authenticated encryption (encrypt-then-MAC, password or key based)
- Password hashing / verification (PBKDF2 + optional pepper)
- HOTP / TOTP one-time passwords

Typical imports:
    from cryptocore.security import encrypt_symmetric, decrypt_symmetric
    from cryptocore.security import create_hash, check_hash
    from cryptocore.security import hotp, totp, check_code
"""

from .key_derivation import derive, new_salt, normalize_algorithm
from .symmetric_cipher import encrypt as aes_encrypt, decrypt as aes_decrypt, new_iv
from .message_auth import (
    TAG_SIZE,
    compute_hmac,
    compute_tag,
    verify_tag,
    constant_time_equals,
)
from .encryption_service import (
    new_key,
    new_string_key,
    new_string_key_from,
    encrypt_symmetric,
    encrypt_symmetric_with_keys,
    decrypt_symmetric,
    decrypt_symmetric_with_keys,
    encrypt_text,
    encrypt_text_with_keys,
    decrypt_text,
    decrypt_text_with_keys,
)
from .password_hashing import create_hash, check_hash, create_hash_text, check_hash_text
from .otp import (
    generate_secret,
    hotp,
    totp,
    totp_at,
    check_code,
    current_counter,
    dynamic_truncate,
)
