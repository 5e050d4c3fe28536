# cryptocore/security/symmetric_cipher.py
from __future__ import annotations

from typing import Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ..config import AES_BLOCK_SIZE
from ..errors import InvalidKeyLength, InvalidPadding
from ..random_source import RandomSource, resolve


IV_SIZE = AES_BLOCK_SIZE // 8
KEY_SIZES = (16, 24, 32)


def _check_key_iv(key: bytes, iv: bytes) -> None:
    if len(key) not in KEY_SIZES:
        raise InvalidKeyLength("aes_key_wrong_size", key_size=len(key))
    if len(iv) != IV_SIZE:
        raise InvalidKeyLength("iv_wrong_size", iv_size=len(iv))


def new_iv(rng: Optional[RandomSource] = None) -> bytes:
    return resolve(rng).token_bytes(IV_SIZE)


def encrypt(plaintext: bytes, key: bytes, iv: bytes) -> bytes:
    """AES-CBC with PKCS7 padding. The IV is always one 128-bit block."""
    _check_key_iv(key, iv)

    padder = padding.PKCS7(AES_BLOCK_SIZE).padder()
    padded = padder.update(bytes(plaintext)) + padder.finalize()

    encryptor = Cipher(algorithms.AES(bytes(key)), modes.CBC(bytes(iv))).encryptor()
    return encryptor.update(padded) + encryptor.finalize()


def decrypt(ciphertext: bytes, key: bytes, iv: bytes) -> bytes:
    _check_key_iv(key, iv)
    if not ciphertext or len(ciphertext) % IV_SIZE:
        raise InvalidPadding("ciphertext_not_block_aligned", ciphertext_length=len(ciphertext))

    decryptor = Cipher(algorithms.AES(bytes(key)), modes.CBC(bytes(iv))).decryptor()
    padded = decryptor.update(bytes(ciphertext)) + decryptor.finalize()

    unpadder = padding.PKCS7(AES_BLOCK_SIZE).unpadder()
    try:
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as e:
        raise InvalidPadding("bad_pkcs7_padding") from e
