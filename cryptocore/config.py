from __future__ import annotations
import base64
import os
import yaml
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .errors import InvalidArgument


MIN_ITERATIONS = 10_000
AES_KEY_SIZES = (128, 192, 256)
AES_BLOCK_SIZE = 128
MAX_OTP_DIGITS = 24
MAX_OTP_WINDOW = 10

PEPPER_ENV = "CRYPTOCORE_PASSWORD_PEPPER"


def _check_iterations(iterations: int, min_iterations: int) -> None:
    # MIN_ITERATIONS is a hard floor; settings may only raise it
    if min_iterations < MIN_ITERATIONS:
        raise InvalidArgument("min_iterations_below_floor", min_iterations=min_iterations, floor=MIN_ITERATIONS)
    if iterations < min_iterations:
        raise InvalidArgument("iterations_below_minimum", iterations=iterations, minimum=min_iterations)


@dataclass
class EncryptionSettings:
    aes_block_size_bits: int = AES_BLOCK_SIZE
    aes_key_size_bits: int = 256
    salt_size_bits: int = 64
    key_derivation_iterations: int = MIN_ITERATIONS
    key_derivation_algorithm: str = "sha1"
    min_password_length: int = 12
    min_iterations: int = MIN_ITERATIONS

    def __post_init__(self) -> None:
        if self.aes_block_size_bits != AES_BLOCK_SIZE:
            raise InvalidArgument("aes_block_size_must_be_128")
        if self.aes_key_size_bits not in AES_KEY_SIZES:
            raise InvalidArgument("aes_key_size_not_supported", key_size_bits=self.aes_key_size_bits)
        if self.salt_size_bits <= 0 or self.salt_size_bits % 8:
            raise InvalidArgument("salt_size_must_be_whole_bytes", salt_size_bits=self.salt_size_bits)
        if self.min_password_length < 1:
            raise InvalidArgument("min_password_length_too_small")
        _check_iterations(self.key_derivation_iterations, self.min_iterations)

    @property
    def aes_key_byte_size(self) -> int:
        return self.aes_key_size_bits // 8

    @property
    def salt_byte_size(self) -> int:
        return self.salt_size_bits // 8

    @property
    def iv_byte_size(self) -> int:
        return self.aes_block_size_bits // 8


@dataclass
class HashingSettings:
    salt_size_bits: int = 128
    hash_size_bits: int = 160
    iterations: int = MIN_ITERATIONS
    min_iterations: int = MIN_ITERATIONS
    algorithm: str = "sha512"
    pepper: bytes = b""

    def __post_init__(self) -> None:
        if self.salt_size_bits <= 0 or self.salt_size_bits % 8:
            raise InvalidArgument("salt_size_must_be_whole_bytes", salt_size_bits=self.salt_size_bits)
        if self.hash_size_bits <= 0 or self.hash_size_bits % 8:
            raise InvalidArgument("hash_size_must_be_whole_bytes", hash_size_bits=self.hash_size_bits)
        _check_iterations(self.iterations, self.min_iterations)

    @property
    def salt_byte_size(self) -> int:
        return self.salt_size_bits // 8

    @property
    def hash_byte_size(self) -> int:
        return self.hash_size_bits // 8


@dataclass
class OtpSettings:
    secret_length: Optional[int] = 15
    digits: int = 6
    time_step: int = 30
    max_digits: int = MAX_OTP_DIGITS
    max_window: int = MAX_OTP_WINDOW

    def __post_init__(self) -> None:
        if self.time_step <= 0:
            raise InvalidArgument("time_step_must_be_positive")
        if not 1 <= self.max_digits <= MAX_OTP_DIGITS:
            raise InvalidArgument("max_digits_out_of_range", max_digits=self.max_digits)
        if not 0 <= self.max_window <= MAX_OTP_WINDOW:
            raise InvalidArgument("max_window_out_of_range", max_window=self.max_window)
        if not 1 <= self.digits <= self.max_digits:
            raise InvalidArgument("digits_out_of_range", digits=self.digits)


@dataclass
class AppConfig:
    encryption: EncryptionSettings = field(default_factory=EncryptionSettings)
    hashing: HashingSettings = field(default_factory=HashingSettings)
    otp: OtpSettings = field(default_factory=OtpSettings)


def load_pepper(env: Optional[Dict[str, str]] = None) -> bytes:
    """
    Optional server-side secret (pepper) mixed into password hashes.
    - If unset: return b"" (no pepper).
    - If set: supports either raw string or base64 prefixed with "base64:".

    Environment variable:
      CRYPTOCORE_PASSWORD_PEPPER
        examples:
          export CRYPTOCORE_PASSWORD_PEPPER="my-long-random-pepper"
          export CRYPTOCORE_PASSWORD_PEPPER="base64:8cS7...=="
    """
    source = os.environ if env is None else env
    v = (source.get(PEPPER_ENV) or "").strip()
    if not v:
        return b""
    if v.startswith("base64:"):
        return base64.b64decode(v[len("base64:") :].encode("utf-8"))
    return v.encode("utf-8")


def load_config(path: str = "config.yaml", env: Optional[Dict[str, str]] = None) -> AppConfig:
    with open(path, "r", encoding="utf-8") as f:
        raw: Dict[str, Any] = yaml.safe_load(f) or {}

    enc = raw.get("encryption", {}) or {}
    hsh = raw.get("hashing", {}) or {}
    otp = raw.get("otp", {}) or {}

    secret_length = otp.get("secret_length", 15)

    return AppConfig(
        encryption=EncryptionSettings(
            aes_block_size_bits=int(enc.get("aes_block_size_bits", AES_BLOCK_SIZE)),
            aes_key_size_bits=int(enc.get("aes_key_size_bits", 256)),
            salt_size_bits=int(enc.get("salt_size_bits", 64)),
            key_derivation_iterations=int(enc.get("key_derivation_iterations", MIN_ITERATIONS)),
            key_derivation_algorithm=str(enc.get("key_derivation_algorithm", "sha1")),
            min_password_length=int(enc.get("min_password_length", 12)),
            min_iterations=int(enc.get("min_iterations", MIN_ITERATIONS)),
        ),
        hashing=HashingSettings(
            salt_size_bits=int(hsh.get("salt_size_bits", 128)),
            hash_size_bits=int(hsh.get("hash_size_bits", 160)),
            iterations=int(hsh.get("iterations", MIN_ITERATIONS)),
            min_iterations=int(hsh.get("min_iterations", MIN_ITERATIONS)),
            algorithm=str(hsh.get("algorithm", "sha512")),
            pepper=load_pepper(env),
        ),
        otp=OtpSettings(
            secret_length=None if secret_length is None else int(secret_length),
            digits=int(otp.get("digits", 6)),
            time_step=int(otp.get("time_step", 30)),
            max_digits=int(otp.get("max_digits", MAX_OTP_DIGITS)),
            max_window=int(otp.get("max_window", MAX_OTP_WINDOW)),
        ),
    )
