# cryptocore/security/key_derivation.py
from __future__ import annotations

import hashlib
from typing import Optional, Union

from ..config import MIN_ITERATIONS
from ..errors import InvalidArgument, UnsupportedAlgorithm
from ..random_source import RandomSource, resolve


SUPPORTED_ALGORITHMS = ("sha1", "sha256", "sha384", "sha512", "md5")
INSECURE_ALGORITHMS = ("md5",)


def normalize_algorithm(algorithm: str, allow_insecure: bool = False) -> str:
    """
    Map "SHA512" / "sha-512" / "sha512" to the hashlib name.
    MD5 is refused unless allow_insecure is set.
    """
    name = (algorithm or "").strip().lower().replace("-", "")
    if name not in SUPPORTED_ALGORITHMS:
        raise UnsupportedAlgorithm("unknown_hash_algorithm", algorithm=algorithm)
    if name in INSECURE_ALGORITHMS and not allow_insecure:
        raise UnsupportedAlgorithm("insecure_hash_algorithm", algorithm=name)
    return name


def _to_bytes(password: Union[str, bytes]) -> bytes:
    if isinstance(password, str):
        return password.encode("utf-8")
    return bytes(password)


def derive(
    password: Union[str, bytes],
    salt: bytes,
    iterations: int,
    length: int,
    algorithm: str = "sha1",
    *,
    allow_insecure: bool = False,
    min_iterations: int = MIN_ITERATIONS,
) -> bytes:
    """
    PBKDF2-HMAC(algorithm) over password/salt, returning `length` bytes.
    String passwords are UTF-8 encoded.
    """
    if not password:
        raise InvalidArgument("password_empty")
    if not salt:
        raise InvalidArgument("salt_empty")
    if iterations < min_iterations:
        raise InvalidArgument("iterations_below_minimum", iterations=iterations, minimum=min_iterations)
    if length < 1:
        raise InvalidArgument("derived_length_too_small", length=length)

    name = normalize_algorithm(algorithm, allow_insecure=allow_insecure)
    return hashlib.pbkdf2_hmac(name, _to_bytes(password), bytes(salt), iterations, dklen=length)


def new_salt(size: int, rng: Optional[RandomSource] = None) -> bytes:
    if size < 1:
        raise InvalidArgument("salt_size_too_small", size=size)
    return resolve(rng).token_bytes(size)
