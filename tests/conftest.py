from __future__ import annotations

import hashlib
from typing import List

import pytest

from cryptocore.config import EncryptionSettings, HashingSettings, OtpSettings


class DeterministicRandom:
    """Stand-in RandomSource: a SHA-256 counter stream, identical for identical seeds."""

    def __init__(self, seed: bytes = b"cryptocore-tests") -> None:
        self._seed = seed
        self._counter = 0
        self._buffer = b""
        self.requests: List[int] = []

    def token_bytes(self, n: int) -> bytes:
        self.requests.append(n)
        while len(self._buffer) < n:
            self._buffer += hashlib.sha256(self._seed + self._counter.to_bytes(8, "big")).digest()
            self._counter += 1
        out, self._buffer = self._buffer[:n], self._buffer[n:]
        return out


class FixedRandom:
    """Hands out a fixed byte string, front to back."""

    def __init__(self, data: bytes) -> None:
        self._data = data

    def token_bytes(self, n: int) -> bytes:
        if n > len(self._data):
            raise AssertionError("FixedRandom exhausted")
        out, self._data = self._data[:n], self._data[n:]
        return out


@pytest.fixture
def rng() -> DeterministicRandom:
    return DeterministicRandom()


@pytest.fixture
def enc_settings() -> EncryptionSettings:
    return EncryptionSettings()


@pytest.fixture
def hash_settings() -> HashingSettings:
    return HashingSettings()


@pytest.fixture
def otp_settings() -> OtpSettings:
    return OtpSettings()


PASSWORD = "correct horse battery staple"
