from __future__ import annotations

import os
from typing import Optional, Protocol

from .errors import InvalidArgument


class RandomSource(Protocol):
    """Anything that can hand out cryptographically secure random bytes."""

    def token_bytes(self, n: int) -> bytes:
        ...


class SystemRandomSource:
    """OS-backed CSPRNG. Safe to share between threads."""

    def token_bytes(self, n: int) -> bytes:
        if n < 0:
            raise InvalidArgument("random_length_negative", length=n)
        return os.urandom(n)


_DEFAULT = SystemRandomSource()


def resolve(rng: Optional[RandomSource]) -> RandomSource:
    """The given source, or the process-wide OS-backed one."""
    return _DEFAULT if rng is None else rng
