from __future__ import annotations

from enum import IntFlag
from typing import Optional, Sequence

from .errors import InvalidArgument
from .random_source import RandomSource, resolve


class CharacterSetGroups(IntFlag):
    NUMERIC = 0b0001
    LOWERCASE = 0b0010
    UPPERCASE = 0b0100
    PUNCTUATION = 0b1000


CHARACTER_SETS = {
    CharacterSetGroups.NUMERIC: "0123456789",
    CharacterSetGroups.LOWERCASE: "abcdefghijklmnopqrstuvwxyz",
    CharacterSetGroups.UPPERCASE: "ABCDEFGHIJKLMNOPQRSTUVWXYZ",
    CharacterSetGroups.PUNCTUATION: "`~!@#$%^&*()_-=+[]{}|;:,.<>?",
}


def characters_for(groups: CharacterSetGroups) -> str:
    """Concatenate the selected sets in flag order (numeric, lower, upper, punctuation)."""
    return "".join(chars for flag, chars in CHARACTER_SETS.items() if groups & flag)


def new_string_key_from(length: int, characters: Sequence[str], rng: Optional[RandomSource] = None) -> str:
    """
    Random string of `length` characters picked from `characters`.

    Each character consumes 4 random bytes read as a little-endian uint32 and
    reduced modulo len(characters). The modulo bias is a known limitation.
    """
    if length < 0:
        raise InvalidArgument("key_length_negative", length=length)
    if not characters:
        raise InvalidArgument("character_set_empty")

    data = resolve(rng).token_bytes(4 * length)
    n = len(characters)
    return "".join(
        characters[int.from_bytes(data[i * 4 : i * 4 + 4], "little") % n]
        for i in range(length)
    )


def new_string_key(length: int, groups: CharacterSetGroups, rng: Optional[RandomSource] = None) -> str:
    return new_string_key_from(length, characters_for(groups), rng=rng)
