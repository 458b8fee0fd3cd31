"""Seeded, reproducible shuffles of the answer corpus.

Every player must see the same word on the same date, so the hash, the
generator and the shuffle below are fixed forever. All arithmetic is
masked to unsigned 32 bits; changing a constant, the shuffle direction or
the draw formula silently changes every historical schedule.
"""
from typing import Callable, Iterator, List

MASK_32 = 0xFFFFFFFF
TWO_POW_32 = 4294967296


def _imul(left: int, right: int) -> int:
    """Low 32 bits of the product of two 32-bit integers."""
    return (left * right) & MASK_32


def _code_units(text: str) -> Iterator[int]:
    """Yield the UTF-16 code units of ``text``."""
    encoded = text.encode("utf-16-le")
    for index in range(0, len(encoded), 2):
        yield encoded[index] | (encoded[index + 1] << 8)


def xmur3(text: str) -> Callable[[], int]:
    """Build an avalanching string hash that emits 32-bit seeds."""
    units = list(_code_units(text))
    state = (1779033703 ^ len(units)) & MASK_32
    for unit in units:
        state = _imul(state ^ unit, 3432918353)
        state = ((state << 13) | (state >> 19)) & MASK_32

    def seed() -> int:
        nonlocal state
        state = _imul(state ^ (state >> 16), 2246822507)
        state = _imul(state ^ (state >> 13), 3266489909)
        state ^= state >> 16
        return state

    return seed


def mulberry32(seed: int) -> Callable[[], float]:
    """Build a 32-bit generator returning floats in [0, 1)."""
    current = seed & MASK_32

    def next_float() -> float:
        nonlocal current
        current = (current + 0x6D2B79F5) & MASK_32
        value = _imul(current ^ (current >> 15), current | 1)
        value ^= (value + _imul(value ^ (value >> 7), value | 61)) & MASK_32
        return ((value ^ (value >> 14)) & MASK_32) / TWO_POW_32

    return next_float


def seed_from_text(seed_text: str) -> int:
    """Derive the 32-bit generator seed for ``seed_text``."""
    return xmur3(seed_text)()


def build_permutation(count: int, seed_text: str) -> List[int]:
    """Shuffle ``range(count)`` with a Fisher-Yates pass seeded by ``seed_text``."""
    sequence = list(range(count))
    rng = mulberry32(seed_from_text(seed_text))

    for index in range(count - 1, 0, -1):
        swap_index = int(rng() * (index + 1))
        sequence[index], sequence[swap_index] = sequence[swap_index], sequence[index]

    return sequence
