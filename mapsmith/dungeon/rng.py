"""Deterministic string-seeded random source.

The generator never touches the ``random`` module: every pass owns an explicit
``SeededRandom`` so regenerating one content category cannot perturb another.
All arithmetic is unsigned 32-bit (FNV-1a style hash feeding a 13/17/5
xorshift) so maps stay bit-identical for a given seed and config across ports.
"""
from __future__ import annotations
from typing import List, MutableSequence, TypeVar

MASK32 = 0xFFFFFFFF
FNV_OFFSET = 2166136261
FNV_PRIME = 16777619
ZERO_HASH_FALLBACK = 0x9E3779B9

T = TypeVar("T")


def _code_units(seed: str) -> List[int]:
    data = seed.encode("utf-16-le", "surrogatepass")
    return [data[i] | (data[i + 1] << 8) for i in range(0, len(data), 2)]


def hash_seed(seed: str) -> int:
    h = FNV_OFFSET
    for unit in _code_units(seed):
        h ^= unit
        h = (h * FNV_PRIME) & MASK32
    return h


class SeededRandom:
    """xorshift32 stream; ``random()`` returns ``state / 0xFFFFFFFF``."""

    __slots__ = ("seed", "_state")

    def __init__(self, seed: str):
        self.seed = seed
        self._state = hash_seed(seed) or ZERO_HASH_FALLBACK

    @classmethod
    def for_pass(cls, seed: str, pass_name: str, config_hash: str) -> "SeededRandom":
        return cls(f"{seed}:{pass_name}:{config_hash}")

    def derive(self, label: str) -> "SeededRandom":
        """Independent child stream; does not advance this one."""
        return SeededRandom(f"{self.seed}:{label}")

    def random(self) -> float:
        s = self._state
        s ^= (s << 13) & MASK32
        s ^= s >> 17
        s ^= (s << 5) & MASK32
        self._state = s
        return s / MASK32

    def random_int(self, lo: int, hi: int) -> int:
        return int(self.random() * (hi - lo + 1)) + lo

    def chance(self, p: float) -> bool:
        return self.random() < p

    def choice(self, seq):
        return seq[self.random_int(0, len(seq) - 1) % len(seq)]

    def shuffle(self, items: MutableSequence[T]) -> MutableSequence[T]:
        for i in range(len(items) - 1, 0, -1):
            j = int(self.random() * (i + 1))
            if j > i:  # r == 1.0 edge
                j = i
            items[i], items[j] = items[j], items[i]
        return items


__all__ = ["SeededRandom", "hash_seed", "MASK32"]
