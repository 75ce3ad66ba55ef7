# primegen/streams.py
# Seed sources and witness streams for the primality tests

from __future__ import annotations
import hashlib
import itertools
import time
from typing import Callable, Iterable, Optional, Protocol

from .generators import MMIX_INCREMENT, MMIX_MULTIPLIER, lcg_next, next_pow2, power_of_two

Clock = Callable[[], int]

def now_millis() -> int:
    """Milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000

def resolve_seed(seed: Optional[int] = None, clock: Optional[Clock] = None) -> int:
    if seed is not None:
        return int(seed)
    return int((clock or now_millis)())

def derive_worker_seed(base: int, index: int) -> int:
    """Worker 0 keeps the base seed; the others get a blake2b-derived one."""
    if index == 0:
        return int(base)
    digest = hashlib.blake2b(f"{int(base)}:{index}".encode(), digest_size=16).digest()
    return int.from_bytes(digest, "big")


class WitnessStream(Protocol):
    def draw(self, n: int) -> int: ...


class LcgStream:
    """
    LCG draw source sized to the number under test.

    Each draw uses modulus 2**next_pow2(n.bit_length()) and chains the state
    forward with the value it returns.
    """

    def __init__(self, seed: int, multiplier: int = MMIX_MULTIPLIER, increment: int = MMIX_INCREMENT):
        self.state = int(seed)
        self.multiplier = multiplier
        self.increment = increment

    def draw(self, n: int) -> int:
        modulus = power_of_two(next_pow2(int(n).bit_length()))
        self.state = lcg_next(modulus, self.multiplier, self.increment, self.state)
        return self.state


class SequenceStream:
    """Replays a fixed list of bases, cycling when exhausted."""

    def __init__(self, values: Iterable[int]):
        self.values = tuple(int(v) for v in values)
        if not self.values:
            raise ValueError("SequenceStream needs at least one value")
        self._cycle = itertools.cycle(self.values)

    def draw(self, n: int) -> int:
        return next(self._cycle)
