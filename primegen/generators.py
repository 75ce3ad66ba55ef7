# primegen/generators.py
# Pseudorandom generators over arbitrary precision integers
# - Linear congruential generator (single step + bit-length rejection loop)
# - Blum-Blum-Shub parity-bit generator

from __future__ import annotations
import logging
from typing import Iterator, Optional

import gmpy2
from gmpy2 import mpz

from .errors import ConversionError, NotCoPrime, SearchExhausted

log = logging.getLogger(__name__)

U32_MAX = 0xFFFFFFFF

# Knuth MMIX constants, used for witness draws (modulus 2**64 and up)
MMIX_MULTIPLIER = 6364136223846793005
MMIX_INCREMENT = 1

# POSIX drand48 constants, used for the candidate chain
POSIX_MULTIPLIER = 25214903917
POSIX_INCREMENT = 11

# ---------- Sizing helpers ----------

def to_u32(value: int) -> int:
    """Convert a bit count to an unsigned 32-bit int or raise ConversionError."""
    if value < 0 or value > U32_MAX:
        raise ConversionError(value, 32)
    return int(value)

def power_of_two(bits: int) -> mpz:
    return mpz(1) << to_u32(bits)

def next_pow2(n: int) -> int:
    """Smallest power of two >= n (1 for n <= 1)."""
    n = int(n)
    if n <= 1: return 1
    return 1 << (n - 1).bit_length()

# ---------- Linear congruential generator ----------

def lcg_next(modulus: int, multiplier: int, increment: int, seed: int) -> int:
    """X(n) = (a * X(n-1) + c) mod N"""
    modulus = mpz(modulus)
    if modulus <= 0:
        raise ValueError("modulus must be positive")
    return int((mpz(multiplier) * mpz(seed) + mpz(increment)) % modulus)

def lcg_next_bounded(modulus: int, multiplier: int, increment: int, seed: int,
                     max_steps: Optional[int] = None) -> int:
    """
    Step the recurrence until the output has exactly modulus.bit_length()-1 bits.
    With modulus 2**k that is the first k-bit value (top bit set) of the orbit.
    Loops forever on an orbit that never reaches that length unless max_steps is set.
    """
    m = mpz(modulus)
    if m <= 0:
        raise ValueError("modulus must be positive")
    a, c = mpz(multiplier), mpz(increment)
    target = m.bit_length() - 1
    x = mpz(seed)
    steps = 0
    while True:
        x = (a * x + c) % m
        steps += 1
        if x.bit_length() == target:
            return int(x)
        if max_steps is not None and steps >= max_steps:
            log.debug("bounded LCG gave up after %d steps (target %d bits)", steps, target)
            raise SearchExhausted(target, steps)

# ---------- Blum-Blum-Shub ----------

def _check_bbs_params(p: mpz, q: mpz, seed: mpz) -> None:
    if p <= 0 or q <= 0:
        raise ValueError("p and q must be positive")
    if seed < 0:
        raise ValueError("seed must be non-negative")
    # divisibility only: a seed sharing a factor with p or q is not detected
    if seed % p == 0:
        raise NotCoPrime(seed, p)
    if seed % q == 0:
        raise NotCoPrime(seed, q)

def _parity_stream(x: mpz, n: mpz) -> Iterator[int]:
    # X0 is the seed itself, it is not squared before its parity is taken
    yield int(x.bit_test(0))
    while True:
        x = gmpy2.powmod(x, 2, n)
        yield int(x.bit_test(0))

def bbs_bits(p: int, q: int, seed: int) -> Iterator[int]:
    """Infinite BBS bit stream. p and q are assumed prime and not verified."""
    p, q, seed = mpz(p), mpz(q), mpz(seed)
    _check_bbs_params(p, q, seed)
    return _parity_stream(seed, p * q)

def bbs_generate(p: int, q: int, seed: int, size: int) -> int:
    """
    Blum-Blum-Shub number of `size` bits, first emitted bit in bit 0.
    The top bit is not forced, so the result may be shorter than `size` bits.
    """
    bits = bbs_bits(p, q, seed)
    if size < 0:
        raise ValueError("size must be non-negative")
    value = mpz(0)
    for idx, bit in zip(range(size), bits):
        if bit:
            value = value.bit_set(idx)
    return int(value)
