# primegen/search.py
# Probable-prime search over an LCG candidate chain

from __future__ import annotations
import functools
import logging
from typing import Callable, Optional

from gmpy2 import mpz

from .errors import SearchExhausted
from .generators import POSIX_INCREMENT, POSIX_MULTIPLIER, lcg_next_bounded, power_of_two
from .primality import is_probable_prime, is_probable_prime_fermat, is_probable_prime_fermat_parallel
from .streams import Clock

log = logging.getLogger(__name__)

TEST_KINDS = ("miller", "fermat", "fermat-parallel")
DEFAULT_MAX_ITERATIONS = 1_000_000

def shape_candidate(raw: int, bit_length: int) -> mpz:
    """Drop the low bit, then force the top bit (exact length) and bit 0 (odd)."""
    return (mpz(raw) >> 1).bit_set(bit_length - 1).bit_set(0)

def _select_test(test_kind: str, thread_count: int, clock: Optional[Clock]) -> Callable[[mpz, int], bool]:
    if test_kind == "miller":
        return is_probable_prime
    if test_kind == "fermat":
        return functools.partial(is_probable_prime_fermat, clock=clock)
    if test_kind == "fermat-parallel":
        if thread_count < 1:
            raise ValueError("thread_count must be >= 1")
        return lambda n, k: is_probable_prime_fermat_parallel(n, k, thread_count, clock=clock)
    raise ValueError(f"unknown test kind {test_kind!r} (expected one of {', '.join(TEST_KINDS)})")

def generate_prime(bit_length: int, strength: int, seed: int, test_kind: str = "miller",
                   thread_count: int = 1, max_iterations: Optional[int] = DEFAULT_MAX_ITERATIONS,
                   clock: Optional[Clock] = None) -> int:
    """
    Return the first probable prime of exactly `bit_length` bits on the chain
    started at `seed`. A rejected candidate becomes the next seed.
    `max_iterations=None` searches forever.
    """
    if bit_length < 2:
        raise ValueError("bit_length must be >= 2")
    if strength < 0:
        raise ValueError("strength must be non-negative")
    if max_iterations is not None and max_iterations < 1:
        raise ValueError("max_iterations must be >= 1 or None")
    test = _select_test(test_kind, thread_count, clock)
    modulus = power_of_two(bit_length)
    current = mpz(seed)
    iterations = 0
    while max_iterations is None or iterations < max_iterations:
        iterations += 1
        raw = lcg_next_bounded(modulus, POSIX_MULTIPLIER, POSIX_INCREMENT, current)
        candidate = shape_candidate(raw, bit_length)
        if test(candidate, strength):
            log.info("found %d-bit probable prime after %d candidates (%s)", bit_length, iterations, test_kind)
            return int(candidate)
        log.debug("candidate %d rejected", iterations)
        current = candidate
    raise SearchExhausted(bit_length, iterations)

def generate_prime_miller(bit_length: int, strength: int, seed: int,
                          max_iterations: Optional[int] = DEFAULT_MAX_ITERATIONS) -> int:
    return generate_prime(bit_length, strength, seed, "miller", max_iterations=max_iterations)

def generate_prime_fermat(bit_length: int, strength: int, seed: int,
                          max_iterations: Optional[int] = DEFAULT_MAX_ITERATIONS,
                          clock: Optional[Clock] = None) -> int:
    return generate_prime(bit_length, strength, seed, "fermat", max_iterations=max_iterations, clock=clock)

def generate_prime_fermat_parallel(bit_length: int, strength: int, seed: int, worker_count: int,
                                   max_iterations: Optional[int] = DEFAULT_MAX_ITERATIONS,
                                   clock: Optional[Clock] = None) -> int:
    return generate_prime(bit_length, strength, seed, "fermat-parallel", thread_count=worker_count,
                          max_iterations=max_iterations, clock=clock)
