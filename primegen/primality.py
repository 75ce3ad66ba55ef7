# primegen/primality.py
# Probabilistic primality tests
# - Miller-Rabin with an injectable witness stream
# - Fermat, sequential and split across worker threads

from __future__ import annotations
import concurrent.futures
import logging
from typing import List, Optional

import gmpy2
from gmpy2 import mpz

from .streams import Clock, LcgStream, WitnessStream, derive_worker_seed, resolve_seed

log = logging.getLogger(__name__)

# Witness schedule shared by every Miller-Rabin call that does not bring its own stream
MILLER_RABIN_SEED = 1726378162783618261

# ---------- Utilities ----------

def _trivial_verdict(n: mpz) -> Optional[bool]:
    """Answer for n < 4 and even n, None when a real test is needed."""
    if n < 2: return False
    if n == 2 or n == 3: return True
    if n % 2 == 0: return False
    return None

def _check_rounds(rounds: int) -> None:
    if rounds < 0:
        raise ValueError("rounds must be non-negative")

def clamp_witness(value: int, n: int) -> int:
    """Reduce a raw draw into [2, n-2] (n odd, n >= 5)."""
    a = value % n
    if 2 <= a <= n - 2:
        return a
    return 2 + value % (n - 3)

# ---------- Miller-Rabin ----------

def _miller_rabin_base(n: mpz, a: mpz, d: mpz, s: int) -> bool:
    """One strong round for base a, n-1 = 2^s * d. False means composite."""
    x = gmpy2.powmod(a, d, n)
    if x == 1 or x == n - 1:
        return True
    for _ in range(s - 1):
        x = gmpy2.powmod(x, 2, n)
        if x == n - 1:
            return True
    return False

def is_probable_prime(n: int, rounds: int = 10, witnesses: Optional[WitnessStream] = None) -> bool:
    """
    Miller-Rabin test. Witnesses come from `witnesses`, or from an LCG stream
    with a fixed seed, so the same n always gets the same verdict.
    """
    _check_rounds(rounds)
    n = mpz(n)
    trivial = _trivial_verdict(n)
    if trivial is not None:
        return trivial
    d = n - 1
    s = (d & -d).bit_length() - 1  # v2(n-1)
    d >>= s
    stream = witnesses if witnesses is not None else LcgStream(MILLER_RABIN_SEED)
    for _ in range(rounds):
        a = mpz(clamp_witness(stream.draw(n), n))
        if not _miller_rabin_base(n, a, d, s):
            return False
    return True

# ---------- Fermat ----------

def _fermat_rounds(n: mpz, rounds: int, seed: int) -> bool:
    stream = LcgStream(seed)
    for _ in range(rounds):
        a = mpz(clamp_witness(stream.draw(n), n))
        if gmpy2.gcd(a, n) != 1:
            return False
        if gmpy2.powmod(a, n - 1, n) != 1:
            return False
    return True

def is_probable_prime_fermat(n: int, rounds: int = 10, seed: Optional[int] = None,
                             clock: Optional[Clock] = None) -> bool:
    """Fermat test. The base chain is seeded from `seed`, or from the clock once per call."""
    _check_rounds(rounds)
    n = mpz(n)
    trivial = _trivial_verdict(n)
    if trivial is not None:
        return trivial
    return _fermat_rounds(n, rounds, resolve_seed(seed, clock))

def split_rounds(rounds: int, workers: int) -> List[int]:
    """Even split; the first rounds % workers workers take one extra round."""
    share, extra = divmod(rounds, workers)
    return [share + (1 if i < extra else 0) for i in range(workers)]

def is_probable_prime_fermat_parallel(n: int, rounds: int = 10, worker_count: int = 2,
                                      seed: Optional[int] = None, clock: Optional[Clock] = None,
                                      require_all: bool = True) -> bool:
    """
    Fermat test with the rounds split across worker threads.

    Each worker runs its own base chain (worker 0 on the base seed itself).
    With require_all the verdict is the AND of the workers, otherwise the OR.
    Waiting stops at the first decisive worker; workers not yet started are cancelled.
    """
    _check_rounds(rounds)
    if worker_count < 1:
        raise ValueError("worker_count must be >= 1")
    n = mpz(n)
    trivial = _trivial_verdict(n)
    if trivial is not None:
        return trivial
    base = resolve_seed(seed, clock)
    shares = [k for k in split_rounds(rounds, worker_count) if k > 0]
    if not shares:
        return True
    log.debug("fermat: %d rounds over %d workers %s", rounds, len(shares), shares)

    decisive = not require_all
    with concurrent.futures.ThreadPoolExecutor(max_workers=len(shares)) as executor:
        futures = [executor.submit(_fermat_rounds, n, k, derive_worker_seed(base, i))
                   for i, k in enumerate(shares)]
        for future in concurrent.futures.as_completed(futures):
            if future.result() == decisive:
                for f in futures:
                    f.cancel()
                return decisive
    return not decisive
