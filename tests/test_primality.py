import pytest
from sympy import isprime

import primegen.primality as primality
from primegen.primality import (
    clamp_witness,
    is_probable_prime,
    is_probable_prime_fermat,
    is_probable_prime_fermat_parallel,
    split_rounds,
)
from primegen.streams import SequenceStream

LARGE_PRIMES = [1000000007, 2**61 - 1, 2**89 - 1, 2**127 - 1, 170141183460469231731687303715884105727]
LARGE_COMPOSITES = [1000000007 * 998244353, (2**61 - 1) * (2**31 - 1), 2**67 - 1]
CARMICHAEL = [561, 1105, 1729, 2465, 2821, 6601, 8911]


def fixed_clock():
    return 1700000000000


# --- Miller-Rabin ---

@pytest.mark.parametrize("n", [4, 6, 8, 100, 2**64, 10**30])
@pytest.mark.parametrize("rounds", [1, 5])
def test_even_numbers_are_composite(n, rounds):
    assert is_probable_prime(n, rounds) is False


@pytest.mark.parametrize("rounds", [0, 1, 10])
def test_two_and_three(rounds):
    assert is_probable_prime(2, rounds) is True
    assert is_probable_prime(3, rounds) is True


@pytest.mark.parametrize("n", [-7, 0, 1])
def test_below_two(n):
    assert is_probable_prime(n, 5) is False


@pytest.mark.parametrize("rounds", [1, 2, 10])
def test_nine_is_composite(rounds):
    assert is_probable_prime(9, rounds) is False


def test_agrees_with_sympy_below_3000():
    for n in range(3000):
        assert is_probable_prime(n, 20) == isprime(n), n


@pytest.mark.parametrize("n", LARGE_PRIMES)
def test_large_primes(n):
    assert is_probable_prime(n, 20) is True


@pytest.mark.parametrize("n", LARGE_COMPOSITES + CARMICHAEL)
def test_large_composites_and_carmichael(n):
    assert is_probable_prime(n, 20) is False


def test_verdict_is_reproducible():
    n = 2**89 - 1
    assert is_probable_prime(n, 10) == is_probable_prime(n, 10)


def test_injected_witnesses():
    # 2047 = 23 * 89 is the smallest strong pseudoprime to base 2
    assert is_probable_prime(2047, 1, witnesses=SequenceStream([2])) is True
    assert is_probable_prime(2047, 1, witnesses=SequenceStream([3])) is False
    # smallest strong pseudoprime to bases 2, 3, 5 and 7
    spsp = 3215031751
    assert is_probable_prime(spsp, 4, witnesses=SequenceStream([2, 3, 5, 7])) is True
    assert is_probable_prime(spsp, 5, witnesses=SequenceStream([2, 3, 5, 7, 11])) is False


def test_negative_rounds_rejected():
    with pytest.raises(ValueError):
        is_probable_prime(97, -1)


@pytest.mark.parametrize("n", [5, 7, 97, 2**61 - 1])
def test_clamp_witness_range(n):
    for value in list(range(0, 40)) + [n - 1, n, n + 1, 2**64 - 1]:
        a = clamp_witness(value, n)
        assert 2 <= a <= n - 2


# --- Fermat ---

@pytest.mark.parametrize("n", LARGE_PRIMES)
def test_fermat_large_primes(n):
    assert is_probable_prime_fermat(n, 10, clock=fixed_clock) is True


@pytest.mark.parametrize("n", LARGE_COMPOSITES)
def test_fermat_large_composites(n):
    assert is_probable_prime_fermat(n, 10, clock=fixed_clock) is False


def test_fermat_small_cases():
    assert is_probable_prime_fermat(2, 5, seed=1) is True
    assert is_probable_prime_fermat(3, 5, seed=1) is True
    assert is_probable_prime_fermat(1, 5, seed=1) is False
    assert is_probable_prime_fermat(10, 5, seed=1) is False


def test_fermat_reads_clock_once_when_no_seed():
    calls = []

    def clock():
        calls.append(1)
        return 123456789

    is_probable_prime_fermat(2**61 - 1, 8, clock=clock)
    assert len(calls) == 1


def test_fermat_explicit_seed_matches_clock_seed():
    n = 1000000007 * 998244353
    assert is_probable_prime_fermat(n, 3, seed=42) == is_probable_prime_fermat(n, 3, clock=lambda: 42)


# --- Fermat, parallel ---

def test_split_rounds():
    assert split_rounds(10, 3) == [4, 3, 3]
    assert split_rounds(2, 4) == [1, 1, 0, 0]
    assert sum(split_rounds(17, 5)) == 17


@pytest.mark.parametrize("n", LARGE_PRIMES + LARGE_COMPOSITES + [9, 15, 97])
def test_parallel_single_worker_matches_sequential(n):
    for seed in (1, 42, 1700000000000):
        assert is_probable_prime_fermat_parallel(n, 6, 1, seed=seed) == \
            is_probable_prime_fermat(n, 6, seed=seed)


@pytest.mark.parametrize("n", LARGE_PRIMES)
def test_parallel_primes(n):
    assert is_probable_prime_fermat_parallel(n, 12, 4, clock=fixed_clock) is True


@pytest.mark.parametrize("n", LARGE_COMPOSITES)
def test_parallel_composites(n):
    assert is_probable_prime_fermat_parallel(n, 12, 4, clock=fixed_clock) is False


def test_parallel_more_workers_than_rounds():
    assert is_probable_prime_fermat_parallel(2**61 - 1, 2, 8, seed=5) is True


def test_parallel_composition(monkeypatch):
    # only the worker running on the base seed says "prime"
    monkeypatch.setattr(primality, "_fermat_rounds", lambda n, k, seed: seed == 77)
    n = 2**61 - 1
    assert is_probable_prime_fermat_parallel(n, 8, 4, seed=77) is False
    assert is_probable_prime_fermat_parallel(n, 8, 4, seed=77, require_all=False) is True


def test_parallel_rejects_zero_workers():
    with pytest.raises(ValueError):
        is_probable_prime_fermat_parallel(97, 4, 0, seed=1)


@pytest.mark.parametrize("p", [5, 7, 11, 13])
def test_fermat_small_primes_over_many_seeds(p):
    rejected = [s for s in range(200) if not is_probable_prime_fermat(p, 10, seed=s)]
    assert rejected == []


@pytest.mark.parametrize("p", [5, 7, 11, 13])
def test_parallel_fermat_small_primes(p):
    for seed in range(20):
        assert is_probable_prime_fermat_parallel(p, 10, 3, seed=seed) is True
