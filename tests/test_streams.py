import pytest

from primegen.generators import MMIX_MULTIPLIER, lcg_next
from primegen.streams import LcgStream, SequenceStream, derive_worker_seed, now_millis, resolve_seed


def test_lcg_stream_chains_state():
    stream = LcgStream(7)
    n = 2**61 - 1
    first = stream.draw(n)
    second = stream.draw(n)
    assert first == lcg_next(2**64, MMIX_MULTIPLIER, 1, 7)
    assert second == lcg_next(2**64, MMIX_MULTIPLIER, 1, first)
    assert stream.state == second


def test_lcg_stream_modulus_follows_bit_length():
    # 100-bit n rounds up to 128 bits of modulus
    n = 2**99 + 1
    assert LcgStream(3).draw(n) == lcg_next(2**128, MMIX_MULTIPLIER, 1, 3)


def test_sequence_stream_cycles():
    stream = SequenceStream([2, 3, 5])
    assert [stream.draw(97) for _ in range(5)] == [2, 3, 5, 2, 3]


def test_sequence_stream_needs_values():
    with pytest.raises(ValueError):
        SequenceStream([])


def test_resolve_seed_prefers_explicit_seed():
    assert resolve_seed(11, clock=lambda: 99) == 11
    assert resolve_seed(None, clock=lambda: 99) == 99


def test_now_millis_is_recent():
    assert now_millis() > 1_600_000_000_000


def test_worker_seeds():
    base = 1700000000000
    assert derive_worker_seed(base, 0) == base
    seeds = {derive_worker_seed(base, i) for i in range(8)}
    assert len(seeds) == 8
    assert derive_worker_seed(base, 3) == derive_worker_seed(base, 3)
