from .errors import ConversionError, NotCoPrime, PrimeGenError, SearchExhausted
from .generators import bbs_bits, bbs_generate, lcg_next, lcg_next_bounded
from .primality import (
    is_probable_prime,
    is_probable_prime_fermat,
    is_probable_prime_fermat_parallel,
)
from .search import (
    generate_prime,
    generate_prime_fermat,
    generate_prime_fermat_parallel,
    generate_prime_miller,
)
from .streams import LcgStream, SequenceStream, now_millis

__version__ = "0.1.0"

__all__ = [
    "ConversionError", "NotCoPrime", "PrimeGenError", "SearchExhausted",
    "bbs_bits", "bbs_generate", "lcg_next", "lcg_next_bounded",
    "is_probable_prime", "is_probable_prime_fermat", "is_probable_prime_fermat_parallel",
    "generate_prime", "generate_prime_fermat", "generate_prime_fermat_parallel", "generate_prime_miller",
    "LcgStream", "SequenceStream", "now_millis",
]
