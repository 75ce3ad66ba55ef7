# primegen/errors.py
from __future__ import annotations


class PrimeGenError(Exception):
    """Base class for every error raised by primegen."""


class NotCoPrime(PrimeGenError):
    """BBS seed is a multiple of one of the modulus factors."""

    def __init__(self, value: int, factor: int):
        self.value = int(value)
        self.factor = int(factor)
        super().__init__(f"Value {self.value} is not a co-prime number with {self.factor}")


class ConversionError(PrimeGenError):
    """Integer does not fit the narrower unsigned type it is converted into."""

    def __init__(self, value: int, bits: int = 32):
        self.value = int(value)
        self.bits = bits
        super().__init__(f"{self.value} does not fit an unsigned {bits}-bit integer")


class SearchExhausted(PrimeGenError):
    def __init__(self, bit_length: int, iterations: int):
        self.bit_length = bit_length
        self.iterations = iterations
        super().__init__(f"no {bit_length}-bit candidate accepted after {iterations} iterations")
