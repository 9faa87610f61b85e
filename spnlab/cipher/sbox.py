"""Nibble substitution built on GF(2^n) multiplication.

The forward map is ``S(x) = ((x ^ 5) * 7) ^ 10`` in the field. The inverse
multiplies by the inverse of 7 taken over the plain integers modulo 31
(which is 9). In GF(2^4) with reduction polynomial 0x1F that value is also
the field inverse of 7, so the pair is a bijection for the 4-bit box the
cipher uses. For other widths the inverse is not guaranteed to invert.
"""

from __future__ import annotations

from typing import Iterable, List

from ..errors import InvalidArgumentError

INPUT_MASK = 5
MULTIPLIER = 7
OUTPUT_MASK = 10
INVERSE_MODULUS = 31

_TABLE_MAX_BITS = 8


def _reduction_polynomial(field_bits: int) -> int:
    if field_bits == 4:
        return 0x1F
    if field_bits == 8:
        return 0x11B
    return (1 << field_bits) | 0x3


def _extended_gcd(a: int, n: int):
    """Return (gcd, x1) with x1 the running Bezout coefficient of ``a``."""
    if a % n == 0:
        return n, 0
    if n % a == 0:
        return a, 1

    u, v = a, n
    x1, x2 = 1, 0
    while u not in (0, 1):
        q, r = divmod(v, u)
        x = x2 - q * x1
        v, u = u, r
        x2, x1 = x1, x
        if u == 0:
            return v, x1
    return u, x1


def modular_inverse(a: int, n: int) -> int:
    """Multiplicative inverse of ``a`` modulo ``n``; 0 when none exists."""
    g, x1 = _extended_gcd(a, n)
    if g == 1:
        return x1 % n
    return 0


class FieldSBox:
    def __init__(self, field_bits: int = 4):
        if field_bits <= 0 or field_bits > 32:
            raise InvalidArgumentError("Field size must be between 1 and 32")
        self.field_bits = field_bits
        self.mask = (1 << field_bits) - 1
        self._poly = _reduction_polynomial(field_bits)
        self._inverse_multiplier = modular_inverse(MULTIPLIER, INVERSE_MODULUS)

        self._forward = None
        self._inverse = None
        if field_bits <= _TABLE_MAX_BITS:
            self._forward = [self._substitute(x) for x in range(self.mask + 1)]
            self._inverse = [self._inverse_substitute(x) for x in range(self.mask + 1)]

    def _multiply(self, a: int, b: int) -> int:
        n = self.field_bits
        result = 0
        for i in range(n):
            if b & (1 << i):
                result ^= a << i
            # reduce after every partial product
            for j in range(2 * n - 2, n - 1, -1):
                if result & (1 << j):
                    result ^= self._poly << (j - n)
        return result & self.mask

    def _substitute(self, element: int) -> int:
        return self._multiply(INPUT_MASK ^ element, MULTIPLIER) ^ OUTPUT_MASK

    def _inverse_substitute(self, element: int) -> int:
        return self._multiply(OUTPUT_MASK ^ element, self._inverse_multiplier) ^ INPUT_MASK

    def _check(self, element: int) -> int:
        if not 0 <= element <= self.mask:
            raise InvalidArgumentError(
                f"S-box input must be in 0..{self.mask}, got {element}"
            )
        return element

    @property
    def inverse_multiplier(self) -> int:
        return self._inverse_multiplier

    def substitute(self, element: int) -> int:
        self._check(element)
        if self._forward is not None:
            return self._forward[element]
        return self._substitute(element)

    def inverse_substitute(self, element: int) -> int:
        self._check(element)
        if self._inverse is not None:
            return self._inverse[element]
        return self._inverse_substitute(element)

    def substitute_all(self, elements: Iterable[int]) -> List[int]:
        return [self.substitute(e) for e in elements]

    def inverse_substitute_all(self, elements: Iterable[int]) -> List[int]:
        return [self.inverse_substitute(e) for e in elements]

    def table(self) -> List[int]:
        """Full forward lookup table (widths up to 8 bits)."""
        if self._forward is None:
            raise InvalidArgumentError("Lookup tables are only built for widths up to 8 bits")
        return list(self._forward)

    def inverse_table(self) -> List[int]:
        if self._inverse is None:
            raise InvalidArgumentError("Lookup tables are only built for widths up to 8 bits")
        return list(self._inverse)

    def __repr__(self) -> str:
        return f"FieldSBox(field_bits={self.field_bits})"
