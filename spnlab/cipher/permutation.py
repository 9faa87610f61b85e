"""Fixed 16-bit wire permutation derived from a constant digit sequence."""

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

from ..errors import OutOfRangeError
from .bits import BLOCK_BITS, check_block

# Digits of Planck's constant (6.62607015).
PLANCK_DIGITS: Tuple[int, ...] = (6, 6, 2, 6, 0, 7, 0, 1, 5)


def _build_arrays(digits: Sequence[int], shift: int) -> Tuple[Tuple[int, ...], Tuple[int, ...]]:
    arr = list(range(BLOCK_BITS))
    arr = arr[shift:] + arr[:shift]

    for i, d in enumerate(digits):
        j = (i + d) % BLOCK_BITS
        arr[i], arr[j] = arr[j], arr[i]

    inverse = [0] * BLOCK_BITS
    for i, p in enumerate(arr):
        inverse[p] = i
    return tuple(arr), tuple(inverse)


class BitPermutation:
    def __init__(self, digits: Sequence[int] = PLANCK_DIGITS, shift: int = 1):
        self._forward, self._inverse = _build_arrays(digits, shift)

    @property
    def forward(self) -> Tuple[int, ...]:
        return self._forward

    @property
    def inverse(self) -> Tuple[int, ...]:
        return self._inverse

    @staticmethod
    def _check_position(position: int) -> int:
        if not 0 <= position < BLOCK_BITS:
            raise OutOfRangeError("Position must be between 0 and 15")
        return position

    def position_of(self, original_position: int) -> int:
        return self._forward[self._check_position(original_position)]

    def original_position_of(self, permuted_position: int) -> int:
        return self._inverse[self._check_position(permuted_position)]

    @staticmethod
    def _apply(block: int, mapping: Tuple[int, ...]) -> int:
        check_block(block)
        out = 0
        for i, src in enumerate(mapping):
            out |= ((block >> src) & 1) << i
        return out

    def permute(self, block: int) -> int:
        """Output bit i takes input bit ``forward[i]`` (bit 0 is the LSB)."""
        return self._apply(block, self._forward)

    def invert_permute(self, block: int) -> int:
        return self._apply(block, self._inverse)

    def table(self) -> Dict[str, List[int]]:
        return {"forward": list(self._forward), "inverse": list(self._inverse)}


DEFAULT_PERMUTATION = BitPermutation()
