"""Bit-level helpers shared by the 16-bit cipher components."""

from __future__ import annotations

from typing import List, Sequence

from ..errors import InvalidArgumentError

BLOCK_BITS = 16
BLOCK_MASK = (1 << BLOCK_BITS) - 1
NIBBLE_BITS = 4
NIBBLE_MASK = 0xF


def rotate_left(x: int, r: int, w: int) -> int:
    """Rotate-left x by r bits in a w-bit word."""
    mask = (1 << w) - 1
    r %= w
    x &= mask
    return ((x << r) & mask) | (x >> (w - r))


def rotate_right(x: int, r: int, w: int) -> int:
    """Rotate-right x by r bits in a w-bit word."""
    mask = (1 << w) - 1
    r %= w
    x &= mask
    return (x >> r) | ((x << (w - r)) & mask)


def check_block(value: int, name: str = "block") -> int:
    if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= BLOCK_MASK:
        raise InvalidArgumentError(f"{name} must be a 16-bit unsigned integer, got {value!r}")
    return value


def split_nibbles(value: int) -> List[int]:
    """Split a 16-bit value into four nibbles, most-significant first."""
    return [(value >> shift) & NIBBLE_MASK for shift in (12, 8, 4, 0)]


def join_nibbles(nibbles: Sequence[int]) -> int:
    """Inverse of split_nibbles."""
    if len(nibbles) != 4:
        raise InvalidArgumentError("join_nibbles expects exactly four nibbles")
    out = 0
    for n in nibbles:
        out = (out << NIBBLE_BITS) | (n & NIBBLE_MASK)
    return out
