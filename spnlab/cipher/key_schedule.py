from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from ..errors import InvalidArgumentError, OutOfRangeError
from .bits import BLOCK_BITS, check_block, join_nibbles, rotate_left, rotate_right, split_nibbles
from .rng import random_master_key

NUM_ROUNDS = 5
MAX_ROUNDS = BLOCK_BITS


def _forward_keys(master_key: int, rounds: int) -> Tuple[int, ...]:
    keys: List[int] = []
    current = master_key
    for r in range(1, rounds + 1):
        bumped = join_nibbles([(n + 1) % 16 for n in split_nibbles(current)])
        current = rotate_left(bumped, r - 1, BLOCK_BITS)
        keys.append(current)
    return tuple(keys)


def _inverse_keys(round_keys: Tuple[int, ...]) -> Tuple[int, ...]:
    keys: List[int] = []
    for r in range(len(round_keys), 0, -1):
        rotated = rotate_right(round_keys[r - 1], r - 1, BLOCK_BITS)
        keys.append(join_nibbles([(n - 1) % 16 for n in split_nibbles(rotated)]))
    return tuple(keys)


@dataclass(frozen=True)
class KeySchedule:
    """Round keys derived from a 16-bit master key.

    ``inverse_round_keys`` is kept for inspection only; decryption XORs the
    forward keys in descending round order.
    """

    master_key: int
    rounds: int = NUM_ROUNDS
    round_keys: Tuple[int, ...] = field(init=False, repr=False)
    inverse_round_keys: Tuple[int, ...] = field(init=False, repr=False)

    def __post_init__(self):
        check_block(self.master_key, "master_key")
        if not 1 <= self.rounds <= MAX_ROUNDS:
            raise InvalidArgumentError(f"rounds must be in 1..{MAX_ROUNDS}, got {self.rounds}")
        forward = _forward_keys(self.master_key, self.rounds)
        object.__setattr__(self, "round_keys", forward)
        object.__setattr__(self, "inverse_round_keys", _inverse_keys(forward))

    @classmethod
    def generate(cls, rounds: int = NUM_ROUNDS) -> "KeySchedule":
        return cls(random_master_key(), rounds)

    def _lookup(self, keys: Tuple[int, ...], round_number: int) -> int:
        if not 1 <= round_number <= len(keys):
            raise OutOfRangeError("Round number out of range")
        return keys[round_number - 1]

    def round_key(self, round_number: int) -> int:
        return self._lookup(self.round_keys, round_number)

    def inverse_round_key(self, round_number: int) -> int:
        return self._lookup(self.inverse_round_keys, round_number)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "master_key": f"0x{self.master_key:04X}",
            "rounds": self.rounds,
            "round_keys": [f"0x{k:04X}" for k in self.round_keys],
            "inverse_round_keys": [f"0x{k:04X}" for k in self.inverse_round_keys],
        }
