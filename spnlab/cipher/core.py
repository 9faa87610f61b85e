from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List

from .bits import check_block, join_nibbles, split_nibbles
from .key_schedule import NUM_ROUNDS, KeySchedule
from .permutation import DEFAULT_PERMUTATION, BitPermutation
from .sbox import FieldSBox

SBOX_FIELD_BITS = 4


class BlockCipher:
    def encrypt_block(self, block: int) -> int:  # pragma: no cover
        raise NotImplementedError

    def decrypt_block(self, block: int) -> int:  # pragma: no cover
        raise NotImplementedError


@dataclass(frozen=True)
class SPNCipher(BlockCipher):
    """Five-round 16-bit SPN: key XOR, nibble S-box, bit permutation."""

    key_schedule: KeySchedule
    sbox: FieldSBox = field(default_factory=lambda: FieldSBox(SBOX_FIELD_BITS), repr=False)
    permutation: BitPermutation = field(default=DEFAULT_PERMUTATION, repr=False)

    @classmethod
    def generate(cls, rounds: int = NUM_ROUNDS) -> "SPNCipher":
        return cls(KeySchedule.generate(rounds))

    @classmethod
    def from_key(cls, master_key: int, rounds: int = NUM_ROUNDS) -> "SPNCipher":
        return cls(KeySchedule(master_key, rounds))

    @classmethod
    def from_base64(cls, text: str, rounds: int = NUM_ROUNDS) -> "SPNCipher":
        from ..codec import decode_key

        return cls.from_key(decode_key(text), rounds)

    @property
    def master_key(self) -> int:
        return self.key_schedule.master_key

    @property
    def rounds(self) -> int:
        return self.key_schedule.rounds

    def master_key_base64(self) -> str:
        from ..codec import encode_key

        return encode_key(self.master_key)

    def encrypt_block(self, block: int) -> int:
        state = check_block(block)
        for r in range(1, self.rounds + 1):
            state ^= self.key_schedule.round_key(r)
            state = join_nibbles(self.sbox.substitute_all(split_nibbles(state)))
            state = self.permutation.permute(state)
        return state

    def decrypt_block(self, block: int) -> int:
        state = check_block(block)
        for r in range(self.rounds, 0, -1):
            state = self.permutation.invert_permute(state)
            state = join_nibbles(self.sbox.inverse_substitute_all(split_nibbles(state)))
            # forward key: XOR undoes itself
            state ^= self.key_schedule.round_key(r)
        return state

    def encrypt_message(self, blocks: Iterable[int]) -> List[int]:
        return [self.encrypt_block(b) for b in blocks]

    def decrypt_message(self, blocks: Iterable[int]) -> List[int]:
        return [self.decrypt_block(b) for b in blocks]
