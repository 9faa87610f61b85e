"""ECB, CBC and CTR modes over the 16-bit SPN cipher.

CTR uses an 8-bit IV in the high byte and an 8-bit counter in the low byte
of each counter block. The counter wraps after 256 blocks, so longer
messages reuse keystream; widening it would change the wire format.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Callable, Dict, List, Optional, Sequence, Type

from ..errors import InvalidArgumentError
from .bits import check_block
from .core import SPNCipher
from .rng import random_iv

logger = logging.getLogger(__name__)

CTR_COUNTER_SPAN = 256

IVSource = Callable[[int], int]


@dataclass
class ModeResult:
    iv: Optional[int]
    blocks: List[int] = field(default_factory=list)


class BlockMode:
    name: str = ""
    iv_bits: int = 0

    def __init__(
        self,
        cipher: SPNCipher,
        *,
        iv_source: Optional[IVSource] = None,
        allow_insecure_iv_fallback: bool = True,
    ):
        self.cipher = cipher
        self._iv_source = iv_source or partial(random_iv, allow_fallback=allow_insecure_iv_fallback)

    def _new_iv(self) -> int:
        iv = self._iv_source(self.iv_bits)
        return self._check_iv(iv)

    def _check_iv(self, iv: Optional[int]) -> int:
        if iv is None:
            raise InvalidArgumentError(f"{self.name} decryption requires an IV")
        if not 0 <= iv < (1 << self.iv_bits):
            raise InvalidArgumentError(f"{self.name} IV must fit in {self.iv_bits} bits, got {iv}")
        return iv

    def encrypt(self, blocks: Sequence[int]) -> ModeResult:  # pragma: no cover
        raise NotImplementedError

    def decrypt(self, blocks: Sequence[int], iv: Optional[int] = None) -> List[int]:  # pragma: no cover
        raise NotImplementedError


class ECBMode(BlockMode):
    name = "ECB"

    def encrypt(self, blocks: Sequence[int]) -> ModeResult:
        return ModeResult(iv=None, blocks=self.cipher.encrypt_message(blocks))

    def decrypt(self, blocks: Sequence[int], iv: Optional[int] = None) -> List[int]:
        return self.cipher.decrypt_message(blocks)


class CBCMode(BlockMode):
    name = "CBC"
    iv_bits = 16

    def encrypt(self, blocks: Sequence[int]) -> ModeResult:
        if not blocks:
            return ModeResult(iv=0, blocks=[])

        iv = self._new_iv()
        out: List[int] = []
        previous = iv
        for block in blocks:
            previous = self.cipher.encrypt_block(check_block(block) ^ previous)
            out.append(previous)
        return ModeResult(iv=iv, blocks=out)

    def decrypt(self, blocks: Sequence[int], iv: Optional[int] = None) -> List[int]:
        if not blocks:
            return []
        previous = self._check_iv(iv)
        out: List[int] = []
        for block in blocks:
            out.append(self.cipher.decrypt_block(block) ^ previous)
            # chain on the ciphertext block, not the recovered plaintext
            previous = block
        return out


class CTRMode(BlockMode):
    name = "CTR"
    iv_bits = 8

    @staticmethod
    def counter_block(iv: int, counter: int) -> int:
        return ((iv << 8) | (counter & 0xFF)) & 0xFFFF

    def _keystream_xor(self, blocks: Sequence[int], iv: int) -> List[int]:
        if len(blocks) > CTR_COUNTER_SPAN:
            logger.warning(
                "CTR message of %d blocks exceeds the %d-block counter span; keystream repeats",
                len(blocks), CTR_COUNTER_SPAN,
            )
        out: List[int] = []
        for counter, block in enumerate(blocks):
            keystream = self.cipher.encrypt_block(self.counter_block(iv, counter))
            out.append(check_block(block) ^ keystream)
        return out

    def encrypt(self, blocks: Sequence[int]) -> ModeResult:
        if not blocks:
            return ModeResult(iv=0, blocks=[])
        iv = self._new_iv()
        return ModeResult(iv=iv, blocks=self._keystream_xor(blocks, iv))

    def decrypt(self, blocks: Sequence[int], iv: Optional[int] = None) -> List[int]:
        if not blocks:
            return []
        return self._keystream_xor(blocks, self._check_iv(iv))


MODES: Dict[str, Type[BlockMode]] = {
    "ECB": ECBMode,
    "CBC": CBCMode,
    "CTR": CTRMode,
}


def build_mode(name: str, cipher: SPNCipher, **kwargs) -> BlockMode:
    key = name.upper()
    if key not in MODES:
        raise InvalidArgumentError(f"Unknown mode: {name}")
    return MODES[key](cipher, **kwargs)
