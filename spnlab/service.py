"""Per-mode encrypt/decrypt entry points working on bytes and Base64 text.

``encrypt`` draws a fresh master key for every message unless one is passed
in, and returns the key, the IV (CBC/CTR) and the ciphertext as Base64 text.
``decrypt`` takes the same three texts back and returns the plaintext bytes.

With ``combined=True`` the IV bytes are prepended to the ciphertext and no
separate IV text is produced or expected.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional, Union

from .cipher.core import SPNCipher
from .cipher.key_schedule import NUM_ROUNDS
from .cipher.modes import MODES, IVSource, build_mode
from .codec import (
    b64decode,
    b64encode,
    blocks_to_bytes,
    blocks_to_legacy_bytes,
    bytes_to_blocks,
    decode_combined,
    decode_iv,
    encode_combined,
    encode_iv,
    frame_length_prefixed,
    unframe_length_prefixed,
)
from .config import Framing, Settings, load_settings
from .errors import InvalidArgumentError

logger = logging.getLogger(__name__)


@dataclass
class EncryptionResult:
    mode: str
    master_key: str
    iv: Optional[str]
    ciphertext: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class CipherService:
    def __init__(
        self,
        mode: str,
        *,
        rounds: int = NUM_ROUNDS,
        framing: Framing = "legacy",
        combined: bool = False,
        allow_insecure_iv_fallback: bool = True,
        iv_source: Optional[IVSource] = None,
    ):
        if framing not in ("legacy", "length_prefixed"):
            raise InvalidArgumentError(f"Unknown framing: {framing}")
        self.mode = mode.upper()
        if self.mode not in MODES:
            raise InvalidArgumentError(f"Unknown mode: {mode}")
        self.iv_bits = MODES[self.mode].iv_bits
        self.rounds = rounds
        self.framing = framing
        self.combined = combined
        self._mode_kwargs = {
            "iv_source": iv_source,
            "allow_insecure_iv_fallback": allow_insecure_iv_fallback,
        }

    @classmethod
    def from_settings(cls, mode: str, settings: Optional[Settings] = None, **kwargs) -> "CipherService":
        s = settings or load_settings()
        return cls(
            mode,
            rounds=s.rounds,
            framing=s.framing,
            combined=s.combined_framing,
            allow_insecure_iv_fallback=s.allow_insecure_iv_fallback,
            **kwargs,
        )

    def _runner(self, cipher: SPNCipher):
        return build_mode(self.mode, cipher, **self._mode_kwargs)

    def _frame(self, data: bytes) -> List[int]:
        if self.framing == "length_prefixed":
            return frame_length_prefixed(data)
        return bytes_to_blocks(data)

    def _unframe(self, blocks: List[int]) -> bytes:
        if self.framing == "length_prefixed":
            return unframe_length_prefixed(blocks)
        return blocks_to_legacy_bytes(blocks)

    def encrypt(self, plaintext: Union[bytes, str], *, master_key: Optional[str] = None) -> EncryptionResult:
        if isinstance(plaintext, str):
            plaintext = plaintext.encode("utf-8")
        if not plaintext:
            raise InvalidArgumentError("The message must not be empty")

        if master_key is not None:
            cipher = SPNCipher.from_base64(master_key, self.rounds)
        else:
            cipher = SPNCipher.generate(self.rounds)

        result = self._runner(cipher).encrypt(self._frame(plaintext))
        logger.debug("%s encrypted %d bytes into %d blocks", self.mode, len(plaintext), len(result.blocks))

        iv_text = None
        if self.iv_bits and self.combined:
            ciphertext = encode_combined(result.iv, self.iv_bits, result.blocks)
        else:
            ciphertext = b64encode(blocks_to_bytes(result.blocks))
            if self.iv_bits:
                iv_text = encode_iv(result.iv, self.iv_bits)

        return EncryptionResult(
            mode=self.mode,
            master_key=cipher.master_key_base64(),
            iv=iv_text,
            ciphertext=ciphertext,
        )

    def decrypt(self, master_key: str, ciphertext: str, iv: Optional[str] = None) -> bytes:
        if not master_key:
            raise InvalidArgumentError("The key must not be empty")
        if not ciphertext:
            raise InvalidArgumentError("The message must not be empty")

        cipher = SPNCipher.from_base64(master_key, self.rounds)

        iv_value = None
        if self.iv_bits and self.combined:
            iv_value, blocks = decode_combined(ciphertext, self.iv_bits)
        else:
            blocks = bytes_to_blocks(b64decode(ciphertext))
            if self.iv_bits:
                if not iv:
                    raise InvalidArgumentError(f"{self.mode} decryption requires an IV")
                iv_value = decode_iv(iv, self.iv_bits)

        plain_blocks = self._runner(cipher).decrypt(blocks, iv_value)
        logger.debug("%s decrypted %d blocks", self.mode, len(plain_blocks))
        return self._unframe(plain_blocks)


def encrypt_ecb(plaintext: Union[bytes, str], **kwargs) -> EncryptionResult:
    return CipherService("ECB", **kwargs).encrypt(plaintext)


def decrypt_ecb(master_key: str, ciphertext: str, **kwargs) -> bytes:
    return CipherService("ECB", **kwargs).decrypt(master_key, ciphertext)


def encrypt_cbc(plaintext: Union[bytes, str], **kwargs) -> EncryptionResult:
    return CipherService("CBC", **kwargs).encrypt(plaintext)


def decrypt_cbc(master_key: str, iv: Optional[str], ciphertext: str, **kwargs) -> bytes:
    return CipherService("CBC", **kwargs).decrypt(master_key, ciphertext, iv)


def encrypt_ctr(plaintext: Union[bytes, str], **kwargs) -> EncryptionResult:
    return CipherService("CTR", **kwargs).encrypt(plaintext)


def decrypt_ctr(master_key: str, iv: Optional[str], ciphertext: str, **kwargs) -> bytes:
    return CipherService("CTR", **kwargs).decrypt(master_key, ciphertext, iv)
