"""Block framing and Base64 transport for 16-bit cipher blocks.

Blocks are two bytes each, most-significant byte first. The legacy text
framing pads an odd trailing byte with zero and drops every zero byte when
turning blocks back into bytes, so plaintexts containing NUL bytes do not
survive it. ``frame_length_prefixed`` is the byte-exact alternative.
"""
from __future__ import annotations

import base64
import binascii
from typing import Iterable, List, Sequence, Tuple

from .cipher.bits import check_block
from .errors import InvalidArgumentError

BLOCK_BYTES = 2
LENGTH_PREFIX_BYTES = 4


def bytes_to_blocks(data: bytes) -> List[int]:
    blocks: List[int] = []
    for i in range(0, len(data), BLOCK_BYTES):
        high = data[i]
        low = data[i + 1] if i + 1 < len(data) else 0
        blocks.append((high << 8) | low)
    return blocks


def blocks_to_bytes(blocks: Iterable[int]) -> bytes:
    out = bytearray()
    for block in blocks:
        check_block(block)
        out += block.to_bytes(BLOCK_BYTES, "big")
    return bytes(out)


def blocks_to_legacy_bytes(blocks: Iterable[int]) -> bytes:
    """Reassemble text bytes, dropping every zero byte."""
    return bytes(b for b in blocks_to_bytes(blocks) if b != 0)


def frame_length_prefixed(data: bytes) -> List[int]:
    return bytes_to_blocks(len(data).to_bytes(LENGTH_PREFIX_BYTES, "big") + data)


def unframe_length_prefixed(blocks: Sequence[int]) -> bytes:
    raw = blocks_to_bytes(blocks)
    if len(raw) < LENGTH_PREFIX_BYTES:
        raise InvalidArgumentError("Not enough data for a length prefix")
    length = int.from_bytes(raw[:LENGTH_PREFIX_BYTES], "big")
    body = raw[LENGTH_PREFIX_BYTES:]
    if length > len(body):
        raise InvalidArgumentError(f"Length prefix {length} exceeds payload of {len(body)} bytes")
    return body[:length]


def b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def b64decode(text: str) -> bytes:
    if not text or not text.strip():
        raise InvalidArgumentError("Base64 text must not be empty")
    try:
        return base64.b64decode(text.strip(), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidArgumentError(f"Invalid Base64 text: {exc}") from exc


def _iv_bytes(iv_bits: int) -> int:
    if iv_bits not in (8, 16):
        raise InvalidArgumentError(f"IV width must be 8 or 16 bits, got {iv_bits}")
    return iv_bits // 8


def encode_key(master_key: int) -> str:
    check_block(master_key, "master_key")
    return b64encode(master_key.to_bytes(2, "big"))


def decode_key(text: str) -> int:
    raw = b64decode(text)
    if len(raw) < 2:
        raise InvalidArgumentError("Invalid Base64 key: not enough data")
    return int.from_bytes(raw[:2], "big")


def _iv_prefix(iv: int, iv_bits: int) -> bytes:
    n = _iv_bytes(iv_bits)
    if not isinstance(iv, int) or not 0 <= iv < (1 << iv_bits):
        raise InvalidArgumentError(f"IV does not fit in {iv_bits} bits: {iv}")
    return iv.to_bytes(n, "big")


def encode_iv(iv: int, iv_bits: int) -> str:
    return b64encode(_iv_prefix(iv, iv_bits))


def decode_iv(text: str, iv_bits: int) -> int:
    n = _iv_bytes(iv_bits)
    raw = b64decode(text)
    if len(raw) < n:
        raise InvalidArgumentError("Invalid Base64 IV: not enough data")
    return int.from_bytes(raw[:n], "big")


def encode_combined(iv: int, iv_bits: int, blocks: Iterable[int]) -> str:
    return b64encode(_iv_prefix(iv, iv_bits) + blocks_to_bytes(blocks))


def decode_combined(text: str, iv_bits: int) -> Tuple[int, List[int]]:
    n = _iv_bytes(iv_bits)
    raw = b64decode(text)
    if len(raw) < n:
        raise InvalidArgumentError("Not enough data to extract the IV")
    return int.from_bytes(raw[:n], "big"), bytes_to_blocks(raw[n:])
