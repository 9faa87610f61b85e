"""Random sources for master keys and IVs.

Master keys only ever come from the secure source. IVs fall back to the
``random`` module when the secure source fails, which is a known weakness
kept for wire compatibility; the fallback can be switched off.
"""
from __future__ import annotations

import logging
import random
import secrets

from ..errors import RNGFailureError

logger = logging.getLogger(__name__)


def secure_random_bits(bits: int) -> int:
    try:
        return secrets.randbits(bits)
    except (NotImplementedError, OSError) as exc:
        raise RNGFailureError(f"secure random source unavailable: {exc}") from exc


def random_master_key() -> int:
    return secure_random_bits(16)


def random_iv(bits: int, *, allow_fallback: bool = True) -> int:
    try:
        return secure_random_bits(bits)
    except RNGFailureError:
        if not allow_fallback:
            raise
        logger.warning("secure RNG failed; using non-cryptographic fallback for a %d-bit IV", bits)
        return random.getrandbits(bits)
