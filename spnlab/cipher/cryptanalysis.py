from __future__ import annotations

import random
from typing import Dict, List, Sequence

import numpy as np

from ..errors import InvalidArgumentError, OutOfRangeError
from .bits import BLOCK_BITS
from .core import SPNCipher
from .key_schedule import NUM_ROUNDS


def hamming_distance(a: int, b: int) -> int:
    return bin(a ^ b).count("1")


def flip_bit(value: int, bit_index: int, width: int = BLOCK_BITS) -> int:
    if bit_index < 0 or bit_index >= width:
        raise OutOfRangeError(f"Bit position must be between 0 and {width - 1}")
    return value ^ (1 << bit_index)


def avalanche_plaintext(
    *,
    trials: int = 200,
    flips_per_trial: int = 1,
    rounds: int = NUM_ROUNDS,
    seed: int = 1337,
) -> Dict[str, float]:
    rng = random.Random(seed)
    total_frac = 0.0
    for _ in range(trials):
        cipher = SPNCipher.from_key(rng.getrandbits(16), rounds)
        pt = rng.getrandbits(16)
        ct = cipher.encrypt_block(pt)
        for _ in range(flips_per_trial):
            pt2 = flip_bit(pt, rng.randrange(0, BLOCK_BITS))
            total_frac += hamming_distance(ct, cipher.encrypt_block(pt2)) / BLOCK_BITS
    denom = trials * flips_per_trial
    return {
        "mean": total_frac / denom if denom else 0.0,
    }


def avalanche_key(
    *,
    trials: int = 200,
    flips_per_trial: int = 1,
    rounds: int = NUM_ROUNDS,
    seed: int = 1337,
) -> Dict[str, float]:
    rng = random.Random(seed + 1)
    total_frac = 0.0
    for _ in range(trials):
        key = rng.getrandbits(16)
        pt = rng.getrandbits(16)
        ct = SPNCipher.from_key(key, rounds).encrypt_block(pt)
        for _ in range(flips_per_trial):
            key2 = flip_bit(key, rng.randrange(0, BLOCK_BITS))
            ct2 = SPNCipher.from_key(key2, rounds).encrypt_block(pt)
            total_frac += hamming_distance(ct, ct2) / BLOCK_BITS
    denom = trials * flips_per_trial
    return {
        "mean": total_frac / denom if denom else 0.0,
    }


def sbox_ddt(sbox: Sequence[int]) -> np.ndarray:
    """Difference distribution table, rows indexed by input difference."""
    n = len(sbox)
    if n not in (16, 256):
        raise InvalidArgumentError("sbox must be 4-bit (16) or 8-bit (256)")
    table = np.asarray(sbox, dtype=np.int64)
    xs = np.arange(n)
    ddt = np.zeros((n, n), dtype=np.int64)
    for dx in range(n):
        dy = table[xs] ^ table[xs ^ dx]
        ddt[dx] = np.bincount(dy, minlength=n)
    return ddt


def sbox_ddt_max(sbox: Sequence[int]) -> int:
    """Return max entry in DDT excluding dx=0 (scaled by counts, not prob)."""
    return int(sbox_ddt(sbox)[1:].max())


def _parity(values: np.ndarray) -> np.ndarray:
    bits = np.unpackbits(values.astype(np.uint8).reshape(-1, 1), axis=1)
    return bits.sum(axis=1) % 2


def sbox_lat(sbox: Sequence[int]) -> np.ndarray:
    """Walsh-style linear approximation table: agreements minus disagreements."""
    n = len(sbox)
    if n not in (16, 256):
        raise InvalidArgumentError("sbox must be 4-bit (16) or 8-bit (256)")
    table = np.asarray(sbox, dtype=np.int64)
    xs = np.arange(n)
    lat = np.zeros((n, n), dtype=np.int64)
    for a in range(n):
        ax = _parity(a & xs)
        for b in range(n):
            bx = _parity(b & table)
            lat[a, b] = int(np.sum(np.where(ax == bx, 1, -1)))
    return lat


def sbox_lat_max_abs(sbox: Sequence[int]) -> int:
    """Return max absolute bias*2^m (Walsh) for non-trivial masks."""
    return int(np.abs(sbox_lat(sbox)[1:, 1:]).max())


def evaluate_cipher(*, rounds: int = NUM_ROUNDS, trials: int = 200, seed: int = 1337) -> Dict[str, object]:
    pt = avalanche_plaintext(trials=trials, rounds=rounds, seed=seed)
    kk = avalanche_key(trials=trials, rounds=rounds, seed=seed)
    return {
        "block_size_bits": BLOCK_BITS,
        "key_size_bits": BLOCK_BITS,
        "rounds": rounds,
        "plaintext_avalanche": pt,
        "key_avalanche": kk,
    }


def fixed_points(sbox: Sequence[int]) -> List[int]:
    return [x for x, y in enumerate(sbox) if x == y]
