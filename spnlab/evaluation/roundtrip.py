"""Algebraic unit testing: roundtrip verification P = D(E(P, K), K).

Generates randomized test vectors for the block transform and for each mode
of operation, and verifies that decryption inverts encryption for every one.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

from spnlab.cipher.core import SPNCipher
from spnlab.cipher.key_schedule import NUM_ROUNDS
from spnlab.cipher.modes import build_mode

logger = logging.getLogger(__name__)


@dataclass
class RoundtripFailure:
    """Details of a single failed roundtrip test vector."""
    vector_index: int
    plaintext_hex: str
    key_hex: str
    ciphertext_hex: str
    decrypted_hex: str       # What decrypt returned (should equal plaintext)
    error: Optional[str]     # Exception message if decrypt/encrypt threw


@dataclass
class RoundtripResult:
    """Aggregate result of roundtrip testing for one transform."""
    target: str              # "block" or a mode name
    rounds: int
    total_vectors: int
    passed: int
    failed: int
    failures: List[RoundtripFailure] = field(default_factory=list)
    elapsed_seconds: float = 0.0
    seed: int = 1337

    @property
    def success_rate(self) -> float:
        return self.passed / self.total_vectors if self.total_vectors > 0 else 0.0

    @property
    def is_perfect(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def summary(self) -> str:
        status = "PASS" if self.is_perfect else "FAIL"
        return (
            f"[{status}] {self.target}: "
            f"{self.passed}/{self.total_vectors} vectors passed "
            f"({self.elapsed_seconds:.2f}s)"
        )


def _hex_blocks(blocks: List[int]) -> str:
    return "".join(f"{b:04x}" for b in blocks)


def run_block_roundtrip(
    *,
    num_vectors: int = 1000,
    seed: int = 1337,
    rounds: int = NUM_ROUNDS,
    max_failures_recorded: int = 10,
) -> RoundtripResult:
    """Check decrypt_block(encrypt_block(P)) == P for random (P, K) pairs."""
    rng = random.Random(seed)
    passed = 0
    failures: List[RoundtripFailure] = []

    start = time.perf_counter()
    for i in range(num_vectors):
        key = rng.getrandbits(16)
        pt = rng.getrandbits(16)
        cipher = SPNCipher.from_key(key, rounds)
        ct = cipher.encrypt_block(pt)
        rt = cipher.decrypt_block(ct)
        if rt == pt:
            passed += 1
        elif len(failures) < max_failures_recorded:
            failures.append(RoundtripFailure(
                vector_index=i,
                plaintext_hex=f"{pt:04x}",
                key_hex=f"{key:04x}",
                ciphertext_hex=f"{ct:04x}",
                decrypted_hex=f"{rt:04x}",
                error=None,
            ))
    elapsed = time.perf_counter() - start

    return RoundtripResult(
        target="block",
        rounds=rounds,
        total_vectors=num_vectors,
        passed=passed,
        failed=num_vectors - passed,
        failures=failures,
        elapsed_seconds=round(elapsed, 4),
        seed=seed,
    )


def run_mode_roundtrip(
    mode: str,
    *,
    num_messages: int = 200,
    max_blocks: int = 32,
    seed: int = 1337,
    rounds: int = NUM_ROUNDS,
    max_failures_recorded: int = 10,
) -> RoundtripResult:
    """Check mode.decrypt(mode.encrypt(M)) == M for random multi-block messages.

    IVs are drawn from the seeded generator so that failures are reproducible.
    """
    rng = random.Random(seed)
    passed = 0
    failed = 0
    failures: List[RoundtripFailure] = []

    start = time.perf_counter()
    for i in range(num_messages):
        key = rng.getrandbits(16)
        message = [rng.getrandbits(16) for _ in range(rng.randint(1, max_blocks))]
        runner = build_mode(mode, SPNCipher.from_key(key, rounds), iv_source=rng.getrandbits)

        try:
            result = runner.encrypt(message)
            recovered = runner.decrypt(result.blocks, result.iv)
        except ValueError as exc:
            failed += 1
            logger.debug("%s roundtrip vector %d raised: %s", mode, i, exc)
            if len(failures) < max_failures_recorded:
                failures.append(RoundtripFailure(
                    vector_index=i,
                    plaintext_hex=_hex_blocks(message),
                    key_hex=f"{key:04x}",
                    ciphertext_hex="<error>",
                    decrypted_hex="<error>",
                    error=str(exc),
                ))
            continue

        if recovered == message:
            passed += 1
        else:
            failed += 1
            if len(failures) < max_failures_recorded:
                failures.append(RoundtripFailure(
                    vector_index=i,
                    plaintext_hex=_hex_blocks(message),
                    key_hex=f"{key:04x}",
                    ciphertext_hex=_hex_blocks(result.blocks),
                    decrypted_hex=_hex_blocks(recovered),
                    error=None,
                ))
    elapsed = time.perf_counter() - start

    return RoundtripResult(
        target=mode.upper(),
        rounds=rounds,
        total_vectors=num_messages,
        passed=passed,
        failed=failed,
        failures=failures,
        elapsed_seconds=round(elapsed, 4),
        seed=seed,
    )


def run_all_roundtrips(
    *,
    num_vectors: int = 1000,
    seed: int = 1337,
    rounds: int = NUM_ROUNDS,
) -> List[RoundtripResult]:
    """Block roundtrip followed by ECB, CBC and CTR message roundtrips."""
    results = [run_block_roundtrip(num_vectors=num_vectors, seed=seed, rounds=rounds)]
    for mode in ("ECB", "CBC", "CTR"):
        results.append(
            run_mode_roundtrip(mode, num_messages=max(1, num_vectors // 10), seed=seed, rounds=rounds)
        )
    for result in results:
        logger.info(result.summary())
    return results
