"""Structured evaluation report builder.

Aggregates results from roundtrip tests, SAC analysis, and S-box analysis
into a single serializable report, together with the diagnostic tables of
the cipher components.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from spnlab.cipher.key_schedule import NUM_ROUNDS, KeySchedule
from spnlab.cipher.permutation import DEFAULT_PERMUTATION
from spnlab.cipher.sbox import FieldSBox

from .roundtrip import RoundtripResult, run_all_roundtrips
from .avalanche import SACResult, compute_sac
from .sbox_analysis import SBoxAnalysisResult, analyze_sbox

logger = logging.getLogger(__name__)


@dataclass
class EvaluationReport:
    """Complete evaluation report aggregating all analysis results."""
    timestamp: str = ""
    roundtrip_results: List[RoundtripResult] = field(default_factory=list)
    sac_results: List[SACResult] = field(default_factory=list)
    sbox_result: Optional[SBoxAnalysisResult] = None
    tables: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        """Serialize full report for JSON export."""
        return {
            "timestamp": self.timestamp,
            "roundtrip": [r.to_dict() for r in self.roundtrip_results],
            "sac": [s.to_dict() for s in self.sac_results],
            "sbox": self.sbox_result.to_dict() if self.sbox_result else None,
            "tables": self.tables,
            "summary": {
                "roundtrip_all_pass": all(r.is_perfect for r in self.roundtrip_results),
                "sac_all_pass": all(s.passes_sac for s in self.sac_results),
                "failing_targets": self.failing_targets(),
            },
        }

    def to_summary(self) -> str:
        lines = [f"Evaluation Report - {self.timestamp}", "=" * 50]

        if self.roundtrip_results:
            rt_pass = sum(1 for r in self.roundtrip_results if r.is_perfect)
            lines.append(f"\nRoundtrip Tests: {rt_pass}/{len(self.roundtrip_results)} targets pass")
            for r in self.roundtrip_results:
                lines.append(f"  {r.summary()}")

        if self.sac_results:
            sac_pass = sum(1 for s in self.sac_results if s.passes_sac)
            lines.append(f"\nSAC Analysis: {sac_pass}/{len(self.sac_results)} pass")
            for s in self.sac_results:
                lines.append(f"  {s.summary()}")

        if self.sbox_result:
            lines.append("\nS-box Analysis:")
            lines.append(f"  {self.sbox_result.summary()}")

        return "\n".join(lines)

    def failing_targets(self) -> List[str]:
        """Return names of transforms with roundtrip failures."""
        return [r.target for r in self.roundtrip_results if not r.is_perfect]


def component_tables(master_key: int, rounds: int = NUM_ROUNDS) -> Dict[str, Any]:
    """S-box, permutation and key-schedule tables for one master key."""
    sbox = FieldSBox(4)
    return {
        "sbox": {"forward": sbox.table(), "inverse": sbox.inverse_table()},
        "permutation": DEFAULT_PERMUTATION.table(),
        "key_schedule": KeySchedule(master_key, rounds).to_dict(),
    }


def build_report(
    *,
    num_vectors: int = 1000,
    sac_trials: int = 200,
    seed: int = 1337,
    rounds: int = NUM_ROUNDS,
    master_key: int = 0x1234,
    progress_callback: Optional[Callable[[str, int, int], None]] = None,
) -> EvaluationReport:
    """Run every analysis and collect the results in one report."""
    steps = ["roundtrip", "sac:plaintext", "sac:key", "sbox"]

    def _progress(i: int) -> None:
        if progress_callback:
            progress_callback(steps[i], i, len(steps))

    _progress(0)
    roundtrips = run_all_roundtrips(num_vectors=num_vectors, seed=seed, rounds=rounds)

    sac: List[SACResult] = []
    for i, input_type in enumerate(("plaintext", "key"), start=1):
        _progress(i)
        result = compute_sac(input_type=input_type, trials=sac_trials, rounds=rounds, seed=seed)
        logger.info(result.summary())
        sac.append(result)

    _progress(3)
    sbox = analyze_sbox()
    logger.info(sbox.summary())

    return EvaluationReport(
        roundtrip_results=roundtrips,
        sac_results=sac,
        sbox_result=sbox,
        tables=component_tables(master_key, rounds),
    )
