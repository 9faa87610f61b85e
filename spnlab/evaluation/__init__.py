"""Deterministic evaluation of the 16-bit SPN cipher.

Provides algebraic unit testing (roundtrip verification) for the block
transform and every mode, statistical analysis (SAC), and S-box DDT/LAT
analysis, aggregated into a serializable report.

Research / education only. Do NOT use in production.
"""

from .roundtrip import (
    RoundtripResult,
    RoundtripFailure,
    run_block_roundtrip,
    run_mode_roundtrip,
    run_all_roundtrips,
)
from .avalanche import SACResult, compute_sac
from .sbox_analysis import SBoxAnalysisResult, analyze_sbox
from .report import EvaluationReport, build_report, component_tables

__all__ = [
    "RoundtripResult",
    "RoundtripFailure",
    "run_block_roundtrip",
    "run_mode_roundtrip",
    "run_all_roundtrips",
    "SACResult",
    "compute_sac",
    "SBoxAnalysisResult",
    "analyze_sbox",
    "EvaluationReport",
    "build_report",
    "component_tables",
]
