"""S-box differential and linear analysis.

Wraps sbox_ddt_max and sbox_lat_max_abs from spnlab.cipher.cryptanalysis
with structured result output and bijectivity checking.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict, field
from typing import Any, Dict, List, Optional

from spnlab.cipher.cryptanalysis import fixed_points, sbox_ddt_max, sbox_lat_max_abs
from spnlab.cipher.sbox import FieldSBox


@dataclass
class SBoxAnalysisResult:
    """Structured result of S-box differential/linear analysis."""
    field_bits: int
    sbox_size: int              # 16 (4-bit) or 256 (8-bit)
    table: List[int]
    inverse_table: List[int]
    ddt_max: int                # Max DDT entry (ideal: 2 for 4-bit, 4 for 8-bit)
    lat_max_abs: int            # Max LAT absolute bias (lower = better)
    is_bijective: bool          # inverse(forward(x)) == x for every x
    differential_uniformity: str  # "good" / "fair" / "poor"
    linearity: str              # "good" / "fair" / "poor"
    fixed_points: List[int] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def summary(self) -> str:
        bij = "bijective" if self.is_bijective else "NOT bijective"
        return (
            f"GF(2^{self.field_bits}) S-box ({self.sbox_size}-entry): "
            f"DDT_max={self.ddt_max} ({self.differential_uniformity}), "
            f"LAT_max={self.lat_max_abs} ({self.linearity}), {bij}, "
            f"fixed points={self.fixed_points}"
        )


def _rate_differential_uniformity(ddt_max: int, sbox_size: int) -> str:
    if sbox_size == 16:
        if ddt_max <= 4:
            return "good"
        elif ddt_max <= 6:
            return "fair"
        return "poor"
    if ddt_max <= 4:
        return "good"
    elif ddt_max <= 8:
        return "fair"
    return "poor"


def _rate_linearity(lat_max: int, sbox_size: int) -> str:
    if sbox_size == 16:
        if lat_max <= 4:
            return "good"
        elif lat_max <= 6:
            return "fair"
        return "poor"
    if lat_max <= 16:
        return "good"
    elif lat_max <= 32:
        return "fair"
    return "poor"


def analyze_sbox(sbox: Optional[FieldSBox] = None) -> SBoxAnalysisResult:
    """Analyze the field S-box for differential/linear properties.

    Multiplication by a constant is GF(2)-linear, so this S-box is affine and
    its DDT and LAT both peak at the table size.
    """
    sbox = sbox or FieldSBox(4)
    table = sbox.table()
    inverse = sbox.inverse_table()
    size = len(table)

    ddt = sbox_ddt_max(table)
    lat = sbox_lat_max_abs(table)

    return SBoxAnalysisResult(
        field_bits=sbox.field_bits,
        sbox_size=size,
        table=table,
        inverse_table=inverse,
        ddt_max=ddt,
        lat_max_abs=lat,
        is_bijective=all(inverse[table[x]] == x for x in range(size)),
        differential_uniformity=_rate_differential_uniformity(ddt, size),
        linearity=_rate_linearity(lat, size),
        fixed_points=fixed_points(table),
    )
