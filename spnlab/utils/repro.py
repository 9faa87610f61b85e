"""Seeding and run-directory helpers for evaluation runs.

Each run gets its own timestamped directory holding the JSON report, the
plain-text summary and the component tables of the cipher under test.
"""
from __future__ import annotations

import json
import random
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np


def set_global_seed(seed: int) -> None:
    random.seed(seed)
    np.random.seed(seed)


def utc_timestamp() -> str:
    # e.g. 2026-01-08T12-34-56Z (safe for filenames)
    return time.strftime("%Y-%m-%dT%H-%M-%SZ", time.gmtime())


def _safe_name(name: str) -> str:
    return "".join(ch if ch.isalnum() or ch in {"-", "_"} else "_" for ch in name.strip())[:60]


@dataclass(frozen=True)
class RunPaths:
    run_dir: Path
    report_json: Path
    summary_txt: Path
    tables_json: Path

    @classmethod
    def under(cls, run_dir: Path) -> "RunPaths":
        return cls(
            run_dir=run_dir,
            report_json=run_dir / "evaluation.json",
            summary_txt=run_dir / "summary.txt",
            tables_json=run_dir / "tables.json",
        )


def make_run_dir(runs_root: str | Path, run_name: str) -> RunPaths:
    run_dir = Path(runs_root) / f"{utc_timestamp()}_{_safe_name(run_name)}"
    run_dir.mkdir(parents=True, exist_ok=True)
    return RunPaths.under(run_dir)


def _to_jsonable(obj: Any) -> Any:
    """Convert numpy scalars and arrays left in analysis results."""
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def write_json(path: str | Path, obj: Any) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(obj, indent=2, sort_keys=True, default=_to_jsonable), encoding="utf-8")


def read_json(path: str | Path) -> Any:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def write_text(path: str | Path, text: str) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
