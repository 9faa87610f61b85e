"""CLI entry point for evaluating the 16-bit SPN cipher.

Usage:
    python scripts/run_evaluation.py                          # full evaluation
    python scripts/run_evaluation.py --vectors 200 --sac-trials 50   # quick run
    python scripts/run_evaluation.py --tables-only --key 1234        # print component tables

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

# Ensure project root is on path
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from spnlab.config import load_settings
from spnlab.evaluation.report import build_report, component_tables
from spnlab.utils.repro import make_run_dir, set_global_seed, write_json, write_text


def _hex_key(text: str) -> int:
    """argparse type for a 16-bit master key given in hex."""
    try:
        value = int(text, 16)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a hex value: {text!r}")
    if not 0 <= value <= 0xFFFF:
        raise argparse.ArgumentTypeError(f"key must be between 0000 and FFFF, got {text}")
    return value


def _cli_progress(message: str, current: int, total: int) -> None:
    """Print progress to stderr."""
    pct = (current / total * 100) if total > 0 else 0
    print(f"  [{current + 1}/{total}] ({pct:.0f}%) {message}", file=sys.stderr)


def main() -> None:
    settings = load_settings()

    parser = argparse.ArgumentParser(
        description="SPN-16 evaluation: roundtrip, SAC and S-box analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python scripts/run_evaluation.py --vectors 200 --sac-trials 50\n"
            "  python scripts/run_evaluation.py --tables-only --key ABCD\n"
        ),
    )
    parser.add_argument(
        "--vectors", type=int, default=settings.eval_vectors,
        help=f"Roundtrip test vectors (default: {settings.eval_vectors})",
    )
    parser.add_argument(
        "--sac-trials", type=int, default=settings.sac_trials,
        help=f"SAC trials per input bit (default: {settings.sac_trials})",
    )
    parser.add_argument(
        "--seed", type=int, default=settings.global_seed,
        help=f"Base random seed (default: {settings.global_seed})",
    )
    parser.add_argument(
        "--key", type=_hex_key, default=0x1234,
        help="Master key (hex) used for the key-schedule table (default: 1234)",
    )
    parser.add_argument(
        "--output-dir", type=str, default=settings.runs_dir,
        help=f"Output directory (default: {settings.runs_dir})",
    )
    parser.add_argument(
        "--tables-only", action="store_true",
        help="Print the S-box, permutation and key-schedule tables and exit",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.tables_only:
        print(json.dumps(component_tables(args.key, settings.rounds), indent=2))
        return

    set_global_seed(args.seed)
    report = build_report(
        num_vectors=args.vectors,
        sac_trials=args.sac_trials,
        seed=args.seed,
        rounds=settings.rounds,
        master_key=args.key,
        progress_callback=_cli_progress,
    )

    paths = make_run_dir(args.output_dir, "spn16_evaluation")
    write_json(paths.report_json, report.to_dict())
    write_json(paths.tables_json, report.tables)
    summary = report.to_summary()
    write_text(paths.summary_txt, summary)

    print(summary)
    print(f"\nAll results saved to: {paths.run_dir}")

    if report.failing_targets():
        sys.exit(1)


if __name__ == "__main__":
    main()
