from __future__ import annotations

import argparse
import os
from pathlib import Path

from .analysis_days import parse_when
from .analysis_run import run_analysis
from .config import build_settings, load_config


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Estimate developer effort from daily git diffs across many repos.")
    parser.add_argument(
        "when",
        nargs="?",
        default="1",
        help="Number of days back from today (1 = today only) or a date (YYYY-MM-DD, today, yesterday).",
    )
    parser.add_argument("--root", type=Path, default=None, help="Root directory to scan for git repos (default: current directory).")
    parser.add_argument("--config", type=Path, default=Path("config.json"), help="Path to config.json.")
    parser.add_argument("--branches", type=str, nargs="+", default=None, help="Candidate branches to diff, first found wins (default: develop main master).")
    parser.add_argument("--filter", type=str, default=None, help="Only analyze repos whose remote URL contains this text (case-insensitive).")
    parser.add_argument("--minutes-first-change", type=float, default=None, help="Minutes for the first changed line (default: 20).")
    parser.add_argument("--decay", type=float, default=None, help="Cost multiplier for each further change, in (0, 1] (default: 0.9).")
    parser.add_argument("--setup-minutes", type=float, default=None, help="Fixed minutes added once per repo and day (default: 0).")
    parser.add_argument("--max-line-length", type=int, default=None, help="Drop diff lines this long or longer (default: 1000, 0 = keep all).")
    parser.add_argument("-v", "--verbosity", type=int, default=None, choices=range(0, 6), help="0 = summary only ... 5 = full per-file detail (default: 2).")
    parser.add_argument("--show-diff", action="store_true", help="Print the filtered diff of every reported repo and day.")
    parser.add_argument("--jobs", type=int, default=None, help=f"Repos analyzed in parallel (default: 1, this machine has {os.cpu_count() or 1} CPUs).")
    return parser


def main(argv: list[str]) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    config_missing = not args.config.exists()
    try:
        config = load_config(args.config)
        days = parse_when(args.when)
        settings = build_settings(args=args, config=config, days=days)
    except ValueError as e:
        raise SystemExit(f"Error: {e}") from None
    try:
        return run_analysis(settings=settings, config_path=args.config, config_missing=config_missing)
    except ValueError as e:
        raise SystemExit(f"Error: {e}") from None
