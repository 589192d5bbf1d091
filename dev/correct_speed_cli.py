#!/usr/bin/env -S uv run
# /// script
# requires-python = ">=3.9"
# dependencies = [
#   "numpy",
#   "pandas",
#   "numba",
# ]
# ///
"""CLI helper that reports the housing-corrected anemometer speed from local source."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

import sys


REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = REPO_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print corrected wind speed for a raw reading and approach angle.")
    parser.add_argument("--speed", type=float, required=True, help="Raw anemometer speed.")
    parser.add_argument("--angle", type=float, required=True, help="Wind approach angle in degrees (0-360).")
    parser.add_argument(
        "--table",
        type=Path,
        default=None,
        help="Optional calibration table file (defaults to the built-in Davis Vantage Pro 2 curves).",
    )
    parser.add_argument("--scale", type=float, default=1.0, help="Divisor for scaled-integer table offsets.")
    parser.add_argument("--wrap-angles", action="store_true", help="Take angles modulo 360 instead of rejecting them.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    from anemometer_correction import DAVIS_VANTAGE_PRO2, CalibrationTable, SpeedCorrector

    if args.table is not None:
        table = CalibrationTable.from_file(str(args.table), scale=args.scale)
    else:
        table = DAVIS_VANTAGE_PRO2

    corrector = SpeedCorrector(table, wrap_angles=args.wrap_angles)
    try:
        speed = corrector.correct(args.speed, args.angle)
    except ValueError as e:
        raise SystemExit(f"error: {e}")
    print(f"{speed:.2f}")


if __name__ == "__main__":
    main()
