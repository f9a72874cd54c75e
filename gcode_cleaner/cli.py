#!/usr/bin/env python3
"""
G-code cleaner: removes redundant G1 moves from slicer output.

Eliminates stuttering caused by extra G1 commands on straight lines or very
short segments, and shrinks the file, without changing the toolpath.

Usage:
    clean-gcode part.gcode                  -> writes part.clean.gcode
    clean-gcode part.gcode --verbose        -> removed moves kept as comments
    clean-gcode part.gcode --csv decisions.csv --compare --plot figures/

To see why each G1 line was removed:
    clean-gcode part.gcode --verbose
    diff -u part.gcode part.clean.gcode
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .compare import extract_moves, print_report, verify
from .gcode import strip_eol
from .config import CleanerConfig
from .logger import DecisionLogger
from .rewriter import GCodeCleaner, RewriteStats

def derive_output_path(in_path: Path) -> Path:
    """part.gcode -> part.clean.gcode, next to the input."""
    in_path = Path(in_path)
    return in_path.with_name(f"{in_path.stem}.clean{in_path.suffix}")

def print_summary(stats: RewriteStats) -> None:
    print(f"\nSummary:")
    print(f"  Lines in: {stats.lines_in} ({stats.moves} G1 moves)")
    print(f"  Lines out: {stats.lines_out}")
    print(f"  Redundant moves: {stats.redundant}")
    print(f"  straight line: {stats.straight_line}")
    print(f"  too short: {stats.too_short}")
    if stats.annotated:
        print(f"  Annotated (kept as comments): {stats.annotated}")
    print(f"  Removed: {stats.removed} ({stats.reduction:.1%})")

def clean_file(in_path: Path, cfg: CleanerConfig, out_path: Optional[Path] = None) -> bool:
    in_path = Path(in_path)
    if not in_path.exists():
        print(f"File {in_path} not found!")
        return False
    out_path = Path(out_path) if out_path is not None else derive_output_path(in_path)

    decisions = None
    try:
        if cfg.decision_log:
            decisions = DecisionLogger(cfg.decision_log)
        cleaner = GCodeCleaner(cfg, decisions)
        print(f"Opening file: {in_path}")
        with in_path.open("r", encoding=cfg.encoding, errors="surrogateescape") as infile:
            print(f"Writing file: {out_path}")
            with out_path.open("w", encoding=cfg.encoding, errors="surrogateescape") as outfile:
                stats = cleaner.rewrite(infile, outfile)
    except Exception as e:
        print(f"ERROR: Failed to clean G-code: {e}", file=sys.stderr)
        return False
    finally:
        if decisions is not None:
            decisions.close()

    print("Completed successfully.")
    print_summary(stats)
    return True

def read_lines(path: Path, encoding: str = "utf-8") -> List[str]:
    # Same line splitting as the rewriter: file iteration, then strip_eol
    with Path(path).open("r", encoding=encoding, errors="surrogateescape") as f:
        return [strip_eol(line) for line in f]

def _normalise_flags(argv: List[str]) -> List[str]:
    # The flag has always been accepted in any case (--VERBOSE, --Verbose)
    return ["--verbose" if a.lower() == "--verbose" else a for a in argv]

def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog="clean-gcode",
                                 description="Remove redundant G1 moves on straight lines or very short segments.")
    ap.add_argument("infile", help="Input slicer G-code file")
    ap.add_argument("--verbose", action="store_true",
                    help="Keep removed moves as comments with the reason")
    ap.add_argument("--csv", dest="csvfile", default=None, help="CSV log of removed moves")
    ap.add_argument("--compare", action="store_true",
                    help="Verify the cleaned file against the input")
    ap.add_argument("--plot", dest="plot_dir", default=None, help="Directory for figures")
    argv = sys.argv[1:] if argv is None else argv
    args = ap.parse_args(_normalise_flags(list(argv)))

    in_path = Path(args.infile)
    out_path = derive_output_path(in_path)
    cfg = CleanerConfig(verbose=args.verbose, decision_log=args.csvfile)

    if not clean_file(in_path, cfg, out_path):
        return 1
    print(f"✓ Saved cleaned G-code: {out_path}")
    if args.csvfile:
        print(f"✓ Saved decision log: {args.csvfile}")

    if not (args.compare or args.plot_dir):
        return 0

    original = read_lines(in_path, cfg.encoding)
    cleaned = read_lines(out_path, cfg.encoding)
    report = verify(original, cleaned)
    if args.compare:
        print("\n=== Verification ===")
        print_report(report)

    if args.plot_dir:
        # imported here so plain cleaning never loads matplotlib
        from .plots import plot_decision_log, plot_toolpath_overlay

        if report.kept_idx is not None:
            points, _ = extract_moves(original)
            fig = plot_toolpath_overlay(points, report.kept_idx, Path(args.plot_dir))
            print(f"✓ Saved figure: {fig}")
        if args.csvfile:
            fig = plot_decision_log(Path(args.csvfile), Path(args.plot_dir))
            print(f"✓ Saved figure: {fig}")

    if args.compare and not report.ok:
        return 1
    return 0

if __name__ == "__main__":
    sys.exit(main())
