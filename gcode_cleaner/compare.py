"""
Verification of original vs cleaned G-code.

What it verifies:
1) Every non-move line survives, in order
2) Surviving moves are an ordered subsequence of the original moves
3) First and last move are kept
4) Replaying the window decisions over the original removes exactly
   the moves that are missing from the cleaned file

The distance of removed points from the cleaned path is reported but not
checked: too-short spans and chained straight lines may exceed any fixed
bound.

This is an invariants check, not a print simulation.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

import numpy as np

from .collinear import evaluate
from .gcode import DIMENSIONS, is_move, parse_move, strip_eol

# Removed moves as written in verbose mode
ANNOTATION_RE = re.compile(
    r"^;\s*G1 X[-\d.]+ Y[-\d.]+ E[-\d.]+ "
    r"(length=\S+ \(too short\)|ratio=\S+ error=\S+ \(straight line\))$",
    re.IGNORECASE,
)

def is_annotation(line: str) -> bool:
    return ANNOTATION_RE.match(line.strip()) is not None

def extract_moves(lines: Iterable[str]) -> Tuple[np.ndarray, List[str]]:
    """Return (points [Nx3] of X, Y, E, raw move texts) for active moves."""
    coords = []
    texts = []
    for line_no, raw in enumerate(lines, start=1):
        line = strip_eol(raw)
        p = parse_move(line, line_no)
        if p is None:
            continue
        coords.append((p.x, p.y, p.e))
        texts.append(line)
    if not coords:
        return np.zeros((0, DIMENSIONS)), texts
    return np.array(coords, dtype=float), texts

def passthrough_lines(lines: Iterable[str]) -> List[str]:
    out = []
    for raw in lines:
        line = strip_eol(raw)
        if is_move(line) or is_annotation(line):
            continue
        out.append(line)
    return out

def align_moves(original: List[str], cleaned: List[str]) -> np.ndarray:
    """
    Indices into `original` of the moves that survive in `cleaned`.
    Raises ValueError if `cleaned` is not an ordered subsequence.
    """
    kept = []
    j = 0
    for i, text in enumerate(original):
        if j < len(cleaned) and text == cleaned[j]:
            kept.append(i)
            j += 1
    if j != len(cleaned):
        raise ValueError(f"cleaned move {j + 1} not found in original: {cleaned[j]!r}")
    return np.array(kept, dtype=int)

def _segment_distance(points: np.ndarray, a: np.ndarray, b: np.ndarray) -> np.ndarray:
    ab = b - a
    denom = float(ab @ ab)
    if denom <= 0.0:
        return np.linalg.norm(points - a, axis=1)
    t = np.clip(((points - a) @ ab) / denom, 0.0, 1.0)
    proj = a + t[:, None] * ab
    return np.linalg.norm(points - proj, axis=1)

def removed_point_deviation(points: np.ndarray, kept_idx: np.ndarray) -> np.ndarray:
    """
    Distance of every removed point to the cleaned path segment that replaced it.
    Points outside the kept range are measured against the nearest kept point.
    """
    n = len(points)
    removed = np.setdiff1d(np.arange(n), kept_idx)
    if len(removed) == 0:
        return np.zeros(0)
    if len(kept_idx) == 0:
        return np.full(len(removed), np.inf)

    dev = np.zeros(n)
    first, last = kept_idx[0], kept_idx[-1]
    if first > 0:
        dev[:first] = np.linalg.norm(points[:first] - points[first], axis=1)
    if last < n - 1:
        dev[last + 1:] = np.linalg.norm(points[last + 1:] - points[last], axis=1)
    for a, b in zip(kept_idx[:-1], kept_idx[1:]):
        if b - a > 1:
            dev[a + 1:b] = _segment_distance(points[a + 1:b], points[a], points[b])
    return dev[removed]

def replay_kept(lines: Iterable[str]) -> np.ndarray:
    """
    Move indices the rewriter keeps, recomputed from the original lines with
    the same window rules: a removed midpoint never becomes the anchor, any
    non-move line resets the window.
    """
    p0 = p1 = None
    removed = set()
    n = 0
    for line_no, raw in enumerate(lines, start=1):
        p2 = parse_move(strip_eol(raw), line_no)
        if p2 is None:
            p0 = p1 = None
            continue
        if evaluate(p0, p1, p2) is not None:
            # p1 always comes from the move just before this one
            removed.add(n - 1)
            p1 = p2
        else:
            p0, p1 = p1, p2
        n += 1
    return np.array([i for i in range(n) if i not in removed], dtype=int)

@dataclass
class CompareReport:
    original_moves: int = 0
    cleaned_moves: int = 0
    max_deviation: float = 0.0
    kept_idx: Optional[np.ndarray] = None
    checks: List[Tuple[str, bool, str]] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(passed for _, passed, _ in self.checks)

    def add(self, name: str, ok: bool, detail: str = "") -> None:
        self.checks.append((name, ok, detail))

def verify(original_lines: List[str], cleaned_lines: List[str]) -> CompareReport:
    report = CompareReport()

    orig_pass = passthrough_lines(original_lines)
    clean_pass = passthrough_lines(cleaned_lines)
    report.add("Non-move lines preserved", orig_pass == clean_pass,
               f"{len(orig_pass)} original, {len(clean_pass)} cleaned")

    orig_pts, orig_texts = extract_moves(original_lines)
    _, clean_texts = extract_moves(cleaned_lines)
    report.original_moves = len(orig_texts)
    report.cleaned_moves = len(clean_texts)

    try:
        kept = align_moves(orig_texts, clean_texts)
    except ValueError as e:
        report.add("Moves are an ordered subset", False, str(e))
        return report
    report.kept_idx = kept
    report.add("Moves are an ordered subset", True,
               f"{len(clean_texts)}/{len(orig_texts)} moves kept")

    if len(orig_texts) == 0:
        report.add("First and last move kept", True, "no moves")
    else:
        ends_ok = len(kept) > 0 and kept[0] == 0 and kept[-1] == len(orig_texts) - 1
        report.add("First and last move kept", bool(ends_ok))

    expected = replay_kept(original_lines)
    missing = np.setdiff1d(expected, kept)
    extra = np.setdiff1d(kept, expected)
    if len(missing) == 0 and len(extra) == 0:
        report.add("Removals match replay", True, f"{len(orig_texts) - len(kept)} removed")
    else:
        where = [f"move {i + 1}" for i in np.concatenate([missing, extra])[:5]]
        report.add("Removals match replay", False,
                   f"{len(missing)} kept moves dropped, {len(extra)} redundant moves kept ({', '.join(where)})")

    dev = removed_point_deviation(orig_pts, kept)
    report.max_deviation = float(dev.max()) if len(dev) else 0.0
    report.notes.append(f"Max distance of a removed point from the cleaned path: {report.max_deviation:.4f}")
    return report

def print_report(report: CompareReport) -> None:
    for name, ok, detail in report.checks:
        status = "PASS" if ok else "FAIL"
        if detail:
            print(f"[{status}] {name}: {detail}")
        else:
            print(f"[{status}] {name}")
    for note in report.notes:
        print(f"[INFO] {note}")
