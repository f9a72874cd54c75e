# gcode_cleaner/collinear.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .gcode import Position

# Outer span (oldest -> newest) shorter than this makes the middle point redundant.
MIN_SPAN_LENGTH = 0.1
# Max distance of the middle point from the oldest -> newest line.
MAX_LINE_ERROR = 0.02

TOO_SHORT = "too_short"
STRAIGHT_LINE = "straight_line"

@dataclass(frozen=True)
class Redundancy:
    kind: str
    length: float
    ratio: Optional[float] = None
    error: Optional[float] = None

    def __str__(self) -> str:
        if self.kind == TOO_SHORT:
            return f"length={self.length:.2f} (too short)"
        return f"ratio={self.ratio:.2f} error={self.error:.2f} (straight line)"

def evaluate(p0: Optional[Position], p1: Optional[Position],
             p2: Optional[Position]) -> Optional[Redundancy]:
    """
    Check if p1 is redundant between p0 and p2.

    Returns None when p1 must be kept (or the window is incomplete),
    otherwise the reason it can be dropped.
    """
    if p0 is None or p1 is None or p2 is None:
        return None

    # Vectors for p1 and p2 relative to p0
    v1 = p1 - p0
    v2 = p2 - p0
    len1 = float(np.linalg.norm(v1))
    len2 = float(np.linalg.norm(v2))

    if len2 < MIN_SPAN_LENGTH:
        # whole span is negligible
        return Redundancy(kind=TOO_SHORT, length=len2)

    # How far along the outer span the midpoint sits
    ratio = len1 / len2
    d = v1 - v2 * ratio
    error = float(np.linalg.norm(d))
    if error > MAX_LINE_ERROR:
        return None
    return Redundancy(kind=STRAIGHT_LINE, length=len2, ratio=ratio, error=error)
