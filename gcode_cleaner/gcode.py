# gcode_cleaner/gcode.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import re

import numpy as np

# Only the plain extruding move is recognised; anything else passes through.
MOVE_RE = re.compile(r"^G1 X([-\d.]+) Y([-\d.]+) E([-\d.]+)$", re.IGNORECASE)

# X, Y, E
DIMENSIONS = 3

class MalformedMoveError(ValueError):
    """A line matched the move pattern but one of its numbers does not parse."""

    def __init__(self, line_no: int, line: str, field: str):
        self.line_no = line_no
        self.line = line
        self.field = field
        super().__init__(f"line {line_no}: malformed number {field!r} in {line.strip()!r}")

@dataclass(frozen=True)
class Position:
    x: float
    y: float
    e: float

    @property
    def vector(self) -> np.ndarray:
        return np.array((self.x, self.y, self.e), dtype=float)

    def __sub__(self, other: "Position") -> np.ndarray:
        return self.vector - other.vector

def strip_eol(line: str) -> str:
    return line.rstrip("\r\n")

def is_move(line: str) -> bool:
    return MOVE_RE.match(line.strip()) is not None

def parse_move(line: str, line_no: int = 0) -> Optional[Position]:
    """
    Parse a `G1 X.. Y.. E..` line into a Position.
    Returns None for any other line. The pattern admits text like "1.2.3",
    which raises MalformedMoveError.
    """
    m = MOVE_RE.match(line.strip())
    if not m:
        return None
    values = []
    for field in m.groups():
        try:
            values.append(float(field))
        except ValueError:
            raise MalformedMoveError(line_no, line, field) from None
    return Position(*values)
