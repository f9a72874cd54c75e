# gcode_cleaner/logger.py
from __future__ import annotations
import csv
import os

from .collinear import Redundancy

FIELDS = ["line", "action", "kind", "length", "ratio", "error", "text"]

def _fmt(v) -> str:
    return "" if v is None else f"{v:.6f}"

class DecisionLogger:
    """CSV log of every removed move, for later plotting."""

    def __init__(self, path: str):
        out_dir = os.path.dirname(path)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)
        self.path = path
        self.rows = 0
        self._f = open(self.path, "w", newline="", encoding="utf-8")
        self._w = csv.writer(self._f)
        self._w.writerow(FIELDS)
        self._f.flush()

    def log_removal(self, line_no: int, action: str, reason: Redundancy, text: str):
        self._w.writerow([line_no, action, reason.kind, _fmt(reason.length),
                          _fmt(reason.ratio), _fmt(reason.error), text.strip()])
        self._f.flush()
        self.rows += 1

    def close(self):
        if not self._f.closed:
            self._f.close()

    def __enter__(self) -> "DecisionLogger":
        return self

    def __exit__(self, *exc):
        self.close()
