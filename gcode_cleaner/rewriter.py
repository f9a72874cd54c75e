# gcode_cleaner/rewriter.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Optional, TextIO

from .collinear import Redundancy, TOO_SHORT, evaluate
from .config import CleanerConfig
from .gcode import Position, parse_move, strip_eol
from .logger import DecisionLogger

@dataclass
class RewriteStats:
    lines_in: int = 0
    lines_out: int = 0
    moves: int = 0
    too_short: int = 0
    straight_line: int = 0
    annotated: int = 0      # redundant but written back as comments

    @property
    def redundant(self) -> int:
        return self.too_short + self.straight_line

    @property
    def removed(self) -> int:
        """Lines actually missing from the output."""
        return self.lines_in - self.lines_out

    @property
    def reduction(self) -> float:
        if self.lines_in == 0:
            return 0.0
        return self.removed / self.lines_in

@dataclass
class _Window:
    p0: Optional[Position] = None   # oldest
    p1: Optional[Position] = None   # middle, always from the pending line

    def reset(self) -> None:
        self.p0 = None
        self.p1 = None

class GCodeCleaner:
    """
    Single pass rewrite of a G-code stream.

    Every line is held back one step (the pending line) so the next move can
    decide whether it was redundant. Non-move lines always pass through, and
    they break the window: no judgement spans across them.
    """
    def __init__(self, cfg: Optional[CleanerConfig] = None,
                 decisions: Optional[DecisionLogger] = None):
        self.cfg = cfg or CleanerConfig()
        self.decisions = decisions

    def _judge(self, pending: str, pending_no: int, reason: Redundancy,
               stats: RewriteStats) -> Optional[str]:
        if reason.kind == TOO_SHORT:
            stats.too_short += 1
        else:
            stats.straight_line += 1

        if self.cfg.verbose:
            # Prefix with ; so the printer ignores it
            judged = f";{pending.rstrip()} {reason}"
            action = "annotated"
            stats.annotated += 1
        else:
            judged = None
            action = "dropped"

        if self.decisions is not None:
            self.decisions.log_removal(pending_no, action, reason, pending)
        return judged

    def _emit(self, out: TextIO, line: str, stats: RewriteStats) -> None:
        out.write(line + "\n")
        stats.lines_out += 1

    def rewrite(self, lines: Iterable[str], out: TextIO) -> RewriteStats:
        stats = RewriteStats()
        window = _Window()
        pending: Optional[str] = None
        pending_no = 0

        for line_no, raw in enumerate(lines, start=1):
            line = strip_eol(raw)
            stats.lines_in += 1

            p2 = parse_move(line, line_no)
            if p2 is not None:
                stats.moves += 1
                reason = evaluate(window.p0, window.p1, p2)
                if reason is not None:
                    # Pending line is the midpoint; p0 stays as the anchor
                    pending = self._judge(pending, pending_no, reason, stats)
                    window.p1 = p2
                else:
                    window.p0 = window.p1
                    window.p1 = p2
            else:
                window.reset()

            # Emit before the slot is overwritten
            if pending is not None:
                self._emit(out, pending, stats)
            pending = line
            pending_no = line_no

        if pending is not None:
            self._emit(out, pending, stats)
        return stats

def rewrite(lines: Iterable[str], out: TextIO, verbose: bool = False) -> RewriteStats:
    return GCodeCleaner(CleanerConfig(verbose=verbose)).rewrite(lines, out)
