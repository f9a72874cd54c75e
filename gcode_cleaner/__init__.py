from .collinear import MAX_LINE_ERROR, MIN_SPAN_LENGTH, Redundancy, evaluate
from .config import CleanerConfig
from .gcode import MalformedMoveError, Position, parse_move
from .rewriter import GCodeCleaner, RewriteStats, rewrite

__version__ = "1.0.0"
