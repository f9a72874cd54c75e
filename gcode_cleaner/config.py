# gcode_cleaner/config.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

@dataclass
class CleanerConfig:
    verbose: bool = False               # keep removed moves as annotated comments
    decision_log: Optional[str] = None  # CSV path, one row per removed move
    encoding: str = "utf-8"
