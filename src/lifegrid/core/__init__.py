"""Core cellular automata logic."""

from .grid import CellState, GridStore, InvariantViolation
from .engine import EvolutionEngine
from .simulation import Simulation
from .patterns import GLIDER_CELLS, Pattern, PatternLibrary, parse_pattern, read_pattern_file

__all__ = [
    "CellState",
    "GridStore",
    "InvariantViolation",
    "EvolutionEngine",
    "Simulation",
    "GLIDER_CELLS",
    "Pattern",
    "PatternLibrary",
    "parse_pattern",
    "read_pattern_file",
]
