"""Conway's Game of Life on a fixed-size, double-buffered grid."""

__version__ = "0.1.0"

from .core.grid import CellState, GridStore, InvariantViolation
from .core.engine import EvolutionEngine
from .core.simulation import Simulation
from .core.patterns import Pattern, PatternLibrary

__all__ = [
    "CellState",
    "GridStore",
    "InvariantViolation",
    "EvolutionEngine",
    "Simulation",
    "Pattern",
    "PatternLibrary",
]
