"""Generation transition for Conway's Game of Life."""

from typing import Tuple

from .grid import CellState, GridStore

# The eight cells at Chebyshev distance 1
NEIGHBOR_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (-1, 0),
    (1, 0),
    (0, -1),
    (0, 1),
    (-1, -1),
    (1, -1),
    (-1, 1),
    (1, 1),
)


class EvolutionEngine:
    """Computes successive generations of a grid store.

    Implements the classic rules:
    - Live cell with 2-3 neighbors survives
    - Dead cell with exactly 3 neighbors becomes alive
    - All other cells die or stay dead

    Every successor state is computed from the store's current buffer and
    written to its next buffer, so the update is simultaneous for all cells.
    The engine keeps no state of its own between steps.
    """

    def __init__(self, store: GridStore, vectorized: bool = False) -> None:
        """Initialize the engine.

        Args:
            store: The grid store to evolve
            vectorized: Compute whole generations with array operations
                instead of cell by cell
        """
        self.store = store
        self.vectorized = vectorized

    def count_live_neighbors(self, x: int, y: int) -> int:
        """Count living neighbors of a cell.

        Neighbors outside the grid read as dead.

        Args:
            x: Column coordinate
            y: Row coordinate

        Returns:
            Number of living neighbors (0-8)
        """
        count = 0
        for dx, dy in NEIGHBOR_OFFSETS:
            if self.store.read(x + dx, y + dy) == CellState.ALIVE:
                count += 1
        return count

    def next_state_for(self, x: int, y: int) -> CellState:
        """Compute the state of a cell in the next generation."""
        n = self.count_live_neighbors(x, y)

        if self.store.read(x, y) == CellState.ALIVE:
            return CellState.ALIVE if n in (2, 3) else CellState.DEAD
        return CellState.ALIVE if n == 3 else CellState.DEAD

    def step(self) -> None:
        """Advance the store by one generation."""
        if self.vectorized:
            self._stage_vectorized()
        else:
            width, height = self.store.dimensions()
            for x in range(width):
                for y in range(height):
                    self.store.write_next(x, y, self.next_state_for(x, y))

        self.store.commit()

    def _stage_vectorized(self) -> None:
        """Write the next generation using whole-grid neighbor counts."""
        neighbor_counts = self.store.neighbor_counts()
        alive = self.store.cells > 0

        # Survival: live cell with 2 or 3 neighbors
        survive_mask = alive & ((neighbor_counts == 2) | (neighbor_counts == 3))

        # Birth: dead cell with exactly 3 neighbors
        birth_mask = ~alive & (neighbor_counts == 3)

        self.store.stage_next(survive_mask | birth_mask)
