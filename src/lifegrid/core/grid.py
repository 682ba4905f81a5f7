"""Double-buffered grid store for the Game of Life."""

from enum import IntEnum
from typing import Iterable, Optional, Tuple, Union
import logging

import numpy as np
import torch
import torch.nn.functional as F

from .patterns import GLIDER_CELLS, parse_pattern

LOG = logging.getLogger(__name__)


class CellState(IntEnum):
    """State of a single cell."""

    DEAD = 0
    ALIVE = 1


class InvariantViolation(AssertionError):
    """Raised when a caller breaks a grid precondition.

    This signals a logic error in the caller and is never recovered from.
    """


class GridStore:
    """Holds the current and next generation buffers of a fixed-size world.

    All reads go to the current buffer, all writes go to the next buffer,
    and ``commit()`` promotes next to current. Cells outside the grid are
    permanently dead.
    """

    def __init__(self, width: int, height: int) -> None:
        """Initialize an all-dead world.

        Args:
            width: Number of columns
            height: Number of rows

        Raises:
            ValueError: If either dimension is not positive
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")

        self.width = width
        self.height = height
        self._cells = np.zeros((width, height), dtype=np.int8)
        self._next = np.zeros((width, height), dtype=np.int8)

        # PyTorch tensors for whole-grid neighbor counting (reused between calls)
        self._torch_input = torch.zeros(1, 1, height, width, dtype=torch.float32)
        self._torch_kernel = (
            torch.tensor([[1, 1, 1], [1, 0, 1], [1, 1, 1]], dtype=torch.float32).unsqueeze(0).unsqueeze(0)
        )

    @property
    def cells(self) -> np.ndarray:
        """Get the current cell array, indexed ``[x, y]``."""
        return self._cells

    @property
    def next_cells(self) -> np.ndarray:
        """Get the next-generation cell array, indexed ``[x, y]``."""
        return self._next

    @property
    def shape(self) -> Tuple[int, int]:
        """Get grid dimensions as (width, height)."""
        return (self.width, self.height)

    def dimensions(self) -> Tuple[int, int]:
        """Return the fixed (width, height) of the world."""
        return (self.width, self.height)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def read(self, x: int, y: int) -> CellState:
        """Get the state of a cell in the current generation.

        Args:
            x: Column coordinate
            y: Row coordinate

        Returns:
            The cell state; DEAD for any coordinate outside the grid
        """
        if not self.in_bounds(x, y):
            return CellState.DEAD
        return CellState.ALIVE if self._cells[x, y] else CellState.DEAD

    def write_next(self, x: int, y: int, state: Union[CellState, bool, int]) -> None:
        """Set the state of a cell in the next generation.

        Args:
            x: Column coordinate
            y: Row coordinate
            state: New state of the cell

        Raises:
            InvariantViolation: If coordinates are out of bounds
        """
        if not self.in_bounds(x, y):
            raise InvariantViolation(f"Coordinates ({x}, {y}) are invalid for a {self.width}x{self.height} grid")

        self._next[x, y] = CellState.ALIVE if state else CellState.DEAD

    def stage_next(self, states: np.ndarray) -> None:
        """Write a complete next generation at once.

        Args:
            states: Array of shape (width, height); nonzero means alive

        Raises:
            InvariantViolation: If the array shape doesn't match the grid
        """
        if states.shape != self.shape:
            raise InvariantViolation(f"Staged shape {states.shape} doesn't match grid {self.shape}")

        self._next[:] = states != 0

    def commit(self) -> None:
        """Make the next generation current and reset next to all dead."""
        self._cells[:] = self._next
        self._next.fill(CellState.DEAD)

    def load_pattern(self, source: Union[str, Iterable[str]]) -> None:
        """Initialize the current generation from pattern text.

        Each line is a row, top to bottom; character ``x`` of a line is
        column ``x``. ``*`` marks a live cell, anything else is dead.
        Missing columns and rows are dead, anything past the grid edges is
        ignored.

        Args:
            source: Pattern text, either one string or an iterable of lines
        """
        self._cells[:] = parse_pattern(source, self.width, self.height)
        self._next.fill(CellState.DEAD)
        LOG.debug("Loaded pattern with %d live cells into %dx%d grid", self.population, self.width, self.height)

    def load_default_pattern(self) -> None:
        """Initialize the current generation with the built-in glider."""
        self._cells.fill(CellState.DEAD)
        self._next.fill(CellState.DEAD)
        for x, y in GLIDER_CELLS:
            if self.in_bounds(x, y):
                self._cells[x, y] = CellState.ALIVE

    @property
    def population(self) -> int:
        """Get the number of living cells."""
        return int(np.sum(self._cells > 0))

    def neighbor_counts(self) -> np.ndarray:
        """Count live neighbors for all cells using PyTorch convolution.

        Zero padding stands in for the dead cells beyond the grid edges.

        Returns:
            Array of shape (width, height) with neighbor counts for each cell
        """
        # Grid uses (width, height) but PyTorch expects (height, width), so transpose
        self._torch_input[0, 0] = torch.from_numpy((self._cells.T > 0).astype(np.float32))
        neighbors = F.conv2d(self._torch_input, self._torch_kernel, padding=1)
        return neighbors[0, 0].numpy().astype(np.int8).T

    def to_list(self) -> list:
        """Convert the current generation to a nested list indexed ``[x][y]``."""
        return self._cells.tolist()

    def get_bounding_box(self) -> Optional[Tuple[int, int, int, int]]:
        """Get bounding box of living cells.

        Returns:
            Tuple of (min_x, min_y, max_x, max_y) or None if no living cells
        """
        living_coords = np.where(self._cells > 0)
        if len(living_coords[0]) == 0:
            return None

        min_x, max_x = int(living_coords[0].min()), int(living_coords[0].max())
        min_y, max_y = int(living_coords[1].min()), int(living_coords[1].max())

        return (min_x, min_y, max_x, max_y)

    def __eq__(self, other: object) -> bool:
        """Check if two stores hold the same current generation."""
        if not isinstance(other, GridStore):
            return False
        return self.shape == other.shape and np.array_equal(self._cells, other._cells)

    def __str__(self) -> str:
        """String representation showing living cells as '*' and dead as '.'."""
        result = []
        for y in range(self.height):
            result.append("".join("*" if self._cells[x, y] else "." for x in range(self.width)))
        return "\n".join(result)
