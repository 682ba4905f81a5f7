"""Pattern text parsing and a library of common Game of Life patterns."""

from typing import Dict, Iterable, List, Optional, Tuple, Union
import logging
from pathlib import Path

import numpy as np

from ..utils.config import Config

LOG = logging.getLogger(__name__)

# Live cells of the default world, a glider heading down and to the right
GLIDER_CELLS: Tuple[Tuple[int, int], ...] = ((1, 2), (3, 1), (3, 2), (3, 3), (2, 3))


def parse_pattern(
    source: Union[str, Iterable[str]],
    width: int,
    height: int,
    alive_char: str = Config.CHAR_ALIVE,
) -> np.ndarray:
    """Convert pattern text into a cell array.

    Args:
        source: Pattern text, either one string or an iterable of lines
        width: Grid width; longer lines are truncated
        height: Grid height; extra lines are ignored
        alive_char: Character marking a live cell

    Returns:
        int8 array of shape (width, height), 1 for live cells
    """
    if isinstance(source, str):
        source = source.splitlines()

    cells = np.zeros((width, height), dtype=np.int8)
    truncated = False

    for y, line in enumerate(source):
        if y >= height:
            truncated = True
            break

        if len(line.rstrip("\r\n")) > width:
            truncated = True

        for x, char in enumerate(line[:width]):
            if char == alive_char:
                cells[x, y] = 1

    if truncated:
        LOG.debug("Pattern extends beyond the %dx%d grid, extra cells ignored", width, height)

    return cells


def read_pattern_file(path: Union[str, Path]) -> List[str]:
    """Read pattern text lines from a file.

    Each byte of the file becomes one column, so bytes that aren't valid
    text still count as dead cells.

    Raises:
        OSError: If the file can't be opened or read
    """
    with open(path, "r", encoding="latin-1") as f:
        return [line.rstrip("\n") for line in f]


class Pattern:
    """Represents a Game of Life pattern."""

    def __init__(
        self,
        name: str,
        cells: List[Tuple[int, int]],
        description: str = "",
    ) -> None:
        """Initialize a pattern.

        Args:
            name: Pattern name
            cells: List of (x, y) coordinates for living cells
            description: Optional description
        """
        self.name = name
        self.cells = cells
        self.description = description

    @classmethod
    def from_text(
        cls,
        name: str,
        source: Union[str, Iterable[str]],
        description: str = "",
        alive_char: str = Config.CHAR_ALIVE,
    ) -> "Pattern":
        """Create a pattern from pattern text.

        Args:
            name: Pattern name
            source: Pattern text, either one string or an iterable of lines
            description: Optional description
            alive_char: Character marking a live cell

        Returns:
            New Pattern instance
        """
        if isinstance(source, str):
            source = source.splitlines()

        cells = []
        for y, line in enumerate(source):
            for x, char in enumerate(line):
                if char == alive_char:
                    cells.append((x, y))

        return cls(name, cells, description)

    def to_lines(self, offset_x: int = 0, offset_y: int = 0) -> List[str]:
        """Render this pattern as pattern text lines.

        Cells that land on negative coordinates after offsetting are dropped.

        Args:
            offset_x: Horizontal offset
            offset_y: Vertical offset

        Returns:
            List of lines, one per row starting at row 0
        """
        rows: Dict[int, List[int]] = {}
        for x, y in self.cells:
            x, y = x + offset_x, y + offset_y
            if x < 0 or y < 0:
                continue
            rows.setdefault(y, []).append(x)

        if not rows:
            return []

        lines = []
        for y in range(max(rows) + 1):
            columns = rows.get(y, [])
            line = [Config.CHAR_DEAD] * (max(columns) + 1 if columns else 0)
            for x in columns:
                line[x] = Config.CHAR_ALIVE
            lines.append("".join(line))
        return lines

    def apply_to_store(self, store, offset_x: int = 0, offset_y: int = 0) -> None:
        """Load this pattern as the current generation of a grid store.

        Cells falling outside the grid are skipped.
        """
        store.load_pattern(self.to_lines(offset_x, offset_y))

    def get_bounding_box(self) -> Tuple[int, int, int, int]:
        """Get bounding box of the pattern.

        Returns:
            Tuple of (min_x, min_y, max_x, max_y)
        """
        if not self.cells:
            return (0, 0, 0, 0)

        xs, ys = zip(*self.cells)
        return (min(xs), min(ys), max(xs), max(ys))

    def get_size(self) -> Tuple[int, int]:
        """Get pattern size as (width, height)."""
        min_x, min_y, max_x, max_y = self.get_bounding_box()
        return (max_x - min_x + 1, max_y - min_y + 1)

    def normalize(self) -> "Pattern":
        """Return a new pattern with coordinates normalized to start at (0, 0)."""
        if not self.cells:
            return Pattern(self.name, [], self.description)

        min_x, min_y, _, _ = self.get_bounding_box()
        normalized_cells = [(x - min_x, y - min_y) for x, y in self.cells]

        return Pattern(self.name, normalized_cells, self.description)


class PatternLibrary:
    """Manages a collection of patterns."""

    def __init__(self) -> None:
        self._patterns: Dict[str, Pattern] = {}
        self._load_builtin_patterns()

    def _load_builtin_patterns(self) -> None:
        """Load built-in common patterns."""
        # Still life patterns
        self.add_pattern(Pattern("Block", [(0, 0), (0, 1), (1, 0), (1, 1)], "2x2 still life block"))

        self.add_pattern(
            Pattern(
                "Beehive",
                [(1, 0), (2, 0), (0, 1), (3, 1), (1, 2), (2, 2)],
                "Beehive still life",
            )
        )

        # Oscillators
        self.add_pattern(Pattern("Blinker", [(0, 1), (1, 1), (2, 1)], "Period-2 oscillator"))

        self.add_pattern(
            Pattern(
                "Toad",
                [(1, 0), (2, 0), (3, 0), (0, 1), (1, 1), (2, 1)],
                "Period-2 oscillator",
            )
        )

        self.add_pattern(
            Pattern(
                "Beacon",
                [(0, 0), (1, 0), (0, 1), (3, 2), (2, 3), (3, 3)],
                "Period-2 oscillator",
            )
        )

        # Spaceships
        self.add_pattern(
            Pattern("Glider", list(GLIDER_CELLS), "Smallest spaceship, period-4").normalize()
        )

        self.add_pattern(
            Pattern(
                "Lightweight Spaceship",
                [(0, 0), (3, 0), (4, 1), (0, 2), (4, 2), (1, 3), (2, 3), (3, 3), (4, 3)],
                "LWSS - Period-4 spaceship",
            )
        )

        # Guns
        self.add_pattern(
            Pattern(
                "Gosper Glider Gun",
                [
                    (24, 0),
                    (22, 1), (24, 1),
                    (12, 2), (13, 2), (20, 2), (21, 2), (34, 2), (35, 2),
                    (11, 3), (15, 3), (20, 3), (21, 3), (34, 3), (35, 3),
                    (0, 4), (1, 4), (10, 4), (16, 4), (20, 4), (21, 4),
                    (0, 5), (1, 5), (10, 5), (14, 5), (16, 5), (17, 5), (22, 5), (24, 5),
                    (10, 6), (16, 6), (24, 6),
                    (11, 7), (15, 7),
                    (12, 8), (13, 8),
                ],
                "Emits a new glider every 30 generations",
            )
        )

        # Methuselahs
        self.add_pattern(
            Pattern(
                "R-pentomino",
                [(1, 0), (2, 0), (0, 1), (1, 1), (1, 2)],
                "Famous methuselah that stabilizes after 1103 generations",
            )
        )

        self.add_pattern(
            Pattern(
                "Diehard",
                [(6, 0), (0, 1), (1, 1), (1, 2), (5, 2), (6, 2), (7, 2)],
                "Dies after exactly 130 generations",
            )
        )

        self.add_pattern(
            Pattern(
                "Acorn",
                [(1, 0), (3, 1), (0, 2), (1, 2), (4, 2), (5, 2), (6, 2)],
                "Takes 5206 generations to stabilize",
            )
        )

    def add_pattern(self, pattern: Pattern) -> None:
        """Add a pattern to the library."""
        self._patterns[pattern.name] = pattern

    def get_pattern(self, name: str) -> Optional[Pattern]:
        """Get a pattern by name.

        Args:
            name: Pattern name

        Returns:
            Pattern instance or None if not found
        """
        return self._patterns.get(name)

    def list_patterns(self) -> List[str]:
        """Get list of all pattern names."""
        return list(self._patterns.keys())

    def get_patterns_by_category(self) -> Dict[str, List[str]]:
        """Get patterns organized by category.

        Returns:
            Dictionary mapping categories to pattern name lists
        """
        categories = {
            "Still Life": ["Block", "Beehive"],
            "Oscillators": ["Blinker", "Toad", "Beacon"],
            "Spaceships": ["Glider", "Lightweight Spaceship"],
            "Guns": ["Gosper Glider Gun"],
            "Methuselahs": ["R-pentomino", "Diehard", "Acorn"],
            "Custom": [],
        }

        all_builtin = set()
        for cat_patterns in categories.values():
            all_builtin.update(cat_patterns)

        for name in self._patterns:
            if name not in all_builtin:
                categories["Custom"].append(name)

        # Remove empty categories
        return {cat: patterns for cat, patterns in categories.items() if patterns}

    def load_pattern_file(self, path: Union[str, Path], name: Optional[str] = None) -> Pattern:
        """Load a pattern text file into the library.

        Args:
            path: File to read
            name: Pattern name (defaults to the file stem)

        Returns:
            Loaded Pattern instance

        Raises:
            OSError: If the file can't be read
        """
        path = Path(path)
        pattern = Pattern.from_text(name or path.stem, read_pattern_file(path), f"Loaded from {path.name}")
        self.add_pattern(pattern)
        LOG.debug("Loaded pattern '%s' with %d cells from %s", pattern.name, len(pattern.cells), path)
        return pattern
