"""Generation bookkeeping around the evolution engine."""

from typing import Deque, Dict, Optional, Tuple
from collections import deque
import logging

import numpy as np

from ..utils.config import Config
from .engine import EvolutionEngine
from .grid import GridStore

LOG = logging.getLogger(__name__)


class Simulation:
    """Runs a Game of Life world and tracks its history.

    Keeps the generation counter, population history and cycle detection
    state so the engine itself can stay stateless.
    """

    def __init__(self, store: GridStore, engine: Optional[EvolutionEngine] = None) -> None:
        """Initialize the simulation.

        Args:
            store: The grid store to simulate
            engine: Engine driving the store (defaults to a per-cell engine)
        """
        self.store = store
        self.engine = engine or EvolutionEngine(store)
        self._generation = 0
        self._population_history: Deque[int] = deque(maxlen=Config.HISTORY_LENGTH)
        self._state_history: Deque[bytes] = deque(maxlen=Config.STATE_HISTORY_LENGTH)
        self._seen_states: Dict[bytes, int] = {}
        self._cycle_detected = False
        self._cycle_length = 0
        self._cycle_start_generation = 0

        # Track initial state
        self._update_population_history()
        self._check_for_cycles()

    @property
    def generation(self) -> int:
        """Current generation number."""
        return self._generation

    @property
    def population(self) -> int:
        """Current number of living cells."""
        return self.store.population

    @property
    def population_history(self) -> list:
        """History of population counts."""
        return list(self._population_history)

    @property
    def cycle_detected(self) -> bool:
        """Whether a cycle has been detected."""
        return self._cycle_detected

    @property
    def cycle_length(self) -> int:
        """Length of detected cycle (0 if no cycle)."""
        return self._cycle_length

    @property
    def cycle_start_generation(self) -> int:
        """Generation where cycle started (0 if no cycle)."""
        return self._cycle_start_generation

    def step(self) -> None:
        """Advance the simulation by one generation."""
        self.engine.step()
        self._generation += 1
        self._update_population_history()
        self._check_for_cycles()

    def run(self, generations: int) -> None:
        """Advance the simulation by a fixed number of generations."""
        for _ in range(generations):
            self.step()

    def _update_population_history(self) -> None:
        self._population_history.append(self.population)

    def _check_for_cycles(self) -> None:
        """Record the current state, flagging a cycle if it was seen before."""
        if self._cycle_detected:
            return

        current_state = self.store.cells.tobytes()

        if current_state in self._seen_states:
            first_occurrence = self._seen_states[current_state]
            self._cycle_detected = True
            self._cycle_length = self._generation - first_occurrence
            self._cycle_start_generation = first_occurrence
            LOG.debug(
                "Cycle of length %d detected at generation %d (first seen at %d)",
                self._cycle_length,
                self._generation,
                first_occurrence,
            )
            return

        # Forget the state about to fall out of the bounded history
        if len(self._state_history) == self._state_history.maxlen:
            oldest = self._state_history[0]
            if self._seen_states.get(oldest) == self._generation - len(self._state_history):
                del self._seen_states[oldest]

        self._seen_states[current_state] = self._generation
        self._state_history.append(current_state)

    def reset(self) -> None:
        """Reset tracking after the store has been reinitialized."""
        self._generation = 0
        self._population_history.clear()
        self._state_history.clear()
        self._seen_states.clear()
        self._cycle_detected = False
        self._cycle_length = 0
        self._cycle_start_generation = 0

        self._update_population_history()
        self._check_for_cycles()

    def run_until_stable(self, max_generations: int = 10000) -> Tuple[int, str]:
        """Run simulation until it becomes stable or cycles.

        Args:
            max_generations: Maximum generations to run

        Returns:
            Tuple of (final_generation, reason) where reason is one of:
            'cycle', 'extinction', 'max_generations'
        """
        for _ in range(max_generations):
            self.step()

            if self.population == 0:
                return self._generation, "extinction"

            if self._cycle_detected:
                return self._generation, "cycle"

        return self._generation, "max_generations"

    def get_population_change_rate(self, window_size: int = 10) -> float:
        """Calculate recent population change rate.

        Args:
            window_size: Number of recent generations to consider

        Returns:
            Average population change per generation
        """
        recent_history = list(self._population_history)[-window_size:]
        if len(recent_history) < 2:
            return 0.0

        changes = np.diff(recent_history)
        return float(np.mean(changes))

    def get_statistics(self) -> Dict:
        """Get simulation statistics.

        Returns:
            Dictionary with various statistics
        """
        bbox = self.store.get_bounding_box()
        width, height = self.store.dimensions()

        stats = {
            "generation": self._generation,
            "population": self.population,
            "population_change_rate": self.get_population_change_rate(),
            "population_history": list(self._population_history),
            "cycle_detected": self._cycle_detected,
            "cycle_length": self._cycle_length,
            "cycle_start_generation": self._cycle_start_generation,
            "grid_size": (width, height),
            "population_density": self.population / (width * height),
        }

        if bbox:
            stats["bounding_box"] = bbox
            box_width = bbox[2] - bbox[0] + 1
            box_height = bbox[3] - bbox[1] + 1
            stats["bounding_box_size"] = (box_width, box_height)
            stats["bounding_box_area"] = box_width * box_height
        else:
            stats["bounding_box"] = None
            stats["bounding_box_size"] = (0, 0)
            stats["bounding_box_area"] = 0

        return stats
