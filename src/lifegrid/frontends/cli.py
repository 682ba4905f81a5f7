"""Command-line interface for Conway's Game of Life."""

import argparse
import logging
import sys
import time
from typing import Dict, Optional, TextIO, Tuple

from ..core.engine import EvolutionEngine
from ..core.grid import GridStore, InvariantViolation
from ..core.patterns import PatternLibrary, read_pattern_file
from ..core.simulation import Simulation
from ..utils.config import Config

LOG = logging.getLogger(__name__)

# ANSI: erase display, move cursor to the top-left corner
CLEAR_SEQUENCE = "\033[2J\033[0;0H"


def render_world(store: GridStore) -> str:
    """Render the current generation as a bordered text rectangle.

    Args:
        store: Grid store to render

    Returns:
        Multi-line string with '+'/'-' borders and '|' cell separators
    """
    width, height = store.dimensions()
    border = "+" + "-" * (2 * width - 1) + "+"

    lines = [border]
    for y in range(height):
        glyphs = (Config.CHAR_ALIVE if store.read(x, y) else Config.CHAR_DEAD for x in range(width))
        lines.append("|" + "|".join(glyphs) + "|")
    lines.append(border)

    return "\n".join(lines)


def clear_screen(stream: Optional[TextIO] = None) -> None:
    """Clear the terminal."""
    stream = stream or sys.stdout
    stream.write(CLEAR_SEQUENCE)
    stream.flush()


class CLILifeRunner:
    """Command-line interface for running Game of Life simulations."""

    def __init__(self):
        """Initialize CLI interface."""
        self.pattern_library = PatternLibrary()

    def create_world(
        self,
        width: int,
        height: int,
        pattern_file: Optional[str] = None,
        pattern: Optional[str] = None,
        pattern_x: int = 0,
        pattern_y: int = 0,
    ) -> GridStore:
        """Create a grid store and load its first generation.

        A pattern file takes precedence over a named pattern; with neither,
        the built-in glider is used.

        Args:
            width: Grid width
            height: Grid height
            pattern_file: Optional path of a pattern text file
            pattern: Optional library pattern name
            pattern_x: X offset for named pattern placement
            pattern_y: Y offset for named pattern placement

        Returns:
            Initialized GridStore

        Raises:
            OSError: If the pattern file can't be read
            KeyError: If the named pattern doesn't exist
        """
        store = GridStore(width, height)

        if pattern_file:
            LOG.debug("Loading pattern file %s", pattern_file)
            store.load_pattern(read_pattern_file(pattern_file))
        elif pattern:
            loaded_pattern = self.pattern_library.get_pattern(pattern)
            if loaded_pattern is None:
                raise KeyError(pattern)
            LOG.debug("Loading pattern '%s' at (%d, %d)", pattern, pattern_x, pattern_y)
            loaded_pattern.apply_to_store(store, pattern_x, pattern_y)
        else:
            store.load_default_pattern()

        return store

    def run_simulation(
        self,
        store: GridStore,
        generations: Optional[int],
        delay: float = Config.FRAME_DELAY,
        vectorized: bool = False,
        clear: bool = True,
        stop_when_stable: bool = False,
    ) -> Tuple[int, str, Dict]:
        """Animate a simulation in the terminal.

        Each frame clears the screen, renders the current generation, steps
        and then sleeps.

        Args:
            store: Initialized grid store
            generations: Number of generations to run, None to run forever
            delay: Seconds to sleep between frames
            vectorized: Use the whole-grid engine
            clear: Clear the terminal before each frame
            stop_when_stable: Stop early on extinction or a detected cycle

        Returns:
            Tuple of (final_generation, finish_reason, statistics)
        """
        simulation = Simulation(store, EvolutionEngine(store, vectorized=vectorized))
        initial_population = simulation.population
        reason = "max_generations"

        start_time = time.time()

        while generations is None or simulation.generation < generations:
            if clear:
                clear_screen()
            print(render_world(store))

            simulation.step()

            if stop_when_stable:
                if simulation.population == 0:
                    reason = "extinction"
                    break
                if simulation.cycle_detected:
                    reason = "cycle"
                    break

            if delay > 0:
                time.sleep(delay)

        duration = time.time() - start_time

        stats = simulation.get_statistics()
        stats["duration_seconds"] = duration
        stats["generations_per_second"] = simulation.generation / duration if duration > 0 else 0
        stats["initial_population"] = initial_population

        return simulation.generation, reason, stats

    def list_patterns(self) -> None:
        """Print all library patterns grouped by category."""
        print("Available patterns:")
        for category, names in self.pattern_library.get_patterns_by_category().items():
            print(f"\n{category}:")
            for pattern_name in names:
                pattern = self.pattern_library.get_pattern(pattern_name)
                size = pattern.get_size()
                print(f"  {pattern_name}: {size[0]}x{size[1]}, {len(pattern.cells)} cells")
                if pattern.description:
                    print(f"    {pattern.description}")


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        description="Animate Conway's Game of Life in the terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run the built-in glider until interrupted
  lifegrid-cli

  # Run a pattern file for 50 generations
  lifegrid-cli inputs/gun.txt

  # Run the Gosper glider gun for 200 generations, no delay
  lifegrid-cli --pattern "Gosper Glider Gun" -n 200 -d 0

  # Run R-pentomino on a larger grid until it settles, then show statistics
  lifegrid-cli -W 80 -H 40 --pattern R-pentomino --stop-when-stable --stats

  # List available patterns
  lifegrid-cli --list-patterns
        """,
    )

    parser.add_argument(
        "pattern_file",
        nargs="?",
        help="Text file with the initial generation ('*' marks a live cell)",
    )

    # Grid configuration
    parser.add_argument(
        "-W", "--width", type=int, default=Config.WORLD_WIDTH, help=f"Grid width (default: {Config.WORLD_WIDTH})"
    )

    parser.add_argument(
        "-H", "--height", type=int, default=Config.WORLD_HEIGHT, help=f"Grid height (default: {Config.WORLD_HEIGHT})"
    )

    # Pattern configuration
    parser.add_argument(
        "--pattern",
        type=str,
        help="Load a library pattern instead of the default glider",
    )

    parser.add_argument(
        "--pattern-x",
        type=int,
        default=None,
        help="X offset for pattern placement (default: centered)",
    )

    parser.add_argument(
        "--pattern-y",
        type=int,
        default=None,
        help="Y offset for pattern placement (default: centered)",
    )

    # Simulation configuration
    parser.add_argument(
        "-n",
        "--generations",
        type=int,
        default=None,
        help=f"Generations to run (default: {Config.FILE_GENERATIONS} with a pattern file, otherwise unlimited)",
    )

    parser.add_argument(
        "-d",
        "--delay",
        type=float,
        default=Config.FRAME_DELAY,
        help=f"Seconds between frames (default: {Config.FRAME_DELAY})",
    )

    parser.add_argument(
        "--vectorized",
        action="store_true",
        help="Compute generations with whole-grid array operations",
    )

    parser.add_argument(
        "--stop-when-stable",
        action="store_true",
        help="Stop on extinction or when a cycle is detected",
    )

    # Output configuration
    parser.add_argument(
        "--no-clear",
        action="store_true",
        help="Don't clear the terminal between frames",
    )

    parser.add_argument(
        "-s",
        "--stats",
        action="store_true",
        help="Print statistics when the simulation finishes",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print debug information",
    )

    parser.add_argument(
        "--list-patterns",
        action="store_true",
        help="List available patterns and exit",
    )

    return parser


def format_finish_reason(reason: str, stats: dict) -> str:
    """Format the finish reason for display.

    Args:
        reason: Finish reason from the simulation
        stats: Simulation statistics

    Returns:
        Human-readable description
    """
    if reason == "extinction":
        return "Extinction (all cells died)"
    elif reason == "cycle":
        cycle_length = stats.get("cycle_length", 0)
        start_gen = stats.get("cycle_start_generation", 0)
        return f"Cycle detected (length {cycle_length}, started at generation {start_gen})"
    elif reason == "max_generations":
        return f"Generation limit reached ({stats.get('generation', 0)})"
    return reason


def print_results(final_generation: int, reason: str, stats: dict, verbose: bool) -> None:
    """Print simulation results.

    Args:
        final_generation: Final generation number
        reason: Reason the simulation finished
        stats: Simulation statistics
        verbose: Include detailed statistics
    """
    print(f"\nSimulation completed after {final_generation} generations")
    print(f"Finish reason: {format_finish_reason(reason, stats)}")

    if verbose:
        print("\nDetailed Statistics:")
        print(f"  Grid size: {stats['grid_size'][0]}x{stats['grid_size'][1]}")
        print(f"  Initial population: {stats['initial_population']}")
        print(f"  Final population: {stats['population']}")
        print(f"  Population density: {stats['population_density']:.2%}")
        print(f"  Population change rate: {stats['population_change_rate']:.2f}")
        print(f"  Duration: {stats['duration_seconds']:.3f} seconds")
        if stats.get("bounding_box"):
            box_width, box_height = stats["bounding_box_size"]
            print(f"  Bounding box: {stats['bounding_box']} ({box_width}x{box_height})")
    else:
        print(
            f"Population: {stats['initial_population']} -> {stats['population']}, "
            f"{stats['duration_seconds']:.3f}s"
        )


def validate_args(args: argparse.Namespace) -> bool:
    """Validate command-line arguments.

    Args:
        args: Parsed arguments

    Returns:
        True if arguments are valid
    """
    errors = []

    if args.width <= 0:
        errors.append("Width must be positive")
    if args.height <= 0:
        errors.append("Height must be positive")
    if args.generations is not None and args.generations < 0:
        errors.append("Generations must be non-negative")
    if args.delay < 0:
        errors.append("Delay must be non-negative")
    if (args.pattern_x is not None and args.pattern_x < 0) or (
        args.pattern_y is not None and args.pattern_y < 0
    ):
        errors.append("Pattern offsets must be non-negative")

    if errors:
        print("Error: Invalid arguments:")
        for error in errors:
            print(f"  - {error}")
        return False

    return True


def main() -> int:
    """Main entry point for CLI interface.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = create_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    cli = CLILifeRunner()

    if args.list_patterns:
        cli.list_patterns()
        return 0

    if not validate_args(args):
        return 1

    if args.pattern and not args.pattern_file:
        pattern = cli.pattern_library.get_pattern(args.pattern)
        if not pattern:
            available = cli.pattern_library.list_patterns()
            print(f"Error: Pattern '{args.pattern}' not found")
            print(f"Available patterns: {', '.join(available)}")
            print("Use --list-patterns to see detailed information")
            return 1

        # Center along any axis without an explicit offset
        pattern_width, pattern_height = pattern.get_size()
        if args.pattern_x is None:
            args.pattern_x = max(0, (args.width - pattern_width) // 2)
        if args.pattern_y is None:
            args.pattern_y = max(0, (args.height - pattern_height) // 2)
        LOG.debug("Placing pattern at (%d, %d)", args.pattern_x, args.pattern_y)

    pattern_x = args.pattern_x or 0
    pattern_y = args.pattern_y or 0

    generations = args.generations
    if generations is None and args.pattern_file:
        generations = Config.FILE_GENERATIONS

    try:
        try:
            store = cli.create_world(
                width=args.width,
                height=args.height,
                pattern_file=args.pattern_file,
                pattern=args.pattern,
                pattern_x=pattern_x,
                pattern_y=pattern_y,
            )
        except OSError:
            print(f"Error: Could not open file {args.pattern_file} for reading.")
            return 1

        final_generation, reason, stats = cli.run_simulation(
            store,
            generations=generations,
            delay=args.delay,
            vectorized=args.vectorized,
            clear=not args.no_clear,
            stop_when_stable=args.stop_when_stable,
        )

        if args.stats:
            print_results(final_generation, reason, stats, args.verbose)

        return 0

    except KeyboardInterrupt:
        print("\nSimulation interrupted by user")
        return 1
    except InvariantViolation:
        raise
    except Exception as e:
        print(f"Error: {e}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
