"""Tests for the CLI frontend."""

import argparse
from io import StringIO
from unittest.mock import Mock, patch

import pytest

from lifegrid.core.grid import GridStore, InvariantViolation
from lifegrid.frontends.cli import (
    CLEAR_SEQUENCE,
    CLILifeRunner,
    clear_screen,
    create_parser,
    format_finish_reason,
    main,
    print_results,
    render_world,
    validate_args,
)


def make_args(**overrides):
    values = dict(width=39, height=20, generations=None, delay=0.25, pattern_x=0, pattern_y=0)
    values.update(overrides)
    return argparse.Namespace(**values)


class TestRendering:
    """Test cases for terminal rendering."""

    def test_render_small_world(self):
        """Test the bordered text format."""
        store = GridStore(2, 2)
        store.load_pattern(["*"])

        assert render_world(store) == "+---+\n|*| |\n| | |\n+---+"

    def test_render_default_world(self):
        """Test the frame size for the default 39x20 world."""
        store = GridStore(39, 20)
        store.load_default_pattern()

        lines = render_world(store).split("\n")

        assert len(lines) == 22
        assert all(len(line) == 79 for line in lines)
        assert lines[0] == "+" + "-" * 77 + "+"
        assert lines[-1] == lines[0]
        # Row 2 holds glider cells at x=1 and x=3
        assert lines[3].startswith("| |*| |*| |")
        assert render_world(store).count("*") == 5

    def test_clear_screen(self):
        """Test writing the ANSI clear sequence."""
        stream = StringIO()
        clear_screen(stream)
        assert stream.getvalue() == CLEAR_SEQUENCE == "\033[2J\033[0;0H"


class TestCLILifeRunner:
    """Test cases for the CLI runner."""

    def test_initialization(self):
        """Test CLI initialization."""
        cli = CLILifeRunner()
        assert len(cli.pattern_library.list_patterns()) > 0

    def test_create_world_default(self):
        """Test that the default world is the glider."""
        store = CLILifeRunner().create_world(39, 20)

        assert store.dimensions() == (39, 20)
        assert store.population == 5

    def test_create_world_from_file(self, tmp_path):
        """Test loading the world from a pattern file."""
        path = tmp_path / "pattern.txt"
        path.write_text("**\n**\n")

        store = CLILifeRunner().create_world(10, 10, pattern_file=str(path))

        assert store.population == 4
        assert store.read(1, 1)

    def test_create_world_missing_file(self, tmp_path):
        """Test that an unreadable file raises OSError."""
        with pytest.raises(OSError):
            CLILifeRunner().create_world(10, 10, pattern_file=str(tmp_path / "missing.txt"))

    def test_create_world_named_pattern(self):
        """Test loading a library pattern with an offset."""
        store = CLILifeRunner().create_world(10, 10, pattern="Blinker", pattern_x=3, pattern_y=4)

        assert store.population == 3
        assert store.read(3, 5) and store.read(4, 5) and store.read(5, 5)

    def test_create_world_unknown_pattern(self):
        """Test that an unknown pattern name raises KeyError."""
        with pytest.raises(KeyError):
            CLILifeRunner().create_world(10, 10, pattern="Nope")

    @patch("sys.stdout", new_callable=StringIO)
    def test_run_simulation_fixed_generations(self, mock_stdout):
        """Test rendering one frame per generation."""
        cli = CLILifeRunner()
        store = cli.create_world(10, 10)

        final_gen, reason, stats = cli.run_simulation(store, generations=3, delay=0, clear=False)

        assert final_gen == 3
        assert reason == "max_generations"
        assert stats["generation"] == 3
        assert stats["initial_population"] == 5
        assert "duration_seconds" in stats

        output = mock_stdout.getvalue()
        assert output.count("+-------------------+") == 6
        assert CLEAR_SEQUENCE not in output

    @patch("sys.stdout", new_callable=StringIO)
    def test_run_simulation_clears_screen(self, mock_stdout):
        """Test clearing before each frame."""
        cli = CLILifeRunner()
        store = cli.create_world(10, 10)

        cli.run_simulation(store, generations=2, delay=0)

        assert mock_stdout.getvalue().count(CLEAR_SEQUENCE) == 2

    @patch("lifegrid.frontends.cli.time.sleep")
    @patch("sys.stdout", new_callable=StringIO)
    def test_run_simulation_paces_frames(self, mock_stdout, mock_sleep):
        """Test sleeping between frames."""
        cli = CLILifeRunner()
        store = cli.create_world(10, 10)

        cli.run_simulation(store, generations=4, delay=0.25, clear=False)

        assert mock_sleep.call_count == 4
        mock_sleep.assert_called_with(0.25)

    @patch("sys.stdout", new_callable=StringIO)
    def test_run_simulation_stop_when_stable(self, mock_stdout):
        """Test stopping early on cycles and extinction."""
        cli = CLILifeRunner()

        store = cli.create_world(10, 10, pattern="Block", pattern_x=4, pattern_y=4)
        final_gen, reason, _ = cli.run_simulation(store, generations=None, delay=0, clear=False, stop_when_stable=True)
        assert (final_gen, reason) == (1, "cycle")

        store = GridStore(5, 5)
        store.load_pattern(["", "  *"])
        final_gen, reason, stats = cli.run_simulation(store, generations=10, delay=0, clear=False, stop_when_stable=True)
        assert (final_gen, reason) == (1, "extinction")
        assert stats["population"] == 0

    @patch("sys.stdout", new_callable=StringIO)
    def test_run_simulation_vectorized(self, mock_stdout):
        """Test that the vectorized engine produces the same world."""
        cli = CLILifeRunner()
        store_a = cli.create_world(39, 20, pattern="R-pentomino", pattern_x=18, pattern_y=8)
        store_b = cli.create_world(39, 20, pattern="R-pentomino", pattern_x=18, pattern_y=8)

        cli.run_simulation(store_a, generations=20, delay=0, clear=False)
        cli.run_simulation(store_b, generations=20, delay=0, clear=False, vectorized=True)

        assert store_a == store_b

    @patch("sys.stdout", new_callable=StringIO)
    def test_list_patterns(self, mock_stdout):
        """Test pattern listing output."""
        CLILifeRunner().list_patterns()

        output = mock_stdout.getvalue()
        assert "Available patterns:" in output
        assert "Spaceships:" in output
        assert "Glider: 3x3, 5 cells" in output
        assert "Gosper Glider Gun: 36x9, 36 cells" in output


class TestArgumentParsing:
    """Test command-line argument parsing."""

    def test_parser_defaults(self):
        """Test default argument values."""
        args = create_parser().parse_args([])

        assert args.pattern_file is None
        assert args.width == 39
        assert args.height == 20
        assert args.generations is None
        assert args.delay == 0.25
        assert args.pattern is None
        assert not args.vectorized
        assert not args.no_clear
        assert not args.stop_when_stable
        assert not args.stats
        assert not args.verbose
        assert not args.list_patterns

    def test_parser_custom_values(self):
        """Test parsing custom argument values."""
        args = create_parser().parse_args(
            ["inputs/gun.txt", "-W", "80", "-H", "40", "-n", "10", "-d", "0", "--vectorized", "--no-clear", "-s"]
        )

        assert args.pattern_file == "inputs/gun.txt"
        assert args.width == 80
        assert args.height == 40
        assert args.generations == 10
        assert args.delay == 0.0
        assert args.vectorized
        assert args.no_clear
        assert args.stats

    def test_validate_args_valid(self):
        """Test validation with valid arguments."""
        assert validate_args(make_args()) is True
        assert validate_args(make_args(generations=0, delay=0)) is True

    @patch("sys.stdout", new_callable=StringIO)
    def test_validate_args_invalid(self, mock_stdout):
        """Test validation failures."""
        assert validate_args(make_args(width=0)) is False
        assert validate_args(make_args(height=-5)) is False
        assert validate_args(make_args(generations=-1)) is False
        assert validate_args(make_args(delay=-0.5)) is False
        assert validate_args(make_args(pattern_x=-5)) is False

        output = mock_stdout.getvalue()
        assert "Error: Invalid arguments:" in output
        assert "Width must be positive" in output


class TestFormatting:
    """Test output formatting functions."""

    def test_format_finish_reason_extinction(self):
        """Test formatting extinction reason."""
        reason = format_finish_reason("extinction", {})
        assert "Extinction" in reason
        assert "died" in reason

    def test_format_finish_reason_cycle(self):
        """Test formatting cycle detection reason."""
        stats = {"cycle_length": 2, "cycle_start_generation": 15}
        reason = format_finish_reason("cycle", stats)
        assert "Cycle detected" in reason
        assert "length 2" in reason
        assert "generation 15" in reason

    def test_format_finish_reason_max_generations(self):
        """Test formatting the generation limit reason."""
        reason = format_finish_reason("max_generations", {"generation": 50})
        assert "Generation limit" in reason
        assert "50" in reason

    @patch("sys.stdout", new_callable=StringIO)
    def test_print_results_verbose(self, mock_stdout):
        """Test printing results in verbose mode."""
        stats = {
            "grid_size": (39, 20),
            "initial_population": 5,
            "population": 5,
            "population_density": 5 / 780,
            "population_change_rate": 0.0,
            "duration_seconds": 2.5,
            "bounding_box": (2, 2, 4, 4),
            "bounding_box_size": (3, 3),
        }

        print_results(50, "max_generations", stats, verbose=True)

        output = mock_stdout.getvalue()
        assert "50 generations" in output
        assert "Grid size: 39x20" in output
        assert "Initial population: 5" in output
        assert "2.500 seconds" in output
        assert "(3x3)" in output

    @patch("sys.stdout", new_callable=StringIO)
    def test_print_results_compact(self, mock_stdout):
        """Test printing results in compact mode."""
        stats = {"initial_population": 7, "population": 0, "duration_seconds": 0.5}

        print_results(12, "extinction", stats, verbose=False)

        output = mock_stdout.getvalue()
        assert "12 generations" in output
        assert "7 -> 0" in output
        assert "0.500s" in output


class TestMainFunction:
    """Test the main CLI function."""

    @patch("lifegrid.frontends.cli.CLILifeRunner")
    def test_main_list_patterns(self, mock_cli_class):
        """Test main function with --list-patterns."""
        mock_cli = Mock()
        mock_cli_class.return_value = mock_cli

        with patch("sys.argv", ["lifegrid-cli", "--list-patterns"]):
            result = main()

        assert result == 0
        mock_cli.list_patterns.assert_called_once()

    @patch("sys.stdout", new_callable=StringIO)
    def test_main_invalid_args(self, mock_stdout):
        """Test main function with invalid arguments."""
        with patch("sys.argv", ["lifegrid-cli", "--width", "-5"]):
            result = main()

        assert result == 1

    @patch("sys.stdout", new_callable=StringIO)
    def test_main_invalid_pattern(self, mock_stdout):
        """Test main function with an unknown pattern name."""
        with patch("sys.argv", ["lifegrid-cli", "--pattern", "InvalidPattern"]):
            result = main()

        assert result == 1
        assert "Pattern 'InvalidPattern' not found" in mock_stdout.getvalue()

    @patch("sys.stdout", new_callable=StringIO)
    def test_main_missing_file(self, mock_stdout, tmp_path):
        """Test main function with a pattern file that can't be opened."""
        missing = tmp_path / "missing.txt"
        with patch("sys.argv", ["lifegrid-cli", str(missing)]):
            result = main()

        assert result == 1
        assert f"Could not open file {missing} for reading." in mock_stdout.getvalue()

    @patch("sys.stdout", new_callable=StringIO)
    def test_main_runs_pattern_file(self, mock_stdout, tmp_path):
        """Test a full run from a pattern file."""
        path = tmp_path / "blinker.txt"
        path.write_text("\n\n   ***\n")

        with patch("sys.argv", ["lifegrid-cli", str(path), "-n", "2", "-d", "0", "--no-clear", "-s"]):
            result = main()

        assert result == 0
        output = mock_stdout.getvalue()
        assert output.count("|*|*|*|") == 1
        assert "Simulation completed after 2 generations" in output

    @patch("sys.stdout", new_callable=StringIO)
    def test_main_pattern_file_with_non_text_bytes(self, mock_stdout, tmp_path):
        """Test that stray non-UTF-8 bytes in a pattern file are dead cells."""
        path = tmp_path / "binary.txt"
        path.write_bytes(b"*\xb7*\n \xff*\n")

        with patch("sys.argv", ["lifegrid-cli", str(path), "-W", "3", "-H", "2", "-n", "1", "-d", "0", "--no-clear"]):
            result = main()

        assert result == 0
        output = mock_stdout.getvalue()
        assert "|*| |*|" in output
        assert "| | |*|" in output

    @patch("lifegrid.frontends.cli.CLILifeRunner")
    def test_main_file_defaults_to_fifty_generations(self, mock_cli_class):
        """Test the generation default when a pattern file is given."""
        mock_cli = Mock()
        mock_cli.run_simulation.return_value = (50, "max_generations", {})
        mock_cli_class.return_value = mock_cli

        with patch("sys.argv", ["lifegrid-cli", "world.txt"]):
            result = main()

        assert result == 0
        assert mock_cli.create_world.call_args[1]["pattern_file"] == "world.txt"
        assert mock_cli.run_simulation.call_args[1]["generations"] == 50

    @patch("lifegrid.frontends.cli.CLILifeRunner")
    def test_main_default_runs_forever(self, mock_cli_class):
        """Test that the default glider runs without a generation limit."""
        mock_cli = Mock()
        mock_cli.run_simulation.return_value = (0, "max_generations", {})
        mock_cli_class.return_value = mock_cli

        with patch("sys.argv", ["lifegrid-cli"]):
            result = main()

        assert result == 0
        assert mock_cli.create_world.call_args[1]["pattern_file"] is None
        assert mock_cli.create_world.call_args[1]["pattern"] is None
        assert mock_cli.run_simulation.call_args[1]["generations"] is None
        assert mock_cli.run_simulation.call_args[1]["delay"] == 0.25

    @patch("lifegrid.frontends.cli.CLILifeRunner")
    def test_main_pattern_auto_center(self, mock_cli_class):
        """Test automatic pattern centering."""
        mock_cli = Mock()
        mock_pattern = Mock()
        mock_pattern.get_size.return_value = (5, 3)
        mock_cli.pattern_library.get_pattern.return_value = mock_pattern
        mock_cli.run_simulation.return_value = (10, "max_generations", {})
        mock_cli_class.return_value = mock_cli

        with patch(
            "sys.argv",
            ["lifegrid-cli", "--pattern", "TestPattern", "--width", "30", "--height", "20", "-n", "10"],
        ):
            result = main()

        assert result == 0
        call_args = mock_cli.create_world.call_args
        assert call_args[1]["pattern_x"] == 12  # (30 - 5) // 2
        assert call_args[1]["pattern_y"] == 8  # (20 - 3) // 2

    @patch("sys.stdout", new_callable=StringIO)
    def test_main_pattern_at_origin(self, mock_stdout):
        """Test that explicit zero offsets place a pattern at the origin."""
        with patch(
            "sys.argv",
            ["lifegrid-cli", "--pattern", "Block", "-W", "4", "-H", "4",
             "--pattern-x", "0", "--pattern-y", "0", "-n", "1", "-d", "0", "--no-clear"],
        ):
            result = main()

        assert result == 0
        frame = mock_stdout.getvalue().splitlines()
        assert frame[1] == "|*|*| | |"
        assert frame[2] == "|*|*| | |"

    @patch("lifegrid.frontends.cli.CLILifeRunner")
    def test_main_pattern_partial_offset(self, mock_cli_class):
        """Test that only the axis without an offset is centered."""
        mock_cli = Mock()
        mock_pattern = Mock()
        mock_pattern.get_size.return_value = (5, 3)
        mock_cli.pattern_library.get_pattern.return_value = mock_pattern
        mock_cli.run_simulation.return_value = (1, "max_generations", {})
        mock_cli_class.return_value = mock_cli

        with patch(
            "sys.argv",
            ["lifegrid-cli", "--pattern", "TestPattern", "-W", "30", "-H", "20", "--pattern-x", "0", "-n", "1"],
        ):
            main()

        call_args = mock_cli.create_world.call_args
        assert call_args[1]["pattern_x"] == 0
        assert call_args[1]["pattern_y"] == 8

    @patch("sys.stdout", new_callable=StringIO)
    @patch("lifegrid.frontends.cli.CLILifeRunner")
    def test_main_keyboard_interrupt(self, mock_cli_class, mock_stdout):
        """Test handling of keyboard interrupt."""
        mock_cli = Mock()
        mock_cli.run_simulation.side_effect = KeyboardInterrupt()
        mock_cli_class.return_value = mock_cli

        with patch("sys.argv", ["lifegrid-cli"]):
            result = main()

        assert result == 1
        assert "interrupted" in mock_stdout.getvalue()

    @patch("sys.stdout", new_callable=StringIO)
    @patch("lifegrid.frontends.cli.CLILifeRunner")
    def test_main_exception(self, mock_cli_class, mock_stdout):
        """Test handling of general exceptions."""
        mock_cli = Mock()
        mock_cli.run_simulation.side_effect = Exception("Test error")
        mock_cli_class.return_value = mock_cli

        with patch("sys.argv", ["lifegrid-cli"]):
            result = main()

        assert result == 1
        assert "Error: Test error" in mock_stdout.getvalue()

    @patch("lifegrid.frontends.cli.CLILifeRunner")
    def test_main_invariant_violation_propagates(self, mock_cli_class):
        """Test that invariant violations are never turned into exit codes."""
        mock_cli = Mock()
        mock_cli.run_simulation.side_effect = InvariantViolation("bad write")
        mock_cli_class.return_value = mock_cli

        with patch("sys.argv", ["lifegrid-cli"]):
            with pytest.raises(InvariantViolation):
                main()
