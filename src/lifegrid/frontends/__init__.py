"""Frontend interfaces for the Game of Life."""

from .cli import CLILifeRunner

__all__ = ["CLILifeRunner"]
