"""Configuration constants for the Game of Life application."""
from dataclasses import dataclass


@dataclass
class Config:
    """Application configuration."""

    # World settings
    WORLD_WIDTH: int = 39
    WORLD_HEIGHT: int = 20

    # Simulation settings
    FILE_GENERATIONS: int = 50
    FRAME_DELAY: float = 0.25

    # Text format
    CHAR_ALIVE: str = "*"
    CHAR_DEAD: str = " "

    # Tracking
    HISTORY_LENGTH: int = 100
    STATE_HISTORY_LENGTH: int = 1000
