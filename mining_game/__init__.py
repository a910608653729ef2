"""Mining Game package."""

from .game import GameSession, Level, LevelGenerator, LevelRegistry, generate_level

__all__ = [
    "GameSession",
    "Level",
    "LevelGenerator",
    "LevelRegistry",
    "generate_level",
]
