"""User interface package for the mining game."""

from .controls import Action, Command, InputDispatcher
from .main import (
    DATA_ENV_VAR,
    MiningGameApp,
    UIDirectories,
    main,
    resolve_directories,
    run,
)
from .toolkit import MiningGameUI

__all__ = [
    "Action",
    "Command",
    "DATA_ENV_VAR",
    "InputDispatcher",
    "MiningGameApp",
    "MiningGameUI",
    "UIDirectories",
    "main",
    "resolve_directories",
    "run",
]
