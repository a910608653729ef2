"""Translate raw pygame key events into game actions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set

import pygame

from ..game import Direction


# Delay and interval (ms) passed to ``pygame.key.set_repeat`` so held keys
# produce repeated KEYDOWN events.
KEY_REPEAT_DELAY = 300
KEY_REPEAT_INTERVAL = 50


class Action(Enum):
    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    MOVE_LEFT = "move_left"
    MOVE_RIGHT = "move_right"
    TOGGLE_INVENTORY = "toggle_inventory"
    QUIT = "quit"

    @property
    def direction(self) -> Optional[Direction]:
        return _ACTION_DIRECTIONS.get(self)


_ACTION_DIRECTIONS: Dict[Action, Direction] = {
    Action.MOVE_UP: Direction.UP,
    Action.MOVE_DOWN: Direction.DOWN,
    Action.MOVE_LEFT: Direction.LEFT,
    Action.MOVE_RIGHT: Direction.RIGHT,
}


DEFAULT_BINDINGS: Dict[int, Action] = {
    pygame.K_UP: Action.MOVE_UP,
    pygame.K_w: Action.MOVE_UP,
    pygame.K_DOWN: Action.MOVE_DOWN,
    pygame.K_s: Action.MOVE_DOWN,
    pygame.K_LEFT: Action.MOVE_LEFT,
    pygame.K_a: Action.MOVE_LEFT,
    pygame.K_RIGHT: Action.MOVE_RIGHT,
    pygame.K_d: Action.MOVE_RIGHT,
    pygame.K_e: Action.TOGGLE_INVENTORY,
    pygame.K_ESCAPE: Action.QUIT,
}


@dataclass(frozen=True)
class Command:
    """A dispatched action.  ``repeat`` marks held-key auto-repeat."""

    action: Action
    repeat: bool = False


class InputDispatcher:
    """Single mapping point between key codes and :class:`Action` values."""

    def __init__(self, bindings: Optional[Dict[int, Action]] = None) -> None:
        self.bindings: Dict[int, Action] = dict(DEFAULT_BINDINGS if bindings is None else bindings)
        self._held: Set[int] = set()

    def bind(self, key: int, action: Action) -> None:
        self.bindings[key] = action

    def translate(self, event: object) -> Optional[Command]:
        event_type = getattr(event, "type", None)
        if event_type == pygame.QUIT:
            return Command(Action.QUIT)
        if event_type == pygame.KEYUP:
            self._held.discard(event.key)
            return None
        if event_type != pygame.KEYDOWN:
            return None

        repeat = event.key in self._held
        self._held.add(event.key)
        action = self.bindings.get(event.key)
        if action is None:
            return None
        return Command(action, repeat=repeat)

    def dispatch(self, events: Iterable[object]) -> List[Command]:
        commands: List[Command] = []
        for event in events:
            command = self.translate(event)
            if command is not None:
                commands.append(command)
        return commands

    def release_all(self) -> None:
        self._held.clear()


__all__ = [
    "Action",
    "Command",
    "DEFAULT_BINDINGS",
    "InputDispatcher",
    "KEY_REPEAT_DELAY",
    "KEY_REPEAT_INTERVAL",
]
