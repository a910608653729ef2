"""Minimal pygame based board renderer for the mining game.

This module keeps rendering deterministic so it can be exercised in automated
tests using the SDL ``dummy`` video driver.  It only reads session state; all
mutations go through :class:`~mining_game.game.GameSession`.
"""

from __future__ import annotations

import os
from typing import Callable, Iterable, List, Optional, Tuple

from ..game import ActionOutcome, Door, DoorFor, GameSession, Ground, Ore, Tile, TileKind
from . import layout
from .controls import Action, Command, InputDispatcher


# Pygame is imported lazily in ``ensure_pygame`` so test environments can
# control the SDL configuration (e.g. select the ``dummy`` video driver).
_PYGAME = None


def ensure_pygame():
    global _PYGAME
    if _PYGAME is None:
        os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
        _PYGAME = __import__("pygame")
        _PYGAME.display.init()
        _PYGAME.font.init()
    return _PYGAME


def shows_hp_bar(tile: Tile) -> bool:
    if tile.max_hp <= 0:
        return False
    if isinstance(tile, (Ground, Ore)):
        return True
    return isinstance(tile, Door) and tile.door_for is DoorFor.NEXT and tile.locked


class MiningGameUI:
    """Draws the active level, the player and the inventory overlay."""

    def __init__(
        self,
        session: GameSession,
        *,
        cell_size: int = layout.TILE_SIZE,
        surface=None,
        use_display: bool = False,
        dispatcher: Optional[InputDispatcher] = None,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        pygame = ensure_pygame()
        self.session = session
        self.cell_size = cell_size
        width = session.level.width * cell_size
        height = session.level.height * cell_size
        self.surface = surface or pygame.Surface((width, height))
        self.screen = None
        if use_display:
            self.screen = pygame.display.set_mode((width, height))
        self.dispatcher = dispatcher or InputDispatcher()
        self.clock = clock or pygame.time.get_ticks
        self.inventory_open = False
        self.quit_requested = False
        self.last_outcome: Optional[ActionOutcome] = None
        self.font = pygame.font.Font(pygame.font.get_default_font(), 16)
        self.title_font = pygame.font.Font(pygame.font.get_default_font(), 20)

    # ------------------------------------------------------------------
    # Input handling
    def process_events(self, events: Iterable[object]) -> List[ActionOutcome]:
        outcomes: List[ActionOutcome] = []
        for command in self.dispatcher.dispatch(events):
            outcome = self.apply_command(command)
            if outcome is not None:
                outcomes.append(outcome)
        return outcomes

    def apply_command(self, command: Command) -> Optional[ActionOutcome]:
        if command.action is Action.TOGGLE_INVENTORY:
            self.inventory_open = not self.inventory_open
            return None
        if command.action is Action.QUIT:
            self.quit_requested = True
            return None
        direction = command.action.direction
        if direction is None:
            return None
        outcome = self.session.handle_direction(direction, self.clock(), repeat=command.repeat)
        self.last_outcome = outcome
        return outcome

    # ------------------------------------------------------------------
    # Read-only views
    def tile_color(self, tile: Tile) -> Tuple[int, int, int]:
        if tile.kind is TileKind.MINED:
            return layout.MINED_COLOR
        if isinstance(tile, Door):
            if tile.door_for is DoorFor.PREV:
                return layout.PORTAL_COLOR
            return layout.LOCKED_DOOR_COLOR if tile.locked else layout.OPEN_DOOR_COLOR
        if isinstance(tile, Ore):
            color = self.session.table.mineral_color(tile.resource)
            return layout.hex_to_rgb(color) if color else layout.UNKNOWN_ORE_COLOR
        profile = self.session.table.profile(self.session.current_level)
        return layout.ground_color(profile.ground_lightness)

    def inventory_rows(self) -> List[Tuple[str, int]]:
        player = self.session.player
        return [(mineral, player.count(mineral)) for mineral in self.session.table.minerals]

    # ------------------------------------------------------------------
    # Rendering helpers
    def render(self):
        pygame = ensure_pygame()
        self.surface.fill(layout.BACKGROUND_COLOR)
        self._draw_tiles()
        self._draw_player()
        if self.inventory_open:
            self._draw_inventory()
        if self.screen:
            self.screen.blit(self.surface, (0, 0))
            pygame.display.flip()
        return self.surface

    def _cell_rect(self, position: Tuple[int, int]):
        pygame = ensure_pygame()
        return pygame.Rect(
            position[0] * self.cell_size,
            position[1] * self.cell_size,
            self.cell_size,
            self.cell_size,
        )

    def _draw_tiles(self) -> None:
        pygame = ensure_pygame()
        for position, tile in self.session.level.grid:
            rect = self._cell_rect(position)
            self.surface.fill(self.tile_color(tile), rect)
            pygame.draw.rect(self.surface, layout.GRID_LINE_COLOR, rect, 1)
            if shows_hp_bar(tile):
                self._draw_hp_bar(rect, tile.hp, tile.max_hp)

    def _draw_hp_bar(self, cell_rect, hp: int, max_hp: int) -> None:
        pygame = ensure_pygame()
        bar_width = self.cell_size - 2 * layout.HP_BAR_MARGIN
        bar = pygame.Rect(
            cell_rect.x + layout.HP_BAR_MARGIN,
            cell_rect.y + layout.HP_BAR_MARGIN,
            bar_width,
            layout.HP_BAR_HEIGHT,
        )
        self.surface.fill(layout.HP_BAR_BACKGROUND, bar)
        filled = int(bar_width * hp / max_hp)
        if filled > 0:
            self.surface.fill(layout.HP_BAR_FILL, pygame.Rect(bar.x, bar.y, filled, bar.height))
        pygame.draw.rect(self.surface, layout.HP_BAR_BORDER, bar, 1)

    def _draw_player(self) -> None:
        self.surface.fill(layout.PLAYER_COLOR, self._cell_rect(self.session.player.position))

    def _draw_inventory(self) -> None:
        pygame = ensure_pygame()
        width, height = layout.INVENTORY_SIZE
        panel = pygame.Surface((width, height), pygame.SRCALPHA)
        panel.fill(layout.INVENTORY_BACKGROUND)
        origin_x = self.surface.get_width() // 2 - width // 2
        origin_y = self.surface.get_height() // 2 - height // 2
        self.surface.blit(panel, (origin_x, origin_y))

        title = self.title_font.render("Inventory", True, layout.TEXT_COLOR)
        title_rect = title.get_rect()
        title_rect.bottomleft = (
            origin_x + layout.INVENTORY_PADDING,
            origin_y + layout.INVENTORY_TITLE_OFFSET,
        )
        self.surface.blit(title, title_rect)

        row_y = origin_y + layout.INVENTORY_LIST_OFFSET
        for mineral, count in self.inventory_rows():
            color = self.session.table.mineral_color(mineral)
            name_color = layout.hex_to_rgb(color) if color else layout.TEXT_COLOR
            name_surface = self.font.render(mineral, True, name_color)
            name_rect = name_surface.get_rect()
            name_rect.bottomleft = (origin_x + layout.INVENTORY_PADDING, row_y)
            self.surface.blit(name_surface, name_rect)

            count_surface = self.font.render(f": {count}", True, layout.TEXT_COLOR)
            count_rect = count_surface.get_rect()
            count_rect.bottomleft = (origin_x + layout.INVENTORY_COUNT_OFFSET, row_y)
            self.surface.blit(count_surface, count_rect)
            row_y += layout.INVENTORY_ROW_SPACING


__all__ = ["MiningGameUI", "ensure_pygame", "shows_hp_bar"]
