"""Interactive pygame window and command line launcher for the mining game."""

from __future__ import annotations

import argparse
import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

import pygame

from ..game import (
    ActionOutcome,
    COMPLETION_MESSAGE,
    DEFAULT_DATA_ROOT,
    DEFAULT_TABLE_NAME,
    GameSession,
    LevelTable,
    LevelTableLoader,
    OutcomeKind,
)
from . import layout
from .controls import KEY_REPEAT_DELAY, KEY_REPEAT_INTERVAL
from .toolkit import MiningGameUI

DATA_ENV_VAR = "MINING_GAME_DATA_ROOT"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UIDirectories:
    """Bundle with resolved directories required by the UI."""

    data_root: Path


def _read_directory(env_var: str, fallback: Path) -> Path:
    value = os.environ.get(env_var)
    if value:
        return Path(value).expanduser()
    return fallback


def resolve_directories(check_exists: bool = True) -> UIDirectories:
    """Resolve UI directories using environment variables.

    Parameters
    ----------
    check_exists:
        When *True*, raise :class:`FileNotFoundError` if the resolved data
        directory does not exist on disk.
    """

    data_root = _read_directory(DATA_ENV_VAR, DEFAULT_DATA_ROOT)

    if check_exists and not data_root.exists():
        raise FileNotFoundError(f"Required data directory does not exist: {data_root}")

    return UIDirectories(data_root=data_root)


def bootstrap_directories() -> UIDirectories:
    """Return resolved directories and print a short bootstrap message."""

    directories = resolve_directories()
    message = (
        "Mining Game bootstrap\n"
        f"  data: {directories.data_root}\n"
        f"Set {DATA_ENV_VAR} to point to a custom level table directory if needed."
    )
    print(message)
    return directories


def describe_outcome(outcome: ActionOutcome) -> Optional[str]:
    """Short status line for an action outcome, or *None* for routine ones."""

    if outcome.kind is OutcomeKind.MINED and outcome.resource:
        return f"Collected 1 {outcome.resource}"
    if outcome.kind is OutcomeKind.DOOR_OPENED:
        return "Next door is now open!"
    if outcome.kind is OutcomeKind.LEVEL_CHANGED:
        return f"Entered level {outcome.level}"
    if outcome.kind is OutcomeKind.COMPLETED:
        return COMPLETION_MESSAGE
    return None


def format_level_table(table: LevelTable) -> List[str]:
    lines = [f"Available levels ({table.name}):"]
    for index in sorted(table.profiles):
        profile = table.profiles[index]
        lines.append(
            f"  {index:>2}: {profile.mineral:<9} ore HP {profile.ore_hp:>3}, "
            f"ground HP {profile.ground_hp:>3}"
        )
    return lines


class MiningGameApp:
    """Pygame driven application: board, side panel and status footer."""

    status_duration = 3.0

    def __init__(
        self,
        *,
        directories: Optional[UIDirectories] = None,
        seed: Optional[int] = None,
        table_name: str = DEFAULT_TABLE_NAME,
    ) -> None:
        pygame.init()
        pygame.display.set_caption("Mining Game")
        pygame.key.set_repeat(KEY_REPEAT_DELAY, KEY_REPEAT_INTERVAL)

        self.directories = directories or resolve_directories()
        table = LevelTableLoader(self.directories.data_root).load(table_name)
        self.session = GameSession.new(seed=seed, table=table)

        self.geometry = layout.compute_geometry(self.session.level.width, self.session.level.height)
        self.screen = pygame.display.set_mode(self.geometry.window)
        self.clock = pygame.time.Clock()

        board_rect = pygame.Rect(*self.geometry.board)
        self.board = MiningGameUI(self.session, surface=pygame.Surface(board_rect.size))

        default_font = pygame.font.get_default_font()
        self.font = pygame.font.Font(default_font, 18)
        self.small_font = pygame.font.Font(default_font, 14)

        self.status_message: Optional[str] = None
        self.status_message_until: float = 0.0

    # ------------------------------------------------------------------
    # Event handling
    # ------------------------------------------------------------------
    def handle_event(self, event: pygame.event.Event) -> None:
        for outcome in self.board.process_events([event]):
            message = describe_outcome(outcome)
            if message:
                self._set_status_message(message)
        if self.board.quit_requested:
            raise SystemExit

    def _set_status_message(self, message: str, duration: Optional[float] = None) -> None:
        self.status_message = message
        self.status_message_until = time.perf_counter() + (duration or self.status_duration)

    def _footer_status_text(self) -> str:
        if self.session.completed:
            return COMPLETION_MESSAGE
        if self.status_message and time.perf_counter() < self.status_message_until:
            return self.status_message
        return "Arrows/WASD: mine and move   E: inventory   Esc: quit"

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------
    def draw(self) -> None:
        self.screen.fill(layout.BACKGROUND_COLOR)
        for layer in layout.DRAW_ORDER:
            if layer == "board":
                self.screen.blit(self.board.render(), self.geometry.board[:2])
            elif layer == "ui_panel":
                self._draw_panel()
            elif layer == "footer":
                self._draw_footer()
        pygame.display.flip()

    def _draw_panel(self) -> None:
        panel_rect = pygame.Rect(*self.geometry.panel)
        pygame.draw.rect(self.screen, layout.PANEL_BACKGROUND_COLOR, panel_rect, border_radius=12)

        x = panel_rect.x + layout.UI_PANEL_PADDING
        y = panel_rect.y + layout.UI_PANEL_PADDING
        heading = self.font.render(
            f"Level {self.session.current_level} / {self.session.max_level}", True, layout.TEXT_COLOR
        )
        self.screen.blit(heading, (x, y))
        y += heading.get_height() + layout.UI_PANEL_SPACING

        door = self.session.level.next_door_tile()
        if door is None:
            door_text = "No next door"
        elif door.locked:
            door_text = f"Next door: {door.hp}/{door.max_hp}"
        else:
            door_text = "Next door: open"
        door_surface = self.small_font.render(door_text, True, layout.TEXT_COLOR)
        self.screen.blit(door_surface, (x, y))
        y += door_surface.get_height() + layout.UI_PANEL_SPACING

        total = sum(self.session.player.materials.values())
        total_surface = self.small_font.render(f"Minerals: {total}", True, layout.ACCENT_COLOR)
        self.screen.blit(total_surface, (x, y))

    def _draw_footer(self) -> None:
        footer_rect = pygame.Rect(*self.geometry.footer)
        pygame.draw.rect(self.screen, layout.PANEL_BACKGROUND_COLOR, footer_rect, border_radius=12)
        color = layout.ACCENT_COLOR if self.session.completed else layout.TEXT_COLOR
        status_surface = self.font.render(self._footer_status_text(), True, color)
        status_rect = status_surface.get_rect(
            midleft=(footer_rect.x + layout.UI_PANEL_PADDING, footer_rect.centery)
        )
        self.screen.blit(status_surface, status_rect)

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------
    def run(self) -> None:
        while True:
            for event in pygame.event.get():
                try:
                    self.handle_event(event)
                except SystemExit:
                    pygame.quit()
                    return
            self.draw()
            self.clock.tick(60)


def run(seed: Optional[int] = None) -> None:
    """Entry point helper that instantiates and runs the UI."""

    app = MiningGameApp(seed=seed)
    logger.info("Starting mining game with %d levels (seed=%s)", app.session.max_level, seed)
    app.run()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Mining Game launcher")
    parser.add_argument(
        "--info",
        action="store_true",
        help="Print resolved resource directories and exit without launching the UI.",
    )
    parser.add_argument(
        "--list-levels",
        action="store_true",
        help="Print the level table and exit.",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for level generation.")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.info:
        bootstrap_directories()
        return 0

    if args.list_levels:
        directories = resolve_directories()
        table = LevelTableLoader(directories.data_root).load()
        print("\n".join(format_level_table(table)))
        return 0

    run(seed=args.seed)
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation entry point
    raise SystemExit(main())
