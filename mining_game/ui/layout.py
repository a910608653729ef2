"""Layout constants for the mining game UI."""

from __future__ import annotations

import colorsys
from dataclasses import dataclass
from typing import Tuple

# Tile metrics
TILE_SIZE: int = 32
BOARD_OUTER_PADDING: int = 16
GRID_PADDING: int = 16

# Health bars drawn on top of damageable tiles
HP_BAR_MARGIN: int = 2
HP_BAR_HEIGHT: int = 4

# Side panel metrics
UI_PANEL_WIDTH: int = 220
UI_PANEL_PADDING: int = 16
UI_PANEL_SPACING: int = 10

# Inventory overlay metrics
INVENTORY_SIZE: Tuple[int, int] = (200, 300)
INVENTORY_PADDING: int = 20
INVENTORY_TITLE_OFFSET: int = 40
INVENTORY_LIST_OFFSET: int = 70
INVENTORY_ROW_SPACING: int = 25
INVENTORY_COUNT_OFFSET: int = 100

# Footer with status messages
FOOTER_HEIGHT: int = 48

# Colors expressed as RGB tuples
BACKGROUND_COLOR: Tuple[int, int, int] = (12, 12, 16)
PANEL_BACKGROUND_COLOR: Tuple[int, int, int] = (32, 30, 36)
GRID_LINE_COLOR: Tuple[int, int, int] = (51, 51, 51)
TEXT_COLOR: Tuple[int, int, int] = (232, 236, 244)
ACCENT_COLOR: Tuple[int, int, int] = (255, 215, 0)

MINED_COLOR: Tuple[int, int, int] = (128, 128, 128)
LOCKED_DOOR_COLOR: Tuple[int, int, int] = (139, 0, 0)
OPEN_DOOR_COLOR: Tuple[int, int, int] = (255, 215, 0)
PORTAL_COLOR: Tuple[int, int, int] = (0, 255, 255)
UNKNOWN_ORE_COLOR: Tuple[int, int, int] = (255, 255, 255)
PLAYER_COLOR: Tuple[int, int, int] = (255, 255, 255)

HP_BAR_BACKGROUND: Tuple[int, int, int] = (255, 0, 0)
HP_BAR_FILL: Tuple[int, int, int] = (50, 205, 50)
HP_BAR_BORDER: Tuple[int, int, int] = (0, 0, 0)

INVENTORY_BACKGROUND: Tuple[int, int, int, int] = (0, 0, 0, 178)

GROUND_HUE: int = 30
GROUND_SATURATION: int = 80

# Rendering order for composed scenes
DRAW_ORDER = ("board", "ui_panel", "footer")


def hex_to_rgb(value: str) -> Tuple[int, int, int]:
    value = value.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Expected a #RRGGBB color, got {value!r}")
    return tuple(int(value[i:i + 2], 16) for i in (0, 2, 4))  # type: ignore[return-value]


def ground_color(lightness: int) -> Tuple[int, int, int]:
    """Return the RGB value of ``hsl(30, 80%, lightness%)``."""

    red, green, blue = colorsys.hls_to_rgb(
        GROUND_HUE / 360.0, lightness / 100.0, GROUND_SATURATION / 100.0
    )
    return round(red * 255), round(green * 255), round(blue * 255)


@dataclass(frozen=True)
class BoardGeometry:
    """Pixel rectangles for the major UI regions."""

    board: Tuple[int, int, int, int]
    panel: Tuple[int, int, int, int]
    footer: Tuple[int, int, int, int]
    window: Tuple[int, int]


def compute_geometry(level_width: int, level_height: int) -> BoardGeometry:
    """Compute useful rectangles for rendering the game window."""

    board_width = level_width * TILE_SIZE
    board_height = level_height * TILE_SIZE

    board_x = BOARD_OUTER_PADDING
    board_y = BOARD_OUTER_PADDING

    panel_x = board_x + board_width + GRID_PADDING
    panel_y = board_y

    footer_width = board_width + GRID_PADDING + UI_PANEL_WIDTH
    footer_x = board_x
    footer_y = board_y + board_height + GRID_PADDING

    window_width = footer_x + footer_width + BOARD_OUTER_PADDING
    window_height = footer_y + FOOTER_HEIGHT + BOARD_OUTER_PADDING

    return BoardGeometry(
        board=(board_x, board_y, board_width, board_height),
        panel=(panel_x, panel_y, UI_PANEL_WIDTH, board_height),
        footer=(footer_x, footer_y, footer_width, FOOTER_HEIGHT),
        window=(window_width, window_height),
    )
