"""Simple command line demo for the mining game logic."""

import argparse
import random
from typing import Optional, Sequence, Tuple

from .game import Door, DoorFor, Level, LevelGenerator, TileKind, load_default_table

TILE_GLYPHS = {
    TileKind.GROUND: ".",
    TileKind.ORE: "*",
    TileKind.MINED: " ",
}


def tile_glyph(tile) -> str:
    if isinstance(tile, Door):
        if tile.door_for is DoorFor.PREV:
            return "<"
        return "#" if tile.locked else ">"
    return TILE_GLYPHS[tile.kind]


def render_ascii(level: Level, player: Optional[Tuple[int, int]] = None) -> str:
    rows = []
    for y in range(level.height):
        row = []
        for x in range(level.width):
            if player == (x, y):
                row.append("@")
            else:
                row.append(tile_glyph(level.grid[(x, y)]))
        rows.append("".join(row))
    return "\n".join(rows)


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Print a generated mining level")
    parser.add_argument("--level", type=int, default=1)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args(argv)

    table = load_default_table()
    generator = LevelGenerator(table, rng=random.Random(args.seed))
    level = generator.generate(args.level)
    profile = table.profile(args.level)

    print("=== Mining Game Demo ===")
    print(f"Level: {level.index} ({profile.mineral})")
    print(render_ascii(level, player=level.spawn))
    door = level.next_door_tile()
    if door is not None:
        print(f"Next door at {level.next_door} with {door.hp} HP")
    print(f"Ore tiles: {len(level.grid.positions_of(TileKind.ORE))}")


if __name__ == "__main__":
    main()
