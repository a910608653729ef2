"""Interactive launcher for the mining game."""

from __future__ import annotations

from mining_game.ui.main import main


if __name__ == "__main__":
    raise SystemExit(main())
