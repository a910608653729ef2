import json
import logging
import random
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mining_game.demo import render_ascii
from mining_game.game import (
    COMPLETION_MESSAGE,
    Direction,
    DirectionCooldown,
    Door,
    DoorFor,
    DoorState,
    GameSession,
    Grid,
    Ground,
    LevelGenerator,
    LevelRegistry,
    LevelTableLoader,
    Mined,
    Ore,
    OutcomeKind,
    TileKind,
    generate_level,
    load_default_table,
)


SPAWN = (10, 10)


def make_session(*, ore_chance: float = 0.0, seed: int = 7, start_level: int = 1) -> GameSession:
    generator = LevelGenerator(load_default_table(), ore_chance=ore_chance, rng=random.Random(seed))
    return GameSession(LevelRegistry(generator), start_level=start_level)


def walk_right_to_spawn_edge(session: GameSession) -> None:
    session.resolve_action(Direction.RIGHT)
    session.resolve_action(Direction.RIGHT)
    assert session.player.position == (12, 10)


@pytest.mark.parametrize("level_index", range(1, 11))
def test_generated_level_clears_spawn_square(level_index: int):
    level = generate_level(level_index, rng=random.Random(level_index))

    assert level.spawn == SPAWN
    for y in range(8, 13):
        for x in range(8, 13):
            tile = level.grid[(x, y)]
            if (x, y) == SPAWN and level_index > 1:
                assert isinstance(tile, Door)
                assert tile.door_for is DoorFor.PREV
                assert tile.state is DoorState.OPEN
                assert tile.hp == tile.max_hp == 0
            else:
                assert tile.kind is TileKind.MINED
                assert tile.hp == tile.max_hp == 0


@pytest.mark.parametrize("seed", [0, 1, 2, 3])
@pytest.mark.parametrize("level_index", [1, 4, 10])
def test_exactly_one_locked_next_door_outside_spawn(level_index: int, seed: int):
    level = generate_level(level_index, rng=random.Random(seed))

    next_doors = level.grid.doors(DoorFor.NEXT)
    assert next_doors == [level.next_door]
    assert not level.in_spawn_area(level.next_door)

    door = level.next_door_tile()
    assert door.max_hp == door.hp == 50 + 20 * level_index
    assert door.state is DoorState.LOCKED


def test_first_level_has_no_portal():
    level = generate_level(1, rng=random.Random(3))

    assert level.grid.doors(DoorFor.PREV) == []
    assert level.grid[SPAWN] == Mined()


def test_tiles_use_level_profile():
    table = load_default_table()
    all_ore = LevelGenerator(table, ore_chance=1.0, rng=random.Random(1)).generate(3)
    all_ground = LevelGenerator(table, ore_chance=0.0, rng=random.Random(1)).generate(3)

    for position, tile in all_ore.grid:
        if all_ore.in_spawn_area(position) or isinstance(tile, Door):
            continue
        assert isinstance(tile, Ore)
        assert tile.resource == "Gold"
        assert tile.hp == tile.max_hp == 70

    for position, tile in all_ground.grid:
        if all_ground.in_spawn_area(position) or isinstance(tile, Door):
            continue
        assert isinstance(tile, Ground)
        assert tile.resource is None
        assert tile.hp == tile.max_hp == 7


def test_generator_without_door_room_logs_warning(caplog: pytest.LogCaptureFixture):
    generator = LevelGenerator(load_default_table(), width=5, height=5, spawn_size=5)

    with caplog.at_level(logging.WARNING, logger="mining_game.game"):
        level = generator.generate(2)

    assert level.next_door is None
    assert level.next_door_tile() is None
    assert level.grid.doors(DoorFor.NEXT) == []
    assert "no room for a next door" in caplog.text


def test_unknown_level_index_is_rejected():
    with pytest.raises(ValueError):
        generate_level(11)


def test_registry_generates_each_level_once():
    generator = LevelGenerator(load_default_table(), rng=random.Random(5))
    calls = []
    original = generator.generate

    def counting_generate(index):
        calls.append(index)
        return original(index)

    generator.generate = counting_generate
    registry = LevelRegistry(generator)

    first = registry.get(2)
    second = registry.get(2)

    assert first is second
    assert calls == [2]
    assert 2 in registry
    assert 3 not in registry


def test_registry_refuses_duplicate_preload():
    registry = LevelRegistry(LevelGenerator(load_default_table(), rng=random.Random(5)))
    registry.get(1)

    with pytest.raises(ValueError):
        registry.preload(generate_level(1, rng=random.Random(9)))


def test_mining_ground_takes_exactly_max_hp_hits():
    session = make_session()
    session.level.grid[(13, 10)] = Ground(hp=5, max_hp=5)
    walk_right_to_spawn_edge(session)

    outcomes = [session.resolve_action(Direction.RIGHT).kind for _ in range(5)]

    assert outcomes == [OutcomeKind.DAMAGED] * 4 + [OutcomeKind.MINED]
    assert session.level.grid[(13, 10)] == Mined()
    assert session.player.position == (12, 10)
    assert session.player.materials == {}


def test_mining_ore_collects_one_unit():
    session = make_session()
    session.level.grid[(13, 10)] = Ore(hp=2, max_hp=2, resource="Copper")
    walk_right_to_spawn_edge(session)

    session.resolve_action(Direction.RIGHT)
    outcome = session.resolve_action(Direction.RIGHT)

    assert outcome.kind is OutcomeKind.MINED
    assert outcome.resource == "Copper"
    assert session.player.count("Copper") == 1
    tile = session.level.grid[(13, 10)]
    assert tile.kind is TileKind.MINED
    assert tile.resource is None

    session.resolve_action(Direction.RIGHT)
    assert session.player.position == (13, 10)
    assert session.player.count("Copper") == 1


def test_unlocking_and_entering_next_door():
    session = make_session()
    door = Door(DoorFor.NEXT, DoorState.LOCKED, hp=2, max_hp=70)
    session.level.grid[(13, 10)] = door
    walk_right_to_spawn_edge(session)

    assert session.resolve_action(Direction.RIGHT).kind is OutcomeKind.DOOR_DAMAGED
    assert session.resolve_action(Direction.RIGHT).kind is OutcomeKind.DOOR_OPENED
    assert door.state is DoorState.OPEN
    assert door.hp == 0
    assert session.player.position == (12, 10)

    outcome = session.resolve_action(Direction.RIGHT)

    assert outcome.kind is OutcomeKind.LEVEL_CHANGED
    assert outcome.level == 2
    assert session.current_level == 2
    assert session.player.position == SPAWN
    assert session.has_left_portal is False
    assert session.registry.get(1).grid[(13, 10)] is door


def test_portal_requires_leaving_spawn_centre():
    session = make_session(start_level=2)
    session.player.position = (11, 10)
    session.has_left_portal = False

    outcome = session.resolve_action(Direction.LEFT)

    assert outcome.kind is OutcomeKind.MOVED
    assert session.player.position == SPAWN
    assert session.current_level == 2


def test_portal_returns_to_previous_level_after_stepping_off():
    session = make_session()
    level_one = session.level
    level_one.grid[(13, 10)] = Door(DoorFor.NEXT, DoorState.OPEN, hp=0, max_hp=70)
    walk_right_to_spawn_edge(session)
    session.resolve_action(Direction.RIGHT)
    assert session.current_level == 2

    assert session.resolve_action(Direction.RIGHT).kind is OutcomeKind.MOVED
    assert session.has_left_portal is True

    outcome = session.resolve_action(Direction.LEFT)

    assert outcome.kind is OutcomeKind.LEVEL_CHANGED
    assert session.current_level == 1
    assert session.level is level_one
    assert session.player.position == SPAWN
    assert session.has_left_portal is False


def test_returning_to_spawn_centre_does_not_set_portal_flag():
    session = make_session()
    session.player.position = (11, 10)

    session.resolve_action(Direction.LEFT)

    assert session.player.position == SPAWN
    assert session.has_left_portal is False


def test_revisited_level_keeps_progress():
    session = make_session()
    session.level.grid[(13, 10)] = Ore(hp=1, max_hp=1, resource="Copper")
    walk_right_to_spawn_edge(session)
    session.resolve_action(Direction.RIGHT)

    session.transition(2)
    session.transition(1)

    assert session.level.grid[(13, 10)] == Mined()
    assert session.player.count("Copper") == 1
    assert session.player.position == SPAWN


def test_out_of_bounds_target_is_ignored():
    session = make_session()
    session.player.position = (0, 0)
    before = session.level.grid[(0, 0)]

    outcome = session.resolve_action(Direction.UP)

    assert outcome.kind is OutcomeKind.BLOCKED
    assert session.player.position == (0, 0)
    assert session.player.facing is Direction.UP
    assert session.level.grid[(0, 0)] is before


def test_transition_below_first_level_is_ignored():
    session = make_session()

    outcome = session.transition(0)

    assert outcome.kind is OutcomeKind.IGNORED
    assert session.current_level == 1


def test_completing_last_level_freezes_session():
    session = make_session(start_level=10)
    session.level.grid[(13, 10)] = Door(DoorFor.NEXT, DoorState.OPEN, hp=0, max_hp=250)
    walk_right_to_spawn_edge(session)

    outcome = session.resolve_action(Direction.RIGHT)

    assert outcome.kind is OutcomeKind.COMPLETED
    assert session.completed is True
    assert session.completion_message == COMPLETION_MESSAGE
    assert session.current_level == 10
    assert session.player.position == (12, 10)
    assert session.resolve_action(Direction.LEFT).kind is OutcomeKind.BLOCKED
    assert session.player.position == (12, 10)


def test_direction_cooldown_windows():
    session = make_session()

    assert session.handle_direction(Direction.RIGHT, 1000).kind is OutcomeKind.MOVED
    assert session.handle_direction(Direction.RIGHT, 1150).kind is OutcomeKind.IGNORED
    assert session.player.position == (11, 10)
    assert session.handle_direction(Direction.LEFT, 1160).kind is OutcomeKind.MOVED
    assert session.handle_direction(Direction.RIGHT, 1200).kind is OutcomeKind.MOVED
    assert session.handle_direction(Direction.RIGHT, 1600, repeat=True).kind is OutcomeKind.IGNORED
    assert session.handle_direction(Direction.RIGHT, 1700, repeat=True).kind is OutcomeKind.MOVED
    assert session.player.position == (12, 10)


def test_cooldown_accepts_first_press_at_time_zero():
    cooldown = DirectionCooldown()

    assert cooldown.accept(Direction.DOWN, 0)
    assert not cooldown.accept(Direction.DOWN, 199)
    assert cooldown.accept(Direction.DOWN, 199 + 1)


def test_level_table_loader_reads_default_table():
    table = load_default_table()

    assert table.max_level == 10
    assert table.minerals == (
        "Copper",
        "Iron",
        "Gold",
        "Emerald",
        "Sapphire",
        "Ruby",
        "Diamond",
        "Amethyst",
        "Topaz",
        "Obsidian",
    )
    assert table.profile(1).ground_hp == 5
    assert table.profile(10).ore_hp == 300
    assert table.mineral_color("Gold") == "#FFD700"


def test_level_table_loader_rejects_gaps(tmp_path: Path):
    data = {
        "levels": [
            {"level": 1, "mineral": "Copper", "ore_hp": 3, "ground_hp": 5},
            {"level": 3, "mineral": "Gold", "ore_hp": 70, "ground_hp": 7},
        ]
    }
    (tmp_path / "broken.json").write_text(json.dumps(data))

    with pytest.raises(ValueError):
        LevelTableLoader(tmp_path).load("broken")


def test_level_table_loader_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        LevelTableLoader(tmp_path).load("absent")


def test_grid_indexing_is_bounds_checked():
    grid = Grid(3, 2)

    assert grid.inside((2, 1))
    assert not grid.inside((3, 0))
    with pytest.raises(IndexError):
        grid[(0, 2)]
    with pytest.raises(IndexError):
        grid[(-1, 0)] = Mined()


def test_direction_from_name():
    assert Direction.from_name("left") is Direction.LEFT
    with pytest.raises(ValueError):
        Direction.from_name("north")


def test_ascii_render_marks_player_and_door():
    level = generate_level(2, rng=random.Random(11))

    text = render_ascii(level, player=(11, 10))
    rows = text.splitlines()

    assert len(rows) == 20
    assert rows[10][11] == "@"
    assert rows[10][10] == "<"
    assert text.count("#") == 1
