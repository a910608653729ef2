"""Core game logic for the mining descent."""

from __future__ import annotations

import json
import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union


logger = logging.getLogger(__name__)

GRID_WIDTH = 20
GRID_HEIGHT = 20
SPAWN_SIZE = 5
ORE_CHANCE = 0.2

DOOR_BASE_HP = 50
DOOR_HP_PER_LEVEL = 20

FRESH_COOLDOWN_MS = 200
REPEAT_COOLDOWN_MS = 500

DEFAULT_DATA_ROOT = Path(__file__).resolve().parent / "data"
DEFAULT_TABLE_NAME = "levels"

COMPLETION_MESSAGE = "Congratulations! You have completed the game!"

Position = Tuple[int, int]


def next_door_hp(level: int) -> int:
    return DOOR_BASE_HP + level * DOOR_HP_PER_LEVEL


class Direction(Enum):
    """Cardinal directions the player can face."""

    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def vector(self) -> Tuple[int, int]:
        return self.value

    @staticmethod
    def from_name(name: str) -> "Direction":
        name = name.upper()
        try:
            return Direction[name]
        except KeyError as exc:
            raise ValueError(f"Unknown direction: {name}") from exc

    def step(self, position: Position) -> Position:
        dx, dy = self.value
        return position[0] + dx, position[1] + dy


class TileKind(Enum):
    GROUND = "ground"
    ORE = "ore"
    MINED = "mined"
    DOOR = "door"


class DoorFor(Enum):
    NEXT = "next"
    PREV = "prev"


class DoorState(Enum):
    LOCKED = "locked"
    OPEN = "open"


@dataclass
class Ground:
    """Mineable rock without a resource."""

    hp: int
    max_hp: int

    kind = TileKind.GROUND
    resource = None


@dataclass
class Ore:
    """Mineable rock carrying one unit of a mineral."""

    hp: int
    max_hp: int
    resource: str

    kind = TileKind.ORE


@dataclass(frozen=True)
class Mined:
    """Depleted, walkable cell."""

    kind = TileKind.MINED
    hp = 0
    max_hp = 0
    resource = None


@dataclass
class Door:
    """Level gate.  ``NEXT`` doors start locked, ``PREV`` portals are always open."""

    door_for: DoorFor
    state: DoorState = DoorState.LOCKED
    hp: int = 0
    max_hp: int = 0

    kind = TileKind.DOOR
    resource = None

    @classmethod
    def next_door(cls, level: int) -> "Door":
        hp = next_door_hp(level)
        return cls(DoorFor.NEXT, DoorState.LOCKED, hp=hp, max_hp=hp)

    @classmethod
    def portal(cls) -> "Door":
        return cls(DoorFor.PREV, DoorState.OPEN, hp=0, max_hp=0)

    @property
    def locked(self) -> bool:
        return self.state is DoorState.LOCKED


Tile = Union[Ground, Ore, Mined, Door]


class Grid:
    """Fixed size tile container addressed by ``(x, y)`` coordinates."""

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self._cells: List[List[Tile]] = [[Mined() for _ in range(width)] for _ in range(height)]

    def inside(self, position: Position) -> bool:
        x, y = position
        return 0 <= x < self.width and 0 <= y < self.height

    def __getitem__(self, position: Position) -> Tile:
        if not self.inside(position):
            raise IndexError(f"Position {position} outside {self.width}x{self.height} grid")
        x, y = position
        return self._cells[y][x]

    def __setitem__(self, position: Position, tile: Tile) -> None:
        if not self.inside(position):
            raise IndexError(f"Position {position} outside {self.width}x{self.height} grid")
        x, y = position
        self._cells[y][x] = tile

    def __iter__(self) -> Iterator[Tuple[Position, Tile]]:
        for y, row in enumerate(self._cells):
            for x, tile in enumerate(row):
                yield (x, y), tile

    def positions_of(self, kind: TileKind) -> List[Position]:
        return [position for position, tile in self if tile.kind is kind]

    def doors(self, door_for: DoorFor) -> List[Position]:
        return [
            position
            for position, tile in self
            if isinstance(tile, Door) and tile.door_for is door_for
        ]


@dataclass(frozen=True)
class LevelProfile:
    """Per-level tuning read from the level table."""

    level: int
    mineral: str
    color: str
    ore_hp: int
    ground_hp: int
    ground_lightness: int = 70


@dataclass
class LevelTable:
    """Ordered collection of level profiles, numbered 1..N."""

    name: str
    profiles: Dict[int, LevelProfile] = field(default_factory=dict)

    @property
    def max_level(self) -> int:
        return len(self.profiles)

    @property
    def minerals(self) -> Tuple[str, ...]:
        return tuple(self.profiles[index].mineral for index in sorted(self.profiles))

    def profile(self, level: int) -> LevelProfile:
        try:
            return self.profiles[level]
        except KeyError as exc:
            raise ValueError(f"No profile for level {level} in table {self.name!r}") from exc

    def mineral_color(self, mineral: str) -> Optional[str]:
        for profile in self.profiles.values():
            if profile.mineral == mineral:
                return profile.color
        return None


class LevelTableLoader:
    """Load level tables stored as JSON."""

    def __init__(self, root: Path = DEFAULT_DATA_ROOT):
        self.root = Path(root)

    def load(self, name: str = DEFAULT_TABLE_NAME) -> LevelTable:
        path = self.root / f"{name}.json"
        if not path.exists():
            raise FileNotFoundError(path)
        data = json.loads(path.read_text())
        return self._parse_table(data, default_name=name)

    def _parse_table(self, data: Dict, default_name: str) -> LevelTable:
        table = LevelTable(name=str(data.get("name", default_name)))
        for entry in data.get("levels", []):
            profile = LevelProfile(
                level=int(entry["level"]),
                mineral=str(entry["mineral"]),
                color=str(entry.get("color", "#FFFFFF")),
                ore_hp=int(entry["ore_hp"]),
                ground_hp=int(entry["ground_hp"]),
                ground_lightness=int(entry.get("ground_lightness", 70)),
            )
            if profile.level in table.profiles:
                raise ValueError(f"Duplicate level {profile.level} in table {table.name!r}")
            if profile.ore_hp <= 0 or profile.ground_hp <= 0:
                raise ValueError(f"Level {profile.level} must have positive tile HP")
            table.profiles[profile.level] = profile
        expected = list(range(1, len(table.profiles) + 1))
        if not table.profiles or sorted(table.profiles) != expected:
            raise ValueError(
                f"Level table {table.name!r} must number its levels 1..N without gaps, "
                f"got {sorted(table.profiles)}"
            )
        return table


def load_default_table() -> LevelTable:
    return LevelTableLoader(DEFAULT_DATA_ROOT).load(DEFAULT_TABLE_NAME)


@dataclass
class Level:
    """A generated grid together with its entry point."""

    index: int
    grid: Grid
    spawn: Position
    spawn_half: int
    next_door: Optional[Position] = None

    @property
    def width(self) -> int:
        return self.grid.width

    @property
    def height(self) -> int:
        return self.grid.height

    def in_spawn_area(self, position: Position) -> bool:
        x, y = position
        cx, cy = self.spawn
        return abs(x - cx) <= self.spawn_half and abs(y - cy) <= self.spawn_half

    def next_door_tile(self) -> Optional[Door]:
        if self.next_door is None:
            return None
        tile = self.grid[self.next_door]
        return tile if isinstance(tile, Door) else None


class LevelGenerator:
    """Build level grids from a :class:`LevelTable`."""

    def __init__(
        self,
        table: LevelTable,
        *,
        width: int = GRID_WIDTH,
        height: int = GRID_HEIGHT,
        spawn_size: int = SPAWN_SIZE,
        ore_chance: float = ORE_CHANCE,
        rng: Optional[random.Random] = None,
    ):
        if spawn_size > min(width, height):
            raise ValueError("Spawn area does not fit inside the grid")
        self.table = table
        self.width = width
        self.height = height
        self.spawn_size = spawn_size
        self.ore_chance = ore_chance
        self.rng = rng or random.Random()

    @property
    def spawn(self) -> Position:
        return self.width // 2, self.height // 2

    def generate(self, index: int) -> Level:
        profile = self.table.profile(index)
        level = Level(
            index=index,
            grid=Grid(self.width, self.height),
            spawn=self.spawn,
            spawn_half=self.spawn_size // 2,
        )
        grid = level.grid

        for y in range(self.height):
            for x in range(self.width):
                if level.in_spawn_area((x, y)):
                    grid[(x, y)] = Mined()
                elif self.rng.random() < self.ore_chance:
                    grid[(x, y)] = Ore(
                        hp=profile.ore_hp,
                        max_hp=profile.ore_hp,
                        resource=profile.mineral,
                    )
                else:
                    grid[(x, y)] = Ground(hp=profile.ground_hp, max_hp=profile.ground_hp)

        if index > 1:
            grid[level.spawn] = Door.portal()

        candidates = [
            position
            for position, tile in grid
            if not level.in_spawn_area(position) and not isinstance(tile, Door)
        ]
        if candidates:
            level.next_door = self.rng.choice(candidates)
            grid[level.next_door] = Door.next_door(index)
        else:
            logger.warning("Level %d has no room for a next door", index)

        logger.debug(
            "Generated level %d: %d ore tiles, next door at %s",
            index,
            len(grid.positions_of(TileKind.ORE)),
            level.next_door,
        )
        return level


def generate_level(
    index: int,
    rng: Optional[random.Random] = None,
    table: Optional[LevelTable] = None,
) -> Level:
    return LevelGenerator(table or load_default_table(), rng=rng).generate(index)


class LevelRegistry:
    """Generate each level at most once and keep it for the session."""

    def __init__(self, generator: LevelGenerator):
        self.generator = generator
        self._levels: Dict[int, Level] = {}

    @property
    def max_level(self) -> int:
        return self.generator.table.max_level

    def get(self, index: int) -> Level:
        level = self._levels.get(index)
        if level is None:
            level = self.generator.generate(index)
            self._levels[index] = level
        return level

    def preload(self, level: Level) -> None:
        if level.index in self._levels:
            raise ValueError(f"Level {level.index} already exists in this session")
        self._levels[level.index] = level

    def __contains__(self, index: object) -> bool:
        return index in self._levels

    def __len__(self) -> int:
        return len(self._levels)


@dataclass
class Player:
    """The miner.  Carries its collected minerals between levels."""

    position: Position = (0, 0)
    facing: Direction = Direction.UP
    materials: Dict[str, int] = field(default_factory=dict)

    def collect(self, mineral: str) -> int:
        self.materials[mineral] = self.materials.get(mineral, 0) + 1
        return self.materials[mineral]

    def count(self, mineral: str) -> int:
        return self.materials.get(mineral, 0)


class DirectionCooldown:
    """Rate-limit direction actions per direction.

    Held-key repeats must wait ``repeat_ms`` and fresh presses ``fresh_ms``
    since the last accepted action in the same direction.
    """

    def __init__(self, fresh_ms: int = FRESH_COOLDOWN_MS, repeat_ms: int = REPEAT_COOLDOWN_MS):
        self.fresh_ms = fresh_ms
        self.repeat_ms = repeat_ms
        self._last_accepted: Dict[Direction, int] = {}

    def accept(self, direction: Direction, now_ms: int, *, repeat: bool = False) -> bool:
        window = self.repeat_ms if repeat else self.fresh_ms
        last = self._last_accepted.get(direction)
        if last is not None and now_ms - last < window:
            return False
        self._last_accepted[direction] = now_ms
        return True


class OutcomeKind(Enum):
    IGNORED = "ignored"
    BLOCKED = "blocked"
    DAMAGED = "damaged"
    MINED = "mined"
    DOOR_DAMAGED = "door_damaged"
    DOOR_OPENED = "door_opened"
    MOVED = "moved"
    LEVEL_CHANGED = "level_changed"
    COMPLETED = "completed"


@dataclass(frozen=True)
class ActionOutcome:
    """What a single action or transition did."""

    kind: OutcomeKind
    position: Optional[Position] = None
    resource: Optional[str] = None
    level: Optional[int] = None


class GameSession:
    """Owns all mutable game state for one run.

    Direction actions and level transitions are the only code paths that
    write to the active level, the player or the portal flag.  Renderers read
    :attr:`level`, :attr:`player` and :attr:`completed` but never mutate them.
    """

    def __init__(
        self,
        registry: LevelRegistry,
        *,
        start_level: int = 1,
        cooldown: Optional[DirectionCooldown] = None,
    ):
        if not 1 <= start_level <= registry.max_level:
            raise ValueError(f"Start level must be within 1..{registry.max_level}")
        self.registry = registry
        self.cooldown = cooldown or DirectionCooldown()
        self.player = Player()
        self.current_level = 0
        self.level: Optional[Level] = None
        self.has_left_portal = False
        self.completed = False
        self.transition(start_level)

    @classmethod
    def new(
        cls,
        *,
        seed: Optional[int] = None,
        table: Optional[LevelTable] = None,
    ) -> "GameSession":
        generator = LevelGenerator(table or load_default_table(), rng=random.Random(seed))
        return cls(LevelRegistry(generator))

    @property
    def table(self) -> LevelTable:
        return self.registry.generator.table

    @property
    def max_level(self) -> int:
        return self.registry.max_level

    @property
    def completion_message(self) -> Optional[str]:
        return COMPLETION_MESSAGE if self.completed else None

    # ------------------------------------------------------------------
    # Actions
    def handle_direction(
        self,
        direction: Direction,
        now_ms: int,
        *,
        repeat: bool = False,
    ) -> ActionOutcome:
        """Apply a direction input unless it falls inside the cooldown window."""

        if not self.cooldown.accept(direction, now_ms, repeat=repeat):
            return ActionOutcome(OutcomeKind.IGNORED)
        return self.resolve_action(direction)

    def resolve_action(self, direction: Direction) -> ActionOutcome:
        if self.completed:
            return ActionOutcome(OutcomeKind.BLOCKED)

        self.player.facing = direction
        target = direction.step(self.player.position)
        grid = self.level.grid
        if not grid.inside(target):
            return ActionOutcome(OutcomeKind.BLOCKED, target)

        tile = grid[target]
        if isinstance(tile, Door):
            if tile.door_for is DoorFor.PREV:
                return self._enter_portal(target)
            if tile.locked:
                return self._damage_door(target, tile)
            return self.transition(self.current_level + 1)
        if isinstance(tile, (Ground, Ore)):
            return self._mine(target, tile)
        return self._move(target)

    def _damage_door(self, target: Position, door: Door) -> ActionOutcome:
        door.hp = max(0, door.hp - 1)
        logger.debug(
            "Damaging NEXT door at %s. Remaining HP: %d/%d", target, door.hp, door.max_hp
        )
        if door.hp == 0:
            door.state = DoorState.OPEN
            logger.info("Next door on level %d is now open", self.current_level)
            return ActionOutcome(OutcomeKind.DOOR_OPENED, target)
        return ActionOutcome(OutcomeKind.DOOR_DAMAGED, target)

    def _mine(self, target: Position, tile: Union[Ground, Ore]) -> ActionOutcome:
        tile.hp = max(0, tile.hp - 1)
        logger.debug("Damaging tile at %s. Remaining HP: %d/%d", target, tile.hp, tile.max_hp)
        if tile.hp > 0:
            return ActionOutcome(OutcomeKind.DAMAGED, target)

        self.level.grid[target] = Mined()
        resource = tile.resource
        if resource:
            total = self.player.collect(resource)
            logger.info("Collected 1 %s. Total %s: %d", resource, resource, total)
        return ActionOutcome(OutcomeKind.MINED, target, resource=resource)

    def _move(self, target: Position) -> ActionOutcome:
        self.player.position = target
        if target != self.level.spawn:
            self.has_left_portal = True
        return ActionOutcome(OutcomeKind.MOVED, target)

    def _enter_portal(self, target: Position) -> ActionOutcome:
        self.player.position = target
        if self.has_left_portal:
            return self.transition(self.current_level - 1)
        return ActionOutcome(OutcomeKind.MOVED, target)

    # ------------------------------------------------------------------
    # Transitions
    def transition(self, target: int) -> ActionOutcome:
        if target < 1:
            logger.debug("Ignoring transition to level %d", target)
            return ActionOutcome(OutcomeKind.IGNORED, level=target)
        if target > self.max_level:
            if not self.completed:
                self.completed = True
                logger.info(COMPLETION_MESSAGE)
            return ActionOutcome(OutcomeKind.COMPLETED, level=target)

        level = self.registry.get(target)
        self.current_level = target
        self.level = level
        self.player.position = level.spawn
        self.has_left_portal = False
        logger.info("Transitioned to Level %d", target)
        return ActionOutcome(OutcomeKind.LEVEL_CHANGED, level.spawn, level=target)


__all__ = [
    "ActionOutcome",
    "COMPLETION_MESSAGE",
    "Direction",
    "DirectionCooldown",
    "Door",
    "DoorFor",
    "DoorState",
    "GameSession",
    "Grid",
    "Ground",
    "Level",
    "LevelGenerator",
    "LevelProfile",
    "LevelRegistry",
    "LevelTable",
    "LevelTableLoader",
    "Mined",
    "Ore",
    "OutcomeKind",
    "Player",
    "TileKind",
    "generate_level",
    "load_default_table",
    "next_door_hp",
]
