"""
Grid data types - positions, tiles, colliders and small vector math
"""

import enum
import math
from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class GridPosition:
    """Integer cell coordinate on the grid (x = column, z = row)"""
    x: int
    z: int

    def is_adjacent(self, other: 'GridPosition') -> bool:
        """True if the two cells share an edge (no diagonals)"""
        return abs(self.x - other.x) + abs(self.z - other.z) == 1

    def __str__(self) -> str:
        return f"({self.x},{self.z})"


@dataclass(frozen=True)
class Vec3:
    """World or grid-local position in centimeters (y is up)"""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: 'Vec3') -> 'Vec3':
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: 'Vec3') -> 'Vec3':
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def with_y(self, y: float) -> 'Vec3':
        return Vec3(self.x, y, self.z)

    def horizontal_distance(self, other: 'Vec3') -> float:
        return math.hypot(self.x - other.x, self.z - other.z)


def rotate_y(vector: Vec3, angle_degrees: float) -> Vec3:
    """Rotate a vector about the vertical axis"""
    if angle_degrees == 0:
        return vector
    rad = math.radians(angle_degrees)
    cos_a = math.cos(rad)
    sin_a = math.sin(rad)
    return Vec3(
        vector.x * cos_a + vector.z * sin_a,
        vector.y,
        -vector.x * sin_a + vector.z * cos_a
    )


def project_to_floor(position: Vec3, floor_y: float) -> Vec3:
    """Drop a head position straight down onto the floor plane"""
    return position.with_y(floor_y)


class Direction(str, enum.Enum):
    """Direction of travel between two consecutive path cells"""
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    NONE = "none"


class TileState(str, enum.Enum):
    """Data tag of a tile, independent of how it currently looks"""
    DEFAULT = "default"
    PATH = "path"
    START = "start"
    END = "end"
    CORRECT = "correct"
    WRONG = "wrong"


class TileColor(enum.Enum):
    """Tile colors as RGB tuples (alpha is tracked separately)"""
    DEFAULT = (1.0, 1.0, 1.0)
    PATH = (0.2, 0.6, 1.0)
    START = (0.0, 1.0, 0.0)
    END = (1.0, 0.8, 0.0)
    CORRECT = (0.0, 1.0, 0.5)
    WRONG = (1.0, 0.0, 0.0)

    @property
    def rgb(self) -> Tuple[float, float, float]:
        return self.value


@dataclass
class Tile:
    """
    One floor cell.

    state / is_path_tile / path_index describe the round; color, alpha,
    arrow and visible describe what the renderer should currently show.
    """
    grid_x: int
    grid_z: int
    local_position: Vec3
    world_position: Vec3
    state: TileState = TileState.DEFAULT
    is_path_tile: bool = False
    path_index: int = -1
    color: TileColor = TileColor.DEFAULT
    alpha: float = 0.5
    arrow: Optional[Direction] = None
    visible: bool = True

    @property
    def position(self) -> GridPosition:
        return GridPosition(self.grid_x, self.grid_z)


@dataclass(frozen=True)
class Collider:
    """
    A tracked body part that can overlap detection volumes.

    Only colliders with is_camera=True (the head) count as the player
    standing somewhere; hands and accessories are tracked but ignored.
    """
    name: str
    half_extents: Vec3 = field(default_factory=lambda: Vec3(5.0, 5.0, 5.0))
    is_camera: bool = False


@dataclass(frozen=True)
class ColliderSample:
    """Where a collider was this frame"""
    collider: Collider
    position: Vec3


@dataclass(frozen=True)
class OverlapEvent:
    """Raised on a volume when a collider starts or stops overlapping it"""
    collider: Optional[Collider]
    position: Vec3
