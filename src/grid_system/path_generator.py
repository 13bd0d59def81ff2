"""
Path generation - random self-avoiding walks on the tile grid
"""

import random
from typing import Dict, List, Optional, Set

from .grid_types import Direction, GridPosition

# Neighbor scan order: up, down, left, right
NEIGHBOR_OFFSETS = ((0, 1), (0, -1), (-1, 0), (1, 0))

MAX_RETRIES = 10
MAX_STEPS_FACTOR = 100


def get_neighbors(position: GridPosition, rows: int, columns: int) -> List[GridPosition]:
    """In-bounds orthogonal neighbors of a cell"""
    neighbors = []
    for dx, dz in NEIGHBOR_OFFSETS:
        x = position.x + dx
        z = position.z + dz
        if 0 <= x < columns and 0 <= z < rows:
            neighbors.append(GridPosition(x, z))
    return neighbors


def is_valid_path(path: List[GridPosition]) -> bool:
    """True if every consecutive pair of cells is orthogonally adjacent"""
    for prev, curr in zip(path, path[1:]):
        if not prev.is_adjacent(curr):
            return False
    return True


def get_direction(from_pos: GridPosition, to_pos: GridPosition) -> Direction:
    """Direction of travel between two cells (z grows "up", away from the near row)"""
    dx = to_pos.x - from_pos.x
    dz = to_pos.z - from_pos.z

    if dz > 0:
        return Direction.UP
    if dz < 0:
        return Direction.DOWN
    if dx > 0:
        return Direction.RIGHT
    if dx < 0:
        return Direction.LEFT
    return Direction.NONE


def path_to_directions(path: List[GridPosition]) -> List[Direction]:
    """One direction per step of the path (len(path) - 1 entries)"""
    return [get_direction(prev, curr) for prev, curr in zip(path, path[1:])]


class PathGenerator:
    """
    Generates connected, non-self-intersecting paths on a rows x columns grid.

    The walk extends one random unvisited neighbor at a time and backtracks a
    single step on dead ends. Short paths shuffle the candidates for variety;
    near-Hamiltonian paths order them by onward freedom (Warnsdorff's rule),
    which keeps the walk from painting itself into a corner.

    Generation is best effort: if no attempt reaches the requested length the
    longest attempt is returned and a warning is logged. Callers compare
    len(path) with what they asked for.

    Example:
        generator = PathGenerator(logger=logger)
        path = generator.generate_path_from_near_edge(rows=5, columns=5, desired_length=9)
    """

    def __init__(self, rng: Optional[random.Random] = None, logger=None,
                 warnsdorff_threshold: Optional[int] = None):
        """
        Args:
            rng: Random source (seed it for reproducible paths)
            logger: ClassLogger for shortfall warnings
            warnsdorff_threshold: Path length from which the Warnsdorff ordering
                is used. Defaults to two less than the cell count (23 on 5x5).
        """
        self._rng = rng or random.Random()
        self._logger = logger
        self._warnsdorff_threshold = warnsdorff_threshold

    def generate_path(self, rows: int, columns: int, desired_length: int,
                      start: Optional[GridPosition] = None) -> List[GridPosition]:
        """
        Generate a random path.

        Args:
            rows: Grid rows (z range)
            columns: Grid columns (x range)
            desired_length: Number of cells wanted (clamped to rows * columns)
            start: Fixed first cell, random perimeter cell if None

        Returns:
            List[GridPosition]: The first full-length attempt, otherwise the
            longest of MAX_RETRIES attempts
        """
        desired_length = max(1, min(desired_length, rows * columns))

        best_path: List[GridPosition] = []
        for _ in range(MAX_RETRIES):
            path = self._generate_attempt(rows, columns, desired_length, start)
            if len(path) >= desired_length:
                return path
            if len(path) > len(best_path):
                best_path = path

        if self._logger:
            self._logger.warning(
                f"⚠️ Requested path of {desired_length} tiles but best attempt was "
                f"{len(best_path)} after {MAX_RETRIES} retries"
            )
        return best_path

    def generate_path_from_near_edge(self, rows: int, columns: int,
                                     desired_length: int) -> List[GridPosition]:
        """Generate a path starting at the middle of the row closest to the player"""
        start = GridPosition(columns // 2, rows - 1)
        return self.generate_path(rows, columns, desired_length, start)

    def get_random_edge_position(self, rows: int, columns: int) -> GridPosition:
        """Pick a random perimeter cell, each cell listed once"""
        edges = [GridPosition(x, 0) for x in range(columns)]
        if rows > 1:
            edges += [GridPosition(x, rows - 1) for x in range(columns)]
        edges += [GridPosition(0, z) for z in range(1, rows - 1)]
        if columns > 1:
            edges += [GridPosition(columns - 1, z) for z in range(1, rows - 1)]
        return self._rng.choice(edges)

    def _uses_warnsdorff(self, rows: int, columns: int, desired_length: int) -> bool:
        threshold = self._warnsdorff_threshold
        if threshold is None:
            threshold = max(1, rows * columns - 2)
        return desired_length >= threshold

    def _generate_attempt(self, rows: int, columns: int, desired_length: int,
                          start: Optional[GridPosition]) -> List[GridPosition]:
        first = start or self.get_random_edge_position(rows, columns)
        path = [first]
        visited: Set[GridPosition] = {first}
        use_warnsdorff = self._uses_warnsdorff(rows, columns, desired_length)

        max_steps = desired_length * MAX_STEPS_FACTOR
        attempts = 0
        while len(path) < desired_length and attempts < max_steps:
            attempts += 1
            candidates = [n for n in get_neighbors(path[-1], rows, columns) if n not in visited]

            if not candidates:
                if len(path) > 1:
                    visited.discard(path.pop())
                else:
                    # A fixed start is kept; only a free walk moves to another perimeter cell
                    first = start or self.get_random_edge_position(rows, columns)
                    path = [first]
                    visited = {first}
                continue

            if use_warnsdorff:
                candidates = self._order_by_onward_freedom(candidates, visited, rows, columns)
            else:
                self._rng.shuffle(candidates)

            path.append(candidates[0])
            visited.add(candidates[0])

        return path

    def _order_by_onward_freedom(self, candidates: List[GridPosition], visited: Set[GridPosition],
                                 rows: int, columns: int) -> List[GridPosition]:
        exits: Dict[GridPosition, int] = {
            c: sum(1 for n in get_neighbors(c, rows, columns) if n not in visited)
            for c in candidates
        }
        # Random secondary key breaks ties
        return sorted(candidates, key=lambda c: (exits[c], self._rng.random()))
