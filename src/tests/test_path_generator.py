"""Tests for random path generation and path helpers."""

import random

import pytest

from grid_system import Direction, GridPosition, PathGenerator, get_direction, is_valid_path, path_to_directions
from grid_system.path_generator import get_neighbors


def assert_well_formed(path, rows, columns):
    assert is_valid_path(path)
    assert len(set(path)) == len(path)
    for pos in path:
        assert 0 <= pos.x < columns
        assert 0 <= pos.z < rows


@pytest.mark.parametrize("length", [5, 7, 9, 11])
def test_paths_from_near_edge_are_valid(length):
    generator = PathGenerator(rng=random.Random(length))
    for _ in range(20):
        path = generator.generate_path_from_near_edge(5, 5, length)
        assert len(path) == length
        assert path[0] == GridPosition(2, 4)
        assert_well_formed(path, 5, 5)


@pytest.mark.parametrize("length", [17, 21, 25])
def test_long_paths_stay_well_formed(length):
    generator = PathGenerator(rng=random.Random(7))
    path = generator.generate_path_from_near_edge(5, 5, length)
    # Best effort: a shortfall is allowed but the result must stay well formed
    assert 1 <= len(path) <= length
    assert_well_formed(path, 5, 5)
    assert path[0] == GridPosition(2, 4)


@pytest.mark.parametrize("length", [23, 24, 25])
def test_near_full_grid_paths_reach_full_length(length):
    for seed in range(20):
        generator = PathGenerator(rng=random.Random(seed))
        path = generator.generate_path_from_near_edge(5, 5, length)
        assert len(path) == length, f"seed {seed} fell short"
        assert path[0] == GridPosition(2, 4)
        assert_well_formed(path, 5, 5)


def test_fixed_start_is_kept_on_shortfall():
    # From the middle of a single row at most one side can be covered
    generator = PathGenerator(rng=random.Random(2))
    path = generator.generate_path(1, 5, 5, start=GridPosition(2, 0))
    assert path[0] == GridPosition(2, 0)
    assert len(path) == 3
    assert_well_formed(path, 1, 5)


def test_length_is_clamped_to_cell_count():
    generator = PathGenerator(rng=random.Random(3))
    path = generator.generate_path(2, 2, 10, start=GridPosition(0, 0))
    assert len(path) == 4
    assert_well_formed(path, 2, 2)


def test_random_start_is_on_the_perimeter():
    generator = PathGenerator(rng=random.Random(11))
    for _ in range(50):
        start = generator.get_random_edge_position(5, 5)
        assert start.x in (0, 4) or start.z in (0, 4)


def test_single_row_grid():
    generator = PathGenerator(rng=random.Random(5))
    path = generator.generate_path(1, 5, 3, start=GridPosition(0, 0))
    assert path == [GridPosition(0, 0), GridPosition(1, 0), GridPosition(2, 0)]


def test_shortfall_returns_longest_attempt_and_warns():
    class RecordingLogger:
        def __init__(self):
            self.warnings = []

        def warning(self, message):
            self.warnings.append(message)

    logger = RecordingLogger()
    generator = PathGenerator(rng=random.Random(0), logger=logger)
    # On a 3x3 board no path covering every cell can start at an edge middle
    path = generator.generate_path(3, 3, 9, start=GridPosition(1, 0))
    assert_well_formed(path, 3, 3)
    assert len(path) < 9
    assert len(logger.warnings) == 1


def test_same_seed_gives_same_path():
    first = PathGenerator(rng=random.Random(99)).generate_path_from_near_edge(5, 5, 11)
    second = PathGenerator(rng=random.Random(99)).generate_path_from_near_edge(5, 5, 11)
    assert first == second


def test_get_neighbors_stays_in_bounds():
    corner = get_neighbors(GridPosition(0, 0), 5, 5)
    assert set(corner) == {GridPosition(1, 0), GridPosition(0, 1)}
    middle = get_neighbors(GridPosition(2, 2), 5, 5)
    assert len(middle) == 4


def test_is_valid_path_rejects_diagonals_and_gaps():
    assert is_valid_path([GridPosition(0, 0), GridPosition(1, 0), GridPosition(1, 1)])
    assert not is_valid_path([GridPosition(0, 0), GridPosition(1, 1)])
    assert not is_valid_path([GridPosition(0, 0), GridPosition(2, 0)])


def test_directions_follow_grid_axes():
    assert get_direction(GridPosition(2, 3), GridPosition(2, 4)) == Direction.UP
    assert get_direction(GridPosition(2, 4), GridPosition(2, 3)) == Direction.DOWN
    assert get_direction(GridPosition(2, 3), GridPosition(1, 3)) == Direction.LEFT
    assert get_direction(GridPosition(1, 3), GridPosition(2, 3)) == Direction.RIGHT

    path = [GridPosition(2, 4), GridPosition(2, 3), GridPosition(3, 3)]
    assert path_to_directions(path) == [Direction.DOWN, Direction.RIGHT]
