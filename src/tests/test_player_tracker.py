"""Tests for step validation against the active path."""

import random

import pytest

from grid_system import GridPosition, OverlapEvent, OverlapReader, PathGenerator, ScriptedColliderSampler, Vec3
from grid_system.scripted_sampler import HEAD_COLLIDER
from player_system import PlayerTracker


PATH = [GridPosition(2, 4), GridPosition(2, 3), GridPosition(1, 3), GridPosition(1, 2), GridPosition(1, 1)]


class EventLog:
    """Collects every tracker event in order"""

    def __init__(self, tracker):
        self.events = []
        tracker.on_tile_entered(lambda pos: self.events.append(("entered", pos)))
        tracker.on_tile_exited(lambda pos: self.events.append(("exited", pos)))
        tracker.on_correct_step(lambda pos, progress, total: self.events.append(("correct", pos, progress, total)))
        tracker.on_wrong_step(lambda pos, expected: self.events.append(("wrong", pos, expected)))
        tracker.on_path_completed(lambda steps: self.events.append(("completed", steps)))
        tracker.on_start_zone_entered(lambda: self.events.append(("zone_entered",)))
        tracker.on_start_zone_exited(lambda: self.events.append(("zone_exited",)))

    def of(self, kind):
        return [event for event in self.events if event[0] == kind]


@pytest.fixture
def built_grid(grid):
    grid.initialize(Vec3(), 5, 5)
    grid.install_path(PATH)
    return grid


@pytest.fixture
def tracker(built_grid, logger):
    tracker = PlayerTracker(built_grid, logger)
    tracker.initialize(0.0)
    return tracker


@pytest.fixture
def log(tracker):
    return EventLog(tracker)


def fire(grid, position):
    """Drive an entry through the trigger, as the overlap reader would"""
    trigger = grid.get_trigger_at(position.x, position.z)
    trigger.on_overlap_enter(OverlapEvent(HEAD_COLLIDER, grid.get_tile_world_position(position.x, position.z)))


def test_entries_before_tracking_are_ignored(tracker, log):
    tracker.handle_trigger_entered(PATH[0])
    assert log.events == []
    assert tracker.get_path_progress() == 0


def test_walking_the_path_emits_correct_steps_then_completion(tracker, log):
    tracker.start_tracking()
    for position in PATH:
        tracker.handle_trigger_entered(position)

    assert len(log.of("correct")) == len(PATH) - 1
    assert log.of("correct")[0] == ("correct", PATH[0], 1, len(PATH))
    assert log.of("completed") == [("completed", PATH)]
    assert log.of("wrong") == []
    assert tracker.get_path_progress() == len(PATH)


def test_skipping_the_first_tile_is_a_wrong_step(tracker, log):
    tracker.start_tracking()
    tracker.handle_trigger_entered(PATH[1])
    assert log.of("wrong") == [("wrong", PATH[1], PATH[0])]
    assert tracker.get_path_progress() == 0
    # Still armed: disarming is up to the game flow
    assert tracker.get_tracking_state().is_tracking


def test_reentering_the_current_tile_is_ignored(tracker, log):
    tracker.start_tracking()
    tracker.handle_trigger_entered(PATH[0])
    tracker.handle_trigger_entered(PATH[0])
    assert len(log.of("correct")) == 1
    assert len(log.of("entered")) == 1


def test_moving_between_tiles_reports_exit_then_entry(tracker, log):
    tracker.start_tracking()
    tracker.handle_trigger_entered(PATH[0])
    tracker.handle_trigger_entered(PATH[1])
    kinds = [event[0] for event in log.events]
    assert kinds == ["entered", "correct", "exited", "entered", "correct"]


def test_stop_tracking_keeps_progress(tracker, log):
    tracker.start_tracking()
    tracker.handle_trigger_entered(PATH[0])
    tracker.stop_tracking()
    tracker.handle_trigger_entered(PATH[1])
    assert tracker.get_path_progress() == 1
    assert len(log.of("correct")) == 1


def test_start_tracking_resets_progress_and_latches(built_grid, tracker):
    tracker.start_tracking()
    fire(built_grid, PATH[0])
    assert tracker.get_path_progress() == 1
    assert built_grid.get_trigger_at(PATH[0].x, PATH[0].z).has_triggered

    tracker.start_tracking()
    assert tracker.get_path_progress() == 0
    assert tracker.get_current_grid_position() is None
    assert not any(trigger.has_triggered for trigger in built_grid.iter_triggers())


def test_reset_keeps_armed_flag(tracker):
    tracker.start_tracking()
    tracker.handle_trigger_entered(PATH[0])
    tracker.reset()
    state = tracker.get_tracking_state()
    assert state.is_tracking
    assert state.path_progress == 0
    assert state.steps_on_path == []


def test_tracking_state_is_a_copy(tracker):
    tracker.start_tracking()
    tracker.handle_trigger_entered(PATH[0])
    snapshot = tracker.get_tracking_state()
    snapshot.steps_on_path.append(PATH[3])
    assert tracker.get_tracking_state().steps_on_path == [PATH[0]]


def test_debug_bypass_accepts_any_tile(built_grid, logger):
    tracker = PlayerTracker(built_grid, logger, skip_path_check=True)
    log = EventLog(tracker)
    tracker.start_tracking()

    tracker.handle_trigger_entered(GridPosition(4, 4))
    tracker.handle_trigger_entered(GridPosition(4, 3))
    assert log.of("wrong") == []
    assert len(log.of("correct")) == 2

    tracker.handle_trigger_entered(PATH[-1])
    assert len(log.of("completed")) == 1


def test_debug_bypass_never_completes_before_the_end_tile(built_grid, logger):
    tracker = PlayerTracker(built_grid, logger, skip_path_check=True)
    tracker.start_tracking()
    for x, z in [(0, 4), (0, 3), (0, 2), (0, 1), (0, 0), (1, 0), (2, 0)]:
        tracker.handle_trigger_entered(GridPosition(x, z))
    assert tracker.get_path_progress() == len(PATH) - 1


def test_start_zone_events_are_deduplicated(tracker, log):
    tracker.handle_start_zone_enter()
    tracker.handle_start_zone_enter()
    assert tracker.is_player_in_start_zone()
    tracker.handle_start_zone_exit()
    tracker.handle_start_zone_exit()
    assert log.of("zone_entered") == [("zone_entered",)]
    assert log.of("zone_exited") == [("zone_exited",)]

    tracker.handle_start_zone_enter()
    tracker.reset_start_zone_state()
    tracker.handle_start_zone_enter()
    assert len(log.of("zone_entered")) == 3


def test_floor_position_drops_the_head(tracker):
    tracker.initialize(12.5)
    assert tracker.get_floor_position(Vec3(3.0, 170.0, -4.0)) == Vec3(3.0, 12.5, -4.0)


@pytest.fixture
def generated_round(grid, logger):
    """A generated 5-tile path on a fresh 5x5 grid, walked through the overlap reader"""
    path = PathGenerator(rng=random.Random(21)).generate_path_from_near_edge(5, 5, 5)
    grid.initialize(Vec3(), 5, 5)
    grid.install_path(path)

    tracker = PlayerTracker(grid, logger)
    tracker.initialize(0.0)
    sampler = ScriptedColliderSampler()
    reader = OverlapReader(sampler, grid, logger)
    tracker.start_tracking()

    def walk(positions):
        for position in positions:
            sampler.move_to(grid.get_tile_world_position(position.x, position.z).with_y(160.0))
            reader.read_overlaps()

    return path, tracker, walk


def test_generated_path_walked_in_order_completes(generated_round):
    path, tracker, walk = generated_round
    assert len(path) == 5
    assert path[0] == GridPosition(2, 4)
    log = EventLog(tracker)

    walk(path)

    assert len(log.of("correct")) == 4
    assert log.of("completed") == [("completed", path)]
    assert log.of("wrong") == []
    assert all(event[1] != path[-1] for event in log.of("correct"))
    assert tracker.get_path_progress() == 5


def test_generated_path_with_a_stray_third_step_fails_once(generated_round, grid):
    path, tracker, walk = generated_round
    stray = next(tile.position for tile in grid.iter_tiles()
                 if tile.position not in path and not tile.position.is_adjacent(path[1]))
    log = EventLog(tracker)
    # The game disarms tracking on the first wrong step
    tracker.on_wrong_step(lambda position, expected: tracker.stop_tracking())

    walk([path[0], path[1], stray, path[3], path[4]])

    assert len(log.of("correct")) == 2
    assert log.of("wrong") == [("wrong", stray, path[2])]
    kinds = [event[0] for event in log.events if event[0] in ("correct", "wrong")]
    assert kinds == ["correct", "correct", "wrong"]
    assert tracker.get_path_progress() == 2
    assert log.of("completed") == []
