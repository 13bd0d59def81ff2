"""Tests for tile triggers, the start zone volume and overlap edge detection."""

import pytest

from grid_system import (Collider, GridPosition, OverlapEvent, OverlapReader, ScriptedColliderSampler,
                         StartZoneVolume, TileTrigger, Vec3)
from grid_system.scripted_sampler import HEAD_COLLIDER


HAND = Collider(name="hand", half_extents=Vec3(3.0, 3.0, 3.0), is_camera=False)


@pytest.fixture
def built_grid(grid):
    grid.initialize(Vec3(0.0, 0.0, 0.0), 5, 5)
    return grid


@pytest.fixture
def sampler():
    return ScriptedColliderSampler()


@pytest.fixture
def reader(sampler, built_grid, logger):
    return OverlapReader(sampler, built_grid, logger)


def head_over(grid, x, z, height=160.0):
    return grid.get_tile_world_position(x, z).with_y(height)


def test_trigger_fires_once_until_reset():
    fired = []
    trigger = TileTrigger(GridPosition(1, 1), Vec3(0, 200, 0), Vec3(5, 200, 5))
    trigger.setup(trigger.direction, fired.append)

    event = OverlapEvent(HEAD_COLLIDER, Vec3(0, 160, 0))
    trigger.on_overlap_enter(event)
    trigger.on_overlap_enter(event)
    assert fired == [GridPosition(1, 1)]
    assert trigger.has_triggered

    trigger.reset_trigger()
    trigger.on_overlap_enter(event)
    assert fired == [GridPosition(1, 1), GridPosition(1, 1)]


def test_trigger_ignores_non_camera_colliders():
    fired = []
    trigger = TileTrigger(GridPosition(0, 0), Vec3(0, 200, 0), Vec3(5, 200, 5))
    trigger.setup(trigger.direction, fired.append)
    trigger.on_overlap_enter(OverlapEvent(HAND, Vec3(0, 50, 0)))
    assert fired == []
    assert not trigger.has_triggered


def test_trigger_volume_is_a_narrow_column(built_grid):
    trigger = built_grid.get_trigger_at(2, 4)
    center = built_grid.get_tile_world_position(2, 4)
    assert trigger.intersects(HEAD_COLLIDER, center.with_y(160.0))
    # Leaning 15cm toward a neighbor stays out of the column
    assert not trigger.intersects(HEAD_COLLIDER, Vec3(center.x + 15.0, 160.0, center.z))
    # Far above the trigger height does not count either
    assert not trigger.intersects(HEAD_COLLIDER, center.with_y(500.0))


def test_entering_a_tile_fires_its_trigger_once(built_grid, sampler, reader):
    fired = []
    built_grid.on_trigger_entered(fired.append)

    sampler.move_to(head_over(built_grid, 2, 4))
    reader.read_overlaps()
    reader.read_overlaps()
    assert fired == [GridPosition(2, 4)]


def test_standing_still_produces_no_edges(built_grid, sampler, reader):
    sampler.move_to(head_over(built_grid, 2, 4))
    first = reader.read_overlaps()
    second = reader.read_overlaps()
    assert len(first.entered) == 1
    assert not second.any_changed
    assert second.overlapping_count == 1


def test_exit_is_reported_when_leaving(built_grid, sampler, reader):
    sampler.move_to(head_over(built_grid, 2, 4))
    reader.read_overlaps()
    sampler.move_to(head_over(built_grid, 2, 3))
    state = reader.read_overlaps()
    assert [volume.position for _, volume in state.exited] == [GridPosition(2, 4)]
    assert [volume.position for _, volume in state.entered] == [GridPosition(2, 3)]


def test_latched_trigger_does_not_refire_on_reentry(built_grid, sampler, reader):
    fired = []
    built_grid.on_trigger_entered(fired.append)
    sampler.move_to(head_over(built_grid, 2, 4))
    reader.read_overlaps()
    sampler.move_to(head_over(built_grid, 2, 3))
    reader.read_overlaps()
    sampler.move_to(head_over(built_grid, 2, 4))
    reader.read_overlaps()
    assert fired == [GridPosition(2, 4), GridPosition(2, 3)]

    built_grid.reset_triggers()
    sampler.move_to(head_over(built_grid, 2, 3))
    reader.read_overlaps()
    assert fired == [GridPosition(2, 4), GridPosition(2, 3), GridPosition(2, 3)]


def test_lost_tracking_reports_exit(built_grid, sampler, reader):
    sampler.move_to(head_over(built_grid, 1, 1))
    reader.read_overlaps()
    sampler.remove()
    state = reader.read_overlaps()
    assert len(state.exited) == 1


def test_start_zone_reports_enter_and_exit(built_grid, sampler, reader):
    events = []
    zone = StartZoneVolume(Vec3(0.0, 200.0, 105.0), Vec3(20.0, 200.0, 20.0),
                           on_enter=lambda: events.append("enter"),
                           on_exit=lambda: events.append("exit"))
    reader.add_volume(zone)

    sampler.move_to(Vec3(0.0, 160.0, 100.0))
    reader.read_overlaps()
    sampler.move_to(Vec3(0.0, 160.0, 200.0))
    reader.read_overlaps()
    assert events == ["enter", "exit"]


def test_forget_replays_an_entry(built_grid, sampler, reader):
    events = []
    zone = StartZoneVolume(Vec3(0.0, 200.0, 105.0), Vec3(20.0, 200.0, 20.0),
                           on_enter=lambda: events.append("enter"))
    reader.add_volume(zone)

    sampler.move_to(Vec3(0.0, 160.0, 100.0))
    reader.read_overlaps()
    reader.forget(zone)
    reader.read_overlaps()
    assert events == ["enter", "enter"]


def test_disabled_volume_never_overlaps(built_grid, sampler, reader):
    events = []
    zone = StartZoneVolume(Vec3(0.0, 200.0, 105.0), Vec3(20.0, 200.0, 20.0),
                           on_enter=lambda: events.append("enter"))
    zone.enabled = False
    reader.add_volume(zone)
    sampler.move_to(Vec3(0.0, 160.0, 100.0))
    reader.read_overlaps()
    assert events == []


def test_rebuilt_grid_does_not_report_stale_exits(built_grid, sampler, reader):
    sampler.move_to(head_over(built_grid, 2, 4))
    reader.read_overlaps()
    built_grid.initialize(Vec3(0.0, 0.0, 0.0), 5, 5)
    sampler.move_to(Vec3(1000.0, 160.0, 1000.0))
    state = reader.read_overlaps()
    assert state.exited == []
