"""Tests for grid construction, coordinates, path installation and tile visuals."""

import pytest

from grid_system import GridPosition, TileColor, TileState, Vec3
from grid_system.console_renderer import ConsoleTileRenderer

from conftest import advance


PATH = [GridPosition(2, 4), GridPosition(2, 3), GridPosition(1, 3), GridPosition(1, 2), GridPosition(1, 1)]


@pytest.fixture
def built_grid(grid):
    grid.initialize(Vec3(0.0, 0.0, 0.0), 5, 5)
    return grid


def test_initialize_builds_tiles_and_triggers(built_grid):
    assert built_grid.is_initialized
    tiles = list(built_grid.iter_tiles())
    assert len(tiles) == 25
    assert len(list(built_grid.iter_triggers())) == 25
    for tile in tiles:
        trigger = built_grid.get_trigger_at(tile.grid_x, tile.grid_z)
        assert trigger.position == tile.position
        assert trigger.center.x == tile.local_position.x
        assert trigger.center.z == tile.local_position.z


def test_initialize_discards_previous_grid(built_grid):
    built_grid.install_path(PATH)
    built_grid.initialize(Vec3(100.0, 0.0, 0.0), 3, 4)
    assert built_grid.get_path() == []
    assert len(list(built_grid.iter_tiles())) == 12
    assert built_grid.get_tile_at(3, 2) is not None
    assert built_grid.get_tile_at(4, 0) is None


def test_start_row_sits_at_the_anchor(built_grid):
    near_middle = built_grid.get_tile_world_position(2, 4)
    assert near_middle.x == pytest.approx(0.0)
    assert near_middle.z == pytest.approx(25.0)
    far_middle = built_grid.get_tile_world_position(2, 0)
    assert far_middle.z == pytest.approx(25.0 - 4 * 55.0)


def test_world_position_round_trips_through_tile_centers(built_grid):
    for tile in built_grid.iter_tiles():
        assert built_grid.world_position_to_grid(tile.world_position) == tile.position


def test_world_position_outside_grid_is_none(built_grid):
    assert built_grid.world_position_to_grid(Vec3(0.0, 0.0, 200.0)) is None
    assert built_grid.world_position_to_grid(Vec3(500.0, 0.0, 0.0)) is None


def test_rotated_grid_maps_consistently(grid):
    grid.initialize(Vec3(10.0, 0.0, -20.0), 5, 5, rotation_yaw=90.0)
    for tile in grid.iter_tiles():
        assert grid.world_position_to_grid(tile.world_position) == tile.position
    assert grid.world_position_to_grid(grid.get_tile_world_position(0, 0)) == GridPosition(0, 0)


def test_install_path_tags_tiles(built_grid):
    built_grid.install_path(PATH)
    assert built_grid.get_tile_at(2, 4).state == TileState.START
    assert built_grid.get_tile_at(1, 1).state == TileState.END
    assert built_grid.get_tile_at(1, 3).state == TileState.PATH
    assert built_grid.get_tile_at(1, 3).path_index == 2
    assert built_grid.get_tile_at(0, 0).path_index == -1
    assert not built_grid.get_tile_at(0, 0).is_path_tile


def test_installing_over_a_path_clears_stale_tags(built_grid):
    built_grid.install_path(PATH)
    built_grid.install_path([GridPosition(0, 4), GridPosition(0, 3)])
    assert built_grid.get_tile_at(1, 1).state == TileState.DEFAULT
    assert not built_grid.get_tile_at(1, 1).is_path_tile
    assert sum(1 for tile in built_grid.iter_tiles() if tile.is_path_tile) == 2


def test_generate_new_path_starts_near_middle(built_grid):
    path = built_grid.generate_new_path(9)
    assert len(path) == 9
    assert path[0] == GridPosition(2, 4)
    assert built_grid.get_path() == path


def test_reveal_path_and_hide_path(built_grid):
    built_grid.install_path(PATH)
    built_grid.reveal_path()
    assert built_grid.get_tile_at(2, 4).color == TileColor.START
    assert built_grid.get_tile_at(1, 3).color == TileColor.PATH
    assert built_grid.get_tile_at(2, 4).arrow is not None
    assert built_grid.get_tile_at(1, 1).arrow is None

    built_grid.hide_path()
    assert built_grid.get_tile_at(1, 3).color == TileColor.DEFAULT
    assert built_grid.get_tile_at(2, 4).color == TileColor.START
    assert built_grid.get_tile_at(1, 1).color == TileColor.END
    assert all(tile.arrow is None for tile in built_grid.iter_tiles())


def test_visual_operations_are_idempotent(built_grid):
    built_grid.install_path(PATH)
    built_grid.reveal_path()
    first = [(t.color, t.alpha, t.arrow) for t in built_grid.iter_tiles()]
    built_grid.reveal_path()
    assert [(t.color, t.alpha, t.arrow) for t in built_grid.iter_tiles()] == first

    built_grid.hide_path()
    hidden = [(t.color, t.alpha, t.arrow) for t in built_grid.iter_tiles()]
    built_grid.hide_path()
    assert [(t.color, t.alpha, t.arrow) for t in built_grid.iter_tiles()] == hidden


def test_visuals_never_touch_path_data(built_grid):
    built_grid.install_path(PATH)
    tags = [(t.state, t.is_path_tile, t.path_index) for t in built_grid.iter_tiles()]
    built_grid.reveal_path()
    built_grid.hide_path()
    built_grid.dim_grid_background()
    built_grid.show_only_start_tile()
    built_grid.show_grid()
    assert [(t.state, t.is_path_tile, t.path_index) for t in built_grid.iter_tiles()] == tags


def test_sequential_reveal_paces_tiles(built_grid, clock, scheduler):
    built_grid.install_path(PATH)
    revealed = []
    done = []
    built_grid.reveal_path_sequential(on_complete=lambda: done.append(True),
                                      on_tile_revealed=revealed.append)

    # First tile appears at once, then one every half second
    assert revealed == [1]
    advance(clock, scheduler, 0.5)
    assert revealed == [1, 2]
    advance(clock, scheduler, 1.5)
    assert revealed == [1, 2, 3, 4, 5]
    assert not done

    # One more reveal tick finds nothing left, then the post-reveal pause
    advance(clock, scheduler, 0.5)
    assert not done
    advance(clock, scheduler, 0.5)
    assert done == [True]


def test_cancel_reveal_stops_the_chain(built_grid, clock, scheduler):
    built_grid.install_path(PATH)
    revealed = []
    done = []
    built_grid.reveal_path_sequential(on_complete=lambda: done.append(True),
                                      on_tile_revealed=revealed.append)
    advance(clock, scheduler, 0.5)
    built_grid.cancel_reveal()
    advance(clock, scheduler, 5.0)
    assert revealed == [1, 2]
    assert not done


def test_mark_tiles_and_reset(built_grid):
    built_grid.install_path(PATH)
    built_grid.mark_tile_correct(2, 4)
    built_grid.mark_tile_wrong(3, 3)
    assert built_grid.get_tile_at(2, 4).state == TileState.CORRECT
    assert built_grid.get_tile_at(3, 3).color == TileColor.WRONG

    built_grid.reset_tile_states()
    assert built_grid.get_path() == []
    assert all(tile.state == TileState.DEFAULT for tile in built_grid.iter_tiles())


def test_start_zone_sits_in_front_of_start_tile(built_grid, config):
    built_grid.install_path(PATH)
    position = built_grid.get_start_zone_world_position(config.player.start_zone_offset)
    start = built_grid.get_start_tile_world_position()
    assert position.x == pytest.approx(start.x)
    assert position.z == pytest.approx(start.z + config.player.start_zone_offset)


def test_triggers_disabled_builds_no_volumes(config, scheduler, logger):
    from grid_system import GridManager

    config.grid.triggers_enabled = False
    grid = GridManager(config.grid, scheduler, logger)
    grid.initialize(Vec3(), 5, 5)
    assert list(grid.iter_triggers()) == []


def test_console_renderer_draws_the_board(config, scheduler, logger):
    from grid_system import GridManager

    renderer = ConsoleTileRenderer(logger)
    grid = GridManager(config.grid, scheduler, logger, renderer=renderer)
    grid.initialize(Vec3(), 5, 5)
    grid.install_path(PATH)
    grid.reveal_path()

    lines = renderer.render_lines()
    assert len(lines) == 5
    # Far row on top: start at the bottom middle, end one column left, three rows up
    assert lines[4][2 * 2] == "S"
    assert lines[3][2 * 2] == "<"
    assert lines[1][2 * 1] == "E"
