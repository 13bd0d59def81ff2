"""
Grid manager - tile model, path installation, detection volumes and tile visuals
"""

import math
from typing import Callable, Iterator, List, Optional, TYPE_CHECKING

from .grid_types import (Direction, GridPosition, Tile, TileColor, TileState, Vec3,
                         rotate_y)
from .path_generator import PathGenerator, get_direction
from .tile_trigger import TileTrigger

if TYPE_CHECKING:
    from game_system.config import GridConfig
    from utils import ClassLogger, DelayedCallback, Scheduler
    from .interfaces import ITileRenderer


_STATE_COLORS = {
    TileState.DEFAULT: TileColor.DEFAULT,
    TileState.PATH: TileColor.PATH,
    TileState.START: TileColor.START,
    TileState.END: TileColor.END,
    TileState.CORRECT: TileColor.CORRECT,
    TileState.WRONG: TileColor.WRONG,
}


class GridManager:
    """
    Owns the rows x columns tile grid placed on the floor.

    Layout: the start row (z = rows - 1) is anchored at the placement point
    and the grid extends away from the player along local -Z. Columns are
    centered on the anchor. The whole grid can be rotated about the vertical
    axis, and all world queries go through the same local transform.

    Every tile gets a TileTrigger column at its center. Trigger fires are
    forwarded to the single callback registered with on_trigger_entered().

    Visual operations only change tile color/alpha/arrow and the grid
    visibility; they never touch round data and are idempotent.
    """

    def __init__(self,
                 config: 'GridConfig',
                 scheduler: 'Scheduler',
                 logger: 'ClassLogger',
                 path_generator: Optional[PathGenerator] = None,
                 renderer: Optional['ITileRenderer'] = None):
        """
        Args:
            config: Tile dimensions, trigger volume size and alpha levels
            scheduler: Timer queue for the sequential reveal
            logger: ClassLogger instance for logging
            path_generator: Path source (a default generator if None)
            renderer: Optional visual output
        """
        self.config = config
        self.scheduler = scheduler
        self.logger = logger
        self.path_generator = path_generator or PathGenerator(logger=logger)
        self.renderer = renderer

        self.rows = 0
        self.columns = 0
        self.origin = Vec3()
        self.rotation_yaw = 0.0
        self.tiles: List[List[Tile]] = []
        self.triggers: List[List[TileTrigger]] = []
        self.path: List[GridPosition] = []
        self.is_revealed = False
        self.is_visible = False
        self.is_initialized = False

        self._trigger_callback: Optional[Callable[[GridPosition], None]] = None
        self._reveal_timer: Optional['DelayedCallback'] = None

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def initialize(self, origin: Vec3, rows: int, columns: int, rotation_yaw: float = 0.0) -> None:
        """
        Build a fresh grid at the placement point, discarding any previous one.

        Args:
            origin: World position of the anchor (floor height)
            rows: Number of rows (z)
            columns: Number of columns (x)
            rotation_yaw: Grid rotation about the vertical axis in degrees
        """
        self.clear_grid()

        self.origin = origin
        self.rows = rows
        self.columns = columns
        self.rotation_yaw = rotation_yaw

        for z in range(rows):
            tile_row = []
            trigger_row = []
            for x in range(columns):
                local = self.grid_to_local(x, z)
                tile = Tile(grid_x=x, grid_z=z, local_position=local,
                            world_position=self.local_to_world(local),
                            alpha=self.config.default_alpha)
                tile_row.append(tile)
                trigger_row.append(self._create_trigger(tile))
            self.tiles.append(tile_row)
            self.triggers.append(trigger_row)

        if not self.config.triggers_enabled:
            self.logger.warning("⚠️ No trigger volumes configured - tile entry detection disabled")

        self.is_initialized = True
        self.is_visible = True
        if self.renderer:
            self.renderer.set_visible(True)
        self.dim_grid_background()

        self.logger.info(
            f"Grid initialized: {columns}x{rows} tiles at {origin} "
            f"(spacing {self.cell_spacing}cm, yaw {rotation_yaw}°)"
        )

    def _create_trigger(self, tile: Tile) -> Optional[TileTrigger]:
        if not self.config.triggers_enabled:
            return None
        center = tile.local_position.with_y(self.config.trigger_height / 2)
        half_extents = Vec3(self.config.trigger_width / 2,
                            self.config.trigger_height / 2,
                            self.config.trigger_depth / 2)
        trigger = TileTrigger(tile.position, center, half_extents, self.world_to_local)
        trigger.setup(Direction.NONE, self._handle_trigger_fired)
        return trigger

    def clear_grid(self) -> None:
        """Drop all tiles, triggers and the path"""
        self.cancel_reveal()
        self.tiles = []
        self.triggers = []
        self.path = []
        self.is_revealed = False
        self.is_initialized = False
        if self.renderer:
            self.renderer.clear()

    # ------------------------------------------------------------------
    # Coordinates
    # ------------------------------------------------------------------

    @property
    def cell_spacing(self) -> float:
        return self.config.tile_size + self.config.tile_gap

    def grid_to_local(self, grid_x: int, grid_z: int) -> Vec3:
        """Tile center in grid-local space (anchor at origin, start row nearest)"""
        spacing = self.cell_spacing
        half = self.config.tile_size / 2
        offset_x = -(self.columns * spacing - self.config.tile_gap) / 2
        return Vec3(
            grid_x * spacing + half + offset_x,
            0.0,
            half + (grid_z - (self.rows - 1)) * spacing
        )

    def local_to_world(self, local: Vec3) -> Vec3:
        return self.origin + rotate_y(local, self.rotation_yaw)

    def world_to_local(self, world: Vec3) -> Vec3:
        return rotate_y(world - self.origin, -self.rotation_yaw)

    def grid_to_world(self, grid_x: int, grid_z: int) -> Vec3:
        return self.local_to_world(self.grid_to_local(grid_x, grid_z))

    def world_position_to_grid(self, world_position: Vec3) -> Optional[GridPosition]:
        """
        Map a world position to the cell under it.

        Returns:
            GridPosition, or None if outside the grid or the grid is not built
        """
        if not self.is_initialized:
            return None

        local = self.world_to_local(world_position)
        spacing = self.cell_spacing
        offset_x = -(self.columns * spacing - self.config.tile_gap) / 2

        # The near row spans local z in [0, tile_size], earlier rows repeat every spacing
        grid_x = math.floor((local.x - offset_x) / spacing)
        grid_z = self.rows - 1 + math.floor(local.z / spacing)

        if not self.is_valid_position(grid_x, grid_z):
            return None
        return GridPosition(grid_x, grid_z)

    def is_valid_position(self, grid_x: int, grid_z: int) -> bool:
        return 0 <= grid_x < self.columns and 0 <= grid_z < self.rows

    def get_tile_world_position(self, grid_x: int, grid_z: int) -> Optional[Vec3]:
        tile = self.get_tile_at(grid_x, grid_z)
        return tile.world_position if tile else None

    def get_start_tile_world_position(self) -> Optional[Vec3]:
        if not self.path:
            return None
        start = self.path[0]
        return self.get_tile_world_position(start.x, start.z)

    def get_start_zone_world_position(self, offset: float) -> Optional[Vec3]:
        """Point in front of the start tile (toward the player) where the start zone sits"""
        if not self.path:
            return None
        start = self.path[0]
        local = self.grid_to_local(start.x, start.z)
        return self.local_to_world(Vec3(local.x, local.y, local.z + offset))

    # ------------------------------------------------------------------
    # Path
    # ------------------------------------------------------------------

    def generate_new_path(self, path_length: int) -> List[GridPosition]:
        """
        Generate and install a path starting on the near row.

        Args:
            path_length: Desired number of tiles

        Returns:
            List[GridPosition]: The installed path (may be shorter than asked)
        """
        if not self.is_initialized:
            self.logger.warning("Cannot generate path - grid not initialized")
            return []

        path = self.path_generator.generate_path_from_near_edge(self.rows, self.columns, path_length)
        if len(path) < path_length:
            self.logger.warning(f"⚠️ Playing a shortened path: {len(path)}/{path_length} tiles")
        self.install_path(path)
        return path

    def install_path(self, path: List[GridPosition]) -> None:
        """Tag tiles start / path / end and record their path index"""
        if self.path:
            self.logger.warning("Installing a path over an existing one - clearing stale path tags")
            self._clear_path_tags()

        self.path = list(path)
        self.is_revealed = False
        last = len(self.path) - 1
        for index, pos in enumerate(self.path):
            tile = self.tiles[pos.z][pos.x]
            tile.is_path_tile = True
            tile.path_index = index
            if index == 0:
                tile.state = TileState.START
            elif index == last:
                tile.state = TileState.END
            else:
                tile.state = TileState.PATH

        self.logger.info(f"Path installed ({len(self.path)} tiles): {' → '.join(str(p) for p in self.path)}")

    def _clear_path_tags(self) -> None:
        for pos in self.path:
            tile = self.tiles[pos.z][pos.x]
            tile.state = TileState.DEFAULT
            tile.is_path_tile = False
            tile.path_index = -1
        self.path = []

    def get_path(self) -> List[GridPosition]:
        return list(self.path)

    def get_tile_at(self, grid_x: int, grid_z: int) -> Optional[Tile]:
        if not self.is_initialized or not self.is_valid_position(grid_x, grid_z):
            return None
        return self.tiles[grid_z][grid_x]

    def iter_tiles(self) -> Iterator[Tile]:
        for row in self.tiles:
            yield from row

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def on_trigger_entered(self, callback: Callable[[GridPosition], None]) -> None:
        """Register the single receiver of tile entry events"""
        self._trigger_callback = callback

    def _handle_trigger_fired(self, position: GridPosition) -> None:
        self.logger.debug(f"Trigger fired at {position}")
        if self._trigger_callback:
            self._trigger_callback(position)

    def iter_triggers(self) -> Iterator[TileTrigger]:
        for row in self.triggers:
            for trigger in row:
                if trigger is not None:
                    yield trigger

    def get_trigger_at(self, grid_x: int, grid_z: int) -> Optional[TileTrigger]:
        if not self.is_initialized or not self.is_valid_position(grid_x, grid_z):
            return None
        return self.triggers[grid_z][grid_x]

    def reset_triggers(self) -> None:
        """Re-arm every tile trigger latch"""
        count = 0
        for trigger in self.iter_triggers():
            trigger.reset_trigger()
            count += 1
        self.logger.debug(f"Reset {count} tile triggers")

    # ------------------------------------------------------------------
    # Visuals
    # ------------------------------------------------------------------

    def _paint(self, tile: Tile, color: Optional[TileColor] = None, alpha: Optional[float] = None) -> None:
        if color is not None:
            tile.color = color
        if alpha is not None:
            tile.alpha = alpha
        if self.renderer:
            self.renderer.set_tile(tile)

    def _set_arrow(self, tile: Tile, direction: Optional[Direction]) -> None:
        tile.arrow = direction
        if self.renderer:
            self.renderer.set_tile(tile)

    def _show(self) -> None:
        if self.renderer:
            self.renderer.show()

    def _path_color(self, index: int) -> TileColor:
        if index == 0:
            return TileColor.START
        if index == len(self.path) - 1:
            return TileColor.END
        return TileColor.PATH

    def _arrow_for(self, index: int) -> Optional[Direction]:
        if index >= len(self.path) - 1:
            return None
        return get_direction(self.path[index], self.path[index + 1])

    def reveal_path(self, with_arrows: bool = True) -> None:
        """Color every path tile at once, optionally with arrows to the next tile"""
        if not self.is_initialized:
            return
        self.cancel_reveal()
        self.is_revealed = True
        for index, pos in enumerate(self.path):
            tile = self.tiles[pos.z][pos.x]
            self._paint(tile, self._path_color(index), self.config.visible_alpha)
            if with_arrows:
                self._set_arrow(tile, self._arrow_for(index))
        self._show()

    def reveal_path_sequential(self, on_complete: Optional[Callable[[], None]] = None,
                               on_tile_revealed: Optional[Callable[[int], None]] = None) -> None:
        """
        Reveal the path one tile at a time.

        Each tile is colored and given its arrow, then the next one follows
        after tile_reveal_delay. After the last tile a post_reveal_delay
        passes before on_complete runs. cancel_reveal() stops the chain.

        Args:
            on_complete: Called once after the whole path is shown
            on_tile_revealed: Called with the 1-based count of revealed tiles
        """
        self.cancel_reveal()
        if not self.is_initialized or not self.path:
            if on_complete:
                on_complete()
            return

        self.is_revealed = True
        state = {"index": 0}

        def reveal_next() -> None:
            index = state["index"]
            if index >= len(self.path):
                self._reveal_timer = self.scheduler.call_later(
                    self.config.post_reveal_delay, finish, name="post_reveal")
                return

            pos = self.path[index]
            tile = self.tiles[pos.z][pos.x]
            self._paint(tile, self._path_color(index), self.config.visible_alpha)
            self._set_arrow(tile, self._arrow_for(index))
            self._show()
            if on_tile_revealed:
                on_tile_revealed(index + 1)

            state["index"] = index + 1
            self._reveal_timer = self.scheduler.call_later(
                self.config.tile_reveal_delay, reveal_next, name="tile_reveal")

        def finish() -> None:
            self._reveal_timer = None
            if on_complete:
                on_complete()

        reveal_next()

    def cancel_reveal(self) -> None:
        """Stop a running sequential reveal (its on_complete will not run)"""
        if self._reveal_timer is not None:
            self._reveal_timer.cancel()
            self._reveal_timer = None

    def hide_path(self) -> None:
        """Return tiles to default look, keeping start and end visible"""
        if not self.is_initialized:
            return
        self.cancel_reveal()
        self.is_revealed = False
        for tile in self.iter_tiles():
            self._paint(tile, TileColor.DEFAULT, self.config.default_alpha)
            self._set_arrow(tile, None)

        if self.path:
            start = self.path[0]
            end = self.path[-1]
            self._paint(self.tiles[start.z][start.x], TileColor.START, self.config.visible_alpha)
            self._paint(self.tiles[end.z][end.x], TileColor.END, self.config.visible_alpha)
        self._show()

    def show_only_start_tile(self) -> None:
        """Dim everything and highlight just the start tile"""
        if not self.is_initialized or not self.path:
            return
        self.dim_grid_background()
        start = self.path[0]
        self._paint(self.tiles[start.z][start.x], TileColor.START, self.config.visible_alpha)
        self._show()

    def show_start_tile_with_arrow(self) -> None:
        """Point the start tile's arrow at the first step"""
        if not self.is_initialized or len(self.path) < 2:
            return
        start = self.path[0]
        self._set_arrow(self.tiles[start.z][start.x], self._arrow_for(0))
        self._show()

    def dim_grid_background(self) -> None:
        for tile in self.iter_tiles():
            self._paint(tile, alpha=self.config.dimmed_alpha)
        self._show()

    def show_grid(self) -> None:
        if not self.is_initialized:
            return
        self.is_visible = True
        if self.renderer:
            self.renderer.set_visible(True)
        for tile in self.iter_tiles():
            self._paint(tile, alpha=self.config.default_alpha)
        self._show()

    def hide_grid(self) -> None:
        self.is_visible = False
        if self.renderer:
            self.renderer.set_visible(False)
            self.renderer.show()

    def mark_tile_correct(self, grid_x: int, grid_z: int) -> None:
        self._mark_tile(grid_x, grid_z, TileState.CORRECT)

    def mark_tile_wrong(self, grid_x: int, grid_z: int) -> None:
        self._mark_tile(grid_x, grid_z, TileState.WRONG)

    def _mark_tile(self, grid_x: int, grid_z: int, state: TileState) -> None:
        tile = self.get_tile_at(grid_x, grid_z)
        if tile is None:
            return
        tile.state = state
        self._paint(tile, _STATE_COLORS[state], self.config.visible_alpha)
        self._show()

    def reset_tile_states(self) -> None:
        """Clear every tile back to default data and look, and forget the path"""
        self.cancel_reveal()
        for tile in self.iter_tiles():
            tile.state = TileState.DEFAULT
            tile.is_path_tile = False
            tile.path_index = -1
            self._set_arrow(tile, None)
            self._paint(tile, TileColor.DEFAULT, self.config.default_alpha)
        self.path = []
        self.is_revealed = False
        self._show()

    def get_grid_config(self) -> dict:
        """Current grid layout summary"""
        return {
            'rows': self.rows,
            'columns': self.columns,
            'tile_size': self.config.tile_size,
            'tile_gap': self.config.tile_gap,
            'origin': self.origin,
            'rotation_yaw': self.rotation_yaw,
        }
