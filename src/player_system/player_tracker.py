"""
Player tracker - validates tile entries against the active path
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, TYPE_CHECKING

from grid_system.grid_types import GridPosition, Vec3, project_to_floor

if TYPE_CHECKING:
    from grid_system.grid_manager import GridManager
    from utils import ClassLogger


@dataclass
class TrackingState:
    """Snapshot of the current tracking session"""
    is_tracking: bool = False
    current_tile: Optional[GridPosition] = None
    path_progress: int = 0
    steps_on_path: List[GridPosition] = field(default_factory=list)


class PlayerTracker:
    """
    Step validator between the tile triggers and the game flow.

    Receives one event per tile entry and decides whether it is the next
    expected tile of the path:

    - correct step: appended to the step log, progress advances, and either
      on_correct_step(position, progress, total) or, for the final tile,
      on_path_completed(steps) is emitted
    - wrong step: on_wrong_step(actual, expected) is emitted, progress is
      unchanged and tracking stays armed; disarming is the caller's call

    Entries while not tracking are discarded, and re-entering the current
    tile is ignored. With skip_path_check (debug bypass) every tile counts
    as correct and reaching the last path tile completes the round.

    The tracker never changes tile visuals or plays audio.
    """

    EVENTS = (
        'tile_entered',
        'tile_exited',
        'correct_step',
        'wrong_step',
        'path_completed',
        'start_zone_entered',
        'start_zone_exited',
    )

    def __init__(self, grid_manager: 'GridManager', logger: 'ClassLogger',
                 skip_path_check: bool = False):
        """
        Args:
            grid_manager: Source of the active path and trigger latches
            logger: ClassLogger instance for logging
            skip_path_check: Debug bypass, any tile is accepted
        """
        self.grid_manager = grid_manager
        self.logger = logger
        self.skip_path_check = skip_path_check

        self.state = TrackingState()
        self.floor_y = 0.0
        self.is_in_start_zone = False
        self._callbacks: Dict[str, List[Callable]] = {name: [] for name in self.EVENTS}

        self.grid_manager.on_trigger_entered(self.handle_trigger_entered)

        if skip_path_check:
            self.logger.warning("🐛 Path check disabled - every step counts as correct")

    # ------------------------------------------------------------------
    # Event registration
    # ------------------------------------------------------------------

    def _add(self, event: str, callback: Callable) -> None:
        self._callbacks[event].append(callback)

    def _emit(self, event: str, *args) -> None:
        for callback in list(self._callbacks[event]):
            callback(*args)

    def on_tile_entered(self, callback: Callable[[GridPosition], None]) -> None:
        self._add('tile_entered', callback)

    def on_tile_exited(self, callback: Callable[[GridPosition], None]) -> None:
        self._add('tile_exited', callback)

    def on_correct_step(self, callback: Callable[[GridPosition, int, int], None]) -> None:
        self._add('correct_step', callback)

    def on_wrong_step(self, callback: Callable[[GridPosition, GridPosition], None]) -> None:
        self._add('wrong_step', callback)

    def on_path_completed(self, callback: Callable[[List[GridPosition]], None]) -> None:
        self._add('path_completed', callback)

    def on_start_zone_entered(self, callback: Callable[[], None]) -> None:
        self._add('start_zone_entered', callback)

    def on_start_zone_exited(self, callback: Callable[[], None]) -> None:
        self._add('start_zone_exited', callback)

    # ------------------------------------------------------------------
    # Session control
    # ------------------------------------------------------------------

    def initialize(self, floor_y: float) -> None:
        """Prepare for a freshly placed grid"""
        self.floor_y = floor_y
        self.state = TrackingState()
        self.is_in_start_zone = False
        self.logger.info(f"PlayerTracker initialized (floor at y={floor_y})")

    def start_tracking(self) -> None:
        """Reset progress and latches, then arm"""
        self.state = TrackingState()
        self.grid_manager.reset_triggers()
        self.state.is_tracking = True
        self.logger.info("▶️ Tracking started")

    def stop_tracking(self) -> None:
        """Disarm only; progress is kept for inspection"""
        if self.state.is_tracking:
            self.logger.info("⏹️ Tracking stopped")
        self.state.is_tracking = False

    def reset(self) -> None:
        """Clear progress and latches without changing the armed flag"""
        is_tracking = self.state.is_tracking
        self.state = TrackingState(is_tracking=is_tracking)
        self.grid_manager.reset_triggers()

    # ------------------------------------------------------------------
    # Tile entries
    # ------------------------------------------------------------------

    def handle_trigger_entered(self, position: GridPosition) -> None:
        """Entry point for tile trigger fires"""
        if not self.state.is_tracking:
            self.logger.debug(f"Ignoring entry at {position} - not tracking")
            return

        if position == self.state.current_tile:
            return

        previous = self.state.current_tile
        self.state.current_tile = position
        if previous is not None:
            self._emit('tile_exited', previous)
        self._emit('tile_entered', position)

        self.validate_step(position)

    def validate_step(self, position: GridPosition) -> None:
        path = self.grid_manager.get_path()
        if not path:
            self.logger.warning(f"Step at {position} with no active path")
            return

        if self.skip_path_check:
            self._accept_any_step(position, path)
            return

        if self.state.path_progress >= len(path):
            return

        expected = path[self.state.path_progress]
        if position != expected:
            self.logger.info(f"❌ Wrong step at {position}, expected {expected}")
            self._emit('wrong_step', position, expected)
            return

        self.state.steps_on_path.append(position)
        self.state.path_progress += 1
        progress = self.state.path_progress

        if progress >= len(path):
            self.logger.info(f"🏁 Path completed in {len(self.state.steps_on_path)} steps")
            self._emit('path_completed', list(self.state.steps_on_path))
        else:
            self.logger.info(f"✅ Correct step {progress}/{len(path)} at {position}")
            self._emit('correct_step', position, progress, len(path))

    def _accept_any_step(self, position: GridPosition, path: List[GridPosition]) -> None:
        self.state.steps_on_path.append(position)

        if position == path[-1]:
            self.state.path_progress = len(path)
            self.logger.info(f"🐛 Reached end tile {position} - completing round")
            self._emit('path_completed', list(self.state.steps_on_path))
            return

        self.state.path_progress = min(self.state.path_progress + 1, len(path) - 1)
        self._emit('correct_step', position, self.state.path_progress, len(path))

    # ------------------------------------------------------------------
    # Start zone
    # ------------------------------------------------------------------

    def handle_start_zone_enter(self) -> None:
        if self.is_in_start_zone:
            return
        self.is_in_start_zone = True
        self.logger.info("Player entered start zone")
        self._emit('start_zone_entered')

    def handle_start_zone_exit(self) -> None:
        if not self.is_in_start_zone:
            return
        self.is_in_start_zone = False
        self.logger.info("Player left start zone")
        self._emit('start_zone_exited')

    def reset_start_zone_state(self) -> None:
        self.is_in_start_zone = False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_tracking_state(self) -> TrackingState:
        return TrackingState(
            is_tracking=self.state.is_tracking,
            current_tile=self.state.current_tile,
            path_progress=self.state.path_progress,
            steps_on_path=list(self.state.steps_on_path)
        )

    def get_path_progress(self) -> int:
        return self.state.path_progress

    def get_current_grid_position(self) -> Optional[GridPosition]:
        return self.state.current_tile

    def is_player_in_start_zone(self) -> bool:
        return self.is_in_start_zone

    def get_floor_position(self, head_position: Vec3) -> Vec3:
        """Point on the floor directly under the head"""
        return project_to_floor(head_position, self.floor_y)
