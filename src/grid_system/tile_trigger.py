"""
Detection volumes - tile triggers and the start zone
"""

from typing import Callable, Optional

from .grid_types import Collider, Direction, GridPosition, OverlapEvent, Vec3


def _identity(position: Vec3) -> Vec3:
    return position


class TriggerVolume:
    """
    Axis-aligned box in its own coordinate space.

    transform maps a world position into that space (grid-local for tiles,
    identity for world-placed volumes). Overlap is a box-vs-box test
    against the collider's half extents.
    """

    def __init__(self, center: Vec3, half_extents: Vec3,
                 transform: Callable[[Vec3], Vec3] = _identity):
        self.center = center
        self.half_extents = half_extents
        self._transform = transform
        self.enabled = True

    def intersects(self, collider: Collider, world_position: Vec3) -> bool:
        if not self.enabled:
            return False
        local = self._transform(world_position)
        size = collider.half_extents
        return (abs(local.x - self.center.x) <= self.half_extents.x + size.x and
                abs(local.y - self.center.y) <= self.half_extents.y + size.y and
                abs(local.z - self.center.z) <= self.half_extents.z + size.z)

    def on_overlap_enter(self, event: OverlapEvent) -> None:
        pass

    def on_overlap_exit(self, event: OverlapEvent) -> None:
        pass


def is_camera_overlap(event: OverlapEvent) -> bool:
    """Only the head (camera) collider counts as the player's position"""
    return event.collider is not None and event.collider.is_camera


class TileTrigger(TriggerVolume):
    """
    Detection volume bound to one tile.

    The volume is a narrow, tall column at the tile center rather than the
    tile footprint: leaning or tilting the head does not reach a neighbor,
    only walking onto the tile does.

    Fires its callback at most once until reset_trigger() is called.

    Example:
        trigger = TileTrigger(GridPosition(2, 4), center, half_extents, grid.world_to_local)
        trigger.setup(Direction.NONE, grid_manager.handle_trigger_fired)
    """

    def __init__(self, position: GridPosition, center: Vec3, half_extents: Vec3,
                 transform: Callable[[Vec3], Vec3] = _identity):
        super().__init__(center, half_extents, transform)
        self.position = position
        self.direction = Direction.NONE
        self.has_triggered = False
        self._callback: Optional[Callable[[GridPosition], None]] = None

    def setup(self, direction: Direction, callback: Callable[[GridPosition], None]) -> None:
        """
        Attach the entry callback.

        Args:
            direction: Tag for the side of the tile this trigger watches
            callback: Called with the tile position on the first qualifying entry
        """
        self.direction = direction
        self._callback = callback

    def on_overlap_enter(self, event: OverlapEvent) -> None:
        if self.has_triggered:
            return
        if not is_camera_overlap(event):
            return

        self.has_triggered = True
        if self._callback:
            self._callback(self.position)

    def reset_trigger(self) -> None:
        """Re-arm the latch for a new round"""
        self.has_triggered = False


class StartZoneVolume(TriggerVolume):
    """
    World-placed volume the player stands in between rounds.

    Reports head entry and exit. De-duplication of repeated events is the
    tracker's job.
    """

    def __init__(self, center: Vec3, half_extents: Vec3,
                 on_enter: Optional[Callable[[], None]] = None,
                 on_exit: Optional[Callable[[], None]] = None):
        super().__init__(center, half_extents)
        self._on_enter = on_enter
        self._on_exit = on_exit

    def move_to(self, center: Vec3) -> None:
        self.center = center

    def on_overlap_enter(self, event: OverlapEvent) -> None:
        if is_camera_overlap(event) and self._on_enter:
            self._on_enter()

    def on_overlap_exit(self, event: OverlapEvent) -> None:
        if is_camera_overlap(event) and self._on_exit:
            self._on_exit()
