"""
Scripted collider sampler - positions set from code (tests, demos, replays)
"""

from typing import Dict, List, Optional

from .grid_types import Collider, ColliderSample, Vec3
from .interfaces import IColliderSampler


HEAD_COLLIDER = Collider(name="head", half_extents=Vec3(5.0, 5.0, 5.0), is_camera=True)


class ScriptedColliderSampler(IColliderSampler):
    """
    Sampler whose colliders are moved explicitly.

    Example:
        sampler = ScriptedColliderSampler()
        sampler.move_to(grid.get_tile_world_position(2, 4).with_y(160))
        reader.read_overlaps()
    """

    def __init__(self, head: Collider = HEAD_COLLIDER):
        self.head = head
        self._positions: Dict[str, Vec3] = {}
        self._colliders: Dict[str, Collider] = {head.name: head}

    def add_collider(self, collider: Collider, position: Optional[Vec3] = None) -> None:
        self._colliders[collider.name] = collider
        if position is not None:
            self._positions[collider.name] = position

    def move_to(self, position: Vec3, collider_name: Optional[str] = None) -> None:
        """Place a collider (the head by default)"""
        self._positions[collider_name or self.head.name] = position

    def remove(self, collider_name: Optional[str] = None) -> None:
        """Stop reporting a collider (tracking lost)"""
        self._positions.pop(collider_name or self.head.name, None)

    def get_position(self, collider_name: Optional[str] = None) -> Optional[Vec3]:
        return self._positions.get(collider_name or self.head.name)

    def sample(self) -> List[ColliderSample]:
        return [ColliderSample(self._colliders[name], position)
                for name, position in self._positions.items()]

    def setup(self) -> None:
        pass

    def cleanup(self) -> None:
        self._positions.clear()
