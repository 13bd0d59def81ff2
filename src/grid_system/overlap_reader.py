"""
Overlap reader - turns sampled collider positions into enter/exit edges
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple, TYPE_CHECKING

from .grid_types import ColliderSample, OverlapEvent
from .interfaces import IColliderSampler
from .tile_trigger import TriggerVolume

if TYPE_CHECKING:
    from utils import ClassLogger
    from .grid_manager import GridManager


@dataclass
class OverlapState:
    """What changed this frame (pairs of collider name and volume)"""
    entered: List[Tuple[str, TriggerVolume]] = field(default_factory=list)
    exited: List[Tuple[str, TriggerVolume]] = field(default_factory=list)
    overlapping_count: int = 0

    @property
    def any_changed(self) -> bool:
        return bool(self.entered or self.exited)


class OverlapReader:
    """
    Edge detector for collider/volume overlaps.

    Each frame every sampled collider is tested against every volume (the
    grid's tile triggers plus extra volumes such as the start zone). Only
    changes since the previous frame are reported to the volumes:
    on_overlap_enter when a pair starts overlapping, on_overlap_exit when
    it stops. Standing still inside a volume produces nothing.

    Within one frame, exits are raised before entries, and entries follow
    volume registration order (tiles row by row, then extra volumes).

    Example:
        reader = OverlapReader(sampler, grid_manager, logger)
        reader.add_volume(start_zone_volume)

        # In update loop:
        reader.read_overlaps()
    """

    def __init__(self,
                 sampler: IColliderSampler,
                 grid_manager: 'GridManager',
                 logger: 'ClassLogger'):
        """
        Args:
            sampler: Source of collider positions
            grid_manager: Provides the tile trigger volumes
            logger: ClassLogger instance for logging
        """
        self._sampler = sampler
        self._grid_manager = grid_manager
        self._logger = logger
        self._extra_volumes: List[TriggerVolume] = []
        self._previous: Set[Tuple[str, TriggerVolume]] = set()
        self._last_samples: Dict[str, ColliderSample] = {}

        self._sampler.setup()
        self._logger.info("OverlapReader initialized")

    def add_volume(self, volume: TriggerVolume) -> None:
        """Register a volume that is not part of the tile grid"""
        self._extra_volumes.append(volume)

    def _volumes(self) -> List[TriggerVolume]:
        volumes: List[TriggerVolume] = list(self._grid_manager.iter_triggers())
        volumes.extend(self._extra_volumes)
        return volumes

    def read_overlaps(self) -> OverlapState:
        """
        Sample colliders and raise enter/exit events on changed pairs.

        Returns:
            OverlapState: The edges raised this frame
        """
        samples = self._sampler.sample()
        volumes = self._volumes()
        known = set(volumes)

        current: Set[Tuple[str, TriggerVolume]] = set()
        ordered_current: List[Tuple[ColliderSample, TriggerVolume]] = []
        for sample in samples:
            for volume in volumes:
                if volume.intersects(sample.collider, sample.position):
                    current.add((sample.collider.name, volume))
                    ordered_current.append((sample, volume))

        state = OverlapState(overlapping_count=len(current))
        samples_by_name = {sample.collider.name: sample for sample in samples}

        for name, volume in self._previous - current:
            if volume not in known:
                # Volume destroyed with the old grid
                continue
            sample = samples_by_name.get(name) or self._last_samples.get(name)
            collider = sample.collider if sample else None
            position = sample.position if sample else None
            volume.on_overlap_exit(OverlapEvent(collider, position))
            state.exited.append((name, volume))

        for sample, volume in ordered_current:
            key = (sample.collider.name, volume)
            if key in self._previous:
                continue
            self._logger.debug(f"{sample.collider.name} entered {volume.__class__.__name__} at {sample.position}")
            volume.on_overlap_enter(OverlapEvent(sample.collider, sample.position))
            state.entered.append((sample.collider.name, volume))

        self._previous = current
        self._last_samples = samples_by_name
        return state

    def forget(self, volume: Optional[TriggerVolume] = None) -> None:
        """
        Drop remembered overlaps so they are reported as new entries.

        Args:
            volume: Only forget pairs involving this volume (all if None)
        """
        if volume is None:
            self._previous.clear()
        else:
            self._previous = {pair for pair in self._previous if pair[1] is not volume}

    def cleanup(self) -> None:
        """Cleanup overlap reader and sampler resources"""
        self._sampler.cleanup()
        self._logger.info("OverlapReader cleaned up")
