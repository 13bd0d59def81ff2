"""
Grid system - floor grid, path generation and tile entry detection
"""

from .grid_types import (Collider, ColliderSample, Direction, GridPosition, OverlapEvent,
                         Tile, TileColor, TileState, Vec3)
from .interfaces import IColliderSampler, ITileRenderer
from .path_generator import PathGenerator, get_direction, is_valid_path, path_to_directions
from .tile_trigger import StartZoneVolume, TileTrigger, TriggerVolume
from .grid_manager import GridManager
from .overlap_reader import OverlapReader, OverlapState
from .scripted_sampler import HEAD_COLLIDER, ScriptedColliderSampler
from .keyboard_sampler import KeyboardHeadSampler
from .console_renderer import ConsoleTileRenderer

__all__ = [
    'Collider',
    'ColliderSample',
    'Direction',
    'GridPosition',
    'OverlapEvent',
    'Tile',
    'TileColor',
    'TileState',
    'Vec3',
    'IColliderSampler',
    'ITileRenderer',
    'PathGenerator',
    'get_direction',
    'is_valid_path',
    'path_to_directions',
    'StartZoneVolume',
    'TileTrigger',
    'TriggerVolume',
    'GridManager',
    'OverlapReader',
    'OverlapState',
    'HEAD_COLLIDER',
    'ScriptedColliderSampler',
    'KeyboardHeadSampler',
    'ConsoleTileRenderer'
]
