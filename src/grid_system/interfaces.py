"""
Abstract interfaces for collider sampling and tile rendering
"""

from abc import ABC, abstractmethod
from typing import List

from .grid_types import ColliderSample, Tile


class IColliderSampler(ABC):
    """
    Source of tracked collider positions (head, hands, ...).

    Separates where positions come from (headset tracking, keyboard,
    scripted test input) from overlap detection.
    """

    @abstractmethod
    def sample(self) -> List[ColliderSample]:
        """
        Read the current world position of every tracked collider.

        Returns:
            List[ColliderSample]: One sample per collider present this frame
        """
        pass

    @abstractmethod
    def setup(self) -> None:
        """Initialize the sampler resources"""
        pass

    @abstractmethod
    def cleanup(self) -> None:
        """Cleanup sampler resources"""
        pass


class ITileRenderer(ABC):
    """
    Output side of the grid, analogous to a pixel strip.

    set_tile() only updates a buffer; show() pushes all buffered changes.
    """

    @abstractmethod
    def set_tile(self, tile: Tile) -> None:
        """Buffer the current visual attributes of a tile"""
        pass

    @abstractmethod
    def set_visible(self, visible: bool) -> None:
        """Show or hide the whole grid"""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Forget all buffered tiles (grid destroyed)"""
        pass

    @abstractmethod
    def show(self) -> None:
        """Push buffered changes to the display"""
        pass
