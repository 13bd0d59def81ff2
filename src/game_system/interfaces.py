"""
Abstract interfaces for optional presentation collaborators
"""

from abc import ABC, abstractmethod
from typing import Callable

from grid_system.grid_types import Vec3


class ICountdownDisplay(ABC):
    """
    Big-number countdown shown in front of the player.

    When present it owns the 3-2-1-WATCH sequence and calls on_complete
    when done; otherwise the game runs its own timer.
    """

    @abstractmethod
    def start_countdown(self, on_complete: Callable[[], None]) -> None:
        pass

    @abstractmethod
    def show_message(self, text: str, duration: float) -> None:
        pass

    @abstractmethod
    def hide(self) -> None:
        """Hide immediately and drop any pending on_complete"""
        pass


class IStartZoneVisual(ABC):
    """Marker showing where the player should stand between rounds"""

    @abstractmethod
    def show_at(self, position: Vec3) -> None:
        pass

    @abstractmethod
    def hide(self) -> None:
        pass


class IEffects(ABC):
    """Celebration effects (confetti and the like)"""

    @abstractmethod
    def play_celebration(self, position: Vec3) -> None:
        pass

    @abstractmethod
    def stop_celebration(self) -> None:
        pass


class IMainMenu(ABC):
    """Menu the session returns to"""

    @abstractmethod
    def show(self) -> None:
        pass
