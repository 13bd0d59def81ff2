"""
Abstract interface for narration and sound effects
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from .dialogue_lines import DialogueLine


class ISoundController(ABC):
    """
    Audio output used by the game flow.

    Narration is asynchronous: play_line() returns immediately and
    on_complete runs later from update(). Starting a new line or calling
    stop_line() drops the pending completion of the previous one.
    """

    @abstractmethod
    def play_line(self, line: DialogueLine, on_complete: Optional[Callable[[], None]] = None) -> None:
        pass

    @abstractmethod
    def stop_line(self) -> None:
        pass

    @abstractmethod
    def is_line_playing(self) -> bool:
        pass

    @abstractmethod
    def update(self) -> None:
        """Poll playback; runs completion callbacks of finished lines"""
        pass

    @abstractmethod
    def play_countdown(self) -> None:
        pass

    @abstractmethod
    def play_watch(self) -> None:
        pass

    @abstractmethod
    def play_step(self, step_number: int) -> None:
        """Rising step tone; step_number starts at 1"""
        pass

    @abstractmethod
    def play_completion(self) -> None:
        pass

    @abstractmethod
    def play_error(self) -> None:
        pass

    @abstractmethod
    def cleanup(self) -> None:
        pass
