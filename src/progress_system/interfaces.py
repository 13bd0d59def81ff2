"""
Abstract interface for persisted player progress
"""

from abc import ABC, abstractmethod


class IProgressStore(ABC):
    """
    Persisted level progress consulted by the game flow.

    The store is authoritative for the current level: when it disagrees
    with the game's in-memory level, the store wins.
    """

    @abstractmethod
    def get_current_level(self) -> int:
        pass

    @abstractmethod
    def get_highest_level(self) -> int:
        pass

    @abstractmethod
    def on_level_completed(self, level: int, first_try: bool) -> None:
        """Record a win; the current level becomes level + 1"""
        pass

    @abstractmethod
    def on_level_failed(self, level: int) -> None:
        """Record a failed attempt on a level"""
        pass

    @abstractmethod
    def get_retries_for_level(self, level: int) -> int:
        pass

    @abstractmethod
    def get_total_retries(self) -> int:
        pass
