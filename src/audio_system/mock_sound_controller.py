"""
Mock Sound Controller - no audio device, narration simulated on the scheduler
"""

from typing import Callable, List, Optional, TYPE_CHECKING

from .dialogue_lines import DialogueLine
from .interfaces import ISoundController

if TYPE_CHECKING:
    from utils import ClassLogger, DelayedCallback, Scheduler


class MockSoundController(ISoundController):
    """
    SoundController stand-in that performs no audio operations.

    Each narration line "plays" for its nominal duration, then its
    completion callback runs on the scheduler, so game timing matches a
    real run. Everything played is recorded for inspection.
    """

    def __init__(self, scheduler: 'Scheduler', logger: 'ClassLogger', speed: float = 1.0):
        """
        Initialize mock sound controller.

        Args:
            scheduler: Timer queue that completes simulated lines
            logger: ClassLogger instance for logging
            speed: Playback speed factor (2.0 halves every line)
        """
        if speed <= 0:
            raise ValueError("speed must be positive")

        self.scheduler = scheduler
        self.logger = logger
        self.speed = speed

        self.lines_played: List[DialogueLine] = []
        self.effects_played: List[str] = []

        self._current_line: Optional[DialogueLine] = None
        self._line_timer: Optional['DelayedCallback'] = None

        self.logger.info("🔇 MockSoundController initialized (audio disabled)")

    def play_line(self, line: DialogueLine, on_complete: Optional[Callable[[], None]] = None) -> None:
        self.stop_line()
        self._current_line = line
        self.lines_played.append(line)
        self.logger.info(f"Mock [HOST]: {line.text or line.id}")

        def finish() -> None:
            self._current_line = None
            self._line_timer = None
            if on_complete:
                on_complete()

        self._line_timer = self.scheduler.call_later(line.duration / self.speed, finish, name=f"line:{line.id}")

    def stop_line(self) -> None:
        if self._line_timer is not None:
            self._line_timer.cancel()
            self._line_timer = None
        self._current_line = None

    def is_line_playing(self) -> bool:
        return self._current_line is not None

    def update(self) -> None:
        """Mock: completion is driven by the scheduler"""
        pass

    def _effect(self, name: str) -> None:
        self.effects_played.append(name)
        self.logger.debug(f"Mock: Playing sound {name}")

    def play_countdown(self) -> None:
        self._effect("countdown")

    def play_watch(self) -> None:
        self._effect("watch")

    def play_step(self, step_number: int) -> None:
        self._effect(f"step_{step_number:02d}")

    def play_completion(self) -> None:
        self._effect("completion")

    def play_error(self) -> None:
        self._effect("error")

    def cleanup(self) -> None:
        self.stop_line()
        self.logger.info("Mock: Sound controller cleaned up")
