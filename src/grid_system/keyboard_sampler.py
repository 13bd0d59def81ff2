"""
Keyboard head sampler for playing without a headset
"""

import sys
import select
import termios
import tty
from typing import List

from .grid_types import Collider, ColliderSample, Vec3
from .interfaces import IColliderSampler
from .scripted_sampler import HEAD_COLLIDER


class KeyboardHeadSampler(IColliderSampler):
    """
    Moves a virtual head over the floor with W/A/S/D.

    Works over SSH using stdin (non-blocking select in raw mode).

    Keys:
    - W / S: step away from / toward the player start (-Z / +Z)
    - A / D: step left / right (-X / +X)
    - R: return to the start position
    - Space: log the current head position

    Example:
        sampler = KeyboardHeadSampler(start_position=Vec3(0, 160, 80), step_cm=55, logger=logger)
    """

    def __init__(self,
                 start_position: Vec3,
                 step_cm: float,
                 logger,
                 head: Collider = HEAD_COLLIDER):
        """
        Initialize keyboard sampler.

        Args:
            start_position: World position of the head before any key press
            step_cm: Distance moved per key press (one tile spacing feels natural)
            logger: ClassLogger instance for logging
            head: Collider reported for the head
        """
        if step_cm <= 0:
            raise ValueError("step_cm must be positive")

        self._start_position = start_position
        self._position = start_position
        self._step = step_cm
        self._logger = logger
        self._head = head

        self._stdin_available = False
        self._original_terminal_settings = None
        self._raw_mode_enabled = False

    def _check_stdin_available(self) -> bool:
        try:
            if not sys.stdin.isatty():
                return False
            select.select([sys.stdin], [], [], 0)
            return True
        except (OSError, ValueError):
            return False

    def _enable_raw_mode(self) -> bool:
        try:
            self._original_terminal_settings = termios.tcgetattr(sys.stdin)
            tty.setraw(sys.stdin.fileno())
            self._raw_mode_enabled = True
            return True
        except termios.error as e:
            self._logger.warning(f"Could not enable raw terminal mode: {e}")
            return False

    def _disable_raw_mode(self) -> None:
        if self._raw_mode_enabled and self._original_terminal_settings:
            try:
                termios.tcsetattr(sys.stdin.fileno(), termios.TCSADRAIN, self._original_terminal_settings)
            except termios.error as e:
                self._logger.warning(f"Could not restore terminal settings: {e}")
            self._raw_mode_enabled = False

    def setup(self) -> None:
        """Initialize keyboard input"""
        self._stdin_available = self._check_stdin_available()

        if not self._stdin_available:
            self._logger.error("❌ Keyboard input not available (stdin not accessible or not a TTY)")
            raise RuntimeError("Keyboard input not available")

        if not self._enable_raw_mode():
            raise RuntimeError("Failed to enable raw terminal mode")

        self._logger.info("🎮 Keyboard head sampler initialized")
        self._logger.info(f"   W/A/S/D move the head {self._step:.0f}cm, R resets, Space shows position")

    def _check_keyboard_input(self) -> None:
        if not self._stdin_available:
            return

        try:
            while select.select([sys.stdin], [], [], 0) == ([sys.stdin], [], []):
                key = sys.stdin.read(1).lower()
                offset = {
                    'w': Vec3(0, 0, -self._step),
                    's': Vec3(0, 0, self._step),
                    'a': Vec3(-self._step, 0, 0),
                    'd': Vec3(self._step, 0, 0),
                }.get(key)

                if offset is not None:
                    self._position = self._position + offset
                    self._logger.debug(f"🎮 Head → {self._position}")
                elif key == 'r':
                    self._position = self._start_position
                    self._logger.info("🎮 Head back at start position")
                elif key == ' ':
                    self._logger.info(f"Head position: {self._position}")
        except OSError as e:
            self._logger.warning(f"Keyboard input error: {e}")

    def sample(self) -> List[ColliderSample]:
        self._check_keyboard_input()
        return [ColliderSample(self._head, self._position)]

    def cleanup(self) -> None:
        """Restore terminal"""
        self._disable_raw_mode()
        self._logger.info("Keyboard head sampler cleaned up")
