"""
Sound Controller - narration and sound effects through pygame.mixer
"""

import enum
import os
from typing import Callable, Dict, Optional, TYPE_CHECKING

import pygame

from .dialogue_lines import DialogueLine
from .interfaces import ISoundController

if TYPE_CHECKING:
    from utils import ClassLogger, DelayedCallback, Scheduler


# Constants
SOUNDS_FOLDER = "sounds/"
VOICE_SUBFOLDER = "voice/"
STEPS_SUBFOLDER = "steps/"
STEP_SOUND_COUNT = 25


class GameSounds(enum.Enum):
    """Game sound effects - stores file names, loads sounds at startup"""
    COUNTDOWN_SOUND = "countdown.mp3"
    WATCH_SOUND = "watch.mp3"
    COMPLETION_SOUND = "completion.mp3"
    ERROR_SOUND = "error.mp3"

    def get_sound_path(self, sounds_folder: str = SOUNDS_FOLDER) -> str:
        """Get the full path to the sound file"""
        return os.path.join(sounds_folder, self.value)


def get_step_sound_path(step_number: int, sounds_folder: str = SOUNDS_FOLDER) -> str:
    """Path of the step tone for a 1-based step number"""
    return os.path.join(sounds_folder, STEPS_SUBFOLDER, f"step_{step_number:02d}.mp3")


class SoundController(ISoundController):
    """
    Plays host narration and game sound effects.

    Narration uses the mixer music channel: one voice file per dialogue
    line, completion detected by polling get_busy() from update(). A line
    without a voice file is "played" for its nominal duration on the
    scheduler instead, so the game flow never waits on missing audio.

    Effects are preloaded pygame Sound objects. Missing effect files are
    logged once at startup and then silently skipped.
    """

    def __init__(self, scheduler: 'Scheduler', logger: 'ClassLogger',
                 sounds_folder: str = SOUNDS_FOLDER, step_sound_count: int = STEP_SOUND_COUNT):
        """
        Initialize sound controller with pygame mixer and load effect files.

        Args:
            scheduler: Timer queue for the narration fallback
            logger: ClassLogger instance for logging
            sounds_folder: Root folder of effect and voice files
            step_sound_count: Number of step tones (step_01 .. step_NN)

        Raises:
            pygame.error: If the audio device cannot be opened
        """
        self.scheduler = scheduler
        self.logger = logger
        self.sounds_folder = sounds_folder
        self.voice_folder = os.path.join(sounds_folder, VOICE_SUBFOLDER)
        self.step_sound_count = step_sound_count

        self.mixer = pygame.mixer
        self.mixer.init()
        self.mixer.music.stop()

        self._sound_objects: Dict[GameSounds, pygame.mixer.Sound] = {}
        self._step_sounds: Dict[int, pygame.mixer.Sound] = {}
        self._load_sounds()

        # Narration state
        self._current_line: Optional[DialogueLine] = None
        self._on_line_complete: Optional[Callable[[], None]] = None
        self._line_uses_music = False
        self._line_timer: Optional['DelayedCallback'] = None

    def _load_sound(self, path: str) -> Optional[pygame.mixer.Sound]:
        if not os.path.exists(path):
            return None
        try:
            return pygame.mixer.Sound(path)
        except pygame.error as e:
            self.logger.warning(f"Failed to load sound {path}: {e}")
            return None

    def _load_sounds(self) -> None:
        missing_files = []

        for sound_enum in GameSounds:
            sound_path = sound_enum.get_sound_path(self.sounds_folder)
            sound = self._load_sound(sound_path)
            if sound is None:
                missing_files.append(sound_path)
            else:
                self._sound_objects[sound_enum] = sound

        for step_number in range(1, self.step_sound_count + 1):
            sound_path = get_step_sound_path(step_number, self.sounds_folder)
            sound = self._load_sound(sound_path)
            if sound is None:
                missing_files.append(sound_path)
            else:
                self._step_sounds[step_number] = sound

        if missing_files:
            self.logger.warning(f"⚠️ {len(missing_files)} sound files missing, those effects are muted: {missing_files}")
        self.logger.info(f"Loaded {len(self._sound_objects)} effects and {len(self._step_sounds)} step tones")

    # ------------------------------------------------------------------
    # Narration
    # ------------------------------------------------------------------

    def play_line(self, line: DialogueLine, on_complete: Optional[Callable[[], None]] = None) -> None:
        """
        Start a narration line.

        Args:
            line: Dialogue line to speak
            on_complete: Called from update() when the line has finished
        """
        self.stop_line()
        self._current_line = line
        self._on_line_complete = on_complete

        if line.sfx_only:
            self.logger.info(f"[HOST SFX]: {line.id}")
        else:
            self.logger.info(f"[HOST]: {line.text}")

        voice_path = os.path.join(self.voice_folder, line.file_name)
        if os.path.exists(voice_path):
            try:
                self.mixer.music.load(voice_path)
                self.mixer.music.set_volume(1.0)
                self.mixer.music.play()
                self._line_uses_music = True
                return
            except pygame.error as e:
                self.logger.warning(f"Failed to play voice line {voice_path}: {e}")

        self._line_timer = self.scheduler.call_later(line.duration, self._finish_line, name=f"line:{line.id}")

    def _finish_line(self) -> None:
        callback = self._on_line_complete
        self._current_line = None
        self._on_line_complete = None
        self._line_uses_music = False
        self._line_timer = None
        if callback:
            callback()

    def stop_line(self) -> None:
        """Stop narration; the pending completion callback is dropped"""
        if self._line_timer is not None:
            self._line_timer.cancel()
            self._line_timer = None
        if self._line_uses_music:
            self.mixer.music.stop()
            self._line_uses_music = False
        self._current_line = None
        self._on_line_complete = None

    def is_line_playing(self) -> bool:
        return self._current_line is not None

    def update(self) -> None:
        if self._line_uses_music and not self.mixer.music.get_busy():
            self._finish_line()

    # ------------------------------------------------------------------
    # Effects
    # ------------------------------------------------------------------

    def play_sound_with_volume(self, sound: GameSounds, volume: float = 1.0) -> Optional[pygame.mixer.Channel]:
        """
        Play a game sound with specified volume.

        Returns:
            pygame.mixer.Channel, or None if the sound file is missing
        """
        sound_obj = self._sound_objects.get(sound)
        if sound_obj is None:
            return None
        sound_obj.set_volume(volume)
        return sound_obj.play()

    def play_countdown(self) -> None:
        self.play_sound_with_volume(GameSounds.COUNTDOWN_SOUND)

    def play_watch(self) -> None:
        self.play_sound_with_volume(GameSounds.WATCH_SOUND)

    def play_completion(self) -> None:
        self.play_sound_with_volume(GameSounds.COMPLETION_SOUND)

    def play_error(self) -> None:
        self.play_sound_with_volume(GameSounds.ERROR_SOUND)

    def play_step(self, step_number: int) -> None:
        # Paths longer than the tone set repeat the highest tone
        step_number = max(1, min(step_number, self.step_sound_count))
        sound_obj = self._step_sounds.get(step_number)
        if sound_obj is not None:
            sound_obj.play()

    def cleanup(self) -> None:
        """Stop all audio and release the audio device"""
        try:
            self.stop_line()
            self.mixer.stop()
            self.mixer.quit()
            self.logger.info("Sound controller cleaned up")
        except pygame.error as e:
            self.logger.warning(f"Sound cleanup failed: {e}")
