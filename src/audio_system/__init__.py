"""
Audio system - host narration and game sound effects
"""

from .dialogue_lines import Dialogue, DialogueLine
from .interfaces import ISoundController
from .mock_sound_controller import MockSoundController
from .sound_controller import GameSounds, SoundController

__all__ = [
    'Dialogue',
    'DialogueLine',
    'ISoundController',
    'MockSoundController',
    'GameSounds',
    'SoundController'
]
