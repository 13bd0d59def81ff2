"""
Game System - Phase state machine driving the memory path game

This module provides the round flow: grid placement, countdown, path
reveal, the walking phase and the completed/failed results.
"""

from .states import GameState
from .game_manager import GameManager
from .game_types import GamePhase, GameRoundState, GameSnapshot, RoundResult, TimerSlot
from .states import (IdleState, PlacingGridState, HostIntroState, GridIntroState,
                     WaitingInStartZoneState, CountdownState, MemorizeState,
                     PlayingState, CompletedState, FailedState)
from .interfaces import ICountdownDisplay, IEffects, IMainMenu, IStartZoneVisual
from .config import (GameConfig, GridConfig, PlayerConfig, TimingConfig, LevelConfig,
                     LevelSettings, ScoreConfig, AudioConfig, DebugConfig)

__all__ = [
    # Base classes
    "GameState",
    "GameManager",
    # Types
    "GamePhase",
    "GameRoundState",
    "GameSnapshot",
    "RoundResult",
    "TimerSlot",
    # States
    "IdleState",
    "PlacingGridState",
    "HostIntroState",
    "GridIntroState",
    "WaitingInStartZoneState",
    "CountdownState",
    "MemorizeState",
    "PlayingState",
    "CompletedState",
    "FailedState",
    # Presentation interfaces
    "ICountdownDisplay",
    "IEffects",
    "IMainMenu",
    "IStartZoneVisual",
    # Configuration
    "GameConfig",
    "GridConfig",
    "PlayerConfig",
    "TimingConfig",
    "LevelConfig",
    "LevelSettings",
    "ScoreConfig",
    "AudioConfig",
    "DebugConfig"
]
