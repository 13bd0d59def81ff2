"""
Game flow data types - phases, timer slots and round bookkeeping
"""

import enum
from dataclasses import dataclass


class GamePhase(str, enum.Enum):
    """Every phase of a session, in rough play order"""
    IDLE = "idle"
    PLACING_GRID = "placing_grid"
    HOST_INTRO = "host_intro"
    GRID_INTRO = "grid_intro"
    WAITING_IN_START_ZONE = "waiting_in_start_zone"
    COUNTDOWN = "countdown"
    MEMORIZE = "memorize"
    PLAYING = "playing"
    COMPLETED = "completed"
    FAILED = "failed"


class TimerSlot(str, enum.Enum):
    """Named timer handles owned by the game manager (one pending timer each)"""
    INTRO = "intro"
    COUNTDOWN = "countdown"
    MEMORIZE = "memorize"
    IDLE_PROMPT = "idle_prompt"
    RESULT = "result"


@dataclass
class GameRoundState:
    """Mutable per-session bookkeeping"""
    current_level: int = 1
    score: int = 0
    wrong_steps: int = 0
    memorize_time_remaining: int = 0
    is_first_game: bool = True
    current_level_retried: bool = False


@dataclass(frozen=True)
class GameSnapshot:
    """Read-only view returned by GameManager.get_game_state()"""
    state: GamePhase
    level: int
    score: int
    wrong_steps: int
    memorize_time_remaining: int


@dataclass(frozen=True)
class RoundResult:
    """Payload of the game-complete / game-failed notifications"""
    level: int
    score: int
    wrong_steps: int
    progress: int
    path_length: int
