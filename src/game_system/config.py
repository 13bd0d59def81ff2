"""
Game system configuration
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class GridConfig:
    """Floor grid geometry and look (lengths in centimeters)"""
    rows: int = 5
    columns: int = 5
    tile_size: float = 50.0
    tile_gap: float = 5.0
    tile_height: float = 1.0

    # Detection column at each tile center: narrow, tall and thin
    triggers_enabled: bool = True
    trigger_width: float = 10.0
    trigger_depth: float = 10.0
    trigger_height: float = 400.0

    default_alpha: float = 0.5
    visible_alpha: float = 0.77
    dimmed_alpha: float = 0.15

    # Sequential reveal pacing (seconds)
    tile_reveal_delay: float = 0.5
    post_reveal_delay: float = 0.5

    @property
    def cell_spacing(self) -> float:
        return self.tile_size + self.tile_gap


@dataclass
class PlayerConfig:
    """Head collider and start zone"""
    head_collider_size: float = 10.0
    start_zone_size: float = 40.0
    start_zone_height: float = 400.0
    start_zone_offset: float = 80.0  # From the start tile toward the player
    head_height: float = 160.0       # Head above the floor in keyboard/demo play


@dataclass
class TimingConfig:
    """Fixed phase delays in seconds"""
    start_focus_delay: float = 1.5
    welcome_pause: float = 0.5
    countdown_from: int = 3
    countdown_interval: float = 1.0
    watch_cue_duration: float = 1.0
    memorize_tick: float = 1.0
    wrong_step_grace: float = 1.5
    idle_prompt_delay: float = 15.0
    result_delay: float = 2.0           # Completed/failed pause when there is no narration
    game_complete_exit_delay: float = 5.0
    go_message_duration: float = 1.0


@dataclass
class LevelConfig:
    """Level progression: path length grows by a fixed increment up to a cap"""
    base_path_length: int = 5
    path_increment: int = 2
    max_path_length: int = 25
    memorize_time: int = 5

    @property
    def max_level(self) -> int:
        """First level whose path reaches the cap"""
        return (self.max_path_length - self.base_path_length) // self.path_increment + 1

    def get_path_length(self, level: int) -> int:
        length = self.base_path_length + (level - 1) * self.path_increment
        return min(length, self.max_path_length)


@dataclass
class LevelSettings:
    """Resolved settings for one level"""
    level: int
    grid_rows: int
    grid_columns: int
    path_length: int
    memorize_time: int


@dataclass
class ScoreConfig:
    correct_step_points: int = 100
    wrong_step_penalty: int = 25
    completion_bonus: int = 500


@dataclass
class AudioConfig:
    """Sound output"""
    use_mock_audio: bool = False
    mock_speed: float = 1.0          # >1 shortens simulated narration
    step_sound_count: int = 25


@dataclass
class DebugConfig:
    """Diagnostics - never enable in a real session"""
    skip_path_check: bool = False
    log_board: bool = True


@dataclass
class GameConfig:
    """Main game system configuration"""

    grid: GridConfig = field(default_factory=GridConfig)
    player: PlayerConfig = field(default_factory=PlayerConfig)
    timing: TimingConfig = field(default_factory=TimingConfig)
    levels: LevelConfig = field(default_factory=LevelConfig)
    scoring: ScoreConfig = field(default_factory=ScoreConfig)
    audio: AudioConfig = field(default_factory=AudioConfig)
    debug: DebugConfig = field(default_factory=DebugConfig)

    # First-ever launch greets the player before the first start zone
    host_intro_on_first_launch: bool = False

    # Paths
    sounds_folder: str = "sounds/"
    save_path: Optional[str] = "saves/progress.json"

    # Timing configuration
    frame_duration_ms: float = 20.0  # 50 FPS

    @property
    def target_fps(self) -> float:
        """Target FPS derived from frame duration"""
        return 1000.0 / self.frame_duration_ms

    @property
    def max_level(self) -> int:
        return self.levels.max_level

    def get_level_settings(self, level: int) -> LevelSettings:
        return LevelSettings(
            level=level,
            grid_rows=self.grid.rows,
            grid_columns=self.grid.columns,
            path_length=self.levels.get_path_length(level),
            memorize_time=self.levels.memorize_time
        )

    def validate(self) -> None:
        """Basic validation of configuration"""
        if self.grid.rows <= 0 or self.grid.columns <= 0:
            raise ValueError(f"Grid must have at least one row and column, got {self.grid.columns}x{self.grid.rows}")

        if self.grid.tile_size <= 0:
            raise ValueError(f"Tile size must be positive, got {self.grid.tile_size}")

        if self.grid.tile_gap < 0:
            raise ValueError(f"Tile gap cannot be negative, got {self.grid.tile_gap}")

        if self.grid.trigger_width >= self.grid.tile_size or self.grid.trigger_depth >= self.grid.tile_size:
            raise ValueError("Trigger volume must be narrower than a tile")

        for name in ('default_alpha', 'visible_alpha', 'dimmed_alpha'):
            alpha = getattr(self.grid, name)
            if not (0.0 <= alpha <= 1.0):
                raise ValueError(f"{name} must be 0-1, got {alpha}")

        if self.levels.base_path_length < 2:
            raise ValueError("Paths need at least a start and an end tile")

        if self.levels.path_increment <= 0:
            raise ValueError("Path increment must be positive")

        if self.levels.max_path_length > self.grid.rows * self.grid.columns:
            raise ValueError(
                f"Max path length {self.levels.max_path_length} exceeds "
                f"{self.grid.rows * self.grid.columns} grid cells"
            )

        if self.levels.memorize_time <= 0:
            raise ValueError("Memorize time must be positive")

        if self.timing.countdown_from < 0:
            raise ValueError("Countdown cannot start below zero")

        if self.audio.mock_speed <= 0:
            raise ValueError(f"Mock audio speed must be positive, got {self.audio.mock_speed}")

        if self.frame_duration_ms <= 0:
            raise ValueError("Frame duration must be positive")
