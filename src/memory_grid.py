#!/usr/bin/env python3
"""
Memory Grid - walk-the-path memory game

Main application for the Memory Grid floor game. A grid of tiles is placed
on the floor, a path is revealed tile by tile, and the player must walk it
from memory. Runs in a terminal: the board is drawn in the log, the head
is moved with W/A/S/D (or walks itself in demo mode when there is no TTY).
"""

import sys
import logging
import random
import signal
import atexit
from pathlib import Path
from typing import Optional

# MOCK AUDIO - Set to True to bypass audio hardware
USE_MOCK_AUDIO = False

# Global logger reference for signal handlers
_global_logger = None


def emergency_flush_and_log(sig=None, frame=None):
    """Emergency handler - flush logs before crash"""
    if _global_logger:
        try:
            if sig:
                _global_logger.critical(f"⚠️  SIGNAL RECEIVED: {sig} - Process terminating")
            _global_logger.flush()
        except Exception:
            pass

    # Exit after logging
    if sig == signal.SIGINT:
        # CTRL+C - exit cleanly
        sys.exit(0)
    elif sig:
        # Other signals - exit with error code
        sys.exit(1)


# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent))

try:
    import pygame
    from audio_system import MockSoundController, SoundController
    from game_system import GameManager, GamePhase
    from game_system.config import (GameConfig, GridConfig, PlayerConfig, TimingConfig,
                                    LevelConfig, AudioConfig, DebugConfig)
    from grid_system import (ConsoleTileRenderer, GridManager, KeyboardHeadSampler,
                             OverlapReader, PathGenerator, ScriptedColliderSampler, Vec3)
    from grid_system.path_generator import get_neighbors
    from player_system import PlayerTracker
    from progress_system import SaveManager
    from utils import HybridLogger, Scheduler
except ImportError as e:
    import traceback
    print(f"❌ Import error: {e}")
    print("\nFull traceback:")
    traceback.print_exc()
    print("\nMake sure required libraries are installed")
    sys.exit(1)


def create_memory_grid_config() -> GameConfig:
    """Create default configuration for a 5x5 floor grid"""
    return GameConfig(
        grid=GridConfig(
            rows=5,
            columns=5,
            tile_size=50.0,
            tile_gap=5.0,
            trigger_width=10.0,
            trigger_depth=10.0,
            trigger_height=400.0
        ),
        player=PlayerConfig(
            start_zone_size=40.0,
            start_zone_offset=80.0,
            head_height=160.0
        ),
        timing=TimingConfig(),
        levels=LevelConfig(
            base_path_length=5,
            path_increment=2,
            max_path_length=25,
            memorize_time=5
        ),
        audio=AudioConfig(use_mock_audio=USE_MOCK_AUDIO),
        debug=DebugConfig(skip_path_check=False),
        host_intro_on_first_launch=False,
        sounds_folder="sounds/",
        save_path="saves/progress.json",
        frame_duration_ms=20  # 50 FPS
    )


def get_standby_position(config: GameConfig) -> Vec3:
    """Head position two steps in front of the start row (outside the start zone)"""
    spacing = config.grid.cell_spacing
    return Vec3(0.0, config.player.head_height, config.grid.tile_size / 2 + 2 * spacing)


class DemoWalker:
    """
    Walks the head through the game when nobody is at the keyboard.

    Steps into the start zone when asked to, then walks the path one tile
    per interval, sometimes taking a wrong turn.
    """

    def __init__(self, game_manager: GameManager, sampler: ScriptedColliderSampler,
                 scheduler: Scheduler, logger, step_interval: float = 1.0,
                 mistake_chance: float = 0.2, rng: Optional[random.Random] = None):
        self.game_manager = game_manager
        self.sampler = sampler
        self.scheduler = scheduler
        self.logger = logger
        self.step_interval = step_interval
        self.mistake_chance = mistake_chance
        self.rng = rng or random.Random()
        self._timer = None
        self._steps = []

        game_manager.on_state_change(self._on_state_change)

    def _head_at(self, floor_position: Vec3) -> Vec3:
        return floor_position.with_y(self.game_manager.floor_y + self.game_manager.config.player.head_height)

    def _schedule(self, callback) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = self.scheduler.call_later(self.step_interval, callback, name="demo_walker")

    def _on_state_change(self, old_phase: GamePhase, new_phase: GamePhase) -> None:
        if new_phase == GamePhase.WAITING_IN_START_ZONE:
            self._schedule(self._enter_start_zone)
        elif new_phase == GamePhase.PLAYING:
            self._steps = self._plan_walk()
            self._schedule(self._take_step)
        elif self._timer is not None:
            self._timer.cancel()

    def _enter_start_zone(self) -> None:
        position = self.game_manager.get_start_zone_position()
        if position is not None:
            self.logger.info("🚶 Demo: stepping into the start zone")
            self.sampler.move_to(self._head_at(position))

    def _plan_walk(self):
        grid = self.game_manager.grid_manager
        path = grid.get_path()
        if len(path) > 2 and self.rng.random() < self.mistake_chance:
            index = self.rng.randrange(1, len(path) - 1)
            wrong = [p for p in get_neighbors(path[index - 1], grid.rows, grid.columns)
                     if p not in path[:index + 1]]
            if wrong:
                return path[:index] + [self.rng.choice(wrong)]
        return path

    def _take_step(self) -> None:
        if not self._steps:
            return
        target = self._steps.pop(0)
        position = self.game_manager.grid_manager.get_tile_world_position(target.x, target.z)
        if position is None:
            return
        self.sampler.move_to(self._head_at(position))
        if self._steps:
            self._schedule(self._take_step)


def create_game_system(config: GameConfig, app_logger, interactive: bool = True):
    """
    Create and configure the complete game system using provided config.

    Args:
        config: GameConfig instance with all system configuration
        app_logger: ClassLogger instance for logging initialization steps
        interactive: Keyboard-driven head (False = demo walker)

    Returns:
        GameManager: Configured game manager ready to run
    """
    # Validate the provided configuration
    config.validate()

    # Create class loggers for components
    game_manager_logger = app_logger.create_class_logger("GameManager", logging.INFO)
    grid_logger = app_logger.create_class_logger("GridManager", logging.INFO)
    path_logger = app_logger.create_class_logger("PathGenerator", logging.INFO)
    tracker_logger = app_logger.create_class_logger("PlayerTracker", logging.INFO)
    overlap_logger = app_logger.create_class_logger("OverlapReader", logging.INFO)
    sampler_logger = app_logger.create_class_logger("HeadSampler", logging.INFO)
    board_logger = app_logger.create_class_logger("Board", logging.INFO)
    sound_controller_logger = app_logger.create_class_logger("SoundController", logging.INFO)
    save_logger = app_logger.create_class_logger("SaveManager", logging.INFO)

    try:
        scheduler = Scheduler()

        renderer = ConsoleTileRenderer(board_logger) if config.debug.log_board else None
        grid_manager = GridManager(
            config=config.grid,
            scheduler=scheduler,
            logger=grid_logger,
            path_generator=PathGenerator(logger=path_logger),
            renderer=renderer
        )

        player_tracker = PlayerTracker(
            grid_manager=grid_manager,
            logger=tracker_logger,
            skip_path_check=config.debug.skip_path_check
        )

        standby = get_standby_position(config)
        if interactive:
            head_sampler = KeyboardHeadSampler(
                start_position=standby,
                step_cm=config.grid.cell_spacing,
                logger=sampler_logger
            )
        else:
            head_sampler = ScriptedColliderSampler()
            head_sampler.move_to(standby)

        overlap_reader = OverlapReader(
            sampler=head_sampler,
            grid_manager=grid_manager,
            logger=overlap_logger
        )

        # Create sound controller
        if config.audio.use_mock_audio:
            app_logger.info("🔇 Using MockSoundController (audio hardware disabled)")
            sound_controller = MockSoundController(scheduler, sound_controller_logger, config.audio.mock_speed)
        else:
            try:
                sound_controller = SoundController(
                    scheduler=scheduler,
                    logger=sound_controller_logger,
                    sounds_folder=config.sounds_folder,
                    step_sound_count=config.audio.step_sound_count
                )
            except pygame.error as e:
                app_logger.warning(f"Audio device unavailable ({e}) - falling back to MockSoundController")
                sound_controller = MockSoundController(scheduler, sound_controller_logger, config.audio.mock_speed)

        save_manager = SaveManager(config.save_path, save_logger)

        # Create game manager (starts with IdleState by default)
        game_manager = GameManager(
            config=config,
            grid_manager=grid_manager,
            player_tracker=player_tracker,
            scheduler=scheduler,
            logger=game_manager_logger,
            sound_controller=sound_controller,
            progress_store=save_manager,
            overlap_reader=overlap_reader
        )

        if not interactive:
            # Lives on through its state-change listener
            DemoWalker(game_manager, head_sampler, scheduler, app_logger.create_class_logger("DemoWalker"))

        app_logger.info("Memory Grid system initialized successfully")
        app_logger.info(f"Grid: {config.grid.columns}x{config.grid.rows} tiles, "
                        f"{config.grid.cell_spacing:.0f}cm spacing, {config.max_level} levels")

        return game_manager

    except Exception as e:
        app_logger.error(f"Failed to initialize Memory Grid system: {e}", exception=e)
        raise


def main():
    """
    Main function - sets up and runs the Memory Grid game.
    """
    # Initialize main logger first
    main_logger = HybridLogger("MemoryGrid")
    app_logger = main_logger.get_class_logger("MemoryGrid")

    # Set global logger for signal handlers
    global _global_logger
    _global_logger = app_logger

    # Register signal handlers for graceful shutdown
    signal.signal(signal.SIGTERM, emergency_flush_and_log)  # Termination signal
    signal.signal(signal.SIGINT, emergency_flush_and_log)   # Ctrl+C
    if hasattr(signal, 'SIGHUP'):
        signal.signal(signal.SIGHUP, emergency_flush_and_log)  # Hangup signal

    # Register exit handler
    atexit.register(lambda: emergency_flush_and_log())

    app_logger.info("🟩 MEMORY GRID")

    # Create configuration
    config = create_memory_grid_config()
    interactive = sys.stdin.isatty()

    app_logger.info(f"Game settings: {config.frame_duration_ms}ms frame duration ({config.target_fps:.1f} FPS)")
    app_logger.info(f"Input: {'keyboard (W/A/S/D)' if interactive else 'demo walker'}")
    app_logger.info(f"Progress file: {config.save_path}")

    try:
        # Create game system using the configured values
        game_manager = create_game_system(config, app_logger, interactive=interactive)

        app_logger.info("✅ System initialized successfully!")
        app_logger.info("🚀 Starting Memory Grid...")

        # Anchor the grid at the origin, player standing in front of it
        game_manager.begin_placement()
        game_manager.on_grid_placed(Vec3(0.0, 0.0, 0.0), floor_y=0.0,
                                    player_position=get_standby_position(config))

        # Run the game with automatic frame limiting
        game_manager.run_game_loop()

    except KeyboardInterrupt:
        app_logger.info("⏹️  Memory Grid stopped by user")
        app_logger.flush()
    except Exception as e:
        app_logger.error(f"Memory Grid system error: {e}", exception=e)
        app_logger.flush()
        raise
    finally:
        # Cleanup will be handled by GameManager.stop()
        app_logger.info("✅ Memory Grid shut down")
        app_logger.flush()
        main_logger.cleanup()


if __name__ == "__main__":
    main()
