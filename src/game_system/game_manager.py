"""
Main game manager - orchestrates the phase state machine, timers and narration
"""

import random
import time
from collections import deque
from typing import Callable, Deque, Dict, List, Optional, Tuple, TYPE_CHECKING

from audio_system.dialogue_lines import Dialogue, DialogueLine
from grid_system.grid_types import Vec3
from grid_system.tile_trigger import StartZoneVolume
from utils import OnceInMs
from .config import GameConfig, LevelSettings
from .game_types import GamePhase, GameRoundState, GameSnapshot, TimerSlot
from .states import GameState, IdleState, STATE_CLASSES

try:
    import psutil
    PSUTIL_AVAILABLE = True
except ImportError:
    PSUTIL_AVAILABLE = False

if TYPE_CHECKING:
    from audio_system.interfaces import ISoundController
    from grid_system.grid_manager import GridManager
    from grid_system.overlap_reader import OverlapReader
    from player_system.player_tracker import PlayerTracker
    from progress_system.interfaces import IProgressStore
    from utils import ClassLogger, DelayedCallback, Scheduler
    from .interfaces import ICountdownDisplay, IEffects, IMainMenu, IStartZoneVisual


class GameManager:
    """
    Main game manager that orchestrates the entire game system.

    Responsibilities:
    - Own the phase state machine and apply transitions in order
    - Own the named phase timers and the narration helper
    - Route step and start-zone events to the current state
    - Maintain consistent frame timing

    Every collaborator is passed in; the optional presentation pieces
    (sound, progress store, countdown display, start-zone visual,
    effects, main menu) may be None and the flow degrades around them.
    """

    EVENTS = (
        'state_change',
        'countdown_tick',
        'memorize_tick',
        'score_update',
        'game_complete',
        'game_failed',
    )

    def __init__(self,
                 config: GameConfig,
                 grid_manager: 'GridManager',
                 player_tracker: 'PlayerTracker',
                 scheduler: 'Scheduler',
                 logger: 'ClassLogger',
                 sound_controller: Optional['ISoundController'] = None,
                 progress_store: Optional['IProgressStore'] = None,
                 overlap_reader: Optional['OverlapReader'] = None,
                 countdown_display: Optional['ICountdownDisplay'] = None,
                 start_zone_visual: Optional['IStartZoneVisual'] = None,
                 effects: Optional['IEffects'] = None,
                 main_menu: Optional['IMainMenu'] = None,
                 rng: Optional[random.Random] = None):
        """
        Initialize the game manager.

        Args:
            config: Validated game configuration
            grid_manager: Tile grid, path and tile triggers
            player_tracker: Step validator fed by the tile triggers
            scheduler: Timer queue run once per frame
            logger: Logger for debugging and monitoring
            sound_controller: Narration and effects (None = silent, instant narration)
            progress_store: Persisted level progress (None = session only)
            overlap_reader: Collider sampling (None = events injected by the caller)
            countdown_display: External 3-2-1 display (None = internal timer)
            start_zone_visual: Start-zone marker
            effects: Celebration effects
            main_menu: Menu shown on exit
            rng: Random source for dialogue variants
        """
        self.config = config
        self.grid_manager = grid_manager
        self.player_tracker = player_tracker
        self.scheduler = scheduler
        self.logger = logger
        self.sound_controller = sound_controller
        self.progress_store = progress_store
        self.overlap_reader = overlap_reader
        self.countdown_display = countdown_display
        self.start_zone_visual = start_zone_visual
        self.effects = effects
        self.main_menu = main_menu
        self.rng = rng or random.Random()

        self.target_frame_duration = config.frame_duration_ms / 1000.0
        self.running = True

        self.round = GameRoundState()
        self.round.current_level = self.get_stored_level()
        self.floor_y = 0.0
        self.player_position: Optional[Vec3] = None
        self._placement: Optional[Tuple[Vec3, float, float]] = None

        self._timers: Dict[TimerSlot, 'DelayedCallback'] = {}
        self._listeners: Dict[str, List[Callable]] = {name: [] for name in self.EVENTS}
        self._pending_phases: Deque[GamePhase] = deque()
        self._transitioning = False

        # Memory monitoring using OnceInMs
        self._memory_monitor = OnceInMs(60000, clock=scheduler.now)  # Log every 60 seconds
        self._process = psutil.Process() if PSUTIL_AVAILABLE else None

        self.start_zone: Optional[StartZoneVolume] = None
        if overlap_reader is not None:
            player = config.player
            self.start_zone = StartZoneVolume(
                Vec3(),
                Vec3(player.start_zone_size / 2, player.start_zone_height / 2, player.start_zone_size / 2),
                on_enter=player_tracker.handle_start_zone_enter,
                on_exit=player_tracker.handle_start_zone_exit
            )
            self.start_zone.enabled = False
            overlap_reader.add_volume(self.start_zone)
        else:
            self.logger.warning("No overlap reader - tile and start-zone events must be injected")

        if sound_controller is None:
            self.logger.warning("No sound controller - narration completes instantly")
        if progress_store is None:
            self.logger.warning("No progress store - level progress is kept for this session only")

        player_tracker.on_correct_step(self._on_correct_step)
        player_tracker.on_wrong_step(self._on_wrong_step)
        player_tracker.on_path_completed(self._on_path_completed)
        player_tracker.on_start_zone_entered(self._on_start_zone_entered)
        player_tracker.on_start_zone_exited(self._on_start_zone_exited)

        # State management - create initial IdleState
        self.current_state: GameState = IdleState(self)

        # Call on_enter for initial state
        self.current_state.on_enter()

        self.logger.info(f"GameManager initialized: {config.frame_duration_ms}ms frame duration, "
                         f"level {self.round.current_level}/{config.max_level}")

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def on_state_change(self, callback: Callable[[GamePhase, GamePhase], None]) -> None:
        self._listeners['state_change'].append(callback)

    def on_countdown_tick(self, callback: Callable[[int], None]) -> None:
        self._listeners['countdown_tick'].append(callback)

    def on_memorize_tick(self, callback: Callable[[int], None]) -> None:
        self._listeners['memorize_tick'].append(callback)

    def on_score_update(self, callback: Callable[[int], None]) -> None:
        self._listeners['score_update'].append(callback)

    def on_game_complete(self, callback: Callable) -> None:
        self._listeners['game_complete'].append(callback)

    def on_game_failed(self, callback: Callable) -> None:
        self._listeners['game_failed'].append(callback)

    def emit(self, event: str, *args) -> None:
        for callback in list(self._listeners[event]):
            callback(*args)

    # ------------------------------------------------------------------
    # Tracker events → current state
    # ------------------------------------------------------------------

    def _on_correct_step(self, position, progress: int, total: int) -> None:
        self.current_state.handle_correct_step(position, progress, total)

    def _on_wrong_step(self, position, expected) -> None:
        self.current_state.handle_wrong_step(position, expected)

    def _on_path_completed(self, steps) -> None:
        self.current_state.handle_path_completed(steps)

    def _on_start_zone_entered(self) -> None:
        self.current_state.handle_start_zone_entered()

    def _on_start_zone_exited(self) -> None:
        self.current_state.handle_start_zone_exited()

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    @property
    def phase(self) -> GamePhase:
        return self.current_state.phase

    def change_state(self, phase: GamePhase) -> None:
        """
        Request a transition to the given phase.

        A request made while a transition is running (from an on_exit or
        on_enter handler) is queued and applied right after it, in order.
        """
        if self._transitioning:
            self._pending_phases.append(phase)
            return

        self._transitioning = True
        try:
            self._transition_to_state(phase)
            while self._pending_phases:
                self._transition_to_state(self._pending_phases.popleft())
        finally:
            self._pending_phases.clear()
            self._transitioning = False

    def _transition_to_state(self, phase: GamePhase) -> None:
        """
        Handle transition to a new game state.

        Args:
            phase: The phase to transition to
        """
        old_phase = self.current_state.phase
        if phase == old_phase:
            self.logger.debug(f"Already in {phase.value} - transition ignored")
            return

        new_state = STATE_CLASSES[phase](self)

        # Call exit handler on current state
        self.current_state.on_exit()

        # Log state transition
        self.logger.info(f"State transition: {self.current_state.__class__.__name__} → "
                         f"{new_state.__class__.__name__}")

        # Switch to new state
        self.current_state = new_state
        self.emit('state_change', old_phase, phase)

        # Call enter handler on new state
        self.current_state.on_enter()

    def get_current_state_name(self) -> str:
        """Get the name of the current game state."""
        return self.current_state.__class__.__name__

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def set_timer(self, slot: TimerSlot, delay: float, callback: Callable[[], None]) -> None:
        """Schedule a callback in a named slot, cancelling whatever the slot held"""
        self.clear_timer(slot)
        self._timers[slot] = self.scheduler.call_later(delay, callback, name=slot.value)

    def clear_timer(self, slot: TimerSlot) -> None:
        handle = self._timers.pop(slot, None)
        if handle is not None:
            handle.cancel()

    def clear_all_timers(self) -> None:
        for slot in list(self._timers):
            self.clear_timer(slot)
        self.grid_manager.cancel_reveal()

    def has_pending_timer(self, slot: TimerSlot) -> bool:
        handle = self._timers.get(slot)
        return handle is not None and handle.active

    # ------------------------------------------------------------------
    # Narration
    # ------------------------------------------------------------------

    def narrate(self, line: DialogueLine, on_complete: Optional[Callable[[], None]] = None) -> None:
        """Speak a host line; without a sound controller it completes at once"""
        if self.sound_controller is None:
            self.logger.info(f"[HOST] {line.text or line.id}")
            if on_complete:
                on_complete()
            return
        self.sound_controller.play_line(line, on_complete)

    def play_welcome_sequence(self, on_complete: Callable[[], None]) -> None:
        """Welcome line, short pause, then the goal explanation"""
        def explain() -> None:
            self.narrate(Dialogue.EXPLAIN_GOAL, on_complete)

        def pause() -> None:
            self.set_timer(TimerSlot.INTRO, self.config.timing.welcome_pause, explain)

        self.narrate(Dialogue.WELCOME, pause)

    # ------------------------------------------------------------------
    # Round lifecycle
    # ------------------------------------------------------------------

    def begin_placement(self) -> None:
        """Leave the menu and wait for the grid to be anchored"""
        if self.phase not in (GamePhase.IDLE, GamePhase.PLACING_GRID):
            self.logger.warning(f"Placement requested during {self.phase.value} - abandoning round")
            self.clear_all_timers()
            self.player_tracker.stop_tracking()
        self.change_state(GamePhase.PLACING_GRID)

    def on_grid_placed(self, origin: Vec3, floor_y: float, rotation_yaw: float = 0.0,
                       player_position: Optional[Vec3] = None) -> None:
        """
        Build the grid at the placement point and start the intro.

        Args:
            origin: Anchor point (its height is replaced by floor_y)
            floor_y: Floor height under the player
            rotation_yaw: Grid rotation about the vertical axis in degrees
            player_position: Where the player stood when placing (informational)
        """
        if self.phase != GamePhase.PLACING_GRID:
            self.logger.warning(f"Grid placed during {self.phase.value} - rebuilding")
            self.clear_all_timers()
            self.player_tracker.stop_tracking()

        self.floor_y = floor_y
        self.player_position = player_position
        self._placement = (origin, floor_y, rotation_yaw)

        settings = self.get_level_settings(self.round.current_level)
        anchor = origin.with_y(floor_y)
        self.grid_manager.initialize(anchor, settings.grid_rows, settings.grid_columns, rotation_yaw)
        self.player_tracker.initialize(floor_y)
        if self.overlap_reader:
            self.overlap_reader.forget()

        if self.config.host_intro_on_first_launch and self.round.is_first_game:
            self.change_state(GamePhase.HOST_INTRO)
        else:
            self.change_state(GamePhase.GRID_INTRO)

    def start_with_position(self, origin: Vec3, floor_y: float, rotation_yaw: float = 0.0,
                            player_position: Optional[Vec3] = None) -> None:
        """Skip the placement phase and start straight at the given anchor"""
        self.begin_placement()
        self.on_grid_placed(origin, floor_y, rotation_yaw, player_position)

    def restart_at_last_placement(self) -> bool:
        """Quick restart on the last anchor; False if nothing was placed yet"""
        if self._placement is None:
            return False
        origin, floor_y, rotation_yaw = self._placement
        self.start_with_position(origin, floor_y, rotation_yaw, self.player_position)
        return True

    def _clamp_level(self, level: int) -> int:
        return max(1, min(level, self.config.max_level))

    def get_stored_level(self) -> int:
        """Level the progress store would resume at (current round level without a store)"""
        if self.progress_store is None:
            return self.round.current_level
        return self._clamp_level(self.progress_store.get_current_level())

    def setup_level(self) -> None:
        """Sync the level with the store, clear the board and install a fresh path"""
        if self.progress_store is not None:
            stored = self.get_stored_level()
            if stored != self.round.current_level:
                self.logger.warning(f"Level desync: round at {self.round.current_level}, "
                                    f"store at {stored} - using stored level")
                self.round.current_level = stored

        settings = self.get_level_settings(self.round.current_level)
        self.player_tracker.stop_tracking()
        self.grid_manager.reset_tile_states()
        path = self.grid_manager.generate_new_path(settings.path_length)
        self.logger.info(f"Level {settings.level}: path of {len(path)} tiles, "
                         f"{settings.memorize_time}s to memorize")

    def show_start_zone(self) -> None:
        """Place the start zone in front of the start tile and listen for the player"""
        position = self.grid_manager.get_start_zone_world_position(self.config.player.start_zone_offset)
        if position is None:
            self.logger.warning("Cannot show start zone - no path")
            return

        floor_position = position.with_y(self.floor_y)
        if self.start_zone_visual:
            self.start_zone_visual.show_at(floor_position)

        self.player_tracker.reset_start_zone_state()
        if self.start_zone is not None:
            self.start_zone.move_to(floor_position + Vec3(0.0, self.config.player.start_zone_height / 2, 0.0))
            self.start_zone.enabled = True
            # Someone already standing there counts as a fresh entry
            self.overlap_reader.forget(self.start_zone)
        self.logger.info(f"Start zone at {floor_position}")

    def hide_start_zone(self) -> None:
        if self.start_zone_visual:
            self.start_zone_visual.hide()
        if self.start_zone is not None:
            self.start_zone.enabled = False

    def get_start_zone_position(self) -> Optional[Vec3]:
        """Floor point of the start zone for the current path"""
        position = self.grid_manager.get_start_zone_world_position(self.config.player.start_zone_offset)
        return position.with_y(self.floor_y) if position else None

    def get_celebration_position(self) -> Vec3:
        path = self.grid_manager.get_path()
        if path:
            end = path[-1]
            position = self.grid_manager.get_tile_world_position(end.x, end.z)
            if position is not None:
                return position
        return self.grid_manager.origin

    def start_idle_prompt_timer(self) -> None:
        """(Re)arm the "are you still there" nudge for the current state"""
        self.set_timer(TimerSlot.IDLE_PROMPT, self.config.timing.idle_prompt_delay,
                       self.current_state.when_active(self._play_idle_prompt))

    def _play_idle_prompt(self) -> None:
        if self.phase != GamePhase.PLAYING:
            return
        self.logger.info("💤 No progress - prompting the player")
        self.narrate(Dialogue.IDLE_PROMPT)

    def prompt_return_to_start_zone(self, success: bool) -> None:
        """Move on to the next round (next level after a success)"""
        if success:
            self.round.current_level = self._clamp_level(self.round.current_level + 1)
        self.change_state(GamePhase.WAITING_IN_START_ZONE)

    def reset_game(self) -> None:
        """Stop the round: timers, tracking, tile states and the start zone"""
        self.clear_all_timers()
        self.player_tracker.stop_tracking()
        self.player_tracker.reset()
        self.player_tracker.reset_start_zone_state()
        self.grid_manager.reset_tile_states()
        self.hide_start_zone()

    def exit_to_main_menu(self) -> None:
        """Abandon the session and return to the menu"""
        self.logger.info("🏠 Exiting to main menu")
        self.clear_all_timers()
        if self.effects:
            self.effects.stop_celebration()
        self.player_tracker.stop_tracking()
        self.player_tracker.reset()
        self.grid_manager.hide_grid()
        self.hide_start_zone()
        if self.countdown_display:
            self.countdown_display.hide()
        if self.sound_controller:
            self.sound_controller.stop_line()

        self.change_state(GamePhase.IDLE)

        self.round.current_level = self.get_stored_level()
        self.round.score = 0
        self.round.wrong_steps = 0
        self.round.memorize_time_remaining = 0
        self.round.current_level_retried = False

        if self.main_menu:
            self.main_menu.show()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_game_state(self) -> GameSnapshot:
        return GameSnapshot(
            state=self.phase,
            level=self.round.current_level,
            score=self.round.score,
            wrong_steps=self.round.wrong_steps,
            memorize_time_remaining=self.round.memorize_time_remaining
        )

    def set_level(self, level: int) -> None:
        self.round.current_level = self._clamp_level(level)

    def get_level_settings(self, level: int) -> LevelSettings:
        return self.config.get_level_settings(self._clamp_level(level))

    # ------------------------------------------------------------------
    # Frame loop
    # ------------------------------------------------------------------

    def run_game_loop(self) -> None:
        """
        Run the game loop with automatic frame duration limiting.

        This method handles the main game loop and ensures consistent timing.
        Call this from your main() function for automatic frame management.
        """
        self.logger.info(f"Starting game loop with {int(self.target_frame_duration*1000)}ms frame duration")

        try:
            while self.running:
                frame_start = time.time()

                # Update game state
                self.update()

                # Frame duration limiting
                frame_duration = time.time() - frame_start
                sleep_time = self.target_frame_duration - frame_duration

                if sleep_time > 0:
                    time.sleep(sleep_time)

        except KeyboardInterrupt:
            self.logger.info("Game stopped by user (Ctrl+C)")
            self.logger.flush()
        except Exception as e:
            self.logger.error(f"Game loop error: {e}", exception=e)
            self.logger.flush()
            raise
        finally:
            self.stop()

    def update(self) -> None:
        """
        One frame: due timers, narration polling, then collider overlaps.
        """
        # 0. Log memory usage (once per minute)
        if self._memory_monitor.should_execute():
            self._log_memory_usage()

        # 1. Timers and deferred callbacks
        self.scheduler.run_due()

        # 2. Narration completion
        if self.sound_controller:
            self.sound_controller.update()

        # 3. Head position → tile and start-zone events
        if self.overlap_reader:
            self.overlap_reader.read_overlaps()

    def stop(self) -> None:
        """Stop the game and clean up resources."""
        self.running = False
        self.clear_all_timers()
        self.player_tracker.stop_tracking()

        if self.sound_controller:
            self.sound_controller.cleanup()

        if self.overlap_reader:
            self.overlap_reader.cleanup()

        self.grid_manager.hide_grid()
        self.logger.info("Game stopped")

    def _log_memory_usage(self) -> None:
        """Log current memory and CPU usage (process and system)"""
        if not PSUTIL_AVAILABLE:
            return

        try:
            mem_info = self._process.memory_info()
            process_mb = mem_info.rss / 1024 / 1024  # Resident Set Size in MB
            process_cpu_percent = self._process.cpu_percent(interval=None)

            sys_mem = psutil.virtual_memory()
            sys_total_mb = sys_mem.total / 1024 / 1024
            sys_used_mb = sys_mem.used / 1024 / 1024
            sys_cpu_percent = psutil.cpu_percent(interval=None)

            self.logger.info(
                f"💾 Memory - Process: {process_mb:.1f}MB | "
                f"System: {sys_used_mb:.0f}/{sys_total_mb:.0f}MB ({sys_mem.percent:.1f}%) | "
                f"⚙️ CPU - Process: {process_cpu_percent:.1f}% | System: {sys_cpu_percent:.1f}%"
            )
        except Exception as e:
            self.logger.warning(f"Failed to log system usage: {e}")
