"""
Game state base class and concrete implementations
"""

from abc import ABC, abstractmethod
from typing import Callable, List, TYPE_CHECKING

from audio_system.dialogue_lines import (Dialogue, get_game_complete_dialogue, get_level_dialogue,
                                         get_level_up_dialogue, get_random_fail_dialogue,
                                         get_random_go_dialogue, get_random_success_dialogue,
                                         get_random_watch_dialogue, get_return_to_start_dialogue,
                                         is_level_up_milestone)
from .game_types import GamePhase, RoundResult, TimerSlot

if TYPE_CHECKING:
    from grid_system.grid_types import GridPosition
    from game_system.game_manager import GameManager


class GameState(ABC):
    """
    Abstract base class for all game states.

    States are event driven: they react to on_enter/on_exit, to tracker
    events forwarded by the GameManager, and to timer or narration
    callbacks they scheduled themselves. A callback scheduled by a state
    must be wrapped with when_active() so it does nothing once the state
    has been left.
    """

    phase: GamePhase

    def __init__(self, game_manager: 'GameManager'):
        """Initialize the game state"""
        self.game_manager: 'GameManager' = game_manager
        self.logger = game_manager.logger.create_class_logger(self.__class__.__name__)

    @property
    def is_active(self) -> bool:
        return self.game_manager.current_state is self

    def when_active(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Wrap a deferred callback so it only runs while this state is current"""
        def guarded() -> None:
            if self.is_active:
                callback()
            else:
                self.logger.debug(f"Dropped stale callback {getattr(callback, '__name__', callback)}")
        return guarded

    def on_enter(self) -> None:
        """Called when entering this state"""
        self.custom_on_enter()

    def on_exit(self) -> None:
        """Called when exiting this state"""
        self.custom_on_exit()

    @abstractmethod
    def custom_on_enter(self) -> None:
        """Custom enter logic (override in subclasses)"""
        pass

    def custom_on_exit(self) -> None:
        """Custom exit logic (override in subclasses)"""
        pass

    # Tracker events - ignored unless a state cares

    def handle_correct_step(self, position: 'GridPosition', progress: int, total: int) -> None:
        self.logger.debug(f"Ignoring correct step at {position} in {self.phase.value}")

    def handle_wrong_step(self, position: 'GridPosition', expected: 'GridPosition') -> None:
        self.logger.debug(f"Ignoring wrong step at {position} in {self.phase.value}")

    def handle_path_completed(self, steps: List['GridPosition']) -> None:
        self.logger.debug(f"Ignoring path completion in {self.phase.value}")

    def handle_start_zone_entered(self) -> None:
        self.logger.debug(f"Ignoring start zone entry in {self.phase.value}")

    def handle_start_zone_exited(self) -> None:
        pass


class IdleState(GameState):
    """
    Nothing running - main menu is up.

    Transitions:
    - begin_placement() → PlacingGridState
    """

    phase = GamePhase.IDLE

    def custom_on_enter(self) -> None:
        self.game_manager.reset_game()


class PlacingGridState(GameState):
    """
    Waiting for the player to anchor the grid on the floor.

    Transitions:
    - on_grid_placed() → HostIntroState (first launch, when enabled) or GridIntroState
    """

    phase = GamePhase.PLACING_GRID

    def custom_on_enter(self) -> None:
        self.logger.info("📍 Waiting for grid placement")


class HostIntroState(GameState):
    """
    First-launch greeting before the first start zone.

    Transitions:
    - welcome (or "step into the zone") line finished → WaitingInStartZoneState
    """

    phase = GamePhase.HOST_INTRO

    def custom_on_enter(self) -> None:
        gm = self.game_manager
        proceed = self.when_active(lambda: gm.change_state(GamePhase.WAITING_IN_START_ZONE))

        if gm.round.is_first_game and gm.get_stored_level() == 1:
            gm.round.is_first_game = False
            gm.play_welcome_sequence(proceed)
        else:
            gm.round.is_first_game = False
            gm.narrate(Dialogue.STAND_IN_ZONE, proceed)


class GridIntroState(GameState):
    """
    Grid just placed: show the start tile, let the player focus, announce.

    Transitions:
    - focus delay + narration finished → CountdownState
    """

    phase = GamePhase.GRID_INTRO

    def custom_on_enter(self) -> None:
        gm = self.game_manager
        gm.setup_level()
        gm.grid_manager.show_only_start_tile()
        gm.set_timer(TimerSlot.INTRO, gm.config.timing.start_focus_delay,
                     self.when_active(self._begin_host_dialogue))

    def _begin_host_dialogue(self) -> None:
        gm = self.game_manager
        if gm.round.is_first_game and gm.round.current_level == 1:
            gm.round.is_first_game = False
            gm.play_welcome_sequence(self.when_active(self._announce_level))
        else:
            self._announce_level()

    def _announce_level(self) -> None:
        gm = self.game_manager
        gm.round.is_first_game = False
        gm.narrate(get_level_dialogue(gm.round.current_level),
                   self.when_active(lambda: gm.change_state(GamePhase.COUNTDOWN)))


class WaitingInStartZoneState(GameState):
    """
    Between rounds: next path ready, waiting for the player in the start zone.

    Only the first entry counts; repeated entries and exits are ignored
    until the state is entered again.

    Transitions:
    - start zone entered → (level announcement) → CountdownState
    """

    phase = GamePhase.WAITING_IN_START_ZONE

    def __init__(self, game_manager: 'GameManager'):
        super().__init__(game_manager)
        self._sequence_started = False

    def custom_on_enter(self) -> None:
        gm = self.game_manager
        gm.setup_level()
        gm.grid_manager.dim_grid_background()
        gm.show_start_zone()
        self.logger.info(f"Waiting in start zone for level {gm.round.current_level}")

    def handle_start_zone_entered(self) -> None:
        if self._sequence_started:
            return
        self._sequence_started = True

        gm = self.game_manager
        if gm.effects:
            gm.effects.stop_celebration()
        gm.grid_manager.show_only_start_tile()
        gm.hide_start_zone()
        gm.narrate(get_level_dialogue(gm.round.current_level),
                   self.when_active(lambda: gm.change_state(GamePhase.COUNTDOWN)))

    def handle_start_zone_exited(self) -> None:
        self.logger.debug("Start zone exit ignored")


class CountdownState(GameState):
    """
    3 - 2 - 1 - WATCH.

    Uses the external countdown display when there is one, otherwise an
    internal one-second timer.

    Transitions:
    - countdown finished → MemorizeState
    """

    phase = GamePhase.COUNTDOWN

    def __init__(self, game_manager: 'GameManager'):
        super().__init__(game_manager)
        self._remaining = game_manager.config.timing.countdown_from

    def custom_on_enter(self) -> None:
        gm = self.game_manager
        gm.grid_manager.show_start_tile_with_arrow()

        if gm.countdown_display:
            gm.countdown_display.start_countdown(self.when_active(self._finish))
            return

        self._show_next()

    def _show_next(self) -> None:
        gm = self.game_manager
        timing = gm.config.timing
        value = self._remaining

        if value > 0:
            if gm.sound_controller:
                gm.sound_controller.play_countdown()
            self.logger.info(f"⏱️ {value}")
        else:
            if gm.sound_controller:
                gm.sound_controller.play_watch()
            self.logger.info("👀 WATCH")
        gm.emit('countdown_tick', value)

        if value <= 0:
            gm.set_timer(TimerSlot.COUNTDOWN, timing.watch_cue_duration, self.when_active(self._finish))
            return

        self._remaining -= 1
        gm.set_timer(TimerSlot.COUNTDOWN, timing.countdown_interval, self.when_active(self._show_next))

    def _finish(self) -> None:
        self.game_manager.change_state(GamePhase.MEMORIZE)


class MemorizeState(GameState):
    """
    Path is revealed tile by tile, then shown for the memorize time.

    Transitions:
    - memorize timer reaches zero → PlayingState
    """

    phase = GamePhase.MEMORIZE

    def custom_on_enter(self) -> None:
        gm = self.game_manager
        settings = gm.get_level_settings(gm.round.current_level)
        gm.round.memorize_time_remaining = settings.memorize_time
        gm.narrate(get_random_watch_dialogue(gm.rng), self.when_active(self._reveal_path))

    def custom_on_exit(self) -> None:
        self.game_manager.grid_manager.cancel_reveal()

    def _reveal_path(self) -> None:
        gm = self.game_manager
        gm.grid_manager.show_grid()
        gm.grid_manager.reveal_path_sequential(
            on_complete=self.when_active(self._start_memorize_timer),
            on_tile_revealed=self._on_tile_revealed
        )

    def _on_tile_revealed(self, count: int) -> None:
        if self.is_active and self.game_manager.sound_controller:
            self.game_manager.sound_controller.play_step(count)

    def _start_memorize_timer(self) -> None:
        gm = self.game_manager
        self.logger.info(f"🧠 Memorize: {gm.round.memorize_time_remaining}s")
        gm.emit('memorize_tick', gm.round.memorize_time_remaining)
        gm.set_timer(TimerSlot.MEMORIZE, gm.config.timing.memorize_tick, self.when_active(self._tick))

    def _tick(self) -> None:
        gm = self.game_manager
        gm.round.memorize_time_remaining -= 1
        gm.emit('memorize_tick', gm.round.memorize_time_remaining)

        if gm.round.memorize_time_remaining <= 0:
            gm.change_state(GamePhase.PLAYING)
            return

        gm.set_timer(TimerSlot.MEMORIZE, gm.config.timing.memorize_tick, self.when_active(self._tick))


class PlayingState(GameState):
    """
    The player walks the hidden path.

    Transitions:
    - path completed → CompletedState
    - wrong step → (grace delay) → FailedState
    """

    phase = GamePhase.PLAYING

    def custom_on_enter(self) -> None:
        gm = self.game_manager
        gm.grid_manager.hide_path()
        if gm.countdown_display:
            gm.countdown_display.show_message("GO!", gm.config.timing.go_message_duration)
        gm.player_tracker.start_tracking()
        gm.narrate(get_random_go_dialogue(gm.rng))
        gm.start_idle_prompt_timer()

    def custom_on_exit(self) -> None:
        self.game_manager.clear_timer(TimerSlot.IDLE_PROMPT)

    def handle_correct_step(self, position: 'GridPosition', progress: int, total: int) -> None:
        gm = self.game_manager
        gm.round.score += gm.config.scoring.correct_step_points
        gm.grid_manager.mark_tile_correct(position.x, position.z)
        if gm.sound_controller:
            gm.sound_controller.play_step(progress)
        gm.start_idle_prompt_timer()
        gm.emit('score_update', gm.round.score)

    def handle_wrong_step(self, position: 'GridPosition', expected: 'GridPosition') -> None:
        gm = self.game_manager
        gm.round.wrong_steps += 1
        gm.round.score = max(0, gm.round.score - gm.config.scoring.wrong_step_penalty)
        gm.player_tracker.stop_tracking()
        gm.grid_manager.mark_tile_wrong(position.x, position.z)
        if gm.sound_controller:
            gm.sound_controller.play_error()
        gm.clear_timer(TimerSlot.IDLE_PROMPT)
        gm.emit('score_update', gm.round.score)

        self.logger.info(f"Wrong step at {position} (expected {expected}) - failing in "
                         f"{gm.config.timing.wrong_step_grace}s")
        gm.set_timer(TimerSlot.RESULT, gm.config.timing.wrong_step_grace,
                     self.when_active(lambda: gm.change_state(GamePhase.FAILED)))

    def handle_path_completed(self, steps: List['GridPosition']) -> None:
        gm = self.game_manager
        if steps:
            gm.grid_manager.mark_tile_correct(steps[-1].x, steps[-1].z)
        gm.round.score += gm.config.scoring.completion_bonus
        if gm.sound_controller:
            gm.sound_controller.play_completion()
        gm.emit('score_update', gm.round.score)
        gm.change_state(GamePhase.COMPLETED)


class CompletedState(GameState):
    """
    Path walked correctly.

    Transitions:
    - final level → (completion line, exit delay) → exit to main menu → IdleState
    - otherwise → (success lines) → WaitingInStartZoneState at the next level
    """

    phase = GamePhase.COMPLETED

    def custom_on_enter(self) -> None:
        gm = self.game_manager
        gm.clear_all_timers()
        gm.player_tracker.stop_tracking()

        level = gm.round.current_level
        first_try = not gm.round.current_level_retried
        if gm.progress_store:
            gm.progress_store.on_level_completed(level, first_try)
        gm.round.current_level_retried = False

        gm.grid_manager.show_grid()
        gm.grid_manager.reveal_path(with_arrows=False)
        if gm.effects:
            gm.effects.play_celebration(gm.get_celebration_position())

        path_length = len(gm.grid_manager.get_path())
        gm.emit('game_complete', RoundResult(level, gm.round.score, gm.round.wrong_steps,
                                             gm.player_tracker.get_path_progress(), path_length))

        is_final_level = level >= gm.config.max_level
        self.logger.info(f"🎉 Level {level} complete (first try: {first_try}, score {gm.round.score})")

        if gm.sound_controller is None:
            if is_final_level:
                gm.set_timer(TimerSlot.RESULT, gm.config.timing.game_complete_exit_delay,
                             self.when_active(gm.exit_to_main_menu))
            else:
                gm.set_timer(TimerSlot.RESULT, gm.config.timing.result_delay,
                             self.when_active(lambda: gm.prompt_return_to_start_zone(True)))
            return

        if is_final_level:
            flawless = gm.progress_store.get_total_retries() == 0 if gm.progress_store else False
            gm.narrate(get_game_complete_dialogue(flawless), self.when_active(self._schedule_exit))
            return

        gm.narrate(get_random_success_dialogue(first_try, gm.rng), self.when_active(self._after_success_line))

    def _schedule_exit(self) -> None:
        gm = self.game_manager
        gm.set_timer(TimerSlot.RESULT, gm.config.timing.game_complete_exit_delay,
                     self.when_active(gm.exit_to_main_menu))

    def _after_success_line(self) -> None:
        gm = self.game_manager
        next_level = gm.round.current_level + 1
        if is_level_up_milestone(next_level):
            gm.narrate(get_level_up_dialogue(next_level), self.when_active(self._return_line))
        else:
            self._return_line()

    def _return_line(self) -> None:
        gm = self.game_manager
        # Zone shows while the line is still playing
        gm.show_start_zone()
        gm.narrate(get_return_to_start_dialogue(True),
                   self.when_active(lambda: gm.prompt_return_to_start_zone(True)))


class FailedState(GameState):
    """
    Wrong tile: show the real path, then back to the start zone.

    Transitions:
    - fail lines finished → WaitingInStartZoneState at the same level
    """

    phase = GamePhase.FAILED

    def custom_on_enter(self) -> None:
        gm = self.game_manager
        gm.clear_all_timers()
        gm.player_tracker.stop_tracking()

        level = gm.round.current_level
        gm.round.current_level_retried = True
        if gm.progress_store:
            gm.progress_store.on_level_failed(level)

        gm.grid_manager.show_grid()
        gm.grid_manager.reveal_path(with_arrows=False)

        path_length = len(gm.grid_manager.get_path())
        gm.emit('game_failed', RoundResult(level, gm.round.score, gm.round.wrong_steps,
                                           gm.player_tracker.get_path_progress(), path_length))
        self.logger.info(f"💥 Level {level} failed at step {gm.player_tracker.get_path_progress() + 1}/{path_length}")

        if gm.sound_controller is None:
            gm.set_timer(TimerSlot.RESULT, gm.config.timing.result_delay,
                         self.when_active(lambda: gm.prompt_return_to_start_zone(False)))
            return

        retry_count = gm.progress_store.get_retries_for_level(level) if gm.progress_store else 1
        gm.narrate(get_random_fail_dialogue(retry_count, gm.rng), self.when_active(self._return_line))

    def _return_line(self) -> None:
        gm = self.game_manager
        gm.show_start_zone()
        gm.narrate(get_return_to_start_dialogue(False),
                   self.when_active(lambda: gm.prompt_return_to_start_zone(False)))


STATE_CLASSES = {
    state_class.phase: state_class
    for state_class in (IdleState, PlacingGridState, HostIntroState, GridIntroState,
                        WaitingInStartZoneState, CountdownState, MemorizeState,
                        PlayingState, CompletedState, FailedState)
}
