"""
Host dialogue catalogue - every line the narrator can say
"""

import random
from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass(frozen=True)
class DialogueLine:
    """
    One narrator line.

    duration is the fallback length used when no voice file is available.
    sfx_only lines have no subtitle, just a sound.
    """
    id: str
    text: str
    duration: float
    sfx_only: bool = False

    @property
    def file_name(self) -> str:
        """Voice file name inside the voice folder"""
        return f"{self.id}.mp3"


class Dialogue:
    """Named dialogue lines"""

    WELCOME = DialogueLine("welcome", "Welcome to Memory Grid!", 1.5)
    EXPLAIN_GOAL = DialogueLine(
        "explain_goal", "Eleven levels stand between you and glory. Each path is longer than the last!", 4.0)

    LEVEL_1 = DialogueLine("level_1", "Level 1! An easy one to start.", 2.5)
    LEVEL_2 = DialogueLine("level_2", "Level 2! Getting warmer.", 2.0)
    LEVEL_3 = DialogueLine("level_3", "Level 3! Now it gets interesting.", 2.0)
    LEVEL_4 = DialogueLine("level_4", "Level 4! The path keeps growing...", 2.0)
    LEVEL_5 = DialogueLine("level_5", "Level 5! Almost halfway!", 2.0)
    LEVEL_6 = DialogueLine("level_6", "Level 6! This is where it gets serious.", 3.0)
    LEVEL_7 = DialogueLine("level_7", "Level 7! Keep that memory sharp.", 2.5)
    LEVEL_8 = DialogueLine("level_8", "Level 8! Few players get this far.", 2.5)
    LEVEL_9 = DialogueLine("level_9", "Level 9! The home stretch.", 2.5)
    LEVEL_10 = DialogueLine("level_10", "Level 10! Just one more after this one!", 3.0)
    LEVEL_11 = DialogueLine("level_11", "Level 11! The whole floor. Give it everything!", 3.5)

    WATCH = DialogueLine("watch", "Watch!", 1.0)
    GO = DialogueLine("go", "Go!", 0.5)

    MEMORIZE_START = DialogueLine("memorize_start", "Watch closely...", 1.5)
    MEMORIZE_END = DialogueLine("memorize_end", "Now walk it!", 1.5)

    SUCCESS_1 = DialogueLine("success_1", "Nailed it! What a memory.", 2.5)
    SUCCESS_2 = DialogueLine("success_2", "Perfect! You're on a roll!", 2.5)
    SUCCESS_3 = DialogueLine("success_3", "Flawless! I'm starting to think you peeked.", 3.0)
    SUCCESS_4 = DialogueLine("success_4", "Smooth! On to the next one!", 2.0)
    SUCCESS_5 = DialogueLine("success_5", "That's how it's done!", 1.5)
    SUCCESS_FIRST_TRY = DialogueLine("success_first_try", "First try! Impressive!", 2.5)

    FAIL_1 = DialogueLine("fail_1", "Oops! So close. Try again!", 2.5)
    FAIL_2 = DialogueLine("fail_2", "Not quite! You'll get it next time.", 2.5)
    FAIL_3 = DialogueLine("fail_3", "Wrong tile! Take a breath and go again.", 3.0)
    FAIL_4 = DialogueLine("fail_4", "Wrong turn! The path is waiting for you.", 2.5)
    FAIL_5 = DialogueLine("fail_5", "Stumbled! Shake it off.", 2.5)
    FAIL_RETRY_2 = DialogueLine("fail_retry_2", "Second attempt! You've seen it twice now.", 3.0)
    FAIL_RETRY_3 = DialogueLine("fail_retry_3", "Third time's the charm! Focus!", 2.5)
    FAIL_RETRY_MANY = DialogueLine("fail_retry_many", "Persistence pays off! Keep going!", 2.5)

    LEVEL_UP = DialogueLine("level_up", "Level up! The paths get sneakier.", 2.5)
    LEVEL_UP_HALFWAY = DialogueLine("level_up_halfway", "Halfway there! Great work!", 2.5)
    LEVEL_UP_ALMOST = DialogueLine("level_up_almost", "Nearly at the end! Stay focused!", 3.0)

    GAME_COMPLETE = DialogueLine("game_complete", "You did it! All eleven levels! You are a Grid Master!", 4.5)
    GAME_COMPLETE_FLAWLESS = DialogueLine(
        "game_complete_flawless", "All eleven levels without a single retry! Legendary!", 5.0)

    STAND_IN_ZONE = DialogueLine("stand_in_zone", "Step into the start zone when you're ready!", 2.5)
    RETURN_SUCCESS = DialogueLine("return_success", "Head back to the start zone for the next challenge!", 3.0)
    RETURN_RETRY = DialogueLine("return_retry", "Step back into the start zone to try again!", 2.5)

    IDLE_PROMPT = DialogueLine("idle_prompt", "Still there? The path won't walk itself!", 2.5)

    @classmethod
    def all_lines(cls) -> List[DialogueLine]:
        return [value for value in vars(cls).values() if isinstance(value, DialogueLine)]


_SUCCESS_LINES = [Dialogue.SUCCESS_1, Dialogue.SUCCESS_2, Dialogue.SUCCESS_3,
                  Dialogue.SUCCESS_4, Dialogue.SUCCESS_5]
_FAIL_LINES = [Dialogue.FAIL_1, Dialogue.FAIL_2, Dialogue.FAIL_3,
               Dialogue.FAIL_4, Dialogue.FAIL_5]
_BY_ID: Dict[str, DialogueLine] = {line.id: line for line in Dialogue.all_lines()}


def get_random_watch_dialogue(rng: Optional[random.Random] = None) -> DialogueLine:
    return (rng or random).choice([Dialogue.WATCH, Dialogue.MEMORIZE_START])


def get_random_go_dialogue(rng: Optional[random.Random] = None) -> DialogueLine:
    return (rng or random).choice([Dialogue.GO, Dialogue.MEMORIZE_END])


def get_return_to_start_dialogue(is_success: bool) -> DialogueLine:
    return Dialogue.RETURN_SUCCESS if is_success else Dialogue.RETURN_RETRY


def get_random_success_dialogue(first_try: bool, rng: Optional[random.Random] = None) -> DialogueLine:
    """First-try wins get the special line half of the time"""
    rng = rng or random
    if first_try and rng.random() < 0.5:
        return Dialogue.SUCCESS_FIRST_TRY
    return rng.choice(_SUCCESS_LINES)


def get_random_fail_dialogue(retry_count: int, rng: Optional[random.Random] = None) -> DialogueLine:
    """
    Pick a fail line; repeated failures on the same level get dedicated lines.

    Args:
        retry_count: Failures so far on this level, including this one
    """
    if retry_count == 2:
        return Dialogue.FAIL_RETRY_2
    if retry_count == 3:
        return Dialogue.FAIL_RETRY_3
    if retry_count > 3:
        return Dialogue.FAIL_RETRY_MANY
    return (rng or random).choice(_FAIL_LINES)


def get_level_dialogue(level: int) -> DialogueLine:
    """Level announcement, with a generic line past the catalogued levels"""
    line = getattr(Dialogue, f"LEVEL_{level}", None)
    if isinstance(line, DialogueLine):
        return line
    return DialogueLine(f"level_{level}", f"Level {level}!", 1.5)


def get_level_up_dialogue(new_level: int) -> DialogueLine:
    if new_level == 6:
        return Dialogue.LEVEL_UP_HALFWAY
    if new_level >= 10:
        return Dialogue.LEVEL_UP_ALMOST
    return Dialogue.LEVEL_UP


def is_level_up_milestone(new_level: int) -> bool:
    """Levels that get an extra level-up line after the success line"""
    return new_level == 6 or new_level >= 10


def get_game_complete_dialogue(flawless: bool) -> DialogueLine:
    return Dialogue.GAME_COMPLETE_FLAWLESS if flawless else Dialogue.GAME_COMPLETE


def get_dialogue_by_id(dialogue_id: str) -> Optional[DialogueLine]:
    return _BY_ID.get(dialogue_id)
