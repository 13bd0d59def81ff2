"""
Save manager - level progress persisted as a JSON file
"""

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Dict, List, Optional, TYPE_CHECKING

from .interfaces import IProgressStore

if TYPE_CHECKING:
    from utils import ClassLogger


SAVE_VERSION = 1


@dataclass
class SaveData:
    """Everything remembered between sessions"""
    version: int = SAVE_VERSION
    current_level: int = 1
    highest_level: int = 1
    total_retries: int = 0
    retries_per_level: Dict[str, int] = field(default_factory=dict)
    levels_completed_first_try: List[int] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: dict) -> 'SaveData':
        """Build from parsed JSON, ignoring unknown keys"""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in raw.items() if key in known})


class SaveManager(IProgressStore):
    """
    JSON-file progress store.

    Every change is written through immediately. A missing or unreadable
    save file is not an error: the game starts from level 1 and the problem
    is logged. With save_path=None progress lives in memory only.

    Example:
        save_manager = SaveManager("saves/progress.json", logger)
        level = save_manager.get_current_level()
    """

    def __init__(self, save_path: Optional[str], logger: 'ClassLogger'):
        """
        Args:
            save_path: JSON file location, None for an in-memory store
            logger: ClassLogger instance for logging
        """
        self.save_path = Path(save_path) if save_path else None
        self.logger = logger
        self.data = SaveData()
        self._load()

    def _load(self) -> None:
        if self.save_path is None:
            self.logger.info("No save file configured - progress kept in memory")
            return
        if not self.save_path.exists():
            self.logger.info(f"No save file at {self.save_path} - starting fresh")
            return

        try:
            with open(self.save_path, 'r', encoding='utf-8') as f:
                raw = json.load(f)
            self.data = SaveData.from_dict(raw)
            self.logger.info(
                f"Loaded save: level {self.data.current_level} "
                f"(highest {self.data.highest_level}, {self.data.total_retries} retries)"
            )
        except (OSError, ValueError, TypeError) as e:
            self.logger.warning(f"⚠️ Could not read save file {self.save_path}, starting fresh: {e}")
            self.data = SaveData()

    def _save(self) -> None:
        if self.save_path is None:
            return
        try:
            self.save_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.save_path, 'w', encoding='utf-8') as f:
                json.dump(asdict(self.data), f, indent=2)
        except OSError as e:
            self.logger.warning(f"⚠️ Could not write save file {self.save_path}: {e}")

    def has_saved_game(self) -> bool:
        return self.data.current_level > 1

    def get_current_level(self) -> int:
        return self.data.current_level

    def get_highest_level(self) -> int:
        return self.data.highest_level

    def on_level_completed(self, level: int, first_try: bool) -> None:
        if first_try and level not in self.data.levels_completed_first_try:
            self.data.levels_completed_first_try.append(level)

        self.data.current_level = level + 1
        self.data.highest_level = max(self.data.highest_level, self.data.current_level)
        self.data.retries_per_level[str(level)] = 0

        self._save()
        self.logger.info(f"Level {level} completed, now on level {self.data.current_level}")

    def on_level_failed(self, level: int) -> None:
        self.data.total_retries += 1
        key = str(level)
        self.data.retries_per_level[key] = self.data.retries_per_level.get(key, 0) + 1

        self._save()
        self.logger.info(f"Level {level} failed, retry #{self.data.retries_per_level[key]}")

    def get_retries_for_level(self, level: int) -> int:
        return self.data.retries_per_level.get(str(level), 0)

    def get_total_retries(self) -> int:
        return self.data.total_retries

    def was_level_completed_first_try(self, level: int) -> bool:
        return level in self.data.levels_completed_first_try

    def reset_level_progress(self) -> None:
        """Back to level 1, keeping the highest level reached"""
        highest = self.data.highest_level
        self.data = SaveData(highest_level=highest)
        self._save()
        self.logger.info("Level progress reset")
