"""Tests for the JSON progress store."""

import json

from progress_system import SaveManager


def test_fresh_store_starts_at_level_one(tmp_path, logger):
    store = SaveManager(str(tmp_path / "progress.json"), logger)
    assert store.get_current_level() == 1
    assert store.get_highest_level() == 1
    assert not store.has_saved_game()


def test_completion_advances_and_persists(tmp_path, logger):
    path = tmp_path / "saves" / "progress.json"
    store = SaveManager(str(path), logger)
    store.on_level_failed(1)
    store.on_level_completed(1, first_try=False)
    store.on_level_completed(2, first_try=True)

    assert store.get_current_level() == 3
    assert store.get_retries_for_level(1) == 0
    assert store.get_total_retries() == 1
    assert store.was_level_completed_first_try(2)
    assert not store.was_level_completed_first_try(1)

    reloaded = SaveManager(str(path), logger)
    assert reloaded.get_current_level() == 3
    assert reloaded.get_highest_level() == 3
    assert reloaded.has_saved_game()


def test_failures_count_per_level(tmp_path, logger):
    store = SaveManager(str(tmp_path / "progress.json"), logger)
    store.on_level_failed(4)
    store.on_level_failed(4)
    store.on_level_failed(5)
    assert store.get_retries_for_level(4) == 2
    assert store.get_retries_for_level(5) == 1
    assert store.get_total_retries() == 3


def test_corrupt_file_falls_back_to_defaults(tmp_path, logger):
    path = tmp_path / "progress.json"
    path.write_text("{not json", encoding="utf-8")
    store = SaveManager(str(path), logger)
    assert store.get_current_level() == 1


def test_unknown_keys_are_ignored(tmp_path, logger):
    path = tmp_path / "progress.json"
    path.write_text(json.dumps({"current_level": 4, "highest_level": 6, "achievements": ["x"]}),
                    encoding="utf-8")
    store = SaveManager(str(path), logger)
    assert store.get_current_level() == 4
    assert store.get_highest_level() == 6


def test_in_memory_store_writes_nothing(tmp_path, logger):
    store = SaveManager(None, logger)
    store.on_level_completed(1, first_try=True)
    assert store.get_current_level() == 2
    assert not list(tmp_path.glob("**/*.json"))


def test_reset_level_progress_keeps_highest(tmp_path, logger):
    store = SaveManager(str(tmp_path / "progress.json"), logger)
    store.on_level_completed(1, first_try=True)
    store.on_level_completed(2, first_try=True)
    store.reset_level_progress()
    assert store.get_current_level() == 1
    assert store.get_highest_level() == 3
