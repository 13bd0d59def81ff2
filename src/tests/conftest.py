"""Shared fixtures: a hand-driven clock, a scheduler on it, and loggers writing into tmp_path."""

import logging
import random

import pytest

from grid_system import GridManager, PathGenerator
from game_system.config import GameConfig
from utils import HybridLogger, Scheduler


class FakeClock:
    """Clock that only moves when told to"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler(clock):
    return Scheduler(clock=clock)


@pytest.fixture
def hybrid_logger(tmp_path, request):
    name = f"test_{request.node.name}"
    hybrid = HybridLogger(name, log_dir=str(tmp_path / "logs"), console=False)
    yield hybrid
    hybrid.cleanup()


@pytest.fixture
def logger(hybrid_logger):
    return hybrid_logger.get_class_logger("Test", logging.DEBUG)


@pytest.fixture
def config():
    return GameConfig(save_path=None)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def grid(config, scheduler, logger, rng):
    return GridManager(config.grid, scheduler, logger.create_class_logger("GridManager"),
                       path_generator=PathGenerator(rng=rng, logger=logger))


def advance(clock, scheduler, seconds: float, step: float = 0.125) -> None:
    """Move time forward in small steps, running due callbacks along the way

    Steps are powers of two so clock sums stay exact.
    """
    elapsed = 0.0
    while elapsed < seconds - 1e-9:
        delta = min(step, seconds - elapsed)
        clock.advance(delta)
        scheduler.run_due()
        elapsed += delta
