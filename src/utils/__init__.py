"""
Utilities package - Common utilities for the Memory Grid game
"""

from .hybrid_logger import HybridLogger, ClassLogger, ColoredFormatter
from .once_in_ms import OnceInMs
from .scheduler import Scheduler, DelayedCallback

__all__ = [
    'HybridLogger',
    'ClassLogger',
    'ColoredFormatter',
    'OnceInMs',
    'Scheduler',
    'DelayedCallback'
]
