"""
Progress system - persisted level progress
"""

from .interfaces import IProgressStore
from .save_manager import SaveData, SaveManager

__all__ = [
    'IProgressStore',
    'SaveData',
    'SaveManager'
]
