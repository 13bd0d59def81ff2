"""
Player system - step validation and start-zone occupancy
"""

from .player_tracker import PlayerTracker, TrackingState

__all__ = [
    'PlayerTracker',
    'TrackingState'
]
