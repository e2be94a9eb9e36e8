"""
Tracking module - match events to quest objectives.
"""

from questengine.tracking.match import MatchTracker, MatchStats

__all__ = ["MatchTracker", "MatchStats"]
