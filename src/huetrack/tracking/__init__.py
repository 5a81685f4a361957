"""Tracking supervisor for huetrack.

Public API:
    Tracker -- Idle/armed supervisor issuing commands per action
"""

from huetrack.tracking.tracker import Tracker

__all__ = ["Tracker"]
