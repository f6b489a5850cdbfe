"""Engine modules for Immersion Tracker.

Contains pure computation engines (no Home Assistant dependencies):
- completion_engine: Daily goal evaluation and weekly obligation summaries
- streak_engine: Current and best-ever streaks over the recorded history
"""

from .completion_engine import CompletionEngine
from .streak_engine import StreakEngine

__all__ = [
    "CompletionEngine",
    "StreakEngine",
]
