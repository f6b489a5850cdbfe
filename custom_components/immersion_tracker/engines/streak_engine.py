"""Streak Engine - Pure logic for current and best-ever streaks.

A streak is a run of consecutive CALENDAR dates whose entries exist and are
complete (see CompletionEngine). A gap in the calendar breaks a run even when
the entries on either side of it are complete. Zeroed (reset) days break it
the same way.

ARCHITECTURE: Pure logic engine with NO Home Assistant dependencies. All
methods are static and never mutate the entries or goals they receive.

Best streak uses segment heads over the complete dates: a complete date `d` is
a head iff `d - 1 day` is not complete (missing, zeroed or short). Every
maximal run starts at exactly one head, so walking forward from heads
measures each run once, from its true start, in O(entries).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..utils.dt_utils import (
    InvalidDateError,
    dt_is_valid_date_key,
    dt_parse_date_key,
    dt_shift,
)
from .completion_engine import CompletionEngine

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ..type_defs import StreakSummary, TrackDefinition

_LOGGER = logging.getLogger(__name__)


class StreakEngine:
    """Pure logic engine for streak computation.

    All methods are static - no instance state.

    Example:
        current = StreakEngine.current_streak(entries, goals, "2025-08-19")
        best = StreakEngine.best_streak(entries, goals)
    """

    @staticmethod
    def _is_complete(
        entries: Mapping[str, Any],
        goals: Mapping[str, Mapping[str, Any]],
        date_key: str,
        track_definitions: Mapping[str, TrackDefinition] | None,
    ) -> bool:
        return CompletionEngine.is_day_complete(
            entries.get(date_key), goals, track_definitions
        )

    @staticmethod
    def _neighbour(date_key: str, delta_days: int) -> str | None:
        """Return the adjacent DateKey, or None past 0001-01-01 / 9999-12-31."""
        try:
            return dt_shift(date_key, delta_days)
        except InvalidDateError:
            return None

    @staticmethod
    def current_streak(
        entries: Mapping[str, Any],
        goals: Mapping[str, Mapping[str, Any]],
        end_date: str,
        track_definitions: Mapping[str, TrackDefinition] | None = None,
    ) -> int:
        """Count consecutive complete days ending at (and including) end_date.

        Walks backward one calendar day at a time and stops at the first
        missing or incomplete day.

        Returns:
            0 if end_date itself is missing or incomplete.

        Raises:
            InvalidDateError: If end_date is not a well-formed DateKey.
        """
        dt_parse_date_key(end_date)

        streak = 0
        cursor: str | None = end_date
        # Each iteration consumes one recorded date, so the walk is bounded
        # by len(entries).
        while cursor in entries and StreakEngine._is_complete(
            entries, goals, cursor, track_definitions
        ):
            streak += 1
            cursor = StreakEngine._neighbour(cursor, -1)
        return streak

    @staticmethod
    def best_streak(
        entries: Mapping[str, Any],
        goals: Mapping[str, Mapping[str, Any]],
        track_definitions: Mapping[str, TrackDefinition] | None = None,
    ) -> int:
        """Return the longest run of consecutive complete calendar dates.

        Complete dates are collected first; only those whose previous date
        is not complete start a forward walk. A run that begins right after
        an incomplete recorded day is therefore still measured. Keys that
        are not valid DateKeys are skipped.

        Returns:
            0 for an empty history.
        """
        complete: set[str] = set()
        for date_key in entries:
            if not dt_is_valid_date_key(date_key):
                _LOGGER.debug("DEBUG: Skipping invalid date key in history: %r", date_key)
                continue
            if StreakEngine._is_complete(entries, goals, date_key, track_definitions):
                complete.add(date_key)

        best = 0
        for date_key in complete:
            if StreakEngine._neighbour(date_key, -1) in complete:
                continue  # Not a segment head; its run is measured from the head

            length = 0
            cursor: str | None = date_key
            while cursor in complete:
                length += 1
                cursor = StreakEngine._neighbour(cursor, 1)
            best = max(best, length)
        return best

    @staticmethod
    def summarize(
        entries: Mapping[str, Any],
        goals: Mapping[str, Mapping[str, Any]],
        today: str,
        stored_best: int = 0,
        track_definitions: Mapping[str, TrackDefinition] | None = None,
    ) -> StreakSummary:
        """Compute the streak snapshot for `today`.

        `best_streak` is max(stored_best, computed): the persisted best never
        decreases, even when goal changes make old days incomplete.

        Raises:
            InvalidDateError: If today is not a well-formed DateKey.
        """
        current = StreakEngine.current_streak(entries, goals, today, track_definitions)
        computed = StreakEngine.best_streak(entries, goals, track_definitions)
        stored = stored_best if isinstance(stored_best, int) and stored_best > 0 else 0
        return {
            "current_streak": current,
            "best_streak_computed": computed,
            "best_streak": max(stored, computed),
            "today_complete": current > 0,
        }
