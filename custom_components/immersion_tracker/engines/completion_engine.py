"""Completion Engine - Pure logic for daily goal evaluation.

Decides whether a day's recorded activity satisfies the goal configuration.

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data and never
mutate it.

Per track, three independent gates must hold:
1. TIME: the sum of achieved time sub-metrics >= the sum of their thresholds.
   A surplus in one sub-metric offsets a deficit in another of the same track.
2. CHECKLIST: every item enabled in the goals is ticked in the entry. Items
   not enabled are ignored whatever the entry says.
3. COUNTS: each count metric meets its own threshold. Counts are never folded
   into the time total.

A day is complete iff every defined track is satisfied. A missing entry is
never complete. Weekly obligations play no part here.
"""

from __future__ import annotations

from collections.abc import Mapping
import math
from typing import TYPE_CHECKING, Any

from .. import const

if TYPE_CHECKING:
    from ..type_defs import DayProgress, TrackDefinition, TrackProgress, WeeklySummary


def _as_number(value: Any) -> float:
    """Read an achieved value or threshold; anything non-numeric counts as 0."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        return 0
    if not math.isfinite(value):
        return 0
    return value


class CompletionEngine:
    """Pure logic engine for day completion.

    All methods are static - no instance state.

    PURITY CONTRACT:
    - All data comes via parameters (entry, goals, track definitions)
    - No side effects, no storage access, no mutation of inputs
    - Missing tracks, metrics and goals read as zero / disabled
    """

    @staticmethod
    def evaluate_track(
        track_id: str,
        track_entry: Mapping[str, Any] | None,
        track_goals: Mapping[str, Any] | None,
        definition: TrackDefinition,
    ) -> TrackProgress:
        """Evaluate one track of one day against its goals.

        Args:
            track_id: Track identifier (for the result only)
            track_entry: Achieved values {metric: number, item: bool}; None = empty
            track_goals: Thresholds {metric: number, item: enabled}; None = empty
            definition: Track definition from const.TRACK_DEFINITIONS

        Returns:
            TrackProgress with the time totals, count shortfalls, missing
            checklist items and the overall satisfied flag.
        """
        achieved = track_entry or {}
        goals = track_goals or {}

        time_metrics = definition.get(const.TRACK_DEF_TIME_METRICS, ())
        time_achieved = sum(_as_number(achieved.get(m)) for m in time_metrics)
        time_target = sum(_as_number(goals.get(m)) for m in time_metrics)
        time_met = time_achieved >= time_target

        count_shortfalls: dict[str, float] = {}
        for metric in definition.get(const.TRACK_DEF_COUNT_METRICS, ()):
            target = _as_number(goals.get(metric))
            value = _as_number(achieved.get(metric))
            if value < target:
                count_shortfalls[metric] = target - value

        missing_checklist = [
            item
            for item in definition.get(const.TRACK_DEF_CHECKLIST_ITEMS, ())
            if goals.get(item) is True and not bool(achieved.get(item, False))
        ]

        return {
            "track": track_id,
            "time_achieved": time_achieved,
            "time_target": time_target,
            "time_met": time_met,
            "count_shortfalls": count_shortfalls,
            "missing_checklist": missing_checklist,
            "satisfied": time_met and not count_shortfalls and not missing_checklist,
        }

    @staticmethod
    def evaluate_day(
        entry: Mapping[str, Any] | None,
        goals: Mapping[str, Mapping[str, Any]] | None,
        date_key: str = "",
        track_definitions: Mapping[str, TrackDefinition] | None = None,
    ) -> DayProgress:
        """Evaluate every track of one day.

        Args:
            entry: DailyEntry for the day, or None when nothing is recorded
            goals: GoalConfig {track_id: TrackGoals}
            date_key: DateKey echoed into the result
            track_definitions: Defaults to const.TRACK_DEFINITIONS

        Returns:
            DayProgress; `complete` is False whenever `recorded` is False.
        """
        definitions = (
            const.TRACK_DEFINITIONS if track_definitions is None else track_definitions
        )
        recorded = isinstance(entry, Mapping)
        day: Mapping[str, Any] = entry if isinstance(entry, Mapping) else {}
        all_goals: Mapping[str, Any] = goals if isinstance(goals, Mapping) else {}

        tracks: dict[str, TrackProgress] = {}
        for track_id, definition in definitions.items():
            track_entry = day.get(track_id)
            track_goals = all_goals.get(track_id)
            tracks[track_id] = CompletionEngine.evaluate_track(
                track_id,
                track_entry if isinstance(track_entry, Mapping) else None,
                track_goals if isinstance(track_goals, Mapping) else None,
                definition,
            )

        return {
            "date": date_key,
            "recorded": recorded,
            "tracks": tracks,
            "complete": recorded and all(t["satisfied"] for t in tracks.values()),
        }

    @staticmethod
    def is_day_complete(
        entry: Mapping[str, Any] | None,
        goals: Mapping[str, Mapping[str, Any]] | None,
        track_definitions: Mapping[str, TrackDefinition] | None = None,
    ) -> bool:
        """Return True iff the entry satisfies every track's goals.

        Example:
            >>> CompletionEngine.is_day_complete(None, goals)
            False
        """
        if entry is None:
            return False
        return CompletionEngine.evaluate_day(
            entry, goals, track_definitions=track_definitions
        )["complete"]

    @staticmethod
    def summarize_week(
        weekly_entry: Mapping[str, Any] | None,
        weekly_config: Mapping[str, Any] | None,
        week_key: str = "",
    ) -> WeeklySummary:
        """Report weekly obligation progress.

        Only obligations enabled in `weekly_config` are counted. The result
        is informational and never feeds into day completion.
        """
        flags = weekly_entry if isinstance(weekly_entry, Mapping) else {}
        enabled = [
            name
            for name, on in (
                weekly_config if isinstance(weekly_config, Mapping) else {}
            ).items()
            if on is True
        ]
        done = [name for name in enabled if bool(flags.get(name, False))]
        return {
            "week_key": week_key,
            "done": done,
            "pending": [name for name in enabled if name not in done],
            "total": len(enabled),
        }
