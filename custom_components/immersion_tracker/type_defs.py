"""Type definitions for Immersion Tracker data structures.

HYBRID APPROACH (TypedDict + dict[str, Any])
============================================

1. **TypedDict for STATIC structures** (fixed keys known at design time):
   - Persisted state envelope: PersistedState, ConfigData, MetaData
   - Engine results: TrackProgress, DayProgress, StreakSummary

2. **dict[str, Any] for DYNAMIC structures** (keys are track ids, metric
   names and checklist item names taken from TRACK_DEFINITIONS):
   - TrackGoals, TrackEntry, DailyEntry, WeeklyEntry

Track ids, metric names and checklist item names are data, not code, so
a per-track TypedDict would hard-code exactly what TRACK_DEFINITIONS exists
to keep generic.

IMPORTANT: This file must NOT import from coordinator.py or any helper module
to avoid circular dependencies. Only typing machinery is imported here.

NOTE: TypedDict is STATIC ANALYSIS ONLY. Runtime repair of malformed data is
done by migration.py.
"""

from typing import Any, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

DateKey = str  # Local calendar day "2025-08-20"
WeekKey = str  # DateKey of the Monday starting the ISO week "2025-08-18"
TrackId = str  # Key of const.TRACK_DEFINITIONS, e.g. "japanese"
ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00+00:00"

# {metric: number, checklist_item: bool}
TrackGoals = dict[str, Any]
# {track_id: TrackGoals}
GoalConfig = dict[TrackId, TrackGoals]
# {metric: number, checklist_item: bool}
TrackEntry = dict[str, Any]
# {track_id: TrackEntry, "notes": str}
DailyEntry = dict[str, Any]
# {obligation: bool}
WeeklyEntry = dict[str, bool]
# {"time_metrics": (...), "count_metrics": (...), "checklist_items": (...)}
TrackDefinition = dict[str, tuple[str, ...]]


# =============================================================================
# Persisted State
# =============================================================================


class ConfigData(TypedDict):
    """User configuration stored alongside the history."""

    goals: GoalConfig
    weekly: dict[str, bool]  # Enabled weekly obligations
    ui: dict[str, Any]  # Opaque presentation settings, preserved verbatim


class MetaData(TypedDict):
    """Derived metadata persisted with the state."""

    best_streak: int  # Never decreases
    schema_version: int


class PersistedState(TypedDict):
    """Complete payload handed to and returned from the store."""

    config: ConfigData
    entries: dict[DateKey, DailyEntry]
    weekly: dict[WeekKey, WeeklyEntry]
    meta: MetaData


class BackupEnvelope(TypedDict):
    """Export wrapper written by backup_helpers.export_state()."""

    version: int
    exported_at: ISODatetime
    data: PersistedState


# =============================================================================
# Engine Results
# =============================================================================


class TrackProgress(TypedDict):
    """Breakdown of one track's goal evaluation for a single day.

    Returned by CompletionEngine.evaluate_track().
    """

    track: TrackId
    time_achieved: float  # Sum of achieved time sub-metrics
    time_target: float  # Sum of time thresholds
    time_met: bool
    count_shortfalls: dict[str, float]  # metric -> amount still missing
    missing_checklist: list[str]  # Enabled items not yet ticked
    satisfied: bool


class DayProgress(TypedDict):
    """Evaluation of every track for a single day."""

    date: DateKey
    recorded: bool  # False when no entry exists for the date
    tracks: dict[TrackId, TrackProgress]
    complete: bool


class StreakSummary(TypedDict):
    """Streak snapshot returned by StreakEngine.summarize()."""

    current_streak: int
    best_streak_computed: int
    best_streak: int  # max(stored, computed) - the value to persist
    today_complete: bool


class WeeklySummary(TypedDict):
    """Weekly obligation progress for one WeekKey."""

    week_key: WeekKey
    done: list[str]
    pending: list[str]
    total: int
