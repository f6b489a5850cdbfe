"""Record construction and field setters for Immersion Tracker.

This module is the SINGLE SOURCE OF TRUTH for:
- Zero-valued daily / weekly entry structures
- Goal configuration defaults
- Per-field setters with name validation

## Key Concepts

### Build Functions
Each record type has a `build_<record>()` function that returns a complete,
zero-valued dict ready for storage. Tracks, metrics and checklist items come
from `const.TRACK_DEFINITIONS` (or a caller-supplied mapping), so a new track
needs no new builder.

### Setter Functions
Entries are never mutated through free-form key paths. Each field kind has an
explicit setter (`set_track_metric`, `set_track_checklist`, `set_entry_notes`,
`set_weekly_obligation`, `update_track_goals`) that validates the track and
field name first and raises `EntityValidationError` on anything unknown.

Consumers:
- coordinator.py (state mutations)
- migration.py (default structures)
- services.py (through the coordinator)
"""

from __future__ import annotations

import copy
import math
from typing import TYPE_CHECKING, Any

from . import const

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from .type_defs import (
        DailyEntry,
        GoalConfig,
        TrackDefinition,
        TrackEntry,
        TrackGoals,
        WeeklyEntry,
    )


# ==============================================================================
# EXCEPTIONS
# ==============================================================================


class EntityValidationError(Exception):
    """Validation error with field-specific information.

    Raised when a setter receives an unknown track, metric, checklist item or
    weekly obligation, or a value of the wrong kind. The services layer maps
    `translation_key` onto a ServiceValidationError.

    Attributes:
        field: The FIELD_* constant identifying the offending input
        translation_key: The TRANS_KEY_* constant for the error message
        placeholders: Optional dict for translation string placeholders

    Example:
        raise EntityValidationError(
            field=const.FIELD_METRIC,
            translation_key=const.TRANS_KEY_ERROR_UNKNOWN_METRIC,
            placeholders={"track": "japanese", "metric": "wtach"},
        )
    """

    def __init__(
        self,
        field: str,
        translation_key: str,
        placeholders: dict[str, str] | None = None,
    ) -> None:
        """Initialize EntityValidationError."""
        self.field = field
        self.translation_key = translation_key
        self.placeholders = placeholders or {}
        super().__init__(
            f"{translation_key}: "
            + ", ".join(f"{k}={v}" for k, v in self.placeholders.items())
        )


# ==============================================================================
# HELPERS
# ==============================================================================


def _definitions(
    track_definitions: Mapping[str, TrackDefinition] | None,
) -> Mapping[str, TrackDefinition]:
    return const.TRACK_DEFINITIONS if track_definitions is None else track_definitions


def numeric_metrics(definition: TrackDefinition) -> tuple[str, ...]:
    """Return every numeric metric of a track (time metrics first)."""
    return tuple(definition.get(const.TRACK_DEF_TIME_METRICS, ())) + tuple(
        definition.get(const.TRACK_DEF_COUNT_METRICS, ())
    )


def checklist_items(definition: TrackDefinition) -> tuple[str, ...]:
    """Return the checklist items of a track."""
    return tuple(definition.get(const.TRACK_DEF_CHECKLIST_ITEMS, ()))


def is_real_number(value: Any) -> bool:
    """Return True for finite int/float values (bool excluded)."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    return math.isfinite(value)


def get_track_definition(
    track_id: str,
    track_definitions: Mapping[str, TrackDefinition] | None = None,
) -> TrackDefinition:
    """Return the definition for track_id.

    Raises:
        EntityValidationError: If the track is not defined.
    """
    definitions = _definitions(track_definitions)
    if track_id not in definitions:
        raise EntityValidationError(
            field=const.FIELD_TRACK,
            translation_key=const.TRANS_KEY_ERROR_UNKNOWN_TRACK,
            placeholders={"track": str(track_id)},
        )
    return definitions[track_id]


# ==============================================================================
# BUILDERS
# ==============================================================================


def build_track_entry(
    track_id: str,
    track_definitions: Mapping[str, TrackDefinition] | None = None,
) -> TrackEntry:
    """Build a zero-valued entry for one track."""
    definition = get_track_definition(track_id, track_definitions)
    entry: TrackEntry = {metric: 0 for metric in numeric_metrics(definition)}
    entry.update({item: False for item in checklist_items(definition)})
    return entry


def build_daily_entry(
    track_definitions: Mapping[str, TrackDefinition] | None = None,
) -> DailyEntry:
    """Build a zero-valued DailyEntry covering every defined track.

    Example:
        {
            "japanese": {"watch": 0, "read": 0, "mine": 0,
                         "anki": False, "shadowing": False},
            "korean": {...},
            "notes": "",
        }
    """
    entry: DailyEntry = {
        track_id: build_track_entry(track_id, track_definitions)
        for track_id in _definitions(track_definitions)
    }
    entry[const.DATA_ENTRY_NOTES] = ""
    return entry


def build_weekly_entry(obligations: Iterable[str] | None = None) -> WeeklyEntry:
    """Build a WeeklyEntry with every obligation unticked."""
    names = const.WEEKLY_OBLIGATIONS if obligations is None else obligations
    return {name: False for name in names}


def build_goal_config(
    overrides: Mapping[str, Mapping[str, Any]] | None = None,
    track_definitions: Mapping[str, TrackDefinition] | None = None,
) -> GoalConfig:
    """Build a goal configuration for every defined track.

    Starts from const.DEFAULT_GOALS (zero / disabled for tracks without
    defaults), then applies `overrides` through update_track_goals() so the
    same validation runs.
    """
    goals: GoalConfig = {}
    for track_id, definition in _definitions(track_definitions).items():
        defaults = const.DEFAULT_GOALS.get(track_id, {})
        track_goals: TrackGoals = {
            metric: defaults.get(metric, 0) for metric in numeric_metrics(definition)
        }
        track_goals.update(
            {item: bool(defaults.get(item, False)) for item in checklist_items(definition)}
        )
        goals[track_id] = track_goals

    for track_id, updates in (overrides or {}).items():
        update_track_goals(goals, track_id, updates, track_definitions)
    return goals


# ==============================================================================
# SETTERS
# ==============================================================================


def _ensure_track_entry(
    entry: DailyEntry,
    track_id: str,
    track_definitions: Mapping[str, TrackDefinition] | None,
) -> TrackEntry:
    track_entry = entry.get(track_id)
    if not isinstance(track_entry, dict):
        track_entry = build_track_entry(track_id, track_definitions)
        entry[track_id] = track_entry
    return track_entry


def set_track_metric(
    entry: DailyEntry,
    track_id: str,
    metric: str,
    value: float,
    track_definitions: Mapping[str, TrackDefinition] | None = None,
) -> DailyEntry:
    """Set a numeric metric on one track of a daily entry.

    Any finite number is stored as given, zero included. Range clamping
    belongs to the input layer (service schemas).

    Raises:
        EntityValidationError: Unknown track/metric or non-numeric value.
    """
    definition = get_track_definition(track_id, track_definitions)
    if metric not in numeric_metrics(definition):
        raise EntityValidationError(
            field=const.FIELD_METRIC,
            translation_key=const.TRANS_KEY_ERROR_UNKNOWN_METRIC,
            placeholders={"track": track_id, "metric": str(metric)},
        )
    if not is_real_number(value):
        raise EntityValidationError(
            field=const.FIELD_VALUE,
            translation_key=const.TRANS_KEY_ERROR_INVALID_METRIC_VALUE,
            placeholders={"metric": metric, "value": repr(value)},
        )
    _ensure_track_entry(entry, track_id, track_definitions)[metric] = value
    return entry


def set_track_checklist(
    entry: DailyEntry,
    track_id: str,
    item: str,
    done: bool,
    track_definitions: Mapping[str, TrackDefinition] | None = None,
) -> DailyEntry:
    """Tick or untick a checklist item on one track of a daily entry.

    Raises:
        EntityValidationError: Unknown track or checklist item.
    """
    definition = get_track_definition(track_id, track_definitions)
    if item not in checklist_items(definition):
        raise EntityValidationError(
            field=const.FIELD_ITEM,
            translation_key=const.TRANS_KEY_ERROR_UNKNOWN_CHECKLIST_ITEM,
            placeholders={"track": track_id, "item": str(item)},
        )
    _ensure_track_entry(entry, track_id, track_definitions)[item] = bool(done)
    return entry


def set_entry_notes(entry: DailyEntry, notes: str | None) -> DailyEntry:
    """Replace the free-text notes of a daily entry."""
    entry[const.DATA_ENTRY_NOTES] = "" if notes is None else str(notes)
    return entry


def reset_daily_entry(
    entry: DailyEntry,
    track_definitions: Mapping[str, TrackDefinition] | None = None,
) -> DailyEntry:
    """Re-zero a daily entry in place (the date stays recorded).

    A reset day is incomplete, so it breaks streaks exactly like a missing
    day does.
    """
    entry.clear()
    entry.update(build_daily_entry(track_definitions))
    return entry


def set_weekly_obligation(
    weekly_entry: WeeklyEntry,
    obligation: str,
    done: bool,
    obligations: Iterable[str] | None = None,
) -> WeeklyEntry:
    """Tick or untick a weekly obligation.

    Raises:
        EntityValidationError: Unknown obligation name.
    """
    names = const.WEEKLY_OBLIGATIONS if obligations is None else tuple(obligations)
    if obligation not in names:
        raise EntityValidationError(
            field=const.FIELD_OBLIGATION,
            translation_key=const.TRANS_KEY_ERROR_UNKNOWN_OBLIGATION,
            placeholders={"obligation": str(obligation)},
        )
    weekly_entry[obligation] = bool(done)
    return weekly_entry


def update_track_goals(
    goals: GoalConfig,
    track_id: str,
    updates: Mapping[str, Any],
    track_definitions: Mapping[str, TrackDefinition] | None = None,
) -> GoalConfig:
    """Apply goal updates for one track.

    Numeric metrics take non-negative finite numbers; checklist items take
    booleans (True enables the item as a completion gate). All updates are
    validated before any is applied.

    Raises:
        EntityValidationError: Unknown track or field, or a value of the
            wrong kind.
    """
    definition = get_track_definition(track_id, track_definitions)
    metrics = numeric_metrics(definition)
    items = checklist_items(definition)

    for field, value in updates.items():
        if field in metrics:
            if not is_real_number(value) or value < 0:
                raise EntityValidationError(
                    field=const.FIELD_GOALS,
                    translation_key=const.TRANS_KEY_ERROR_INVALID_GOAL_VALUE,
                    placeholders={"field": field, "value": repr(value)},
                )
        elif field in items:
            if not isinstance(value, bool):
                raise EntityValidationError(
                    field=const.FIELD_GOALS,
                    translation_key=const.TRANS_KEY_ERROR_INVALID_GOAL_VALUE,
                    placeholders={"field": field, "value": repr(value)},
                )
        else:
            raise EntityValidationError(
                field=const.FIELD_GOALS,
                translation_key=const.TRANS_KEY_ERROR_UNKNOWN_METRIC,
                placeholders={"track": track_id, "metric": str(field)},
            )

    track_goals = goals.setdefault(track_id, {})
    track_goals.update(copy.deepcopy(dict(updates)))
    return goals
