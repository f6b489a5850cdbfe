# File: migration.py
"""Repair and upgrade of persisted Immersion Tracker state.

Every payload that enters the integration (storage load, JSON import) passes
through `migrate()`. It never raises: whatever arrives, a structurally valid
PersistedState comes out.

Repair rules:
- Missing sections are filled from `get_default_structure()`.
- Sections of the wrong type (`config`, `entries`, `weekly`, `meta`) are
  replaced with empty defaults.
- Unknown top-level keys are dropped.
- Entry / week keys that are not valid DateKeys are dropped; week keys that
  are not Mondays are folded into their WeekKey.
- Metric values that are not finite numbers read as 0; checklist flags are
  coerced to bool; notes to str.

Legacy shapes (schema 1):
- `meta.bestStreak` or a top-level `bestStreak` instead of `meta.best_streak`
- entry-level `note` instead of `notes`
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any

from . import const
from .data_builders import (
    build_daily_entry,
    build_goal_config,
    build_weekly_entry,
    checklist_items,
    is_real_number,
    numeric_metrics,
)
from .utils.dt_utils import dt_is_valid_date_key, dt_week_key

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .type_defs import (
        ConfigData,
        DailyEntry,
        MetaData,
        PersistedState,
        TrackDefinition,
        WeeklyEntry,
    )

_KNOWN_TOP_LEVEL_KEYS = frozenset(
    {
        const.DATA_CONFIG,
        const.DATA_ENTRIES,
        const.DATA_WEEKLY,
        const.DATA_META,
        const.DATA_META_BEST_STREAK_LEGACY,
    }
)


def get_default_structure(
    track_definitions: Mapping[str, TrackDefinition] | None = None,
) -> PersistedState:
    """Return canonical empty state for fresh installations.

    This is the SINGLE SOURCE OF TRUTH for the persisted schema. Used by:
    - ImmersionTrackerStore.async_load() when no storage file exists
    - migrate() to fill missing sections
    """
    return {
        const.DATA_CONFIG: {
            const.DATA_CONFIG_GOALS: build_goal_config(
                track_definitions=track_definitions
            ),
            const.DATA_CONFIG_WEEKLY: dict(const.DEFAULT_WEEKLY_CONFIG),
            const.DATA_CONFIG_UI: {},
        },
        const.DATA_ENTRIES: {},
        const.DATA_WEEKLY: {},
        const.DATA_META: {
            const.DATA_META_BEST_STREAK: const.DEFAULT_ZERO,
            const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION_CURRENT,
        },
    }


# ================================================================================================
# Section migrations
# ================================================================================================


def _section(raw: Mapping[str, Any], key: str) -> dict[str, Any]:
    """Return raw[key] when it is a dict, else an empty dict (logged)."""
    value = raw.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        const.LOGGER.warning(
            "WARNING: Migration - '%s' has type %s, replacing with empty default",
            key,
            type(value).__name__,
        )
        return {}
    return value


def _migrate_config(
    raw_config: Mapping[str, Any],
    track_definitions: Mapping[str, TrackDefinition] | None,
) -> ConfigData:
    goals = build_goal_config(track_definitions=track_definitions)
    raw_goals = _section(raw_config, const.DATA_CONFIG_GOALS)
    definitions = (
        const.TRACK_DEFINITIONS if track_definitions is None else track_definitions
    )

    for track_id, definition in definitions.items():
        raw_track = raw_goals.get(track_id)
        if not isinstance(raw_track, dict):
            continue
        for metric in numeric_metrics(definition):
            value = raw_track.get(metric)
            if value is None:
                continue
            if is_real_number(value) and value >= 0:
                goals[track_id][metric] = value
            else:
                const.LOGGER.warning(
                    "WARNING: Migration - Ignoring invalid goal %s.%s=%r",
                    track_id,
                    metric,
                    value,
                )
        for item in checklist_items(definition):
            value = raw_track.get(item)
            if isinstance(value, bool):
                goals[track_id][item] = value

    weekly = dict(const.DEFAULT_WEEKLY_CONFIG)
    for name, enabled in _section(raw_config, const.DATA_CONFIG_WEEKLY).items():
        if name in weekly and isinstance(enabled, bool):
            weekly[name] = enabled

    return {
        const.DATA_CONFIG_GOALS: goals,
        const.DATA_CONFIG_WEEKLY: weekly,
        const.DATA_CONFIG_UI: copy.deepcopy(_section(raw_config, const.DATA_CONFIG_UI)),
    }


def _migrate_daily_entry(
    raw_entry: Mapping[str, Any],
    track_definitions: Mapping[str, TrackDefinition] | None,
) -> DailyEntry:
    entry = build_daily_entry(track_definitions)
    definitions = (
        const.TRACK_DEFINITIONS if track_definitions is None else track_definitions
    )

    for track_id, definition in definitions.items():
        raw_track = raw_entry.get(track_id)
        if not isinstance(raw_track, dict):
            continue
        for metric in numeric_metrics(definition):
            value = raw_track.get(metric)
            if is_real_number(value):
                entry[track_id][metric] = value
        for item in checklist_items(definition):
            entry[track_id][item] = bool(raw_track.get(item, False))

    notes = raw_entry.get(
        const.DATA_ENTRY_NOTES, raw_entry.get(const.DATA_ENTRY_NOTES_LEGACY, "")
    )
    entry[const.DATA_ENTRY_NOTES] = "" if notes is None else str(notes)
    return entry


def _migrate_entries(
    raw_entries: Mapping[str, Any],
    track_definitions: Mapping[str, TrackDefinition] | None,
) -> dict[str, DailyEntry]:
    entries: dict[str, DailyEntry] = {}
    dropped = 0
    for date_key, raw_entry in raw_entries.items():
        if not dt_is_valid_date_key(date_key) or not isinstance(raw_entry, dict):
            dropped += 1
            continue
        entries[date_key] = _migrate_daily_entry(raw_entry, track_definitions)
    if dropped:
        const.LOGGER.warning(
            "WARNING: Migration - Dropped %s malformed daily entries", dropped
        )
    return entries


def _migrate_weekly(raw_weekly: Mapping[str, Any]) -> dict[str, WeeklyEntry]:
    weekly: dict[str, WeeklyEntry] = {}
    dropped = 0
    for key, raw_flags in raw_weekly.items():
        if not dt_is_valid_date_key(key) or not isinstance(raw_flags, dict):
            dropped += 1
            continue
        week_key = dt_week_key(key)
        flags = weekly.setdefault(week_key, build_weekly_entry())
        for name in flags:
            # Folding a non-Monday key into its week never unticks a flag
            flags[name] = flags[name] or bool(raw_flags.get(name, False))
    if dropped:
        const.LOGGER.warning(
            "WARNING: Migration - Dropped %s malformed weekly entries", dropped
        )
    return weekly


def _read_best_streak(raw: Mapping[str, Any], raw_meta: Mapping[str, Any]) -> int:
    for value in (
        raw_meta.get(const.DATA_META_BEST_STREAK),
        raw_meta.get(const.DATA_META_BEST_STREAK_LEGACY),
        raw.get(const.DATA_META_BEST_STREAK_LEGACY),
    ):
        if is_real_number(value) and value >= 0 and int(value) == value:
            return int(value)
    return const.DEFAULT_ZERO


# ================================================================================================
# Entry point
# ================================================================================================


def migrate(
    raw: Any,
    track_definitions: Mapping[str, TrackDefinition] | None = None,
) -> PersistedState:
    """Upgrade and repair any payload into a valid PersistedState.

    Never raises on malformed input; invalid sub-structures are replaced with
    defaults and a warning is logged. The input is not modified.

    Args:
        raw: Anything - typically the dict returned by Store.async_load() or
             json.loads() of an import.
        track_definitions: Defaults to const.TRACK_DEFINITIONS.

    Returns:
        A fresh PersistedState at SCHEMA_VERSION_CURRENT.
    """
    if not isinstance(raw, dict):
        const.LOGGER.warning(
            "WARNING: Migration - Payload has type %s, starting from defaults",
            type(raw).__name__,
        )
        return get_default_structure(track_definitions)

    raw_meta = _section(raw, const.DATA_META)
    from_version = raw_meta.get(
        const.DATA_META_SCHEMA_VERSION, const.SCHEMA_VERSION_LEGACY
    )
    if from_version != const.SCHEMA_VERSION_CURRENT:
        const.LOGGER.info(
            "INFO: Migrating state from schema %s to %s",
            from_version,
            const.SCHEMA_VERSION_CURRENT,
        )

    unknown = sorted(str(key) for key in raw if key not in _KNOWN_TOP_LEVEL_KEYS)
    if unknown:
        const.LOGGER.debug("DEBUG: Migration - Dropping unknown keys: %s", unknown)

    meta: MetaData = {
        const.DATA_META_BEST_STREAK: _read_best_streak(raw, raw_meta),
        const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION_CURRENT,
    }

    state: PersistedState = {
        const.DATA_CONFIG: _migrate_config(
            _section(raw, const.DATA_CONFIG), track_definitions
        ),
        const.DATA_ENTRIES: _migrate_entries(
            _section(raw, const.DATA_ENTRIES), track_definitions
        ),
        const.DATA_WEEKLY: _migrate_weekly(_section(raw, const.DATA_WEEKLY)),
        const.DATA_META: meta,
    }

    const.LOGGER.debug(
        "DEBUG: Migration complete: %s",
        {
            "entries": len(state[const.DATA_ENTRIES]),
            "weeks": len(state[const.DATA_WEEKLY]),
            "best_streak": meta[const.DATA_META_BEST_STREAK],
        },
    )
    return state
