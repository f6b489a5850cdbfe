# File: const.py
"""Constants for the Immersion Tracker integration.

This file centralizes storage keys, data field names, track definitions,
default goals, service names and translation keys so every module refers to
the same identifiers.
"""

import logging
from typing import Any, Final

# ------------------------------------------------------------------------------------------------
# General / Integration Information
# ------------------------------------------------------------------------------------------------
# Integration Name
IMMERSION_TRACKER_TITLE = "Immersion Tracker"

# Integration Domain
DOMAIN = "immersion_tracker"

# Logger
LOGGER = logging.getLogger(__package__)

# Coordinator
COORDINATOR = "coordinator"
COORDINATOR_SUFFIX = "_coordinator"

# Storage and Versioning
STORE = "store"
STORAGE_KEY = "immersion_tracker_data"
STORAGE_VERSION = 1

# Persisted shape version written to meta.schema_version
SCHEMA_VERSION_CURRENT = 2
# Shape written before tracks were generic (camelCase meta keys)
SCHEMA_VERSION_LEGACY = 1

# Update Interval (minutes)
DEFAULT_UPDATE_INTERVAL = 5
MIN_UPDATE_INTERVAL = 1
MAX_UPDATE_INTERVAL = 1440

DEFAULT_ZERO = 0

# ------------------------------------------------------------------------------------------------
# Configuration Keys
# ------------------------------------------------------------------------------------------------

CONF_UPDATE_INTERVAL = "update_interval"

CONFIG_FLOW_STEP_USER = "user"
OPTIONS_FLOW_STEP_INIT = "init"

# ------------------------------------------------------------------------------------------------
# Persisted State Keys
# ------------------------------------------------------------------------------------------------

DATA_CONFIG = "config"
DATA_CONFIG_GOALS = "goals"
DATA_CONFIG_WEEKLY = "weekly"
DATA_CONFIG_UI = "ui"

DATA_ENTRIES = "entries"
DATA_ENTRY_NOTES = "notes"

DATA_WEEKLY = "weekly"

DATA_META = "meta"
DATA_META_BEST_STREAK = "best_streak"
DATA_META_SCHEMA_VERSION = "schema_version"

# Legacy keys accepted by migration
DATA_META_BEST_STREAK_LEGACY = "bestStreak"
DATA_ENTRY_NOTES_LEGACY = "note"

# Backup / export envelope
DATA_BACKUP_VERSION = "version"
DATA_BACKUP_EXPORTED_AT = "exported_at"
DATA_BACKUP_DATA = "data"

# ------------------------------------------------------------------------------------------------
# Tracks
# ------------------------------------------------------------------------------------------------

TRACK_JAPANESE = "japanese"
TRACK_KOREAN = "korean"

# Metrics (minutes)
METRIC_WATCH = "watch"
METRIC_READ = "read"
METRIC_LISTEN = "listen"

# Metrics (item counts)
METRIC_MINE = "mine"

# Checklist items
CHECKLIST_ANKI = "anki"
CHECKLIST_SHADOWING = "shadowing"

# Track definition keys
TRACK_DEF_TIME_METRICS = "time_metrics"
TRACK_DEF_COUNT_METRICS = "count_metrics"
TRACK_DEF_CHECKLIST_ITEMS = "checklist_items"

# Tracks are declared as data; every engine iterates this mapping so adding a
# track never needs new evaluation code.
TRACK_DEFINITIONS: Final[dict[str, dict[str, tuple[str, ...]]]] = {
    TRACK_JAPANESE: {
        TRACK_DEF_TIME_METRICS: (METRIC_WATCH, METRIC_READ),
        TRACK_DEF_COUNT_METRICS: (METRIC_MINE,),
        TRACK_DEF_CHECKLIST_ITEMS: (CHECKLIST_ANKI, CHECKLIST_SHADOWING),
    },
    TRACK_KOREAN: {
        TRACK_DEF_TIME_METRICS: (METRIC_WATCH, METRIC_LISTEN, METRIC_READ),
        TRACK_DEF_COUNT_METRICS: (METRIC_MINE,),
        TRACK_DEF_CHECKLIST_ITEMS: (CHECKLIST_ANKI,),
    },
}

DEFAULT_GOALS: Final[dict[str, dict[str, Any]]] = {
    TRACK_JAPANESE: {
        METRIC_WATCH: 30,
        METRIC_READ: 20,
        METRIC_MINE: 5,
        CHECKLIST_ANKI: True,
        CHECKLIST_SHADOWING: True,
    },
    TRACK_KOREAN: {
        METRIC_WATCH: 30,
        METRIC_LISTEN: 20,
        METRIC_READ: 0,
        METRIC_MINE: 5,
        CHECKLIST_ANKI: False,
    },
}

# ------------------------------------------------------------------------------------------------
# Weekly Obligations (never gate the streak)
# ------------------------------------------------------------------------------------------------

WEEKLY_JAPANESE_LESSON = "japanese_lesson"
WEEKLY_KOREAN_LESSON = "korean_lesson"
WEEKLY_REVIEW_NOTES = "review_notes"

WEEKLY_OBLIGATIONS: Final[tuple[str, ...]] = (
    WEEKLY_JAPANESE_LESSON,
    WEEKLY_KOREAN_LESSON,
    WEEKLY_REVIEW_NOTES,
)

DEFAULT_WEEKLY_CONFIG: Final[dict[str, bool]] = {
    WEEKLY_JAPANESE_LESSON: True,
    WEEKLY_KOREAN_LESSON: True,
    WEEKLY_REVIEW_NOTES: False,
}

# ------------------------------------------------------------------------------------------------
# Coordinator Snapshot Keys
# ------------------------------------------------------------------------------------------------

SNAPSHOT_TODAY = "today"
SNAPSHOT_CURRENT_STREAK = "current_streak"
SNAPSHOT_BEST_STREAK = "best_streak"
SNAPSHOT_TODAY_COMPLETE = "today_complete"
SNAPSHOT_WEEK_KEY = "week_key"
SNAPSHOT_WEEKLY_DONE = "weekly_done"
SNAPSHOT_WEEKLY_TOTAL = "weekly_total"

# Fired with the snapshot as event data after every refresh
EVENT_SNAPSHOT_UPDATED = f"{DOMAIN}_updated"

# ------------------------------------------------------------------------------------------------
# Services
# ------------------------------------------------------------------------------------------------

SERVICE_LOG_ACTIVITY = "log_activity"
SERVICE_SET_CHECKLIST = "set_checklist"
SERVICE_SET_NOTES = "set_notes"
SERVICE_RESET_DAY = "reset_day"
SERVICE_SET_WEEKLY_OBLIGATION = "set_weekly_obligation"
SERVICE_UPDATE_GOALS = "update_goals"
SERVICE_GET_STREAKS = "get_streaks"
SERVICE_EXPORT_DATA = "export_data"
SERVICE_IMPORT_DATA = "import_data"

FIELD_DATE = "date"
FIELD_WEEK = "week"
FIELD_TRACK = "track"
FIELD_METRIC = "metric"
FIELD_VALUE = "value"
FIELD_ITEM = "item"
FIELD_DONE = "done"
FIELD_NOTES = "notes"
FIELD_OBLIGATION = "obligation"
FIELD_GOALS = "goals"
FIELD_DATA = "data"

# ------------------------------------------------------------------------------------------------
# Translation Keys
# ------------------------------------------------------------------------------------------------

TRANS_KEY_ERROR_SINGLE_INSTANCE = "single_instance_allowed"
TRANS_KEY_ERROR_INVALID_DATE = "invalid_date"
TRANS_KEY_ERROR_UNKNOWN_TRACK = "unknown_track"
TRANS_KEY_ERROR_UNKNOWN_METRIC = "unknown_metric"
TRANS_KEY_ERROR_UNKNOWN_CHECKLIST_ITEM = "unknown_checklist_item"
TRANS_KEY_ERROR_UNKNOWN_OBLIGATION = "unknown_obligation"
TRANS_KEY_ERROR_INVALID_GOAL_VALUE = "invalid_goal_value"
TRANS_KEY_ERROR_INVALID_METRIC_VALUE = "invalid_metric_value"
TRANS_KEY_ERROR_IMPORT_FAILED = "import_failed"
TRANS_KEY_ERROR_NO_ENTRY = "no_entry_loaded"

MSG_NO_ENTRY_FOUND = "No Immersion Tracker entry found"
