"""Export / import utilities for Immersion Tracker.

Exports wrap the persisted state in a small envelope:

    {"version": 1, "exported_at": "2025-08-20T09:15:00+00:00", "data": {...}}

Imports accept either that envelope or a bare state object. The payload is
always passed through `migrate()`, and `meta.best_streak` is recomputed from
the incoming entries and goals instead of being trusted.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from homeassistant.util import dt as dt_util

from .. import const
from ..engines.streak_engine import StreakEngine
from ..migration import migrate

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ..type_defs import BackupEnvelope, PersistedState, TrackDefinition


class BackupImportError(ValueError):
    """Raised when import text is not a recognizable export."""


def build_backup_envelope(state: PersistedState) -> BackupEnvelope:
    """Wrap state in the export envelope."""
    return {
        const.DATA_BACKUP_VERSION: const.STORAGE_VERSION,
        const.DATA_BACKUP_EXPORTED_AT: dt_util.utcnow().isoformat(),
        const.DATA_BACKUP_DATA: state,
    }


def export_state(state: PersistedState) -> str:
    """Serialize state to JSON text (envelope included).

    Raises:
        TypeError: If the state holds values JSON cannot represent.
    """
    return json.dumps(build_backup_envelope(state), ensure_ascii=False, indent=2)


def _unwrap(payload: dict[str, Any]) -> Any:
    """Return the state part of an envelope, or the payload itself."""
    if const.DATA_BACKUP_DATA in payload and const.DATA_BACKUP_VERSION in payload:
        return payload[const.DATA_BACKUP_DATA]
    return payload


def validate_backup_json(json_str: str) -> bool:
    """Validate that text is a plausible export.

    Accepts the export envelope or a bare state object that carries at least
    one of the known sections. Only the outer structure is checked; inner
    repair is left to migrate().

    Returns:
        True if the text can be imported.
    """
    try:
        payload = json.loads(json_str)
    except (TypeError, ValueError):
        return False
    if not isinstance(payload, dict):
        return False

    state = _unwrap(payload)
    if not isinstance(state, dict):
        return False
    return any(
        key in state
        for key in (
            const.DATA_CONFIG,
            const.DATA_ENTRIES,
            const.DATA_WEEKLY,
            const.DATA_META,
        )
    )


def import_state(
    json_str: str,
    track_definitions: Mapping[str, TrackDefinition] | None = None,
) -> PersistedState:
    """Parse, migrate and re-derive an imported state.

    Text that does not pass validate_backup_json() is refused before
    anything is migrated, so an unrelated object can never replace the
    history with an empty state.

    Raises:
        BackupImportError: If the text is not a recognizable export.
    """
    if not validate_backup_json(json_str):
        raise BackupImportError(
            "Import data is not an Immersion Tracker export (expected a JSON "
            "object with config, entries, weekly or meta)"
        )

    state = migrate(_unwrap(json.loads(json_str)), track_definitions)

    incoming_best = state[const.DATA_META][const.DATA_META_BEST_STREAK]
    recomputed = StreakEngine.best_streak(
        state[const.DATA_ENTRIES],
        state[const.DATA_CONFIG][const.DATA_CONFIG_GOALS],
        track_definitions,
    )
    if recomputed != incoming_best:
        const.LOGGER.info(
            "INFO: Import - best streak recomputed from history: %s (file said %s)",
            recomputed,
            incoming_best,
        )
    state[const.DATA_META][const.DATA_META_BEST_STREAK] = recomputed
    return state
