# File: coordinator.py
"""Coordinator for the Immersion Tracker integration.

Owns the in-memory tracker state (the explicit state handle) and exposes one
method per mutation. Engines receive the state as read-only snapshots.

Persistence is explicit: mutations never save on their own. Callers run
`refresh_best_streak()` and `async_save()` once after a batch of changes.
The periodic refresh recomputes the streak snapshot so day rollovers show up
without user activity.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Any

from homeassistant.helpers.update_coordinator import DataUpdateCoordinator

from . import const, data_builders as db
from .engines import CompletionEngine, StreakEngine
from .helpers import backup_helpers as bh
from .utils.dt_utils import (
    dt_iter_date_keys,
    dt_parse_date_key,
    dt_today_key,
    dt_week_key,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

    from .store import ImmersionTrackerStore
    from .type_defs import (
        DailyEntry,
        DayProgress,
        GoalConfig,
        PersistedState,
        StreakSummary,
        WeeklyEntry,
        WeeklySummary,
    )


class ImmersionTrackerCoordinator(DataUpdateCoordinator[dict[str, Any]]):
    """Coordinator for Immersion Tracker.

    `data` holds the latest snapshot:
        {today, current_streak, best_streak, today_complete,
         week_key, weekly_done, weekly_total}
    """

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        store: ImmersionTrackerStore,
        state: PersistedState,
    ) -> None:
        """Initialize the coordinator with an already loaded state."""
        update_interval_minutes = config_entry.options.get(
            const.CONF_UPDATE_INTERVAL,
            config_entry.data.get(
                const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
            ),
        )

        super().__init__(
            hass,
            const.LOGGER,
            config_entry=config_entry,
            name=f"{const.DOMAIN}{const.COORDINATOR_SUFFIX}",
            update_interval=timedelta(minutes=update_interval_minutes),
        )
        self.store = store
        self._state: PersistedState = state

    # -------------------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------------------

    @property
    def state(self) -> PersistedState:
        """Return the live state (treat as read-only outside this class)."""
        return self._state

    @property
    def goals(self) -> GoalConfig:
        """Return the goal configuration."""
        return self._state[const.DATA_CONFIG][const.DATA_CONFIG_GOALS]

    @property
    def entries(self) -> dict[str, DailyEntry]:
        """Return the DateKey -> DailyEntry mapping."""
        return self._state[const.DATA_ENTRIES]

    @property
    def weekly(self) -> dict[str, WeeklyEntry]:
        """Return the WeekKey -> WeeklyEntry mapping."""
        return self._state[const.DATA_WEEKLY]

    @property
    def best_streak(self) -> int:
        """Return the persisted best streak."""
        return self._state[const.DATA_META][const.DATA_META_BEST_STREAK]

    def evaluate_day(self, date_key: str) -> DayProgress:
        """Return the per-track progress for a day."""
        dt_parse_date_key(date_key)
        return CompletionEngine.evaluate_day(
            self.entries.get(date_key), self.goals, date_key
        )

    def streak_summary(self, date_key: str | None = None) -> StreakSummary:
        """Compute current / best streaks ending at date_key (default today)."""
        return StreakEngine.summarize(
            self.entries,
            self.goals,
            date_key or dt_today_key(),
            self.best_streak,
        )

    def week_days(self, date_key: str | None = None) -> dict[str, bool]:
        """Return {DateKey: complete} from the week start through date_key."""
        end_key = date_key or dt_today_key()
        return {
            day: CompletionEngine.is_day_complete(self.entries.get(day), self.goals)
            for day in dt_iter_date_keys(dt_week_key(end_key), end_key)
        }

    def weekly_summary(self, date_key: str | None = None) -> WeeklySummary:
        """Summarize weekly obligations for the week containing date_key."""
        week_key = dt_week_key(date_key or dt_today_key())
        return CompletionEngine.summarize_week(
            self.weekly.get(week_key),
            self._state[const.DATA_CONFIG][const.DATA_CONFIG_WEEKLY],
            week_key,
        )

    # -------------------------------------------------------------------------------------
    # Lazy creation
    # -------------------------------------------------------------------------------------

    def _update_entry(
        self, date_key: str, setter: Callable[..., DailyEntry], *args: Any
    ) -> None:
        """Run a data_builders setter on the entry for date_key.

        A missing entry is materialized zeroed, but only stored once the
        setter has accepted its arguments; a rejected call leaves no trace.
        """
        dt_parse_date_key(date_key)
        entry = self.entries.get(date_key)
        if entry is not None:
            setter(entry, *args)
            return
        self.entries[date_key] = setter(db.build_daily_entry(), *args)
        const.LOGGER.debug("DEBUG: Created daily entry for %s", date_key)

    def _update_week(
        self, date_key: str, setter: Callable[..., WeeklyEntry], *args: Any
    ) -> None:
        """Run a data_builders setter on the weekly entry containing date_key."""
        week_key = dt_week_key(date_key)
        week = self.weekly.get(week_key)
        if week is not None:
            setter(week, *args)
            return
        self.weekly[week_key] = setter(db.build_weekly_entry(), *args)
        const.LOGGER.debug("DEBUG: Created weekly entry for %s", week_key)

    # -------------------------------------------------------------------------------------
    # Mutations (no implicit save)
    # -------------------------------------------------------------------------------------

    def log_activity(
        self, date_key: str, track_id: str, metric: str, value: float
    ) -> None:
        """Set a metric value for a track on a day."""
        self._update_entry(date_key, db.set_track_metric, track_id, metric, value)
        const.LOGGER.info(
            "INFO: Logged %s.%s=%s for %s", track_id, metric, value, date_key
        )

    def set_checklist(
        self, date_key: str, track_id: str, item: str, done: bool
    ) -> None:
        """Tick or untick a checklist item for a track on a day."""
        self._update_entry(date_key, db.set_track_checklist, track_id, item, done)
        const.LOGGER.info(
            "INFO: Checklist %s.%s=%s for %s", track_id, item, done, date_key
        )

    def set_notes(self, date_key: str, notes: str) -> None:
        """Replace the notes of a day."""
        self._update_entry(date_key, db.set_entry_notes, notes)

    def reset_day(self, date_key: str) -> None:
        """Re-zero the entry for a day (the date stays recorded)."""
        self._update_entry(date_key, db.reset_daily_entry)
        const.LOGGER.info("INFO: Reset daily entry for %s", date_key)

    def set_weekly_obligation(self, date_key: str, obligation: str, done: bool) -> None:
        """Tick or untick a weekly obligation for the week containing date_key."""
        self._update_week(date_key, db.set_weekly_obligation, obligation, done)

    def update_goals(self, track_id: str, updates: dict[str, Any]) -> None:
        """Update one track's goals.

        Goals apply retroactively: the next streak computation re-evaluates
        the whole history against them. The persisted best never drops.
        """
        db.update_track_goals(self.goals, track_id, updates)
        const.LOGGER.info("INFO: Updated goals for %s: %s", track_id, updates)

    def replace_state(self, state: PersistedState) -> None:
        """Swap in a complete state (used by import)."""
        self._state = state
        const.LOGGER.info(
            "INFO: State replaced: %s entries, best streak %s",
            len(self.entries),
            self.best_streak,
        )

    def refresh_best_streak(self) -> int:
        """Raise meta.best_streak if the history now supports a longer run.

        Returns:
            The (possibly unchanged) persisted best streak.
        """
        computed = StreakEngine.best_streak(self.entries, self.goals)
        if computed > self.best_streak:
            const.LOGGER.info(
                "INFO: New best streak: %s (was %s)", computed, self.best_streak
            )
            self._state[const.DATA_META][const.DATA_META_BEST_STREAK] = computed
        return self.best_streak

    # -------------------------------------------------------------------------------------
    # Import / Export
    # -------------------------------------------------------------------------------------

    def export_json(self) -> str:
        """Return the state as export JSON text, accepted back by import_state."""
        return bh.export_state(self._state)

    def import_state(self, json_str: str) -> None:
        """Replace the state with an imported one.

        Raises:
            BackupImportError: If the text cannot be parsed.
        """
        self.replace_state(bh.import_state(json_str))

    # -------------------------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------------------------

    async def async_save(self) -> bool:
        """Save the current state (best-effort, never raises)."""
        return await self.store.async_save(self._state)

    # -------------------------------------------------------------------------------------
    # Refresh
    # -------------------------------------------------------------------------------------

    async def _async_update_data(self) -> dict[str, Any]:
        """Recompute the streak snapshot for today."""
        previous_best = self.best_streak
        self.refresh_best_streak()
        if self.best_streak != previous_best:
            await self.async_save()

        today = dt_today_key()
        summary = self.streak_summary(today)
        weekly = self.weekly_summary(today)
        return {
            const.SNAPSHOT_TODAY: today,
            const.SNAPSHOT_CURRENT_STREAK: summary["current_streak"],
            const.SNAPSHOT_BEST_STREAK: summary["best_streak"],
            const.SNAPSHOT_TODAY_COMPLETE: summary["today_complete"],
            const.SNAPSHOT_WEEK_KEY: weekly["week_key"],
            const.SNAPSHOT_WEEKLY_DONE: len(weekly["done"]),
            const.SNAPSHOT_WEEKLY_TOTAL: weekly["total"],
        }
