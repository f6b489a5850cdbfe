# File: services.py
"""Defines custom services for the Immersion Tracker integration.

These services are the only mutation surface: scripts, automations and
dashboards log activity, tick checklists and manage goals through them.
Every mutating service ends with exactly one explicit save.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import voluptuous as vol
from homeassistant.core import HomeAssistant, ServiceCall, ServiceResponse, SupportsResponse
from homeassistant.exceptions import HomeAssistantError, ServiceValidationError
from homeassistant.helpers import config_validation as cv

from . import const
from .data_builders import EntityValidationError
from .helpers.backup_helpers import BackupImportError
from .utils.dt_utils import InvalidDateError, dt_parse_date_key, dt_today_key

if TYPE_CHECKING:
    from .coordinator import ImmersionTrackerCoordinator

# --- Service Schemas ---
LOG_ACTIVITY_SCHEMA = vol.Schema(
    {
        vol.Optional(const.FIELD_DATE): cv.string,
        vol.Required(const.FIELD_TRACK): cv.string,
        vol.Required(const.FIELD_METRIC): cv.string,
        vol.Required(const.FIELD_VALUE): vol.All(
            vol.Coerce(float), vol.Range(min=0)
        ),
    }
)

SET_CHECKLIST_SCHEMA = vol.Schema(
    {
        vol.Optional(const.FIELD_DATE): cv.string,
        vol.Required(const.FIELD_TRACK): cv.string,
        vol.Required(const.FIELD_ITEM): cv.string,
        vol.Required(const.FIELD_DONE): cv.boolean,
    }
)

SET_NOTES_SCHEMA = vol.Schema(
    {
        vol.Optional(const.FIELD_DATE): cv.string,
        vol.Required(const.FIELD_NOTES): vol.Any(cv.string, None),
    }
)

RESET_DAY_SCHEMA = vol.Schema(
    {
        vol.Optional(const.FIELD_DATE): cv.string,
    }
)

SET_WEEKLY_OBLIGATION_SCHEMA = vol.Schema(
    {
        vol.Optional(const.FIELD_WEEK): cv.string,
        vol.Required(const.FIELD_OBLIGATION): cv.string,
        vol.Required(const.FIELD_DONE): cv.boolean,
    }
)

# Goal values: booleans stay booleans (checklist toggles), everything else
# must coerce to a number (metric thresholds).
UPDATE_GOALS_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_TRACK): cv.string,
        vol.Required(const.FIELD_GOALS): vol.Schema(
            {cv.string: vol.Any(bool, vol.Coerce(float))}
        ),
    }
)

GET_STREAKS_SCHEMA = vol.Schema(
    {
        vol.Optional(const.FIELD_DATE): cv.string,
    }
)

EXPORT_DATA_SCHEMA = vol.Schema({})

IMPORT_DATA_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_DATA): cv.string,
    }
)

# get_streaks response keys
RESPONSE_DAY = "day"
RESPONSE_WEEK_DAYS = "week_days"

SERVICES = (
    const.SERVICE_LOG_ACTIVITY,
    const.SERVICE_SET_CHECKLIST,
    const.SERVICE_SET_NOTES,
    const.SERVICE_RESET_DAY,
    const.SERVICE_SET_WEEKLY_OBLIGATION,
    const.SERVICE_UPDATE_GOALS,
    const.SERVICE_GET_STREAKS,
    const.SERVICE_EXPORT_DATA,
    const.SERVICE_IMPORT_DATA,
)


# ------------------ Helper Functions ------------------
def _get_coordinator(hass: HomeAssistant) -> ImmersionTrackerCoordinator:
    """Return the coordinator of the (single) loaded entry."""
    domain_entries = hass.data.get(const.DOMAIN)
    entry_id = next(iter(domain_entries), None) if domain_entries else None
    if entry_id is None:
        const.LOGGER.warning("WARNING: %s", const.MSG_NO_ENTRY_FOUND)
        raise HomeAssistantError(
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_NO_ENTRY,
        )
    return hass.data[const.DOMAIN][entry_id][const.COORDINATOR]


def _resolve_date(call: ServiceCall, field: str) -> str:
    """Return the DateKey from a call field, defaulting to today."""
    value = call.data.get(field)
    if not value:
        return dt_today_key()
    try:
        dt_parse_date_key(value)
    except InvalidDateError as err:
        raise ServiceValidationError(
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_INVALID_DATE,
            translation_placeholders={"date": str(value)},
        ) from err
    return value


def _validation_error(err: EntityValidationError) -> ServiceValidationError:
    """Translate a builder validation error for the service caller."""
    const.LOGGER.warning("WARNING: Rejected service input: %s", err)
    return ServiceValidationError(
        translation_domain=const.DOMAIN,
        translation_key=err.translation_key,
        translation_placeholders=err.placeholders,
    )


async def _async_commit(coordinator: ImmersionTrackerCoordinator) -> None:
    """Persist a finished mutation and publish a fresh snapshot."""
    coordinator.refresh_best_streak()
    await coordinator.async_save()
    await coordinator.async_request_refresh()


# --- Setup Services ---
def async_setup_services(hass: HomeAssistant) -> None:
    """Register Immersion Tracker services."""
    if hass.services.has_service(const.DOMAIN, const.SERVICE_LOG_ACTIVITY):
        return

    async def handle_log_activity(call: ServiceCall) -> None:
        """Handle setting a metric value for a track."""
        coordinator = _get_coordinator(hass)
        date_key = _resolve_date(call, const.FIELD_DATE)
        try:
            coordinator.log_activity(
                date_key,
                call.data[const.FIELD_TRACK],
                call.data[const.FIELD_METRIC],
                call.data[const.FIELD_VALUE],
            )
        except EntityValidationError as err:
            raise _validation_error(err) from err
        await _async_commit(coordinator)

    async def handle_set_checklist(call: ServiceCall) -> None:
        """Handle ticking or unticking a checklist item."""
        coordinator = _get_coordinator(hass)
        date_key = _resolve_date(call, const.FIELD_DATE)
        try:
            coordinator.set_checklist(
                date_key,
                call.data[const.FIELD_TRACK],
                call.data[const.FIELD_ITEM],
                call.data[const.FIELD_DONE],
            )
        except EntityValidationError as err:
            raise _validation_error(err) from err
        await _async_commit(coordinator)

    async def handle_set_notes(call: ServiceCall) -> None:
        """Handle replacing the notes of a day."""
        coordinator = _get_coordinator(hass)
        date_key = _resolve_date(call, const.FIELD_DATE)
        coordinator.set_notes(date_key, call.data[const.FIELD_NOTES] or "")
        await _async_commit(coordinator)

    async def handle_reset_day(call: ServiceCall) -> None:
        """Handle re-zeroing a day."""
        coordinator = _get_coordinator(hass)
        date_key = _resolve_date(call, const.FIELD_DATE)
        coordinator.reset_day(date_key)
        await _async_commit(coordinator)

    async def handle_set_weekly_obligation(call: ServiceCall) -> None:
        """Handle ticking a weekly obligation (any date inside the week)."""
        coordinator = _get_coordinator(hass)
        date_key = _resolve_date(call, const.FIELD_WEEK)
        try:
            coordinator.set_weekly_obligation(
                date_key,
                call.data[const.FIELD_OBLIGATION],
                call.data[const.FIELD_DONE],
            )
        except EntityValidationError as err:
            raise _validation_error(err) from err
        await _async_commit(coordinator)

    async def handle_update_goals(call: ServiceCall) -> None:
        """Handle updating the goals of one track."""
        coordinator = _get_coordinator(hass)
        try:
            coordinator.update_goals(
                call.data[const.FIELD_TRACK], dict(call.data[const.FIELD_GOALS])
            )
        except EntityValidationError as err:
            raise _validation_error(err) from err
        await _async_commit(coordinator)

    async def handle_get_streaks(call: ServiceCall) -> ServiceResponse:
        """Return current / best streak for a date (default today)."""
        coordinator = _get_coordinator(hass)
        date_key = _resolve_date(call, const.FIELD_DATE)
        summary = coordinator.streak_summary(date_key)
        return {
            const.FIELD_DATE: date_key,
            const.SNAPSHOT_CURRENT_STREAK: summary["current_streak"],
            const.SNAPSHOT_BEST_STREAK: summary["best_streak"],
            const.SNAPSHOT_TODAY_COMPLETE: summary["today_complete"],
            RESPONSE_DAY: coordinator.evaluate_day(date_key),
            RESPONSE_WEEK_DAYS: coordinator.week_days(date_key),
        }

    async def handle_export_data(call: ServiceCall) -> ServiceResponse:
        """Return the export JSON text; pass it unchanged to import_data."""
        coordinator = _get_coordinator(hass)
        return {const.FIELD_DATA: coordinator.export_json()}

    async def handle_import_data(call: ServiceCall) -> None:
        """Handle replacing the whole state with imported JSON."""
        coordinator = _get_coordinator(hass)
        try:
            coordinator.import_state(call.data[const.FIELD_DATA])
        except BackupImportError as err:
            const.LOGGER.error("ERROR: Import failed: %s", err)
            raise ServiceValidationError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_IMPORT_FAILED,
                translation_placeholders={"error": str(err)},
            ) from err
        await _async_commit(coordinator)

    # --- Register Services ---
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_LOG_ACTIVITY,
        handle_log_activity,
        schema=LOG_ACTIVITY_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_SET_CHECKLIST,
        handle_set_checklist,
        schema=SET_CHECKLIST_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_SET_NOTES,
        handle_set_notes,
        schema=SET_NOTES_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_RESET_DAY,
        handle_reset_day,
        schema=RESET_DAY_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_SET_WEEKLY_OBLIGATION,
        handle_set_weekly_obligation,
        schema=SET_WEEKLY_OBLIGATION_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_UPDATE_GOALS,
        handle_update_goals,
        schema=UPDATE_GOALS_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_GET_STREAKS,
        handle_get_streaks,
        schema=GET_STREAKS_SCHEMA,
        supports_response=SupportsResponse.ONLY,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_EXPORT_DATA,
        handle_export_data,
        schema=EXPORT_DATA_SCHEMA,
        supports_response=SupportsResponse.ONLY,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_IMPORT_DATA,
        handle_import_data,
        schema=IMPORT_DATA_SCHEMA,
    )

    const.LOGGER.info("INFO: Immersion Tracker services have been registered successfully")


async def async_unload_services(hass: HomeAssistant) -> None:
    """Unregister Immersion Tracker services when unloading the integration."""
    for service in SERVICES:
        if hass.services.has_service(const.DOMAIN, service):
            hass.services.async_remove(const.DOMAIN, service)

    const.LOGGER.info("INFO: Immersion Tracker services have been unregistered")
