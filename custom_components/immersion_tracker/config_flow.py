# File: config_flow.py
"""Config flow for the Immersion Tracker integration.

A single instance is allowed. The only setting is how often (in minutes) the
coordinator recomputes the streak snapshot; goals are edited through the
`update_goals` service because they live in storage, not in the entry.
"""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.core import callback

from . import const


def _update_interval_schema(default: int) -> vol.Schema:
    return vol.Schema(
        {
            vol.Required(const.CONF_UPDATE_INTERVAL, default=default): vol.All(
                vol.Coerce(int),
                vol.Range(
                    min=const.MIN_UPDATE_INTERVAL, max=const.MAX_UPDATE_INTERVAL
                ),
            ),
        }
    )


class ImmersionTrackerConfigFlow(config_entries.ConfigFlow, domain=const.DOMAIN):
    """Config Flow for Immersion Tracker."""

    VERSION = 1

    async def async_step_user(self, user_input: dict[str, Any] | None = None):
        """Create the (single) entry."""
        if any(self._async_current_entries()):
            return self.async_abort(reason=const.TRANS_KEY_ERROR_SINGLE_INSTANCE)

        if user_input is not None:
            const.LOGGER.debug("DEBUG: Creating entry with %s", user_input)
            return self.async_create_entry(
                title=const.IMMERSION_TRACKER_TITLE, data=user_input
            )

        return self.async_show_form(
            step_id=const.CONFIG_FLOW_STEP_USER,
            data_schema=_update_interval_schema(const.DEFAULT_UPDATE_INTERVAL),
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        """Return the Options Flow."""
        return ImmersionTrackerOptionsFlowHandler()


class ImmersionTrackerOptionsFlowHandler(config_entries.OptionsFlow):
    """Options Flow for changing the update interval."""

    async def async_step_init(self, user_input: dict[str, Any] | None = None):
        """Show / store the update interval."""
        if user_input is not None:
            return self.async_create_entry(title="", data=user_input)

        current = self.config_entry.options.get(
            const.CONF_UPDATE_INTERVAL,
            self.config_entry.data.get(
                const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
            ),
        )
        return self.async_show_form(
            step_id=const.OPTIONS_FLOW_STEP_INIT,
            data_schema=_update_interval_schema(current),
        )
