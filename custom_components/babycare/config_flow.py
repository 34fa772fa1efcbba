# File: config_flow.py
"""Config flow for the BabyCare integration.

A single instance holds every child. Setup only asks for the general options;
children are added afterwards from the options flow.
"""

from typing import Any, Optional

from homeassistant import config_entries
from homeassistant.core import callback

from . import const
from . import flow_helpers as fh
from .options_flow import BabyCareOptionsFlowHandler


class BabyCareConfigFlow(config_entries.ConfigFlow, domain=const.DOMAIN):
    """Config Flow for BabyCare."""

    VERSION = 1

    async def async_step_user(self, user_input: Optional[dict[str, Any]] = None):
        """Ask for the general options and create the entry."""
        if any(self._async_current_entries()):
            return self.async_abort(reason=const.TRANS_KEY_ERROR_SINGLE_INSTANCE)

        if user_input is not None:
            options = fh.build_general_options_data(user_input)
            const.LOGGER.debug("DEBUG: Creating BabyCare entry with options %s", options)
            return self.async_create_entry(
                title=const.BABYCARE_TITLE, data={}, options=options
            )

        return self.async_show_form(
            step_id=const.CONFIG_FLOW_STEP_USER,
            data_schema=fh.build_general_options_schema(),
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        """Return the Options Flow."""
        return BabyCareOptionsFlowHandler(config_entry)
