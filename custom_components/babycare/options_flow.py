# File: options_flow.py
"""Options Flow for the BabyCare integration, managing children by internal_id.

Handles add/edit/delete of children and the general options, and reloads the
integration so per-child entities follow the changes.
"""
# pylint: disable=protected-access

from typing import Any, Optional

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.helpers import selector

from . import const
from . import flow_helpers as fh


class BabyCareOptionsFlowHandler(config_entries.OptionsFlow):
    """Options Flow for adding/editing/deleting children and general options."""

    def __init__(self, _config_entry: config_entries.ConfigEntry):
        """Initialize the options flow."""
        self._entry_options: dict[str, Any] = {}
        self._action: Optional[str] = None
        self._child_id: Optional[str] = None
        self._reload_needed = False

    def _get_coordinator(self):
        """Get the coordinator from hass.data."""
        return self.hass.data[const.DOMAIN][self.config_entry.entry_id][
            const.COORDINATOR
        ]

    async def async_step_init(self, user_input=None):
        """Display the main menu for the Options Flow."""
        if self._reload_needed and user_input is None:
            const.LOGGER.debug("DEBUG: Performing deferred reload after child changes")
            self._reload_needed = False
            await self._reload_entry_after_child_change()

        self._entry_options = dict(self.config_entry.options)

        if user_input is not None:
            selection = user_input[const.OPTIONS_FLOW_INPUT_MENU_SELECTION]

            if selection == const.OPTIONS_FLOW_MANAGE_CHILDREN:
                return await self.async_step_manage_children()
            if selection == const.OPTIONS_FLOW_GENERAL_OPTIONS:
                return await self.async_step_general_options()
            if selection == const.OPTIONS_FLOW_FINISH:
                return self.async_abort(reason=const.TRANS_KEY_CFOF_SETUP_COMPLETE)

        main_menu = [
            const.OPTIONS_FLOW_MANAGE_CHILDREN,
            const.OPTIONS_FLOW_GENERAL_OPTIONS,
            const.OPTIONS_FLOW_FINISH,
        ]

        return self.async_show_form(
            step_id=const.OPTIONS_FLOW_STEP_INIT,
            data_schema=vol.Schema(
                {
                    vol.Required(
                        const.OPTIONS_FLOW_INPUT_MENU_SELECTION
                    ): selector.SelectSelector(
                        selector.SelectSelectorConfig(
                            options=main_menu,
                            mode=selector.SelectSelectorMode.LIST,
                            translation_key=const.TRANS_KEY_CFOF_MAIN_MENU,
                        )
                    )
                }
            ),
        )

    async def async_step_manage_children(self, user_input=None):
        """Choose to add, edit or delete a child."""
        if user_input is not None:
            self._action = user_input[const.OPTIONS_FLOW_INPUT_ACTION]
            if self._action == const.OPTIONS_FLOW_ACTIONS_ADD:
                return await self.async_step_add_child()
            if self._action in (
                const.OPTIONS_FLOW_ACTIONS_EDIT,
                const.OPTIONS_FLOW_ACTIONS_DELETE,
            ):
                return await self.async_step_select_child()
            return await self.async_step_init()

        manage_action_choices = [
            const.OPTIONS_FLOW_ACTIONS_ADD,
            const.OPTIONS_FLOW_ACTIONS_EDIT,
            const.OPTIONS_FLOW_ACTIONS_DELETE,
            const.OPTIONS_FLOW_ACTIONS_BACK,
        ]

        return self.async_show_form(
            step_id=const.OPTIONS_FLOW_STEP_MANAGE_CHILDREN,
            data_schema=vol.Schema(
                {
                    vol.Required(const.OPTIONS_FLOW_INPUT_ACTION): selector.SelectSelector(
                        selector.SelectSelectorConfig(
                            options=manage_action_choices,
                            mode=selector.SelectSelectorMode.LIST,
                            translation_key=const.TRANS_KEY_CFOF_MANAGE_ACTIONS,
                        )
                    )
                }
            ),
        )

    # ------------------ ADD / SELECT / EDIT / DELETE ------------------

    async def async_step_add_child(self, user_input=None):
        """Add a new child."""
        coordinator = self._get_coordinator()
        errors: dict[str, str] = {}

        if user_input is not None:
            errors = fh.validate_children_inputs(user_input, coordinator.children_data)

            if not errors:
                child_data = fh.build_children_data(user_input)
                internal_id = next(iter(child_data))
                coordinator.create_child(internal_id, child_data[internal_id])

                const.LOGGER.debug(
                    "DEBUG: Added Child '%s' with ID: %s",
                    child_data[internal_id][const.DATA_CHILD_NAME],
                    internal_id,
                )
                self._mark_reload_needed()
                return await self.async_step_init()

        return self.async_show_form(
            step_id=const.OPTIONS_FLOW_STEP_ADD_CHILD,
            data_schema=fh.build_child_schema(),
            errors=errors,
        )

    async def async_step_select_child(self, user_input=None):
        """Select the child to edit or delete."""
        children = self._get_coordinator().children_data
        child_names = [
            info.get(const.DATA_CHILD_NAME, child_id)
            for child_id, info in children.items()
        ]

        if user_input is not None:
            selected_name = str(user_input[const.CFOF_CHILDREN_INPUT_SELECTION])
            self._child_id = next(
                (
                    child_id
                    for child_id, info in children.items()
                    if info.get(const.DATA_CHILD_NAME) == selected_name
                ),
                None,
            )
            if not self._child_id:
                const.LOGGER.error("ERROR: Selected child '%s' not found", selected_name)
                return self.async_abort(reason=const.TRANS_KEY_CFOF_INVALID_CHILD)

            if self._action == const.OPTIONS_FLOW_ACTIONS_EDIT:
                return await self.async_step_edit_child()
            return await self.async_step_delete_child()

        if not child_names:
            return self.async_abort(reason=const.TRANS_KEY_CFOF_NO_CHILDREN)

        return self.async_show_form(
            step_id=const.OPTIONS_FLOW_STEP_SELECT_CHILD,
            data_schema=vol.Schema(
                {
                    vol.Required(
                        const.CFOF_CHILDREN_INPUT_SELECTION
                    ): selector.SelectSelector(
                        selector.SelectSelectorConfig(
                            options=child_names,
                            mode=selector.SelectSelectorMode.DROPDOWN,
                            sort=True,
                        )
                    )
                }
            ),
        )

    async def async_step_edit_child(self, user_input=None):
        """Edit an existing child."""
        coordinator = self._get_coordinator()
        children = coordinator.children_data
        errors: dict[str, str] = {}

        if not self._child_id or self._child_id not in children:
            const.LOGGER.error(
                "ERROR: Edit Child - Invalid Internal ID '%s'", self._child_id
            )
            return self.async_abort(reason=const.TRANS_KEY_CFOF_INVALID_CHILD)

        child_info = children[self._child_id]

        if user_input is not None:
            errors = fh.validate_children_inputs(user_input, children, self._child_id)

            if not errors:
                child_data = fh.build_children_data(
                    {**user_input, const.CFOF_GLOBAL_INPUT_INTERNAL_ID: self._child_id}
                )[self._child_id]
                coordinator.update_child(
                    self._child_id,
                    {
                        const.DATA_CHILD_NAME: child_data[const.DATA_CHILD_NAME],
                        const.DATA_CHILD_AGE: child_data[const.DATA_CHILD_AGE],
                        const.DATA_CHILD_BIRTH_DATE: child_data[
                            const.DATA_CHILD_BIRTH_DATE
                        ],
                    },
                )
                const.LOGGER.debug(
                    "DEBUG: Edited Child '%s' with ID: %s",
                    child_data[const.DATA_CHILD_NAME],
                    self._child_id,
                )
                self._mark_reload_needed()
                return await self.async_step_init()

        # Estimated birth dates are not offered back as explicit ones
        default_birth_date = (
            None
            if child_info.get(const.DATA_CHILD_BIRTH_DATE_ESTIMATED, False)
            else child_info.get(const.DATA_CHILD_BIRTH_DATE)
        )
        return self.async_show_form(
            step_id=const.OPTIONS_FLOW_STEP_EDIT_CHILD,
            data_schema=fh.build_child_schema(
                default_child_name=child_info.get(const.DATA_CHILD_NAME, const.CONF_EMPTY),
                default_age=child_info.get(const.DATA_CHILD_AGE, const.CONF_EMPTY),
                default_birth_date=default_birth_date,
            ),
            errors=errors,
        )

    async def async_step_delete_child(self, user_input=None):
        """Delete a child."""
        coordinator = self._get_coordinator()
        children = coordinator.children_data

        if not self._child_id or self._child_id not in children:
            const.LOGGER.error(
                "ERROR: Delete Child - Invalid Internal ID '%s'", self._child_id
            )
            return self.async_abort(reason=const.TRANS_KEY_CFOF_INVALID_CHILD)

        child_name = children[self._child_id].get(const.DATA_CHILD_NAME)

        if user_input is not None:
            coordinator.delete_child(self._child_id)
            const.LOGGER.debug(
                "DEBUG: Deleted Child '%s' with ID: %s", child_name, self._child_id
            )
            self._child_id = None
            return await self.async_step_init()

        return self.async_show_form(
            step_id=const.OPTIONS_FLOW_STEP_DELETE_CHILD,
            data_schema=vol.Schema({}),
            description_placeholders={const.OPTIONS_FLOW_PLACEHOLDER_CHILD_NAME: child_name},
        )

    # ------------------ GENERAL OPTIONS ------------------

    async def async_step_general_options(self, user_input=None):
        """Manage update interval and calendar window."""
        if user_input is not None:
            self._entry_options.update(fh.build_general_options_data(user_input))
            const.LOGGER.debug(
                "DEBUG: General Options Updated: Update Interval=%s, "
                "Calendar Period to Show=%s",
                self._entry_options.get(const.CONF_UPDATE_INTERVAL),
                self._entry_options.get(const.CONF_CALENDAR_SHOW_PERIOD),
            )
            await self._update_system_settings_and_reload()
            return await self.async_step_init()

        return self.async_show_form(
            step_id=const.OPTIONS_FLOW_STEP_GENERAL_OPTIONS,
            data_schema=fh.build_general_options_schema(self._entry_options),
        )

    # ------------------ HELPER METHODS ------------------

    def _mark_reload_needed(self):
        """Defer the reload until the user is back at the main menu."""
        const.LOGGER.debug("DEBUG: Marking reload needed after child change")
        self._reload_needed = True

    async def _reload_entry_after_child_change(self):
        """Save pending data, then reload the entry so per-child entities are recreated."""
        await self._get_coordinator().store.async_save()
        await self.hass.config_entries.async_reload(self.config_entry.entry_id)
        const.LOGGER.debug("DEBUG: Entry reloaded after child change")

    async def _update_system_settings_and_reload(self):
        """Store new options and reload the entry."""
        await self._get_coordinator().store.async_save()
        self.hass.config_entries.async_update_entry(
            self.config_entry, options=self._entry_options
        )
        await self.hass.config_entries.async_reload(self.config_entry.entry_id)
        const.LOGGER.debug("DEBUG: System settings updated and BabyCare reloaded")
