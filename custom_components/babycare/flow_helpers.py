# File: flow_helpers.py
"""Helpers for the BabyCare integration's Config and Options flow.

Provides schema builders and input-processing logic for internal_id-based
management of children. Each form follows the same three-part pattern:

- validate_<thing>_inputs(user_input, existing) -> errors_dict
- build_<thing>_schema(defaults) -> vol.Schema
- build_<thing>_data(user_input) -> storage-format dict

```python
errors = validate_children_inputs(user_input, coordinator.children_data)
if not errors:
    child_data = build_children_data(user_input)
```
"""

import uuid
from typing import Any, Dict, Optional

import voluptuous as vol
from homeassistant.helpers import selector

from . import const
from .utils import dt_utils

# ----------------------------------------------------------------------------------
# CHILDREN SCHEMA
# ----------------------------------------------------------------------------------


def build_child_schema(
    default_child_name: str = const.CONF_EMPTY,
    default_age: str = const.CONF_EMPTY,
    default_birth_date: Optional[str] = None,
) -> vol.Schema:
    """Build a Voluptuous schema for adding/editing a child."""
    birth_date_key = (
        vol.Optional(const.CFOF_CHILDREN_INPUT_BIRTH_DATE)
        if not default_birth_date
        else vol.Optional(
            const.CFOF_CHILDREN_INPUT_BIRTH_DATE, default=default_birth_date
        )
    )
    return vol.Schema(
        {
            vol.Required(
                const.CFOF_CHILDREN_INPUT_NAME, default=default_child_name
            ): str,
            vol.Optional(
                const.CFOF_CHILDREN_INPUT_AGE, default=default_age
            ): selector.TextSelector(selector.TextSelectorConfig(multiline=False)),
            birth_date_key: selector.DateSelector(),
        }
    )


def validate_children_inputs(
    user_input: Dict[str, Any],
    existing_children: Optional[Dict[str, Any]] = None,
    internal_id: Optional[str] = None,
) -> Dict[str, str]:
    """Validate child configuration inputs.

    Args:
        user_input: Dictionary containing user inputs from the form.
        existing_children: Existing children for duplicate checking.
        internal_id: Id of the child being edited, excluded from the duplicate check.

    Returns:
        Dictionary of errors (empty if validation passes).
    """
    errors: Dict[str, str] = {}

    child_name = user_input.get(const.CFOF_CHILDREN_INPUT_NAME, const.CONF_EMPTY).strip()
    if not child_name:
        errors[const.CFOP_ERROR_CHILD_NAME] = const.TRANS_KEY_CFOF_INVALID_CHILD_NAME
        return errors

    if existing_children and any(
        child_info.get(const.DATA_CHILD_NAME) == child_name and child_id != internal_id
        for child_id, child_info in existing_children.items()
    ):
        errors[const.CFOP_ERROR_CHILD_NAME] = const.TRANS_KEY_CFOF_DUPLICATE_CHILD
        return errors

    age = (user_input.get(const.CFOF_CHILDREN_INPUT_AGE) or const.CONF_EMPTY).strip()
    birth_date = user_input.get(const.CFOF_CHILDREN_INPUT_BIRTH_DATE)

    if not age and not birth_date:
        errors[const.CFOP_ERROR_BASE] = const.TRANS_KEY_CFOF_AGE_REQUIRED
    elif birth_date and dt_utils.dt_parse_date(birth_date) is None:
        errors[const.CFOP_ERROR_AGE] = const.TRANS_KEY_CFOF_INVALID_BIRTH_DATE

    return errors


def build_children_data(user_input: Dict[str, Any]) -> Dict[str, Any]:
    """Build child data from user input.

    Converts form input (CFOF_* keys) to storage format (DATA_* keys).
    The coordinator resolves the birth date when the child is stored.

    Returns:
        Dictionary with child data in storage format, keyed by internal_id.
    """
    internal_id = user_input.get(const.CFOF_GLOBAL_INPUT_INTERNAL_ID, str(uuid.uuid4()))
    birth_date = dt_utils.dt_parse_date(
        user_input.get(const.CFOF_CHILDREN_INPUT_BIRTH_DATE)
    )

    return {
        internal_id: {
            const.DATA_CHILD_INTERNAL_ID: internal_id,
            const.DATA_CHILD_NAME: user_input.get(
                const.CFOF_CHILDREN_INPUT_NAME, const.CONF_EMPTY
            ).strip(),
            const.DATA_CHILD_AGE: (
                user_input.get(const.CFOF_CHILDREN_INPUT_AGE) or const.CONF_EMPTY
            ).strip(),
            const.DATA_CHILD_BIRTH_DATE: birth_date.isoformat() if birth_date else None,
        }
    }


# ----------------------------------------------------------------------------------
# GENERAL OPTIONS SCHEMA
# ----------------------------------------------------------------------------------


def build_general_options_schema(default: Optional[dict] = None) -> vol.Schema:
    """Build schema for general options: update interval and calendar window."""
    default = default or {}
    default_interval = default.get(
        const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
    )
    default_calendar_period = default.get(
        const.CONF_CALENDAR_SHOW_PERIOD, const.DEFAULT_CALENDAR_SHOW_PERIOD
    )

    return vol.Schema(
        {
            vol.Required(
                const.CONF_UPDATE_INTERVAL, default=default_interval
            ): selector.NumberSelector(
                selector.NumberSelectorConfig(
                    mode=selector.NumberSelectorMode.BOX,
                    min=1,
                    step=1,
                )
            ),
            vol.Required(
                const.CONF_CALENDAR_SHOW_PERIOD, default=default_calendar_period
            ): selector.NumberSelector(
                selector.NumberSelectorConfig(
                    mode=selector.NumberSelectorMode.BOX,
                    min=1,
                    step=1,
                )
            ),
        }
    )


def build_general_options_data(user_input: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize general options to whole numbers."""
    return {
        const.CONF_UPDATE_INTERVAL: int(
            user_input.get(const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL)
        ),
        const.CONF_CALENDAR_SHOW_PERIOD: int(
            user_input.get(
                const.CONF_CALENDAR_SHOW_PERIOD, const.DEFAULT_CALENDAR_SHOW_PERIOD
            )
        ),
    }
