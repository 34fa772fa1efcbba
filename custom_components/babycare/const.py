# File: const.py
"""Constants for the BabyCare integration.

This file centralizes configuration keys, defaults, storage keys, service
names, attribute names and platform identifiers for consistency across the
integration.
"""

import logging

import homeassistant.util.dt as dt_util
from homeassistant.const import Platform

from .utils import dt_utils


def set_default_timezone(hass):
    """Set the default timezone based on the Home Assistant configuration."""
    global DEFAULT_TIME_ZONE
    DEFAULT_TIME_ZONE = dt_util.get_time_zone(hass.config.time_zone)
    if DEFAULT_TIME_ZONE is not None:
        dt_utils.set_default_timezone(DEFAULT_TIME_ZONE)


# ------------------------------------------------------------------------------------------------
# General / Integration Information
# ------------------------------------------------------------------------------------------------
# Integration Name
BABYCARE_TITLE = "BabyCare"

# Integration Domain
DOMAIN = "babycare"

# Logger
LOGGER = logging.getLogger(__package__)

# Supported Platforms
PLATFORMS = [
    Platform.CALENDAR,
    Platform.SENSOR,
]

# Coordinator
COORDINATOR = "coordinator"
COORDINATOR_SUFFIX = "_coordinator"
STORE = "store"

# Storage and Versioning
STORAGE_KEY = "babycare_data"
STORAGE_VERSION = 1
SCHEMA_VERSION = 1

# Default timezone: initially None, to be set once hass is available.
DEFAULT_TIME_ZONE = None

# ------------------------------------------------------------------------------------------------
# Configuration Keys
# ------------------------------------------------------------------------------------------------

CONF_UPDATE_INTERVAL = "update_interval"
CONF_CALENDAR_SHOW_PERIOD = "calendar_show_period"
CONF_EMPTY = ""

# Defaults
DEFAULT_UPDATE_INTERVAL = 5
DEFAULT_CALENDAR_SHOW_PERIOD = 400

# Config Flow Steps
CONFIG_FLOW_STEP_USER = "user"

# Options Flow Steps
OPTIONS_FLOW_STEP_INIT = "init"
OPTIONS_FLOW_STEP_MANAGE_CHILDREN = "manage_children"
OPTIONS_FLOW_STEP_ADD_CHILD = "add_child"
OPTIONS_FLOW_STEP_SELECT_CHILD = "select_child"
OPTIONS_FLOW_STEP_EDIT_CHILD = "edit_child"
OPTIONS_FLOW_STEP_DELETE_CHILD = "delete_child"
OPTIONS_FLOW_STEP_GENERAL_OPTIONS = "general_options"

# Options Flow Menu Selections
OPTIONS_FLOW_INPUT_MENU_SELECTION = "menu_selection"
OPTIONS_FLOW_INPUT_ACTION = "action"
OPTIONS_FLOW_MANAGE_CHILDREN = "manage_children"
OPTIONS_FLOW_GENERAL_OPTIONS = "general_options"
OPTIONS_FLOW_FINISH = "done"
OPTIONS_FLOW_ACTIONS_ADD = "add"
OPTIONS_FLOW_ACTIONS_EDIT = "edit"
OPTIONS_FLOW_ACTIONS_DELETE = "delete"
OPTIONS_FLOW_ACTIONS_BACK = "back"

# Config/Options Flow form fields (CFOF)
CFOF_CHILDREN_INPUT_NAME = "child_name"
CFOF_CHILDREN_INPUT_AGE = "age"
CFOF_CHILDREN_INPUT_BIRTH_DATE = "birth_date"
CFOF_CHILDREN_INPUT_SELECTION = "child"
CFOF_GLOBAL_INPUT_INTERNAL_ID = "internal_id"

# Config/Options Flow error keys (CFOP)
CFOP_ERROR_BASE = "base"
CFOP_ERROR_CHILD_NAME = "child_name"
CFOP_ERROR_AGE = "age"

# ------------------------------------------------------------------------------------------------
# Storage Data Keys
# ------------------------------------------------------------------------------------------------

DATA_META = "meta"
DATA_META_SCHEMA_VERSION = "schema_version"

DATA_CHILDREN = "children"
DATA_VACCINATIONS = "vaccinations"

# Child fields
DATA_CHILD_INTERNAL_ID = "internal_id"
DATA_CHILD_NAME = "name"
DATA_CHILD_AGE = "age"
DATA_CHILD_BIRTH_DATE = "birth_date"
DATA_CHILD_BIRTH_DATE_ESTIMATED = "birth_date_estimated"

# Completion record fields
DATA_COMPLETION_COMPLETED_DATE = "completed_date"
DATA_COMPLETION_NOTES = "notes"

# ------------------------------------------------------------------------------------------------
# Vaccination Status
# ------------------------------------------------------------------------------------------------

VACCINATION_STATUS_COMPLETED = "completed"
VACCINATION_STATUS_OVERDUE = "overdue"
VACCINATION_STATUS_DUE_THIS_MONTH = "due_this_month"
VACCINATION_STATUS_UPCOMING = "upcoming"

# Age unit keywords, checked in this order
AGE_UNIT_DAY = "day"
AGE_UNIT_MONTH = "month"
AGE_UNIT_YEAR = "year"

# Display key for unparseable dates
DISPLAY_INVALID_DATE = "Invalid Date"

# ------------------------------------------------------------------------------------------------
# Services
# ------------------------------------------------------------------------------------------------

SERVICE_MARK_VACCINATION_COMPLETED = "mark_vaccination_completed"
SERVICE_CLEAR_VACCINATION_COMPLETION = "clear_vaccination_completion"
SERVICE_TOGGLE_VACCINATION_GROUP = "toggle_vaccination_group"
SERVICE_SET_CHILD_AGE = "set_child_age"
SERVICE_GET_VACCINATION_SCHEDULE = "get_vaccination_schedule"

SERVICES = [
    SERVICE_MARK_VACCINATION_COMPLETED,
    SERVICE_CLEAR_VACCINATION_COMPLETION,
    SERVICE_TOGGLE_VACCINATION_GROUP,
    SERVICE_SET_CHILD_AGE,
    SERVICE_GET_VACCINATION_SCHEDULE,
]

# Service fields
FIELD_CHILD_NAME = "child_name"
FIELD_VACCINE_ID = "vaccine_id"
FIELD_NOTES = "notes"
FIELD_COMPLETED_DATE = "completed_date"
FIELD_DATE_KEY = "date_key"
FIELD_AGE = "age"
FIELD_BIRTH_DATE = "birth_date"

# ------------------------------------------------------------------------------------------------
# Entity Attributes
# ------------------------------------------------------------------------------------------------

ATTR_CHILD_NAME = "child_name"
ATTR_BIRTH_DATE = "birth_date"
ATTR_BIRTH_DATE_ESTIMATED = "birth_date_estimated"
ATTR_TOTAL = "total"
ATTR_COMPLETED = "completed"
ATTR_PERCENTAGE = "percentage"
ATTR_NEXT_RELEVANT_DATE = "next_relevant_date"
ATTR_CURRENT_RELEVANT_DATE = "current_relevant_date"
ATTR_GROUP_STATUS = "group_status"
ATTR_DOSES = "doses"
ATTR_DUE_THIS_MONTH = "due_this_month"
ATTR_OVERDUE = "overdue"
ATTR_COLLAPSED_GROUPS = "collapsed_groups"
ATTR_GROUPS = "groups"
ATTR_PROGRESS = "progress"

# Dose serialization keys
ATTR_DOSE_ID = "id"
ATTR_DOSE_VACCINE = "vaccine"
ATTR_DOSE_LABEL = "dose"
ATTR_DOSE_SCHEDULED_DATE = "scheduled_date"
ATTR_DOSE_AGE = "age"
ATTR_DOSE_NOTES = "notes"
ATTR_DOSE_STATUS = "status"
ATTR_DOSE_COMPLETED_DATE = "completed_date"
ATTR_DOSE_COMPLETION_NOTES = "completion_notes"
ATTR_GROUP_DATE_KEY = "date_key"
ATTR_GROUP_DATE = "date"
ATTR_GROUP_COLLAPSED = "collapsed"
ATTR_GROUP_COMPLETED_COUNT = "completed_count"
ATTR_GROUP_TOTAL_COUNT = "total_count"

# ------------------------------------------------------------------------------------------------
# Unique ID Suffixes
# ------------------------------------------------------------------------------------------------

SENSOR_UID_SUFFIX_VACCINATION_PROGRESS = "_vaccination_progress"
SENSOR_UID_SUFFIX_NEXT_VACCINATION = "_next_vaccination"
SENSOR_UID_SUFFIX_VACCINATIONS_DUE = "_vaccinations_due"
CALENDAR_UID_SUFFIX_VACCINATIONS = "_vaccination_calendar"

# ------------------------------------------------------------------------------------------------
# Translation Keys
# ------------------------------------------------------------------------------------------------

TRANS_KEY_SENSOR_VACCINATION_PROGRESS = "vaccination_progress"
TRANS_KEY_SENSOR_NEXT_VACCINATION = "next_vaccination"
TRANS_KEY_SENSOR_VACCINATIONS_DUE = "vaccinations_due"
TRANS_KEY_CALENDAR_VACCINATIONS = "vaccination_calendar"
TRANS_KEY_ATTR_CHILD_NAME = "child_name"

TRANS_KEY_ERROR_SINGLE_INSTANCE = "single_instance_allowed"
TRANS_KEY_CFOF_INVALID_CHILD_NAME = "invalid_child_name"
TRANS_KEY_CFOF_DUPLICATE_CHILD = "duplicate_child"
TRANS_KEY_CFOF_AGE_REQUIRED = "age_or_birth_date_required"
TRANS_KEY_CFOF_INVALID_BIRTH_DATE = "invalid_birth_date"
TRANS_KEY_CFOF_NO_CHILDREN = "no_children"
TRANS_KEY_CFOF_INVALID_CHILD = "invalid_child"
TRANS_KEY_CFOF_SETUP_COMPLETE = "setup_complete"
TRANS_KEY_CFOF_MAIN_MENU = "main_menu"
TRANS_KEY_CFOF_MANAGE_ACTIONS = "manage_actions"
OPTIONS_FLOW_PLACEHOLDER_CHILD_NAME = "child_name"

TRANS_KEY_ERROR_CALENDAR_CREATE_NOT_SUPPORTED = "calendar_create_not_supported"
TRANS_KEY_ERROR_CALENDAR_DELETE_NOT_SUPPORTED = "calendar_delete_not_supported"
TRANS_KEY_ERROR_CALENDAR_UPDATE_NOT_SUPPORTED = "calendar_update_not_supported"

# ------------------------------------------------------------------------------------------------
# Error / Log Messages
# ------------------------------------------------------------------------------------------------

MSG_NO_ENTRY_FOUND = "No BabyCare entry found"
ERROR_CHILD_NOT_FOUND_FMT = "Child '{}' not found"
ERROR_VACCINE_NOT_FOUND_FMT = "Vaccine '{}' is not part of the schedule for '{}'"
ERROR_DATE_GROUP_NOT_FOUND_FMT = "No vaccination group dated '{}' for '{}'"

# Device info
DEVICE_MANUFACTURER = "BabyCare"
DEVICE_MODEL_CHILD = "Child Profile"

# Icons
ICON_VACCINATION = "mdi:needle"
ICON_VACCINATION_DONE = "mdi:check-decagram"
ICON_CALENDAR = "mdi:calendar-heart"
