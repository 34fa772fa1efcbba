"""Type definitions for BabyCare data structures.

TypedDict is used for the structures with fixed keys (child records,
completion records, the storage root). Per-child completion buckets are
keyed by runtime ids and stay plain ``dict[str, ...]``.

IMPORTANT: This file must NOT import from coordinator.py, *helpers.py, or
any file that imports coordinator to avoid circular dependencies.

NOTE: TypedDict is STATIC ANALYSIS ONLY. Runtime checks (``.get()`` defaults,
missing keys) stay in the store and coordinator.
"""

from typing import NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

ChildId = str  # UUID string
VaccinationId = str  # Stable dose id, e.g. "dtap-1"
ISODate = str  # ISO 8601 date string (no time) "2026-01-18"
DateKey = str  # Display key of a date group, "March 1, 2024"


# =============================================================================
# Child
# =============================================================================


class ChildData(TypedDict):
    """A registered child.

    ``birth_date`` is always set: either entered directly or estimated from
    ``age`` when the child was created or last edited.
    """

    internal_id: ChildId
    name: str
    age: str
    birth_date: ISODate
    birth_date_estimated: bool


# =============================================================================
# Vaccinations
# =============================================================================


class CompletionRecord(TypedDict):
    """Completion of a single scheduled dose."""

    completed_date: ISODate
    notes: NotRequired[str]


ChildCompletions = dict[VaccinationId, CompletionRecord]


# =============================================================================
# Storage root
# =============================================================================


class MetaData(TypedDict):
    """Storage metadata."""

    schema_version: int


class BabyCareData(TypedDict):
    """Everything persisted in ``.storage/babycare_data``."""

    meta: MetaData
    children: dict[ChildId, ChildData]
    vaccinations: dict[ChildId, ChildCompletions]
