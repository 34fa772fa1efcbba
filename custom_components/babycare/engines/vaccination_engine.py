"""Vaccination Engine - Pure logic for infant vaccination schedules.

This engine provides stateless, pure Python functions for:
- Estimating a birth date from a free-text age ("3 months")
- Generating the fixed infant dose schedule from a birth date
- Grouping doses by scheduled date and classifying groups and doses
  (completed / overdue / due this month / upcoming)
- Picking the current and next relevant date groups
- Collapse-state bookkeeping for date groups
- Completion progress

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data.
State (children, completion records, collapse flags) belongs in the coordinator.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from .. import const
from ..utils import dt_utils
from ..utils.math_utils import calculate_percentage, parse_leading_int

# =============================================================================
# DOSE TABLE
# =============================================================================


@dataclass(frozen=True, slots=True)
class VaccineDose:
    """One row of the fixed infant schedule.

    Attributes:
        id: Stable dose id, unique across the table ("dtap-1")
        vaccine_name: Display name of the vaccine
        dose_label: Which dose of the series ("1st dose")
        notes: Short caregiver-facing note
        offset_months: Calendar months after birth the dose is scheduled
        age_days: Approximate age in days, used for display only
    """

    id: str
    vaccine_name: str
    dose_label: str
    notes: str
    offset_months: int
    age_days: int


_HEPB = "Hepatitis B (HepB)"
_DTAP = "DTaP (Diphtheria, Tetanus, Pertussis)"
_HIB = "Hib (Haemophilus influenzae type B)"
_IPV = "Polio (IPV)"
_PCV13 = "Pneumococcal (PCV13)"
_RV = "Rotavirus (RV)"
_FLU = "Influenza (Flu)"

VACCINE_DOSES: tuple[VaccineDose, ...] = (
    # Birth
    VaccineDose("hepb-1", _HEPB, "1st dose", "Given at birth", 0, 0),
    # 1 month
    VaccineDose("hepb-2", _HEPB, "2nd dose", "1-2 months after birth", 1, 30),
    # 2 months
    VaccineDose("dtap-1", _DTAP, "1st dose", "Part of 3-dose primary series", 2, 60),
    VaccineDose(
        "hib-1", _HIB, "1st dose", "Protects against bacterial infections", 2, 60
    ),
    VaccineDose("ipv-1", _IPV, "1st dose", "Inactivated polio vaccine", 2, 60),
    VaccineDose(
        "pcv13-1", _PCV13, "1st dose", "Prevents pneumonia & meningitis", 2, 60
    ),
    VaccineDose("rv-1", _RV, "1st dose", "Oral vaccine against diarrhea", 2, 60),
    # 4 months
    VaccineDose("dtap-2", _DTAP, "2nd dose", "Second dose of primary series", 4, 120),
    VaccineDose("hib-2", _HIB, "2nd dose", "Second dose of primary series", 4, 120),
    VaccineDose("ipv-2", _IPV, "2nd dose", "Second dose of primary series", 4, 120),
    VaccineDose(
        "pcv13-2", _PCV13, "2nd dose", "Second dose of primary series", 4, 120
    ),
    VaccineDose("rv-2", _RV, "2nd dose", "Second dose of oral vaccine", 4, 120),
    # 6 months
    VaccineDose("dtap-3", _DTAP, "3rd dose", "Third dose of primary series", 6, 180),
    VaccineDose("hib-3", _HIB, "3rd dose", "Third dose (if 4-dose schedule)", 6, 180),
    VaccineDose("ipv-3", _IPV, "3rd dose", "Third dose of primary series", 6, 180),
    VaccineDose(
        "pcv13-3", _PCV13, "3rd dose", "Third dose of primary series", 6, 180
    ),
    VaccineDose("rv-3", _RV, "3rd dose (if needed)", "Only for 3-dose series", 6, 180),
    VaccineDose("hepb-3", _HEPB, "3rd dose", "Final dose in infant schedule", 6, 180),
    VaccineDose(
        "flu-1", _FLU, "1st dose", "Given annually from 6 months onward", 6, 180
    ),
    # 7 months
    VaccineDose(
        "flu-2", _FLU, "2nd dose", "Second flu shot (needed first year)", 7, 210
    ),
    # 12 months
    VaccineDose(
        "mmr-1",
        "MMR (Measles, Mumps, Rubella)",
        "1st dose",
        "Typically given at 12 months",
        12,
        365,
    ),
    VaccineDose("pcv13-4", _PCV13, "4th dose (booster)", "Final booster dose", 12, 365),
    VaccineDose(
        "var-1",
        "Varicella (Chickenpox)",
        "1st dose",
        "Protects against chickenpox",
        12,
        365,
    ),
    VaccineDose("hepa-1", "Hepatitis A", "1st dose", "First of two-dose series", 12, 365),
)

VACCINE_DOSE_IDS: frozenset[str] = frozenset(dose.id for dose in VACCINE_DOSES)

# Age keyword -> dt_utils unit, checked in this order
_AGE_UNIT_MAP: tuple[tuple[str, str], ...] = (
    (const.AGE_UNIT_DAY, dt_utils.TIME_UNIT_DAYS),
    (const.AGE_UNIT_MONTH, dt_utils.TIME_UNIT_MONTHS),
    (const.AGE_UNIT_YEAR, dt_utils.TIME_UNIT_YEARS),
)


# =============================================================================
# RESULT DATA STRUCTURES
# =============================================================================


@dataclass(frozen=True, slots=True)
class VaccinationEntry:
    """A dose placed on a concrete date for one child."""

    id: str
    scheduled_date: date
    vaccine_name: str
    dose_label: str
    notes: str
    age_at_dose_months: int
    age_at_dose_days: int


@dataclass(frozen=True, slots=True)
class RelevantDates:
    """Date keys of the group to look at now and the one after it."""

    current: str | None = None
    next: str | None = None


@dataclass(frozen=True, slots=True)
class DateGroup:
    """All entries sharing one scheduled date."""

    date_key: str
    date: date
    entries: tuple[VaccinationEntry, ...]
    status: str
    completed_count: int
    total_count: int


@dataclass(frozen=True, slots=True)
class VaccinationProgress:
    """Completion counts for one schedule."""

    total: int = 0
    completed: int = 0
    percentage: int = 0


@dataclass(frozen=True, slots=True)
class ScheduleView:
    """Everything presentation needs for one child at one point in time."""

    today: date
    groups: tuple[DateGroup, ...]
    relevant: RelevantDates
    progress: VaccinationProgress
    entry_statuses: Mapping[str, str] = field(default_factory=dict)
    due_this_month: tuple[VaccinationEntry, ...] = ()
    overdue: tuple[VaccinationEntry, ...] = ()

    def get_group(self, date_key: str | None) -> DateGroup | None:
        """Return the group with ``date_key``, if present."""
        if date_key is None:
            return None
        for group in self.groups:
            if group.date_key == date_key:
                return group
        return None


# =============================================================================
# VACCINATION ENGINE
# =============================================================================


class VaccinationEngine:
    """Pure logic engine for vaccination schedules.

    All methods are static - no instance state. ``today`` is always passed in
    so results are reproducible in tests.
    """

    # =========================================================================
    # Birth-date estimation
    # =========================================================================

    @staticmethod
    def estimate_birth_date(age_text: str | None, today: date | None = None) -> date:
        """Estimate a birth date from a free-text age such as "3 months".

        The first space-separated token is read as the amount (0 when it is
        not a number). The unit is the first of "day", "month", "year" found
        anywhere in the text, case-insensitive. Text without a unit keyword,
        or no text at all, yields ``today``.

        Month and year subtraction clamp to the end of shorter months, so
        "1 month" on March 31 gives February 28/29.
        """
        today = today or dt_utils.dt_today_local()
        if not age_text or not isinstance(age_text, str):
            const.LOGGER.debug(
                "DEBUG: No age text provided, using today (%s) as birth date", today
            )
            return today

        amount = parse_leading_int(age_text)
        lowered = age_text.lower()

        for keyword, unit in _AGE_UNIT_MAP:
            if keyword in lowered:
                return dt_utils.dt_subtract_units(today, amount, unit)

        const.LOGGER.debug(
            "DEBUG: Age text '%s' has no day/month/year unit, using today", age_text
        )
        return today

    # =========================================================================
    # Schedule generation
    # =========================================================================

    @staticmethod
    def generate_schedule(
        birth_date: date | datetime | str | None,
    ) -> list[VaccinationEntry]:
        """Generate the dose schedule for a child born on ``birth_date``.

        Returns entries sorted by scheduled date (table order within a date).
        An invalid birth date returns an empty list and logs an error.
        """
        parsed = dt_utils.dt_parse_date(birth_date)
        if parsed is None:
            const.LOGGER.error(
                "ERROR: Cannot generate vaccination schedule, invalid birth date: %r",
                birth_date,
            )
            return []

        entries = [
            VaccinationEntry(
                id=dose.id,
                scheduled_date=dt_utils.dt_add_months(parsed, dose.offset_months),
                vaccine_name=dose.vaccine_name,
                dose_label=dose.dose_label,
                notes=dose.notes,
                age_at_dose_months=dose.offset_months,
                age_at_dose_days=dose.age_days,
            )
            for dose in VACCINE_DOSES
        ]
        return sorted(entries, key=lambda entry: entry.scheduled_date)

    # =========================================================================
    # Grouping and classification
    # =========================================================================

    @staticmethod
    def format_date_key(value: date | datetime | str | None) -> str:
        """Return the display key for a date ("March 1, 2024")."""
        parsed = dt_utils.dt_parse_date(value)
        if parsed is None:
            return const.DISPLAY_INVALID_DATE
        return dt_utils.dt_format_long(parsed)

    @staticmethod
    def group_by_date(
        entries: Iterable[VaccinationEntry],
    ) -> dict[str, list[VaccinationEntry]]:
        """Group entries by scheduled date, in chronological order."""
        groups: dict[str, list[VaccinationEntry]] = {}
        for entry in sorted(entries, key=lambda item: item.scheduled_date):
            key = VaccinationEngine.format_date_key(entry.scheduled_date)
            groups.setdefault(key, []).append(entry)
        return groups

    @staticmethod
    def is_completed(entry_id: str, completions: Mapping[str, Any]) -> bool:
        """Return True when a completion record exists for ``entry_id``."""
        return entry_id in completions

    @staticmethod
    def _classify(
        scheduled: date, all_completed: bool, today: date
    ) -> str:
        if all_completed:
            return const.VACCINATION_STATUS_COMPLETED
        if dt_utils.dt_is_same_month(scheduled, today):
            return const.VACCINATION_STATUS_DUE_THIS_MONTH
        if scheduled < today:
            return const.VACCINATION_STATUS_OVERDUE
        return const.VACCINATION_STATUS_UPCOMING

    @staticmethod
    def classify_group(
        group_date: date,
        entries: Sequence[VaccinationEntry],
        completions: Mapping[str, Any],
        today: date,
    ) -> str:
        """Classify a date group.

        Priority: completed (every entry has a record), overdue (before today
        and outside this month), due this month, upcoming.
        """
        all_completed = all(
            VaccinationEngine.is_completed(entry.id, completions) for entry in entries
        )
        return VaccinationEngine._classify(group_date, all_completed, today)

    @staticmethod
    def classify_entry(
        entry: VaccinationEntry, completions: Mapping[str, Any], today: date
    ) -> str:
        """Classify a single entry with the same rules as a group."""
        return VaccinationEngine._classify(
            entry.scheduled_date,
            VaccinationEngine.is_completed(entry.id, completions),
            today,
        )

    @staticmethod
    def find_relevant_dates(
        groups: Mapping[str, Sequence[VaccinationEntry]],
        completions: Mapping[str, Any],
        today: date,
    ) -> RelevantDates:
        """Pick the current and next relevant date groups.

        1. A not-fully-completed group dated today is current; next is the
           first later group that is not fully completed.
        2. Otherwise current is the earliest not-fully-completed group dated
           today or later; next is the first such group after it.
        3. Otherwise current is the latest not-fully-completed past group and
           there is no next.
        4. Otherwise neither exists.
        """
        ordered: list[tuple[str, date, bool]] = []
        for key, entries in groups.items():
            if not entries:
                continue
            ordered.append(
                (
                    key,
                    entries[0].scheduled_date,
                    all(
                        VaccinationEngine.is_completed(entry.id, completions)
                        for entry in entries
                    ),
                )
            )
        ordered.sort(key=lambda item: item[1])

        for key, group_date, done in ordered:
            if group_date == today and not done:
                next_key = next(
                    (
                        k
                        for k, d, finished in ordered
                        if d > today and not finished
                    ),
                    None,
                )
                return RelevantDates(current=key, next=next_key)

        for index, (key, group_date, done) in enumerate(ordered):
            if group_date >= today and not done:
                next_key = next(
                    (k for k, _d, finished in ordered[index + 1 :] if not finished),
                    None,
                )
                return RelevantDates(current=key, next=next_key)

        for key, group_date, done in reversed(ordered):
            if group_date < today and not done:
                return RelevantDates(current=key, next=None)

        return RelevantDates()

    @staticmethod
    def build_date_groups(
        entries: Iterable[VaccinationEntry],
        completions: Mapping[str, Any],
        today: date,
    ) -> list[DateGroup]:
        """Build classified date groups in chronological order."""
        result: list[DateGroup] = []
        for key, grouped in VaccinationEngine.group_by_date(entries).items():
            completed_count = sum(
                1
                for entry in grouped
                if VaccinationEngine.is_completed(entry.id, completions)
            )
            group_date = grouped[0].scheduled_date
            result.append(
                DateGroup(
                    date_key=key,
                    date=group_date,
                    entries=tuple(grouped),
                    status=VaccinationEngine.classify_group(
                        group_date, grouped, completions, today
                    ),
                    completed_count=completed_count,
                    total_count=len(grouped),
                )
            )
        return result

    # =========================================================================
    # Collapse state
    # =========================================================================

    @staticmethod
    def initial_collapse_state(
        date_keys: Iterable[str], current_key: str | None
    ) -> dict[str, bool]:
        """Collapse every group except the current relevant one."""
        return {key: key != current_key for key in date_keys}

    @staticmethod
    def toggle_collapse(state: Mapping[str, bool], date_key: str) -> dict[str, bool]:
        """Return a copy of ``state`` with the flag for ``date_key`` flipped.

        A key that was never set counts as expanded.
        """
        updated = dict(state)
        updated[date_key] = not state.get(date_key, False)
        return updated

    @staticmethod
    def reconcile_collapse_state(
        state: Mapping[str, bool],
        previous_current: str | None,
        new_current: str | None,
        date_keys: Iterable[str],
    ) -> dict[str, bool]:
        """Carry collapse flags across a change of the current relevant group.

        Flags the user set are kept. New groups start collapsed and groups
        that no longer exist are dropped. When the current group changed,
        the old one is collapsed and the new one expanded.
        """
        updated = {key: state.get(key, True) for key in date_keys}
        if previous_current == new_current:
            return updated
        if previous_current is not None and previous_current in updated:
            updated[previous_current] = True
        if new_current is not None:
            updated[new_current] = False
        return updated

    @staticmethod
    def refresh_collapse_state(
        state: Mapping[str, bool],
        user_keys: Iterable[str],
        current_key: str | None,
        date_keys: Iterable[str],
    ) -> dict[str, bool]:
        """Re-lay out collapse flags after time moved on.

        Groups in ``user_keys`` keep their flag. Every other group follows
        the initial layout around ``current_key``.
        """
        toggled = set(user_keys)
        return {
            key: state[key] if key in toggled and key in state else key != current_key
            for key in date_keys
        }

    # =========================================================================
    # Progress and month queries
    # =========================================================================

    @staticmethod
    def calculate_progress(
        entries: Iterable[VaccinationEntry], completions: Mapping[str, Any]
    ) -> VaccinationProgress:
        """Count completed entries. Records for unknown ids are ignored."""
        ids = {entry.id for entry in entries}
        completed = sum(
            1 for entry_id in ids if VaccinationEngine.is_completed(entry_id, completions)
        )
        return VaccinationProgress(
            total=len(ids),
            completed=completed,
            percentage=calculate_percentage(completed, len(ids)),
        )

    @staticmethod
    def due_this_month(
        entries: Iterable[VaccinationEntry],
        completions: Mapping[str, Any],
        today: date,
    ) -> list[VaccinationEntry]:
        """Entries scheduled in the current month that are not completed."""
        return sorted(
            (
                entry
                for entry in entries
                if dt_utils.dt_is_same_month(entry.scheduled_date, today)
                and not VaccinationEngine.is_completed(entry.id, completions)
            ),
            key=lambda entry: entry.scheduled_date,
        )

    @staticmethod
    def overdue_before_month(
        entries: Iterable[VaccinationEntry],
        completions: Mapping[str, Any],
        today: date,
    ) -> list[VaccinationEntry]:
        """Entries scheduled before this month started that are not completed."""
        month_start = dt_utils.dt_start_of_month(today)
        return sorted(
            (
                entry
                for entry in entries
                if entry.scheduled_date < month_start
                and not VaccinationEngine.is_completed(entry.id, completions)
            ),
            key=lambda entry: entry.scheduled_date,
        )

    @staticmethod
    def format_age_at_dose(entry: VaccinationEntry) -> str:
        """Describe the child's age at the dose ("At birth", "2 months old")."""
        if entry.age_at_dose_months == 0:
            return "At birth"
        if entry.age_at_dose_months < 1:
            return f"{entry.age_at_dose_days} days old"
        if entry.age_at_dose_months == 1:
            return "1 month old"
        return f"{entry.age_at_dose_months} months old"

    # =========================================================================
    # Composite view
    # =========================================================================

    @staticmethod
    def build_schedule_view(
        entries: Sequence[VaccinationEntry],
        completions: Mapping[str, Any],
        today: date,
    ) -> ScheduleView:
        """Compose groups, relevant dates, progress and month lists."""
        groups = VaccinationEngine.build_date_groups(entries, completions, today)
        relevant = VaccinationEngine.find_relevant_dates(
            {group.date_key: group.entries for group in groups}, completions, today
        )
        return ScheduleView(
            today=today,
            groups=tuple(groups),
            relevant=relevant,
            progress=VaccinationEngine.calculate_progress(entries, completions),
            entry_statuses={
                entry.id: VaccinationEngine.classify_entry(entry, completions, today)
                for entry in entries
            },
            due_this_month=tuple(
                VaccinationEngine.due_this_month(entries, completions, today)
            ),
            overdue=tuple(
                VaccinationEngine.overdue_before_month(entries, completions, today)
            ),
        )
