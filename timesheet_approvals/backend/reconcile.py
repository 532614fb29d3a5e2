"""Reconcile a timesheet's entries against its period.

``reconcile`` regenerates the full, date-ordered set of daily entries for a
period while keeping whatever the user already entered for dates inside it.
Entries dated outside the period are dropped. Each call starts from scratch,
so the only state carried between calls is the entries the caller passes in.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace
from datetime import date

from .dates import iter_days, parse_date
from .errors import InvalidEntryError, InvalidRangeError
from .models import EntryType, TimesheetEntry
from .utils import new_id

logger = logging.getLogger(__name__)

DEFAULT_REGULAR_HOURS = 8.0


def default_entry_for(day: date, *, regular_hours: float = DEFAULT_REGULAR_HOURS) -> TimesheetEntry:
    """Build the default entry for a date with no user data.

    Saturdays and Sundays get their own type and zero hours; every other day
    is a regular full day.
    """
    weekday = day.weekday()
    if weekday == 6:
        entry_type, hours = EntryType.SUNDAY, 0.0
    elif weekday == 5:
        entry_type, hours = EntryType.SATURDAY, 0.0
    else:
        entry_type, hours = EntryType.REGULAR, float(regular_hours)
    return TimesheetEntry(id=new_id(), date=day, type=entry_type, hours=hours)


def reconcile(
    period_start: date | str | None,
    period_end: date | str | None,
    existing_entries: Iterable[TimesheetEntry] = (),
    *,
    regular_hours: float = DEFAULT_REGULAR_HOURS,
) -> tuple[TimesheetEntry, ...]:
    """Return the complete ordered entry set covering start..end inclusive.

    - Every date in the period appears exactly once as a group, ascending.
    - A date with existing entries keeps all of them, unchanged and in their
      original relative order (a day may hold e.g. Regular + Shift Allowance).
    - A date without entries gets one synthesized default entry.
    - Entries dated outside the period are not carried over.
    - end < start yields an empty tuple.

    Raises:
        InvalidRangeError: if either bound is missing or not a date.
    """
    start = parse_date(period_start)
    if start is None:
        raise InvalidRangeError("period_start", period_start)
    end = parse_date(period_end)
    if end is None:
        raise InvalidRangeError("period_end", period_end)

    by_date: dict[date, list[TimesheetEntry]] = {}
    for entry in existing_entries:
        by_date.setdefault(entry.date, []).append(entry)

    result: list[TimesheetEntry] = []
    synthesized = 0
    for day in iter_days(start, end):
        kept = by_date.get(day)
        if kept:
            result.extend(kept)
        else:
            result.append(default_entry_for(day, regular_hours=regular_hours))
            synthesized += 1

    logger.debug(
        "Reconciled %s..%s: %d entries (%d synthesized)",
        start.isoformat(),
        end.isoformat(),
        len(result),
        synthesized,
    )
    return tuple(result)


def add_entry(
    entries: Iterable[TimesheetEntry],
    on: date | str,
    entry_type: EntryType | str = EntryType.REGULAR,
    hours: float = DEFAULT_REGULAR_HOURS,
) -> tuple[TimesheetEntry, ...]:
    """Append a new entry (e.g. a second row for a shift allowance)."""
    day = parse_date(on)
    if day is None:
        raise InvalidEntryError("(new)", f"invalid date {on!r}")
    if hours < 0:
        raise InvalidEntryError("(new)", "hours must not be negative")
    new = TimesheetEntry(
        id=new_id(), date=day, type=_entry_type("(new)", entry_type), hours=float(hours)
    )
    return (*entries, new)


def remove_entry(entries: Iterable[TimesheetEntry], entry_id: str) -> tuple[TimesheetEntry, ...]:
    """Drop the entry with the given id; unknown ids leave the set unchanged."""
    return tuple(e for e in entries if e.id != entry_id)


def update_entry(
    entries: Iterable[TimesheetEntry],
    entry_id: str,
    *,
    on: date | str | None = None,
    entry_type: EntryType | str | None = None,
    hours: float | None = None,
) -> tuple[TimesheetEntry, ...]:
    """Replace the date, type or hours of one entry."""
    current = tuple(entries)
    idx = next((i for i, e in enumerate(current) if e.id == entry_id), -1)
    if idx < 0:
        raise InvalidEntryError(entry_id, "no such entry")

    changes: dict[str, object] = {}
    if on is not None:
        day = parse_date(on)
        if day is None:
            raise InvalidEntryError(entry_id, f"invalid date {on!r}")
        changes["date"] = day
    if entry_type is not None:
        changes["type"] = _entry_type(entry_id, entry_type)
    if hours is not None:
        if hours < 0:
            raise InvalidEntryError(entry_id, "hours must not be negative")
        changes["hours"] = float(hours)

    updated = replace(current[idx], **changes)
    return current[:idx] + (updated,) + current[idx + 1 :]


def _entry_type(entry_id: str, value: EntryType | str) -> EntryType:
    try:
        return EntryType(value)
    except ValueError:
        raise InvalidEntryError(entry_id, f"unknown entry type {value!r}") from None
