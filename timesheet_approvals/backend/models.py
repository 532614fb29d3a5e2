"""Core value types for users, timesheets and their daily entries.

All types are frozen dataclasses. Operations in the backend never mutate a
value in place; they return a new one built with ``dataclasses.replace``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from .dates import parse_date
from .utils import new_id


class Role(str, Enum):
    EMPLOYEE = "Employee"
    MANAGER = "Manager"
    HR = "HR"


class TimesheetStatus(str, Enum):
    DRAFT = "Draft"
    SUBMITTED = "Submitted"
    MANAGER_APPROVED = "Manager Approved"
    HR_APPROVED = "HR Approved"
    REJECTED = "Rejected"


class EntryType(str, Enum):
    REGULAR = "Regular"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"
    PUBLIC_HOLIDAY = "Public Holiday"
    LEAVE = "Leave"
    SHIFT_ALLOWANCE = "Shift Allowance (>6pm)"


@dataclass(frozen=True)
class User:
    """A person in the directory."""

    id: str
    name: str
    role: Role
    manager_id: str | None = None  # weak reference, may dangle after a removal


@dataclass(frozen=True)
class TimesheetEntry:
    """One calendar-day record of worked or leave hours."""

    id: str
    date: date
    type: EntryType
    hours: float


@dataclass(frozen=True)
class Timesheet:
    """A period of entries owned by one employee."""

    id: str
    employee_id: str
    employee_name: str
    period_start: date
    period_end: date
    status: TimesheetStatus = TimesheetStatus.DRAFT
    entries: tuple[TimesheetEntry, ...] = field(default_factory=tuple)
    rejection_reason: str | None = None


def user_from_dict(data: dict[str, Any]) -> User:
    """Convert a dictionary to a `User` with basic coercion.

    Accepts both ``manager_id`` and the camel-cased ``managerId``.
    """
    manager = data.get("manager_id", data.get("managerId"))
    return User(
        id=str(data.get("id") or new_id()),
        name=str(data.get("name", "")),
        role=Role(str(data.get("role", Role.EMPLOYEE.value))),
        manager_id=(str(manager) if manager else None),
    )


def entry_from_dict(data: dict[str, Any]) -> TimesheetEntry:
    """Convert a dictionary to a `TimesheetEntry`.

    Raises ``ValueError`` when the date cannot be parsed.
    """
    day = parse_date(data.get("date"))
    if day is None:
        raise ValueError(f"Entry date is not a valid YYYY-MM-DD date: {data.get('date')!r}")
    return TimesheetEntry(
        id=str(data.get("id") or new_id()),
        date=day,
        type=EntryType(str(data.get("type", EntryType.REGULAR.value))),
        hours=float(data.get("hours", 0) or 0),
    )


def timesheet_from_dict(data: dict[str, Any]) -> Timesheet:
    """Convert a dictionary to a `Timesheet`.

    Entries are taken as given; call the reconciler to normalize them against
    the period.
    """
    start = parse_date(data.get("period_start", data.get("periodStart")))
    end = parse_date(data.get("period_end", data.get("periodEnd")))
    if start is None or end is None:
        raise ValueError(f"Timesheet {data.get('id')!r} has an invalid period")
    reason = data.get("rejection_reason", data.get("rejectionReason"))
    return Timesheet(
        id=str(data.get("id") or new_id()),
        employee_id=str(data.get("employee_id", data.get("employeeId", ""))),
        employee_name=str(data.get("employee_name", data.get("employeeName", ""))),
        period_start=start,
        period_end=end,
        status=TimesheetStatus(str(data.get("status", TimesheetStatus.DRAFT.value))),
        entries=tuple(entry_from_dict(e) for e in data.get("entries") or []),
        rejection_reason=(str(reason) if reason else None),
    )


def entry_to_dict(entry: TimesheetEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "date": entry.date.isoformat(),
        "type": entry.type.value,
        "hours": entry.hours,
    }


def timesheet_to_dict(timesheet: Timesheet) -> dict[str, Any]:
    return {
        "id": timesheet.id,
        "employee_id": timesheet.employee_id,
        "employee_name": timesheet.employee_name,
        "period_start": timesheet.period_start.isoformat(),
        "period_end": timesheet.period_end.isoformat(),
        "status": timesheet.status.value,
        "entries": [entry_to_dict(e) for e in timesheet.entries],
        "rejection_reason": timesheet.rejection_reason,
    }


def user_to_dict(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "role": user.role.value,
        "manager_id": user.manager_id,
    }
