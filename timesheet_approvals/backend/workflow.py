"""Timesheet lifecycle: creation, editing, submission and review.

Transitions (anything else is refused):

    (new)            create        owner                 -> Draft
    Draft/Rejected   save_draft    owner                 -> Draft
    Draft/Rejected   submit        owner                 -> Submitted
    Submitted        approve       Manager, not owner    -> Manager Approved
    Submitted        reject        Manager, not owner    -> Rejected
    Manager Approved approve       HR, not owner         -> HR Approved
    Manager Approved reject        HR, not owner         -> Rejected

HR Approved is terminal. Every function takes the current value and returns
a new one; on error nothing has changed.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace
from datetime import date
from enum import Enum

from .dates import parse_date
from .errors import (
    ForbiddenTransitionError,
    InvalidRangeError,
    InvalidStateTransitionError,
    MissingReasonError,
)
from .models import Role, Timesheet, TimesheetEntry, TimesheetStatus, User
from .reconcile import DEFAULT_REGULAR_HOURS, reconcile
from .utils import new_id

logger = logging.getLogger(__name__)


class Action(str, Enum):
    SAVE_DRAFT = "save_draft"
    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"


EDITABLE_STATUSES = frozenset({TimesheetStatus.DRAFT, TimesheetStatus.REJECTED})

# Status a reviewer of each role acts on, and the status approval moves it to.
_REVIEW_STEPS: dict[Role, tuple[TimesheetStatus, TimesheetStatus]] = {
    Role.MANAGER: (TimesheetStatus.SUBMITTED, TimesheetStatus.MANAGER_APPROVED),
    Role.HR: (TimesheetStatus.MANAGER_APPROVED, TimesheetStatus.HR_APPROVED),
}


def is_editable(timesheet: Timesheet) -> bool:
    return timesheet.status in EDITABLE_STATUSES


def create_timesheet(
    actor: User,
    period_start: date | str,
    period_end: date | str,
    entries: Iterable[TimesheetEntry] = (),
    *,
    timesheet_id: str | None = None,
    regular_hours: float = DEFAULT_REGULAR_HOURS,
) -> Timesheet:
    """Create a Draft timesheet owned by ``actor`` with reconciled entries."""
    start, end = _require_period(period_start, period_end)
    timesheet = Timesheet(
        id=timesheet_id or new_id(),
        employee_id=actor.id,
        employee_name=actor.name,
        period_start=start,
        period_end=end,
        status=TimesheetStatus.DRAFT,
        entries=reconcile(start, end, entries, regular_hours=regular_hours),
    )
    logger.info(
        "Timesheet %s created by %s for %s..%s",
        timesheet.id,
        actor.id,
        start.isoformat(),
        end.isoformat(),
    )
    return timesheet


def save_draft(
    timesheet: Timesheet,
    actor: User,
    *,
    period_start: date | str | None = None,
    period_end: date | str | None = None,
    entries: Iterable[TimesheetEntry] | None = None,
    regular_hours: float = DEFAULT_REGULAR_HOURS,
) -> Timesheet:
    """Save the owner's edits and leave the timesheet in Draft.

    A rejection reason already on the sheet is kept so the employee can still
    see what to fix after saving a rejected sheet as a draft.
    """
    _check_owner_edit(timesheet, actor, Action.SAVE_DRAFT)
    edited = _apply_edits(timesheet, period_start, period_end, entries, regular_hours)
    return _moved(edited, actor, Action.SAVE_DRAFT, TimesheetStatus.DRAFT, timesheet.rejection_reason)


def submit(
    timesheet: Timesheet,
    actor: User,
    *,
    period_start: date | str | None = None,
    period_end: date | str | None = None,
    entries: Iterable[TimesheetEntry] | None = None,
    regular_hours: float = DEFAULT_REGULAR_HOURS,
) -> Timesheet:
    """Submit the owner's timesheet for manager review, clearing any rejection."""
    _check_owner_edit(timesheet, actor, Action.SUBMIT)
    edited = _apply_edits(timesheet, period_start, period_end, entries, regular_hours)
    return _moved(edited, actor, Action.SUBMIT, TimesheetStatus.SUBMITTED, None)


def approve(timesheet: Timesheet, actor: User) -> Timesheet:
    """Approve as a Manager (Submitted) or HR (Manager Approved)."""
    _, approved = _check_reviewer(timesheet, actor, Action.APPROVE)
    return _moved(timesheet, actor, Action.APPROVE, approved, None)


def reject(timesheet: Timesheet, actor: User, reason: str | None) -> Timesheet:
    """Send the timesheet back to its owner with a reason.

    Whitespace-only reasons count as missing; the stored reason is stripped.
    """
    _check_reviewer(timesheet, actor, Action.REJECT)
    text = (reason or "").strip()
    if not text:
        raise MissingReasonError(timesheet.id)
    return _moved(timesheet, actor, Action.REJECT, TimesheetStatus.REJECTED, text)


def available_actions(timesheet: Timesheet, actor: User) -> list[Action]:
    """List the actions ``actor`` may take on ``timesheet`` right now."""
    if actor.id == timesheet.employee_id:
        if is_editable(timesheet):
            return [Action.SAVE_DRAFT, Action.SUBMIT]
        return []
    step = _REVIEW_STEPS.get(actor.role)
    if step and timesheet.status == step[0]:
        return [Action.APPROVE, Action.REJECT]
    return []


def upsert_timesheet(
    timesheets: Iterable[Timesheet], timesheet: Timesheet
) -> tuple[Timesheet, ...]:
    """Return a new collection with ``timesheet`` replaced by id, or appended."""
    current = tuple(timesheets)
    if any(t.id == timesheet.id for t in current):
        return tuple(timesheet if t.id == timesheet.id else t for t in current)
    return (*current, timesheet)


def find_timesheet(timesheets: Iterable[Timesheet], timesheet_id: str) -> Timesheet | None:
    return next((t for t in timesheets if t.id == timesheet_id), None)


# --- Internal helpers ---


def _require_period(period_start: object, period_end: object) -> tuple[date, date]:
    start = parse_date(period_start)
    if start is None:
        raise InvalidRangeError("period_start", period_start)
    end = parse_date(period_end)
    if end is None:
        raise InvalidRangeError("period_end", period_end)
    if end < start:
        raise InvalidRangeError("period_end", period_end, f"before period start {start.isoformat()}")
    return start, end


def _check_owner_edit(timesheet: Timesheet, actor: User, action: Action) -> None:
    if actor.id != timesheet.employee_id:
        raise ForbiddenTransitionError(
            action.value, actor.id, timesheet.id, "only the owner may edit or submit"
        )
    if not is_editable(timesheet):
        raise InvalidStateTransitionError(action.value, timesheet.id, timesheet.status.value)


def _check_reviewer(
    timesheet: Timesheet, actor: User, action: Action
) -> tuple[TimesheetStatus, TimesheetStatus]:
    if actor.id == timesheet.employee_id:
        raise ForbiddenTransitionError(
            action.value, actor.id, timesheet.id, "nobody may review their own timesheet"
        )
    step = _REVIEW_STEPS.get(actor.role)
    if step is None:
        raise ForbiddenTransitionError(
            action.value, actor.id, timesheet.id, f"role {actor.role.value} cannot review"
        )
    if timesheet.status != step[0]:
        raise InvalidStateTransitionError(action.value, timesheet.id, timesheet.status.value)
    return step


def _apply_edits(
    timesheet: Timesheet,
    period_start: object,
    period_end: object,
    entries: Iterable[TimesheetEntry] | None,
    regular_hours: float,
) -> Timesheet:
    if period_start is None and period_end is None and entries is None:
        return timesheet
    start, end = _require_period(
        timesheet.period_start if period_start is None else period_start,
        timesheet.period_end if period_end is None else period_end,
    )
    base = timesheet.entries if entries is None else entries
    return replace(
        timesheet,
        period_start=start,
        period_end=end,
        entries=reconcile(start, end, base, regular_hours=regular_hours),
    )


def _moved(
    timesheet: Timesheet,
    actor: User,
    action: Action,
    status: TimesheetStatus,
    rejection_reason: str | None,
) -> Timesheet:
    logger.info(
        "Timesheet %s %s by %s: %s -> %s",
        timesheet.id,
        action.value,
        actor.id,
        timesheet.status.value,
        status.value,
    )
    return replace(timesheet, status=status, rejection_reason=rejection_reason)
