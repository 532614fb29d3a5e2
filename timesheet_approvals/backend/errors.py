"""Typed errors raised by the timesheet core.

Every error carries a machine-readable ``code`` plus the structured fields
that caused it, so callers can branch on type instead of parsing messages.
"""

from __future__ import annotations


class TimesheetError(Exception):
    """Base class for all core errors."""

    code: str = "TIMESHEET_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidRangeError(TimesheetError):
    """A period bound is missing, not a calendar date, or before the start."""

    code = "INVALID_RANGE"

    def __init__(self, field: str, value: object, problem: str = "expected YYYY-MM-DD") -> None:
        self.field = field
        self.value = value
        super().__init__(f"Invalid {field}: {value!r} ({problem})")


class ForbiddenTransitionError(TimesheetError):
    """The actor's role or ownership does not allow the action at all."""

    code = "FORBIDDEN_TRANSITION"

    def __init__(self, action: str, actor_id: str, timesheet_id: str, reason: str) -> None:
        self.action = action
        self.actor_id = actor_id
        self.timesheet_id = timesheet_id
        self.reason = reason
        super().__init__(f"Cannot {action} timesheet {timesheet_id}: {reason}")


class InvalidStateTransitionError(TimesheetError):
    """The action is not valid from the timesheet's current status."""

    code = "INVALID_STATE_TRANSITION"

    def __init__(self, action: str, timesheet_id: str, status: str) -> None:
        self.action = action
        self.timesheet_id = timesheet_id
        self.status = status
        super().__init__(f"Cannot {action} timesheet {timesheet_id} while it is {status}")


class MissingReasonError(TimesheetError):
    """A rejection was attempted without a reason."""

    code = "MISSING_REASON"

    def __init__(self, timesheet_id: str) -> None:
        self.timesheet_id = timesheet_id
        super().__init__(f"A rejection reason is required for timesheet {timesheet_id}")


class InvalidEntryError(TimesheetError):
    """An entry edit was malformed (unknown id, negative hours)."""

    code = "INVALID_ENTRY"

    def __init__(self, entry_id: str, problem: str) -> None:
        self.entry_id = entry_id
        self.problem = problem
        super().__init__(f"Entry {entry_id}: {problem}")


class DirectoryError(TimesheetError):
    """Base class for directory maintenance errors."""

    code = "DIRECTORY_ERROR"


class InvalidUserError(DirectoryError):
    code = "INVALID_USER"

    def __init__(self, user_id: str, problems: list[str]) -> None:
        self.user_id = user_id
        self.problems = problems
        super().__init__(f"Invalid user {user_id}: " + "; ".join(problems))


class UnknownUserError(DirectoryError):
    code = "UNKNOWN_USER"

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(f"Unknown user: {user_id}")
