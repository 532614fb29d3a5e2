"""Which timesheets an actor sees in each dashboard scope."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from .models import Role, Timesheet, TimesheetStatus, User


class ScopeKind(str, Enum):
    PERSONAL = "personal"
    TEAM = "team"
    DIRECTORY_DETAIL = "directory_detail"


@dataclass(frozen=True)
class Scope:
    """A visibility mode; ``employee_id`` is used by DIRECTORY_DETAIL only."""

    kind: ScopeKind
    employee_id: str | None = None

    @classmethod
    def personal(cls) -> Scope:
        return cls(ScopeKind.PERSONAL)

    @classmethod
    def team(cls) -> Scope:
        return cls(ScopeKind.TEAM)

    @classmethod
    def directory_detail(cls, employee_id: str) -> Scope:
        return cls(ScopeKind.DIRECTORY_DETAIL, employee_id)


# Team view statuses per reviewer role. Managers keep seeing what they already
# decided on; the pool is organisation-wide, not limited to direct reports.
TEAM_STATUSES: dict[Role, frozenset[TimesheetStatus]] = {
    Role.MANAGER: frozenset(
        {TimesheetStatus.SUBMITTED, TimesheetStatus.MANAGER_APPROVED, TimesheetStatus.REJECTED}
    ),
    Role.HR: frozenset({TimesheetStatus.MANAGER_APPROVED, TimesheetStatus.HR_APPROVED}),
}


def visible(timesheets: Iterable[Timesheet], actor: User, scope: Scope) -> list[Timesheet]:
    """Return the timesheets ``actor`` may see in ``scope``, in input order.

    Directory detail does not check who is asking; restricting that scope to
    HR is up to the caller.
    """
    if scope.kind is ScopeKind.PERSONAL:
        return [t for t in timesheets if t.employee_id == actor.id]
    if scope.kind is ScopeKind.TEAM:
        statuses = TEAM_STATUSES.get(actor.role)
        if not statuses:
            return []
        return [t for t in timesheets if t.employee_id != actor.id and t.status in statuses]
    if scope.kind is ScopeKind.DIRECTORY_DETAIL and scope.employee_id:
        return [t for t in timesheets if t.employee_id == scope.employee_id]
    return []
