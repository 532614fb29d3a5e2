from datetime import date

from timesheet_approvals.backend.models import Role, Timesheet, TimesheetStatus, User
from timesheet_approvals.backend.visibility import Scope, ScopeKind, visible

ALICE = User(id="u1", name="Alice Employee", role=Role.EMPLOYEE, manager_id="u2")
BOB = User(id="u2", name="Bob Manager", role=Role.MANAGER, manager_id="u3")
CAROL = User(id="u3", name="Carol HR", role=Role.HR)


def _sheet(id_: str, owner: User, status: TimesheetStatus) -> Timesheet:
    return Timesheet(
        id=id_,
        employee_id=owner.id,
        employee_name=owner.name,
        period_start=date(2025, 9, 1),
        period_end=date(2025, 9, 7),
        status=status,
    )


SHEETS = [
    _sheet("a-draft", ALICE, TimesheetStatus.DRAFT),
    _sheet("a-sub", ALICE, TimesheetStatus.SUBMITTED),
    _sheet("a-mgr", ALICE, TimesheetStatus.MANAGER_APPROVED),
    _sheet("a-hr", ALICE, TimesheetStatus.HR_APPROVED),
    _sheet("a-rej", ALICE, TimesheetStatus.REJECTED),
    _sheet("b-sub", BOB, TimesheetStatus.SUBMITTED),
    _sheet("b-mgr", BOB, TimesheetStatus.MANAGER_APPROVED),
    _sheet("c-mgr", CAROL, TimesheetStatus.MANAGER_APPROVED),
]


def _ids(sheets):
    return [t.id for t in sheets]


def test_personal_shows_all_own_sheets():
    assert _ids(visible(SHEETS, ALICE, Scope.personal())) == [
        "a-draft",
        "a-sub",
        "a-mgr",
        "a-hr",
        "a-rej",
    ]


def test_manager_team_view():
    assert _ids(visible(SHEETS, BOB, Scope.team())) == ["a-sub", "a-mgr", "a-rej", "c-mgr"]


def test_hr_team_view():
    assert _ids(visible(SHEETS, CAROL, Scope.team())) == ["a-mgr", "a-hr", "b-mgr"]


def test_employee_team_view_is_empty():
    assert visible(SHEETS, ALICE, Scope.team()) == []


def test_directory_detail_has_no_status_filter():
    assert _ids(visible(SHEETS, CAROL, Scope.directory_detail("u2"))) == ["b-sub", "b-mgr"]


def test_directory_detail_without_employee_is_empty():
    assert visible(SHEETS, CAROL, Scope(ScopeKind.DIRECTORY_DETAIL)) == []


def test_manager_team_view_excludes_own_sheets():
    sheets = [
        _sheet("s", ALICE, TimesheetStatus.SUBMITTED),
        _sheet("m", ALICE, TimesheetStatus.MANAGER_APPROVED),
        _sheet("r", BOB, TimesheetStatus.REJECTED),
    ]
    # Manager Approved is in the manager's set too, so only Bob's own sheet drops out.
    assert _ids(visible(sheets, BOB, Scope.team())) == ["s", "m"]
