import pytest

from timesheet_approvals.backend.directory import Directory
from timesheet_approvals.backend.errors import InvalidUserError, UnknownUserError
from timesheet_approvals.backend.models import Role, User

CAROL = User(id="u3", name="Carol HR", role=Role.HR)
BOB = User(id="u2", name="Bob Manager", role=Role.MANAGER, manager_id="u3")
ALICE = User(id="u1", name="Alice Employee", role=Role.EMPLOYEE, manager_id="u2")


def _directory() -> Directory:
    return Directory().add(CAROL).add(BOB).add(ALICE)


def test_manager_of_follows_the_reporting_line():
    d = _directory()
    assert d.manager_of("u1") == BOB
    assert d.manager_of("u2") == CAROL
    assert d.manager_of("u3") is None
    assert d.manager_of("nobody") is None


def test_add_validates_name_and_manager():
    d = _directory()
    with pytest.raises(InvalidUserError):
        d.add(User(id="u9", name="  ", role=Role.EMPLOYEE))
    with pytest.raises(InvalidUserError):
        d.add(User(id="u9", name="Eve", role=Role.EMPLOYEE, manager_id="ghost"))
    with pytest.raises(InvalidUserError):
        d.add(User(id="u1", name="Alice Again", role=Role.EMPLOYEE))


def test_add_returns_a_new_directory():
    d = _directory()
    d2 = d.add(User(id="u9", name="Eve", role=Role.EMPLOYEE, manager_id="u2"))
    assert "u9" in d2
    assert "u9" not in d
    assert [u.id for u in d2.reports_of("u2")] == ["u1", "u9"]


def test_update_replaces_user_and_requires_existing_id():
    d = _directory().update(User(id="u1", name="Alice Smith", role=Role.EMPLOYEE, manager_id="u3"))
    assert d.get("u1").name == "Alice Smith"
    assert d.manager_of("u1") == CAROL
    with pytest.raises(UnknownUserError):
        d.update(User(id="zz", name="Zed", role=Role.EMPLOYEE))


def test_no_cycle_detection():
    # Carol reporting to Bob closes a loop; this is accepted.
    d = _directory().update(User(id="u3", name="Carol HR", role=Role.HR, manager_id="u2"))
    assert d.manager_of("u3") == BOB
    assert d.manager_of("u2").id == "u3"


def test_remove_leaves_dangling_manager_reference():
    d = _directory().remove("u2")
    assert "u2" not in d
    assert d.get("u1").manager_id == "u2"
    assert d.manager_of("u1") is None
    assert d.remove("missing") == d


def test_potential_managers_excludes_self_and_employees():
    d = _directory()
    assert [u.id for u in d.potential_managers()] == ["u3", "u2"]
    assert [u.id for u in d.potential_managers(exclude_id="u2")] == ["u3"]
