import json
import os

import pytest

from timesheet_approvals.backend.config import Settings, load_from_env, load_workspace
from timesheet_approvals.backend.errors import InvalidUserError
from timesheet_approvals.backend.models import Role, TimesheetStatus

EXAMPLE = os.path.join(
    os.path.dirname(__file__), os.pardir, os.pardir, "timesheet_approvals", "workspace.example.json"
)


def test_settings_defaults_and_overrides():
    s = Settings.from_env({})
    assert s.openai_model == "gpt-4o-mini"
    assert s.full_day_hours == 8.0
    assert s.log_level == "WARNING"
    s = Settings.from_env(
        {
            "OPENAI_MODEL": "gpt-4.1",
            "TIMESHEET_FULL_DAY_HOURS": "7.6",
            "TIMESHEET_DRAFTING_TIMEOUT": "nope",
            "TIMESHEET_ACTOR_ID": "u2",
            "TIMESHEET_LOG_LEVEL": "debug",
        }
    )
    assert s.openai_model == "gpt-4.1"
    assert s.full_day_hours == 7.6
    assert s.drafting_timeout == 30.0
    assert s.actor_id == "u2"
    assert s.log_level == "DEBUG"


def test_non_positive_hours_fall_back():
    assert Settings.from_env({"TIMESHEET_FULL_DAY_HOURS": "0"}).full_day_hours == 8.0


def test_load_example_workspace():
    ws = load_workspace(EXAMPLE)
    assert [u.role for u in ws.directory.users] == [Role.HR, Role.MANAGER, Role.EMPLOYEE]
    assert ws.directory.manager_of("u1").name == "Bob Manager"
    t1 = ws.timesheets[0]
    assert t1.status == TimesheetStatus.SUBMITTED
    assert len(t1.entries) == 3


def test_workspace_rejects_unknown_manager(tmp_path):
    path = tmp_path / "ws.json"
    path.write_text(
        json.dumps({"users": [{"id": "u1", "name": "Alice", "role": "Employee", "manager_id": "u9"}]}),
        encoding="utf-8",
    )
    with pytest.raises(InvalidUserError):
        load_workspace(str(path))


def test_load_from_env(monkeypatch, tmp_path):
    monkeypatch.delenv("TIMESHEET_CONFIG_PATH", raising=False)
    assert load_from_env() is None
    assert load_from_env(default_path=str(tmp_path / "missing.json")) is None
    monkeypatch.setenv("TIMESHEET_CONFIG_PATH", EXAMPLE)
    assert len(load_from_env().timesheets) == 3


def test_unknown_log_level_falls_back_to_warning():
    assert Settings.from_env({"TIMESHEET_LOG_LEVEL": "verbose"}).log_level == "WARNING"
    assert Settings.from_env({"TIMESHEET_LOG_LEVEL": " info "}).log_level == "INFO"
