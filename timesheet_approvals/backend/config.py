from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field

from .directory import Directory
from .drafting import DEFAULT_MODEL, DEFAULT_TIMEOUT, TextDraftingService
from .models import Timesheet, timesheet_from_dict, user_from_dict
from .reconcile import DEFAULT_REGULAR_HOURS


@dataclass
class Settings:
    """Runtime settings read from the environment."""

    openai_api_key: str | None = None
    openai_model: str = DEFAULT_MODEL
    full_day_hours: float = DEFAULT_REGULAR_HOURS
    drafting_timeout: float = DEFAULT_TIMEOUT
    workspace_path: str | None = None
    actor_id: str | None = None
    save_path: str | None = None
    timezone: str | None = None
    base_date: str | None = None
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        return cls(
            openai_api_key=env.get("OPENAI_API_KEY") or None,
            openai_model=env.get("OPENAI_MODEL") or DEFAULT_MODEL,
            full_day_hours=_positive_float(
                env.get("TIMESHEET_FULL_DAY_HOURS"), DEFAULT_REGULAR_HOURS
            ),
            drafting_timeout=_positive_float(
                env.get("TIMESHEET_DRAFTING_TIMEOUT"), DEFAULT_TIMEOUT
            ),
            workspace_path=env.get("TIMESHEET_CONFIG_PATH") or None,
            actor_id=env.get("TIMESHEET_ACTOR_ID") or None,
            save_path=env.get("TIMESHEET_SAVE_PATH") or None,
            timezone=env.get("TIMESHEET_TZ") or None,
            base_date=env.get("TIMESHEET_BASE_DATE") or None,
            log_level=_log_level(env.get("TIMESHEET_LOG_LEVEL")),
        )

    def drafting_service(self) -> TextDraftingService:
        return TextDraftingService(
            api_key=self.openai_api_key,
            model=self.openai_model,
            timeout=self.drafting_timeout,
        )


@dataclass
class Workspace:
    """A directory plus the timesheets recorded against it."""

    directory: Directory = field(default_factory=Directory)
    timesheets: tuple[Timesheet, ...] = field(default_factory=tuple)


def load_workspace(path: str) -> Workspace:
    """Read ``{"users": [...], "timesheets": [...]}`` from a JSON file.

    Users go through directory validation in file order, so a manager must be
    listed before their reports.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    directory = Directory()
    for x in data.get("users") or []:
        if isinstance(x, dict):
            directory = directory.add(user_from_dict(x))
    timesheets = tuple(
        timesheet_from_dict(x) for x in (data.get("timesheets") or []) if isinstance(x, dict)
    )
    return Workspace(directory=directory, timesheets=timesheets)


def load_from_env(default_path: str | None = None) -> Workspace | None:
    """Load the workspace from TIMESHEET_CONFIG_PATH or a default path.

    Returns None when no path is configured or the file does not exist.
    """
    path = os.environ.get("TIMESHEET_CONFIG_PATH") or default_path
    if not path or not os.path.isfile(path):
        return None
    return load_workspace(path)


def _positive_float(raw: str | None, default: float) -> float:
    try:
        val = float(raw or default)
    except ValueError:
        return default
    return val if val > 0 else default


def _log_level(raw: str | None) -> str:
    name = (raw or "WARNING").strip().upper()
    return name if isinstance(logging.getLevelName(name), int) else "WARNING"
