"""Interactive review console driven by an OpenAI agent.

The agent acts as one directory user (TIMESHEET_ACTOR_ID) and works the
timesheet workflow through the function tools below. The console owns the
mutable workspace; every tool hands a snapshot to the backend and stores the
value it gets back.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from agents import Agent, ModelSettings, RunContextWrapper, function_tool, run_demo_loop
from dotenv import load_dotenv

from .backend import workflow
from .backend.config import Settings, Workspace, load_from_env
from .backend.dates import resolve_date_phrase
from .backend.drafting import TextDraftingService, TimesheetSummary
from .backend.errors import TimesheetError
from .backend.exporters.csv import export_employee_csv, export_timesheets_csv
from .backend.models import (
    EntryType,
    Role,
    Timesheet,
    User,
    timesheet_to_dict,
    user_to_dict,
)
from .backend.reconcile import update_entry
from .backend.utils import total_hours
from .backend.visibility import Scope, ScopeKind, visible

logger = logging.getLogger(__name__)


@dataclass
class ReviewContext:
    """Per-run state: who is acting, and the workspace they act on."""

    settings: Settings = field(default_factory=Settings)
    workspace: Workspace = field(default_factory=Workspace)
    drafting: TextDraftingService = field(default_factory=TextDraftingService)

    @property
    def actor(self) -> User | None:
        return self.workspace.directory.get(self.settings.actor_id)


def _error(*problems: str, code: str | None = None) -> dict[str, Any]:
    out: dict[str, Any] = {"status": "error", "problems": list(problems)}
    if code:
        out["code"] = code
    return out


def _summarize(t: Timesheet, actor: User | None = None) -> dict[str, Any]:
    data = timesheet_to_dict(t)
    data["total_hours"] = total_hours(t.entries)
    if actor is not None:
        data["actions"] = [a.value for a in workflow.available_actions(t, actor)]
    return data


def _apply_to_timesheet(
    context: ReviewContext,
    timesheet_id: str,
    op: Callable[[Timesheet, User], Timesheet],
) -> dict[str, Any]:
    """Run a workflow operation as the current actor and store the result.

    Backend errors come back as an error payload; the workspace is only
    updated when the operation succeeds.
    """
    actor = context.actor
    if actor is None:
        return _error(f"Unknown actor: {context.settings.actor_id}")
    current = workflow.find_timesheet(context.workspace.timesheets, timesheet_id)
    if current is None:
        return _error(f"Unknown timesheet: {timesheet_id}")
    try:
        updated = op(current, actor)
    except TimesheetError as e:
        return _error(e.message, code=e.code)
    context.workspace.timesheets = workflow.upsert_timesheet(
        context.workspace.timesheets, updated
    )
    return {"status": "ok", "timesheet": _summarize(updated, actor)}


def _set_entry(
    context: ReviewContext,
    timesheet_id: str,
    entry_id: str,
    *,
    hours: float | None = None,
    entry_type: str | None = None,
) -> dict[str, Any]:
    """Edit one entry and save the sheet as a draft, filling gaps with the configured full day."""
    if entry_type is not None and entry_type not in {t.value for t in EntryType}:
        return _error(f"Unknown entry type: {entry_type}")
    return _apply_to_timesheet(
        context,
        timesheet_id,
        lambda t, actor: workflow.save_draft(
            t,
            actor,
            entries=update_entry(t.entries, entry_id, hours=hours, entry_type=entry_type),
            regular_hours=context.settings.full_day_hours,
        ),
    )


async def _rejection_text(
    context: ReviewContext, timesheet_id: str, reason: str, polish: bool
) -> str:
    """Return the reason to store, polished only when the actor may reject the sheet."""
    if not polish or not reason.strip():
        return reason
    actor = context.actor
    current = workflow.find_timesheet(context.workspace.timesheets, timesheet_id)
    if actor is None or current is None:
        return reason
    if workflow.Action.REJECT not in workflow.available_actions(current, actor):
        return reason
    return await context.drafting.draft_rejection(TimesheetSummary.from_timesheet(current), reason)


def _export_text(context: ReviewContext, employee_id: str | None) -> str | dict[str, Any]:
    """CSV for the actor's own sheets, or for one employee when the actor is HR."""
    actor = context.actor
    if actor is None:
        return _error(f"Unknown actor: {context.settings.actor_id}")
    if employee_id and employee_id != actor.id:
        if actor.role is not Role.HR:
            return _error("Only HR may export another employee's timesheets.")
        return export_employee_csv(context.workspace.timesheets, employee_id)
    return export_timesheets_csv(visible(context.workspace.timesheets, actor, Scope.personal()))


@function_tool
def whoami(ctx: RunContextWrapper[ReviewContext]) -> dict[str, Any]:
    """Return the user the console is acting as, and their manager."""
    actor = ctx.context.actor
    if actor is None:
        return _error(f"Unknown actor: {ctx.context.settings.actor_id}")
    manager = ctx.context.workspace.directory.manager_of(actor.id)
    return {
        "status": "ok",
        "user": user_to_dict(actor),
        "manager": user_to_dict(manager) if manager else None,
    }


@function_tool
def list_directory(ctx: RunContextWrapper[ReviewContext]) -> dict[str, Any]:
    """List every user in the directory with role and manager."""
    directory = ctx.context.workspace.directory
    return {"status": "ok", "users": [user_to_dict(u) for u in directory.users]}


@function_tool
def list_timesheets(
    ctx: RunContextWrapper[ReviewContext],
    scope: str = "personal",
    employee_id: str | None = None,
) -> dict[str, Any]:
    """List the timesheets visible to the current user.

    Args:
        scope: One of "personal", "team", or "directory_detail".
        employee_id: Required for "directory_detail" (HR only).
    """
    actor = ctx.context.actor
    if actor is None:
        return _error(f"Unknown actor: {ctx.context.settings.actor_id}")
    try:
        kind = ScopeKind(scope)
    except ValueError:
        return _error(f"Unknown scope: {scope}")
    if kind is ScopeKind.DIRECTORY_DETAIL and actor.role is not Role.HR:
        return _error("Only HR may browse another employee's timesheets.")
    found = visible(ctx.context.workspace.timesheets, actor, Scope(kind, employee_id))
    return {"status": "ok", "timesheets": [_summarize(t, actor) for t in found]}


@function_tool
def create_timesheet(
    ctx: RunContextWrapper[ReviewContext], period_start: str, period_end: str
) -> dict[str, Any]:
    """Create a new draft timesheet for the current user.

    Args:
        period_start: First day, YYYY-MM-DD.
        period_end: Last day (inclusive), YYYY-MM-DD.
    """
    actor = ctx.context.actor
    if actor is None:
        return _error(f"Unknown actor: {ctx.context.settings.actor_id}")
    try:
        created = workflow.create_timesheet(
            actor,
            period_start,
            period_end,
            regular_hours=ctx.context.settings.full_day_hours,
        )
    except TimesheetError as e:
        return _error(e.message, code=e.code)
    ctx.context.workspace.timesheets = workflow.upsert_timesheet(
        ctx.context.workspace.timesheets, created
    )
    return {"status": "ok", "timesheet": _summarize(created, actor)}


@function_tool
def change_period(
    ctx: RunContextWrapper[ReviewContext],
    timesheet_id: str,
    period_start: str,
    period_end: str,
) -> dict[str, Any]:
    """Move a draft or rejected timesheet to a new period, keeping entries inside it."""
    hours = ctx.context.settings.full_day_hours
    return _apply_to_timesheet(
        ctx.context,
        timesheet_id,
        lambda t, actor: workflow.save_draft(
            t, actor, period_start=period_start, period_end=period_end, regular_hours=hours
        ),
    )


@function_tool
def set_entry(
    ctx: RunContextWrapper[ReviewContext],
    timesheet_id: str,
    entry_id: str,
    hours: float | None = None,
    entry_type: str | None = None,
) -> dict[str, Any]:
    """Change the hours or type of one entry and save the timesheet as a draft.

    Args:
        entry_type: One of Regular, Saturday, Sunday, Public Holiday, Leave,
            Shift Allowance (>6pm).
    """
    return _set_entry(ctx.context, timesheet_id, entry_id, hours=hours, entry_type=entry_type)


@function_tool
def submit_timesheet(ctx: RunContextWrapper[ReviewContext], timesheet_id: str) -> dict[str, Any]:
    """Submit the current user's draft or rejected timesheet for review."""
    return _apply_to_timesheet(ctx.context, timesheet_id, workflow.submit)


@function_tool
def approve_timesheet(ctx: RunContextWrapper[ReviewContext], timesheet_id: str) -> dict[str, Any]:
    """Approve a timesheet (Manager: submitted ones; HR: manager-approved ones)."""
    return _apply_to_timesheet(ctx.context, timesheet_id, workflow.approve)


@function_tool
async def reject_timesheet(
    ctx: RunContextWrapper[ReviewContext],
    timesheet_id: str,
    reason: str,
    polish: bool = False,
) -> dict[str, Any]:
    """Reject a timesheet back to its owner.

    Args:
        reason: Why it is being rejected. Required.
        polish: If true, reword the reason politely before storing it.
    """
    text = await _rejection_text(ctx.context, timesheet_id, reason, polish)
    return _apply_to_timesheet(
        ctx.context, timesheet_id, lambda t, actor: workflow.reject(t, actor, text)
    )


@function_tool
async def audit_timesheet(ctx: RunContextWrapper[ReviewContext], timesheet_id: str) -> dict[str, Any]:
    """Ask the audit assistant to review a timesheet for anomalies."""
    current = workflow.find_timesheet(ctx.context.workspace.timesheets, timesheet_id)
    if current is None:
        return _error(f"Unknown timesheet: {timesheet_id}")
    note = await ctx.context.drafting.audit(TimesheetSummary.from_timesheet(current))
    return {"status": "ok", "audit": note}


@function_tool
def export_csv(
    ctx: RunContextWrapper[ReviewContext], employee_id: str | None = None
) -> str | dict[str, Any]:
    """Export timesheets as CSV, one row per entry.

    Args:
        employee_id: Limit to one employee (HR only); omit to export the
            current user's own timesheets.
    """
    context = ctx.context
    csv_text = _export_text(context, employee_id)
    if isinstance(csv_text, dict):
        return csv_text
    save_path = context.settings.save_path
    if save_path:
        try:
            folder = os.path.dirname(save_path)
            if folder:
                os.makedirs(folder, exist_ok=True)
            with open(save_path, "w", encoding="utf-8", newline="") as f:
                f.write(csv_text)
        except OSError:
            logger.warning("Could not write CSV export to %s", save_path, exc_info=True)
    return csv_text


@function_tool
def resolve_date(ctx: RunContextWrapper[ReviewContext], phrase: str) -> str:
    """Resolve a date like "today", "next monday" or "end of last week" to YYYY-MM-DD.

    Returns an empty string if the phrase is not understood.
    """
    settings = ctx.context.settings
    return resolve_date_phrase(phrase, timezone=settings.timezone, base_date=settings.base_date)


def build_agent(model_name: str) -> Agent[ReviewContext]:
    instructions = (
        "You are a timesheet assistant working on behalf of one user of an approval workflow. "
        "Call whoami first to learn who you act as and their role (Employee, Manager or HR). "
        "Employees and reviewers alike own their own timesheets: they create them, adjust periods "
        "and hours while a sheet is Draft or Rejected, and submit them. "
        "Managers approve or reject Submitted timesheets; HR approves or rejects Manager Approved "
        "ones. Nobody may review their own timesheet. "
        "Use list_timesheets with scope 'personal' for the user's own sheets and 'team' for the "
        "review queue; each result lists the actions currently allowed, so only offer those. "
        "A rejection always needs a reason; ask for one, and offer to polish it. "
        "Before approving, offer to run audit_timesheet. "
        "When the user mentions relative dates, convert them with resolve_date; do not guess. "
        "When a tool returns status 'error', explain the problem plainly and do not retry blindly. "
        "When asked for a report, call export_csv and return only the CSV content. "
        "Be concise and ask one question at a time."
    )

    return Agent[ReviewContext](
        name="Timesheet Review Assistant",
        instructions=instructions,
        tools=[
            whoami,
            list_directory,
            list_timesheets,
            create_timesheet,
            change_period,
            set_entry,
            submit_timesheet,
            approve_timesheet,
            reject_timesheet,
            audit_timesheet,
            export_csv,
            resolve_date,
        ],
        model=model_name,
        model_settings=ModelSettings(),
    )


async def main() -> None:
    load_dotenv()
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level)

    if not settings.openai_api_key:
        print("Warning: OPENAI_API_KEY is not set. Set it in your shell or a .env file.")

    workspace = load_from_env(
        default_path=os.path.join(os.path.dirname(__file__), "workspace.example.json")
    )
    context = ReviewContext(
        settings=settings,
        workspace=workspace or Workspace(),
        drafting=settings.drafting_service(),
    )
    if context.actor is None:
        print(f"Warning: TIMESHEET_ACTOR_ID {settings.actor_id!r} is not in the directory.")

    agent = build_agent(settings.openai_model)
    print("Timesheet review assistant ready. Ctrl+C to exit.")
    await run_demo_loop(agent, stream=True, context=context)


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
