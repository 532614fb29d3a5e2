"""Best-effort text drafting for reviewers (rejection wording, audits).

Backed by the OpenAI Responses API. Nothing here may break the approval
flow: a missing key, an API error or a timeout turns into a fixed fallback
string. Only cancellation reaches the caller.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from openai import AsyncOpenAI

from .models import Timesheet
from .utils import format_hours

logger = logging.getLogger(__name__)

AUDIT_UNAVAILABLE = "AI Audit Unavailable: Missing API Key."
AUDIT_ERROR = "Error performing AI audit."
AUDIT_EMPTY = "No analysis generated."

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class TimesheetSummary:
    """The parts of a timesheet the drafting service gets to see."""

    employee_name: str
    period_start: str
    period_end: str
    entry_lines: list[str] = field(default_factory=list)

    @classmethod
    def from_timesheet(cls, timesheet: Timesheet) -> TimesheetSummary:
        return cls(
            employee_name=timesheet.employee_name,
            period_start=timesheet.period_start.isoformat(),
            period_end=timesheet.period_end.isoformat(),
            entry_lines=[
                f"- Date: {e.date.isoformat()}, Type: {e.type.value}, Hours: {format_hours(e.hours)}"
                for e in timesheet.entries
            ],
        )


def build_audit_prompt(summary: TimesheetSummary) -> str:
    entries = "\n".join(summary.entry_lines) or "(no entries)"
    return (
        "Act as a strict HR timesheet auditor. Review the following timesheet for anomalies.\n\n"
        "Rules:\n"
        "1. Employees should generally not work more than 7 consecutive days.\n"
        "2. 'Shift Allowance' usually accompanies 'Regular' hours on the same day; "
        "flag it if it looks odd (e.g. 8 hours of allowance alone).\n"
        "3. Flag any single day with more than 12 hours.\n"
        "4. Give a brief bulleted breakdown of hours by type.\n\n"
        f"Employee: {summary.employee_name}\n"
        f"Period: {summary.period_start} to {summary.period_end}\n\n"
        f"Entries:\n{entries}\n\n"
        "Output format:\n"
        "**Summary**: [brief breakdown]\n"
        '**Flags**: [potential issues or "None detected"]\n'
        "**Recommendation**: [Approve / Request Clarification]"
    )


def build_rejection_prompt(summary: TimesheetSummary, raw_text: str) -> str:
    return (
        "Draft a professional and polite rejection comment for a timesheet.\n\n"
        f"Employee: {summary.employee_name}\n"
        f"Period: {summary.period_start} to {summary.period_end}\n"
        f'Reviewer\'s raw reason: "{raw_text}"\n\n'
        "Keep the tone constructive and the comment under two sentences. "
        "Reply with the comment only."
    )


class TextDraftingService:
    """Wraps an ``openai.AsyncOpenAI`` client with fallbacks.

    Pass ``client`` to inject a ready client (tests do this); otherwise one is
    created on first use from ``api_key``. Without either, every call returns
    its fallback without touching the network.
    """

    def __init__(
        self,
        client: Any | None = None,
        *,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._client = client
        self._api_key = api_key
        self.model = model or DEFAULT_MODEL
        self.timeout = timeout if timeout and timeout > 0 else DEFAULT_TIMEOUT

    @property
    def configured(self) -> bool:
        return self._client is not None or bool(self._api_key)

    async def draft_rejection(self, summary: TimesheetSummary, raw_text: str) -> str:
        """Polish a reviewer's rejection reason; returns ``raw_text`` on any failure."""
        if not self.configured:
            return raw_text
        try:
            text = await self._complete(build_rejection_prompt(summary, raw_text))
        except Exception:
            logger.warning("Rejection drafting failed; keeping the raw reason", exc_info=True)
            return raw_text
        return text or raw_text

    async def audit(self, summary: TimesheetSummary) -> str:
        """Produce an audit note for a reviewer; never raises (except on cancel)."""
        if not self.configured:
            return AUDIT_UNAVAILABLE
        try:
            text = await self._complete(build_audit_prompt(summary))
        except Exception:
            logger.warning("Timesheet audit failed", exc_info=True)
            return AUDIT_ERROR
        return text or AUDIT_EMPTY

    async def _complete(self, prompt: str) -> str:
        client = self._get_client()
        resp = await asyncio.wait_for(
            client.responses.create(model=self.model, input=prompt),
            timeout=self.timeout,
        )
        return (getattr(resp, "output_text", "") or "").strip()

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self._api_key)
        return self._client
