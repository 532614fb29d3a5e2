import asyncio
from datetime import date
from types import SimpleNamespace

import pytest

from timesheet_approvals.backend.drafting import (
    AUDIT_EMPTY,
    AUDIT_ERROR,
    AUDIT_UNAVAILABLE,
    TextDraftingService,
    TimesheetSummary,
)
from timesheet_approvals.backend.models import EntryType, Timesheet, TimesheetEntry


class _FakeResponses:
    def __init__(self, text: str = "", error: Exception | None = None, delay: float = 0):
        self.text = text
        self.error = error
        self.delay = delay
        self.calls: list[dict] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return SimpleNamespace(output_text=self.text)


def _client(**kwargs) -> SimpleNamespace:
    return SimpleNamespace(responses=_FakeResponses(**kwargs))


SUMMARY = TimesheetSummary.from_timesheet(
    Timesheet(
        id="t1",
        employee_id="u1",
        employee_name="Alice Employee",
        period_start=date(2025, 9, 1),
        period_end=date(2025, 9, 1),
        entries=(TimesheetEntry("e1", date(2025, 9, 1), EntryType.LEAVE, 7.5),),
    )
)


def test_summary_lines():
    assert SUMMARY.entry_lines == ["- Date: 2025-09-01, Type: Leave, Hours: 7.5"]


def test_unconfigured_service_falls_back():
    svc = TextDraftingService()
    assert asyncio.run(svc.audit(SUMMARY)) == AUDIT_UNAVAILABLE
    assert asyncio.run(svc.draft_rejection(SUMMARY, "fix it")) == "fix it"


def test_successful_calls_return_model_text():
    client = _client(text="  Please correct Monday's hours.  ")
    svc = TextDraftingService(client, model="test-model")
    assert asyncio.run(svc.draft_rejection(SUMMARY, "monday wrong")) == "Please correct Monday's hours."
    call = client.responses.calls[0]
    assert call["model"] == "test-model"
    assert "monday wrong" in call["input"]
    assert "Alice Employee" in call["input"]


def test_errors_are_absorbed():
    svc = TextDraftingService(_client(error=RuntimeError("boom")))
    assert asyncio.run(svc.audit(SUMMARY)) == AUDIT_ERROR
    assert asyncio.run(svc.draft_rejection(SUMMARY, "raw")) == "raw"


def test_empty_output_falls_back():
    svc = TextDraftingService(_client(text=""))
    assert asyncio.run(svc.audit(SUMMARY)) == AUDIT_EMPTY
    assert asyncio.run(svc.draft_rejection(SUMMARY, "raw")) == "raw"


def test_timeout_falls_back():
    svc = TextDraftingService(_client(text="late", delay=1), timeout=0.01)
    assert asyncio.run(svc.audit(SUMMARY)) == AUDIT_ERROR


def test_cancellation_propagates():
    svc = TextDraftingService(_client(text="late", delay=5))

    async def run():
        task = asyncio.create_task(svc.audit(SUMMARY))
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        return task.cancelled()

    assert asyncio.run(run()) is True
