"""CSV export of timesheets, one row per (timesheet, entry)."""

from __future__ import annotations

import csv
import io
import re
from collections.abc import Iterable, Iterator, Sequence

from ..models import Timesheet
from ..utils import format_hours

EXPORT_HEADERS = [
    "Employee Name",
    "Period Start",
    "Period End",
    "Status",
    "Date",
    "Type",
    "Hours",
    "Rejection/Notes",
]


def render_csv(rows: Iterable[dict[str, object]], fieldnames: Sequence[str]) -> str:
    """Render an iterable of dict rows to a CSV string with given headers.

    - Unknown keys are ignored to keep output stable.
    - Fields holding the delimiter or a quote are quoted, inner quotes doubled.
    """
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=list(fieldnames), extrasaction="ignore")
    writer.writeheader()
    for row in rows:
        writer.writerow(row or {})
    return buf.getvalue()


def timesheet_rows(timesheets: Iterable[Timesheet]) -> Iterator[dict[str, object]]:
    """Flatten timesheets into export rows.

    A timesheet without entries still yields one row, with empty date and
    type and hours "0".
    """
    for t in timesheets:
        base = {
            "Employee Name": t.employee_name,
            "Period Start": t.period_start.isoformat(),
            "Period End": t.period_end.isoformat(),
            "Status": t.status.value,
            "Rejection/Notes": t.rejection_reason or "",
        }
        if not t.entries:
            yield {**base, "Date": "", "Type": "", "Hours": "0"}
            continue
        for e in t.entries:
            yield {
                **base,
                "Date": e.date.isoformat(),
                "Type": e.type.value,
                "Hours": format_hours(e.hours),
            }


def export_timesheets_csv(timesheets: Iterable[Timesheet]) -> str:
    return render_csv(timesheet_rows(timesheets), EXPORT_HEADERS)


def export_employee_csv(timesheets: Iterable[Timesheet], employee_id: str) -> str:
    """Export every timesheet of one employee (the HR directory report)."""
    return export_timesheets_csv(t for t in timesheets if t.employee_id == employee_id)


def report_filename(employee_name: str) -> str:
    """File name for an employee report, e.g. ``Alice_Employee_Timesheet_Report.csv``."""
    stem = re.sub(r"\s+", "_", employee_name.strip())
    return f"{stem}_Timesheet_Report.csv"
