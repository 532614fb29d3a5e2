"""Calendar-date helpers.

Periods and entries are date-only. Day arithmetic happens on ``datetime.date``
values, which carry no time of day or zone, so stepping one day never drifts
across a daylight-saving change.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from datetime import date, datetime, timedelta, tzinfo as _tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_ONE_DAY = timedelta(days=1)

_WEEKDAYS = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}


def parse_date(value: object) -> date | None:
    """Coerce a value to a calendar date, or return None if it is not one.

    Accepts ``date`` values, ``datetime`` values (the time part is dropped) and
    ISO ``YYYY-MM-DD`` strings. A longer ISO timestamp is cut to its date part.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    s = value.strip()
    if len(s) > 10 and s[10] in "T ":
        s = s[:10]
    if not re.fullmatch(r"\d{4}-\d{2}-\d{2}", s):
        return None
    try:
        return datetime.strptime(s, "%Y-%m-%d").date()
    except ValueError:
        return None


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every date from start to end inclusive; nothing when end < start."""
    for offset in range((end - start).days + 1):
        yield start + timedelta(days=offset)


def resolve_date_phrase(
    phrase: str,
    *,
    timezone: str | None = None,
    base_date: str | None = None,
) -> str:
    """Resolve a relative or natural-language date to ISO YYYY-MM-DD.

    Supported:
    - ISO dates, returned unchanged.
    - today, yesterday, tomorrow.
    - "this/next/last <weekday>", and "start/end of this/last/next week"
      (weeks run Monday to Sunday).

    Args:
        phrase: The user-provided date phrase.
        timezone: Optional IANA zone used to decide what "today" is.
        base_date: Optional YYYY-MM-DD anchor for relative phrases.
    Returns:
        The ISO date, or an empty string when the phrase is not understood.
    """
    s = (phrase or "").strip().lower()
    if not s:
        return ""

    iso = parse_date(s)
    if iso is not None:
        return iso.isoformat()

    today = parse_date(base_date) or datetime.now(_resolve_zone(timezone)).date()

    if s in {"today", "now"}:
        return today.isoformat()
    if s == "yesterday":
        return (today - _ONE_DAY).isoformat()
    if s == "tomorrow":
        return (today + _ONE_DAY).isoformat()

    wk = re.fullmatch(
        r"(this|next|last)\s+(monday|tuesday|wednesday|thursday|friday|saturday|sunday)", s
    )
    if wk:
        offset = (_WEEKDAYS[wk.group(2)] - today.weekday()) % 7
        shift = {"this": 0, "next": 7, "last": -7}[wk.group(1)]
        return (today + timedelta(days=offset + shift)).isoformat()

    edge = re.fullmatch(r"(start|end) of (this|next|last) week", s)
    if edge:
        monday = today - timedelta(days=today.weekday())
        monday += timedelta(days={"this": 0, "next": 7, "last": -7}[edge.group(2)])
        return (monday if edge.group(1) == "start" else monday + timedelta(days=6)).isoformat()

    return ""


def _resolve_zone(name: str | None) -> _tzinfo | None:
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            pass
    return datetime.now().astimezone().tzinfo
