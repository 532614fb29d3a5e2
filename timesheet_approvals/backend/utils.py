from __future__ import annotations

import uuid
from collections.abc import Iterable


def new_id() -> str:
    """Return a fresh collision-free identifier."""
    return uuid.uuid4().hex


def format_hours(hours: float) -> str:
    """Render hours without a trailing ``.0`` (8.0 -> "8", 7.5 -> "7.5")."""
    return f"{float(hours):g}"


def total_hours(entries: Iterable[object]) -> float:
    """Sum the ``hours`` attribute over entries, treating bad values as zero."""
    total = 0.0
    for e in entries:
        try:
            total += float(getattr(e, "hours", 0) or 0)
        except (TypeError, ValueError):
            continue
    return total
