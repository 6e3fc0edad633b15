from __future__ import annotations

from typing import TYPE_CHECKING

from leavedesk.exceptions import InvalidRangeError

if TYPE_CHECKING:
    from datetime import date


def days_between(start: date, end: date) -> int:
    """Count the calendar days from ``start`` to ``end``, both endpoints included.

    A same-day request counts as one day. Leave is whole-day only, so there is
    no clipping to a working schedule and weekends count like any other day.
    """
    if end < start:
        msg = f"end_date {end.isoformat()} is before start_date {start.isoformat()}"
        raise InvalidRangeError(msg)
    return (end - start).days + 1
