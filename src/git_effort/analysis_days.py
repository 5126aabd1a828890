from __future__ import annotations

import datetime as dt


def parse_when(when: str | int | None, today: dt.date | None = None) -> list[dt.date]:
    """
    Days to analyze, newest first.

    `when` is a positive day count (1 = today only, 3 = today and the two
    days before), an ISO date, `today` or `yesterday`.
    """
    if today is None:
        today = dt.date.today()
    s = str(when if when is not None else "").strip().lower()
    if not s:
        return [today]
    if s.isdigit():
        n = int(s)
        if n < 1:
            raise ValueError(f"Invalid day count: {when!r} (expected 1 or more)")
        return [today - dt.timedelta(days=i) for i in range(n)]
    if s == "today":
        return [today]
    if s == "yesterday":
        return [today - dt.timedelta(days=1)]
    try:
        return [dt.date.fromisoformat(s)]
    except ValueError:
        raise ValueError(f"Invalid day count or date: {when!r} (expected a number of days, YYYY-MM-DD, today or yesterday)") from None


def day_bounds(day: dt.date) -> tuple[str, str]:
    d = day.isoformat()
    return f"{d} 00:00", f"{d} 23:59"
