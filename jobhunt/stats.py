"""Aggregate counts and the filtered/sorted application view.

Everything here is recomputed from scratch on each call. Rolling windows:

    today:  applied date equals the local calendar date
    week:   applied date >= today - 7 days
    month:  applied date >= today minus one calendar month
    year:   applied date >= today minus one calendar year

Calendar subtraction keeps the day number and lets it spill into the
following month when the target month is shorter (March 31 minus one month
is "February 31", i.e. early March), so a month window is not always 30 days.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Iterable
from zoneinfo import ZoneInfo

from jobhunt.log import get_logger
from jobhunt.models import Application, FilterState, SortOrder, Status, TimeWindow

log = get_logger(__name__)


@dataclass(frozen=True)
class ApplicationStats:
    today: int = 0
    week: int = 0
    month: int = 0
    year: int = 0


def local_today(now: datetime | None = None, tz: str | tzinfo | None = None) -> date:
    """Calendar date of *now* in the configured zone, or the machine's local zone.

    A naive *now* is taken to be local wall-clock time already.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.date()
    if tz is None:
        return now.astimezone().date()
    zone = ZoneInfo(tz) if isinstance(tz, str) else tz
    return now.astimezone(zone).date()


def _shift_months(day: date, months: int) -> date:
    total = day.year * 12 + (day.month - 1) - months
    year, month0 = divmod(total, 12)
    return date(year, month0 + 1, 1) + timedelta(days=day.day - 1)


def window_cutoff(window: TimeWindow, today: date) -> date | None:
    """Earliest applied date inside *window*; None for ``all``."""
    if window == TimeWindow.ALL:
        return None
    if window == TimeWindow.TODAY:
        return today
    if window == TimeWindow.WEEK:
        return today - timedelta(days=7)
    if window == TimeWindow.MONTH:
        return _shift_months(today, 1)
    if window == TimeWindow.YEAR:
        return _shift_months(today, 12)
    raise ValueError(f"Unhandled time window: {window!r}")


def in_window(app: Application, window: TimeWindow, today: date) -> bool:
    if window == TimeWindow.ALL:
        return True
    if window == TimeWindow.TODAY:
        return app.applied_date == today
    return app.applied_date >= window_cutoff(window, today)


def matches_search(app: Application, query: str) -> bool:
    q = query.lower()
    if not q:
        return True
    return (
        q in app.job_title.lower()
        or q in app.company_name.lower()
        or bool(app.location and q in app.location.lower())
    )


def compute_stats(apps: Iterable[Application], today: date) -> ApplicationStats:
    apps = list(apps)

    def count(window: TimeWindow) -> int:
        return sum(1 for a in apps if in_window(a, window, today))

    return ApplicationStats(
        today=count(TimeWindow.TODAY),
        week=count(TimeWindow.WEEK),
        month=count(TimeWindow.MONTH),
        year=count(TimeWindow.YEAR),
    )


def status_breakdown(apps: Iterable[Application]) -> dict[Status, int]:
    counts = {s: 0 for s in Status}
    for a in apps:
        counts[a.status] += 1
    return counts


def filter_and_sort(
    apps: Iterable[Application], state: FilterState, today: date
) -> list[Application]:
    """Applications passing search, status and window filters, ordered by applied date.

    ``sorted`` is stable in both directions, so entries sharing a date keep
    their collection order.
    """
    apps = list(apps)
    result = [
        a for a in apps
        if matches_search(a, state.query)
        and (state.status is None or a.status == state.status)
        and in_window(a, state.window, today)
    ]
    result = sorted(
        result,
        key=lambda a: a.applied_date,
        reverse=state.sort == SortOrder.DESC,
    )
    log.debug(
        "Filtered %d → %d (query=%r, status=%s, window=%s, sort=%s)",
        len(apps), len(result), state.query,
        state.status.value if state.status else "all", state.window.value, state.sort.value,
    )
    return result
