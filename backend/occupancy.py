# Bed occupancy - daily census against capacity, averaged per month then per period
from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from formatting import month_label
from grouping import occupancy_key
from models import Episode


def last_day_of_previous_month(today: Optional[date] = None) -> date:
    """Reports stop here; the still-accruing current month is never included."""
    today = today or date.today()
    return today.replace(day=1) - timedelta(days=1)


def reporting_window(
    episodes: Iterable[Episode],
    floor_date: Optional[date],
    today: Optional[date] = None,
) -> Optional[Tuple[date, date]]:
    """
    (start, end) of the reporting period.

    start = later of the earliest admission and the site's floor date;
    end = last day of the month before today's month. None when there is
    nothing to anchor the start on.
    """
    admissions = [ep.admissionDate for ep in episodes if ep.admissionDate is not None]
    candidates = [d for d in (min(admissions) if admissions else None, floor_date) if d is not None]
    if not candidates:
        return None
    return max(candidates), last_day_of_previous_month(today)


def iter_months(start: date, end: date) -> Iterator[date]:
    """First day of every calendar month from start's month to end's month."""
    current = start.replace(day=1)
    while current <= end:
        yield current
        if current.month == 12:
            current = current.replace(year=current.year + 1, month=1)
        else:
            current = current.replace(month=current.month + 1)


def _occupies(ep: Episode, day: date) -> bool:
    if ep.admissionDate is None or ep.admissionDate > day:
        return False
    return ep.dischargeDate is None or ep.dischargeDate >= day


def _usable(episodes: Iterable[Episode], start: date, end: date) -> List[Episode]:
    """Episodes that overlap [start, end] and have a coherent date pair."""
    usable = []
    for ep in episodes:
        if ep.admissionDate is None or ep.admissionDate > end:
            continue
        if ep.dischargeDate is not None:
            if ep.dischargeDate < ep.admissionDate or ep.dischargeDate < start:
                continue
        usable.append(ep)
    return usable


def daily_census(episodes: Iterable[Episode], day: date) -> int:
    """Unique patients occupying a bed on day (admitted on or before, not yet discharged)."""
    return len({occupancy_key(ep) for ep in episodes if _occupies(ep, day)})


def _monthly_rates(
    episodes: List[Episode],
    capacity: int,
    start: date,
    end: date,
) -> List[Tuple[date, float]]:
    rates = []
    for month_start in iter_months(start, end):
        days_in_month = calendar.monthrange(month_start.year, month_start.month)[1]
        daily = [
            daily_census(episodes, month_start + timedelta(days=offset)) / capacity
            for offset in range(days_in_month)
        ]
        rates.append((month_start, sum(daily) / len(daily)))
    return rates


def monthly_occupancy(
    episodes: Iterable[Episode],
    capacity: int,
    start: date,
    end: date,
) -> List[Dict]:
    """Per-month occupancy as {name: "MM/YY", month: "YYYY-MM", value: pct rounded to 1 decimal}."""
    if capacity <= 0 or start > end:
        return []
    usable = _usable(episodes, start, end)
    return [
        {
            "name": month_label(month_start),
            "month": month_start.strftime("%Y-%m"),
            "value": round(rate * 100, 1),
        }
        for month_start, rate in _monthly_rates(usable, capacity, start, end)
    ]


def average_occupancy(
    episodes: Iterable[Episode],
    capacity: int,
    period_start: Optional[date] = None,
    period_end: Optional[date] = None,
    floor_date: Optional[date] = None,
    today: Optional[date] = None,
) -> float:
    """
    Period occupancy rate (%) rounded to one decimal.

    Each month's rate is the mean of its daily census/capacity; the period
    rate is the mean of the monthly rates, not a flat mean over days.
    Missing bounds come from reporting_window(). Empty input, capacity <= 0
    or an empty window -> 0.0.
    """
    episodes = list(episodes)
    if not episodes or capacity <= 0:
        return 0.0

    if period_start is None or period_end is None:
        window = reporting_window(episodes, floor_date, today)
        if window is None:
            return 0.0
        period_start = period_start or window[0]
        period_end = period_end or window[1]
    if period_start > period_end:
        return 0.0

    usable = _usable(episodes, period_start, period_end)
    rates = _monthly_rates(usable, capacity, period_start, period_end)
    if not rates:
        return 0.0
    return round(sum(rate for _month, rate in rates) / len(rates) * 100, 1)


def current_occupancy(episodes: Iterable[Episode]) -> int:
    """Unique patients with an open episode."""
    return len({
        occupancy_key(ep)
        for ep in episodes
        if ep.admissionDate is not None and ep.is_open
    })
