# Discharge distribution by day of week
from __future__ import annotations

from collections import Counter
from datetime import date
from typing import Dict, Iterable, List, Optional

from models import Episode

# dia_semana_alta: 1 = Segunda (Monday) .. 7 = Domingo (Sunday)
WEEKDAY_NAMES = ["Segunda", "Terça", "Quarta", "Quinta", "Sexta", "Sábado", "Domingo"]
WEEKEND = (6, 7)


def discharge_weekday(ep: Episode) -> Optional[int]:
    """Recorded weekday, or the one implied by dischargeDate; None if unknown."""
    if ep.weekdayOfDischarge is not None:
        return ep.weekdayOfDischarge
    if ep.dischargeDate is not None:
        return ep.dischargeDate.isoweekday()
    return None


def _weekdays(
    episodes: Iterable[Episode],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[int]:
    ranged = start is not None or end is not None
    days = []
    for ep in episodes:
        if ranged:
            # a sub-range needs the date itself
            if ep.dischargeDate is None:
                continue
            if start is not None and ep.dischargeDate < start:
                continue
            if end is not None and ep.dischargeDate > end:
                continue
        weekday = discharge_weekday(ep)
        if weekday is not None:
            days.append(weekday)
    return days


def weekday_distribution(
    episodes: Iterable[Episode],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[Dict]:
    """
    Discharges per weekday, Monday first: {name, value, count, percentage}.
    value is the percentage rounded to one decimal (chart value); count is absolute.
    """
    days = _weekdays(episodes, start, end)
    total = len(days)
    counter = Counter(days)

    rows = []
    for weekday, name in enumerate(WEEKDAY_NAMES, start=1):
        count = counter.get(weekday, 0)
        percentage = count / total * 100 if total else 0.0
        rows.append({
            "name": name,
            "value": round(percentage, 1),
            "count": count,
            "percentage": percentage,
        })
    return rows


def weekend_discharge_rate(
    episodes: Iterable[Episode],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> float:
    """Share (%) of discharges on Saturday or Sunday."""
    days = _weekdays(episodes, start, end)
    if not days:
        return 0.0
    return sum(1 for d in days if d in WEEKEND) / len(days) * 100
