# Length of stay - corrected average over a patient population
from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, List, Optional

from models import Episode
from normalizer import days_between

# (label, min days, max days) - upper bound None means open-ended
STAY_BANDS = [
    ("0-3", 0, 3),
    ("4-7", 4, 7),
    ("8-14", 8, 14),
    ("15-21", 15, 21),
    ("22-30", 22, 30),
    ("30+", 31, None),
]


def resolve_stay(
    ep: Episode,
    include_ongoing_as_elapsed: bool = False,
    today: Optional[date] = None,
    end: Optional[date] = None,
) -> Optional[int]:
    """
    Stay in days for one episode, or None when it must not be counted.

    Explicit lengthOfStayDays wins; otherwise discharge - admission. Open
    episodes count only with include_ongoing_as_elapsed, as days elapsed up
    to today (or to end, if earlier). Negative stays are bad data -> None.
    """
    if ep.admissionDate is None:
        return None

    if ep.lengthOfStayDays is not None:
        stay = ep.lengthOfStayDays
    elif ep.dischargeDate is not None:
        stay = days_between(ep.admissionDate, ep.dischargeDate)
    elif include_ongoing_as_elapsed:
        until = today or date.today()
        if end is not None and end < until:
            until = end
        stay = days_between(ep.admissionDate, until)
    else:
        return None

    return stay if stay >= 0 else None


def _in_range(ep: Episode, start: Optional[date], end: Optional[date]) -> bool:
    """Discharged episodes are ranged by dischargeDate, open ones by admission."""
    if start is None and end is None:
        return True
    if ep.dischargeDate is None:
        return end is None or ep.admissionDate <= end
    if start is not None and ep.dischargeDate < start:
        return False
    if end is not None and ep.dischargeDate > end:
        return False
    return True


def average_stay(
    episodes: Iterable[Episode],
    include_ongoing_as_elapsed: bool = False,
    today: Optional[date] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> float:
    """Mean stay in days over the included episodes; 0.0 when none qualify."""
    stays: List[int] = []
    for ep in episodes:
        if ep.admissionDate is None:
            continue
        if not _in_range(ep, start, end):
            continue
        stay = resolve_stay(ep, include_ongoing_as_elapsed, today, end)
        if stay is not None:
            stays.append(stay)

    if not stays:
        return 0.0
    return sum(stays) / len(stays)


def stay_distribution(
    episodes: Iterable[Episode],
    include_ongoing_as_elapsed: bool = False,
    today: Optional[date] = None,
) -> List[Dict]:
    """Episode counts per stay band as {name, value, percentage}."""
    counts = {label: 0 for label, _lo, _hi in STAY_BANDS}
    total = 0
    for ep in episodes:
        stay = resolve_stay(ep, include_ongoing_as_elapsed, today)
        if stay is None:
            continue
        total += 1
        for label, lo, hi in STAY_BANDS:
            if stay >= lo and (hi is None or stay <= hi):
                counts[label] += 1
                break

    return [
        {
            "name": f"{label} dias",
            "value": counts[label],
            "percentage": round(counts[label] / total * 100, 1) if total else 0.0,
        }
        for label, _lo, _hi in STAY_BANDS
    ]
