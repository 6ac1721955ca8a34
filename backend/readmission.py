# Readmission classification - inter-episode gaps against day windows
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from grouping import group_by_patient
from models import Episode, PatientSeries
from normalizer import days_between

logger = logging.getLogger(__name__)

DEFAULT_WINDOWS: Tuple[int, ...] = (7, 15, 30)

INTERVAL_FILTERS = ("7", "15", "30", "30+")


@dataclass
class ReadmissionResult:
    """Counts behind the readmission rates. One denominator for every window."""
    windows: Tuple[int, ...]
    eligibleDischarges: int = 0
    readmissions: Dict[int, int] = field(default_factory=dict)
    beyondLongestWindow: int = 0
    negativeGaps: int = 0
    dischargeBeforeAdmission: int = 0

    def rate(self, window: int) -> float:
        """readmissions[window] / eligibleDischarges * 100, 0.0 without eligible discharges."""
        if window not in self.readmissions:
            raise KeyError(f"Window {window} was not classified (windows: {list(self.windows)})")
        if self.eligibleDischarges == 0:
            return 0.0
        return self.readmissions[window] / self.eligibleDischarges * 100

    def rate_beyond(self) -> float:
        """Share of eligible discharges readmitted after the longest window."""
        if self.eligibleDischarges == 0:
            return 0.0
        return self.beyondLongestWindow / self.eligibleDischarges * 100

    def to_dict(self) -> Dict:
        longest = max(self.windows)
        return {
            "eligibleDischarges": self.eligibleDischarges,
            "readmissions": {str(w): self.readmissions[w] for w in self.windows},
            "rates": {str(w): round(self.rate(w), 1) for w in self.windows},
            f"over{longest}": self.beyondLongestWindow,
            f"rateOver{longest}": round(self.rate_beyond(), 1),
            "negativeGaps": self.negativeGaps,
            "dischargeBeforeAdmission": self.dischargeBeforeAdmission,
        }


def _validate_windows(windows: Sequence[int]) -> Tuple[int, ...]:
    if not windows:
        raise ValueError("At least one readmission window is required")
    if any(w < 0 for w in windows):
        raise ValueError(f"Readmission windows must be non-negative, got {list(windows)}")
    return tuple(sorted(set(int(w) for w in windows)))


def series_gaps(series: PatientSeries) -> Tuple[List[int], int, int]:
    """
    Gaps in days between each discharge and the next admission in a series.

    Returns (gaps, negative_gaps, discharge_before_admission). Pairs whose
    first episode is still open are skipped; pairs with a negative gap or a
    discharge that precedes its own admission are excluded and only counted.
    """
    gaps: List[int] = []
    negative = 0
    backwards = 0
    eps = series.episodes
    for current, following in zip(eps, eps[1:]):
        if current.is_open:
            continue
        if current.dischargeDate < current.admissionDate:
            backwards += 1
            continue
        gap = days_between(current.dischargeDate, following.admissionDate)
        if gap < 0:
            negative += 1
            continue
        gaps.append(gap)
    return gaps, negative, backwards


def classify_readmissions(
    episodes: Iterable[Episode],
    windows: Sequence[int] = DEFAULT_WINDOWS,
) -> ReadmissionResult:
    """
    Classify every eligible discharge against each window.

    Only known-identity series are used. A discharge is eligible when the
    same patient has a later admission to compare against, so the last
    discharge of each series never enters the denominator.
    """
    ordered = _validate_windows(windows)
    result = ReadmissionResult(windows=ordered, readmissions={w: 0 for w in ordered})
    longest = ordered[-1]

    for series in group_by_patient(episodes):
        if len(series.episodes) < 2:
            continue
        gaps, negative, backwards = series_gaps(series)
        result.negativeGaps += negative
        result.dischargeBeforeAdmission += backwards
        for gap in gaps:
            result.eligibleDischarges += 1
            for w in ordered:
                if gap <= w:
                    result.readmissions[w] += 1
            if gap > longest:
                result.beyondLongestWindow += 1

    if result.negativeGaps or result.dischargeBeforeAdmission:
        logger.warning(
            f"Readmission: excluded {result.negativeGaps} overlapping pair(s) and "
            f"{result.dischargeBeforeAdmission} discharge(s) dated before admission"
        )
    return result


def readmission_rate(episodes: Iterable[Episode], days: int) -> float:
    """Readmission rate (%) for a single window."""
    return classify_readmissions(episodes, (days,)).rate(days)


def _matches_interval(average_interval: int, interval: Optional[str]) -> bool:
    if interval is None or interval == "all":
        return True
    if interval == "30+":
        return average_interval > 30
    return average_interval <= int(interval)


def readmitted_patients(
    episodes: Iterable[Episode],
    interval: Optional[str] = None,
) -> List[Dict]:
    """
    Patients with more than one admission, most admissions first.

    averageInterval is the mean of the patient's valid gaps rounded half up
    (0 when no gap could be measured). interval filters on it: "7", "15",
    "30" mean at most that many days, "30+" means more than 30.
    """
    if interval not in (None, "all") and interval not in INTERVAL_FILTERS:
        raise ValueError(f"Unknown interval filter {interval!r}, expected one of {INTERVAL_FILTERS}")

    patients: List[Dict] = []
    for series in group_by_patient(episodes):
        if len(series.episodes) < 2:
            continue
        gaps, _negative, _backwards = series_gaps(series)
        average_interval = int(sum(gaps) / len(gaps) + 0.5) if gaps else 0
        if not _matches_interval(average_interval, interval):
            continue
        patients.append({
            "patientKey": series.patientKey,
            "name": series.name,
            "totalAdmissions": len(series.episodes),
            "averageInterval": average_interval,
            "admissions": [
                {
                    "episodeId": ep.episodeId,
                    "admissionDate": ep.admissionDate.isoformat(),
                    "dischargeDate": ep.dischargeDate.isoformat() if ep.dischargeDate else None,
                }
                for ep in series.episodes
            ],
        })

    patients.sort(key=lambda p: p["totalAdmissions"], reverse=True)
    return patients
