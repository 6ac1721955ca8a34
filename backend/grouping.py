# Patient identity grouping - episodes to per-patient chronological series
from __future__ import annotations

from collections import defaultdict
from typing import DefaultDict, Dict, Iterable, List

from models import Episode, PatientSeries


def group_by_patient(
    episodes: Iterable[Episode],
    include_unknown: bool = False,
) -> List[PatientSeries]:
    """
    Bucket episodes by patientKey into PatientSeries.

    - Series come out in first-seen order
    - Episodes inside a series are stable-sorted by admissionDate, so ties
      keep their input order
    - Episodes without an admissionDate cannot be placed and are left out
    - Unknown-identity groups (name fallback) are dropped unless
      include_unknown=True
    """
    by_key: DefaultDict[str, List[Episode]] = defaultdict(list)
    known: Dict[str, bool] = {}

    for ep in episodes:
        if ep.admissionDate is None:
            continue
        if not ep.identityKnown and not include_unknown:
            continue
        by_key[ep.patientKey].append(ep)
        known[ep.patientKey] = ep.identityKnown

    return [
        PatientSeries(
            patientKey=key,
            identityKnown=known[key],
            episodes=sorted(eps, key=lambda e: e.admissionDate),
        )
        for key, eps in by_key.items()
    ]


def occupancy_key(ep: Episode) -> str:
    """Census dedup token: patientKey if known, else the per-record episodeId."""
    if ep.identityKnown:
        return ep.patientKey
    return f"episode:{ep.episodeId}"
