# Business logic - hospital sites, episode snapshots and the indicator report
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence

from discharges import weekday_distribution, weekend_discharge_rate
from formatting import format_decimal_br, format_percent_br
from length_of_stay import average_stay, stay_distribution
from models import (
    DataQualityReport,
    Episode,
    Hospital,
    HospitalSite,
    dataset_versions,
    episodes_by_site,
    hospitals,
    quality_by_site,
)
from normalizer import normalize_records
from occupancy import average_occupancy, current_occupancy, monthly_occupancy, reporting_window
from readmission import DEFAULT_WINDOWS, classify_readmissions, readmitted_patients

logger = logging.getLogger(__name__)


def get_hospital(hospital_id: str) -> Optional[Hospital]:
    """Get hospital site by ID"""
    return hospitals.get(hospital_id)


def get_episodes(hospital_id: str) -> List[Episode]:
    return episodes_by_site.get(hospital_id, [])


def update_hospital_settings(
    hospital_id: str,
    capacity: Optional[int] = None,
    floor_date: Optional[date] = None,
) -> Optional[Hospital]:
    """Update capacity and/or reporting floor. Capacity is clamped at 0."""
    hospital = hospitals.get(hospital_id)
    if hospital:
        if capacity is not None:
            hospital.capacity = max(0, capacity)
        if floor_date is not None:
            hospital.floorDate = floor_date
    return hospital


def load_episodes(hospital_id: str, raws: Iterable[Dict[str, Any]]) -> Optional[Dict]:
    """
    Replace a site's snapshot with freshly fetched rows.
    Returns the load summary, or None for an unknown site.
    """
    if hospital_id not in hospitals:
        return None
    site = HospitalSite(hospital_id)
    episodes, quality = normalize_records(raws, site)

    episodes_by_site[hospital_id] = episodes
    quality_by_site[hospital_id] = quality
    dataset_versions[hospital_id] = dataset_versions.get(hospital_id, 0) + 1

    logger.info(f"Loaded {len(episodes)} episode(s) for site {hospital_id} "
                f"(dataset version {dataset_versions[hospital_id]})")
    return {
        "hospitalId": hospital_id,
        "episodeCount": len(episodes),
        "datasetVersion": dataset_versions[hospital_id],
        "dataQuality": quality.to_dict(),
    }


def readmission_summary(
    hospital_id: str,
    windows: Sequence[int] = DEFAULT_WINDOWS,
) -> Dict:
    """Readmission counts and rates for a site."""
    if hospital_id not in hospitals:
        return {"error": "Hospital not found"}
    result = classify_readmissions(get_episodes(hospital_id), windows)
    summary = result.to_dict()
    summary["hospitalId"] = hospital_id
    summary["formatted"] = {str(w): format_percent_br(result.rate(w)) for w in result.windows}
    return summary


def readmitted_patient_list(hospital_id: str, interval: Optional[str] = None) -> Dict:
    if hospital_id not in hospitals:
        return {"error": "Hospital not found"}
    patients = readmitted_patients(get_episodes(hospital_id), interval)
    return {"hospitalId": hospital_id, "totalPatients": len(patients), "patients": patients}


def occupancy_summary(hospital_id: str, today: Optional[date] = None) -> Dict:
    """Period occupancy (month of months) plus the monthly series for charts."""
    hospital = get_hospital(hospital_id)
    if not hospital:
        return {"error": "Hospital not found"}

    episodes = get_episodes(hospital_id)
    window = reporting_window(episodes, hospital.floorDate, today)
    if window is None or window[0] > window[1]:
        monthly: List[Dict] = []
        rate = 0.0
    else:
        monthly = monthly_occupancy(episodes, hospital.capacity, window[0], window[1])
        rate = average_occupancy(episodes, hospital.capacity, window[0], window[1])

    return {
        "hospitalId": hospital_id,
        "capacity": hospital.capacity,
        "periodStart": window[0].isoformat() if window else None,
        "periodEnd": window[1].isoformat() if window else None,
        "occupancyRatePct": rate,
        "formatted": format_percent_br(rate),
        "monthly": monthly,
        "currentOccupancy": current_occupancy(episodes),
    }


def build_indicator_report(
    hospital_id: str,
    include_ongoing_as_elapsed: bool = False,
    today: Optional[date] = None,
) -> Dict:
    """
    All indicators for a site, derived fresh from its current snapshot.
    """
    hospital = get_hospital(hospital_id)
    if not hospital:
        return {"error": "Hospital not found"}

    episodes = get_episodes(hospital_id)
    quality = quality_by_site.get(hospital_id, DataQualityReport())

    avg_stay = average_stay(episodes, include_ongoing_as_elapsed, today)
    readmissions = classify_readmissions(episodes, DEFAULT_WINDOWS)
    occupancy = occupancy_summary(hospital_id, today)
    weekend_rate = weekend_discharge_rate(episodes)

    quality = quality.merge(DataQualityReport(negativeGaps=readmissions.negativeGaps))

    return {
        "hospitalId": hospital.hospitalId,
        "hospitalName": hospital.name,
        "datasetVersion": dataset_versions.get(hospital_id, 0),
        "totalEpisodes": len(episodes),
        "totalPatients": len({ep.patientKey for ep in episodes}),
        "averageStayDays": avg_stay,
        "includeOngoingAsElapsed": include_ongoing_as_elapsed,
        "eligibleDischarges": readmissions.eligibleDischarges,
        "readmissionRate7": readmissions.rate(7),
        "readmissionRate15": readmissions.rate(15),
        "readmissionRate30": readmissions.rate(30),
        "readmissionRateOver30": readmissions.rate_beyond(),
        "occupancyRatePct": occupancy["occupancyRatePct"],
        "occupancyPeriod": {"start": occupancy["periodStart"], "end": occupancy["periodEnd"]},
        "monthlyOccupancy": occupancy["monthly"],
        "currentOccupancy": occupancy["currentOccupancy"],
        "totalCapacity": hospital.capacity,
        "weekdayDistribution": weekday_distribution(episodes),
        "weekendDischargeRate": weekend_rate,
        "stayDistribution": stay_distribution(episodes, include_ongoing_as_elapsed, today),
        "dataQuality": quality.to_dict(),
        "formatted": {
            "averageStayDays": f"{format_decimal_br(avg_stay)} dias",
            "readmissionRate7": format_percent_br(readmissions.rate(7)),
            "readmissionRate15": format_percent_br(readmissions.rate(15)),
            "readmissionRate30": format_percent_br(readmissions.rate(30)),
            "readmissionRateOver30": format_percent_br(readmissions.rate_beyond()),
            "occupancyRatePct": format_percent_br(occupancy["occupancyRatePct"]),
            "weekendDischargeRate": format_percent_br(weekend_rate),
        },
        # Response-time indicators have no measured source; never filled with simulated values.
        "placeholders": {"responseTime60min": None, "responseTime120min": None},
    }
