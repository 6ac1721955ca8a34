# Record normalization - raw rows to immutable Episodes
from __future__ import annotations

import logging
import math
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from models import (
    UNKNOWN_IDENTITY,
    DataQualityReport,
    Episode,
    HospitalSite,
    normalize_name,
)

logger = logging.getLogger(__name__)

Number = Union[int, float, str, None]


def parse_local_date(value: Any) -> Optional[date]:
    """
    Parse a YYYY-MM-DD value into a calendar date.

    The fields are split and passed straight to date(), never through a
    timestamp, so there is no UTC shift around midnight. A trailing time
    part ("2024-01-05T00:00:00") is ignored. Returns None for None, "" and
    anything that does not split into a valid year/month/day.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    for sep in ("T", " "):
        if sep in text:
            text = text.split(sep, 1)[0]

    parts = text.split("-")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        return None
    try:
        return date(int(parts[0]), int(parts[1]), int(parts[2]))
    except ValueError:
        return None


def days_between(start: date, end: date) -> int:
    """Whole calendar days from start to end (negative if end is earlier)."""
    return (end - start).days


def _safe_number(value: Number) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _safe_int(value: Number) -> Optional[int]:
    num = _safe_number(value)
    if num is None or not math.isfinite(num):  # NaN, inf
        return None
    return int(num)


def clean_cns(cns: Any) -> Optional[str]:
    """Trimmed health-card number, or None when absent/blank."""
    if cns is None:
        return None
    if isinstance(cns, float) and cns.is_integer():
        cns = int(cns)
    text = str(cns).strip()
    return text or None


def identity_for(cns: Any, name: Optional[str], token: str) -> Tuple[str, bool]:
    """
    Canonical identity policy: (patientKey, identityKnown).

    CNS when present; otherwise the normalized name behind the unknown-identity
    sentinel; otherwise a per-record token behind the same sentinel.
    """
    card = clean_cns(cns)
    if card:
        return card, True
    if name and name.strip():
        return f"{UNKNOWN_IDENTITY}{normalize_name(name)}", False
    return f"{UNKNOWN_IDENTITY}#{token}", False


def normalize_record(raw: Dict[str, Any], site: HospitalSite, index: int) -> Episode:
    """Map one input row (nome, cns, data_admissao, data_alta, ...) onto an Episode"""
    raw_id = raw.get("id")
    episode_id = f"{raw_id}#{index}" if raw_id is not None else f"{site.value}-{index}"
    name = raw.get("nome")
    if name is not None:
        name = str(name).strip() or None
    patient_key, known = identity_for(raw.get("cns"), name, episode_id)

    weekday = _safe_int(raw.get("dia_semana_alta"))
    if weekday is not None and not 1 <= weekday <= 7:
        weekday = None

    return Episode(
        episodeId=episode_id,
        patientKey=patient_key,
        identityKnown=known,
        hospitalSite=site,
        admissionDate=parse_local_date(raw.get("data_admissao")),
        dischargeDate=parse_local_date(raw.get("data_alta")),
        lengthOfStayDays=_safe_int(raw.get("dias_internacao")),
        weekdayOfDischarge=weekday,
        name=name,
    )


def _date_is_malformed(raw_value: Any, parsed: Optional[date]) -> bool:
    return raw_value not in (None, "") and parsed is None


def normalize_records(
    raws: Iterable[Dict[str, Any]],
    site: HospitalSite,
) -> Tuple[List[Episode], DataQualityReport]:
    """
    Normalize a whole snapshot. Nothing is dropped: malformed dates and
    unknown identities are only counted, and each calculation skips the
    episodes that lack what it needs.
    """
    report = DataQualityReport()
    result: List[Episode] = []

    for index, raw in enumerate(raws):
        ep = normalize_record(raw, site, index)

        if ep.admissionDate is None or _date_is_malformed(raw.get("data_alta"), ep.dischargeDate):
            report.malformedDates += 1
        if not ep.identityKnown:
            report.unknownIdentity += 1
        if ep.admissionDate and ep.dischargeDate and ep.dischargeDate < ep.admissionDate:
            report.dischargeBeforeAdmission += 1

        result.append(ep)

    if report.malformedDates or report.dischargeBeforeAdmission:
        logger.warning(
            f"Site {site.value}: {report.malformedDates} record(s) with malformed dates, "
            f"{report.dischargeBeforeAdmission} discharged before admission"
        )
    return result, report
