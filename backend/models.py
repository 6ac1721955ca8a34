# In-memory data models - hospitalization episodes and hospital sites
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, List, Optional
import re

# Prefix for keys that do not come from a health-card number (CNS).
# No real CNS contains ":" so sentinel keys never collide with known ones.
UNKNOWN_IDENTITY = "?:"


class HospitalSite(str, Enum):
    A = "A"
    B = "B"


@dataclass
class Hospital:
    """Hospital site configuration"""
    hospitalId: str  # "A" or "B"
    name: str
    capacity: int  # beds
    floorDate: date  # reporting never starts before this day


@dataclass(frozen=True)
class Episode:
    """One hospitalization, from admission through discharge (or still open)"""
    episodeId: str
    patientKey: str
    identityKnown: bool
    hospitalSite: HospitalSite
    admissionDate: Optional[date]  # None only when the raw value was malformed
    dischargeDate: Optional[date] = None  # None = still admitted
    lengthOfStayDays: Optional[int] = None
    weekdayOfDischarge: Optional[int] = None  # 1 = Monday .. 7 = Sunday
    name: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.dischargeDate is None


@dataclass
class PatientSeries:
    """All episodes of one patient, ascending by admissionDate"""
    patientKey: str
    identityKnown: bool
    episodes: List[Episode] = field(default_factory=list)

    @property
    def name(self) -> Optional[str]:
        for ep in self.episodes:
            if ep.name:
                return ep.name
        return None


@dataclass
class DataQualityReport:
    """Counts of records that were kept but could not feed every calculation"""
    malformedDates: int = 0
    unknownIdentity: int = 0
    dischargeBeforeAdmission: int = 0
    negativeGaps: int = 0

    def merge(self, other: "DataQualityReport") -> "DataQualityReport":
        return DataQualityReport(
            malformedDates=self.malformedDates + other.malformedDates,
            unknownIdentity=self.unknownIdentity + other.unknownIdentity,
            dischargeBeforeAdmission=self.dischargeBeforeAdmission + other.dischargeBeforeAdmission,
            negativeGaps=self.negativeGaps + other.negativeGaps,
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "malformedDates": self.malformedDates,
            "unknownIdentity": self.unknownIdentity,
            "dischargeBeforeAdmission": self.dischargeBeforeAdmission,
            "negativeGaps": self.negativeGaps,
        }


# In-memory storage, replaced wholesale on every load
hospitals: Dict[str, Hospital] = {}
episodes_by_site: Dict[str, List[Episode]] = {}
quality_by_site: Dict[str, DataQualityReport] = {}
dataset_versions: Dict[str, int] = {}


def normalize_name(name: str) -> str:
    """Normalize name: trim, lowercase, collapse multiple spaces into one"""
    normalized = name.strip().lower()
    normalized = re.sub(r'\s+', ' ', normalized)
    return normalized
