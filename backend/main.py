# Backend main entry point - clinical indicators API
import logging
import os
from datetime import date
from dotenv import load_dotenv
load_dotenv()  # Load .env so DEMO_MODE / SITE_* settings work for local runs
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from typing import Optional, List, Union
from models import hospitals, dataset_versions
from logic import (
    get_hospital,
    get_episodes,
    update_hospital_settings,
    load_episodes,
    build_indicator_report,
    readmission_summary,
    readmitted_patient_list,
    occupancy_summary,
)
from discharges import weekday_distribution, weekend_discharge_rate
from readmission import DEFAULT_WINDOWS
from seed import seed_data

logging.basicConfig(
    level=getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="[%(asctime)s] [%(levelname)s] [%(module)s:%(lineno)d] %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize seed data
seed_data()

app = FastAPI(title="Clinical Indicators API")


def _is_demo_mode() -> bool:
    """True only when DEMO_MODE env var is explicitly 'true' (case-insensitive)."""
    return os.environ.get("DEMO_MODE", "").lower() == "true"

# Configure CORS - local dashboard dev server plus the deployed frontend
_allowed_origins = [
    "http://localhost:5173",
    "http://localhost:8080",
]
_frontend_url = os.environ.get("FRONTEND_URL", "")
if _frontend_url:
    _allowed_origins.append(_frontend_url)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request/Response models
class HospitalResponse(BaseModel):
    hospitalId: str
    name: str
    capacity: int
    floorDate: date
    episodeCount: int
    datasetVersion: int

class HospitalSettingsUpdate(BaseModel):
    capacity: Optional[int] = Field(default=None, ge=0)
    floorDate: Optional[date] = None

class EpisodeRecord(BaseModel):
    # Dates stay strings: malformed values are flagged by the normalizer, not rejected
    id: Optional[Union[int, str]] = None
    nome: Optional[str] = None
    cns: Optional[Union[int, str]] = None
    data_admissao: Optional[str] = None
    data_alta: Optional[str] = None
    dias_internacao: Optional[Union[int, float, str]] = None
    dia_semana_alta: Optional[Union[int, str]] = None

class EpisodeSnapshot(BaseModel):
    episodes: List[EpisodeRecord]


def _hospital_response(hospital_id: str) -> HospitalResponse:
    hospital = get_hospital(hospital_id)
    return HospitalResponse(
        hospitalId=hospital.hospitalId,
        name=hospital.name,
        capacity=hospital.capacity,
        floorDate=hospital.floorDate,
        episodeCount=len(get_episodes(hospital_id)),
        datasetVersion=dataset_versions.get(hospital_id, 0),
    )


def _require_hospital(hospital_id: str):
    if not get_hospital(hospital_id):
        raise HTTPException(status_code=404, detail="Hospital not found")


@app.get("/")
def read_root():
    return {"message": "Clinical Indicators API"}

@app.get("/health")
def health_check():
    return {"status": "healthy"}


@app.get("/hospitals", response_model=List[HospitalResponse])
def get_all_hospitals():
    """Get all hospital sites"""
    return [_hospital_response(hospital_id) for hospital_id in hospitals]

@app.post("/hospitals/{hospital_id}/settings", response_model=HospitalResponse)
def update_hospital_settings_endpoint(hospital_id: str, settings: HospitalSettingsUpdate):
    """Update bed capacity and/or reporting floor date"""
    hospital = update_hospital_settings(hospital_id, settings.capacity, settings.floorDate)
    if not hospital:
        raise HTTPException(status_code=404, detail="Hospital not found")
    return _hospital_response(hospital_id)

@app.put("/hospitals/{hospital_id}/episodes")
def replace_episodes(hospital_id: str, snapshot: EpisodeSnapshot):
    """Replace the site's episode snapshot (wholesale re-fetch from the data source)."""
    summary = load_episodes(hospital_id, [rec.model_dump() for rec in snapshot.episodes])
    if summary is None:
        raise HTTPException(status_code=404, detail="Hospital not found")
    return summary


@app.get("/hospitals/{hospital_id}/indicators")
def get_indicators(
    hospital_id: str,
    includeOngoing: bool = False,
    today: Optional[date] = None,
):
    """Full indicator report: LOS, readmission, occupancy, weekday discharges."""
    result = build_indicator_report(hospital_id, includeOngoing, today)
    if "error" in result:
        raise HTTPException(status_code=404, detail=result["error"])
    return result

@app.get("/hospitals/{hospital_id}/readmissions")
def get_readmissions(hospital_id: str, windows: List[int] = Query(default=list(DEFAULT_WINDOWS))):
    """Readmission counts and rates per day window"""
    _require_hospital(hospital_id)
    try:
        return readmission_summary(hospital_id, windows)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.get("/hospitals/{hospital_id}/readmissions/patients")
def get_readmitted_patients(hospital_id: str, interval: Optional[str] = None):
    """Patients with multiple admissions, optionally filtered by average interval"""
    _require_hospital(hospital_id)
    try:
        return readmitted_patient_list(hospital_id, interval)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.get("/hospitals/{hospital_id}/occupancy")
def get_occupancy(hospital_id: str, today: Optional[date] = None):
    """Period occupancy rate plus monthly series"""
    result = occupancy_summary(hospital_id, today)
    if "error" in result:
        raise HTTPException(status_code=404, detail=result["error"])
    return result

@app.get("/hospitals/{hospital_id}/discharges/weekday")
def get_weekday_discharges(
    hospital_id: str,
    start: Optional[date] = None,
    end: Optional[date] = None,
):
    """Discharge distribution by weekday, optionally within a discharge-date range"""
    _require_hospital(hospital_id)
    episodes = get_episodes(hospital_id)
    return {
        "hospitalId": hospital_id,
        "distribution": weekday_distribution(episodes, start, end),
        "weekendDischargeRate": weekend_discharge_rate(episodes, start, end),
    }


@app.get("/demo/status")
def demo_status():
    """Returns whether demo mode is enabled. Only for frontend visibility gate."""
    return {"demoMode": _is_demo_mode()}


@app.post("/demo/reset")
def demo_reset():
    """
    Reset to the seeded sites and demo snapshots. Only available when DEMO_MODE=true.
    """
    if not _is_demo_mode():
        raise HTTPException(status_code=404, detail="Demo reset not available")
    logger.info("Demo reset requested; reseeding sites and snapshots")
    seed_data()
    return {"status": "ok"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
