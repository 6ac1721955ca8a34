# Seed data - hospital sites and a demo episode snapshot per site
import os
from datetime import date

from logic import load_episodes
from models import Hospital, dataset_versions, episodes_by_site, hospitals, quality_by_site
from normalizer import parse_local_date

# Defaults; SITE_<ID>_CAPACITY / SITE_<ID>_FLOOR_DATE override them
SITE_DEFAULTS = {
    "A": {"name": "Hospital Planalto", "capacity": 16, "floorDate": date(2024, 8, 1)},
    "B": {"name": "Hospital Tiradentes", "capacity": 10, "floorDate": date(2025, 1, 1)},
}

DEMO_EPISODES = {
    "A": [
        # Patient readmitted 5 days after discharge, then again after 40 days
        {"nome": "Ana Souza", "cns": "700000000000001", "data_admissao": "2024-08-03",
         "data_alta": "2024-08-17", "dias_internacao": 14, "dia_semana_alta": 6},
        {"nome": "Ana Souza", "cns": "700000000000001", "data_admissao": "2024-08-22",
         "data_alta": "2024-09-05", "dias_internacao": 14, "dia_semana_alta": 4},
        {"nome": "Ana Souza", "cns": "700000000000001", "data_admissao": "2024-10-15",
         "data_alta": "2024-10-29", "dias_internacao": 14, "dia_semana_alta": 2},
        # Readmitted after 12 days
        {"nome": "Bruno Lima", "cns": "700000000000002", "data_admissao": "2024-09-01",
         "data_alta": "2024-09-20", "dias_internacao": 19, "dia_semana_alta": 5},
        {"nome": "Bruno Lima", "cns": "700000000000002", "data_admissao": "2024-10-02",
         "data_alta": "2024-10-14", "dias_internacao": 12, "dia_semana_alta": 1},
        # Single long stay
        {"nome": "Carla Mendes", "cns": "700000000000003", "data_admissao": "2024-11-04",
         "data_alta": "2024-12-09", "dias_internacao": 35, "dia_semana_alta": 1},
        # No CNS: counted in tallies, kept out of readmission analysis
        {"nome": "Paciente Sem Cartao", "cns": None, "data_admissao": "2024-12-01",
         "data_alta": "2024-12-11", "dias_internacao": 10, "dia_semana_alta": 3},
        # Still admitted
        {"nome": "Diego Alves", "cns": "700000000000004", "data_admissao": "2025-01-10",
         "data_alta": None, "dias_internacao": None, "dia_semana_alta": None},
    ],
    "B": [
        {"nome": "Elisa Rocha", "cns": "800000000000001", "data_admissao": "2025-01-06",
         "data_alta": "2025-01-16", "dias_internacao": 10, "dia_semana_alta": 4},
        {"nome": "Elisa Rocha", "cns": "800000000000001", "data_admissao": "2025-02-20",
         "data_alta": "2025-03-03", "dias_internacao": 11, "dia_semana_alta": 1},
        {"nome": "Fabio Nunes", "cns": "800000000000002", "data_admissao": "2025-02-01",
         "data_alta": None, "dias_internacao": None, "dia_semana_alta": None},
    ],
}


def _env_int(key: str, default: int) -> int:
    try:
        return int(os.environ.get(key, default))
    except (TypeError, ValueError):
        return default


def _env_date(key: str, default: date) -> date:
    return parse_local_date(os.environ.get(key)) or default


def seed_hospitals():
    """Create the two sites with capacity and reporting floor from env or defaults"""
    hospitals.clear()
    for hospital_id, defaults in SITE_DEFAULTS.items():
        hospitals[hospital_id] = Hospital(
            hospitalId=hospital_id,
            name=defaults["name"],
            capacity=_env_int(f"SITE_{hospital_id}_CAPACITY", defaults["capacity"]),
            floorDate=_env_date(f"SITE_{hospital_id}_FLOOR_DATE", defaults["floorDate"]),
        )


def seed_data():
    """Initialize hospital sites and demo episode snapshots"""
    episodes_by_site.clear()
    quality_by_site.clear()
    dataset_versions.clear()
    seed_hospitals()

    for hospital_id, rows in DEMO_EPISODES.items():
        load_episodes(hospital_id, rows)

    print("Seed data initialized:")
    for hospital in hospitals.values():
        print(f"  - {hospital.hospitalId}: {hospital.name}, capacity={hospital.capacity}, "
              f"floorDate={hospital.floorDate.isoformat()}, "
              f"episodes={len(episodes_by_site.get(hospital.hospitalId, []))}")

if __name__ == "__main__":
    seed_data()
