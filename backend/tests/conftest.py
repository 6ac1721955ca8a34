"""
Shared pytest fixtures for clinical indicator tests.
"""
from datetime import date

import pytest
from fastapi.testclient import TestClient

from main import app
from models import Episode, HospitalSite
from seed import seed_data


@pytest.fixture
def client():
    """FastAPI TestClient."""
    return TestClient(app)


@pytest.fixture
def seeded_data():
    """Reset sites and demo snapshots: A = 16 beds, B = 10 beds."""
    seed_data()
    yield
    seed_data()


def _as_date(value):
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(value)


@pytest.fixture
def make_episode():
    """
    Factory for normalized episodes.

    make_episode("cns-1", "2024-01-01", "2024-01-05") -> Episode with a known identity.
    Pass known=False for a name-fallback (unknown identity) episode.
    """
    counter = {"n": 0}

    def _make(
        patient_key="p1",
        admission="2024-01-01",
        discharge=None,
        los=None,
        weekday=None,
        known=True,
        name=None,
        site=HospitalSite.A,
        episode_id=None,
    ):
        counter["n"] += 1
        return Episode(
            episodeId=episode_id or f"ep{counter['n']}",
            patientKey=patient_key if known else f"?:{patient_key}",
            identityKnown=known,
            hospitalSite=site,
            admissionDate=_as_date(admission),
            dischargeDate=_as_date(discharge),
            lengthOfStayDays=los,
            weekdayOfDischarge=weekday,
            name=name,
        )

    return _make


@pytest.fixture
def raw_row():
    """Factory for input-contract rows (nome, cns, data_admissao, ...)."""

    def _row(nome="Paciente", cns=None, admissao=None, alta=None, dias=None, dia_semana=None):
        return {
            "nome": nome,
            "cns": cns,
            "data_admissao": admissao,
            "data_alta": alta,
            "dias_internacao": dias,
            "dia_semana_alta": dia_semana,
        }

    return _row
