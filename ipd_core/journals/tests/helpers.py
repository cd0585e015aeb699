# ipd_core/journals/tests/helpers.py
from __future__ import annotations


def vitals(bp="120/80", **extra):
    return {"blood_pressure": bp, "date_time": "2024-05-01T08:00:00Z", **extra}


def drug(name="Paracetamol", dosage="500mg", **extra):
    return {"drug_name": name, "dosage": dosage, "frequency": "TDS", "date_time": "2024-05-01T08:00:00Z", **extra}


def journal_url(admission_id, category, suffix=""):
    return f"/api/v1/admissions/{admission_id}/journals/{category}/{suffix}"
