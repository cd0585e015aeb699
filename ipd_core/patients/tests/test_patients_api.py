# ipd_core/patients/tests/test_patients_api.py
import pytest

from ipd_core.audit.selectors import list_audit_events
from ipd_core.patients.models import Patient

pytestmark = pytest.mark.django_db


def test_register_and_search_patient(api_client):
    res = api_client.post(
        "/api/v1/patients/",
        {"uhid": "UHID-100", "full_name": "Asha Verma", "phone": "9876543210"},
        format="json",
    )
    assert res.status_code == 201, res.data
    assert res.data["uhid"] == "UHID-100"

    res = api_client.get("/api/v1/patients/", {"q": "asha"})
    assert res.status_code == 200
    assert [p["uhid"] for p in res.data] == ["UHID-100"]

    event = list_audit_events(event_code="patient.registered").get()
    assert event.actor == "nurse1@example.com"
    assert event.metadata == {"uhid": "UHID-100"}


def test_duplicate_uhid_is_rejected(api_client, patient):
    res = api_client.post(
        "/api/v1/patients/",
        {"uhid": patient.uhid, "full_name": "Someone Else"},
        format="json",
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "validation_error"
    assert res.json()["error"]["message"] == "UHID already exists."
    assert Patient.objects.count() == 1


def test_retrieve_by_uhid(api_client, patient):
    res = api_client.get(f"/api/v1/patients/{patient.uhid}/")
    assert res.status_code == 200
    assert res.data["full_name"] == patient.full_name

    res = api_client.get("/api/v1/patients/UHID-NOPE/")
    assert res.status_code == 404
